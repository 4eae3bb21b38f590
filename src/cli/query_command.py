"""Table query actions.

This module serves the ``list``, ``preview`` and ``versions`` actions
against the table store and shapes their JSON result objects.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.config import RuntimeSettings
from core.constants import DEFAULT_NAMESPACE, DEFAULT_PREVIEW_LIMIT, SUPPORTED_QUERY_ACTIONS
from core.errors import ConfigError
from core.pipe_types import PipeConfig
from store.table_store import TableStore


def add_query_arguments(parser: argparse.ArgumentParser) -> None:
    """Register query-mode arguments."""
    parser.add_argument(
        "--action",
        choices=SUPPORTED_QUERY_ACTIONS,
        help="Query the table store instead of running the pipe",
    )
    parser.add_argument("--table", help="Table name for preview and versions")
    parser.add_argument("--namespace", default=DEFAULT_NAMESPACE, help="Table namespace")
    parser.add_argument("--catalog", help="Catalog override; defaults to tableStore.catalog")
    parser.add_argument(
        "--limit", type=int, default=DEFAULT_PREVIEW_LIMIT, help="Maximum preview rows"
    )


def run_query_action(
    config: PipeConfig,
    settings: RuntimeSettings,
    logger: Any,
    args: argparse.Namespace,
) -> dict[str, object]:
    """Execute one query action and return its JSON result object.

    Raises:
        ConfigError: If a table-scoped action has no ``--table``.
        StoreError: If the table store query fails.
    """
    store = TableStore(config.table_store, config.storage, settings.warehouse, logger)
    if args.action == "list":
        tables = store.list_tables(args.namespace, args.catalog)
        logger.info("tables_found", table_count=len(tables))
        return {
            "tables": [{"name": table.name, "namespace": table.namespace} for table in tables]
        }
    if not args.table:
        raise ConfigError(f"Action '{args.action}' requires --table.")
    if args.action == "preview":
        logger.info("table_preview", table=args.table, limit=args.limit)
        return store.preview(args.table, args.namespace, args.limit, args.catalog).to_payload()
    versions = store.list_versions(args.table, args.namespace, args.catalog)
    return {
        "versions": [
            {
                "version": version.version,
                "timestamp": version.timestamp.isoformat() if version.timestamp else None,
            }
            for version in versions
        ]
    }
