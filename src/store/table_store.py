"""Lance-backed versioned table store.

This module persists datasets as Lance tables laid out as
``<warehouse>/<catalog>/<namespace>/<table>.lance``. Every write creates
a new table version; overwrite replaces schema and rows in one commit,
append adds rows to the latest version.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import lance
import pyarrow as pa

from core.constants import DEFAULT_CATALOG_NAME, LANCE_TABLE_SUFFIX
from core.errors import StoreError
from core.pipe_types import Partitioning, StorageConfig, TableStoreConfig
from core.s3_uri import (
    build_lance_storage_options,
    create_s3_client,
    is_s3_uri,
    parse_s3_uri,
    to_s3_uri,
)
from core.types import TablePreview, TableSummary, TableVersion, TableWriteResult
from store.write_mode import ResolvedWrite


class TableStore:
    """Versioned table store over a local or object-store warehouse.

    This class owns table locations and issues the single write of a
    pipeline run. It also serves the list, preview and versions queries.
    """

    def __init__(
        self,
        config: TableStoreConfig,
        storage: StorageConfig,
        default_warehouse: str,
        logger: Any,
        s3_client: Any | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            config: Table store block from the pipe payload.
            storage: Object-storage connection settings.
            default_warehouse: Warehouse used when the payload omits one.
            logger: Structured logger.
            s3_client: Optional preconfigured boto3 client for listings.
        """
        self._warehouse = _normalize_warehouse(config.warehouse or default_warehouse)
        self._catalog = config.catalog or DEFAULT_CATALOG_NAME
        self._storage = storage
        self._storage_options = (
            build_lance_storage_options(storage) if is_s3_uri(self._warehouse) else None
        )
        self._logger = logger
        self._s3_client = s3_client

    @property
    def catalog(self) -> str:
        """Catalog used when a query does not name one."""
        return self._catalog

    def table_uri(self, catalog: str, namespace: str, table_name: str) -> str:
        """Return the storage location of a table."""
        return f"{self._warehouse}/{catalog}/{namespace}/{table_name}{LANCE_TABLE_SUFFIX}"

    def write(
        self,
        table: pa.Table,
        destination: ResolvedWrite,
        partitioning: Partitioning | None = None,
    ) -> TableWriteResult:
        """Write a dataset to its destination table.

        Args:
            table: Dataset to persist.
            destination: Resolved table id and write mode.
            partitioning: Optional partition keys, validated against columns.

        Returns:
            Written table version summary.

        Raises:
            StoreError: If partition keys are unknown or the write fails.
        """
        _validate_partition_keys(table, partitioning)
        table_uri = self.table_uri(
            destination.catalog, destination.namespace, destination.table_name
        )
        self._logger.info(
            "table_write_started",
            table=destination.table_id,
            write_mode=destination.mode.value,
            record_count=table.num_rows,
        )
        try:
            dataset = lance.write_dataset(
                table,
                table_uri,
                mode=destination.mode.value,
                storage_options=self._storage_options,
            )
        except Exception as error:
            self._logger.error(
                "table_write_failed", table=destination.table_id, error=str(error)
            )
            raise StoreError(
                f"Failed to {destination.mode.value} table {destination.table_id} "
                f"at {table_uri}: {error}. Check the warehouse location and schema."
            ) from error
        result = TableWriteResult(
            table_id=destination.table_id,
            mode=destination.mode.value,
            record_count=table.num_rows,
            version=int(dataset.version),
            table_uri=table_uri,
        )
        self._logger.info(
            "table_write_completed",
            table=result.table_id,
            write_mode=result.mode,
            version=result.version,
            partition_keys=list(partitioning.keys) if partitioning else [],
        )
        return result

    def list_tables(self, namespace: str, catalog: str | None = None) -> list[TableSummary]:
        """List tables under one catalog namespace.

        Returns:
            Tables sorted by name; empty when the namespace does not exist.
        """
        namespace_uri = f"{self._warehouse}/{catalog or self._catalog}/{namespace}"
        self._logger.info("tables_listing", location=namespace_uri)
        if is_s3_uri(namespace_uri):
            table_names = self._list_s3_tables(namespace_uri)
        else:
            table_names = self._list_local_tables(Path(namespace_uri))
        return [TableSummary(name=name, namespace=namespace) for name in sorted(table_names)]

    def preview(
        self,
        table_name: str,
        namespace: str,
        limit: int,
        catalog: str | None = None,
    ) -> TablePreview:
        """Read up to ``limit`` rows with stringified values.

        Raises:
            StoreError: If the table is missing or unreadable.
        """
        dataset = self._open(table_name, namespace, catalog)
        try:
            table = dataset.to_table(limit=max(limit, 0))
        except Exception as error:
            raise StoreError(f"Failed to read table '{table_name}': {error}.") from error
        schema = tuple((item.name, str(item.type)) for item in table.schema)
        rows = tuple(
            {name: None if value is None else str(value) for name, value in row.items()}
            for row in table.to_pylist()
        )
        return TablePreview(schema=schema, rows=rows)

    def list_versions(
        self,
        table_name: str,
        namespace: str,
        catalog: str | None = None,
    ) -> list[TableVersion]:
        """Return a table's version history, oldest first."""
        dataset = self._open(table_name, namespace, catalog)
        return [
            TableVersion(version=int(item["version"]), timestamp=item.get("timestamp"))
            for item in dataset.versions()
        ]

    def _open(self, table_name: str, namespace: str, catalog: str | None) -> Any:
        table_id = f"{catalog or self._catalog}.{namespace}.{table_name}"
        table_uri = self.table_uri(catalog or self._catalog, namespace, table_name)
        if not is_s3_uri(table_uri) and not Path(table_uri).exists():
            raise StoreError(
                f"Table {table_id} not found at {table_uri}. Run a pipe that writes it first."
            )
        try:
            return lance.dataset(table_uri, storage_options=self._storage_options)
        except Exception as error:
            raise StoreError(f"Failed to open table {table_id} at {table_uri}: {error}.") from error

    def _list_local_tables(self, namespace_dir: Path) -> list[str]:
        if not namespace_dir.is_dir():
            self._logger.warning("namespace_missing", location=str(namespace_dir))
            return []
        return [
            path.name.removesuffix(LANCE_TABLE_SUFFIX)
            for path in namespace_dir.iterdir()
            if path.is_dir() and path.name.endswith(LANCE_TABLE_SUFFIX)
        ]

    def _list_s3_tables(self, namespace_uri: str) -> list[str]:
        location = parse_s3_uri(namespace_uri, domain="store")
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._storage)
        paginator = self._s3_client.get_paginator("list_objects_v2")
        key_prefix = f"{location.prefix}/"
        names: list[str] = []
        try:
            for page in paginator.paginate(
                Bucket=location.bucket, Prefix=key_prefix, Delimiter="/"
            ):
                for common_prefix in page.get("CommonPrefixes", []):
                    folder = common_prefix["Prefix"][len(key_prefix) :].rstrip("/")
                    if folder.endswith(LANCE_TABLE_SUFFIX):
                        names.append(folder.removesuffix(LANCE_TABLE_SUFFIX))
        except Exception as error:
            raise StoreError(f"Failed to list tables under {namespace_uri}: {error}.") from error
        return names


def _normalize_warehouse(warehouse: str) -> str:
    if is_s3_uri(warehouse):
        return to_s3_uri(warehouse).rstrip("/")
    return str(Path(warehouse).expanduser().resolve())


def _validate_partition_keys(table: pa.Table, partitioning: Partitioning | None) -> None:
    if partitioning is None or not partitioning.enabled:
        return
    unknown_keys = [key for key in partitioning.keys if key not in table.column_names]
    if unknown_keys:
        raise StoreError(
            f"Partition keys not found in dataset columns: {', '.join(unknown_keys)}."
        )
