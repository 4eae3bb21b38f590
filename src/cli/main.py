"""Datachef CLI entry point.

This module parses the pipe payload argument and either runs the pipe
or answers a table query. Results go to stdout as JSON; structured logs
go to stderr.
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Sequence

from cli.query_command import add_query_arguments, run_query_action
from core.config import RuntimeSettings
from core.errors import ChefError, ConfigError
from core.logging_config import build_logger
from core.pipe_config import load_pipe_config_file, parse_pipe_config
from core.pipe_types import PipeConfig
from ingest.pipeline import run_pipe


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="datachef",
        description="Run a declarative ingestion pipe into a versioned table store",
    )
    payload_group = parser.add_mutually_exclusive_group(required=True)
    payload_group.add_argument("--config", help="Pipe payload as a JSON document")
    payload_group.add_argument("--config-file", help="Path to a JSON or YAML pipe payload")
    add_query_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the datachef CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code, ``0`` on success and ``1`` on failure,
        including argument errors.
    """
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as error:
        if not error.code:
            return 0
        build_logger().error("configuration_error", error="Invalid command-line arguments.")
        return 1
    try:
        settings = RuntimeSettings.from_env()
    except ConfigError as error:
        build_logger().error("configuration_error", error=str(error))
        return 1
    logger = build_logger(settings.log_level)
    try:
        config = _load_config(args)
        if args.action:
            payload = run_query_action(config, settings, logger, args)
        else:
            payload = run_pipe(config, settings, logger).to_payload()
    except ConfigError as error:
        logger.error("configuration_error", error=str(error), error_type=type(error).__name__)
        return 1
    except ChefError as error:
        logger.error("execution_failed", error=str(error), error_type=type(error).__name__)
        return 1
    except Exception as error:
        logger.error("execution_failed", error=str(error), exc_info=True)
        return 1
    print(json.dumps(payload, default=_json_default))
    return 0


def _load_config(args: argparse.Namespace) -> PipeConfig:
    if args.config_file:
        return load_pipe_config_file(args.config_file)
    return parse_pipe_config(args.config)


def _json_default(value: Any) -> str:
    return str(value)
