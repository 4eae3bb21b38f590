"""Source file resolution for ingestion.

This module expands a glob into concrete files on local disk or under an
S3 prefix, and fetches their bytes for the dataframe engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.errors import IngestError
from core.pipe_types import StorageConfig
from core.s3_uri import S3Location, create_s3_client, is_s3_uri, parse_s3_uri
from ingest.glob_pattern import match_file_name, split_glob_pattern

# Hadoop-style readers treat these as hidden or metadata files.
_HIDDEN_PREFIXES = (".", "_")


class SourceFiles:
    """Glob expansion and byte access over local paths and S3 prefixes."""

    def __init__(self, storage: StorageConfig, s3_client: Any | None = None) -> None:
        self._storage = storage
        self._s3_client = s3_client

    def list_files(self, pattern: str) -> list[str]:
        """List files matching a one-level glob.

        Args:
            pattern: Glob such as ``/data/in/*.{csv,tsv}``.

        Returns:
            Sorted file paths or ``s3://`` URIs.

        Raises:
            IngestError: If the source directory cannot be listed.
        """
        directory, name_glob = split_glob_pattern(pattern)
        if is_s3_uri(directory):
            return self._list_s3_files(parse_s3_uri(directory, domain="ingest"), name_glob)
        return _list_local_files(Path(directory).expanduser(), name_glob)

    def read_bytes(self, file_uri: str) -> bytes:
        """Read the full contents of one listed file.

        Raises:
            IngestError: If the file cannot be read.
        """
        if is_s3_uri(file_uri):
            location = parse_s3_uri(file_uri, domain="ingest")
            try:
                response = self._client().get_object(Bucket=location.bucket, Key=location.prefix)
                return response["Body"].read()
            except Exception as error:
                raise IngestError(
                    f"Failed to download source object {file_uri}: {error}. "
                    "Check storage credentials and object permissions."
                ) from error
        try:
            return Path(file_uri).read_bytes()
        except OSError as error:
            raise IngestError(
                f"Failed to read source file {file_uri}: {error}. Check file permissions."
            ) from error

    def _list_s3_files(self, location: S3Location, name_glob: str) -> list[str]:
        key_prefix = f"{location.prefix}/" if location.prefix else ""
        paginator = self._client().get_paginator("list_objects_v2")
        pages = paginator.paginate(Bucket=location.bucket, Prefix=key_prefix, Delimiter="/")
        uris: list[str] = []
        try:
            for page in pages:
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    file_name = key[len(key_prefix) :]
                    if _is_selected(file_name, name_glob):
                        uris.append(f"s3://{location.bucket}/{key}")
        except Exception as error:
            raise IngestError(
                f"Failed to list s3://{location.bucket}/{key_prefix}: {error}. "
                "Check the storage endpoint and credentials."
            ) from error
        return sorted(uris)

    def _client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._storage)
        return self._s3_client


def _list_local_files(directory: Path, name_glob: str) -> list[str]:
    """List local files directly under ``directory`` matching ``name_glob``.

    Raises:
        IngestError: If the directory is missing.
    """
    if not directory.is_dir():
        raise IngestError(
            f"Failed to read source at {directory}: directory does not exist. "
            "Provide an existing source directory."
        )
    return [
        str(file_path)
        for file_path in sorted(directory.iterdir())
        if file_path.is_file() and _is_selected(file_path.name, name_glob)
    ]


def _is_selected(file_name: str, name_glob: str) -> bool:
    """Return whether a listed name is a visible file matching the glob."""
    if not file_name or "/" in file_name or file_name.startswith(_HIDDEN_PREFIXES):
        return False
    return match_file_name(file_name, name_glob)
