"""Object-storage URI and connection helpers.

This module centralizes S3 URI parsing and the translation of the pipe's
storage block into client settings for boto3 and Lance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.errors import DependencyError, IngestError, StoreError
from core.pipe_types import StorageConfig

_S3_SCHEMES = ("s3://", "s3a://")


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str


def is_s3_uri(uri: str) -> bool:
    """Return whether a path points at object storage."""
    return uri.startswith(_S3_SCHEMES)


def parse_s3_uri(uri: str, domain: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket/prefix`` (``s3a://`` accepted).
        domain: Error domain string ("ingest" or "store").

    Returns:
        Parsed bucket and prefix pair; the prefix may be empty.

    Raises:
        IngestError: For ingest-domain parse failures.
        StoreError: For store-domain parse failures.
    """
    stripped_uri = uri
    for scheme in _S3_SCHEMES:
        stripped_uri = stripped_uri.removeprefix(scheme)
    bucket, _, prefix = stripped_uri.partition("/")
    if not bucket:
        _raise_uri_error(uri, domain)
    return S3Location(bucket=bucket, prefix=prefix.strip("/"))


def to_s3_uri(uri: str) -> str:
    """Normalize ``s3a://`` URIs to the ``s3://`` scheme."""
    if uri.startswith("s3a://"):
        return "s3://" + uri.removeprefix("s3a://")
    return uri


def build_endpoint_url(storage: StorageConfig) -> str | None:
    """Build the object-store endpoint URL from host, port and SSL flag."""
    if not storage.endpoint:
        return None
    if "://" in storage.endpoint:
        endpoint = storage.endpoint.rstrip("/")
    else:
        scheme = "https" if storage.use_ssl else "http"
        endpoint = f"{scheme}://{storage.endpoint}"
    if storage.port is not None:
        endpoint = f"{endpoint}:{storage.port}"
    return endpoint


def build_lance_storage_options(storage: StorageConfig) -> dict[str, str]:
    """Translate the storage block into Lance object-store options."""
    options: dict[str, str] = {}
    endpoint_url = build_endpoint_url(storage)
    if endpoint_url:
        options["aws_endpoint"] = endpoint_url
        options["aws_virtual_hosted_style_request"] = "false"
        if endpoint_url.startswith("http://"):
            options["allow_http"] = "true"
    if storage.access_key:
        options["aws_access_key_id"] = storage.access_key
    if storage.secret_key:
        options["aws_secret_access_key"] = storage.secret_key
    if storage.region:
        options["aws_region"] = storage.region
    return options


def _raise_uri_error(uri: str, domain: str) -> None:
    """Raise a domain-specific invalid URI error.

    Args:
        uri: Invalid URI value.
        domain: Error domain string.

    Raises:
        IngestError: For ingest domain.
        StoreError: For store domain.
    """
    message = f"Invalid S3 URI '{uri}': expected s3://bucket/prefix. Provide a bucket name."
    if domain == "ingest":
        raise IngestError(message)
    raise StoreError(message)


def create_s3_client(storage: StorageConfig) -> Any:
    """Create a boto3 S3 client from the pipe's storage block.

    Args:
        storage: Endpoint, credentials and SSL settings.

    Returns:
        Boto3 S3 client using path-style addressing.

    Raises:
        DependencyError: If boto3 is missing.
    """
    try:
        import boto3
        from botocore.config import Config
    except ImportError as error:
        raise DependencyError(
            "Object storage support requires boto3, but it is not installed. "
            "Install boto3 to use s3:// sources or warehouses."
        ) from error
    session_kwargs: dict[str, str] = {}
    if storage.region:
        session_kwargs["region_name"] = storage.region
    session = boto3.session.Session(**session_kwargs)
    client_kwargs: dict[str, Any] = {"config": Config(s3={"addressing_style": "path"})}
    endpoint_url = build_endpoint_url(storage)
    if endpoint_url:
        client_kwargs["endpoint_url"] = endpoint_url
        client_kwargs["use_ssl"] = endpoint_url.startswith("https://")
    if storage.access_key:
        client_kwargs["aws_access_key_id"] = storage.access_key
    if storage.secret_key:
        client_kwargs["aws_secret_access_key"] = storage.secret_key
    return session.client("s3", **client_kwargs)
