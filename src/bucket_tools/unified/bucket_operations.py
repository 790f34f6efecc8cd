"""Bucket operations wired from environment configuration.

Each function loads the store configuration (unless one is passed in), builds
the object store client and runs one operation. These are the entry points
used by the CLI.
"""

import threading
from pathlib import Path
from typing import Optional, Union

from bucket_tools.core import get_logger, settings
from bucket_tools.core.config import StoreSettings, load_store_settings
from bucket_tools.objectstorage.clients import ObjectStoreClient, S3ClientConfig
from bucket_tools.objectstorage.deletion import delete_key, delete_prefix
from bucket_tools.objectstorage.listing import list_directory
from bucket_tools.objectstorage.permissions import SecurityReport, check_bucket_security
from bucket_tools.objectstorage.permissions.s3_access import DEFAULT_PROBE_KEY
from bucket_tools.objectstorage.transfer import DirectoryDownloader, TransferUnit
from bucket_tools.objectstorage.transfer.orchestrator import ProgressCallback
from bucket_tools.schemas import (
    DeleteSummary,
    DirectoryDownloadResult,
    DirectoryListing,
    FilterSpec,
    TransferResult,
    UploadResult,
)

logger = get_logger(__name__)

RootPath = Union[str, Path, None]


def build_client(store: Optional[StoreSettings] = None) -> ObjectStoreClient:
    """Create an object store client from explicit or environment settings.

    Raises:
        ConfigurationError: If required store settings are missing
    """
    store = store or load_store_settings()
    logger.debug("Building object store client", bucket=store.bucket)
    return ObjectStoreClient.from_settings(store)


def build_transfer_unit(
    store: Optional[StoreSettings] = None, download_root: RootPath = None
) -> TransferUnit:
    return TransferUnit(
        build_client(store), download_root=download_root or settings.download_root
    )


def list_bucket_directory(
    prefix: str = "",
    max_keys: int = 1000,
    store: Optional[StoreSettings] = None,
) -> DirectoryListing:
    """List directories and files directly under a prefix (one page)."""
    return list_directory(build_client(store), prefix=prefix, max_keys=max_keys)


def download_object(
    key: str,
    local_path: Optional[str] = None,
    store: Optional[StoreSettings] = None,
    download_root: RootPath = None,
) -> TransferResult:
    """Download one object under the download root."""
    unit = build_transfer_unit(store, download_root)
    return unit.download_one(key, local_path)


def download_prefix(
    prefix: str,
    local_path: Optional[str] = None,
    filter_spec: Optional[FilterSpec] = None,
    workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    store: Optional[StoreSettings] = None,
    download_root: RootPath = None,
) -> DirectoryDownloadResult:
    """Download every matching object under a prefix."""
    downloader = DirectoryDownloader(build_transfer_unit(store, download_root))
    return downloader.download_directory(
        prefix,
        local_path=local_path,
        filter_spec=filter_spec,
        workers=workers,
        progress=progress,
        cancel_event=cancel_event,
    )


def delete_object(key: str, store: Optional[StoreSettings] = None) -> bool:
    """Delete one object."""
    return delete_key(build_client(store), key)


def delete_directory(
    prefix: str, store: Optional[StoreSettings] = None
) -> DeleteSummary:
    """Delete every object under a prefix."""
    return delete_prefix(build_client(store), prefix)


def upload_object(
    source: object,
    key: str,
    content_type: Optional[str] = None,
    size_limit: Optional[int] = None,
    store: Optional[StoreSettings] = None,
) -> UploadResult:
    """Upload a file, string, bytes or stream to a key."""
    unit = TransferUnit(build_client(store))
    return unit.upload_one(
        source, key, content_type=content_type, size_limit=size_limit
    )


def presign_object(
    key: str,
    expires_in: Optional[int] = None,
    method: str = "get",
    store: Optional[StoreSettings] = None,
) -> str:
    """Issue a presigned GET or PUT URL for a key."""
    client = build_client(store)
    return client.presign(
        key, expires_in=expires_in or settings.presign_expiry, method=method
    )


def check_security(
    probe_key: str = DEFAULT_PROBE_KEY, store: Optional[StoreSettings] = None
) -> SecurityReport:
    """Probe the configured bucket for anonymous access."""
    store = store or load_store_settings()
    return check_bucket_security(S3ClientConfig.from_settings(store), probe_key)
