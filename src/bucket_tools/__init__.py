"""Bulk transfer and housekeeping tools for S3-compatible object storage.

This package wraps a single bucket with listing, single and recursive
download, upload, single and recursive delete, presigned URLs and a bucket
security probe. The heart of it is the prefix download engine: it counts the
matching keys across paginated listings, then downloads them (skipping files
that already exist locally) and reports success, skip and failure counts.

Key Features:
    - Paginated prefix enumeration with filename filters
    - Resumable, concurrent directory downloads
    - Batched prefix deletion
    - Uploads with content type inference and size limits
    - CLI interface

Recommended Usage:
    Use the environment-configured entry points for most operations:

    >>> from bucket_tools import download_prefix, FilterSpec
    >>> result = download_prefix("videos/", filter_spec=FilterSpec(name_postfix=".mp4"))
    >>> result.summary.failed
    0

Advanced Usage:
    Build the components directly for full control:

    >>> from bucket_tools.objectstorage import ObjectStoreClient, TransferUnit
    >>> from bucket_tools.objectstorage import DirectoryDownloader
"""

__version__ = "0.1.0"

from .objectstorage import (
    DirectoryDownloader,
    ObjectStoreClient,
    S3ClientConfig,
    TransferUnit,
    classify,
    delete_prefix,
    iter_matching_objects,
)
from .payload import BytesPayload, FilePayload, SourcePayload, StreamPayload
from .schemas import (
    DeleteSummary,
    DirectoryDownloadResult,
    FilterSpec,
    RunSummary,
    TransferOutcome,
    TransferResult,
    UploadResult,
)

# Environment-configured interface (recommended)
from .unified import (
    check_security,
    delete_directory,
    delete_object,
    download_object,
    download_prefix,
    list_bucket_directory,
    presign_object,
    upload_object,
)

__all__ = [
    # Payloads
    "BytesPayload",
    "FilePayload",
    "SourcePayload",
    "StreamPayload",
    # Results and filters
    "DeleteSummary",
    "DirectoryDownloadResult",
    "FilterSpec",
    "RunSummary",
    "TransferOutcome",
    "TransferResult",
    "UploadResult",
    # Unified interface
    "check_security",
    "delete_directory",
    "delete_object",
    "download_object",
    "download_prefix",
    "list_bucket_directory",
    "presign_object",
    "upload_object",
    # Components
    "DirectoryDownloader",
    "ObjectStoreClient",
    "S3ClientConfig",
    "TransferUnit",
    "classify",
    "delete_prefix",
    "iter_matching_objects",
]
