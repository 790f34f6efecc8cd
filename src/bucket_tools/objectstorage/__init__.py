"""Object storage operations for S3-compatible services."""

from .clients import ObjectStoreClient, S3ClientConfig, S3ClientManager
from .content_types import classify
from .deletion import delete_key, delete_prefix
from .listing import count_matching, iter_matching_objects, iter_pages, list_directory
from .permissions import SecurityReport, check_bucket_security
from .transfer import DirectoryDownloader, TransferUnit

__all__ = [
    "DirectoryDownloader",
    "ObjectStoreClient",
    "S3ClientConfig",
    "S3ClientManager",
    "SecurityReport",
    "TransferUnit",
    "check_bucket_security",
    "classify",
    "count_matching",
    "delete_key",
    "delete_prefix",
    "iter_matching_objects",
    "iter_pages",
    "list_directory",
]
