"""Environment-configured entry points for all bucket operations."""

from .bucket_operations import (
    build_client,
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
    "build_client",
    "check_security",
    "delete_directory",
    "delete_object",
    "download_object",
    "download_prefix",
    "list_bucket_directory",
    "presign_object",
    "upload_object",
]
