"""Single-object download and upload.

Downloads are idempotent: an existing destination file is skipped without any
network call, so re-running a bulk download resumes where it stopped.
Uploads always overwrite the object at the key.

Every per-object failure is caught here, logged with the key and cause, and
returned as a FAILED result; nothing is retried.
"""

from pathlib import Path
from typing import Optional, Union

import requests
from pydantic import ValidationError as PydanticValidationError

from bucket_tools.core import get_logger, settings
from bucket_tools.core.exceptions import (
    BucketToolsError,
    LocalIOError,
    StoreError,
    TransportError,
    ValidationError,
)
from bucket_tools.filesystem import DownloadRoot, ensure_directory, write_atomically
from bucket_tools.objectstorage.clients import ObjectStoreClient
from bucket_tools.objectstorage.content_types import classify
from bucket_tools.payload import as_payload
from bucket_tools.schemas import (
    DownloadTask,
    TransferOutcome,
    TransferResult,
    UploadResult,
    UploadTask,
)

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError as e:
        raise LocalIOError(f"Cannot access '{path}': {e}") from e


def _first_error(error: PydanticValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    location = ".".join(str(part) for part in details[0]["loc"])
    return f"{location}: {details[0]['msg']}"


class TransferUnit:
    """Transfers one object at a time between the store and the local root."""

    def __init__(
        self,
        client: ObjectStoreClient,
        download_root: Union[str, Path, DownloadRoot, None] = None,
        http_session: Optional[requests.Session] = None,
        presign_expiry: Optional[int] = None,
        request_timeout: Optional[float] = None,
    ):
        """Initialize the transfer unit.

        Args:
            client: Object store client
            download_root: Directory all downloads are written under
            http_session: Session used to fetch presigned URLs
            presign_expiry: Lifetime of presigned GET URLs in seconds
            request_timeout: Per-request HTTP timeout in seconds
        """
        self.client = client
        if not isinstance(download_root, DownloadRoot):
            download_root = DownloadRoot(download_root or settings.download_root)
        self.download_root = download_root
        self.http_session = http_session or requests.Session()
        self.presign_expiry = presign_expiry or settings.presign_expiry
        self.request_timeout = request_timeout or settings.request_timeout

    def download_one(
        self, key: str, relative_path: Optional[str] = None
    ) -> TransferResult:
        """Download one object; ``relative_path`` defaults to the key."""
        try:
            task = DownloadTask(key=key, relative_path=relative_path or key)
        except PydanticValidationError as e:
            error = f"Invalid download request for key '{key}': {_first_error(e)}"
            logger.error("Download failed", key=key, error=error)
            return TransferResult(
                key=key,
                destination=None,
                outcome=TransferOutcome.FAILED,
                error=error,
                error_kind=ValidationError.__name__,
            )
        return self.download(task)

    def download(self, task: DownloadTask) -> TransferResult:
        """Download one object to its destination under the download root."""
        destination: Optional[Path] = None
        try:
            destination = self.download_root.resolve(task.relative_path)

            if _exists(destination):
                logger.debug("Destination exists, skipping", key=task.key)
                return TransferResult(
                    key=task.key,
                    destination=str(destination),
                    outcome=TransferOutcome.SKIPPED,
                )

            ensure_directory(destination.parent)
            url = self.client.presign(task.key, expires_in=self.presign_expiry)
            size = self._fetch(url, destination)

            logger.info(
                "Object downloaded",
                key=task.key,
                destination=str(destination),
                size=size,
            )
            return TransferResult(
                key=task.key,
                destination=str(destination),
                outcome=TransferOutcome.SUCCESS,
            )

        except BucketToolsError as e:
            logger.error(
                "Download failed",
                key=task.key,
                error=str(e),
                error_kind=type(e).__name__,
            )
            return TransferResult(
                key=task.key,
                destination=str(destination) if destination else None,
                outcome=TransferOutcome.FAILED,
                error=str(e),
                error_kind=type(e).__name__,
            )

    def _fetch(self, url: str, destination: Path) -> int:
        """Stream a presigned URL into the destination file.

        Certificate verification is always on.
        """
        try:
            with self.http_session.get(
                url, stream=True, timeout=self.request_timeout, verify=True
            ) as response:
                if response.status_code >= 400:
                    raise StoreError(
                        f"Store returned HTTP {response.status_code}",
                        code=str(response.status_code),
                    )
                return write_atomically(
                    destination, response.iter_content(chunk_size=CHUNK_SIZE)
                )
        except requests.RequestException as e:
            raise TransportError(f"Fetch failed: {e}") from e
        except OSError as e:
            raise LocalIOError(f"Cannot write '{destination}': {e}") from e

    def upload_one(
        self,
        source: object,
        key: str,
        content_type: Optional[str] = None,
        size_limit: Optional[int] = None,
    ) -> UploadResult:
        """Upload a file path, string, bytes or stream to a key."""
        try:
            task = UploadTask(
                payload=as_payload(source),
                key=key,
                content_type=content_type,
                size_limit=size_limit,
            )
        except PydanticValidationError as e:
            error = f"Invalid upload request for key '{key}': {_first_error(e)}"
            logger.error("Upload failed", key=key, error=error)
            return UploadResult(
                key=key,
                outcome=TransferOutcome.FAILED,
                error=error,
                error_kind=ValidationError.__name__,
            )
        return self.upload(task)

    def upload(self, task: UploadTask) -> UploadResult:
        """Upload one payload, overwriting any existing object at the key."""
        try:
            if task.size_limit is not None:
                try:
                    length = task.payload.length()
                except OSError as e:
                    raise LocalIOError(f"Cannot read upload source: {e}") from e

                if length is None:
                    logger.warning(
                        "Could not determine upload size, size limit not enforced",
                        key=task.key,
                    )
                elif length > task.size_limit:
                    logger.error(
                        "Upload exceeds size limit",
                        key=task.key,
                        size=length,
                        size_limit=task.size_limit,
                    )
                    return UploadResult(
                        key=task.key,
                        outcome=TransferOutcome.FAILED,
                        error=(
                            f"Source size ({length} bytes) exceeds maximum allowed "
                            f"size ({task.size_limit} bytes)"
                        ),
                        error_kind="SizeLimitExceeded",
                    )

            content_type = task.content_type or classify(task.key)

            try:
                with task.payload.open() as body:
                    self.client.put_object(task.key, body, content_type)
            except OSError as e:
                raise LocalIOError(f"Cannot read upload source: {e}") from e

            url = self.client.public_url(task.key)
            logger.info("Object uploaded", key=task.key, url=url)
            return UploadResult(key=task.key, outcome=TransferOutcome.SUCCESS, url=url)

        except BucketToolsError as e:
            logger.error(
                "Upload failed",
                key=task.key,
                error=str(e),
                error_kind=type(e).__name__,
            )
            return UploadResult(
                key=task.key,
                outcome=TransferOutcome.FAILED,
                error=str(e),
                error_kind=type(e).__name__,
            )
