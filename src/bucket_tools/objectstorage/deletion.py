"""Single and bulk (prefix) deletion."""

from bucket_tools.core import get_logger, get_tracer
from bucket_tools.core.exceptions import BucketToolsError, StoreError, TransportError
from bucket_tools.objectstorage.clients import ObjectStoreClient
from bucket_tools.objectstorage.clients.s3_client import MAX_KEYS_PER_REQUEST
from bucket_tools.objectstorage.listing import iter_pages
from bucket_tools.schemas import DeleteError, DeleteSummary

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def delete_key(client: ObjectStoreClient, key: str) -> bool:
    """Delete one object.

    Returns:
        True if the store accepted the delete. Deleting a missing key is not
        an error for S3-compatible stores.
    """
    try:
        client.delete_object(key)
        return True
    except BucketToolsError as e:
        logger.error(
            "Delete failed", key=key, error=str(e), error_kind=type(e).__name__
        )
        return False


def delete_prefix(
    client: ObjectStoreClient,
    prefix: str,
    batch_size: int = MAX_KEYS_PER_REQUEST,
) -> DeleteSummary:
    """Delete every object under a prefix, one batch request per listing page.

    All keys are candidates, directory markers included, and no filename
    filtering is applied. The store reports each key as deleted or failed;
    those per-key counts are accumulated. A batch request that fails outright
    counts all of its keys as failed and the run moves on to the next page.

    Args:
        client: Object store client
        prefix: Key prefix to delete
        batch_size: Keys per listing page and per delete request (max 1000)

    Returns:
        DeleteSummary; ``success`` is True only if no key failed

    Raises:
        EnumerationError: If listing the prefix fails
    """
    batch_size = max(1, min(batch_size, MAX_KEYS_PER_REQUEST))
    summary = DeleteSummary()

    with tracer.start_as_current_span("delete_prefix") as span:
        span.set_attribute("bucket_tools.prefix", prefix)

        for page in iter_pages(client, prefix, max_keys=batch_size):
            keys = [listed.key for listed in page.objects]
            if not keys:
                if summary.batches == 0:
                    logger.info("No objects found under prefix", prefix=prefix)
                break

            summary.batches += 1
            try:
                result = client.delete_objects(keys)
            except (StoreError, TransportError) as e:
                logger.error(
                    "Batch delete failed",
                    prefix=prefix,
                    key_count=len(keys),
                    error=str(e),
                )
                summary.failed += len(keys)
                summary.errors.extend(
                    DeleteError(key=key, code=getattr(e, "code", None), message=str(e))
                    for key in keys
                )
                continue

            summary.deleted += len(result.deleted)
            summary.failed += len(result.errors)
            summary.errors.extend(result.errors)
            for error in result.errors:
                logger.error(
                    "Object delete failed",
                    key=error.key,
                    code=error.code,
                    error=error.message,
                )

        span.set_attribute("bucket_tools.deleted", summary.deleted)
        span.set_attribute("bucket_tools.failed", summary.failed)

    logger.info(
        "Prefix delete finished",
        prefix=prefix,
        deleted=summary.deleted,
        failed=summary.failed,
        batches=summary.batches,
    )
    return summary
