"""Prefix enumeration across paginated listings.

The store returns at most 1000 keys per list request. Enumeration issues one
request per page and, while the store reports the page as truncated, resumes
from the page's marker (the store's NextMarker, or the last key returned).

For example, given objects:
    - photos/2023/a.jpg
    - photos/2023/b.png
    - photos/2024/

``iter_matching_objects(client, "photos/", FilterSpec(name_postfix=".jpg"))``
yields only ``photos/2023/a.jpg``: directory markers are never candidates and
filters apply to the leaf filename.
"""

from dataclasses import replace
from typing import Iterator, Optional

from bucket_tools.core import get_logger
from bucket_tools.core.exceptions import (
    EnumerationError,
    StoreError,
    TransportError,
    ValidationError,
)
from bucket_tools.objectstorage.clients import ObjectStoreClient
from bucket_tools.objectstorage.content_types import classify
from bucket_tools.schemas import (
    DirectoryListing,
    FilterSpec,
    ListedObject,
    ListPage,
    is_directory_marker,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 1000


def iter_pages(
    client: ObjectStoreClient,
    prefix: str,
    max_keys: int = DEFAULT_PAGE_SIZE,
    delimiter: Optional[str] = None,
) -> Iterator[ListPage]:
    """Yield every listing page under a prefix, in key order.

    Raises:
        EnumerationError: If a list request fails or the store keeps reporting
            truncation without advancing the marker
    """
    marker: Optional[str] = None
    page_count = 0

    while True:
        try:
            page = client.list_objects(
                prefix=prefix, delimiter=delimiter, max_keys=max_keys, marker=marker
            )
        except (StoreError, TransportError) as e:
            error_msg = f"Failed to list prefix '{prefix}': {e}"
            logger.error(error_msg, prefix=prefix, marker=marker, error=str(e))
            raise EnumerationError(error_msg) from e

        page_count += 1
        yield page

        if not page.is_truncated:
            break
        if not page.next_marker or page.next_marker == marker:
            raise EnumerationError(
                f"Listing of prefix '{prefix}' is truncated but did not advance "
                f"past marker {marker!r}"
            )
        marker = page.next_marker

    logger.debug("Prefix enumeration finished", prefix=prefix, page_count=page_count)


def iter_matching_objects(
    client: ObjectStoreClient,
    prefix: str,
    filter_spec: Optional[FilterSpec] = None,
    max_keys: int = DEFAULT_PAGE_SIZE,
) -> Iterator[ListedObject]:
    """Yield the transfer candidates under a prefix.

    Directory markers (keys ending in ``/``) are excluded; when a filter is
    given, the leaf filename must pass every predicate it sets.
    """
    for page in iter_pages(client, prefix, max_keys=max_keys):
        for listed in page.objects:
            if is_directory_marker(listed.key):
                continue
            if filter_spec is not None and not filter_spec.matches(listed.key):
                continue
            yield listed


def count_matching(
    client: ObjectStoreClient,
    prefix: str,
    filter_spec: Optional[FilterSpec] = None,
    max_keys: int = DEFAULT_PAGE_SIZE,
) -> int:
    """Count transfer candidates under a prefix without transferring them."""
    total = sum(
        1 for _ in iter_matching_objects(client, prefix, filter_spec, max_keys)
    )
    logger.info("Matching objects counted", prefix=prefix, total=total)
    return total


def list_directory(
    client: ObjectStoreClient,
    prefix: str = "",
    max_keys: int = DEFAULT_PAGE_SIZE,
    delimiter: str = "/",
) -> DirectoryListing:
    """List one page of a prefix as directories and files.

    This is equivalent to listing a single directory level in a filesystem.
    The entry whose key equals the prefix itself (the directory marker of the
    listed "folder") is left out. Files carry the content type inferred from
    their key.

    Args:
        client: Object store client
        prefix: Prefix to list, usually ending in the delimiter
        max_keys: Page size
        delimiter: Character grouping deeper keys into directories

    Returns:
        DirectoryListing for the first page

    Raises:
        ValidationError: If max_keys is not positive
        StoreError | TransportError: If the list request fails
    """
    if max_keys <= 0:
        raise ValidationError(f"max_keys must be positive, got: {max_keys}")

    logger.info("Listing directory", prefix=prefix, max_keys=max_keys)

    page = client.list_objects(prefix=prefix, delimiter=delimiter, max_keys=max_keys)
    files = tuple(
        replace(listed, content_type=classify(listed.key))
        for listed in page.objects
        if listed.key != prefix
    )

    listing = DirectoryListing(
        prefix=prefix,
        directories=page.common_prefixes,
        files=files,
        next_marker=page.next_marker,
    )
    logger.info(
        "Directory listed",
        prefix=prefix,
        directory_count=len(listing.directories),
        file_count=len(listing.files),
        has_more=listing.has_more,
    )
    return listing
