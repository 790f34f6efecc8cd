"""Object storage listing operations."""

from .prefix_contents import (
    count_matching,
    iter_matching_objects,
    iter_pages,
    list_directory,
)

__all__ = ["count_matching", "iter_matching_objects", "iter_pages", "list_directory"]
