"""Local filesystem helpers for downloads."""

from .paths import DownloadRoot, ensure_directory, write_atomically

__all__ = ["DownloadRoot", "ensure_directory", "write_atomically"]
