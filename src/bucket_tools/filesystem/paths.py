"""Local path handling for downloads.

Every download destination is resolved against a single download root and
must stay inside it. Keys are remote, untrusted input: a key such as
``../../etc/passwd`` or ``/etc/passwd`` is rejected rather than rewritten.
"""

import os
import tempfile
from pathlib import Path
from typing import Iterable, Union

from bucket_tools.core import get_logger
from bucket_tools.core.exceptions import LocalIOError, PathContainmentError

logger = get_logger(__name__)


class DownloadRoot:
    """A local directory under which all downloads are written."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def resolve(self, relative_path: str) -> Path:
        """Resolve a relative destination against the root.

        Args:
            relative_path: Slash-delimited path, usually derived from a key

        Returns:
            Absolute path under the root

        Raises:
            PathContainmentError: If the path is empty, absolute, or escapes
                the root
        """
        if not relative_path or not relative_path.strip("/"):
            raise PathContainmentError("Destination path is empty")
        if relative_path.startswith("/") or os.path.isabs(relative_path):
            raise PathContainmentError(
                f"Destination must be relative to the download root: {relative_path}"
            )

        try:
            candidate = (self.root / relative_path).resolve()
        except OSError as e:
            raise LocalIOError(f"Cannot resolve '{relative_path}': {e}") from e
        if candidate == self.root or not candidate.is_relative_to(self.root):
            logger.warning(
                "Rejected destination outside download root",
                relative_path=relative_path,
                root=str(self.root),
            )
            raise PathContainmentError(
                f"Destination escapes the download root: {relative_path}"
            )
        return candidate


def ensure_directory(path: Path) -> None:
    """Create a directory and its parents; existing directories are fine."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LocalIOError(f"Cannot create directory '{path}': {e}") from e


def write_atomically(destination: Path, chunks: Iterable[bytes]) -> int:
    """Write chunks to a temporary file beside the destination, then rename.

    A partially written file never appears at the destination, so an
    interrupted download is retried on the next run instead of being skipped.

    Returns:
        Number of bytes written
    """
    written = 0
    fd, temp_name = tempfile.mkstemp(
        dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            for chunk in chunks:
                if chunk:
                    handle.write(chunk)
                    written += len(chunk)
        os.replace(temp_name, destination)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise
    return written
