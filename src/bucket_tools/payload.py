"""Upload source payloads.

An upload may come from a file on disk, an in-memory buffer, or an already
open stream. Each variant knows its byte length (when it can be determined)
and how to open itself as a binary file object for the store client.
"""

import io
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from .core import get_logger

logger = get_logger(__name__)


class FilePayload:
    """Payload read from a local file."""

    kind = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def length(self) -> Optional[int]:
        return self.path.stat().st_size

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        with open(self.path, "rb") as handle:
            yield handle

    def __repr__(self) -> str:
        return f"FilePayload({str(self.path)!r})"


class BytesPayload:
    """Payload held in memory."""

    kind = "bytes"

    def __init__(self, data: Union[bytes, bytearray, str]):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.data = bytes(data)

    def length(self) -> Optional[int]:
        return len(self.data)

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        yield io.BytesIO(self.data)

    def __repr__(self) -> str:
        return f"BytesPayload(<{len(self.data)} bytes>)"


class StreamPayload:
    """Payload read from a caller-owned binary stream.

    The stream is not closed after the upload.
    """

    kind = "stream"

    def __init__(self, handle: BinaryIO):
        self.handle = handle

    def length(self) -> Optional[int]:
        """Best-effort remaining length of the stream, None if unknown."""
        try:
            return os.fstat(self.handle.fileno()).st_size - self.handle.tell()
        except (AttributeError, OSError, io.UnsupportedOperation):
            pass

        try:
            if not self.handle.seekable():
                return None
            position = self.handle.tell()
            end = self.handle.seek(0, io.SEEK_END)
            self.handle.seek(position)
            return end - position
        except (AttributeError, OSError, io.UnsupportedOperation):
            logger.debug("Could not determine stream length")
            return None

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        yield self.handle

    def __repr__(self) -> str:
        return f"StreamPayload({self.handle!r})"


SourcePayload = Union[FilePayload, BytesPayload, StreamPayload]


def as_payload(source: object) -> SourcePayload:
    """Resolve an upload source into a payload variant.

    Strings naming an existing file and ``Path`` objects become file payloads;
    any other string, and bytes, are uploaded as content. Objects with a
    ``read`` method are treated as streams.
    """
    if isinstance(source, (FilePayload, BytesPayload, StreamPayload)):
        return source
    if isinstance(source, Path):
        return FilePayload(source)
    if isinstance(source, str):
        if os.path.isfile(source):
            return FilePayload(source)
        return BytesPayload(source)
    if isinstance(source, (bytes, bytearray)):
        return BytesPayload(source)
    if hasattr(source, "read"):
        return StreamPayload(source)  # type: ignore[arg-type]
    raise TypeError(f"Unsupported upload source type: {type(source).__name__}")
