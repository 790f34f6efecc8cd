"""Data models shared by the listing, transfer and deletion operations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .payload import SourcePayload

DIRECTORY_MARKER_SUFFIX = "/"


def is_directory_marker(key: str) -> bool:
    """Return True for keys that only mark a "folder" and hold no file."""
    return key.endswith(DIRECTORY_MARKER_SUFFIX)


def leaf_name(key: str) -> str:
    """Return the filename part of a slash-delimited key."""
    return key.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ListedObject:
    """One entry of a listing page."""

    key: str
    size: int
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ListPage:
    """Result of a single list request.

    Attributes:
        objects: Entries in key order
        common_prefixes: "Directories" one level below the queried prefix
        is_truncated: Whether the store holds more entries after this page
        next_marker: Marker to resume listing from, set when truncated
    """

    objects: tuple[ListedObject, ...] = ()
    common_prefixes: tuple[str, ...] = ()
    is_truncated: bool = False
    next_marker: Optional[str] = None


@dataclass(frozen=True)
class DirectoryListing:
    """One page of a directory-style listing."""

    prefix: str
    directories: tuple[str, ...]
    files: tuple[ListedObject, ...]
    next_marker: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_marker is not None


class FilterSpec(BaseModel):
    """Filename filters applied to the leaf name of each key."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name_prefix: Optional[str] = Field(
        default=None, description="Leaf filename must start with this"
    )
    name_postfix: Optional[str] = Field(
        default=None, description="Leaf filename must end with this"
    )

    def matches(self, key: str) -> bool:
        name = leaf_name(key)
        if self.name_prefix is not None and not name.startswith(self.name_prefix):
            return False
        if self.name_postfix is not None and not name.endswith(self.name_postfix):
            return False
        return True


class DownloadTask(BaseModel):
    """A single object download, relative to the download root."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1, description="Object key to fetch")
    relative_path: str = Field(
        ..., min_length=1, description="Destination relative to the download root"
    )


class UploadTask(BaseModel):
    """A single object upload."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    payload: SourcePayload
    key: str = Field(..., min_length=1, description="Destination object key")
    content_type: Optional[str] = Field(
        default=None, description="MIME type, inferred from the key when absent"
    )
    size_limit: Optional[int] = Field(
        default=None, ge=0, description="Reject payloads larger than this (bytes)"
    )


class TransferOutcome(str, Enum):
    """Outcome of transferring one object."""

    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a single download."""

    key: str
    destination: Optional[str]
    outcome: TransferOutcome
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a single upload; ``url`` is set on success."""

    key: str
    outcome: TransferOutcome
    url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass
class RunSummary:
    """Counters for one bulk transfer run.

    Owned by a single orchestrator call and only mutated by the thread that
    aggregates results.
    """

    total_matched: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False

    def record(self, outcome: TransferOutcome) -> None:
        if outcome is TransferOutcome.SUCCESS:
            self.succeeded += 1
        elif outcome is TransferOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def processed(self) -> int:
        return self.succeeded + self.skipped + self.failed

    @property
    def is_balanced(self) -> bool:
        return self.total_matched == self.processed


@dataclass(frozen=True)
class ProgressEvent:
    """Reported after every processed key of a bulk download."""

    key: str
    outcome: TransferOutcome
    processed: int
    total: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.processed / self.total * 100, 1)


@dataclass(frozen=True)
class DirectoryDownloadResult:
    """Overall result of a bulk download."""

    success: bool
    summary: RunSummary


@dataclass(frozen=True)
class DeleteError:
    """A key the store refused to delete."""

    key: str
    code: Optional[str]
    message: str


@dataclass(frozen=True)
class BatchDeleteResult:
    """Per-key response of one batch delete call."""

    deleted: tuple[str, ...] = ()
    errors: tuple[DeleteError, ...] = ()


@dataclass
class DeleteSummary:
    """Counters for one bulk delete run."""

    deleted: int = 0
    failed: int = 0
    batches: int = 0
    errors: list[DeleteError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0
