"""Single-object transfers and bulk prefix downloads."""

from .orchestrator import DirectoryDownloader, destination_for
from .unit import TransferUnit

__all__ = ["DirectoryDownloader", "TransferUnit", "destination_for"]
