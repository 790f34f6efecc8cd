"""Bulk download of every object under a prefix.

A directory download runs in two passes:

1. Counting pass: enumerate the prefix once and count the matching keys. The
   count is the progress denominator; when it is zero the run ends here.
2. Transfer pass: enumerate the prefix again and download each matching key
   through the TransferUnit, on a bounded thread pool.

Per-key results are aggregated on the calling thread only, so the RunSummary
needs no locking. A failed key is counted and the run continues; only a
failing list request aborts the run (as EnumerationError).
"""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Optional

from bucket_tools.core import get_logger, get_tracer, settings
from bucket_tools.objectstorage.listing import count_matching, iter_matching_objects
from bucket_tools.schemas import (
    DirectoryDownloadResult,
    FilterSpec,
    ProgressEvent,
    RunSummary,
    TransferResult,
    leaf_name,
)

from .unit import TransferUnit

logger = get_logger(__name__)
tracer = get_tracer(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


def destination_for(key: str, prefix: str, local_path: str) -> str:
    """Relative destination of a key: the local path plus the key minus prefix."""
    relative = key[len(prefix):] if key.startswith(prefix) else key
    relative = relative.lstrip("/") or leaf_name(key)
    local_path = local_path.rstrip("/")
    if not local_path:
        return relative
    return f"{local_path}/{relative}"


class DirectoryDownloader:
    """Downloads all objects under a prefix, with filters and progress."""

    def __init__(self, transfer_unit: TransferUnit, workers: Optional[int] = None):
        """Initialize the directory downloader.

        Args:
            transfer_unit: Unit used for each object
            workers: Default number of concurrent downloads
        """
        self.transfer_unit = transfer_unit
        self.workers = workers or settings.max_workers

    @property
    def client(self):
        return self.transfer_unit.client

    def download_directory(
        self,
        prefix: str,
        local_path: Optional[str] = None,
        filter_spec: Optional[FilterSpec] = None,
        workers: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> DirectoryDownloadResult:
        """Download every matching object under a prefix.

        Args:
            prefix: Key prefix to download
            local_path: Destination relative to the download root, defaults to
                the prefix
            filter_spec: Optional filename filters
            workers: Concurrent downloads for this run
            progress: Called after every processed key
            cancel_event: When set, no further keys are started

        Returns:
            DirectoryDownloadResult; ``success`` is False if any key failed or
            the run was cancelled

        Raises:
            EnumerationError: If listing the prefix fails
        """
        local_path = prefix if local_path is None else local_path
        workers = max(1, workers or self.workers)
        summary = RunSummary()

        with tracer.start_as_current_span("download_directory") as span:
            span.set_attribute("bucket_tools.prefix", prefix)

            summary.total_matched = count_matching(self.client, prefix, filter_spec)
            span.set_attribute("bucket_tools.total_matched", summary.total_matched)

            if summary.total_matched == 0:
                logger.info("No matching objects to download", prefix=prefix)
                return DirectoryDownloadResult(success=True, summary=summary)

            logger.info(
                "Starting directory download",
                prefix=prefix,
                local_path=local_path,
                total=summary.total_matched,
                workers=workers,
            )
            self._transfer(
                prefix,
                local_path,
                filter_spec,
                workers,
                summary,
                progress,
                cancel_event,
            )

            span.set_attribute("bucket_tools.succeeded", summary.succeeded)
            span.set_attribute("bucket_tools.skipped", summary.skipped)
            span.set_attribute("bucket_tools.failed", summary.failed)

        success = summary.failed == 0 and not summary.cancelled
        logger.info(
            "Directory download finished",
            prefix=prefix,
            total=summary.total_matched,
            succeeded=summary.succeeded,
            skipped=summary.skipped,
            failed=summary.failed,
            cancelled=summary.cancelled,
        )
        return DirectoryDownloadResult(success=success, summary=summary)

    def _transfer(
        self,
        prefix: str,
        local_path: str,
        filter_spec: Optional[FilterSpec],
        workers: int,
        summary: RunSummary,
        progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> None:
        """Run the transfer pass, keeping at most ``2 * workers`` keys in flight."""
        max_in_flight = workers * 2
        in_flight: set[Future] = set()

        def collect(done: set[Future]) -> None:
            for future in done:
                self._record(future.result(), summary, progress)

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="bucket-tools-download"
        ) as executor:
            try:
                for listed in iter_matching_objects(self.client, prefix, filter_spec):
                    if cancel_event is not None and cancel_event.is_set():
                        summary.cancelled = True
                        logger.warning("Directory download cancelled", prefix=prefix)
                        break

                    if summary.processed + len(in_flight) >= summary.total_matched:
                        # Keys added after the counting pass are left for the next run
                        logger.warning(
                            "More matching keys than counted, stopping",
                            prefix=prefix,
                            total=summary.total_matched,
                        )
                        break

                    in_flight.add(
                        executor.submit(
                            self.transfer_unit.download_one,
                            listed.key,
                            destination_for(listed.key, prefix, local_path),
                        )
                    )
                    if len(in_flight) >= max_in_flight:
                        done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                        collect(done)
            finally:
                if in_flight:
                    done, _ = wait(in_flight)
                    collect(done)

        if not summary.cancelled and summary.processed < summary.total_matched:
            # Keys removed after the counting pass
            logger.warning(
                "Fewer matching keys than counted",
                prefix=prefix,
                total=summary.total_matched,
                processed=summary.processed,
            )
            summary.total_matched = summary.processed

    @staticmethod
    def _record(
        result: TransferResult,
        summary: RunSummary,
        progress: Optional[ProgressCallback],
    ) -> None:
        summary.record(result.outcome)
        if progress is not None:
            progress(
                ProgressEvent(
                    key=result.key,
                    outcome=result.outcome,
                    processed=summary.processed,
                    total=summary.total_matched,
                )
            )
