"""Orchestrate one gated, deduplicated collection attempt."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Literal

from logcollector.gate import should_collect
from logcollector.sources import (
    DEFAULT_CONSUMED_SUFFIX,
    CommandFailure,
    EncodingError,
    SourceError,
    SourceUnavailable,
    mark_consumed,
    read_source,
    report_output,
    run_source,
)
from logcollector.state import StatusStore, StorageError

LOGGER = logging.getLogger(__name__)

DEFAULT_ENCODING = "shift_jis"

Variant = Literal["file", "command"]
Outcome = Literal["gated_out", "unavailable", "collected", "partial", "failed"]


@dataclass(slots=True)
class CollectionRequest:
    """Validated parameters for a single collection attempt.

    Attributes:
        source: File path (file variant) or shell command line (command variant).
        variant: Which source strategy to use.
        hour: Optional hour of day (0-23) to which collection is restricted.
        status_file: Optional status file used for daily deduplication.
        dry_run: When True, skip moving the file and updating the status file.
        encoding: Text encoding of the file source.
        move: Whether to rename the file source after a successful read.
        consumed_suffix: Suffix appended to consumed files.
        command_timeout: Optional time limit for the command source, in seconds.
    """

    source: str
    variant: Variant = "file"
    hour: int | None = None
    status_file: Path | None = None
    dry_run: bool = False
    encoding: str = DEFAULT_ENCODING
    move: bool = False
    consumed_suffix: str = DEFAULT_CONSUMED_SUFFIX
    command_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.variant not in ("file", "command"):
            raise ValueError(f"Unknown source variant: {self.variant!r}")
        if self.hour is not None and not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be an integer from 0 to 23, got {self.hour}")


@dataclass(slots=True)
class CollectionResult:
    """Outcome of a collection attempt.

    Attributes:
        content: Collected bytes exactly as the source produced them, or None when
            nothing was collected.
        outcome: Short label describing how the attempt ended.
        errors: Messages reported to the error channel during the attempt.
    """

    content: bytes | None = None
    outcome: Outcome = "gated_out"
    errors: list[str] = field(default_factory=list)

    @property
    def collected(self) -> bool:
        """Return whether any content was retrieved."""
        return self.content is not None


class CollectionRunner:
    """Run the gate, retrieve from the source, then persist side effects."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        """Initialize the runner.

        Args:
            clock: Callable returning the current time.
        """
        self._clock = clock

    def run(self, request: CollectionRequest) -> CollectionResult:
        """Perform one collection attempt.

        Failures are logged and recorded on the result instead of being raised, so a
        scheduler can safely invoke the runner again on its next tick.

        Args:
            request: Parameters of the attempt.

        Returns:
            CollectionResult: Collected content and outcome details.
        """
        now = self._clock()
        result = CollectionResult()

        store: StatusStore | None = None
        try:
            if request.status_file is not None:
                store = StatusStore(request.status_file)
            if not should_collect(now, request.hour, store):
                LOGGER.debug("Collection of %s is not due at %s.", request.source, now)
                return result
        except StorageError as exc:
            self._report(result, str(exc))
            result.outcome = "failed"
            return result

        if request.variant == "file":
            self._retrieve_file(request, result)
        else:
            self._retrieve_command(request, result)

        if result.outcome != "collected":
            return result

        if request.dry_run:
            LOGGER.info("Dry run: leaving the source and status file untouched.")
            return result

        if request.variant == "file" and request.move:
            try:
                destination = mark_consumed(request.source, request.consumed_suffix)
            except SourceError as exc:
                self._report(result, str(exc))
                result.outcome = "partial"
            else:
                LOGGER.info("Moved %s to %s.", request.source, destination)

        if store is not None:
            try:
                store.record_collection_time(now)
            except StorageError as exc:
                self._report(result, str(exc))
                result.outcome = "partial"

        return result

    def _retrieve_file(self, request: CollectionRequest, result: CollectionResult) -> None:
        try:
            content = read_source(request.source, request.encoding)
        except (EncodingError, SourceError) as exc:
            self._report(result, str(exc))
            result.outcome = "failed"
            return

        if content is None:
            LOGGER.info("Nothing to collect: %s does not exist.", request.source)
            result.outcome = "unavailable"
            return

        result.content = content
        result.outcome = "collected"

    def _retrieve_command(self, request: CollectionRequest, result: CollectionResult) -> None:
        try:
            output = run_source(request.source, timeout=request.command_timeout)
        except SourceUnavailable as exc:
            self._report(result, str(exc))
            result.outcome = "unavailable"
            return
        except CommandFailure as exc:
            self._report(result, str(exc))
            result.outcome = "failed"
            return

        result.errors.extend(report_output(output))
        result.content = output.stdout
        # A failed command leaves the status untouched so the next tick retries.
        result.outcome = "collected" if output.succeeded else "partial"

    @staticmethod
    def _report(result: CollectionResult, message: str) -> None:
        LOGGER.error(message)
        result.errors.append(message)


__all__ = [
    "DEFAULT_ENCODING",
    "CollectionRequest",
    "CollectionResult",
    "CollectionRunner",
]
