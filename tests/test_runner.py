"""Tests covering the collection runner."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

from logcollector.runner import CollectionRequest, CollectionRunner
from logcollector.state import StatusStore, StorageError

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")

CONTENT = "sample log\n日本語のログ\n"
CONTENT_UTF8 = CONTENT.encode("utf-8")


def _runner_at(*args: int) -> CollectionRunner:
    """Return a runner whose clock is frozen at the given local time.

    Args:
        *args: Positional datetime components (year, month, day, hour, ...).

    Returns:
        CollectionRunner: Runner with a fixed clock.
    """
    moment = datetime(*args)
    return CollectionRunner(clock=lambda: moment)


def _logfile(tmp_path: Path, encoding: str = "utf-8") -> Path:
    path = tmp_path / "test.log"
    path.write_bytes(CONTENT.encode(encoding))
    return path


def test_request_rejects_unknown_variant() -> None:
    with pytest.raises(ValueError):
        CollectionRequest(source="x", variant="socket")  # type: ignore[arg-type]


@pytest.mark.parametrize("hour", [-1, 24])
def test_request_rejects_out_of_range_hour(hour: int) -> None:
    with pytest.raises(ValueError):
        CollectionRequest(source="x", hour=hour)


def test_file_without_options_collects(tmp_path: Path) -> None:
    path = tmp_path / "x"
    path.write_bytes("a\nb\n".encode("shift_jis"))

    result = CollectionRunner().run(CollectionRequest(source=str(path)))

    assert result.content == b"a\nb\n"
    assert result.outcome == "collected"
    assert result.collected
    assert result.errors == []
    assert path.exists()


def test_file_content_keeps_source_encoding(tmp_path: Path) -> None:
    path = _logfile(tmp_path, encoding="shift_jis")

    result = CollectionRunner().run(CollectionRequest(source=str(path), encoding="shift_jis"))

    assert result.content == path.read_bytes()
    assert result.content != CONTENT_UTF8


def test_file_with_hour(tmp_path: Path) -> None:
    """Collection happens only during the configured hour.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    path = _logfile(tmp_path)
    request = CollectionRequest(source=str(path), encoding="utf-8", hour=20)

    gated = _runner_at(2024, 7, 9, 0, 0, 0).run(request)
    assert gated.content is None
    assert gated.outcome == "gated_out"

    collected = _runner_at(2024, 7, 9, 20, 0, 0).run(request)
    assert collected.content == CONTENT_UTF8


def test_file_with_status_collects_once_per_day(tmp_path: Path) -> None:
    """The status file limits collection to once per calendar day.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    path = _logfile(tmp_path)
    status_path = tmp_path / "status"
    request = CollectionRequest(
        source=str(path), encoding="utf-8", hour=20, status_file=status_path
    )

    assert _runner_at(2024, 7, 9, 20, 0, 0).run(request).content == CONTENT_UTF8
    assert _runner_at(2024, 7, 9, 20, 59, 59).run(request).content is None
    assert _runner_at(2024, 7, 10, 0, 0, 0).run(request).content is None
    assert _runner_at(2024, 7, 10, 20, 0, 0).run(request).content == CONTENT_UTF8

    assert StatusStore(status_path).last_collection_time == datetime(2024, 7, 10, 20, 0, 0)


def test_second_run_in_window_is_idempotent(tmp_path: Path) -> None:
    path = _logfile(tmp_path)
    status_path = tmp_path / "status"
    request = CollectionRequest(source=str(path), encoding="utf-8", status_file=status_path)

    _runner_at(2024, 7, 9, 8, 0, 0).run(request)
    before = status_path.read_bytes()
    second = _runner_at(2024, 7, 9, 9, 0, 0).run(request)

    assert second.content is None
    assert second.outcome == "gated_out"
    assert status_path.read_bytes() == before


def test_missing_file_is_unavailable_and_not_recorded(tmp_path: Path) -> None:
    status_path = tmp_path / "status"
    request = CollectionRequest(source=str(tmp_path / "absent.log"), status_file=status_path)

    result = _runner_at(2024, 7, 9, 20, 0, 0).run(request)

    assert result.content is None
    assert result.outcome == "unavailable"
    assert result.errors == []
    assert not status_path.exists()


def test_empty_file_is_a_real_collection(tmp_path: Path) -> None:
    path = tmp_path / "empty.log"
    path.write_bytes(b"")
    status_path = tmp_path / "status"

    result = CollectionRunner().run(
        CollectionRequest(source=str(path), encoding="utf-8", status_file=status_path)
    )

    assert result.content == b""
    assert result.collected
    assert status_path.exists()


def test_move_renames_file(tmp_path: Path) -> None:
    path = _logfile(tmp_path)
    request = CollectionRequest(source=str(path), encoding="utf-8", move=True)

    first = CollectionRunner().run(request)
    second = CollectionRunner().run(request)

    assert first.content == CONTENT_UTF8
    assert not path.exists()
    assert (tmp_path / "test.log.collected").read_bytes() == CONTENT_UTF8
    assert second.outcome == "unavailable"


def test_move_uses_configured_suffix(tmp_path: Path) -> None:
    path = _logfile(tmp_path)

    CollectionRunner().run(
        CollectionRequest(source=str(path), encoding="utf-8", move=True, consumed_suffix=".old")
    )

    assert (tmp_path / "test.log.old").exists()


def test_dry_run_neither_moves_nor_records(tmp_path: Path) -> None:
    """Dry-run still gates and retrieves, but leaves no persistent trace.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    path = _logfile(tmp_path, encoding="shift_jis")
    status_path = tmp_path / "status"
    request = CollectionRequest(
        source=str(path), move=True, status_file=status_path, dry_run=True
    )

    first = _runner_at(2024, 7, 9, 20, 0, 0).run(request)
    second = _runner_at(2024, 7, 9, 21, 0, 0).run(request)

    assert first.content == CONTENT.encode("shift_jis")
    assert second.content == CONTENT.encode("shift_jis")
    assert path.exists()
    assert not (tmp_path / "test.log.collected").exists()
    assert not status_path.exists()


def test_dry_run_respects_existing_status(tmp_path: Path) -> None:
    path = _logfile(tmp_path)
    status_path = tmp_path / "status"
    StatusStore(status_path).record_collection_time(datetime(2024, 7, 9, 1, 0, 0))

    result = _runner_at(2024, 7, 9, 20, 0, 0).run(
        CollectionRequest(source=str(path), encoding="utf-8", status_file=status_path, dry_run=True)
    )

    assert result.outcome == "gated_out"


def test_encoding_error_fails_without_status_update(tmp_path: Path) -> None:
    path = _logfile(tmp_path, encoding="shift_jis")
    status_path = tmp_path / "status"

    result = CollectionRunner().run(
        CollectionRequest(source=str(path), encoding="utf-8", move=True, status_file=status_path)
    )

    assert result.content is None
    assert result.outcome == "failed"
    assert result.errors
    assert path.exists()
    assert not status_path.exists()


def test_corrupt_status_file_aborts_attempt(tmp_path: Path) -> None:
    path = _logfile(tmp_path)
    status_path = tmp_path / "status"
    status_path.write_text("garbage", encoding="utf-8")

    result = CollectionRunner().run(
        CollectionRequest(source=str(path), encoding="utf-8", move=True, status_file=status_path)
    )

    assert result.content is None
    assert result.outcome == "failed"
    assert "Invalid status data" in result.errors[0]
    assert path.exists()
    assert status_path.read_text(encoding="utf-8") == "garbage"


def test_status_write_failure_still_returns_content(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = _logfile(tmp_path)
    status_path = tmp_path / "status"

    def _broken_record(self: StatusStore, collected_at: datetime) -> None:
        raise StorageError("status file is read-only")

    monkeypatch.setattr(StatusStore, "record_collection_time", _broken_record)

    result = CollectionRunner().run(
        CollectionRequest(source=str(path), encoding="utf-8", status_file=status_path)
    )

    assert result.content == CONTENT_UTF8
    assert result.outcome == "partial"
    assert result.errors == ["status file is read-only"]


@posix_only
def test_command_without_options_collects_stdout() -> None:
    result = CollectionRunner().run(CollectionRequest(source="echo hello", variant="command"))

    assert result.content == b"hello\n"
    assert result.outcome == "collected"
    assert result.errors == []


@posix_only
def test_failed_command_reports_and_retries_next_run(tmp_path: Path) -> None:
    """A failing command is reported, not recorded, and succeeds on a later run.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    path = tmp_path / "test.log"
    status_path = tmp_path / "status"
    request = CollectionRequest(
        source=f"cat {path}", variant="command", hour=20, status_file=status_path
    )

    failed = _runner_at(2024, 7, 9, 20, 0, 0).run(request)

    assert failed.content == b""
    assert failed.outcome == "partial"
    assert failed.errors
    assert failed.errors[0].startswith("Command exited with status")
    assert not status_path.exists()

    path.write_text(CONTENT, encoding="utf-8")
    succeeded = _runner_at(2024, 7, 9, 20, 10, 0).run(request)

    assert succeeded.content == CONTENT_UTF8
    assert succeeded.errors == []
    assert StatusStore(status_path).last_collection_time == datetime(2024, 7, 9, 20, 10, 0)


@posix_only
def test_command_timeout_fails_attempt(tmp_path: Path) -> None:
    status_path = tmp_path / "status"

    result = CollectionRunner().run(
        CollectionRequest(
            source="sleep 3", variant="command", status_file=status_path, command_timeout=0.2
        )
    )

    assert result.content is None
    assert result.outcome == "failed"
    assert not status_path.exists()


@posix_only
def test_command_dry_run_does_not_record(tmp_path: Path) -> None:
    status_path = tmp_path / "status"

    result = CollectionRunner().run(
        CollectionRequest(
            source="echo hello", variant="command", status_file=status_path, dry_run=True
        )
    )

    assert result.content == b"hello\n"
    assert not status_path.exists()
