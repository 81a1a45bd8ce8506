from __future__ import annotations

import threading
import time
from collections import Counter

from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.models.progress import ProgressEvent
from git_diff_export.domain.models.transfer_mode import TransferMode
from git_diff_export.domain.workflows.transfer_engine import (
    CancellationToken,
    SerializedSink,
    TransferEngine,
)
from tests.fakes import FakeChangeProvider, FakeLogger, MemorySink


def _files(count: int) -> list[FileChange]:
    return [FileChange(ChangeStatus.ADDED, f"dir{index % 3}/file{index}.txt") for index in range(count)]


def _engine(provider: FakeChangeProvider, workers: int = 5, queue_size: int = 20, verbose: bool = False):
    logger = FakeLogger()
    engine = TransferEngine(
        provider=provider,
        to_ref="HEAD",
        logger=logger,
        workers=workers,
        queue_size=queue_size,
        verbose=verbose,
    )
    return engine, logger


def test_transfer_engine_given_sequential_mode_when_transferred_then_preserves_order():
    files = _files(6)
    sink = MemorySink()
    events: list[ProgressEvent] = []
    engine, _ = _engine(FakeChangeProvider())

    outcome = engine.transfer(files, sink, TransferMode.SEQUENTIAL, on_progress=events.append)

    assert sink.order == [change.path for change in files]
    assert [event.path for event in events] == sink.order
    assert [event.processed for event in events] == [1, 2, 3, 4, 5, 6]
    assert outcome.success_count == 6
    assert outcome.failed_count == 0
    assert sink.entries["dir0/file0.txt"] == b"content of dir0/file0.txt\n"


def test_transfer_engine_given_failures_when_sequential_then_continues_with_remaining_files():
    files = _files(4)
    provider = FakeChangeProvider(unreadable=(files[1].path,))
    sink = MemorySink(failing=(files[2].path,))
    engine, logger = _engine(provider)

    outcome = engine.transfer(files, sink, TransferMode.SEQUENTIAL)

    assert outcome.success_count == 2
    assert outcome.failed_count == 2
    assert set(sink.entries) == {files[0].path, files[3].path}
    failures = {failure.path: failure.message for failure in outcome.failures}
    assert failures[files[1].path].startswith("read content: git show failed")
    assert failures[files[2].path].startswith("write entry: disk full")
    assert len(logger.errors) == 2


def test_transfer_engine_given_parallel_mode_when_transferred_then_every_path_recorded_once():
    files = _files(57)
    provider = FakeChangeProvider(unreadable=tuple(change.path for change in files[::7]))
    sink = MemorySink()
    engine, _ = _engine(provider, workers=5, queue_size=4)

    outcome = engine.transfer(files, sink, TransferMode.PARALLEL)

    assert outcome.success_count + outcome.failed_count == len(files)
    recorded = Counter(outcome.succeeded + [failure.path for failure in outcome.failures])
    assert recorded == Counter(change.path for change in files)
    assert outcome.failed_count == len(files[::7])
    assert outcome.cancelled is False


def test_transfer_engine_given_parallel_mode_when_progress_emitted_then_counts_monotonic():
    files = _files(40)
    events: list[ProgressEvent] = []
    consumer_threads: set[str] = set()

    def _on_progress(event: ProgressEvent) -> None:
        consumer_threads.add(threading.current_thread().name)
        events.append(event)

    engine, _ = _engine(FakeChangeProvider(unreadable=("dir1/file1.txt",)))

    engine.transfer(files, MemorySink(), TransferMode.PARALLEL, on_progress=_on_progress)

    processed = [event.processed for event in events]
    assert processed == sorted(processed)
    assert processed[-1] == len(files)
    assert all(event.processed <= event.total == len(files) for event in events)
    assert consumer_threads == {threading.current_thread().name}


def test_transfer_engine_given_serial_sink_when_parallel_then_writes_never_overlap():
    files = _files(30)
    sink = MemorySink(requires_serial_writes=True)
    engine, _ = _engine(FakeChangeProvider())

    outcome = engine.transfer(files, sink, TransferMode.PARALLEL)

    assert outcome.success_count == 30
    assert sink.max_concurrent_writes == 1
    assert sink.writer_threads == {"sink-writer"}


def test_transfer_engine_given_serial_sink_failure_when_parallel_then_recorded_for_that_file():
    files = _files(10)
    sink = MemorySink(requires_serial_writes=True, failing=(files[4].path,))
    engine, _ = _engine(FakeChangeProvider())

    outcome = engine.transfer(files, sink, TransferMode.PARALLEL)

    assert outcome.failed_count == 1
    assert outcome.failures[0].path == files[4].path
    assert outcome.failures[0].message == f"write entry: disk full while writing {files[4].path}"


def test_transfer_engine_given_outside_root_path_when_copied_then_skipped_without_error():
    files = [FileChange(ChangeStatus.ADDED, "../escape.txt"), FileChange(ChangeStatus.ADDED, "ok.txt")]
    provider = FakeChangeProvider()
    sink = MemorySink()
    engine, _ = _engine(provider)

    outcome = engine.transfer(files, sink, TransferMode.SEQUENTIAL)

    assert outcome.failed_count == 0
    assert outcome.success_count == 2
    assert list(sink.entries) == ["ok.txt"]
    assert ("HEAD", "../escape.txt") not in provider.content_requests


def test_transfer_engine_given_verbose_when_rename_copied_then_logs_source_path():
    files = [FileChange(ChangeStatus.RENAMED, "new.go", old_path="old.go")]
    engine, logger = _engine(FakeChangeProvider(), verbose=True)

    engine.transfer(files, MemorySink(), TransferMode.SEQUENTIAL)

    assert logger.infos == ["-> R: new.go (from old.go)"]


def test_transfer_engine_given_cancelled_token_when_sequential_then_stops_before_next_file():
    files = _files(5)
    token = CancellationToken()
    events: list[ProgressEvent] = []

    def _on_progress(event: ProgressEvent) -> None:
        events.append(event)
        if event.processed == 2:
            token.cancel()

    engine, logger = _engine(FakeChangeProvider())

    outcome = engine.transfer(files, MemorySink(), TransferMode.SEQUENTIAL, token, _on_progress)

    assert outcome.processed == 2
    assert outcome.cancelled is True
    assert logger.warnings == ["Transfer cancelled after 2 of 5 files"]


class _SlowProvider:
    def __init__(self, token: CancellationToken, cancel_after: int) -> None:
        self._inner = FakeChangeProvider()
        self._token = token
        self._cancel_after = cancel_after
        self._calls = 0
        self._lock = threading.Lock()

    def __getattr__(self, name: str):
        return getattr(self._inner, name)

    def get_file_content(self, ref: str, path: str) -> bytes:
        with self._lock:
            self._calls += 1
            if self._calls >= self._cancel_after:
                self._token.cancel()
        time.sleep(0.01)
        return self._inner.get_file_content(ref, path)


def test_transfer_engine_given_cancellation_when_parallel_then_workers_stop_pulling_work():
    files = _files(200)
    token = CancellationToken()
    provider = _SlowProvider(token, cancel_after=10)
    engine = TransferEngine(
        provider=provider,
        to_ref="HEAD",
        logger=FakeLogger(),
        workers=5,
        queue_size=20,
    )
    sink = MemorySink()

    outcome = engine.transfer(files, sink, TransferMode.PARALLEL, token)

    assert outcome.cancelled is True
    assert outcome.processed < len(files)
    assert outcome.success_count + outcome.failed_count == outcome.processed
    assert len(sink.entries) == outcome.success_count


def test_transfer_engine_given_single_file_when_parallel_then_completes():
    engine, _ = _engine(FakeChangeProvider())
    sink = MemorySink(requires_serial_writes=True)

    outcome = engine.transfer(_files(1), sink, TransferMode.PARALLEL)

    assert outcome.success_count == 1


def test_serialized_sink_given_writes_from_threads_when_closed_then_all_written():
    inner = MemorySink()
    serialized = SerializedSink(inner)
    serialized.prepare()

    threads = [
        threading.Thread(target=serialized.write, args=(f"f{index}", b"x"))
        for index in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    serialized.close()

    assert sorted(inner.entries) == sorted(f"f{index}" for index in range(8))
    assert inner.writer_threads == {"sink-writer"}
    assert inner.closed is False
