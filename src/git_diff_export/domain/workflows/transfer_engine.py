from __future__ import annotations

import queue
import threading
import traceback
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Sequence

from git_diff_export.domain.errors import FileTransferError
from git_diff_export.domain.models.file_change import FileChange
from git_diff_export.domain.models.progress import ProgressEvent
from git_diff_export.domain.models.transfer_mode import TransferMode
from git_diff_export.domain.models.transfer_outcome import TransferOutcome
from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.protocols.logger_port import LoggerPort
from git_diff_export.domain.protocols.sink_port import SinkPort

ProgressCallback = Callable[[ProgressEvent], None]

_POLL_SECONDS = 0.1


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class SerializedSink(SinkPort):
    """Funnels every write of a non thread-safe sink through one writer thread.

    Callers block until their entry is written so write errors still
    surface on the calling worker.
    """

    requires_serial_writes = False

    def __init__(self, sink: SinkPort) -> None:
        self._sink = sink
        self.location: Path = sink.location
        self._requests: queue.Queue[tuple[str, bytes, Future[None]] | None] = queue.Queue()
        self._thread = threading.Thread(
            target=self._run, name="sink-writer", daemon=True
        )

    def prepare(self) -> None:
        self._thread.start()

    def write(self, path: str, content: bytes) -> None:
        result: Future[None] = Future()
        self._requests.put((path, content, result))
        result.result()

    def close(self) -> None:
        if not self._thread.is_alive():
            return
        self._requests.put(None)
        self._thread.join()

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            if request is None:
                return
            path, content, result = request
            if not result.set_running_or_notify_cancel():
                continue
            try:
                self._sink.write(path, content)
            except Exception as exc:
                result.set_exception(exc)
            else:
                result.set_result(None)


class TransferEngine:
    def __init__(
        self,
        provider: ChangeProviderPort,
        to_ref: str,
        logger: LoggerPort,
        workers: int = 5,
        queue_size: int = 20,
        verbose: bool = False,
    ) -> None:
        self._provider = provider
        self._to_ref = to_ref
        self._logger = logger
        self._workers = max(1, int(workers))
        self._queue_size = max(1, int(queue_size))
        self._verbose = verbose

    def copy_file(self, change: FileChange, sink: SinkPort) -> None:
        if self._provider.is_outside_tree_root(change.path):
            self._logger.debug("Outside repository, not copied: %s", change.path)
            return

        try:
            content = self._provider.get_file_content(self._to_ref, change.path)
        except Exception as exc:
            raise FileTransferError(change.path, "read content", exc) from exc

        try:
            sink.write(change.path, content)
        except Exception as exc:
            raise FileTransferError(change.path, "write entry", exc) from exc

        if self._verbose:
            self._logger.info("-> %s", change.describe())

    def transfer(
        self,
        files: Sequence[FileChange],
        sink: SinkPort,
        mode: TransferMode,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TransferOutcome:
        token = cancel_token or CancellationToken()
        emit = on_progress or (lambda _event: None)
        outcome = TransferOutcome()

        if mode is TransferMode.PARALLEL and len(files) > 1:
            self._run_parallel(files, sink, outcome, token, emit)
        else:
            self._run_sequential(files, sink, outcome, token, emit)

        if token.cancelled and outcome.processed < len(files):
            outcome.mark_cancelled()
            self._logger.warning(
                "Transfer cancelled after %d of %d files", outcome.processed, len(files)
            )
        return outcome

    def _process(
        self,
        change: FileChange,
        sink: SinkPort,
        outcome: TransferOutcome,
        total: int,
        emit: ProgressCallback,
        report_lock: threading.Lock,
    ) -> None:
        error: BaseException | None = None
        try:
            self.copy_file(change, sink)
        except FileTransferError as exc:
            error = exc
            self._logger.error("Failed to export %s: %s", change.path, exc)
        except Exception as exc:
            error = FileTransferError(change.path, "copy", exc)
            self._logger.error(
                "Unexpected transfer failure for %s\n%s",
                change.path,
                traceback.format_exc(),
            )

        # Recording and emitting together keeps delivered counts monotonic.
        with report_lock:
            if error is None:
                success, failed = outcome.record_success(change.path)
            else:
                success, failed = outcome.record_failure(change.path, error)
            emit(
                ProgressEvent(
                    path=change.path,
                    success_count=success,
                    failed_count=failed,
                    total=total,
                    failed=error is not None,
                )
            )

    def _run_sequential(
        self,
        files: Sequence[FileChange],
        sink: SinkPort,
        outcome: TransferOutcome,
        token: CancellationToken,
        emit: ProgressCallback,
    ) -> None:
        report_lock = threading.Lock()
        for change in files:
            if token.cancelled:
                return
            self._process(change, sink, outcome, len(files), emit, report_lock)

    @staticmethod
    def _put(
        work: queue.Queue[FileChange | None],
        item: FileChange | None,
        token: CancellationToken,
    ) -> bool:
        while not token.cancelled:
            try:
                work.put(item, timeout=_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _run_parallel(
        self,
        files: Sequence[FileChange],
        sink: SinkPort,
        outcome: TransferOutcome,
        token: CancellationToken,
        emit: ProgressCallback,
    ) -> None:
        total = len(files)
        worker_count = min(self._workers, total)
        work: queue.Queue[FileChange | None] = queue.Queue(maxsize=self._queue_size)
        events: queue.Queue[ProgressEvent | None] = queue.Queue()
        report_lock = threading.Lock()

        target: SinkPort = SerializedSink(sink) if sink.requires_serial_writes else sink
        if isinstance(target, SerializedSink):
            target.prepare()

        def producer() -> None:
            for change in files:
                if not self._put(work, change, token):
                    return
            for _ in range(worker_count):
                if not self._put(work, None, token):
                    return

        def worker() -> None:
            try:
                while not token.cancelled:
                    try:
                        change = work.get(timeout=_POLL_SECONDS)
                    except queue.Empty:
                        continue
                    if change is None:
                        return
                    self._process(change, target, outcome, total, events.put, report_lock)
            finally:
                events.put(None)

        threads = [threading.Thread(target=producer, name="transfer-producer", daemon=True)]
        threads.extend(
            threading.Thread(target=worker, name=f"transfer-worker-{index}", daemon=True)
            for index in range(1, worker_count + 1)
        )
        for thread in threads:
            thread.start()

        try:
            finished = 0
            while finished < worker_count:
                try:
                    event = events.get(timeout=_POLL_SECONDS)
                except queue.Empty:
                    continue
                if event is None:
                    finished += 1
                    continue
                emit(event)
        finally:
            for thread in threads:
                thread.join()
            if isinstance(target, SerializedSink):
                target.close()
