from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class TransferFailure:
    path: str
    error: BaseException

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(slots=True)
class TransferOutcome:
    """Per-run tally shared by every transfer worker.

    All mutation goes through ``record_success``/``record_failure`` which
    hold the instance lock, so counts and the failure list stay
    consistent when several workers report at once.
    """

    success_count: int = 0
    failed_count: int = 0
    succeeded: list[str] = field(default_factory=list)
    failures: list[TransferFailure] = field(default_factory=list)
    cancelled: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_success(self, path: str) -> tuple[int, int]:
        with self._lock:
            self.success_count += 1
            self.succeeded.append(path)
            return self.success_count, self.failed_count

    def record_failure(self, path: str, error: BaseException) -> tuple[int, int]:
        with self._lock:
            self.failed_count += 1
            self.failures.append(TransferFailure(path=path, error=error))
            return self.success_count, self.failed_count

    def mark_cancelled(self) -> None:
        with self._lock:
            self.cancelled = True

    @property
    def processed(self) -> int:
        with self._lock:
            return self.success_count + self.failed_count

    @property
    def has_failures(self) -> bool:
        with self._lock:
            return bool(self.failures)

    def snapshot_failures(self) -> tuple[TransferFailure, ...]:
        with self._lock:
            return tuple(self.failures)
