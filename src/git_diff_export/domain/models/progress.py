from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    path: str
    success_count: int
    failed_count: int
    total: int
    failed: bool = False

    @property
    def processed(self) -> int:
        return self.success_count + self.failed_count

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return self.processed / self.total * 100
