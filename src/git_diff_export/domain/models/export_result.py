from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from git_diff_export.domain.models.disposition import Classification
from git_diff_export.domain.models.transfer_outcome import TransferOutcome


@dataclass(frozen=True, slots=True)
class ExportResult:
    classifications: tuple[Classification, ...]
    outcome: TransferOutcome | None
    destination: Path | None

    @property
    def exported_count(self) -> int:
        return sum(1 for item in self.classifications if item.exported)

    @property
    def skipped_count(self) -> int:
        return len(self.classifications) - self.exported_count

    @property
    def has_failures(self) -> bool:
        return self.outcome is not None and self.outcome.failed_count > 0

    @property
    def cancelled(self) -> bool:
        return self.outcome is not None and self.outcome.cancelled
