from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from git_diff_export.domain.models.file_change import FileChange


class Disposition(StrEnum):
    WILL_EXPORT = "will_export"
    SKIPPED_DELETED = "skipped_deleted"
    SKIPPED_NOT_COPYABLE = "skipped_not_copyable"
    SKIPPED_NOT_INCLUDED = "skipped_not_included"
    SKIPPED_IGNORED = "skipped_ignored"
    SKIPPED_OUTSIDE_ROOT = "skipped_outside_root"
    SKIPPED_TOO_LARGE = "skipped_too_large"

    @property
    def reason(self) -> str:
        """Short reason string used by reports; empty for exported files."""
        return _REASONS[self]


_REASONS = {
    Disposition.WILL_EXPORT: "",
    Disposition.SKIPPED_DELETED: "deleted",
    Disposition.SKIPPED_NOT_COPYABLE: "not copyable",
    Disposition.SKIPPED_NOT_INCLUDED: "not included",
    Disposition.SKIPPED_IGNORED: "ignored",
    Disposition.SKIPPED_OUTSIDE_ROOT: "outside repo",
    Disposition.SKIPPED_TOO_LARGE: "too large",
}


@dataclass(frozen=True, slots=True)
class Classification:
    change: FileChange
    disposition: Disposition

    @property
    def exported(self) -> bool:
        return self.disposition is Disposition.WILL_EXPORT
