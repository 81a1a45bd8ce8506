from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ChangeStatus(StrEnum):
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"

    @classmethod
    def from_code(cls, code: str) -> "ChangeStatus":
        letter = str(code or "")[:1].upper()
        try:
            return cls(letter)
        except ValueError:
            return cls.UNKNOWN

    @property
    def carries_old_path(self) -> bool:
        return self in (ChangeStatus.RENAMED, ChangeStatus.COPIED)

    @property
    def is_copyable(self) -> bool:
        return self in _COPYABLE


_COPYABLE = frozenset(
    {
        ChangeStatus.ADDED,
        ChangeStatus.MODIFIED,
        ChangeStatus.RENAMED,
        ChangeStatus.COPIED,
    }
)


@dataclass(frozen=True, slots=True)
class FileChange:
    status: ChangeStatus
    path: str
    old_path: str = ""

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("FileChange path cannot be empty")
        if self.status.carries_old_path and not self.old_path:
            raise ValueError(
                f"{self.status.name.lower()} change requires a previous path: {self.path}"
            )
        if not self.status.carries_old_path and self.old_path:
            raise ValueError(
                f"{self.status.name.lower()} change cannot carry a previous path: {self.path}"
            )

    def describe(self) -> str:
        if self.status.carries_old_path:
            return f"{self.status.value}: {self.path} (from {self.old_path})"
        return f"{self.status.value}: {self.path}"
