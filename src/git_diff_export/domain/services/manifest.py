from __future__ import annotations

from typing import Iterable

from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.models.transfer_outcome import TransferOutcome

SUMMARY_ENTRY = "summary.txt"
ERRORS_ENTRY = "errors.txt"

_SECTIONS: tuple[tuple[str, tuple[ChangeStatus, ...]], ...] = (
    ("new files:", (ChangeStatus.ADDED,)),
    ("modified:", (ChangeStatus.MODIFIED,)),
    ("renamed:", (ChangeStatus.RENAMED, ChangeStatus.COPIED)),
    ("deleted:", (ChangeStatus.DELETED,)),
)


def _entry(change: FileChange) -> str:
    if change.status is ChangeStatus.RENAMED:
        return f"{change.path} (previously {change.old_path})"
    if change.status is ChangeStatus.COPIED:
        return f"{change.path} (copied from {change.old_path})"
    return change.path


def generate_manifest(changes: Iterable[FileChange]) -> str:
    """Render the change list grouped as new, modified, renamed, deleted.

    Copies share the renamed section but are labelled ``copied from``.
    Empty sections are left out and the text has no trailing newline.
    """
    buckets: dict[str, list[str]] = {header: [] for header, _ in _SECTIONS}
    for change in changes:
        for header, statuses in _SECTIONS:
            if change.status in statuses:
                buckets[header].append(_entry(change))
                break

    lines: list[str] = []
    for header, _ in _SECTIONS:
        entries = buckets[header]
        if not entries:
            continue
        lines.append(header)
        lines.extend(f"- {entry}" for entry in sorted(entries))
    return "\n".join(lines)


def generate_error_report(outcome: TransferOutcome) -> str:
    """One `path: message` line per failure, in the order they were recorded."""
    return "\n".join(
        f"{failure.path}: {failure.message}" for failure in outcome.snapshot_failures()
    )
