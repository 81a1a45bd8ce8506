from __future__ import annotations

from typing import Protocol, Sequence

from git_diff_export.domain.models.file_change import FileChange


class ChangeProviderPort(Protocol):
    def is_repository_present(self) -> bool: ...

    def has_any_commit(self) -> bool: ...

    def validate_revision(self, ref: str) -> None: ...

    def get_changed_files(self, from_ref: str, to_ref: str) -> Sequence[FileChange]: ...

    def get_file_content(self, ref: str, path: str) -> bytes: ...

    def is_outside_tree_root(self, path: str) -> bool: ...
