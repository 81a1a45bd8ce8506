from __future__ import annotations

from pathlib import Path

import pytest

from git_diff_export.domain.models.file_change import ChangeStatus, FileChange


@pytest.fixture
def temp_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "workspace"
    root.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def sample_changes() -> list[FileChange]:
    return [
        FileChange(ChangeStatus.ADDED, "new.go"),
        FileChange(ChangeStatus.MODIFIED, "mod.go"),
        FileChange(ChangeStatus.DELETED, "gone.go"),
    ]
