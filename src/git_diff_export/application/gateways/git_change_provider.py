from __future__ import annotations

import subprocess
from enum import StrEnum
from pathlib import Path
from typing import Sequence

from git_diff_export.domain.errors import ChangeProviderError
from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.services.path_validation import is_outside_root


class _GitCommand(StrEnum):
    CAT_FILE = "cat-file"
    DIFF = "diff"
    REV_PARSE = "rev-parse"
    SHOW = "show"


class GitChangeProvider(ChangeProviderPort):
    def __init__(
        self,
        work_dir: Path | None = None,
        git_bin: str = "git",
        timeout_seconds: int = 120,
    ) -> None:
        self._work_dir = work_dir
        self._git_bin = git_bin
        self._timeout_seconds = max(1, int(timeout_seconds))

    def _run(self, command: _GitCommand, *args: str) -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            [self._git_bin, "-c", "core.quotepath=off", command.value, *args],
            cwd=self._work_dir,
            check=True,
            capture_output=True,
            timeout=self._timeout_seconds,
        )

    def _succeeds(self, command: _GitCommand, *args: str) -> bool:
        try:
            self._run(command, *args)
        except (OSError, subprocess.SubprocessError):
            return False
        return True

    @staticmethod
    def _stderr(exc: subprocess.CalledProcessError) -> str:
        text = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        return text or f"exit status {exc.returncode}"

    def is_repository_present(self) -> bool:
        return self._succeeds(_GitCommand.REV_PARSE, "--git-dir")

    def has_any_commit(self) -> bool:
        return self._succeeds(_GitCommand.REV_PARSE, "--verify", "--quiet", "HEAD")

    def validate_revision(self, ref: str) -> None:
        try:
            result = self._run(_GitCommand.CAT_FILE, "-t", f"{ref}^{{commit}}")
        except subprocess.CalledProcessError:
            raise ChangeProviderError("invalid commit reference") from None
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ChangeProviderError(f"git cat-file failed: {exc}") from exc
        if result.stdout.decode("utf-8", errors="replace").strip() != "commit":
            raise ChangeProviderError("invalid commit reference")

    def get_changed_files(self, from_ref: str, to_ref: str) -> list[FileChange]:
        try:
            result = self._run(_GitCommand.DIFF, "--name-status", "-M", "-C", from_ref, to_ref)
        except subprocess.CalledProcessError as exc:
            raise ChangeProviderError(f"git diff failed: {self._stderr(exc)}") from exc
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ChangeProviderError(f"git diff failed: {exc}") from exc
        return parse_name_status(result.stdout.decode("utf-8", errors="surrogateescape"))

    def get_file_content(self, ref: str, path: str) -> bytes:
        try:
            return self._run(_GitCommand.SHOW, f"{ref}:{path}").stdout
        except subprocess.CalledProcessError as exc:
            raise ChangeProviderError(f"git show failed: {self._stderr(exc)}") from exc
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ChangeProviderError(f"git show failed: {exc}") from exc

    def is_outside_tree_root(self, path: str) -> bool:
        return is_outside_root(path)


def parse_name_status(output: str) -> list[FileChange]:
    """Parse ``git diff --name-status`` output; similarity scores are dropped."""
    changes: list[FileChange] = []
    for line in output.splitlines():
        if not line.strip() or ".git/" in line:
            continue
        changes.append(_parse_line(line))
    return changes


def _split_fields(line: str) -> Sequence[str]:
    if "\t" in line:
        return [field for field in line.split("\t") if field]
    return line.split()


def _parse_line(line: str) -> FileChange:
    fields = _split_fields(line)
    if len(fields) < 2:
        raise ChangeProviderError(f"invalid diff line: {line}")

    status = ChangeStatus.from_code(fields[0])
    if status.carries_old_path:
        if len(fields) < 3:
            raise ChangeProviderError(f"invalid rename/copy line: {line}")
        return FileChange(status=status, path=fields[2], old_path=fields[1])
    return FileChange(status=status, path=fields[1])
