from __future__ import annotations

import posixpath
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Callable, Sequence

from git_diff_export.domain.models.disposition import Classification, Disposition
from git_diff_export.domain.models.file_change import ChangeStatus, FileChange
from git_diff_export.domain.protocols.change_provider_port import ChangeProviderPort
from git_diff_export.domain.protocols.logger_port import LoggerPort
from git_diff_export.domain.services.size_format import format_size


def _negation(rule: str) -> str:
    # fnmatch only negates classes spelled "[!...]".
    return rule.replace("[^", "[!")


def glob_match(pattern: str, path: str) -> bool:
    """Shell-glob match where wildcards never cross a ``/``."""
    pattern_parts = [_negation(part) for part in pattern.split("/")]
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(fnmatchcase(part, rule) for rule, part in zip(pattern_parts, path_parts))


def matches_any(patterns: Sequence[str], path: str) -> bool:
    base = posixpath.basename(path)
    return any(glob_match(pattern, path) or glob_match(pattern, base) for pattern in patterns)


@dataclass(frozen=True, slots=True)
class FilterRules:
    include_patterns: tuple[str, ...] = ()
    ignore_patterns: tuple[str, ...] = ()
    max_size: int = 0


Rule = Callable[[FileChange], bool]


class DecisionEngine:
    """Assigns exactly one disposition to every change.

    Rules are evaluated in order and the first one that fires wins:
    deleted, not copyable, not included, ignored, outside root, too large.
    The size rule is last because it is the only one that reads content.
    """

    def __init__(
        self,
        provider: ChangeProviderPort,
        rules: FilterRules,
        to_ref: str,
        logger: LoggerPort,
    ) -> None:
        self._provider = provider
        self._rules = rules
        self._to_ref = to_ref
        self._logger = logger
        self._chain: tuple[tuple[Rule, Disposition], ...] = (
            (self._is_deleted, Disposition.SKIPPED_DELETED),
            (self._is_not_copyable, Disposition.SKIPPED_NOT_COPYABLE),
            (self._is_not_included, Disposition.SKIPPED_NOT_INCLUDED),
            (self._is_ignored, Disposition.SKIPPED_IGNORED),
            (self._is_outside_root, Disposition.SKIPPED_OUTSIDE_ROOT),
            (self._is_too_large, Disposition.SKIPPED_TOO_LARGE),
        )

    @staticmethod
    def _is_deleted(change: FileChange) -> bool:
        return change.status is ChangeStatus.DELETED

    @staticmethod
    def _is_not_copyable(change: FileChange) -> bool:
        return not change.status.is_copyable

    def _is_not_included(self, change: FileChange) -> bool:
        include = self._rules.include_patterns
        return bool(include) and not matches_any(include, change.path)

    def _is_ignored(self, change: FileChange) -> bool:
        return matches_any(self._rules.ignore_patterns, change.path)

    def _is_outside_root(self, change: FileChange) -> bool:
        return self._provider.is_outside_tree_root(change.path)

    def _is_too_large(self, change: FileChange) -> bool:
        limit = self._rules.max_size
        if limit <= 0:
            return False
        try:
            size = len(self._provider.get_file_content(self._to_ref, change.path))
        except Exception as exc:
            # Unknown size: let the transfer surface the read failure.
            self._logger.debug("Size probe failed for %s: %s", change.path, exc)
            return False
        if size <= limit:
            return False
        self._logger.warning(
            "Skipped (too large): %s (%s > %s)",
            change.path,
            format_size(size),
            format_size(limit),
        )
        return True

    def classify_one(self, change: FileChange) -> Classification:
        for predicate, disposition in self._chain:
            if predicate(change):
                self._log_skip(change, disposition)
                return Classification(change=change, disposition=disposition)
        return Classification(change=change, disposition=Disposition.WILL_EXPORT)

    def classify(self, changes: Sequence[FileChange]) -> list[Classification]:
        return [self.classify_one(change) for change in changes]

    def _log_skip(self, change: FileChange, disposition: Disposition) -> None:
        if disposition in (Disposition.SKIPPED_DELETED, Disposition.SKIPPED_OUTSIDE_ROOT):
            self._logger.warning("%s: %s", disposition.reason.capitalize(), change.path)
        elif disposition is not Disposition.SKIPPED_TOO_LARGE:
            self._logger.info("%s: %s", disposition.reason.capitalize(), change.path)


def export_set(classifications: Sequence[Classification]) -> list[FileChange]:
    return [item.change for item in classifications if item.exported]
