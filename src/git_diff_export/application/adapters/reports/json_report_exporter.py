from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence, TextIO

from git_diff_export.config.settings_models import ExportConfiguration
from git_diff_export.domain.errors import ExportError
from git_diff_export.domain.models.disposition import Classification, Disposition
from git_diff_export.domain.models.file_change import ChangeStatus


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JsonReportExporter:
    _STATUS_KEYS = {
        ChangeStatus.ADDED: "added",
        ChangeStatus.MODIFIED: "modified",
        ChangeStatus.RENAMED: "renamed",
        ChangeStatus.COPIED: "copied",
        ChangeStatus.DELETED: "deleted",
    }
    _SKIP_KEYS = {
        Disposition.SKIPPED_IGNORED: "ignored",
        Disposition.SKIPPED_NOT_INCLUDED: "ignored",
        Disposition.SKIPPED_TOO_LARGE: "too_large",
        Disposition.SKIPPED_OUTSIDE_ROOT: "outside_repo",
    }

    def __init__(
        self,
        stream: TextIO | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._stream = stream
        self._clock = clock

    def build(
        self, config: ExportConfiguration, classifications: Sequence[Classification]
    ) -> dict[str, object]:
        counts = {key: 0 for key in ("added", "modified", "renamed", "copied", "deleted")}
        skipped = {"ignored": 0, "too_large": 0, "outside_repo": 0}
        files: list[dict[str, object]] = []

        for item in classifications:
            change = item.change
            status_key = self._STATUS_KEYS.get(change.status)
            if status_key:
                counts[status_key] += 1
            skip_key = self._SKIP_KEYS.get(item.disposition)
            if skip_key:
                skipped[skip_key] += 1

            entry: dict[str, object] = {
                "path": change.path,
                "status": change.status.value,
                "exported": item.exported,
            }
            if not item.exported:
                entry["reason"] = item.disposition.reason
            if change.old_path:
                entry["old_path"] = change.old_path
            files.append(entry)

        exported_at = self._clock().astimezone(timezone.utc).replace(microsecond=0)
        return {
            "from_commit": config.from_ref,
            "to_commit": config.to_ref,
            "exported_at": exported_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "summary": {
                "total_files": len(classifications),
                **counts,
                "skipped": skipped,
            },
            "files": files,
        }

    def render(
        self, config: ExportConfiguration, classifications: Sequence[Classification]
    ) -> str:
        return json.dumps(self.build(config, classifications), ensure_ascii=False, indent=2)

    def export(
        self, config: ExportConfiguration, classifications: Sequence[Classification]
    ) -> Path | None:
        payload = self.render(config, classifications)
        destination = config.json_file
        if destination is None:
            stream = self._stream or sys.stdout
            stream.write(payload + "\n")
            return None

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            tmp = destination.with_suffix(destination.suffix + ".tmp")
            tmp.write_text(payload + "\n", encoding="utf-8")
            tmp.replace(destination)
        except OSError as exc:
            raise ExportError(f"failed to write JSON file: {exc}") from exc
        return destination
