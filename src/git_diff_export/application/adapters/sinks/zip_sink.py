from __future__ import annotations

import time
import zipfile
from pathlib import Path
from typing import BinaryIO

from git_diff_export.domain.errors import SinkPreparationError
from git_diff_export.domain.protocols.sink_port import SinkPort


class ZipSink(SinkPort):
    """Single-writer ZIP archive; zipfile cannot add entries concurrently."""

    requires_serial_writes = True

    def __init__(self, archive_path: Path) -> None:
        self.location = archive_path
        self._stream: BinaryIO | None = None
        self._archive: zipfile.ZipFile | None = None

    def prepare(self) -> None:
        try:
            self._stream = self.location.open("wb")
        except OSError as exc:
            raise SinkPreparationError(f"failed to create archive: {exc}") from exc
        self._archive = zipfile.ZipFile(self._stream, mode="w", compression=zipfile.ZIP_DEFLATED)

    def write(self, path: str, content: bytes) -> None:
        if self._archive is None:
            raise RuntimeError("zip sink is not prepared")
        info = zipfile.ZipInfo(path, date_time=time.localtime()[:6])
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        self._archive.writestr(info, content)

    def close(self) -> None:
        try:
            if self._archive is not None:
                self._archive.close()
        finally:
            self._archive = None
            if self._stream is not None:
                self._stream.close()
                self._stream = None
