from __future__ import annotations

import io
import tarfile
import time
from pathlib import Path

from git_diff_export.domain.errors import SinkPreparationError
from git_diff_export.domain.protocols.sink_port import SinkPort


class TarSink(SinkPort):
    """Single-writer TAR archive, optionally gzip compressed.

    Tar headers carry the entry size, so each entry is written from a
    fully buffered payload.
    """

    requires_serial_writes = True

    def __init__(self, archive_path: Path, compressed: bool = False) -> None:
        self.location = archive_path
        self._compressed = compressed
        self._archive: tarfile.TarFile | None = None

    def prepare(self) -> None:
        mode = "w:gz" if self._compressed else "w"
        try:
            self._archive = tarfile.open(self.location, mode=mode)
        except OSError as exc:
            raise SinkPreparationError(f"failed to create archive: {exc}") from exc

    def write(self, path: str, content: bytes) -> None:
        if self._archive is None:
            raise RuntimeError("tar sink is not prepared")
        info = tarfile.TarInfo(name=path)
        info.size = len(content)
        info.mode = 0o644
        info.mtime = int(time.time())
        self._archive.addfile(info, io.BytesIO(content))

    def close(self) -> None:
        if self._archive is None:
            return
        archive, self._archive = self._archive, None
        archive.close()
