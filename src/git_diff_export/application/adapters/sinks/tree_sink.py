from __future__ import annotations

import shutil
from pathlib import Path

from git_diff_export.domain.errors import SinkPreparationError
from git_diff_export.domain.protocols.sink_port import SinkPort


class TreeSink(SinkPort):
    requires_serial_writes = False

    def __init__(self, output_dir: Path, overwrite: bool = False) -> None:
        self.location = output_dir
        self._overwrite = overwrite

    def prepare(self) -> None:
        root = self.location
        if root.exists():
            if not root.is_dir():
                raise SinkPreparationError(f"output path exists and is not a directory: {root}")
            if not self._overwrite:
                raise SinkPreparationError(
                    f"output directory already exists (use --overwrite to replace): {root}"
                )
            try:
                shutil.rmtree(root)
            except OSError as exc:
                raise SinkPreparationError(f"failed to clear output directory: {exc}") from exc

        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SinkPreparationError(f"failed to create output directory: {exc}") from exc

    def write(self, path: str, content: bytes) -> None:
        destination = self.location / path
        # Workers may race on shared parents.
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)

    def close(self) -> None:
        return None
