from __future__ import annotations

from pathlib import Path
from typing import Protocol


class SinkPort(Protocol):
    location: Path
    requires_serial_writes: bool

    def prepare(self) -> None: ...

    def write(self, path: str, content: bytes) -> None: ...

    def close(self) -> None: ...
