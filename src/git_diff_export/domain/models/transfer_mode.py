from __future__ import annotations

from enum import StrEnum


class TransferMode(StrEnum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
