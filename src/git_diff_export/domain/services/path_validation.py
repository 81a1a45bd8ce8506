from __future__ import annotations

import os
import sys
from pathlib import PurePath, PureWindowsPath

_WINDOWS_INVALID_CHARS = '<>:"|?*'
_WINDOWS_RESERVED_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{index}" for index in range(1, 10)}
    | {f"LPT{index}" for index in range(1, 10)}
)


def validate_destination_path(value: str, platform: str | None = None) -> str:
    """Return the path unchanged or raise ValueError if the host OS cannot use it."""
    raw = str(value or "")
    if not raw.strip():
        raise ValueError("path cannot be empty")
    if "\x00" in raw:
        raise ValueError("path cannot contain null bytes")

    target = platform or sys.platform
    if target.startswith("win"):
        _validate_windows_path(raw)
    return raw


def _validate_windows_path(raw: str) -> None:
    path = PureWindowsPath(raw)
    body = raw[len(path.drive) :]
    for char in _WINDOWS_INVALID_CHARS:
        if char in body:
            raise ValueError(f"path contains invalid character: {char!r}")

    stem = path.name.split(".", 1)[0].upper()
    if stem in _WINDOWS_RESERVED_NAMES:
        raise ValueError(f"{stem!r} is a reserved name on Windows")

    if raw.endswith((" ", ".")) and path.name not in {".", ".."}:
        raise ValueError("path cannot end with space or period on Windows")


def is_outside_root(path: str) -> bool:
    """True when a tree-relative path escapes the tree root."""
    if path.startswith(".."):
        return True
    if os.path.isabs(path) or PurePath(path).is_absolute() or path.startswith("/"):
        return True
    normalized = os.path.normpath(path).replace("\\", "/")
    return normalized == ".." or normalized.startswith("../")
