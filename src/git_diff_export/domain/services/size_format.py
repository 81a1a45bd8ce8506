from __future__ import annotations

_KB = 1024
_MB = 1024 * _KB
_GB = 1024 * _MB
_TB = 1024 * _GB

_MULTIPLIERS = {
    "": 1,
    "B": 1,
    "K": _KB,
    "KB": _KB,
    "M": _MB,
    "MB": _MB,
    "G": _GB,
    "GB": _GB,
    "T": _TB,
    "TB": _TB,
}


def format_size(size: int) -> str:
    if size >= _GB:
        return f"{size / _GB:.1f}GB"
    if size >= _MB:
        return f"{size / _MB:.1f}MB"
    if size >= _KB:
        return f"{size / _KB:.1f}KB"
    return f"{size}B"


def parse_size(value: str) -> int:
    """Parse ``10MB``/``500k``/``1024`` into a byte count."""
    text = str(value or "").strip().upper()
    if not text:
        raise ValueError("empty size string")

    index = 0
    while index < len(text) and (text[index].isdigit() or text[index] == "."):
        index += 1
    if index == 0:
        if text.startswith("-"):
            raise ValueError("size cannot be negative")
        raise ValueError(f"invalid size: {value!r}")

    number, suffix = text[:index], text[index:].strip()
    if not number.isdigit():
        raise ValueError(f"invalid size number: {number!r}")
    if suffix not in _MULTIPLIERS:
        raise ValueError(f"unknown size suffix: {suffix!r}")
    return int(number) * _MULTIPLIERS[suffix]
