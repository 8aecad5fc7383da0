"""Byte-size normalization shared by every catalog tier."""

import re

KIB = 1024
MIB = 1024**2
GIB = 1024**3
TIB = 1024**4

# Rough download size per billion parameters for the default quantization.
BYTES_PER_BILLION_PARAMS = GIB // 2

_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(tib|tb|gib|gb|mib|mb|kib|kb|b|m|k)?", re.IGNORECASE)
_PARAM_TAG_RE = re.compile(r"(?:^|[:\-_])(\d+(?:\.\d+)?)([bm])(?:$|[\-_])", re.IGNORECASE)

_UNITS = {
    "tib": TIB,
    "tb": TIB,
    "gib": GIB,
    "gb": GIB,
    "mib": MIB,
    "mb": MIB,
    "kib": KIB,
    "kb": KIB,
}


def parameter_count_bytes(billions: float) -> int:
    return int(billions * BYTES_PER_BILLION_PARAMS)


def parse_size(raw) -> int | None:
    """Convert a raw size field to bytes.

    Accepts a byte count (int/float) or a human string such as ``"3.8 GB"``.
    A bare ``"7B"``/``"270M"`` is a parameter count, not bytes, and is turned
    into an estimate. A string without a unit must be a whole byte count.
    Returns None for anything unparseable or non-positive.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return int(raw) if raw > 0 else None
    if not isinstance(raw, str):
        return None

    match = _SIZE_RE.fullmatch(raw.strip().replace(",", ""))
    if not match:
        return None
    number = float(match.group(1))
    unit = (match.group(2) or "").lower()
    if number <= 0:
        return None
    if not unit and not number.is_integer():
        return None

    if unit in _UNITS:
        return int(number * _UNITS[unit])
    if unit == "b":
        # "7B" is a parameter count; a four-digit "B" value reads as bytes.
        if number < 1000:
            return parameter_count_bytes(number)
        return int(number)
    if unit == "m":
        return parameter_count_bytes(number / 1000)
    if unit == "k":
        return int(number * KIB)
    return int(number)


def size_from_tag(model_id: str) -> int | None:
    """Estimate from a parameter-count tag such as ``llama3.1:8b`` or ``gemma3:270m``."""
    _, _, tag = model_id.partition(":")
    if not tag:
        return None
    match = _PARAM_TAG_RE.search(tag)
    if not match:
        return None
    number = float(match.group(1))
    if match.group(2).lower() == "m":
        number /= 1000
    return parameter_count_bytes(number) if number > 0 else None
