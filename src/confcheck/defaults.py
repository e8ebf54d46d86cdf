"""Apply defaults to fields left at their zero value.

Each helper overwrites the referenced field only when it currently holds the
zero value of its kind (or ``None``). Call them before running a checker when
zero means "not configured" for a field.
"""

from datetime import timedelta

from .tags import FieldRef

UINT16_MAX = 0xFFFF


def _set_if_zero(entry: FieldRef, zero, default) -> None:
    current = entry.get()
    if current is None or current == zero:
        entry.set(default)


def set_default_string(entry: FieldRef, default: str) -> None:
    _set_if_zero(entry, "", default)


def set_default_int(entry: FieldRef, default: int) -> None:
    _set_if_zero(entry, 0, default)


def set_default_uint16(entry: FieldRef, default: int) -> None:
    if not 0 <= default <= UINT16_MAX:
        raise ValueError(f"default must be between 0-{UINT16_MAX}, got: {default}")
    _set_if_zero(entry, 0, default)


def set_default_uint(entry: FieldRef, default: int) -> None:
    if default < 0:
        raise ValueError(f"default must be >= 0, got: {default}")
    _set_if_zero(entry, 0, default)


def set_default_float(entry: FieldRef, default: float) -> None:
    _set_if_zero(entry, 0.0, default)


def set_default_duration(entry: FieldRef, default: timedelta) -> None:
    _set_if_zero(entry, timedelta(0), default)
