"""Time helpers: formatting timestamps, parsing ``yyyymmddhh24miss`` strings,
shifting string times and a simple elapsed-time timer."""

from __future__ import annotations

import time

from idcframe.textutil import pick_number

__all__ = ["format_time", "local_time", "str_to_time", "add_time", "Timer"]

DEFAULT_FORMAT = "yyyy-mm-dd hh24:mi:ss"

_FORMATS: dict[str, str] = {
    "yyyy-mm-dd hh24:mi:ss": "{Y:04d}-{m:02d}-{d:02d} {H:02d}:{M:02d}:{S:02d}",
    "yyyy-mm-dd hh24:mi": "{Y:04d}-{m:02d}-{d:02d} {H:02d}:{M:02d}",
    "yyyy-mm-dd hh24": "{Y:04d}-{m:02d}-{d:02d} {H:02d}",
    "yyyy-mm-dd": "{Y:04d}-{m:02d}-{d:02d}",
    "yyyy-mm": "{Y:04d}-{m:02d}",
    "yyyymmddhh24miss": "{Y:04d}{m:02d}{d:02d}{H:02d}{M:02d}{S:02d}",
    "yyyymmddhh24mi": "{Y:04d}{m:02d}{d:02d}{H:02d}{M:02d}",
    "yyyymmddhh24": "{Y:04d}{m:02d}{d:02d}{H:02d}",
    "yyyymmdd": "{Y:04d}{m:02d}{d:02d}",
    "hh24miss": "{H:02d}{M:02d}{S:02d}",
    "hh24mi": "{H:02d}{M:02d}",
    "hh24": "{H:02d}",
    "mi": "{M:02d}",
}


def format_time(ttime: float, fmt: str = "") -> str:
    """Format a Unix timestamp as local time.

    ``fmt`` is one of the supported patterns such as ``yyyy-mm-dd hh24:mi:ss``
    (the default, also chosen by an empty string) or ``yyyymmddhh24miss``.
    An unknown pattern raises ValueError.
    """
    pattern = _FORMATS.get(fmt or DEFAULT_FORMAT)
    if pattern is None:
        raise ValueError(f"unsupported time format {fmt!r}")
    tm = time.localtime(int(ttime))
    return pattern.format(
        Y=tm.tm_year, m=tm.tm_mon, d=tm.tm_mday, H=tm.tm_hour, M=tm.tm_min, S=tm.tm_sec
    )


def local_time(fmt: str = "", offset: int = 0) -> str:
    """Return the current local time shifted by ``offset`` seconds."""
    return format_time(int(time.time()) + offset, fmt)


def str_to_time(s: str) -> int:
    """Parse a time holding exactly the 14 digits ``yyyymmddhh24miss``.

    Separators are ignored, so ``2021-12-05 08:30:45`` works too.
    Anything else raises ValueError.
    """
    digits = pick_number(s)
    if len(digits) != 14:
        raise ValueError(f"time {s!r} does not hold yyyymmddhh24miss")
    fields = (
        int(digits[0:4]),
        int(digits[4:6]),
        int(digits[6:8]),
        int(digits[8:10]),
        int(digits[10:12]),
        int(digits[12:14]),
        0,
        0,
        0,
    )
    try:
        return int(time.mktime(fields))
    except (OverflowError, ValueError) as exc:
        raise ValueError(f"time {s!r} is out of range") from exc


def add_time(s: str, offset: int, fmt: str = "") -> str:
    """Shift the string time ``s`` by ``offset`` seconds and format it."""
    return format_time(str_to_time(s) + offset, fmt)


class Timer:
    """Measures elapsed seconds; every reading restarts the count."""

    def __init__(self) -> None:
        self._start = 0.0
        self.start()

    def start(self) -> None:
        """Start counting from now."""
        self._start = time.monotonic()

    def elapsed(self) -> float:
        """Return seconds since the last start and start again."""
        now = time.monotonic()
        spent = now - self._start
        self._start = now
        return spent