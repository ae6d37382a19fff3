"""File objects for writing through a temporary name, reading lines with an
optional end marker, and a timestamped log file that rotates by size."""

from __future__ import annotations

import contextlib
import os
import threading
from collections.abc import Iterator
from typing import IO, Any

from idcframe.fileutil import make_dirs
from idcframe.timeutil import local_time

__all__ = ["OutFile", "InFile", "LogFile"]

_WRITE_MODES = frozenset({"w", "a", "wb", "ab"})


def _open_for_write(path: str, mode: str) -> IO[Any]:
    if "b" in mode:
        return open(path, mode)
    return open(path, mode, encoding="utf-8", newline="")


class OutFile:
    """A file written under ``<name>.tmp`` and renamed once complete."""

    def __init__(self) -> None:
        self._file: IO[Any] | None = None
        self.filename = ""
        self._tmpname = ""
        self._buffered = True

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(
        self,
        filename: str,
        tmp: bool = True,
        mode: str = "w",
        buffered: bool = True,
    ) -> None:
        """Open ``filename`` for writing, creating its directories.

        With ``tmp`` the data goes to ``filename + ".tmp"`` until
        close_and_rename(). ``mode`` is one of ``w``, ``a``, ``wb``, ``ab``;
        without ``buffered`` every write is flushed at once.
        """
        if mode not in _WRITE_MODES:
            raise ValueError(f"unsupported mode {mode!r}")
        if self._file is not None:
            self._file.close()
            self._file = None
        self.filename = filename
        self._tmpname = filename + ".tmp" if tmp else ""
        self._buffered = buffered
        make_dirs(filename, True)
        self._file = _open_for_write(self._tmpname or filename, mode)

    def _require(self) -> IO[Any]:
        if self._file is None:
            raise ValueError("file is not open")
        return self._file

    def write(self, data: str | bytes) -> None:
        """Write text or bytes, matching the mode the file was opened with."""
        fout = self._require()
        fout.write(data)
        if not self._buffered:
            fout.flush()

    def close_and_rename(self) -> None:
        """Close the file and give the temporary file its final name."""
        fout = self._require()
        fout.close()
        self._file = None
        if self._tmpname:
            os.replace(self._tmpname, self.filename)

    def close(self) -> None:
        """Close the file and discard the temporary file, if any."""
        if self._file is None:
            return
        self._file.close()
        self._file = None
        if self._tmpname:
            with contextlib.suppress(FileNotFoundError):
                os.remove(self._tmpname)

    def __enter__(self) -> OutFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._file is None:
            return
        if exc_type is None:
            self.close_and_rename()
        else:
            self.close()


class InFile:
    """A file read line by line or in blocks."""

    def __init__(self) -> None:
        self._file: IO[Any] | None = None
        self.filename = ""
        self._binary = False

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self, filename: str, binary: bool = False) -> None:
        """Open ``filename`` for reading, as UTF-8 text or as bytes."""
        self.close()
        self.filename = filename
        self._binary = binary
        if binary:
            self._file = open(filename, "rb")
        else:
            self._file = open(filename, "r", encoding="utf-8", newline="\n")

    def _require(self) -> IO[Any]:
        if self._file is None:
            raise ValueError("file is not open")
        return self._file

    def read_line(self, end_marker: str = "") -> str | None:
        """Return the next record without its final newline, or None at the end.

        Without ``end_marker`` a record is one line. With it, lines are joined
        (newlines kept) until the record ends with the marker. Only lines that
        end in a newline count; a record cut off by the end of file is dropped.
        """
        fin = self._require()
        if self._binary:
            raise ValueError("read_line needs a file opened as text")
        buf = ""
        while True:
            line = fin.readline()
            if not line.endswith("\n"):
                return None
            buf += line[:-1]
            if not end_marker or buf.endswith(end_marker):
                return buf
            buf += "\n"

    def read(self, size: int = -1) -> str | bytes:
        """Read up to ``size`` characters or bytes; all the rest when negative."""
        return self._require().read(size)

    def close_and_remove(self) -> None:
        """Close the file and delete it."""
        fin = self._require()
        fin.close()
        self._file = None
        os.remove(self.filename)

    def close(self) -> None:
        """Close the file."""
        if self._file is None:
            return
        self._file.close()
        self._file = None

    def __iter__(self) -> Iterator[str]:
        while (line := self.read_line()) is not None:
            yield line

    def __enter__(self) -> InFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class LogFile:
    """A log file whose entries start with the local time.

    When backups are on and the file grows past ``max_size_mb`` megabytes it
    is renamed to ``<name>.<yyyymmddhh24miss>`` and a new file is started.
    """

    def __init__(self, max_size_mb: int = 100) -> None:
        self.max_size_mb = max_size_mb
        self.filename = ""
        self._file: IO[str] | None = None
        self._mode = "a"
        self._backup = True
        self._buffered = False
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(
        self,
        filename: str,
        mode: str = "a",
        backup: bool = True,
        buffered: bool = False,
    ) -> None:
        """Open the log, creating its directories; ``mode`` is ``a`` or ``w``.

        Processes sharing one log file should pass ``backup=False``.
        """
        if mode not in ("a", "w"):
            raise ValueError(f"unsupported mode {mode!r}")
        self.close()
        self.filename = filename
        self._mode = mode
        self._backup = backup
        self._buffered = buffered
        make_dirs(filename, True)
        self._file = self._open_file()

    def _open_file(self) -> IO[str]:
        return open(self.filename, self._mode, encoding="utf-8", newline="")

    def _require(self) -> IO[str]:
        if self._file is None:
            raise ValueError("log file is not open")
        return self._file

    def _rotate(self) -> None:
        fout = self._require()
        if not self._backup or fout.tell() <= self.max_size_mb * 1024 * 1024:
            return
        fout.close()
        self._file = None
        os.replace(self.filename, f"{self.filename}.{local_time('yyyymmddhh24miss')}")
        self._file = self._open_file()

    def _emit(self, text: str) -> None:
        fout = self._require()
        fout.write(text)
        if not self._buffered:
            fout.flush()

    def write(self, fmt: str, *args: Any) -> None:
        """Write ``fmt % args`` after the current time and a space."""
        text = fmt % args if args else fmt
        with self._lock:
            self._require()
            self._rotate()
            self._emit(f"{local_time()} {text}")

    def __lshift__(self, value: Any) -> LogFile:
        with self._lock:
            self._emit(str(value))
        return self

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> LogFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()