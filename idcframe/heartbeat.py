"""Process heartbeats kept in a shared, file-backed table.

Every process registers a record (pid, name, timeout, last beat time) in a
table of fixed size that all processes map into memory; a file lock guards
changes to the table.
"""

from __future__ import annotations

import fcntl
import mmap
import os
import struct
import tempfile
import time
from dataclasses import dataclass
from typing import Any, IO

__all__ = ["ProcInfo", "ProcessHeartbeat", "list_processes", "MAX_PROCS", "DEFAULT_PATH"]

MAX_PROCS = 1000
PNAME_MAX = 50
DEFAULT_PATH = os.path.join(tempfile.gettempdir(), "idcframe-heartbeat")

_RECORD = struct.Struct("<i52siq")
_ATIME = struct.Struct("<q")
_ATIME_OFFSET = _RECORD.size - _ATIME.size
_TABLE_SIZE = _RECORD.size * MAX_PROCS


@dataclass
class ProcInfo:
    """One heartbeat record."""

    pid: int = 0
    pname: str = ""
    timeout: int = 0
    atime: int = 0

    def pack(self) -> bytes:
        """Encode the record; the name is cut to 50 bytes."""
        name = self.pname.encode("utf-8")[:PNAME_MAX]
        return _RECORD.pack(self.pid, name, self.timeout, self.atime)

    @classmethod
    def unpack(cls, data: bytes) -> ProcInfo:
        """Decode a record produced by pack()."""
        pid, name, timeout, atime = _RECORD.unpack(data)
        pname = name.split(b"\0", 1)[0].decode("utf-8", "ignore")
        return cls(pid=pid, pname=pname, timeout=timeout, atime=atime)


def _offset(index: int) -> int:
    return index * _RECORD.size


class ProcessHeartbeat:
    """The current process's entry in the heartbeat table."""

    def __init__(self, path: str = DEFAULT_PATH) -> None:
        self.path = path
        self._file: IO[bytes] | None = None
        self._map: mmap.mmap | None = None
        self._pos: int | None = None

    @property
    def position(self) -> int | None:
        """The slot held in the table, or None when not registered."""
        return self._pos

    def _detach(self) -> None:
        if self._map is not None:
            self._map.close()
            self._map = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def add(self, timeout: int, pname: str = "", logfile: Any = None) -> None:
        """Register this process with ``timeout`` seconds and name ``pname``.

        A slot left behind by an earlier process with the same pid is reused.
        A full table raises RuntimeError, noted in ``logfile`` when given.
        """
        if self._pos is not None:
            return
        pid = os.getpid()
        info = ProcInfo(pid=pid, pname=pname, timeout=timeout, atime=int(time.time()))
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o666)
        self._file = os.fdopen(fd, "r+b")
        try:
            fcntl.flock(self._file.fileno(), fcntl.LOCK_EX)
            try:
                if os.fstat(self._file.fileno()).st_size < _TABLE_SIZE:
                    self._file.truncate(_TABLE_SIZE)
                self._map = mmap.mmap(self._file.fileno(), _TABLE_SIZE)
                pids = [
                    _RECORD.unpack_from(self._map, _offset(index))[0]
                    for index in range(MAX_PROCS)
                ]
                if pid in pids:
                    slot = pids.index(pid)
                elif 0 in pids:
                    slot = pids.index(0)
                else:
                    message = "heartbeat table is full"
                    if logfile is not None:
                        logfile.write(message + "\n")
                    raise RuntimeError(message)
                self._map[_offset(slot):_offset(slot + 1)] = info.pack()
                self._pos = slot
            finally:
                fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
        except BaseException:
            self._detach()
            raise

    def update(self) -> None:
        """Set this process's last beat time to now."""
        if self._pos is None or self._map is None:
            raise RuntimeError("process is not registered")
        _ATIME.pack_into(self._map, _offset(self._pos) + _ATIME_OFFSET, int(time.time()))

    def close(self) -> None:
        """Remove this process's record and release the table."""
        if self._pos is not None and self._map is not None:
            self._map[_offset(self._pos):_offset(self._pos + 1)] = bytes(_RECORD.size)
        self._pos = None
        self._detach()

    def __enter__(self) -> ProcessHeartbeat:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def list_processes(path: str = DEFAULT_PATH) -> list[ProcInfo]:
    """Return every registered record in the table at ``path``."""
    try:
        with open(path, "rb") as fin:
            data = fin.read(_TABLE_SIZE)
    except FileNotFoundError:
        return []
    records = (
        ProcInfo.unpack(data[start:start + _RECORD.size])
        for start in range(0, len(data) - _RECORD.size + 1, _RECORD.size)
    )
    return [info for info in records if info.pid != 0]