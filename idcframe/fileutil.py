"""File helpers: creating directories, file sizes and times, renaming and
copying files, and listing directory contents that match name patterns."""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterator
from dataclasses import dataclass

from idcframe.textutil import match_str
from idcframe.timeutil import format_time, str_to_time

__all__ = [
    "make_dirs",
    "file_size",
    "file_mtime",
    "set_mtime",
    "rename_file",
    "copy_file",
    "FileEntry",
    "DirReader",
]

_DEFAULT_FILE_FORMAT = "yyyymmddhh24miss"


def make_dirs(path: str, is_filename: bool = True) -> None:
    """Create every directory along ``path``.

    When ``is_filename`` is true the last component is a file name and is
    not created. Failure raises OSError.
    """
    if is_filename:
        parent = path.rpartition("/")[0]
        if parent:
            os.makedirs(parent, mode=0o755, exist_ok=True)
    else:
        os.makedirs(path, mode=0o755, exist_ok=True)


def file_size(filename: str) -> int:
    """Return the size of ``filename`` in bytes."""
    return os.stat(filename).st_size


def file_mtime(filename: str, fmt: str = _DEFAULT_FILE_FORMAT) -> str:
    """Return the modification time of ``filename`` formatted with ``fmt``."""
    return format_time(os.stat(filename).st_mtime, fmt)


def set_mtime(filename: str, mtime: str) -> None:
    """Set both access and modification time of ``filename`` to ``mtime``."""
    stamp = str_to_time(mtime)
    os.utime(filename, (stamp, stamp))


def rename_file(src: str, dst: str) -> None:
    """Move ``src`` to ``dst``, creating the directories of ``dst`` first."""
    if not os.access(src, os.R_OK):
        raise FileNotFoundError(f"cannot read {src}")
    make_dirs(dst, True)
    os.rename(src, dst)


def copy_file(src: str, dst: str) -> None:
    """Copy ``src`` to ``dst`` through a temporary file and keep its mtime."""
    make_dirs(dst, True)
    tmp = dst + ".tmp"
    try:
        with open(src, "rb") as fin, open(tmp, "wb") as fout:
            shutil.copyfileobj(fin, fout)
        os.rename(tmp, dst)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    set_mtime(dst, file_mtime(src))


@dataclass(frozen=True)
class FileEntry:
    """One file found by DirReader."""

    dirname: str
    filename: str
    ffilename: str
    filesize: int
    mtime: str
    ctime: str
    atime: str


class DirReader:
    """Collects the files of a directory tree whose names match patterns."""

    def __init__(self, fmt: str = _DEFAULT_FILE_FORMAT) -> None:
        self.fmt = fmt
        self._files: list[str] = []
        self._pos = 0

    def open(
        self,
        dirname: str,
        rules: str,
        max_files: int = 10000,
        recursive: bool = False,
        sort: bool = False,
    ) -> None:
        """Gather files of ``dirname`` matching ``rules`` (``*`` patterns).

        The directory is created when missing. At most ``max_files`` names are
        kept; ``recursive`` descends into subdirectories and ``sort`` orders
        the full names. Names starting with a dot are skipped.
        """
        self._files = []
        self._pos = 0
        make_dirs(dirname, False)
        self._collect(dirname, rules, max_files, recursive)
        if sort:
            self._files.sort()

    def _collect(self, dirname: str, rules: str, max_files: int, recursive: bool) -> None:
        with os.scandir(dirname) as entries:
            for entry in entries:
                if len(self._files) >= max_files:
                    break
                if entry.name.startswith("."):
                    continue
                full = f"{dirname}/{entry.name}"
                if entry.is_dir(follow_symlinks=False):
                    if recursive:
                        self._collect(full, rules, max_files, recursive)
                elif entry.is_file(follow_symlinks=False) and match_str(entry.name, rules):
                    self._files.append(full)

    def read(self) -> FileEntry | None:
        """Return the next file, or None (and forget the list) at the end."""
        if self._pos >= len(self._files):
            self._pos = 0
            self._files = []
            return None
        full = self._files[self._pos]
        dirname, _, filename = full.rpartition("/")
        st = os.stat(full)
        self._pos += 1
        return FileEntry(
            dirname=dirname,
            filename=filename,
            ffilename=full,
            filesize=st.st_size,
            mtime=format_time(st.st_mtime, self.fmt),
            ctime=format_time(st.st_ctime, self.fmt),
            atime=format_time(st.st_atime, self.fmt),
        )

    def __iter__(self) -> Iterator[FileEntry]:
        while (entry := self.read()) is not None:
            yield entry

    def __len__(self) -> int:
        return len(self._files)