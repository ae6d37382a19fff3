"""An FTP client that transfers whole files safely.

Downloads and uploads go through a ``.tmp`` name and are renamed only once
complete. Downloads can check that the remote file did not change while it
was copied, and uploads can check the size that arrived on the server.
"""

from __future__ import annotations

import contextlib
import ftplib
import os
from collections.abc import Callable, Iterator

from idcframe.fileutil import file_mtime, file_size, make_dirs, set_mtime
from idcframe.timeutil import add_time

__all__ = ["FtpError", "FtpClient"]

DEFAULT_PORT = 21
# The server reports modification times in UTC; they are shifted to UTC+8.
_MTIME_SHIFT = 8 * 60 * 60
_MTIME_FORMAT = "yyyymmddhh24miss"


class FtpError(Exception):
    """An FTP operation failed.

    ``stage`` names the step of a login that failed (``connect``, ``login``
    or ``option``) and is None for other operations.
    """

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


@contextlib.contextmanager
def _wrap(action: str, stage: str | None = None) -> Iterator[None]:
    try:
        yield
    except ftplib.all_errors as exc:
        raise FtpError(f"{action} failed: {exc}", stage) from exc


def _split_host(host: str) -> tuple[str, int]:
    name, sep, port = host.rpartition(":")
    if not sep:
        return host, DEFAULT_PORT
    try:
        return name, int(port)
    except ValueError as exc:
        raise FtpError(f"invalid port in {host!r}", "connect") from exc


class FtpClient:
    """A client for one FTP server session.

    ``factory`` builds the underlying :class:`ftplib.FTP` object.
    """

    def __init__(self, factory: Callable[[], ftplib.FTP] = ftplib.FTP) -> None:
        self._factory = factory
        self._ftp: ftplib.FTP | None = None
        self.last_size = 0
        self.last_mtime = ""
        self.connect_failed = False
        self.login_failed = False
        self.option_failed = False

    @property
    def connected(self) -> bool:
        return self._ftp is not None

    def _require(self) -> ftplib.FTP:
        if self._ftp is None:
            raise FtpError("not logged in to an FTP server")
        return self._ftp

    def login(self, host: str, username: str, password: str, passive: bool = True) -> None:
        """Connect to ``host`` (``ip`` or ``ip:port``) and log in.

        ``passive`` chooses passive mode, otherwise active mode is used. The
        flags ``connect_failed``, ``login_failed`` and ``option_failed`` and
        the error's ``stage`` tell which step failed.
        """
        self.logout()
        self.connect_failed = self.login_failed = self.option_failed = False
        name, port = _split_host(host)
        ftp = self._factory()
        try:
            try:
                with _wrap(f"connect to {host}", "connect"):
                    ftp.connect(name, port)
            except FtpError:
                self.connect_failed = True
                raise
            try:
                with _wrap(f"login as {username}", "login"):
                    ftp.login(username, password)
            except FtpError:
                self.login_failed = True
                raise
            try:
                with _wrap("set transfer mode", "option"):
                    ftp.set_pasv(passive)
            except FtpError:
                self.option_failed = True
                raise
        except FtpError:
            with contextlib.suppress(*ftplib.all_errors):
                ftp.close()
            raise
        self._ftp = ftp

    def logout(self) -> bool:
        """End the session; return False when there was none."""
        if self._ftp is None:
            return False
        ftp, self._ftp = self._ftp, None
        try:
            ftp.quit()
        except ftplib.all_errors:
            with contextlib.suppress(*ftplib.all_errors):
                ftp.close()
        return True

    def mtime(self, remote: str) -> str:
        """Return the remote file's modification time as ``yyyymmddhh24miss``."""
        ftp = self._require()
        self.last_mtime = ""
        with _wrap(f"MDTM {remote}"):
            response = ftp.sendcmd(f"MDTM {remote}")
        parts = response.split()
        if len(parts) < 2 or not parts[0].startswith("213"):
            raise FtpError(f"unexpected MDTM response {response!r}")
        try:
            value = add_time(parts[1][:14], _MTIME_SHIFT, _MTIME_FORMAT)
        except ValueError as exc:
            raise FtpError(f"unexpected MDTM response {response!r}") from exc
        self.last_mtime = value
        return value

    def size(self, remote: str) -> int:
        """Return the remote file's size in bytes."""
        ftp = self._require()
        self.last_size = 0
        with _wrap(f"SIZE {remote}"):
            ftp.voidcmd("TYPE I")
            value = ftp.size(remote)
        if value is None:
            raise FtpError(f"no size reported for {remote}")
        self.last_size = int(value)
        return self.last_size

    def chdir(self, remote_dir: str) -> None:
        """Change the server's working directory."""
        ftp = self._require()
        with _wrap(f"chdir {remote_dir}"):
            ftp.cwd(remote_dir)

    def mkdir(self, remote_dir: str) -> None:
        """Create a directory on the server."""
        ftp = self._require()
        with _wrap(f"mkdir {remote_dir}"):
            ftp.mkd(remote_dir)

    def rmdir(self, remote_dir: str) -> None:
        """Remove an empty directory on the server."""
        ftp = self._require()
        with _wrap(f"rmdir {remote_dir}"):
            ftp.rmd(remote_dir)

    def nlist(self, remote_dir: str, list_filename: str) -> list[str]:
        """List the names in ``remote_dir`` and save them, one per line.

        An empty ``remote_dir`` lists the working directory. The names are
        written to ``list_filename`` and also returned.
        """
        ftp = self._require()
        make_dirs(list_filename, True)
        with _wrap(f"NLST {remote_dir}"):
            names = ftp.nlst(remote_dir) if remote_dir else ftp.nlst()
        with open(list_filename, "w", encoding="utf-8", newline="") as fout:
            fout.writelines(f"{name}\n" for name in names)
        return list(names)

    def get(self, remote: str, local: str, check_mtime: bool = True) -> None:
        """Download ``remote`` to ``local`` through ``local + ".tmp"``.

        With ``check_mtime`` the download fails if the remote file's time
        changed during the transfer. The local file gets the remote time.
        """
        ftp = self._require()
        make_dirs(local, True)
        tmp = local + ".tmp"
        before = self.mtime(remote)
        try:
            with open(tmp, "wb") as fout, _wrap(f"RETR {remote}"):
                ftp.retrbinary(f"RETR {remote}", fout.write)
            if check_mtime and self.mtime(remote) != before:
                raise FtpError(f"{remote} changed during the download")
            set_mtime(tmp, before)
            os.rename(tmp, local)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.remove(tmp)
            raise
        self.last_mtime = before
        self.last_size = file_size(local)

    def put(self, local: str, remote: str, check_size: bool = True) -> None:
        """Upload ``local`` to ``remote`` through ``remote + ".tmp"``.

        The upload is dropped if the local file changed while it was sent.
        With ``check_size`` the remote size must equal the local size,
        otherwise the remote file is deleted.
        """
        ftp = self._require()
        tmp = remote + ".tmp"
        before = file_mtime(local)
        with open(local, "rb") as fin, _wrap(f"STOR {tmp}"):
            ftp.storbinary(f"STOR {tmp}", fin)
        if file_mtime(local) != before:
            with contextlib.suppress(FtpError):
                self.delete(tmp)
            raise FtpError(f"{local} changed during the upload")
        self.rename(tmp, remote)
        if check_size and self.size(remote) != file_size(local):
            with contextlib.suppress(FtpError):
                self.delete(remote)
            raise FtpError(f"size of {remote} differs from {local}")

    def delete(self, remote: str) -> None:
        """Delete a file on the server."""
        ftp = self._require()
        with _wrap(f"delete {remote}"):
            ftp.delete(remote)

    def rename(self, src: str, dst: str) -> None:
        """Rename a file on the server."""
        ftp = self._require()
        with _wrap(f"rename {src} to {dst}"):
            ftp.rename(src, dst)

    def site(self, command: str) -> str:
        """Send a SITE command and return the server's reply."""
        ftp = self._require()
        with _wrap(f"SITE {command}"):
            return ftp.sendcmd(f"SITE {command}")

    def __enter__(self) -> FtpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.logout()