"""TCP helpers: exact-size reads and writes, length-prefixed messages, and
small client and server classes built on them.

A message is a 4-byte little-endian signed length followed by that many bytes.
Timeouts are in seconds: ``0`` waits forever, ``-1`` does not wait at all and
a positive value waits that long before raising TimeoutError.
"""

from __future__ import annotations

import select
import socket
import struct

__all__ = [
    "read_exactly",
    "write_all",
    "tcp_read",
    "tcp_read_bytes",
    "tcp_write",
    "tcp_write_bytes",
    "TcpClient",
    "TcpServer",
]

_HEADER = struct.Struct("<i")


def _as_bytes(data: str | bytes) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _wait_readable(sock: socket.socket, timeout: float) -> None:
    if timeout > 0:
        wait = timeout
    elif timeout == -1:
        wait = 0
    else:
        return
    readable, _, _ = select.select([sock], [], [], wait)
    if not readable:
        raise TimeoutError("no data arrived in time")


def read_exactly(sock: socket.socket, n: int) -> bytes:
    """Receive exactly ``n`` bytes; a closed connection raises ConnectionError."""
    buf = bytearray()
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            raise ConnectionError("connection closed by peer")
        buf += chunk
    return bytes(buf)


def write_all(sock: socket.socket, data: bytes) -> None:
    """Send every byte of ``data``."""
    sock.sendall(data)


def tcp_read(sock: socket.socket, timeout: float = 0) -> bytes:
    """Receive one length-prefixed message."""
    _wait_readable(sock, timeout)
    (length,) = _HEADER.unpack(read_exactly(sock, _HEADER.size))
    if length < 0:
        raise ValueError(f"invalid message length {length}")
    return read_exactly(sock, length)


def tcp_read_bytes(sock: socket.socket, size: int, timeout: float = 0) -> bytes:
    """Receive exactly ``size`` raw bytes."""
    _wait_readable(sock, timeout)
    return read_exactly(sock, size)


def tcp_write(sock: socket.socket, data: str | bytes) -> None:
    """Send ``data`` as one length-prefixed message; text is sent as UTF-8."""
    body = _as_bytes(data)
    write_all(sock, _HEADER.pack(len(body)) + body)


def tcp_write_bytes(sock: socket.socket, data: bytes) -> None:
    """Send raw bytes without a length prefix."""
    write_all(sock, _as_bytes(data))


class TcpClient:
    """The client end of a TCP connection."""

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self.ip = ""
        self.port = 0

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self, ip: str, port: int) -> None:
        """Connect to ``ip``:``port`` over IPv4, dropping any old connection."""
        self.close()
        self.ip = ip
        self.port = port
        address = socket.gethostbyname(ip)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect((address, port))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def _require(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionError("not connected")
        return self._sock

    def read(self, timeout: float = 0) -> bytes:
        """Receive one length-prefixed message."""
        return tcp_read(self._require(), timeout)

    def read_bytes(self, size: int, timeout: float = 0) -> bytes:
        """Receive exactly ``size`` raw bytes."""
        return tcp_read_bytes(self._require(), size, timeout)

    def write(self, data: str | bytes) -> None:
        """Send one length-prefixed message."""
        tcp_write(self._require(), data)

    def write_bytes(self, data: bytes) -> None:
        """Send raw bytes."""
        tcp_write_bytes(self._require(), data)

    def close(self) -> None:
        """Close the connection."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self.port = 0

    def __enter__(self) -> TcpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class TcpServer:
    """A listening TCP socket and the client connection last accepted."""

    def __init__(self) -> None:
        self._listen: socket.socket | None = None
        self._conn: socket.socket | None = None
        self.client_ip = ""

    @property
    def port(self) -> int:
        """The port the server listens on."""
        if self._listen is None:
            raise ConnectionError("server is not listening")
        return self._listen.getsockname()[1]

    def init_server(self, port: int, backlog: int = 5) -> None:
        """Listen on ``port`` on every IPv4 address."""
        self.close_listen()
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", port))
            sock.listen(backlog)
        except OSError:
            sock.close()
            raise
        self._listen = sock

    def accept(self) -> str:
        """Wait for a client, keep its connection and return its IP address."""
        if self._listen is None:
            raise ConnectionError("server is not listening")
        conn, address = self._listen.accept()
        self._conn = conn
        self.client_ip = address[0]
        return self.client_ip

    def _require(self) -> socket.socket:
        if self._conn is None:
            raise ConnectionError("no client connected")
        return self._conn

    def read(self, timeout: float = 0) -> bytes:
        """Receive one length-prefixed message from the client."""
        return tcp_read(self._require(), timeout)

    def read_bytes(self, size: int, timeout: float = 0) -> bytes:
        """Receive exactly ``size`` raw bytes from the client."""
        return tcp_read_bytes(self._require(), size, timeout)

    def write(self, data: str | bytes) -> None:
        """Send one length-prefixed message to the client."""
        tcp_write(self._require(), data)

    def write_bytes(self, data: bytes) -> None:
        """Send raw bytes to the client."""
        tcp_write_bytes(self._require(), data)

    def close_listen(self) -> None:
        """Close the listening socket."""
        if self._listen is not None:
            self._listen.close()
            self._listen = None

    def close_client(self) -> None:
        """Close the client connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def close(self) -> None:
        """Close both sockets."""
        self.close_listen()
        self.close_client()

    def __enter__(self) -> TcpServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()