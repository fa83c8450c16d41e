"""Pytest configuration"""

import itertools
import threading
import time
from collections.abc import Iterable

import pytest

from libs.http_request.exceptions import RequestCanceledError, TransportError
from libs.http_request.models import ResponseMeta
from libs.http_request.transport import Connection, Transport

WAIT_TIMEOUT = 5


class ScriptedConnection(Connection):
    def __init__(self, transport: "ScriptedTransport", method: str, url: str, headers: dict[str, str]):
        self.transport = transport
        self.method = method
        self.url = url
        self.headers = headers
        self.body: bytes | None = None
        self.read_sizes: list[int] = []
        self.closed = False
        self._chunks = iter(transport.chunks)
        self._disconnected = threading.Event()

    def _ensure_connected(self) -> None:
        if self._disconnected.is_set():
            raise RequestCanceledError()

    def write(self, body: bytes) -> None:
        self._ensure_connected()
        self.body = body

    def connect(self) -> ResponseMeta:
        if not self.transport.gate.wait(WAIT_TIMEOUT):
            raise TransportError("scripted transport was never released")
        self._ensure_connected()
        if self.transport.connect_error is not None:
            raise self.transport.connect_error
        return ResponseMeta(
            status_code=200,
            headers=dict(self.transport.headers),
            url=self.url,
            content_length=self.transport.content_length,
        )

    def read(self, size: int) -> bytes:
        self._ensure_connected()
        self.read_sizes.append(size)
        if self.transport.read_delay:
            time.sleep(self.transport.read_delay)
        chunk = next(self._chunks, b"")
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    def disconnect(self) -> None:
        self._disconnected.set()

    def close(self) -> None:
        self.closed = True


class ScriptedTransport(Transport):
    """In-memory transport replaying a fixed sequence of chunks.

    With ``gated=True`` the connect step blocks until ``release()`` so tests can
    register handlers before any byte is read.
    """

    def __init__(
        self,
        chunks: Iterable[bytes | Exception] = (),
        content_length: int | None = None,
        headers: dict[str, str] | None = None,
        connect_error: Exception | None = None,
        read_delay: float = 0.0,
        gated: bool = False,
    ):
        self.chunks = chunks
        self.content_length = content_length
        self.headers = headers or {}
        self.connect_error = connect_error
        self.read_delay = read_delay
        self.gate = threading.Event()
        if not gated:
            self.gate.set()
        self.connections: list[ScriptedConnection] = []

    def open_connection(self, method: str, url: str, headers: dict[str, str]) -> Connection:
        connection = ScriptedConnection(self, method, url, headers)
        self.connections.append(connection)
        return connection

    def release(self) -> None:
        self.gate.set()

    @property
    def connection(self) -> ScriptedConnection:
        return self.connections[-1]


@pytest.fixture
def scripted_transport():
    """Factory for scripted transports."""
    transports: list[ScriptedTransport] = []

    def factory(*args, **kwargs) -> ScriptedTransport:
        transport = ScriptedTransport(*args, **kwargs)
        transports.append(transport)
        return transport

    yield factory

    # never leave a worker blocked on the gate
    for transport in transports:
        transport.release()


@pytest.fixture
def endless_chunks():
    return itertools.repeat(b"x" * 16)
