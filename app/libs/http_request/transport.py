"""
Transport adapters.

A transport opens one connection per request. The request drives the
connection from its background worker: optionally ``write`` a body, ``connect``
to obtain the response metadata, then ``read`` until an empty chunk.
``disconnect`` may be called from any thread and makes the next operation on
the connection fail with ``RequestCanceledError``.
"""

import abc
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from urllib.parse import urlparse, urlunparse

import httpx

from configs import app_config

from .exceptions import (
    ConstructionError,
    HttpStatusError,
    RequestCanceledError,
    TransportError,
)
from .models import ResponseMeta, parse_content_length

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = frozenset({"http", "https"})


class Connection(abc.ABC):
    """A single HTTP exchange."""

    @abc.abstractmethod
    def write(self, body: bytes) -> None:
        """Attach the request body. Must be called before ``connect``."""

    @abc.abstractmethod
    def connect(self) -> ResponseMeta:
        """Send the request and return once response headers are available."""

    @abc.abstractmethod
    def read(self, size: int) -> bytes:
        """Return up to ``size`` body bytes, or ``b""`` at end of stream."""

    @abc.abstractmethod
    def disconnect(self) -> None:
        """Ask the connection to stop; thread-safe."""

    def close(self) -> None:
        """Release resources held by the exchange."""


class Transport(abc.ABC):
    @abc.abstractmethod
    def open_connection(self, method: str, url: str, headers: dict[str, str]) -> Connection:
        """
        Create a connection for the given exchange without performing any I/O.

        Raises:
            ConstructionError: the URL cannot be served by this transport
        """
        raise NotImplementedError

    def close(self) -> None:
        pass


@dataclass
class ProxyConfig:
    url: str
    auth: tuple[str, str] | None = None

    def to_httpx_proxy(self) -> str:
        if not self.auth:
            return self.url
        parsed = urlparse(self.url)
        netloc = f"{self.auth[0]}:{self.auth[1]}@{parsed.hostname}"
        if parsed.port:
            netloc += f":{parsed.port}"
        return urlunparse(parsed._replace(netloc=netloc))


def response_meta(response: httpx.Response) -> ResponseMeta:
    content_length = parse_content_length(response.headers.get("content-length"))
    # httpx decodes compressed bodies, so the header no longer describes what is read
    if response.headers.get("content-encoding", "identity").lower() != "identity":
        content_length = None
    return ResponseMeta(
        status_code=response.status_code,
        headers=dict(response.headers),
        url=str(response.url),
        http_version=response.http_version,
        content_length=content_length,
    )


class HttpxConnection(Connection):
    def __init__(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        headers: dict[str, str],
        raise_for_status: bool = True,
    ):
        self.method = method
        self.url = url
        self.headers = headers
        self._client = client
        self._raise_for_status = raise_for_status
        self._body: bytes | None = None
        self._response: httpx.Response | None = None
        self._chunks: Iterator[bytes] | None = None
        self._disconnected = threading.Event()

    def _ensure_connected(self) -> None:
        if self._disconnected.is_set():
            raise RequestCanceledError()

    def write(self, body: bytes) -> None:
        self._ensure_connected()
        if self._response is not None:
            raise TransportError("Cannot write a request body after the exchange started")
        self._body = body

    def connect(self) -> ResponseMeta:
        self._ensure_connected()
        try:
            request = self._client.build_request(
                method=self.method,
                url=self.url,
                headers=self.headers,
                content=self._body,
            )
            self._response = self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout for {self.url}: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Connection error for {self.url}: {e}") from e

        meta = response_meta(self._response)
        logger.debug(f"<- {meta.status_code} {self.method} {meta.url} (content-length={meta.content_length})")
        if self._raise_for_status and self._response.is_error:
            raise HttpStatusError(meta)
        return meta

    def read(self, size: int) -> bytes:
        self._ensure_connected()
        if self._response is None:
            raise TransportError("Cannot read before the connection is established")
        if self._chunks is None:
            self._chunks = self._response.iter_bytes(chunk_size=size)
        try:
            return next(self._chunks, b"")
        except httpx.TimeoutException as e:
            raise TransportError(f"Read timeout for {self.url}: {e}") from e
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TransportError(f"Read error for {self.url}: {e}") from e

    def disconnect(self) -> None:
        self._disconnected.set()

    def close(self) -> None:
        if self._response is not None:
            self._response.close()


class HttpxTransport(Transport):
    """
    Transport backed by a synchronous ``httpx.Client``.

    Example usage:
        transport = HttpxTransport(proxy="http://proxy.local:3128")
        request = Request("GET", "https://example.com", max_bytes_on_memory=1024, transport=transport)
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: httpx.Timeout | float | None = None,
        proxy: str | ProxyConfig | None = None,
        verify: bool | None = None,
        follow_redirects: bool | None = None,
        raise_for_status: bool | None = None,
    ):
        if raise_for_status is None:
            raise_for_status = app_config.HTTP_REQUEST_RAISE_FOR_STATUS
        self._raise_for_status = raise_for_status
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(
                timeout=timeout if timeout is not None else self._default_timeout(),
                proxy=self._get_proxy_url(proxy),
                verify=app_config.HTTP_REQUEST_SSL_VERIFY if verify is None else verify,
                follow_redirects=(
                    app_config.HTTP_REQUEST_FOLLOW_REDIRECTS if follow_redirects is None else follow_redirects
                ),
            )
        self._client = client

    @staticmethod
    def _default_timeout() -> httpx.Timeout:
        return httpx.Timeout(
            app_config.HTTP_REQUEST_READ_TIMEOUT,
            connect=app_config.HTTP_REQUEST_CONNECT_TIMEOUT,
            write=app_config.HTTP_REQUEST_WRITE_TIMEOUT,
        )

    @staticmethod
    def _get_proxy_url(proxy: str | ProxyConfig | None) -> str | None:
        if proxy is None:
            proxy = app_config.HTTP_REQUEST_PROXY_URL
        if proxy is None or isinstance(proxy, str):
            return proxy
        return proxy.to_httpx_proxy()

    def open_connection(self, method: str, url: str, headers: dict[str, str]) -> Connection:
        try:
            scheme = httpx.URL(url).scheme
        except httpx.InvalidURL as e:
            raise ConstructionError(f"Malformed URL {url!r}: {e}") from e
        if scheme not in SUPPORTED_SCHEMES:
            raise ConstructionError(f"Unsupported URL scheme: {scheme!r}")
        return HttpxConnection(
            self._client,
            method,
            url,
            headers,
            raise_for_status=self._raise_for_status,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *_args) -> None:
        self.close()


_default_transport: HttpxTransport | None = None
_default_transport_lock = threading.Lock()


def get_default_transport() -> Transport:
    """Return the process-wide transport used when a request is given none."""
    global _default_transport
    with _default_transport_lock:
        if _default_transport is None:
            _default_transport = HttpxTransport()
        return _default_transport
