from typing import Any

from configs import app_config

from .models import Method, ParameterEncoding
from .request import Request
from .transport import HttpxTransport, ProxyConfig, Transport


class HttpRequestClient:
    """Factory for requests sharing a transport, default headers and a memory threshold."""

    def __init__(
        self,
        transport: Transport | None = None,
        proxy: str | ProxyConfig | None = None,
        default_headers: dict[str, str] | None = None,
        max_bytes_on_memory: int | None = None,
        chunk_size: int | None = None,
    ):
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(proxy=proxy)
        self._default_headers = default_headers or {}
        if max_bytes_on_memory is None:
            max_bytes_on_memory = app_config.HTTP_REQUEST_MAX_BYTES_ON_MEMORY
        self._max_bytes_on_memory = max_bytes_on_memory
        self._chunk_size = chunk_size

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "HttpRequestClient":
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

    def _merge_headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        merged = dict(self._default_headers)
        if headers:
            merged.update(headers)
        return merged

    def request(
        self,
        method: Method | str,
        url: str,
        parameters: dict[str, Any] | None = None,
        encoding: ParameterEncoding = ParameterEncoding.URL,
        headers: dict[str, str] | None = None,
        max_bytes_on_memory: int | None = None,
    ) -> Request:
        return Request(
            method,
            url,
            max_bytes_on_memory=self._max_bytes_on_memory if max_bytes_on_memory is None else max_bytes_on_memory,
            parameters=parameters,
            encoding=encoding,
            headers=self._merge_headers(headers),
            transport=self._transport,
            chunk_size=self._chunk_size,
        )

    def get(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.GET, url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.HEAD, url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.POST, url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.PUT, url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.PATCH, url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.DELETE, url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> Request:
        return self.request(Method.OPTIONS, url, **kwargs)
