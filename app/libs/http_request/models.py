import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from urllib.parse import urlencode

import httpx

from .exceptions import ConstructionError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"


class Method(StrEnum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    @property
    def carries_body(self) -> bool:
        return self in (Method.POST, Method.PUT, Method.PATCH)


class ParameterEncoding(StrEnum):
    URL = "url"
    JSON = "json"


class RequestState(StrEnum):
    CREATED = "created"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ResponseMeta:
    status_code: int
    headers: dict[str, str]
    url: str
    http_version: str = "HTTP/1.1"
    content_length: int | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def charset(self) -> str | None:
        content_type = next((v for k, v in self.headers.items() if k.lower() == "content-type"), "")
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip('"')
        return None


def parse_content_length(value: str | None) -> int | None:
    """Return the header value as a length, or None when absent or not numeric."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


@dataclass(frozen=True)
class Completion:
    url: str | None
    response: ResponseMeta | None
    payload: bytes | None
    error: BaseException | None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PreparedRequest:
    method: Method
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @classmethod
    def build(
        cls,
        method: Method | str,
        url: str,
        parameters: dict[str, Any] | None = None,
        encoding: ParameterEncoding = ParameterEncoding.URL,
        headers: dict[str, str] | None = None,
    ) -> "PreparedRequest":
        try:
            method = Method(str(method).upper())
        except ValueError:
            raise ConstructionError(f"Unsupported HTTP method: {method!r}") from None

        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConstructionError(f"Malformed URL {url!r}: {e}") from e
        if not parsed.scheme or not parsed.host:
            raise ConstructionError(f"Malformed URL {url!r}: scheme and host are required")

        merged = dict(headers or {})
        if not _has_header(merged, "connection"):
            merged["Connection"] = "close"

        body: bytes | None = None
        if method.carries_body:
            body = b""
            if parameters:
                body = _encode_body(parameters, encoding)
                if not _has_header(merged, "content-type"):
                    merged["Content-Type"] = (
                        JSON_CONTENT_TYPE if encoding == ParameterEncoding.JSON else FORM_CONTENT_TYPE
                    )
        elif parameters:
            if encoding == ParameterEncoding.JSON:
                raise ConstructionError(f"JSON parameter encoding requires a request body, {method} has none")
            parsed = parsed.copy_merge_params({k: str(v) for k, v in parameters.items()})

        return cls(method=method, url=str(parsed), headers=merged, body=body)


def _has_header(headers: dict[str, str], name: str) -> bool:
    return any(key.lower() == name for key in headers)


def _encode_body(parameters: dict[str, Any], encoding: ParameterEncoding) -> bytes:
    if encoding == ParameterEncoding.JSON:
        try:
            return json.dumps(parameters).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"Parameters are not JSON serializable: {e}") from e
    return urlencode({k: str(v) for k, v in parameters.items()}).encode("utf-8")
