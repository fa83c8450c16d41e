"""
Typed decoding of a request's terminal outcome.

The adapters here are completion handlers: they turn the raw
``(url, response, payload, error)`` delivery into a ``Result`` so callers
never see a missing payload flow through as ``None``.
"""

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, Union

from configs import app_config

from .exceptions import PayloadUnavailableError, ResponseDecodeError
from .models import Completion
from .types import CompletionHandler, ResultHandler

if TYPE_CHECKING:
    from .request import Request

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: BaseException
    payload: bytes | None = None
    ok: ClassVar[bool] = False

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success[T], Failure]


def decode_payload(
    payload: bytes | None,
    error: BaseException | None,
    decoder: Callable[[bytes], T],
) -> Result[T]:
    if error is not None:
        return Failure(error, payload)
    if payload is None:
        return Failure(PayloadUnavailableError("Request completed without a retained payload."))
    try:
        return Success(decoder(payload))
    except (LookupError, ValueError) as e:
        decode_error = ResponseDecodeError(f"Failed to decode {len(payload)} bytes: {e}")
        decode_error.__cause__ = e
        return Failure(decode_error, payload)


def text_completion(handler: ResultHandler, encoding: str | None = None) -> CompletionHandler:
    """Wrap ``handler`` so it receives the payload decoded as text.

    Without an explicit ``encoding`` the response charset is used, falling back
    to ``HTTP_REQUEST_DEFAULT_CHARSET``.
    """

    def completion(url, response, payload, error):
        charset = encoding or (response.charset if response else None) or app_config.HTTP_REQUEST_DEFAULT_CHARSET
        handler(url, response, decode_payload(payload, error, lambda data: data.decode(charset)))

    return completion


def json_completion(handler: ResultHandler) -> CompletionHandler:
    def completion(url, response, payload, error):
        handler(url, response, decode_payload(payload, error, json.loads))

    return completion


def completion_future(
    request: "Request",
    loop: asyncio.AbstractEventLoop | None = None,
) -> "asyncio.Future[Completion]":
    """Return a future resolved on ``loop`` with the request's terminal outcome."""
    loop = loop or asyncio.get_running_loop()
    future: asyncio.Future[Completion] = loop.create_future()

    def resolve(completion: Completion) -> None:
        if not future.done():
            future.set_result(completion)

    def handler(url, response, payload, error):
        loop.call_soon_threadsafe(resolve, Completion(url, response, payload, error))

    request.on_complete(handler)
    return future


async def wait_completion(request: "Request") -> Completion:
    return await completion_future(request)
