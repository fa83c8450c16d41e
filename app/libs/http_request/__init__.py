"""Observable background HTTP requests."""

from .buffer import MemoryBuffer
from .client import HttpRequestClient
from .exceptions import (
    ConstructionError,
    HandlerError,
    HttpStatusError,
    PayloadUnavailableError,
    RequestCanceledError,
    RequestError,
    ResponseDecodeError,
    TransportError,
)
from .models import Completion, Method, ParameterEncoding, PreparedRequest, RequestState, ResponseMeta
from .registry import HandlerRegistry
from .request import Request
from .result import Failure, Result, Success, completion_future, wait_completion
from .transport import Connection, HttpxTransport, ProxyConfig, Transport
from .types import CompletionHandler, ProgressHandler, ResultHandler, StreamHandler

__all__ = [
    "Request",
    "HttpRequestClient",
    "Method",
    "ParameterEncoding",
    "RequestState",
    "ResponseMeta",
    "PreparedRequest",
    "Completion",
    "MemoryBuffer",
    "HandlerRegistry",
    "Transport",
    "Connection",
    "HttpxTransport",
    "ProxyConfig",
    "Result",
    "Success",
    "Failure",
    "completion_future",
    "wait_completion",
    "ProgressHandler",
    "StreamHandler",
    "CompletionHandler",
    "ResultHandler",
    "RequestError",
    "ConstructionError",
    "TransportError",
    "HttpStatusError",
    "RequestCanceledError",
    "HandlerError",
    "PayloadUnavailableError",
    "ResponseDecodeError",
]
