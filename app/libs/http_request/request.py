import logging
import threading
from typing import Any

from configs import app_config
from extensions.ext_logging import trace_id_generator, trace_id_var

from .buffer import MemoryBuffer
from .exceptions import (
    ConstructionError,
    HandlerError,
    HttpStatusError,
    PayloadUnavailableError,
    RequestError,
    TransportError,
)
from .models import Method, ParameterEncoding, PreparedRequest, RequestState, ResponseMeta
from .registry import HandlerRegistry
from .result import json_completion, text_completion
from .transport import Connection, Transport, get_default_transport
from .types import CompletionHandler, ProgressHandler, ResultHandler, StreamHandler
from .worker import Worker

logger = logging.getLogger(__name__)


class Request:
    """
    One HTTP exchange performed on a background worker.

    The exchange starts as soon as the request is constructed. Observers can be
    attached at any time, including after completion:

    - ``on_progress`` handlers get ``(bytes_read, total_bytes_read, total_bytes_expected)``
      per chunk, plus one catch-up call if bytes were already read.
    - ``on_stream`` handlers get every chunk, plus the bytes buffered so far if
      they register late.
    - ``on_complete`` handlers get ``(url, response, payload, error)`` exactly once.

    Bytes are kept in memory only while the running total stays within
    ``max_bytes_on_memory``. Past that the body can still be observed through
    stream handlers registered in time, but the final payload is gone.

    Example usage:
        request = (
            Request("GET", "https://example.com/large.bin", max_bytes_on_memory=0)
            .on_progress(lambda n, total, expected: print(total, expected))
            .on_stream(out_file.write)
            .on_complete(lambda url, response, payload, error: print(error))
        )
    """

    def __init__(
        self,
        method: Method | str,
        url: str,
        *,
        max_bytes_on_memory: int,
        parameters: dict[str, Any] | None = None,
        encoding: ParameterEncoding = ParameterEncoding.URL,
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
        chunk_size: int | None = None,
    ):
        self.id = trace_id_generator()
        self.method = method
        self.max_bytes_on_memory = max_bytes_on_memory
        self.chunk_size = chunk_size or app_config.HTTP_REQUEST_CHUNK_SIZE

        self._lock = threading.RLock()
        self._state = RequestState.CREATED
        self._completed = False
        # set while queued completion handlers are being delivered
        self._finalizing = False
        self._buffer = MemoryBuffer(max(max_bytes_on_memory, 0))
        self._registry = HandlerRegistry()
        self._worker = Worker(name=f"http-request-{self.id[:8]}")

        self._url: str | None = None
        self._response: ResponseMeta | None = None
        self._total_bytes_expected: int | None = None
        self._payload: bytes | None = None
        self._error: BaseException | None = None

        try:
            if max_bytes_on_memory < 0:
                raise ConstructionError(f"max_bytes_on_memory must be non-negative, got {max_bytes_on_memory}")
            prepared = PreparedRequest.build(method, url, parameters, encoding, headers)
            self.method = prepared.method
            self._url = prepared.url
            transport = transport or get_default_transport()
            connection = transport.open_connection(prepared.method, prepared.url, prepared.headers)
        except RequestError as e:
            logger.warning(f"Request {self.id} for {url} could not be started: {e}")
            self._error = e
            self._complete()
            return

        self._state = RequestState.CONNECTING
        self._worker.start(self._run, connection, prepared.body)

    def __repr__(self) -> str:
        return f"<Request {self.id} {self.method} {self._url} {self.state}>"

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------
    @property
    def state(self) -> RequestState:
        with self._lock:
            return self._state

    @property
    def completed(self) -> bool:
        with self._lock:
            return self._completed

    @property
    def canceled(self) -> bool:
        return self._worker.cancelled

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def response(self) -> ResponseMeta | None:
        with self._lock:
            return self._response

    @property
    def error(self) -> BaseException | None:
        with self._lock:
            return self._error

    @property
    def total_bytes_read(self) -> int:
        with self._lock:
            return self._buffer.total_bytes

    @property
    def total_bytes_expected(self) -> int | None:
        with self._lock:
            return self._total_bytes_expected

    def payload(self) -> bytes | None:
        """
        Return the final payload.

        Returns None while the request is running or if it failed.

        Raises:
            PayloadUnavailableError: the body exceeded ``max_bytes_on_memory``
        """
        with self._lock:
            if self._buffer.overflowed:
                raise PayloadUnavailableError.exceeded(self._buffer.total_bytes, self.max_bytes_on_memory)
            return self._payload

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the request completes. Returns False on timeout."""
        return self._worker.join(timeout)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------
    def on_progress(self, handler: ProgressHandler | None) -> "Request":
        if handler is None:
            return self
        with self._lock:
            total = self._buffer.total_bytes
            if self._completed or self._finalizing:
                self._replay(handler, total, total, self._total_bytes_expected)
                return self
            if total > 0 and not self._catch_up(handler, total, total, self._total_bytes_expected):
                return self
            self._registry.add_progress(handler)
        return self

    def on_stream(self, handler: StreamHandler | None) -> "Request":
        """
        Raises:
            PayloadUnavailableError: bytes were already dropped past the memory threshold
        """
        if handler is None:
            return self
        with self._lock:
            if self._buffer.overflowed:
                raise PayloadUnavailableError.exceeded(self._buffer.total_bytes, self.max_bytes_on_memory)
            if self._completed or self._finalizing:
                if self._payload is not None:
                    self._replay(handler, self._payload)
                return self
            if self._buffer.total_bytes > 0 and not self._catch_up(handler, self._buffer.getvalue()):
                return self
            self._registry.add_stream(handler)
        return self

    def on_complete(self, handler: CompletionHandler) -> "Request":
        with self._lock:
            if self._completed:
                self._deliver_completion(handler)
            else:
                self._registry.add_completion(handler)
        return self

    def on_complete_text(self, handler: ResultHandler, encoding: str | None = None) -> "Request":
        return self.on_complete(text_completion(handler, encoding))

    def on_complete_json(self, handler: ResultHandler) -> "Request":
        return self.on_complete(json_completion(handler))

    def cancel(self) -> None:
        with self._lock:
            if self._completed:
                return
            self._worker.cancel()
        logger.debug(f"Request {self.id} cancel requested")

    # -------------------------------------------------------------------------
    # Background exchange
    # -------------------------------------------------------------------------
    def _run(self, connection: Connection, body: bytes | None) -> None:
        trace_id_var.set(self.id)
        logger.debug(f"-> {self.method} {self._url}")
        try:
            try:
                self._exchange(connection, body)
            except HttpStatusError as e:
                logger.warning(f"Request {self.id} failed: {e}")
                self._fail(e, response=e.response)
            except TransportError as e:
                logger.warning(f"Request {self.id} failed: {e}")
                self._fail(e)
            except Exception as e:
                logger.exception(f"Request {self.id} failed unexpectedly")
                self._fail(e)
            finally:
                connection.close()
        finally:
            self._complete()

    def _exchange(self, connection: Connection, body: bytes | None) -> None:
        if body is not None:
            connection.write(body)
        if self._worker.cancelled:
            connection.disconnect()
        response = connection.connect()
        with self._lock:
            self._response = response
            self._total_bytes_expected = response.content_length
            self._state = RequestState.STREAMING

        size = self._read_size(response.content_length)
        while True:
            if self._worker.cancelled:
                connection.disconnect()
            chunk = connection.read(size)
            if not chunk:
                break
            if not self._dispatch_chunk(chunk):
                return

        with self._lock:
            if self._error is None and not self._buffer.overflowed:
                self._payload = self._buffer.getvalue()

    def _read_size(self, content_length: int | None) -> int:
        if content_length:
            return min(self.chunk_size, content_length)
        return self.chunk_size

    def _dispatch_chunk(self, chunk: bytes) -> bool:
        """Record ``chunk`` and fan it out. Returns False once the request must stop."""
        data = bytes(chunk)
        with self._lock:
            if self._error is not None:
                return False
            self._buffer.write(data)
            total = self._buffer.total_bytes
            expected = self._total_bytes_expected
            # handlers registered during this dispatch were already caught up with this chunk
            progress_handlers = self._registry.progress_handlers
            stream_handlers = self._registry.stream_handlers
            try:
                for progress_handler in progress_handlers:
                    progress_handler(len(data), total, expected)
                for stream_handler in stream_handlers:
                    stream_handler(data)
            except Exception as e:
                self._capture_handler_error(e)
                return False
        return True

    def _fail(self, error: BaseException, response: ResponseMeta | None = None) -> None:
        with self._lock:
            if response is not None and self._response is None:
                self._response = response
                self._total_bytes_expected = response.content_length
            if self._error is None:
                self._error = error

    def _complete(self) -> None:
        with self._lock:
            if self._completed or self._finalizing:
                return
            self._finalizing = True
            handler = self._registry.pop_completion()
            while handler is not None:
                self._deliver_completion(handler)
                handler = self._registry.pop_completion()
            self._registry.clear()
            self._completed = True
            self._finalizing = False
            self._state = RequestState.COMPLETED
            total = self._buffer.total_bytes
        logger.info(f"Request {self.id} completed: {self.method} {self._url} read={total} error={self._error!r}")

    # -------------------------------------------------------------------------
    # Handler invocation (lock held by caller)
    # -------------------------------------------------------------------------
    def _capture_handler_error(self, e: Exception) -> None:
        logger.warning(f"Request {self.id} handler raised, stopping: {e!r}")
        # the terminal outcome is fixed once completion delivery begins
        if self._error is None and not self._finalizing:
            error = HandlerError(f"{type(e).__name__} raised by handler: {e}")
            error.__cause__ = e
            self._error = error

    def _catch_up(self, handler, *args) -> bool:
        try:
            handler(*args)
        except Exception as e:
            self._capture_handler_error(e)
            return False
        return True

    def _replay(self, handler, *args) -> None:
        try:
            handler(*args)
        except Exception:
            logger.exception(f"Handler of completed request {self.id} raised")

    def _deliver_completion(self, handler: CompletionHandler) -> None:
        try:
            handler(self._url, self._response, self._payload, self._error)
        except Exception:
            logger.exception(f"Completion handler of request {self.id} raised")
