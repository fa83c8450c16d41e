from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ResponseMeta


class RequestError(Exception):
    detail: str = "HTTP request failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.detail
        super().__init__(self.detail)


# =============================================================================
# Construction (raised before the background exchange starts)
# =============================================================================
class ConstructionError(RequestError):
    detail = "Request could not be constructed."


# =============================================================================
# Transport
# =============================================================================
class TransportError(RequestError):
    detail = "Transport failure."


class HttpStatusError(TransportError):
    detail = "Server responded with an error status."

    def __init__(self, response: "ResponseMeta", detail: str | None = None):
        super().__init__(detail or f"Server responded with status {response.status_code}.")
        self.response = response


class RequestCanceledError(TransportError):
    detail = "Request was canceled and the connection disconnected."


# =============================================================================
# Observers and payload
# =============================================================================
class HandlerError(RequestError):
    detail = "A registered handler raised during dispatch."


class PayloadUnavailableError(RequestError):
    detail = "Payload was discarded after exceeding the memory threshold."

    @classmethod
    def exceeded(cls, total_bytes_read: int, max_bytes_on_memory: int) -> "PayloadUnavailableError":
        return cls(
            f"Cannot stream data ({total_bytes_read} bytes) which has already streamed "
            f"exceeding `max_bytes_on_memory` ({max_bytes_on_memory} bytes)."
        )


class ResponseDecodeError(RequestError):
    detail = "Response payload could not be decoded."
