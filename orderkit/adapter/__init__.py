"""
Adapter — session state, persistence and the request/response protocol.

    from orderkit import Config
    from orderkit import adapter as A

    adapter = A.Adapter(Config(api_key="...", api_base="https://api.example.com/v1/"))

    match await adapter.request("GET", "locations"):
        case Ok(body):
            ...
        case Error(A.RequestTimeout() as e):
            print(e)
        case Error(payload):
            # upstream error body, passed through unmodified
            ...
"""

from orderkit.adapter._errors import (
    INTERNAL_SERVER_ERROR,
    internal_server_error,
    ResponseException,
    RequestTimeout,
    TransportError,
    RequestError,
)
from orderkit.adapter._transport import (
    Response,
    Transport,
    BufferedResponse,
    AiohttpTransport,
)
from orderkit.adapter._response import NO_CONTENT, handle_response
from orderkit.adapter._token import decode_customer_id
from orderkit.adapter._adapter import Adapter, NO_CUSTOMER

__all__ = (
    # Errors
    "INTERNAL_SERVER_ERROR",
    "internal_server_error",
    "ResponseException",
    "RequestTimeout",
    "TransportError",
    "RequestError",
    # Transport
    "Response",
    "Transport",
    "BufferedResponse",
    "AiohttpTransport",
    # Protocol
    "NO_CONTENT",
    "handle_response",
    "decode_customer_id",
    # Adapter
    "Adapter",
    "NO_CUSTOMER",
)
