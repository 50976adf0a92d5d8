"""
Adapter — owns one session: current order, customer token, storage handle.

Every Adapter holds its own state; there is no module-level singleton, so
independent sessions can coexist in one process.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import structlog
from combinators import flow, lift as L
from kungfu import Result, Ok, Error, Some, LazyCoroResult

from orderkit._config import Config
from orderkit.adapter._errors import RequestError, RequestTimeout, TransportError
from orderkit.adapter._response import handle_response
from orderkit.adapter._token import decode_customer_id
from orderkit.adapter._transport import AiohttpTransport, Transport
from orderkit.codec import CodecError, decode, encode, sanitize
from orderkit.order import Order, Resources, ServiceType
from orderkit.storage import (
    CURRENT_ORDER_KEY,
    CUSTOMER_TOKEN_KEY,
    MemoryStorage,
    Storage,
    StorageError,
)

logger = structlog.get_logger(__name__)

# Returned by customer_id() when the token can't be decoded
NO_CUSTOMER = 0


class Adapter:
    """
    Persistence, token lifecycle and the request/response protocol.

    Example:
        async with Adapter(Config.from_env(), storage=storage) as adapter:
            match await adapter.restore_current_order():
                case Ok(None):
                    order = adapter.new_order(location_id=19, service_type="pickup")
                case Ok(order):
                    pass
            ...
            await adapter.persist_current_order(order)
    """

    def __init__(
        self,
        config: Config,
        storage: Storage | None = None,
        transport: Transport | None = None,
        resources: Resources | None = None,
    ) -> None:
        self.config = config
        self.storage: Storage = storage if storage is not None else MemoryStorage()
        self.transport: Transport = transport if transport is not None else AiohttpTransport()
        self.resources = resources if resources is not None else Resources()

        # Session state, written only by this class
        self.current_order: Order | None = None
        self.customer_token: str | None = None

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> Adapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def new_order(
        self,
        location_id: int | str,
        service_type: ServiceType | str,
        payment_type: str | None = None,
        misc_options: Mapping[str, Any] | None = None,
    ) -> Order:
        return Order(self, location_id, service_type, payment_type, misc_options)

    # ═══════════════════════════════════════════════════════════════════════════
    # Customer Token
    # ═══════════════════════════════════════════════════════════════════════════

    def customer_id(self) -> int:
        """Best-effort customer id from the token; NO_CUSTOMER (0) if unreadable."""
        match decode_customer_id(self.customer_token):
            case Some(customer_id):
                return customer_id
            case _:
                return NO_CUSTOMER

    def restore_customer_token(self) -> LazyCoroResult[str | None, StorageError]:
        async def impl() -> Result[str | None, StorageError]:
            match await self.storage.get_item(CUSTOMER_TOKEN_KEY):
                case Ok(token):
                    self.customer_token = token
                    return Ok(token)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    def persist_customer_token(self, token: str) -> LazyCoroResult[str | None, StorageError]:
        """Write the token, read it back and cache what storage holds."""

        async def impl() -> Result[str | None, StorageError]:
            match await self.storage.set_item(CUSTOMER_TOKEN_KEY, token):
                case Error(e):
                    return Error(e)
                case _:
                    pass
            match await self.storage.get_item(CUSTOMER_TOKEN_KEY):
                case Ok(stored):
                    self.customer_token = stored
                    return Ok(stored)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    # ═══════════════════════════════════════════════════════════════════════════
    # Current Order
    # ═══════════════════════════════════════════════════════════════════════════

    def restore_current_order(self) -> LazyCoroResult[Order | None, StorageError]:
        """
        Rebuild the stored order and make it current.

        Nothing stored → Ok(None). Corrupt data is treated the same way:
        restore is the only recovery path, so it never fails on content.
        """

        async def impl() -> Result[Order | None, StorageError]:
            match await self.storage.get_item(CURRENT_ORDER_KEY):
                case Error(e):
                    return Error(e)
                case Ok(None):
                    return Ok(None)
                case Ok(serialized):
                    try:
                        order = Order.restore(self, decode(serialized))
                    except (CodecError, KeyError, TypeError, ValueError) as e:
                        logger.warning("Stored order is unreadable, starting fresh", error=str(e))
                        return Ok(None)
                    self.current_order = order
                    logger.info(
                        "Order restored",
                        order_id=order.identifier,
                        line_items=len(order.cart),
                    )
                    return Ok(order)

        return LazyCoroResult(impl)

    def persist_current_order(self, order: Order) -> LazyCoroResult[Order, StorageError]:
        """
        Make order current and write its sanitized form.

        Resolves with the same live order: it still holds full card data and
        the draft password, only the stored copy is reduced. An order that
        can't be encoded is not made current and is reported as StorageError.
        """

        async def impl() -> Result[Order, StorageError]:
            result = sanitize(order.snapshot())
            try:
                serialized = encode(result.sanitized)
            except CodecError as e:
                logger.warning("Order could not be encoded", order_id=order.identifier, error=str(e))
                return Error(StorageError(f"Order could not be encoded: {e}", e))

            self.current_order = order
            if stripped := result.removed.fields():
                logger.debug("Kept sensitive fields out of storage", order_id=order.identifier, fields=stripped)

            match await self.storage.set_item(CURRENT_ORDER_KEY, serialized):
                case Error(e):
                    logger.warning("Failed to persist order", order_id=order.identifier, error=e.message)
                    return Error(e)
                case _:
                    return Ok(order)

        return LazyCoroResult(impl)

    def flush_current_order(self) -> LazyCoroResult[bool, StorageError]:
        async def impl() -> Result[bool, StorageError]:
            match await self.storage.remove_item(CURRENT_ORDER_KEY):
                case Ok(existed):
                    self.current_order = None
                    return Ok(existed)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    def flush_all(self) -> LazyCoroResult[None, StorageError]:
        """Clear storage and forget the current order and the token."""

        async def impl() -> Result[None, StorageError]:
            match await self.storage.clear():
                case Ok(res):
                    self.current_order = None
                    self.customer_token = None
                    logger.info("Session flushed")
                    return Ok(res)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    # ═══════════════════════════════════════════════════════════════════════════
    # Requests
    # ═══════════════════════════════════════════════════════════════════════════

    def headers(self) -> dict[str, str]:
        headers = {"Api-Key": self.config.api_key, "Content-Type": "application/json"}
        if self.config.origin:
            headers["Origin"] = self.config.origin
        if self.customer_token:
            headers["Customer-Token"] = self.customer_token
        return headers

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
    ) -> LazyCoroResult[Any, RequestError]:
        """
        Send one request and classify the response.

        URL, headers and body are built when the result is awaited, so a
        token persisted in between is sent.

        With a request_timeout configured the call runs under
        flow(...).timeout(...) with cancellation off. On expiry the awaited
        value is discarded, but the call itself is not aborted: the server
        may still process it. Callers retrying a non-idempotent request
        (orders/create) risk a duplicate.
        """

        async def impl() -> Result[Any, RequestError]:
            log = logger.bind(method=method, path=path)
            try:
                payload = json.dumps(body) if body is not None else None
            except (TypeError, ValueError) as e:
                log.warning("Request body could not be encoded", error=str(e))
                return Error(TransportError(method, path, e))

            url = f"{self.config.api_base}{path}"
            headers = self.headers()
            timeout = self.config.request_timeout

            send = L.catching_async(
                lambda: self.transport.send(method, url, headers, payload),
                on_error=lambda e: TransportError(method, path, e),
            )
            log.debug("Request sent")

            if timeout is None:
                sent = await send
            else:
                sent = await (
                    flow(send)
                    .timeout(seconds=timeout.total_seconds(), cancel_on_timeout=False)
                    .compile()
                )

            match sent:
                case Ok(response):
                    log.debug("Response received", status=response.status)
                    return await handle_response(response)
                case Error(TransportError() as e):
                    log.warning("Transport failed", error=str(e.cause))
                    return Error(e)
                case Error(_):
                    log.warning(
                        "Request timed out, call abandoned but not cancelled",
                        timeout=timeout.total_seconds() if timeout else None,
                    )
                    return Error(RequestTimeout(method, path, timeout))

        return LazyCoroResult(impl)

    def __repr__(self) -> str:
        return f"Adapter(api_base={self.config.api_base!r}, current_order={self.current_order!r})"


__all__ = ("Adapter", "NO_CUSTOMER")
