from __future__ import annotations

import asyncio
import base64
import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from kungfu import Result, Ok, Error

from orderkit import Adapter, Config
from orderkit.order import (
    CUSTOMER_FIELDS,
    CustomerDraft,
    LineItemError,
    LineItemErrors,
    RequiredFields,
    Resources,
)
from orderkit.storage import MemoryStorage


# ═══════════════════════════════════════════════════════════════════════════════
# Result helpers
# ═══════════════════════════════════════════════════════════════════════════════


def ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e!r})")


def err(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")


# ═══════════════════════════════════════════════════════════════════════════════
# Transport fakes
# ═══════════════════════════════════════════════════════════════════════════════


class FakeResponse:
    """Body readable once, no clone()."""

    def __init__(self, status: int, body: str | Exception = "", status_text: str = "") -> None:
        self.status = status
        self.status_text = status_text
        self._body = body
        self.read = False

    async def text(self) -> str:
        if self.read:
            raise RuntimeError("body already read")
        self.read = True
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: str | None


@dataclass
class FakeTransport:
    responses: list[Any] = field(default_factory=list)
    delay: float = 0.0
    calls: list[SentRequest] = field(default_factory=list)
    completed: int = 0
    closed: bool = False

    def reply(self, status: int, body: Any = "", status_text: str = "") -> "FakeTransport":
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(FakeResponse(status, text, status_text))
        return self

    async def send(self, method, url, headers, body):
        self.calls.append(SentRequest(method, url, headers, body))
        if self.delay:
            await asyncio.sleep(self.delay)
        self.completed += 1
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


# ═══════════════════════════════════════════════════════════════════════════════
# Resource fakes
# ═══════════════════════════════════════════════════════════════════════════════


class RecordingCustomers:
    """RequiredFields that counts how often it was asked."""

    def __init__(self) -> None:
        self.calls = 0
        self._inner = RequiredFields(CUSTOMER_FIELDS)

    async def validate(self, draft: CustomerDraft) -> Result[CustomerDraft, dict[str, list[str]]]:
        self.calls += 1
        return await self._inner.validate(draft)


@dataclass
class FakeMenu:
    """Rejects listed products, and any quantity above max_quantity."""

    unavailable: set[Any] = field(default_factory=set)
    max_quantity: int = 10
    calls: int = 0

    async def check_line_item(self, order, line_item, quantity) -> Result[None, LineItemError]:
        self.calls += 1
        if line_item.product.product_id in self.unavailable:
            return Error(LineItemErrors.unavailable("Sold out"))
        if quantity > self.max_quantity:
            return Error(LineItemErrors.unavailable(f"At most {self.max_quantity}"))
        return Ok(None)


# ═══════════════════════════════════════════════════════════════════════════════
# Data
# ═══════════════════════════════════════════════════════════════════════════════

LOCATION_ID = 19

PRODUCT = {"id": 1234, "name": "Chicken Bowl", "price": "9.50", "slug": "chicken-bowl"}

TESTING_ADDRESS = {
    "street_address": "123 Orchard St",
    "unit": "4B",
    "city": "New York",
    "state_code": "NY",
    "zip_code": "10002",
    "latitude": 40.7193,
    "longitude": -73.9900,
}

TESTING_CUSTOMER = {
    "first_name": "Hugh",
    "last_name": "Francis",
    "email": "hugh@example.com",
    "password": "pizzapasta",
}

FULL_CARD = {
    "cc_number": "4111111111111111",
    "cc_expiration": "1130",
    "cc_cvv": "123",
    "cc_zip": "10002",
}


def make_token(payload: Any) -> str:
    segment = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")
    return f"eyJhbGciOiJIUzI1NiJ9.{segment}.c2lnbmF0dXJl"


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def config() -> Config:
    return Config(api_key="test-key", api_base="https://api.example.com/v1/")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def customers() -> RecordingCustomers:
    return RecordingCustomers()


@pytest.fixture
def menu() -> FakeMenu:
    return FakeMenu()


@pytest.fixture
def adapter(config, storage, transport, customers, menu) -> Adapter:
    return Adapter(
        config,
        storage=storage,
        transport=transport,
        resources=Resources(customers=customers, menu=menu),
    )


@pytest.fixture
def order(adapter):
    return adapter.new_order(LOCATION_ID, "pickup")
