"""
Transport — issues one HTTP request and hands back status + body.

Implement Transport for custom clients; AiohttpTransport is the default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import aiohttp

# ═══════════════════════════════════════════════════════════════════════════════
# Protocols
# ═══════════════════════════════════════════════════════════════════════════════

class Response(Protocol):
    """
    Response as seen by the Adapter.

    Note: text() may only be readable once, and there is no clone().
    """

    @property
    def status(self) -> int: ...

    @property
    def status_text(self) -> str: ...

    async def text(self) -> str: ...


class Transport(Protocol):
    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None,
    ) -> Response:
        """Issue one request. Raise on connection failure."""
        ...

    async def close(self) -> None:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Buffered Response
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class BufferedResponse:
    """Fully read response; decoding happens in text() so failures surface there."""

    status: int
    status_text: str
    body: bytes = field(repr=False)
    encoding: str = "utf-8"

    async def text(self) -> str:
        return self.body.decode(self.encoding)


# ═══════════════════════════════════════════════════════════════════════════════
# aiohttp
# ═══════════════════════════════════════════════════════════════════════════════

class AiohttpTransport:
    """
    aiohttp-backed transport.

    Cookies are never stored or sent. A session passed in is left open on
    close(); one created here is closed.

    Example:
        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar()) as s:
            adapter = Adapter(config, transport=AiohttpTransport(s))
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())
            self._owns_session = True
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None,
    ) -> BufferedResponse:
        async with self._client().request(method, url, headers=headers, data=body) as resp:
            raw = await resp.read()
            return BufferedResponse(
                status=resp.status,
                status_text=resp.reason or "",
                body=raw,
                encoding=resp.charset or "utf-8",
            )

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()


__all__ = (
    "Response",
    "Transport",
    "BufferedResponse",
    "AiohttpTransport",
)
