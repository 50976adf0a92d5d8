"""
Adapter configuration.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class Config:
    """
    API connection settings.

    Fluent builder pattern, chain methods to configure.

    Example:
        config = (
            Config(api_key="...", api_base="https://api.example.com/v1/")
            .with_origin("https://shop.example.com")
            .with_timeout(seconds=10)
        )

    Note: Immutable, each method returns a new Config.
    api_base is prefixed verbatim to request paths, end it with "/".
    """

    api_key: str
    api_base: str
    origin: str | None = None
    request_timeout: timedelta | None = None

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key is required")
        if not self.api_base:
            raise ValueError("api_base is required")
        if self.request_timeout is not None and self.request_timeout <= timedelta(0):
            raise ValueError("request_timeout must be positive")

    def with_origin(self, origin: str | None) -> Config:
        """Send an Origin header with every request (None to stop)."""
        return Config(
            api_key=self.api_key,
            api_base=self.api_base,
            origin=origin,
            request_timeout=self.request_timeout,
        )

    def with_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> Config:
        """
        Bound every request.

        Example:
            .with_timeout(seconds=10)
            .with_timeout(delta=timedelta(milliseconds=2500))
        """
        if delta is not None:
            timeout = delta
        elif seconds is not None:
            timeout = timedelta(seconds=seconds)
        else:
            raise ValueError("Must provide seconds or delta")
        return Config(
            api_key=self.api_key,
            api_base=self.api_base,
            origin=self.origin,
            request_timeout=timeout,
        )

    def without_timeout(self) -> Config:
        return Config(
            api_key=self.api_key,
            api_base=self.api_base,
            origin=self.origin,
            request_timeout=None,
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "ORDERKIT_",
        environ: Mapping[str, str] | None = None,
    ) -> Config:
        """
        Read {prefix}API_KEY, {prefix}API_BASE, {prefix}ORIGIN and
        {prefix}REQUEST_TIMEOUT (seconds).
        """
        env = os.environ if environ is None else environ
        timeout = env.get(f"{prefix}REQUEST_TIMEOUT")
        return cls(
            api_key=env.get(f"{prefix}API_KEY", ""),
            api_base=env.get(f"{prefix}API_BASE", ""),
            origin=env.get(f"{prefix}ORIGIN") or None,
            request_timeout=timedelta(seconds=float(timeout)) if timeout else None,
        )


__all__ = ("Config",)
