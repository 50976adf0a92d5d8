"""
Customer token decoding.

The token is an opaque bearer credential. Its payload segment is read only
to show which customer is signed in; the signature is never checked, so the
result must not be used for access control.
"""

from __future__ import annotations

import base64
import json

from kungfu import Option, Some, Nothing


def decode_customer_id(token: str | None) -> Option[int]:
    """Embedded customer_id, or Nothing if the token can't be read."""
    if not token:
        return Nothing()

    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        return Nothing()

    segment = parts[1]
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))
    except ValueError:
        # binascii.Error and UnicodeDecodeError are both ValueErrors
        return Nothing()

    if not isinstance(payload, dict):
        return Nothing()

    customer_id = payload.get("customer_id")
    if isinstance(customer_id, bool):
        return Nothing()
    if isinstance(customer_id, int):
        return Some(customer_id)
    if isinstance(customer_id, str) and customer_id.isdigit():
        return Some(int(customer_id))
    return Nothing()


__all__ = ("decode_customer_id",)
