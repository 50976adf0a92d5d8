"""
Response classification.

The upstream is inconsistent: 500s aren't JSON, some endpoints answer 204,
and error bodies are meaningful structured data. So nothing here assumes a
single shape:

    500                    → Error(INTERNAL_SERVER_ERROR), body never read
    204 / "NO CONTENT"     → Ok(True)
    empty body             → Ok({}) on 2xx, Error({}) otherwise
    unparseable body       → Error(ResponseException) with the raw text
    parsed body            → Ok(body) on 2xx, Error(body) otherwise
"""

from __future__ import annotations

import json
from typing import Any

from kungfu import Result, Ok, Error

from orderkit.adapter._errors import RequestError, ResponseException, internal_server_error
from orderkit.adapter._transport import Response

NO_CONTENT = "NO CONTENT"


def is_success(status: int) -> bool:
    return 200 <= status < 300


async def handle_response(response: Response) -> Result[Any, RequestError]:
    status = response.status
    if status == 500:
        return Error(internal_server_error())
    if status == 204 or response.status_text == NO_CONTENT:
        return Ok(True)

    successful = is_success(status)
    try:
        text = await response.text()
    except Exception as e:
        return Error(ResponseException("Response could not be extracted as text.", response, e))

    if not text:
        return Ok({}) if successful else Error({})

    try:
        parsed = json.loads(text)
    except ValueError as e:
        return Error(
            ResponseException("Response text could not be parsed as JSON.", response, e, text)
        )

    return Ok(parsed) if successful else Error(parsed)


__all__ = ("NO_CONTENT", "is_success", "handle_response")
