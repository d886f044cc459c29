"""Rendering of denial descriptors as HTTP responses."""

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse, PlainTextResponse, Response


def render_denial(
    status_code: int,
    body: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Build the response for a denied request.

    String bodies are sent as plain text, anything else as JSON.
    """
    if body is None or isinstance(body, str):
        return PlainTextResponse(body or "", status_code=status_code, headers=headers)
    return JSONResponse(body, status_code=status_code, headers=headers)
