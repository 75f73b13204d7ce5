"""Wires update engines into an httpx-based host as a transport wrapper."""

import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import parse_qsl

import httpx

from .engine import UpdateEngine
from .types import SessionState

logger = logging.getLogger(__name__)

# Headers describing the original encoded body, invalid once the body is rewritten.
_STALE_HEADERS = ("content-length", "content-encoding", "transfer-encoding")


def request_fields(request: httpx.Request) -> dict[str, Any]:
    """
    Read the fields of an outbound request body.

    Form-encoded and JSON bodies are understood; anything else yields no fields.
    """
    content = request.read()
    if not content:
        return {}

    content_type = request.headers.get("content-type", "")
    text = content.decode("utf-8", errors="replace")
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(text, keep_blank_values=True))
    if "json" in content_type:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}
    return {}


class TranslationUpdateTransport(httpx.BaseTransport):
    """
    An httpx transport that runs both phases of each engine around a wrapped transport.

    Session state lives in local variables of `handle_request`, so every
    request gets its own and concurrent requests never share collected items.
    """

    def __init__(self, engines: Sequence[UpdateEngine], wrapped: httpx.BaseTransport | None = None) -> None:
        """
        Initialize the transport.

        Args:
            engines: The engines to run; each only reacts to its own endpoint.
            wrapped: The transport that performs the actual request.

        """
        self.engines = list(engines)
        self.wrapped = wrapped or httpx.HTTPTransport()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Forward the request unmodified and enrich the paired response."""
        url = str(request.url)
        fields = request_fields(request)

        sessions: list[tuple[UpdateEngine, SessionState]] = []
        for engine in self.engines:
            session = engine.on_outbound_request(url, fields)
            if session is not None and not session.is_empty:
                sessions.append((engine, session))

        response = self.wrapped.handle_request(request)
        if not sessions or response.status_code != httpx.codes.OK:
            return response

        # Once read, the wrapped response cannot be handed back to the client.
        content: str | bytes = response.read()
        for engine, session in sessions:
            content = engine.on_inbound_response(url, content, session)

        response.close()
        headers = [(name, value) for name, value in response.headers.multi_items() if name.lower() not in _STALE_HEADERS]
        return httpx.Response(
            status_code=response.status_code,
            headers=headers,
            content=content.encode("utf-8") if isinstance(content, str) else content,
            request=request,
            extensions=response.extensions,
        )

    def close(self) -> None:
        """Close the wrapped transport."""
        self.wrapped.close()
