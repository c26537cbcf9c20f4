"""
RTA Poller — tolerant response-body decoding
The beta feed may answer with no body, a non-JSON body, or JSON.
Classify before anyone tries to destructure the payload.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx

logger = logging.getLogger("rta.decoder")

_EMPTY_STATUSES = (202, 204)
_SNIPPET_LEN = 800


class DecodeError(Exception):
    """Body claims to be JSON but does not parse."""

    def __init__(self, status_code: int, snippet: str, reason: str = ""):
        self.status_code = status_code
        self.snippet = snippet
        super().__init__(f"Invalid JSON body (HTTP {status_code}): {reason}\n{snippet}")


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Raw:
    text: str


@dataclass(frozen=True)
class Parsed:
    data: Any


DecodedBody = Union[Empty, Raw, Parsed]


def is_json_content_type(content_type: str) -> bool:
    """application/json, or any application/*+json media type."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode(resp: httpx.Response) -> DecodedBody:
    """Classify a response body as Empty, Raw(text) or Parsed(json)."""
    if resp.status_code in _EMPTY_STATUSES:
        return Empty()

    text = resp.text or ""
    if not text.strip():
        return Empty()

    content_type = resp.headers.get("Content-Type")
    if content_type is not None and not is_json_content_type(content_type):
        logger.debug(f"Non-JSON body ({content_type}), {len(text)} chars")
        return Raw(text)

    try:
        return Parsed(json.loads(text))
    except ValueError as e:
        if content_type is None:
            # No declared type — treat as opaque text
            return Raw(text)
        raise DecodeError(resp.status_code, text[:_SNIPPET_LEN], str(e)) from e
