"""
RTA Poller — Microsoft Graph HTTP client
GET with retry on 429/503, honoring Retry-After or exponential backoff.
All other non-success statuses surface as HttpError.
"""
import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger("rta.graph")

RETRYABLE_STATUSES = (429, 503)

_FEED_PATH = "/copilot/communications/realtimeActivityFeed/meetings"


class HttpError(Exception):
    """Non-success response, or retries exhausted."""

    def __init__(self, status_code: int, reason: str, body: str, url: str):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status_code} {reason} for {url}\n{body}")


# -------------------------------------------------------
# Endpoints
# -------------------------------------------------------

def transcripts_list_url(base_url: str, meeting_id: str) -> str:
    """GET .../meetings/{meetingId}/transcripts"""
    return f"{base_url.rstrip('/')}{_FEED_PATH}/{quote(meeting_id, safe='')}/transcripts"


def transcript_detail_url(base_url: str, meeting_id: str, transcript_id: str) -> str:
    """GET .../meetings/{meetingId}/transcripts/{transcriptId}"""
    return f"{transcripts_list_url(base_url, meeting_id)}/{quote(transcript_id, safe='')}"


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}", "Accept": "application/json"}


# -------------------------------------------------------
# Client
# -------------------------------------------------------

class GraphClient:
    """Thin httpx wrapper — one GET at a time, retried on throttling."""

    def __init__(self, base_url: str = "https://graph.microsoft.com/beta",
                 max_attempts: int = 5, max_backoff_ms: int = 32_000,
                 timeout: float = 30.0,
                 http_client: Optional[httpx.Client] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.base_url = base_url
        self._max_attempts = max_attempts
        self._max_backoff_ms = max_backoff_ms
        self._client = http_client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    def request(self, url: str, headers: dict) -> httpx.Response:
        """GET `url`, retrying 429/503 up to max_attempts in total."""
        attempt = 0
        while True:
            attempt += 1
            resp = self._client.get(url, headers=headers)
            if resp.is_success:
                return resp

            if resp.status_code in RETRYABLE_STATUSES and attempt < self._max_attempts:
                wait_ms = self._retry_delay_ms(resp, attempt)
                logger.warning(f"[{resp.status_code}] throttled; retrying in {wait_ms}ms...")
                self._sleep(wait_ms / 1000)
                continue

            raise HttpError(resp.status_code, resp.reason_phrase, _safe_body(resp), url)

    def _retry_delay_ms(self, resp: httpx.Response, attempt: int) -> int:
        retry_after = _parse_retry_after(resp.headers.get("Retry-After"))
        if retry_after is not None:
            return retry_after
        return min(self._max_backoff_ms, 1000 * 2 ** attempt)

    def close(self):
        """Close the HTTP client."""
        self._client.close()
        logger.debug("Graph client closed")


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Retry-After as milliseconds. Accepts delta-seconds or an HTTP-date."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        return max(0, int(float(value) * 1000))
    except (ValueError, OverflowError):
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable Retry-After: {value!r}")
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    delta = (when - datetime.now(timezone.utc)).total_seconds()
    return max(0, int(delta * 1000))


def _safe_body(resp: httpx.Response) -> str:
    try:
        return resp.text
    except Exception:
        return ""
