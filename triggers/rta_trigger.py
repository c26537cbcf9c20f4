"""
RTA Trigger — Microsoft Graph realtime transcript feed
Polls one meeting's transcript list, prints each new fragment and its detail.
Runs until the process is terminated; per-iteration errors never stop the loop.
"""
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from outputs.formatters import format_fragment_summary, format_payload, resolve_id
from triggers.graph_auth import AuthError, Credential, GraphCredentialProvider
from triggers.graph_client import (
    GraphClient,
    HttpError,
    auth_headers,
    transcript_detail_url,
    transcripts_list_url,
)
from triggers.response_decoder import DecodeError, Empty, Parsed, Raw, decode
from triggers.state import FragmentTracker

logger = logging.getLogger("rta.trigger")

BANNER = "== Microsoft Graph RTA Transcript Poller =="


def is_auth_failure(exc: Exception) -> bool:
    """True for a 401 from Graph."""
    if isinstance(exc, HttpError):
        return exc.status_code == 401
    if isinstance(exc, DecodeError):
        # Message carries the body snippet, which may contain anything
        return False
    return "401" in str(exc)


def extract_items(payload) -> list:
    """Fragment references from {"value": [...]} or a bare list; anything else is empty."""
    if isinstance(payload, dict) and isinstance(payload.get("value"), list):
        return payload["value"]
    if isinstance(payload, list):
        return payload
    return []


class TranscriptPoller:
    """Owns the credential and seen-set for one meeting; strictly sequential."""

    def __init__(self, meeting_id: str,
                 credentials: GraphCredentialProvider,
                 client: GraphClient,
                 tracker: Optional[FragmentTracker] = None,
                 poll_interval_ms: int = 2000,
                 verbose: bool = False,
                 token_max_age: float = 50 * 60,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep):
        self.meeting_id = meeting_id
        self._credentials = credentials
        self._client = client
        self.tracker = tracker if tracker is not None else FragmentTracker()
        self.poll_interval_ms = poll_interval_ms
        self.verbose = verbose
        self._token_max_age = token_max_age
        self._clock = clock
        self._sleep = sleep
        self.credential: Optional[Credential] = None

    # -------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------

    def start(self):
        """Print the banner and acquire the first token. AuthError here is fatal."""
        print(BANNER)
        print(f"Meeting: {self.meeting_id}")
        print(f"Interval: {self.poll_interval_ms} ms")
        self.credential = self._credentials.acquire()

    def run(self, max_iterations: Optional[int] = None):
        """Start, then poll/sleep forever (or for max_iterations)."""
        self.start()
        iteration = 0
        while True:
            self.poll_once()
            iteration += 1
            if max_iterations is not None and iteration >= max_iterations:
                return
            self._sleep(self.poll_interval_ms / 1000)

    def close(self):
        self._client.close()

    # -------------------------------------------------------
    # Credential
    # -------------------------------------------------------

    def _ensure_fresh_token(self):
        # Refresh every 50 minutes regardless of the token's own expiry
        if self.credential is None or self.credential.is_stale(self._token_max_age, self._clock()):
            logger.info("Graph token older than max age — refreshing")
            if self.credential is not None:
                # Bypass the identity library token cache
                self._credentials.reset()
            self.credential = self._credentials.acquire()

    def _refresh_after_auth_failure(self):
        logger.warning("401 from Graph. Refreshing token...")
        self._credentials.reset()
        try:
            self.credential = self._credentials.acquire()
        except AuthError as e:
            logger.error(f"Token refresh failed: {e}")

    # -------------------------------------------------------
    # Iteration
    # -------------------------------------------------------

    def poll_once(self) -> int:
        """One list → detail pass. Returns the number of new fragments printed."""
        try:
            return self._poll()
        except Exception as e:
            if is_auth_failure(e):
                self._refresh_after_auth_failure()
            else:
                logger.warning(f"Poll error: {e}")
            return 0

    def _poll(self) -> int:
        self._ensure_fresh_token()

        url = transcripts_list_url(self._client.base_url, self.meeting_id)
        body = decode(self._client.request(url, auth_headers(self.credential.token)))

        if isinstance(body, Empty):
            if self.verbose:
                print("~ list payload ~ (empty)")
            return 0
        if isinstance(body, Raw):
            if self.verbose:
                print("~ list payload ~ (non-JSON)")
                print(body.text)
            return 0

        if self.verbose:
            print("~ list payload ~")
            print(format_payload(body.data))

        new_count = 0
        for item in extract_items(body.data):
            fragment_id = resolve_id(item)
            if not fragment_id:
                logger.debug("Skipping list item with no id")
                continue
            fragment_id = str(fragment_id)
            if not self.tracker.mark_if_new(fragment_id):
                continue

            new_count += 1
            print("\nNEW transcript fragment detected:")
            for line in format_fragment_summary(item):
                print(line)

            try:
                self._print_detail(fragment_id)
            except Exception as e:
                logger.warning(f"Failed to fetch detail for {fragment_id}: {e}")

        return new_count

    def _print_detail(self, fragment_id: str):
        url = transcript_detail_url(self._client.base_url, self.meeting_id, fragment_id)
        body = decode(self._client.request(url, auth_headers(self.credential.token)))

        if not isinstance(body, Parsed):
            if self.verbose:
                kind = "empty" if isinstance(body, Empty) else "non-JSON"
                print(f"~ detail payload ~ ({kind})")
                if isinstance(body, Raw):
                    print(body.text)
            return

        if self.verbose:
            print("~ detail payload ~")
            print(format_payload(body.data))

        if body.data:
            print("Detail snippet:")
            for line in format_fragment_summary(body.data):
                print(line)


if __name__ == "__main__":
    from cli import main
    sys.exit(main())
