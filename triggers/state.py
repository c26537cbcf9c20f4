"""
RTA Poller — Trigger State
Dedup tracking for transcript fragments.
In-memory only; lives as long as the process. No persistence.
"""
import logging

logger = logging.getLogger("rta.trigger_state")


class FragmentTracker:
    """Remembers which fragment ids have already been processed this run."""

    def __init__(self):
        self._seen: set[str] = set()

    def mark_if_new(self, fragment_id: str) -> bool:
        """Record fragment_id. True only the first time an id is presented."""
        if fragment_id in self._seen:
            return False
        self._seen.add(fragment_id)
        logger.debug(f"Tracking fragment {fragment_id} ({len(self._seen)} seen)")
        return True

    def is_processed(self, fragment_id: str) -> bool:
        return fragment_id in self._seen

    def __contains__(self, fragment_id) -> bool:
        return fragment_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)
