"""
RTA Transcript Poller — Configuration
All secrets loaded from environment variables.
Copy .env.example → .env and fill in your credentials.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger("rta.config")

# Load .env before any os.getenv() calls in dataclass defaults
_ENV_PATH = Path(__file__).parent / ".env"
load_dotenv(_ENV_PATH)
load_dotenv(find_dotenv(usecwd=True))  # .env in the working directory


class ConfigError(Exception):
    """Required configuration is missing."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            "Missing env. Set TENANT_ID, CLIENT_ID, CLIENT_SECRET, RTA_MEETING_ID in .env "
            f"(missing: {', '.join(self.missing)})"
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer — using {default}")
        return default
    if value < 0:
        logger.warning(f"{name}={value} is negative — using {default}")
        return default
    return value


@dataclass
class GraphConfig:
    tenant_id: str = field(default_factory=lambda: os.getenv("TENANT_ID", ""))
    client_id: str = field(default_factory=lambda: os.getenv("CLIENT_ID", ""))
    client_secret: str = field(default_factory=lambda: os.getenv("CLIENT_SECRET", ""))
    base_url: str = field(
        default_factory=lambda: os.getenv("GRAPH_BASE_URL", "https://graph.microsoft.com/beta")
    )
    authority_host: str = "https://login.microsoftonline.com"
    # App-only token
    scope: str = "https://graph.microsoft.com/.default"
    timeout: float = 30.0


@dataclass
class PollerConfig:
    meeting_id: str = field(default_factory=lambda: os.getenv("RTA_MEETING_ID", ""))
    poll_ms: int = field(default_factory=lambda: _env_int("POLL_MS", 2000))
    verbose: bool = field(default_factory=lambda: os.getenv("VERBOSE", "0") == "1")
    # Refresh the bearer token after 50 minutes
    token_max_age: int = 50 * 60
    # Retry policy for 429/503
    max_attempts: int = 5
    max_backoff_ms: int = 32_000


@dataclass
class RtaConfig:
    graph: GraphConfig = field(default_factory=GraphConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    debug: bool = field(default_factory=lambda: os.getenv("RTA_DEBUG", "false").lower() == "true")

    def missing(self) -> List[str]:
        """Names of required variables that are unset or blank."""
        required = {
            "TENANT_ID": self.graph.tenant_id,
            "CLIENT_ID": self.graph.client_id,
            "CLIENT_SECRET": self.graph.client_secret,
            "RTA_MEETING_ID": self.poller.meeting_id,
        }
        return [name for name, value in required.items() if not value]

    def validate(self):
        """Raise ConfigError if any required variable is absent."""
        missing = self.missing()
        if missing:
            raise ConfigError(missing)

