"""Candidate identity and election configuration.

A candidate is created once per process per election attempt. Its group
key doubles as the MongoDB collection name, so unrelated election groups
never share a collection.
"""

from __future__ import annotations

import hashlib
import secrets
import time
from dataclasses import dataclass

# Identity configuration
GROUP_KEY_PREFIX = "leader-"
DEFAULT_GROUP = "default"
MIN_TTL_MS = 5000
ID_BYTES = 32


def generate_candidate_id() -> str:
    """Generate a random 64-character hex candidate ID."""
    return secrets.token_hex(ID_BYTES)


def group_key_for(name: str | None = None) -> str:
    """Derive the collection name for an election group.

    Example:
        >>> group_key_for("daily-job")
        'leader-...'  # 40 hex characters after the prefix
    """
    digest = hashlib.sha1(  # nosec B324 - naming only, not security
        (name or DEFAULT_GROUP).encode("utf-8")
    ).hexdigest()
    return f"{GROUP_KEY_PREFIX}{digest}"


def clamp_ttl_ms(ttl_ms: int | None) -> int:
    """Raise a TTL below the floor to the floor."""
    return max(ttl_ms or 0, MIN_TTL_MS)


@dataclass
class CandidateConfig:
    """Identity of one candidate in one election group.

    Attributes:
        id: Unique candidate identifier
        ttl_ms: Election record time-to-live in milliseconds
        group_key: Collection name shared by the election group
        election_deadline: UNIX timestamp after which this candidate's
            latest registration has expired
    """

    id: str
    ttl_ms: int
    group_key: str
    election_deadline: float

    @classmethod
    def create(
        cls,
        id: str | None = None,
        ttl_ms: int | None = None,
        key: str | None = None,
    ) -> "CandidateConfig":
        """Build a configuration from optional operator-supplied values."""
        ttl = clamp_ttl_ms(ttl_ms)
        return cls(
            id=id or generate_candidate_id(),
            ttl_ms=ttl,
            group_key=group_key_for(key),
            election_deadline=time.time() + ttl / 1000,
        )

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_ms / 1000

    def refresh_deadline(self) -> float:
        """Restart the TTL window from now."""
        self.election_deadline = time.time() + self.ttl_seconds
        return self.election_deadline

    def remaining_seconds(self) -> float:
        """Seconds until the deadline; zero or negative once it has passed."""
        return self.election_deadline - time.time()
