"""
Signed Subscriptions

Issues subscription descriptors signed with the shared secret, and checks
whether a previously issued timestamp has expired.
"""

import hashlib
import time
from typing import Any, Callable, Mapping

import structlog

from danthes.config import Settings, get_settings
from danthes.core.models import SubscriptionDescriptor

logger = structlog.get_logger()

# Publisher name that receives long-lived timestamps
LONG_LIVED_PUBLISHER = "superduper"
LONG_LIVED_OFFSET_MS = 3 * 365 * 24 * 60 * 60 * 1000  # 3 years


class SignedSubscriptionIssuer:
    """
    Builds signed subscription descriptors for browser clients.

    Usage:
        issuer = SignedSubscriptionIssuer(settings)
        sub = issuer.issue(channel="/messages/new")
        # hand sub.to_dict() to the client-side subscribe call
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings()
        self.clock = clock

    def now_millis(self) -> int:
        return round(self.clock() * 1000)

    def generate_timestamp(self, options: Mapping[str, Any] | None = None) -> int:
        """Current epoch milliseconds, pushed 3 years ahead for the long-lived publisher."""
        options = options or {}
        if options.get("publisher") == LONG_LIVED_PUBLISHER:
            return round(self.clock() * 1000 + LONG_LIVED_OFFSET_MS)
        return self.now_millis()

    def sign(self, channel: str | None, timestamp: int | str) -> str:
        """SHA-1 hex digest of secret, channel and timestamp joined as strings."""
        secret = self.settings.require_secret_token()
        raw = "".join([secret, channel or "", str(timestamp)])
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()

    def issue(
        self, options: Mapping[str, Any] | None = None, **fields: Any
    ) -> SubscriptionDescriptor:
        """Build a signed descriptor.

        Options are merged over ``server`` and ``timestamp``; the signature
        is computed last so callers cannot supply their own.
        """
        options = {**(options or {}), **fields}

        sub: dict[str, Any] = {
            "server": self.settings.server_url(),
            "timestamp": self.generate_timestamp(options),
        }
        sub.update(options)
        sub["timestamp"] = int(sub["timestamp"])
        sub["signature"] = self.sign(sub.get("channel"), sub["timestamp"])

        logger.debug("Issued subscription", channel=sub.get("channel"), timestamp=sub["timestamp"])
        return SubscriptionDescriptor(**sub)

    def is_expired(self, timestamp: int) -> bool:
        """Whether a timestamp is older than the configured expiration window."""
        expiration = self.settings.signature_expiration
        if expiration is None:
            return False
        return timestamp < round((self.clock() - expiration) * 1000)
