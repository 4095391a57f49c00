"""
Subscription Guard

Incoming-message filter for a Bayeux server. Checks subscription
signatures and publish tokens issued by this package.
"""

import hmac
from typing import Any

import structlog

from danthes.subscription import SignedSubscriptionIssuer

logger = structlog.get_logger()

META_PREFIX = "/meta/"
META_SUBSCRIBE = "/meta/subscribe"


class SubscriptionGuard:
    """
    Validates incoming Bayeux messages in place.

    Rejected messages get an ``error`` field, which the server reports back
    to the client instead of processing the message.
    """

    def __init__(self, issuer: SignedSubscriptionIssuer | None = None):
        self.issuer = issuer or SignedSubscriptionIssuer()

    def incoming(self, message: dict[str, Any]) -> dict[str, Any]:
        channel = message.get("channel")
        if channel == META_SUBSCRIBE:
            self._authenticate_subscribe(message)
        elif not (isinstance(channel, str) and channel.startswith(META_PREFIX)):
            self._authenticate_publish(message)
        return message

    def _authenticate_subscribe(self, message: dict[str, Any]) -> None:
        ext = message.get("ext")
        ext = ext if isinstance(ext, dict) else {}
        timestamp = ext.get("danthes_timestamp")
        signature = ext.get("danthes_signature")
        subscription = message.get("subscription")

        # Only single channel subscriptions can carry a signature
        if not isinstance(subscription, str) or timestamp is None or signature is None:
            logger.warning("Rejected subscription", channel=subscription, reason="malformed")
            message["error"] = "Incorrect signature."
            return

        try:
            timestamp = int(timestamp)
        except (TypeError, ValueError):
            logger.warning("Rejected subscription", channel=subscription, reason="timestamp")
            message["error"] = "Incorrect signature."
            return

        expected = self.issuer.sign(subscription, timestamp)
        if not hmac.compare_digest(str(signature).encode(), expected.encode()):
            logger.warning("Rejected subscription", channel=subscription, reason="signature")
            message["error"] = "Incorrect signature."
        elif self.issuer.is_expired(timestamp):
            logger.info("Rejected subscription", channel=subscription, reason="expired")
            message["error"] = "Signature has expired."

    def _authenticate_publish(self, message: dict[str, Any]) -> None:
        secret = self.issuer.settings.require_secret_token()
        ext = message.get("ext")
        token = ext.get("danthes_token") if isinstance(ext, dict) else None

        if token is None or not hmac.compare_digest(str(token).encode(), secret.encode()):
            logger.warning("Rejected publish", channel=message.get("channel"), reason="token")
            message["error"] = "Incorrect token."
        else:
            del ext["danthes_token"]
