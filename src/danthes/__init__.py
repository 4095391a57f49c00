"""
Danthes

Signed subscriptions and HTTP publishing for a Faye pub/sub server.
"""

__version__ = "0.1.0"

from .core import (
    ConfigurationError,
    DanthesError,
    DataPayload,
    PublishMessage,
    ScriptPayload,
    SubscriptionDescriptor,
)
from .extension import SubscriptionGuard
from .publisher import PublishGateway
from .subscription import SignedSubscriptionIssuer

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "DanthesError",
    # Models
    "DataPayload",
    "PublishMessage",
    "ScriptPayload",
    "SubscriptionDescriptor",
    # Services
    "PublishGateway",
    "SignedSubscriptionIssuer",
    "SubscriptionGuard",
]
