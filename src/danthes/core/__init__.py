"""Core domain models and errors."""

from .errors import ConfigurationError, DanthesError
from .models import (
    DataPayload,
    MessageData,
    MessageExt,
    Payload,
    PublishMessage,
    ScriptPayload,
    SubscriptionDescriptor,
    as_payload,
)

__all__ = [
    "ConfigurationError",
    "DanthesError",
    "DataPayload",
    "MessageData",
    "MessageExt",
    "Payload",
    "PublishMessage",
    "ScriptPayload",
    "SubscriptionDescriptor",
    "as_payload",
]
