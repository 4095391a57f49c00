"""
Danthes Domain Models

Subscription descriptors handed to browser clients and the message
envelope posted to the pub/sub server.
"""

from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict


# ══════════════════════════════════════════════════════════════
# Payloads
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ScriptPayload:
    """Script the browser client evaluates on receipt."""

    script: str


@dataclass(frozen=True)
class DataPayload:
    """Structured data delivered to the client's channel callback."""

    value: Any


Payload = Union[ScriptPayload, DataPayload]


def as_payload(data: Any) -> Payload:
    """Wrap a bare value: strings are scripts, anything else is data."""
    if isinstance(data, (ScriptPayload, DataPayload)):
        return data
    if isinstance(data, str):
        return ScriptPayload(data)
    return DataPayload(data)


# ══════════════════════════════════════════════════════════════
# Publish Envelope
# ══════════════════════════════════════════════════════════════


class MessageData(BaseModel):
    """Body delivered to subscribers. Holds either ``eval`` or ``data``."""

    model_config = ConfigDict(frozen=True)

    channel: str
    eval: str | None = None
    data: Any = None


class MessageExt(BaseModel):
    """Bayeux extension block carrying the publish token."""

    model_config = ConfigDict(frozen=True)

    danthes_token: str | None = None


class PublishMessage(BaseModel):
    """Message posted to the pub/sub server."""

    model_config = ConfigDict(frozen=True)

    channel: str
    data: MessageData
    ext: MessageExt

    @classmethod
    def build(cls, channel: str, payload: Payload, token: str | None) -> "PublishMessage":
        if isinstance(payload, ScriptPayload):
            data = MessageData(channel=channel, eval=payload.script)
        else:
            data = MessageData(channel=channel, data=payload.value)
        return cls(channel=channel, data=data, ext=MessageExt(danthes_token=token))

    def to_wire(self) -> dict[str, Any]:
        """Plain dict in the server's format. Unused payload keys are absent."""
        return self.model_dump(mode="json", exclude_unset=True)


# ══════════════════════════════════════════════════════════════
# Subscriptions
# ══════════════════════════════════════════════════════════════


class SubscriptionDescriptor(BaseModel):
    """Signed subscription handed to a browser client.

    Caller-supplied fields are kept as extras next to the fixed ones.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    server: str
    timestamp: int
    signature: str
    channel: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
