"""
Publish Gateway

Formats channel messages in the pub/sub server's envelope and posts them
to the server over HTTP.
"""

import json
from typing import Any

import httpx
import structlog

from danthes.config import Settings, get_settings
from danthes.core.models import Payload, PublishMessage, as_payload

logger = structlog.get_logger()


class PublishGateway:
    """
    HTTP gateway to the pub/sub server.

    Usage:
        gateway = PublishGateway(settings)
        gateway.publish("/messages/new", {"body": "hello"})
        gateway.publish("/messages/new", ScriptPayload("alert('hi')"))

    Each publish is a single blocking POST. Transport errors propagate,
    response status and body are not interpreted.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.async_transport = async_transport

    def server_url(self) -> str:
        return self.settings.server_url()

    def build_message(self, channel: str, data: Payload | Any) -> PublishMessage:
        """Build the message envelope for a channel and payload."""
        return PublishMessage.build(channel, as_payload(data), self.settings.secret_token)

    def _endpoint(self) -> httpx.URL:
        url = httpx.URL(self.server_url())
        if not url.path:
            url = url.copy_with(path="/")
        return url

    @staticmethod
    def _form(message: PublishMessage) -> dict[str, str]:
        return {"message": json.dumps(message.to_wire())}

    # ──────────────────────────────────────────────────────────
    # Sync
    # ──────────────────────────────────────────────────────────

    def publish(self, channel: str, data: Payload | Any) -> httpx.Response:
        """Publish data to a channel."""
        return self.publish_message(self.build_message(channel, data))

    def publish_message(self, message: PublishMessage) -> httpx.Response:
        """POST an already built message to the server."""
        url = self._endpoint()

        with httpx.Client(
            transport=self.transport,
            timeout=self.settings.publish_timeout,
        ) as client:
            try:
                response = client.post(url, data=self._form(message))
            except httpx.TransportError as e:
                logger.error("Failed to publish message", channel=message.channel, url=str(url), error=str(e))
                raise

        logger.debug("Published message", channel=message.channel, status_code=response.status_code)
        return response

    # ──────────────────────────────────────────────────────────
    # Async
    # ──────────────────────────────────────────────────────────

    async def publish_async(self, channel: str, data: Payload | Any) -> httpx.Response:
        """Publish data to a channel without blocking the event loop."""
        message = self.build_message(channel, data)
        url = self._endpoint()

        async with httpx.AsyncClient(
            transport=self.async_transport,
            timeout=self.settings.publish_timeout,
        ) as client:
            try:
                response = await client.post(url, data=self._form(message))
            except httpx.TransportError as e:
                logger.error("Failed to publish message", channel=channel, url=str(url), error=str(e))
                raise

        logger.debug("Published message", channel=channel, status_code=response.status_code)
        return response
