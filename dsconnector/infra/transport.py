"""
HttpMessageTransport: the default MessageTransport, built on httpx.

Messages go out as ``multipart/form-data`` with two parts, ``header``
(the message header fields as JSON) and ``payload``. Replies are expected
in the same shape. Connection and read timeouts come from config; the
transport does not retry.
"""

from __future__ import annotations

import json
import logging
from email.parser import BytesParser
from email.policy import HTTP
from typing import Any, Optional

import httpx

from dsconnector.core.errors import MessageTransportError
from dsconnector.core.models import Payload, Response
from dsconnector.infra.config import ConnectorConfig

logger = logging.getLogger(__name__)


# ============ Multipart framing ============

def multipart_files(header: dict[str, Any], payload: Payload = "") -> dict[str, tuple]:
    """The ``files=`` mapping httpx needs to send header + payload as form parts."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return {
        "header": (None, json.dumps(header).encode("utf-8"), "application/ld+json"),
        "payload": (None, payload, "application/octet-stream"),
    }


def is_multipart(content_type: Optional[str]) -> bool:
    return bool(content_type) and "multipart/" in content_type


def decode_multipart(content_type: str, body: bytes) -> Response:
    """
    Parse a multipart reply into a Response.

    Raises MessageTransportError if the framing is broken or the header
    part is missing or not a JSON object.
    """
    if not is_multipart(content_type):
        raise MessageTransportError(f"Expected a multipart reply, got {content_type or 'no content type'}")

    raw = f"Content-Type: {content_type}\r\n\r\n".encode("ascii") + body
    message = BytesParser(policy=HTTP).parsebytes(raw)
    if not message.is_multipart():
        raise MessageTransportError("Malformed multipart reply")

    parts: dict[str, bytes] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if name:
            parts[name] = part.get_payload(decode=True) or b""

    if "header" not in parts:
        raise MessageTransportError("Multipart reply has no header part")
    try:
        header = json.loads(parts["header"])
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MessageTransportError(f"Reply header is not valid JSON: {e}") from e
    if not isinstance(header, dict):
        raise MessageTransportError("Reply header is not a JSON object")

    fields = {
        str(k): v if isinstance(v, str) else json.dumps(v)
        for k, v in header.items()
    }
    return Response(header=fields, payload=parts.get("payload", b""))


# ============ Transport ============

class HttpMessageTransport:
    """MessageTransport over HTTP(S). One shared httpx.AsyncClient per transport."""

    def __init__(
        self,
        timeout_s: float = 30.0,
        connect_timeout_s: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._timeout = httpx.Timeout(timeout_s, connect=connect_timeout_s)
        self._client = client

    @classmethod
    def from_config(cls, config: ConnectorConfig) -> HttpMessageTransport:
        return cls(
            timeout_s=config.request_timeout_seconds,
            connect_timeout_s=config.connect_timeout_seconds,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazily created HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(
        self,
        recipient: str,
        header: dict[str, str],
        payload: Payload,
    ) -> Response:
        content_type = ""
        try:
            resp = await self.client.post(recipient, files=multipart_files(header, payload))
            content_type = resp.headers.get("content-type", "")
            # Peers send rejections as multipart messages on error statuses too
            if not is_multipart(content_type):
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("Timeout talking to %s: %s", recipient, e)
            raise MessageTransportError(f"Timeout: {e}", recipient=recipient) from e
        except httpx.HTTPStatusError as e:
            logger.error("Peer %s answered HTTP %d", recipient, e.response.status_code)
            raise MessageTransportError(
                f"Peer answered HTTP {e.response.status_code}", recipient=recipient,
            ) from e
        except httpx.RequestError as e:
            logger.error("Network error talking to %s: %s", recipient, e)
            raise MessageTransportError(f"Network error: {e}", recipient=recipient) from e

        try:
            return decode_multipart(content_type, resp.content)
        except MessageTransportError as e:
            if resp.is_error:
                logger.error("Peer %s answered HTTP %d with an unreadable message",
                             recipient, resp.status_code)
                raise MessageTransportError(
                    f"Peer answered HTTP {resp.status_code}: {e}", recipient=recipient,
                ) from e
            e.recipient = recipient
            raise

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
