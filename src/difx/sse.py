"""Server-sent event decoding for streamed model responses."""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import DecodeError

if TYPE_CHECKING:
    from .providers import Provider

PING = "ping"


class StreamEventKind(str, Enum):
    """What a single stream event means for the text being assembled."""

    MESSAGE_START = "message_start"
    CONTENT_DELTA = "content_delta"
    CONTENT_STOP = "content_stop"
    MESSAGE_STOP = "message_stop"
    PING = "ping"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StreamEvent:
    """A decoded stream event. Only content deltas carry text."""

    kind: StreamEventKind
    text: str = ""


def parse_json(data: str) -> Any:
    """Decode a JSON payload, raising DecodeError with the fragment on failure."""
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON ({e.msg})", fragment=data) from e


def _field(line: str, name: str) -> str | None:
    """Value of an SSE field line ``name: value``, or None if it is another field."""
    prefix = name + ":"
    if not line.startswith(prefix):
        return None
    value = line[len(prefix) :]
    # A single leading space is part of the framing, not the value
    if value.startswith(" "):
        value = value[1:]
    return value


async def decode_stream(lines: AsyncIterable[bytes], provider: Provider) -> AsyncIterator[str]:
    """
    Yield text deltas from an SSE byte stream.

    Args:
        lines: Raw lines as delivered by the HTTP response
        provider: Adapter that interprets each event's JSON payload

    Raises:
        DecodeError: On undecodable bytes or a malformed JSON payload
    """
    event_type = ""

    async for raw in lines:
        try:
            line = raw.decode("utf-8").rstrip("\r\n")
        except UnicodeDecodeError as e:
            raise DecodeError("Stream is not valid UTF-8", fragment=repr(raw)) from e

        if not line or line.startswith(":"):
            continue

        value = _field(line, "event")
        if value is not None:
            event_type = value.strip()
            continue

        data = _field(line, "data")
        if data is None:
            continue

        if event_type == PING:
            continue
        if provider.stream_sentinel is not None and data.strip() == provider.stream_sentinel:
            return

        payload = parse_json(data)
        for event in provider.parse_stream_event(event_type, payload):
            if event.kind is StreamEventKind.CONTENT_DELTA:
                if event.text:
                    yield event.text
            elif event.kind is StreamEventKind.MESSAGE_STOP:
                return
