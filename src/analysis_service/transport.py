"""Server-Sent Events transport for response fragments.

The wire format is the UI message stream protocol spoken by the browser
client: one JSON event per ``data:`` line, a ``text-delta`` per fragment, and
either ``finish`` followed by ``[DONE]`` or a single ``error`` event at the
end. A stream that stops without one of those terminators was cut off.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import GenerationFailure, StreamFailure, TransportFailure
from .types import ResponseFragment

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
GENERIC_ERROR_TEXT = "An error occurred."

UI_MESSAGE_STREAM_HEADERS = {
    "x-vercel-ai-ui-message-stream": "v1",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StartEvent(_Event):
    type: Literal["start"] = "start"
    message_id: str = Field(alias="messageId")


class TextStartEvent(_Event):
    type: Literal["text-start"] = "text-start"
    id: str


class TextDeltaEvent(_Event):
    type: Literal["text-delta"] = "text-delta"
    id: str
    delta: str


class TextEndEvent(_Event):
    type: Literal["text-end"] = "text-end"
    id: str


class FinishEvent(_Event):
    type: Literal["finish"] = "finish"


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    error_text: str = Field(alias="errorText")


class DoneEvent(_Event):
    """The ``[DONE]`` sentinel; never serialized as JSON."""

    type: Literal["done"] = "done"


StreamEvent = Annotated[
    Union[StartEvent, TextStartEvent, TextDeltaEvent, TextEndEvent, FinishEvent, ErrorEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)

KNOWN_EVENT_TYPES = {"start", "text-start", "text-delta", "text-end", "finish", "error"}


def format_sse(event: _Event) -> str:
    return f"data: {event.model_dump_json(by_alias=True)}\n\n"


def format_done() -> str:
    return f"data: {DONE_SENTINEL}\n\n"


async def encode_ui_stream(
    fragments: AsyncIterable[ResponseFragment],
    message_id: str,
) -> AsyncIterator[str]:
    """Serialize fragments to SSE, one event per fragment as soon as it arrives.

    A StreamFailure from the fragment source becomes a generic ``error``
    event; the cause stays in the logs.
    """
    yield format_sse(StartEvent(message_id=message_id))
    text_id = f"text-{message_id}"
    text_open = False
    count = 0
    try:
        async for fragment in fragments:
            if not text_open:
                yield format_sse(TextStartEvent(id=text_id))
                text_open = True
            yield format_sse(TextDeltaEvent(id=text_id, delta=fragment.text))
            count += 1
    except StreamFailure as exc:
        logger.warning(
            "Stream for message_id=%s failed after %d fragments (%s): %s",
            message_id,
            count,
            type(exc).__name__,
            exc,
        )
        yield format_sse(ErrorEvent(error_text=GENERIC_ERROR_TEXT))
        return
    except Exception:
        logger.exception("Unexpected error while streaming message_id=%s", message_id)
        yield format_sse(ErrorEvent(error_text=GENERIC_ERROR_TEXT))
        return
    finally:
        # Closes the upstream model call when the client goes away mid-stream.
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    if text_open:
        yield format_sse(TextEndEvent(id=text_id))
    yield format_sse(FinishEvent())
    yield format_done()


def parse_event_data(data: str) -> StreamEvent | DoneEvent:
    """Decode the payload of one SSE event."""
    if data.strip() == DONE_SENTINEL:
        return DoneEvent()
    try:
        return _event_adapter.validate_json(data)
    except PydanticValidationError as exc:
        raise TransportFailure(f"Undecodable stream event: {data[:200]!r}") from exc


async def decode_ui_stream(lines: AsyncIterable[str]) -> AsyncIterator[StreamEvent | DoneEvent]:
    """Parse SSE lines into events.

    Follows the SSE field rules: ``data:`` lines of one event are joined with
    newlines, lines starting with ``:`` are comments, a blank line ends the
    event. Unknown event types (e.g. ``start-step``) are skipped.
    """
    data_lines: list[str] = []
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data_lines:
                data = "\n".join(data_lines)
                data_lines = []
                event = _parse_known(data)
                if event is not None:
                    yield event
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "data":
            data_lines.append(value)
    if data_lines:
        event = _parse_known("\n".join(data_lines))
        if event is not None:
            yield event


def _parse_known(data: str) -> StreamEvent | DoneEvent | None:
    if data.strip() != DONE_SENTINEL:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            raise TransportFailure(f"Malformed stream event: {data[:200]!r}") from exc
        if not isinstance(payload, dict) or payload.get("type") not in KNOWN_EVENT_TYPES:
            logger.debug("Skipping unrecognized stream event: %s", data[:200])
            return None
    return parse_event_data(data)


async def iter_fragments(
    events: AsyncIterable[StreamEvent | DoneEvent],
    message_id: str,
) -> AsyncIterator[ResponseFragment]:
    """Rebuild the ordered fragment sequence from decoded events.

    Returns normally on ``finish``/``[DONE]``; raises GenerationFailure on an
    ``error`` event and TransportFailure when the channel ends early.
    """
    index = 0
    finished = False
    async for event in events:
        if isinstance(event, TextDeltaEvent):
            if finished:
                raise TransportFailure("Text received after finish")
            if event.delta:
                yield ResponseFragment(message_id=message_id, index=index, text=event.delta)
                index += 1
        elif isinstance(event, ErrorEvent):
            raise GenerationFailure(event.error_text)
        elif isinstance(event, FinishEvent):
            finished = True
        elif isinstance(event, DoneEvent):
            return
    if not finished:
        raise TransportFailure(f"Stream for {message_id} ended before completion")
