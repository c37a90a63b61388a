"""Consumer-side reassembly of streamed fragments into messages."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass, field
from enum import Enum

from .errors import MessageClosedError, StreamFailure
from .types import ResponseFragment

logger = logging.getLogger(__name__)


class MessageState(str, Enum):
    """Lifecycle of an assembled message."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (MessageState.COMPLETED, MessageState.FAILED)


@dataclass
class AssembledMessage:
    """Text accumulated for one message, in arrival order."""

    id: str
    state: MessageState = MessageState.IDLE
    parts: list[str] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def text(self) -> str:
        return "".join(self.parts)

    @property
    def fragment_count(self) -> int:
        return len(self.parts)


UpdateListener = Callable[[AssembledMessage], None]


class ResponseAssembler:
    """Track one AssembledMessage per message id.

    ``on_update`` is called with the message after every change, which is
    what a presenter needs for progressive rendering.
    """

    def __init__(self, on_update: UpdateListener | None = None) -> None:
        self._messages: dict[str, AssembledMessage] = {}
        self._on_update = on_update

    def _message(self, message_id: str) -> AssembledMessage:
        message = self._messages.get(message_id)
        if message is None:
            message = AssembledMessage(id=message_id)
            self._messages[message_id] = message
        return message

    def _notify(self, message: AssembledMessage) -> None:
        if self._on_update is not None:
            self._on_update(message)

    def on_fragment(self, message_id: str, fragment: ResponseFragment | str) -> AssembledMessage:
        message = self._message(message_id)
        if message.state.is_terminal:
            raise MessageClosedError(message_id)
        text = fragment.text if isinstance(fragment, ResponseFragment) else fragment
        message.parts.append(text)
        message.state = MessageState.STREAMING
        self._notify(message)
        return message

    def on_end(self, message_id: str) -> AssembledMessage:
        message = self._message(message_id)
        if message.state.is_terminal:
            logger.debug("Ignoring end for closed message %s", message_id)
            return message
        message.state = MessageState.COMPLETED
        self._notify(message)
        return message

    def on_error(self, message_id: str, error: BaseException) -> AssembledMessage:
        message = self._message(message_id)
        if message.state.is_terminal:
            logger.debug("Ignoring error for closed message %s: %s", message_id, error)
            return message
        message.state = MessageState.FAILED
        message.error = error
        self._notify(message)
        return message

    def get(self, message_id: str) -> AssembledMessage | None:
        return self._messages.get(message_id)

    def text(self, message_id: str) -> str:
        message = self._messages.get(message_id)
        return message.text if message else ""

    def discard(self, message_id: str) -> None:
        self._messages.pop(message_id, None)

    async def consume(
        self, message_id: str, fragments: AsyncIterable[ResponseFragment]
    ) -> AssembledMessage:
        """Feed a fragment stream into the assembler until it ends.

        A StreamFailure leaves the message FAILED with its partial text and is
        not re-raised. Any other exception, cancellation included, also marks
        the message FAILED and then propagates.
        """
        try:
            async for fragment in fragments:
                self.on_fragment(message_id, fragment)
        except StreamFailure as exc:
            logger.warning("Stream for message %s failed: %s", message_id, exc)
            return self.on_error(message_id, exc)
        except (Exception, asyncio.CancelledError) as exc:
            self.on_error(message_id, exc)
            raise
        finally:
            aclose = getattr(fragments, "aclose", None)
            if aclose is not None:
                await aclose()
        return self.on_end(message_id)
