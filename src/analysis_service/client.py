"""HTTP client for the receiving side of the analysis stream."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from .actions import AnalysisAction
from .assembler import AssembledMessage, ResponseAssembler
from .errors import EmptyDocumentError, TransportFailure, UnknownActionError, ValidationError
from .transport import decode_ui_stream, iter_fragments
from .types import ResponseFragment, new_message_id

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"


def _validation_error(reason: str) -> ValidationError:
    if reason == EmptyDocumentError.reason:
        return EmptyDocumentError()
    if reason == UnknownActionError.reason:
        return UnknownActionError()
    return ValidationError(reason or "Bad request")


class AnalysisClient:
    """Submit analysis requests and read back the streamed answer.

    Use as an async context manager, or pass an existing ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 90.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
        )

    async def __aenter__(self) -> AnalysisClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def stream_fragments(
        self,
        document_text: str,
        action: AnalysisAction | str,
        message_id: str | None = None,
    ) -> AsyncIterator[ResponseFragment]:
        """Yield fragments in arrival order.

        Raises ValidationError subclasses for 400 responses, GenerationFailure
        when the server reports a failure mid-stream, and TransportFailure when
        the connection breaks or the server answers unexpectedly.
        """
        action_id = action.value if isinstance(action, AnalysisAction) else action
        message_id = message_id or new_message_id()
        body = {"pdfText": document_text, "action": action_id}
        try:
            async with self._client.stream("POST", CHAT_PATH, json=body) as response:
                if response.status_code == httpx.codes.BAD_REQUEST:
                    await response.aread()
                    raise _validation_error(response.text.strip())
                if response.status_code != httpx.codes.OK:
                    raise TransportFailure(f"Analysis request failed with status {response.status_code}")
                events = decode_ui_stream(response.aiter_lines())
                async for fragment in iter_fragments(events, message_id):
                    yield fragment
        except httpx.HTTPError as exc:
            logger.warning("Analysis stream %s broke: %s", message_id, exc)
            raise TransportFailure(f"Analysis stream broke: {exc}") from exc

    async def analyze(
        self,
        document_text: str,
        action: AnalysisAction | str,
        assembler: ResponseAssembler | None = None,
        message_id: str | None = None,
    ) -> AssembledMessage:
        """Stream an analysis into ``assembler`` and return the finished message.

        Stream failures leave the returned message FAILED with whatever text
        had arrived; validation errors are raised.
        """
        assembler = assembler or ResponseAssembler()
        message_id = message_id or new_message_id()
        fragments = self.stream_fragments(document_text, action, message_id=message_id)
        return await assembler.consume(message_id, fragments)
