"""Request → prompt → streamed fragments."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from .generation import StreamClient
from .prompts import ComposedPrompt, build_prompt
from .types import AnalysisRequest, ResponseFragment, new_message_id
from .validation import validate_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreparedAnalysis:
    """A validated request with its prompt, ready to stream."""

    message_id: str
    request: AnalysisRequest
    prompt: ComposedPrompt


class AnalysisPipeline:
    def __init__(self, stream_client: StreamClient) -> None:
        self._stream_client = stream_client

    def prepare(self, raw: Any, message_id: str | None = None) -> PreparedAnalysis:
        """Validate and compose. Raises ValidationError; never touches the model."""
        request = validate_request(raw)
        prepared = PreparedAnalysis(
            message_id=message_id or new_message_id(),
            request=request,
            prompt=build_prompt(request),
        )
        logger.info(
            "Prepared analysis message_id=%s action=%s document_chars=%d",
            prepared.message_id,
            request.action.value,
            len(request.document_text),
        )
        return prepared

    def stream(self, prepared: PreparedAnalysis) -> AsyncIterator[ResponseFragment]:
        """Lazy fragment stream; the model is called on first iteration."""
        return self._stream_client.stream(prepared.prompt, prepared.message_id)
