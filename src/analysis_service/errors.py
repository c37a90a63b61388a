"""Exception hierarchy for the analysis pipeline."""

from __future__ import annotations

from typing import Literal

GenerationCause = Literal["upstream", "throttled", "timeout", "not_configured", "cancelled"]


class AnalysisError(Exception):
    """Base class for every error raised by the analysis service."""


class ValidationError(AnalysisError):
    """Request rejected before any model call. ``reason`` is safe to show the caller."""

    reason: str = "Invalid request"

    def __init__(self, reason: str | None = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class EmptyDocumentError(ValidationError):
    reason = "No PDF text provided"


class UnknownActionError(ValidationError):
    reason = "Invalid action"

    def __init__(self, action_id: object = None) -> None:
        super().__init__()
        self.action_id = action_id


class StreamFailure(AnalysisError):
    """A response stream ended abnormally. Fragments already delivered stay valid."""


class GenerationFailure(StreamFailure):
    """The upstream model call failed, timed out or was throttled."""

    def __init__(self, message: str, cause: GenerationCause = "upstream") -> None:
        super().__init__(message)
        self.cause = cause


class TransportFailure(StreamFailure):
    """The incremental channel between producer and consumer broke."""


class MessageClosedError(AnalysisError):
    """A fragment arrived for a message that already reached a terminal state."""

    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id} is already closed")
        self.message_id = message_id


def is_quota_exhausted(exc: BaseException | int) -> bool:
    """Return True if the exception or status code indicates Gemini quota exhausted (429)."""
    if isinstance(exc, int):
        return exc == 429
    msg = str(exc).upper()
    return "429" in msg or "RESOURCE_EXHAUSTED" in msg or "QUOTA" in msg
