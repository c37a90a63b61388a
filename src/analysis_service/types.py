"""Request and fragment type definitions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from .actions import AnalysisAction


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """A validated caller submission."""

    document_text: str
    action: AnalysisAction


@dataclass(frozen=True, slots=True)
class ResponseFragment:
    """One ordered, non-empty piece of generated text for a single message."""

    message_id: str
    index: int
    text: str


def new_message_id() -> str:
    return f"msg-{uuid.uuid4().hex}"
