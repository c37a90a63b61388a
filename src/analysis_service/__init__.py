"""Streaming document analysis service backed by Gemini."""

from .actions import ActionDefinition, AnalysisAction, list_actions, lookup
from .assembler import AssembledMessage, MessageState, ResponseAssembler
from .errors import (
    AnalysisError,
    EmptyDocumentError,
    GenerationFailure,
    MessageClosedError,
    StreamFailure,
    TransportFailure,
    UnknownActionError,
    ValidationError,
)
from .prompts import ComposedPrompt, build_prompt
from .types import AnalysisRequest, ResponseFragment
from .validation import validate_request

__all__ = [
    "ActionDefinition",
    "AnalysisAction",
    "AnalysisError",
    "AnalysisRequest",
    "AssembledMessage",
    "ComposedPrompt",
    "EmptyDocumentError",
    "GenerationFailure",
    "MessageClosedError",
    "MessageState",
    "ResponseAssembler",
    "ResponseFragment",
    "StreamFailure",
    "TransportFailure",
    "UnknownActionError",
    "ValidationError",
    "build_prompt",
    "list_actions",
    "lookup",
    "validate_request",
]
