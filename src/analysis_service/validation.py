"""Structural validation of incoming analysis requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .actions import lookup
from .errors import EmptyDocumentError
from .types import AnalysisRequest

# The browser client sends pdfText/action; documentText/actionId are accepted too.
DOCUMENT_TEXT_KEYS = ("pdfText", "documentText")
ACTION_KEYS = ("action", "actionId")


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def validate_request(raw: Any) -> AnalysisRequest:
    """Turn a raw JSON payload into an AnalysisRequest.

    Checks run in order and the first failure wins:

    1. document text present and non-blank, else EmptyDocumentError
    2. action registered, else UnknownActionError
    """
    if not isinstance(raw, Mapping):
        raise EmptyDocumentError()

    document_text = _first_present(raw, DOCUMENT_TEXT_KEYS)
    if not isinstance(document_text, str) or not document_text.strip():
        raise EmptyDocumentError()

    definition = lookup(_first_present(raw, ACTION_KEYS))
    return AnalysisRequest(document_text=document_text, action=definition.id)
