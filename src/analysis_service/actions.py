"""Analysis action registry.

Every action the service accepts is a member of :class:`AnalysisAction`. The
instruction text for each member comes from an exhaustive ``match``, so adding
an action without a template is caught by the type checker instead of showing
up as a missing key at request time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from textwrap import dedent
from typing import Any, Literal, assert_never

from .errors import UnknownActionError

OutputFormat = Literal["markdown", "comma_separated"]


class AnalysisAction(str, Enum):
    """Closed set of analysis modes a caller can request."""

    SUMMARIZE = "summarize"
    EXTRACT_TAGS = "extractTags"
    RISK_SCAN = "riskScan"


@dataclass(frozen=True)
class ActionDefinition:
    """Definition of an analysis action."""

    id: AnalysisAction
    label: str
    instruction_template: str
    output_format: OutputFormat

    def to_api(self) -> dict[str, Any]:
        return {"id": self.id.value, "label": self.label, "outputFormat": self.output_format}


SUMMARIZE_TEMPLATE = dedent(
    """
    Provide a professional executive summary in Markdown format.
    Structure the response as follows:
    ## Executive Summary
    (A brief overview paragraph)

    ## Key Insights
    (Bullet points with bold headers for key concepts)

    ## Conclusion
    (A final wrap-up statement)
    """
).strip()

EXTRACT_TAGS_TEMPLATE = dedent(
    """
    Extract key topics and entities as hashtags or keywords.
    Return them as a comma-separated list.
    Do not use Markdown headings.
    """
).strip()

RISK_SCAN_TEMPLATE = dedent(
    """
    Analyze the document for risks (legal, financial, operational).
    Format the output in Markdown:
    ## Risk Analysis Report
    - **Risk Category**: Description of the risk.
    - **Severity**: (Low/Medium/High)

    If no risks are found, state that clearly.
    """
).strip()


def _build_definition(action: AnalysisAction) -> ActionDefinition:
    match action:
        case AnalysisAction.SUMMARIZE:
            return ActionDefinition(action, "Summarize Document", SUMMARIZE_TEMPLATE, "markdown")
        case AnalysisAction.EXTRACT_TAGS:
            return ActionDefinition(action, "Extract Tags", EXTRACT_TAGS_TEMPLATE, "comma_separated")
        case AnalysisAction.RISK_SCAN:
            return ActionDefinition(action, "Scan for Risks", RISK_SCAN_TEMPLATE, "markdown")
        case _:
            assert_never(action)


# Built once at import; definitions are frozen.
_DEFINITIONS: dict[AnalysisAction, ActionDefinition] = {
    action: _build_definition(action) for action in AnalysisAction
}


def lookup(action_id: str | AnalysisAction) -> ActionDefinition:
    """Resolve an action id to its definition, raising UnknownActionError if it is not registered."""
    if isinstance(action_id, AnalysisAction):
        return _DEFINITIONS[action_id]
    if not isinstance(action_id, str):
        raise UnknownActionError(action_id)
    try:
        action = AnalysisAction(action_id)
    except ValueError:
        raise UnknownActionError(action_id) from None
    return _DEFINITIONS[action]


def list_actions() -> list[ActionDefinition]:
    """All registered actions in declaration order."""
    return [_DEFINITIONS[action] for action in AnalysisAction]


def list_actions_for_api() -> list[dict[str, Any]]:
    return [definition.to_api() for definition in list_actions()]


__all__ = [
    "ActionDefinition",
    "AnalysisAction",
    "OutputFormat",
    "list_actions",
    "list_actions_for_api",
    "lookup",
]
