"""Reasoning parameter selection.

The configuration enums have an explicit ``none`` member; the wire enums do
not. ``none`` maps to ``None``, and the two levels of absence stay apart:

    create_reasoning_param_for_request(...) -> None             # no block
    create_reasoning_param_for_request(...) -> Reasoning(summary=None)

See https://platform.openai.com/docs/guides/reasoning?api-mode=responses
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from responses_client.model_family import ModelFamily


class ReasoningEffortConfig(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    NONE = "none"


class ReasoningSummaryConfig(str, Enum):
    AUTO = "auto"
    CONCISE = "concise"
    DETAILED = "detailed"
    NONE = "none"


class ReasoningEffort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReasoningSummary(str, Enum):
    AUTO = "auto"
    CONCISE = "concise"
    DETAILED = "detailed"


DEFAULT_REASONING_EFFORT = ReasoningEffortConfig.MEDIUM
DEFAULT_REASONING_SUMMARY = ReasoningSummaryConfig.AUTO


class Reasoning(BaseModel):
    effort: ReasoningEffort = ReasoningEffort.MEDIUM
    summary: Optional[ReasoningSummary] = ReasoningSummary.AUTO

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def wire_effort(effort: ReasoningEffortConfig) -> Optional[ReasoningEffort]:
    if effort == ReasoningEffortConfig.NONE:
        return None
    return ReasoningEffort(effort.value)


def wire_summary(summary: ReasoningSummaryConfig) -> Optional[ReasoningSummary]:
    if summary == ReasoningSummaryConfig.NONE:
        return None
    return ReasoningSummary(summary.value)


def create_reasoning_param_for_request(
    model_family: ModelFamily,
    effort: ReasoningEffortConfig = DEFAULT_REASONING_EFFORT,
    summary: ReasoningSummaryConfig = DEFAULT_REASONING_SUMMARY,
) -> Optional[Reasoning]:
    """Wire ``reasoning`` parameter for a turn, or None to leave it out.

    An effort of ``none`` suppresses the whole block even when a summary was
    requested. A family without reasoning-summary support never gets one.
    """
    if not model_family.supports_reasoning_summaries:
        return None
    selected_effort = wire_effort(ReasoningEffortConfig(effort))
    if selected_effort is None:
        return None
    return Reasoning(effort=selected_effort, summary=wire_summary(ReasoningSummaryConfig(summary)))
