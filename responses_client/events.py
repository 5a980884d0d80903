"""Typed events delivered by a ResponseStream.

One dataclass per event kind; ``ResponseEvent`` is the closed union of them.
Consumers dispatch with ``isinstance`` (or ``match``) on the class.
"""

from dataclasses import dataclass
from typing import Optional, Union

from responses_client.models import ResponseItem, TokenUsage


@dataclass(frozen=True)
class Created:
    """The server accepted the request and started a response."""


@dataclass(frozen=True)
class OutputItemDone:
    item: ResponseItem


@dataclass(frozen=True)
class Completed:
    response_id: str
    token_usage: Optional[TokenUsage] = None


@dataclass(frozen=True)
class OutputTextDelta:
    delta: str


@dataclass(frozen=True)
class ReasoningSummaryDelta:
    delta: str


@dataclass(frozen=True)
class ReasoningContentDelta:
    delta: str


@dataclass(frozen=True)
class ReasoningSummaryPartAdded:
    """A new reasoning summary section started."""


ResponseEvent = Union[
    Created,
    OutputItemDone,
    Completed,
    OutputTextDelta,
    ReasoningSummaryDelta,
    ReasoningContentDelta,
    ReasoningSummaryPartAdded,
]
