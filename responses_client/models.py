"""Wire models for conversation items and token usage.

Conversation items are exchanged with the Responses API as JSON objects
discriminated by their ``type`` field. Each known type has its own pydantic
model; anything else is kept as an ``OtherItem`` so that a newer server
cannot break parsing of a reply.

Serialization rules:
    - ``to_wire()`` drops unset optional fields (``id`` on fresh messages,
      ``encrypted_content`` on reasoning items, ...).
    - ``OtherItem`` is never sent back in a request; see
      ``ResponsesApiRequest.to_payload``.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class InputText(BaseModel):
    type: Literal["input_text"] = "input_text"
    text: str


class OutputText(BaseModel):
    type: Literal["output_text"] = "output_text"
    text: str


class InputImage(BaseModel):
    type: Literal["input_image"] = "input_image"
    image_url: str


ContentItem = Annotated[Union[InputText, OutputText, InputImage], Field(discriminator="type")]


class _WireItem(BaseModel):
    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class MessageItem(_WireItem):
    """A chat message from the user, the assistant or the developer."""

    type: Literal["message"] = "message"
    id: Optional[str] = None
    role: str
    content: List[ContentItem] = Field(default_factory=list)


class SummaryText(BaseModel):
    type: Literal["summary_text"] = "summary_text"
    text: str


class ReasoningText(BaseModel):
    type: Literal["reasoning_text"] = "reasoning_text"
    text: str


class ReasoningItem(_WireItem):
    type: Literal["reasoning"] = "reasoning"
    id: str = ""
    summary: List[SummaryText] = Field(default_factory=list)
    content: Optional[List[ReasoningText]] = None
    encrypted_content: Optional[str] = None


class FunctionCallItem(_WireItem):
    type: Literal["function_call"] = "function_call"
    id: Optional[str] = None
    name: str
    # JSON-encoded string, exactly as the model produced it.
    arguments: str
    call_id: str


class FunctionCallOutputItem(_WireItem):
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: str


class LocalShellCallItem(_WireItem):
    type: Literal["local_shell_call"] = "local_shell_call"
    id: Optional[str] = None
    call_id: Optional[str] = None
    status: str
    action: Dict[str, Any] = Field(default_factory=dict)


class OtherItem(_WireItem):
    """Item of a type this client does not model. Extra fields are preserved."""

    model_config = ConfigDict(extra="allow")

    type: str = "other"


ResponseItem = Union[
    MessageItem,
    ReasoningItem,
    FunctionCallItem,
    FunctionCallOutputItem,
    LocalShellCallItem,
    OtherItem,
]

_ITEM_TYPES = {
    "message": MessageItem,
    "reasoning": ReasoningItem,
    "function_call": FunctionCallItem,
    "function_call_output": FunctionCallOutputItem,
    "local_shell_call": LocalShellCallItem,
}


def parse_response_item(data: Dict[str, Any]) -> ResponseItem:
    """Build the matching item model from a decoded JSON object.

    Raises:
        pydantic.ValidationError: If a known item type is missing required fields.
    """
    model_cls = _ITEM_TYPES.get(data.get("type"))
    if model_cls is None:
        return OtherItem.model_validate(data)
    return model_cls.model_validate(data)


def user_message(text: str) -> MessageItem:
    """Wrap plain text as a single ``input_text`` message from the user."""
    return MessageItem(role="user", content=[InputText(text=text)])


class TokenUsage(BaseModel):
    """Token counts reported by the server on ``response.completed``."""

    input_tokens: int = 0
    cached_input_tokens: Optional[int] = None
    output_tokens: int = 0
    reasoning_output_tokens: Optional[int] = None
    total_tokens: int = 0

    @classmethod
    def from_api(cls, usage: Dict[str, Any]) -> "TokenUsage":
        """Flatten the API's nested ``*_tokens_details`` objects."""
        input_details = usage.get("input_tokens_details") or {}
        output_details = usage.get("output_tokens_details") or {}
        return cls(
            input_tokens=usage.get("input_tokens", 0),
            cached_input_tokens=input_details.get("cached_tokens"),
            output_tokens=usage.get("output_tokens", 0),
            reasoning_output_tokens=output_details.get("reasoning_tokens"),
            total_tokens=usage.get("total_tokens", 0),
        )
