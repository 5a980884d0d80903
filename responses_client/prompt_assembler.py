"""Request assembly for a single model turn.

Owns the ordering contract for the ``input`` array and the shape of the
request envelope. Everything here is a pure projection of a ``Prompt``:
nothing mutates it, so one Prompt can be assembled any number of times.

Ordering contract for ``build_input_sequence()``:
    1. <environment_context> message   (when present and serializable)
    2. <user_instructions> message     (when present and non-empty)
    3. conversation history, verbatim and in its original order

Dependencies:
    responses_client.environment_context -- format_environment_context
    responses_client.instructions -- compose_instructions
    responses_client.reasoning -- create_reasoning_param_for_request
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from responses_client.environment_context import EnvironmentContext, format_environment_context
from responses_client.instructions import compose_instructions
from responses_client.model_family import ModelFamily
from responses_client.models import OtherItem, ResponseItem, user_message
from responses_client.reasoning import (
    DEFAULT_REASONING_EFFORT,
    DEFAULT_REASONING_SUMMARY,
    Reasoning,
    ReasoningEffortConfig,
    ReasoningSummaryConfig,
    create_reasoning_param_for_request,
)

logger = logging.getLogger(__name__)

# Wraps the user instructions so the model can tell them apart from other content.
USER_INSTRUCTIONS_START = "<user_instructions>\n\n"
USER_INSTRUCTIONS_END = "\n\n</user_instructions>"

ENCRYPTED_REASONING_INCLUDE = "reasoning.encrypted_content"


@dataclass(frozen=True)
class Prompt:
    """Build inputs for one turn.

    Attributes:
        input: Conversation history, oldest first.
        user_instructions: Optional instructions from the user to amend the
            built-in instructions.
        store: Whether the server may store the response (False opts out).
        environment_context: Snapshot describing cwd and sandbox to the model.
        tools: Tool definitions available to the model, in the order given.
        base_instructions_override: Replaces the bundled base instructions.
    """

    input: List[ResponseItem] = field(default_factory=list)
    user_instructions: Optional[str] = None
    store: bool = False
    environment_context: Optional[EnvironmentContext] = None
    tools: List[Dict[str, Any]] = field(default_factory=list)
    base_instructions_override: Optional[str] = None

    def get_full_instructions(self, model_family: ModelFamily) -> str:
        return compose_instructions(model_family, self.base_instructions_override)

    def get_formatted_user_instructions(self) -> Optional[str]:
        if not self.user_instructions:
            return None
        return f"{USER_INSTRUCTIONS_START}{self.user_instructions}{USER_INSTRUCTIONS_END}"


@dataclass(frozen=True)
class ResponsesApiRequest:
    """Request body POSTed to the Responses API for one turn."""

    model: str
    instructions: str
    input: List[ResponseItem]
    tools: List[Dict[str, Any]]
    parallel_tool_calls: bool
    reasoning: Optional[Reasoning]
    store: bool
    include: List[str]
    prompt_cache_key: Optional[str] = None
    tool_choice: str = "auto"
    stream: bool = True

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict. Unknown item types are never sent back to the server."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "instructions": self.instructions,
            "input": [item.to_wire() for item in self.input if not isinstance(item, OtherItem)],
            "tools": list(self.tools),
            "tool_choice": self.tool_choice,
            "parallel_tool_calls": self.parallel_tool_calls,
        }
        if self.reasoning is not None:
            payload["reasoning"] = self.reasoning.to_wire()
        payload["store"] = self.store
        payload["stream"] = self.stream
        payload["include"] = list(self.include)
        if self.prompt_cache_key is not None:
            payload["prompt_cache_key"] = self.prompt_cache_key
        return payload


class PromptAssembler:
    """Turns a Prompt into the ordered input sequence and the request envelope.

    Args:
        model: Model slug sent in the request.
        model_family: Capabilities of ``model``.
        reasoning_effort: Configured reasoning effort ("none" disables reasoning).
        reasoning_summary: Configured reasoning summary ("none" drops the summary).
        parallel_tool_calls: Let the model emit several tool calls per turn.
    """

    def __init__(
        self,
        *,
        model: str,
        model_family: ModelFamily,
        reasoning_effort: ReasoningEffortConfig = DEFAULT_REASONING_EFFORT,
        reasoning_summary: ReasoningSummaryConfig = DEFAULT_REASONING_SUMMARY,
        parallel_tool_calls: bool = False,
    ):
        self._model = model
        self._model_family = model_family
        self._reasoning_effort = reasoning_effort
        self._reasoning_summary = reasoning_summary
        self._parallel_tool_calls = parallel_tool_calls

    @property
    def model_family(self) -> ModelFamily:
        return self._model_family

    def build_input_sequence(self, prompt: Prompt) -> List[ResponseItem]:
        """Input items for the request, in contract order (see module docstring)."""
        items: List[ResponseItem] = []

        env_text = format_environment_context(prompt.environment_context)
        if env_text is not None:
            items.append(user_message(env_text))

        user_instructions = prompt.get_formatted_user_instructions()
        if user_instructions is not None:
            items.append(user_message(user_instructions))

        items.extend(prompt.input)
        return items

    def build_reasoning(self) -> Optional[Reasoning]:
        return create_reasoning_param_for_request(
            self._model_family, self._reasoning_effort, self._reasoning_summary
        )

    def build_request(self, prompt: Prompt, *, prompt_cache_key: Optional[str] = None) -> ResponsesApiRequest:
        """Assemble the full request envelope for ``prompt``.

        Encrypted reasoning content is requested only when reasoning is on
        and the response is not stored server-side.
        """
        reasoning = self.build_reasoning()
        include = [ENCRYPTED_REASONING_INCLUDE] if reasoning is not None and not prompt.store else []

        request = ResponsesApiRequest(
            model=self._model,
            instructions=prompt.get_full_instructions(self._model_family),
            input=self.build_input_sequence(prompt),
            tools=list(prompt.tools),
            parallel_tool_calls=self._parallel_tool_calls,
            reasoning=reasoning,
            store=prompt.store,
            include=include,
            prompt_cache_key=prompt_cache_key,
        )
        logger.debug(
            "Assembled request for %s: %d input items, %d tools, reasoning=%s",
            self._model, len(request.input), len(request.tools),
            reasoning.to_wire() if reasoning else None,
        )
        return request
