#!/usr/bin/env python3
"""
Command-line tools for inspecting requests and replies.

Commands:
    request   Print the request body that would be sent for a message
    replay    Decode a captured SSE reply through the event stream
    terminal  Print the terminal label used in the User-Agent header

Usage:
    responses-client request "fix the failing test" --cwd ~/src/app
    responses-client request "hi" --model o3 --headers
    responses-client replay capture.sse
    responses-client terminal
"""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import AsyncIterator, Iterable, List, Optional

import fire

from responses_client.config import load_config, load_environment, load_user_instructions
from responses_client.environment_context import EnvironmentContext
from responses_client.errors import ResponsesClientError
from responses_client.events import Completed, OutputItemDone, ResponseEvent
from responses_client.models import user_message
from responses_client.prompt_assembler import Prompt, PromptAssembler
from responses_client.response_stream import response_channel
from responses_client.sse import pump_sse_events
from responses_client.terminal import user_agent
from responses_client.transport import default_headers

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )
        logging.getLogger('asyncio').setLevel(logging.WARNING)
        logger.debug("Verbose logging enabled")
    else:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )


def request(
    message: Optional[str] = None,
    cwd: Optional[str] = None,
    model: Optional[str] = None,
    config_path: Optional[str] = None,
    headers: bool = False,
    verbose: bool = False,
) -> None:
    """Assemble and print the request for one turn.

    Args:
        message: User message to send as the only history item.
        cwd: Working directory described to the model (default: current dir).
        model: Override the configured model.
        config_path: Read this config.yaml instead of the default one.
        headers: Also print the request headers.
        verbose: Enable debug logging.
    """
    setup_logging(verbose)
    load_environment()
    config = load_config(Path(config_path) if config_path else None)
    if model:
        config.model = model

    cwd_path = Path(cwd or Path.cwd()).expanduser().resolve()
    session_id = str(uuid.uuid4())
    history = [user_message(message)] if message else []

    prompt = Prompt(
        input=history,
        user_instructions=load_user_instructions(config, cwd_path),
        store=not config.disable_response_storage,
        environment_context=EnvironmentContext.from_session(config.session_for(cwd_path)),
        base_instructions_override=config.base_instructions(),
    )
    assembler = PromptAssembler(
        model=config.model,
        model_family=config.model_family(),
        reasoning_effort=config.model_reasoning_effort,
        reasoning_summary=config.model_reasoning_summary,
        parallel_tool_calls=config.parallel_tool_calls,
    )
    body = assembler.build_request(prompt, prompt_cache_key=session_id).to_payload()

    output = {"headers": default_headers(session_id), "body": body} if headers else body
    print(json.dumps(output, indent=2, ensure_ascii=False))


def describe_event(event: ResponseEvent) -> str:
    """One-line description of an event for display."""
    name = type(event).__name__
    if isinstance(event, OutputItemDone):
        return f"{name}: {json.dumps(event.item.to_wire(), ensure_ascii=False)}"
    if isinstance(event, Completed):
        usage = event.token_usage.model_dump(exclude_none=True) if event.token_usage else None
        return f"{name}: id={event.response_id} usage={usage}"
    delta = getattr(event, "delta", None)
    if delta is not None:
        return f"{name}: {delta!r}"
    return name


async def replay_lines(lines: Iterable[str]) -> List[str]:
    """Feed captured SSE lines through a producer task and a ResponseStream."""

    async def _source() -> AsyncIterator[str]:
        for line in lines:
            yield line

    sender, stream = response_channel()
    producer = asyncio.create_task(pump_sse_events(_source(), sender))
    described: List[str] = []
    try:
        async with stream:
            async for event in stream:
                described.append(describe_event(event))
    except ResponsesClientError as e:
        described.append(f"error: {e}")
    finally:
        await producer
    return described


def replay(path: str, verbose: bool = False) -> None:
    """Print the events decoded from an SSE capture file.

    Args:
        path: File holding the raw ``text/event-stream`` body.
        verbose: Enable debug logging.
    """
    setup_logging(verbose)
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    for line in asyncio.run(replay_lines(lines)):
        print(line)


def terminal() -> None:
    """Print the detected terminal label."""
    print(user_agent())


def main():
    fire.Fire({
        "request": request,
        "replay": replay,
        "terminal": terminal,
    })


if __name__ == "__main__":
    main()
