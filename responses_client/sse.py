"""Decode a Responses API SSE reply into ResponseEvents.

The transport hands over the reply as an async iterable of text lines (for
example ``httpx.Response.aiter_lines()``); ``pump_sse_events`` is the
producer loop that decodes them and pushes events into a ResponseStream.

Event mapping:
    response.created                       -> Created
    response.output_item.done              -> OutputItemDone(item)
    response.output_text.delta             -> OutputTextDelta
    response.reasoning_summary_text.delta  -> ReasoningSummaryDelta
    response.reasoning_text.delta          -> ReasoningContentDelta
    response.reasoning_summary_part.added  -> ReasoningSummaryPartAdded
    response.completed                     -> Completed, sent after the reply ends
    response.failed                        -> ResponseFailedError item
    anything else                          -> ignored

A reply that ends without ``response.completed`` terminates the stream with
a StreamProtocolError.
"""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional

from pydantic import ValidationError

from responses_client.errors import ResponseFailedError, StreamClosedError, StreamProtocolError
from responses_client.events import (
    Completed,
    Created,
    OutputItemDone,
    OutputTextDelta,
    ReasoningContentDelta,
    ReasoningSummaryDelta,
    ReasoningSummaryPartAdded,
    ResponseEvent,
)
from responses_client.models import TokenUsage, parse_response_item
from responses_client.response_stream import ResponseEventSender

logger = logging.getLogger(__name__)

_DONE = object()


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[Dict[str, Any]]:
    """Yield the JSON payload of each SSE event as soon as its blank line arrives.

    Multi-line ``data:`` fields are joined with newlines. ``event:``, ``id:``
    and comment lines are ignored; the payload's own ``type`` field is
    authoritative. Payloads that are not valid JSON are logged and skipped.
    """
    data_lines: List[str] = []

    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line == "":
            payload = _decode_data(data_lines)
            data_lines = []
            if payload is _DONE:
                return
            if payload is not None:
                yield payload
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            value = line[5:]
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

    payload = _decode_data(data_lines)
    if payload is not None and payload is not _DONE:
        yield payload


def _decode_data(data_lines: List[str]):
    if not data_lines:
        return None
    data = "\n".join(data_lines)
    if data == "[DONE]":
        return _DONE
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        logger.debug("Failed to parse SSE event: %s, data: %s", e, data)
        return None
    if not isinstance(payload, dict):
        logger.debug("Ignoring non-object SSE payload: %s", data)
        return None
    return payload


def decode_sse_event(payload: Dict[str, Any]) -> Optional[ResponseEvent]:
    """Map one stateless SSE payload to its event, or None if it carries none.

    ``response.completed`` and ``response.failed`` are handled by
    ``pump_sse_events`` and return None here.
    """
    kind = payload.get("type", "")

    if kind == "response.output_item.done":
        item = payload.get("item")
        if not isinstance(item, dict):
            return None
        try:
            return OutputItemDone(parse_response_item(item))
        except ValidationError as e:
            logger.debug("Failed to parse output item: %s", e)
            return None

    if kind == "response.output_text.delta":
        return OutputTextDelta(payload.get("delta", ""))

    if kind == "response.reasoning_summary_text.delta":
        return ReasoningSummaryDelta(payload.get("delta", ""))

    if kind == "response.reasoning_text.delta":
        return ReasoningContentDelta(payload.get("delta", ""))

    if kind == "response.created":
        if payload.get("response") is not None:
            return Created()
        return None

    if kind == "response.reasoning_summary_part.added":
        return ReasoningSummaryPartAdded()

    return None


def completed_from_payload(payload: Dict[str, Any]) -> Completed:
    response = payload.get("response") or {}
    usage = response.get("usage")
    return Completed(
        response_id=response.get("id", ""),
        token_usage=TokenUsage.from_api(usage) if isinstance(usage, dict) else None,
    )


def failure_from_payload(payload: Dict[str, Any]) -> ResponseFailedError:
    response = payload.get("response") or {}
    error = response.get("error") or {}
    return ResponseFailedError(
        error.get("message") or "response.failed event received",
        code=error.get("code"),
        response_id=response.get("id"),
    )


async def pump_sse_events(lines: AsyncIterable[str], sender: ResponseEventSender) -> None:
    """Producer loop: decode ``lines`` and push events into ``sender``.

    Never raises for transport or protocol problems; they are delivered to
    the consumer as error items instead. Returns early, without error, once
    the consumer has released the stream. When the task is cancelled the
    stream is ended with a StreamProtocolError and the cancellation
    propagates.
    """
    completed: Optional[Completed] = None

    try:
        async for payload in iter_sse_data(lines):
            kind = payload.get("type", "")
            if kind == "response.completed":
                completed = completed_from_payload(payload)
                continue
            if kind == "response.failed":
                await sender.send_error(failure_from_payload(payload))
                return
            event = decode_sse_event(payload)
            if event is not None:
                await sender.send(event)

        if completed is None:
            await sender.send_error(StreamProtocolError("stream closed before response.completed"))
            return
        await sender.send(completed)
        await sender.close()
    except StreamClosedError:
        logger.debug("Response stream released by consumer; stopping SSE reader")
    except Exception as e:
        logger.warning("Error while reading response stream: %s", e)
        if not sender.is_closed:
            await sender.send_error(e)
    finally:
        # Cancellation skips the handlers above; the consumer must still see an end.
        sender.abort(StreamProtocolError("SSE reader stopped before the reply ended"))
