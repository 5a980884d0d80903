"""Tests for responses_client/sse.py -- SSE reply decoding into ResponseEvents.

Run with: python -m pytest tests/test_sse_decoding.py -v
"""

import asyncio
import json

import pytest

from responses_client.errors import ResponseFailedError, StreamProtocolError
from responses_client.events import (
    Completed,
    Created,
    OutputItemDone,
    OutputTextDelta,
    ReasoningContentDelta,
    ReasoningSummaryDelta,
    ReasoningSummaryPartAdded,
)
from responses_client.models import MessageItem, OtherItem, TokenUsage
from responses_client.response_stream import response_channel
from responses_client.sse import decode_sse_event, iter_sse_data, pump_sse_events


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _sse(payload) -> list:
    """Lines of one SSE event carrying ``payload`` as JSON."""
    return [f"event: {payload.get('type', '')}", f"data: {json.dumps(payload)}", ""]


async def _lines(lines):
    for line in lines:
        yield line


async def _collect(lines, capacity=16):
    """Run the pump against ``lines``; return (events, raised error or None)."""
    sender, stream = response_channel(capacity=capacity)
    producer = asyncio.create_task(pump_sse_events(_lines(lines), sender))
    events, error = [], None
    try:
        async with stream:
            async for event in stream:
                events.append(event)
    except Exception as e:
        error = e
    await producer
    return events, error


CREATED = {"type": "response.created", "response": {"id": "resp_1"}}
COMPLETED = {
    "type": "response.completed",
    "response": {
        "id": "resp_1",
        "usage": {
            "input_tokens": 120,
            "input_tokens_details": {"cached_tokens": 100},
            "output_tokens": 40,
            "output_tokens_details": {"reasoning_tokens": 32},
            "total_tokens": 160,
        },
    },
}


# ---------------------------------------------------------------------------
# iter_sse_data
# ---------------------------------------------------------------------------

class TestIterSseData:
    @pytest.mark.asyncio
    async def test_multi_line_data_is_joined(self):
        lines = ['data: {"type": "x",', 'data:  "delta": "y"}', ""]
        payloads = [p async for p in iter_sse_data(_lines(lines))]
        assert payloads == [{"type": "x", "delta": "y"}]

    @pytest.mark.asyncio
    async def test_comments_and_bad_json_skipped(self):
        lines = [": keep-alive", "", "data: {not json", "", "data: [1, 2]", ""] + _sse(CREATED)
        payloads = [p async for p in iter_sse_data(_lines(lines))]
        assert payloads == [CREATED]

    @pytest.mark.asyncio
    async def test_done_marker_stops_iteration(self):
        lines = _sse(CREATED) + ["data: [DONE]", ""] + _sse(COMPLETED)
        payloads = [p async for p in iter_sse_data(_lines(lines))]
        assert payloads == [CREATED]

    @pytest.mark.asyncio
    async def test_trailing_event_without_blank_line(self):
        lines = [f"data: {json.dumps(CREATED)}\r\n"]
        payloads = [p async for p in iter_sse_data(_lines(lines))]
        assert payloads == [CREATED]


# ---------------------------------------------------------------------------
# decode_sse_event
# ---------------------------------------------------------------------------

class TestDecodeSseEvent:
    @pytest.mark.parametrize(
        "payload, expected",
        [
            (CREATED, Created()),
            ({"type": "response.created"}, None),
            ({"type": "response.output_text.delta", "delta": "Hi"}, OutputTextDelta("Hi")),
            ({"type": "response.reasoning_summary_text.delta", "delta": "s"}, ReasoningSummaryDelta("s")),
            ({"type": "response.reasoning_text.delta", "delta": "r"}, ReasoningContentDelta("r")),
            ({"type": "response.reasoning_summary_part.added"}, ReasoningSummaryPartAdded()),
            ({"type": "response.in_progress"}, None),
            ({"type": "response.output_item.added", "item": {"type": "message"}}, None),
        ],
    )
    def test_mapping(self, payload, expected):
        assert decode_sse_event(payload) == expected

    def test_output_item_done_parses_item(self):
        event = decode_sse_event({
            "type": "response.output_item.done",
            "item": {
                "type": "message",
                "id": "msg_1",
                "role": "assistant",
                "content": [{"type": "output_text", "text": "Hello"}],
            },
        })
        assert isinstance(event, OutputItemDone)
        assert isinstance(event.item, MessageItem)
        assert event.item.content[0].text == "Hello"

    def test_unknown_item_type_kept(self):
        event = decode_sse_event({
            "type": "response.output_item.done",
            "item": {"type": "web_search_call", "id": "ws_1", "status": "completed"},
        })
        assert isinstance(event.item, OtherItem)
        assert event.item.type == "web_search_call"

    def test_malformed_known_item_dropped(self):
        payload = {"type": "response.output_item.done", "item": {"type": "function_call", "name": "shell"}}
        assert decode_sse_event(payload) is None


# ---------------------------------------------------------------------------
# pump_sse_events
# ---------------------------------------------------------------------------

class TestPumpSseEvents:
    @pytest.mark.asyncio
    async def test_text_reply(self):
        lines = (
            _sse(CREATED)
            + _sse({"type": "response.output_text.delta", "delta": "Hello "})
            + _sse({"type": "response.output_text.delta", "delta": "world"})
            + _sse(COMPLETED)
        )
        events, error = await _collect(lines)
        assert error is None
        assert events == [
            Created(),
            OutputTextDelta("Hello "),
            OutputTextDelta("world"),
            Completed(
                response_id="resp_1",
                token_usage=TokenUsage(
                    input_tokens=120,
                    cached_input_tokens=100,
                    output_tokens=40,
                    reasoning_output_tokens=32,
                    total_tokens=160,
                ),
            ),
        ]

    @pytest.mark.asyncio
    async def test_completed_is_sent_last(self):
        lines = _sse(COMPLETED) + _sse({"type": "response.output_text.delta", "delta": "late"})
        events, error = await _collect(lines)
        assert error is None
        assert events[0] == OutputTextDelta("late")
        assert isinstance(events[-1], Completed)

    @pytest.mark.asyncio
    async def test_completed_without_usage(self):
        lines = _sse({"type": "response.completed", "response": {"id": "resp_2"}})
        events, _ = await _collect(lines)
        assert events == [Completed(response_id="resp_2", token_usage=None)]

    @pytest.mark.asyncio
    async def test_failed_response_raises(self):
        failed = {
            "type": "response.failed",
            "response": {"id": "resp_3", "error": {"code": "rate_limit_exceeded", "message": "Slow down"}},
        }
        events, error = await _collect(_sse(CREATED) + _sse(failed))
        assert events == [Created()]
        assert isinstance(error, ResponseFailedError)
        assert error.code == "rate_limit_exceeded"
        assert error.response_id == "resp_3"
        assert "Slow down" in str(error)

    @pytest.mark.asyncio
    async def test_missing_completed_is_protocol_error(self):
        events, error = await _collect(_sse(CREATED))
        assert events == [Created()]
        assert isinstance(error, StreamProtocolError)

    @pytest.mark.asyncio
    async def test_unknown_events_and_bad_json_ignored(self):
        lines = (
            _sse({"type": "response.in_progress"})
            + ["data: {oops", ""]
            + _sse({"type": "response.output_text.delta", "delta": "ok"})
            + _sse(COMPLETED)
        )
        events, error = await _collect(lines)
        assert error is None
        assert events[0] == OutputTextDelta("ok")
        assert len(events) == 2

    @pytest.mark.asyncio
    async def test_transport_error_reaches_consumer(self):
        async def broken():
            for line in _sse(CREATED):
                yield line
            raise ConnectionError("connection reset")

        sender, stream = response_channel(capacity=4)
        producer = asyncio.create_task(pump_sse_events(broken(), sender))
        received = []
        with pytest.raises(ConnectionError, match="connection reset"):
            async for event in stream:
                received.append(event)
        await producer
        assert received == [Created()]

    @pytest.mark.asyncio
    async def test_consumer_release_stops_pump(self):
        pulled = []

        async def endless():
            i = 0
            while True:
                pulled.append(i)
                for line in _sse({"type": "response.output_text.delta", "delta": str(i)}):
                    yield line
                i += 1

        sender, stream = response_channel(capacity=1)
        producer = asyncio.create_task(pump_sse_events(endless(), sender))
        first = await stream.__anext__()
        await stream.aclose()

        await asyncio.wait_for(producer, timeout=1)
        assert first == OutputTextDelta("0")
        assert sender.is_closed
        assert len(pulled) < 10

    @pytest.mark.asyncio
    async def test_cancelled_reader_ends_stream(self):
        async def stalled():
            for line in _sse(CREATED):
                yield line
            await asyncio.sleep(3600)
            yield ""

        sender, stream = response_channel(capacity=4)
        producer = asyncio.create_task(pump_sse_events(stalled(), sender))
        assert await stream.__anext__() == Created()

        producer.cancel()
        with pytest.raises(StreamProtocolError):
            await asyncio.wait_for(stream.__anext__(), timeout=1)
        with pytest.raises(asyncio.CancelledError):
            await producer

    @pytest.mark.asyncio
    async def test_cancelled_while_queue_full(self):
        lines = []
        for i in range(5):
            lines += _sse({"type": "response.output_text.delta", "delta": str(i)})

        sender, stream = response_channel(capacity=1)
        producer = asyncio.create_task(pump_sse_events(_lines(lines), sender))
        await asyncio.sleep(0.01)
        producer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await producer

        received = []
        with pytest.raises(StreamProtocolError):
            async for event in stream:
                received.append(event)
        assert received == [OutputTextDelta("0")]
