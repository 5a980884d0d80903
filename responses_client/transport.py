"""Interface to the HTTP transport, plus the headers every request carries.

The transport itself (connection handling, authentication, retries) lives
outside this package. A transport receives the JSON payload from
``ResponsesApiRequest.to_payload()`` and the headers from
``default_headers()``, and returns a ResponseStream fed by a producer task,
typically ``pump_sse_events(response.aiter_lines(), sender)``.

A transport must stop reading once ``ResponseEventSender.is_closed`` turns
true (or a send raises StreamClosedError).
"""

import platform
from typing import Any, Dict, Optional, Protocol

from responses_client.response_stream import ResponseStream
from responses_client.terminal import user_agent
from responses_constants import CLIENT_VERSION, ORIGINATOR


class ResponsesTransport(Protocol):
    async def stream(self, payload: Dict[str, Any], headers: Dict[str, str]) -> ResponseStream:
        ...


def user_agent_header(originator: str = ORIGINATOR) -> str:
    """e.g. ``codex_cli_py/0.4.0 (Linux 6.8.0; x86_64) xterm-256color``"""
    os_info = f"{platform.system()} {platform.release()}".strip()
    return f"{originator}/{CLIENT_VERSION} ({os_info}; {platform.machine()}) {user_agent()}"


def default_headers(session_id: Optional[str] = None, originator: str = ORIGINATOR) -> Dict[str, str]:
    headers = {
        "originator": originator,
        "User-Agent": user_agent_header(originator),
        "version": CLIENT_VERSION,
        "accept": "text/event-stream",
    }
    if session_id:
        headers["session_id"] = session_id
    return headers
