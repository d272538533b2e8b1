"""Server-Sent Events framing."""
import json
import secrets
from typing import Any, Optional

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def new_event_id() -> str:
    """Random 64-bit event id, hex encoded."""
    return secrets.token_hex(8)


def format_event(event: str, data: Any, event_id: Optional[str] = None) -> str:
    """
    Render one SSE frame.

    ``data`` is written verbatim when it is a string and JSON-encoded
    otherwise. Every frame carries an id; a fresh one is generated when none
    is given.
    """
    if not isinstance(data, str):
        data = json.dumps(data, separators=(",", ":"))
    lines = [f"id: {event_id or new_event_id()}", f"event: {event}"]
    lines.extend(f"data: {chunk}" for chunk in data.split("\n"))
    return "\n".join(lines) + "\n\n"
