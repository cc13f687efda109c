"""Shared error summarization for network collaborators.

Converts raw ``requests`` exceptions into concise, user-friendly messages
suitable for the log and for status notifications.
"""

from __future__ import annotations

import requests


def summarize_error(err: Exception, max_len: int = 60) -> str:
    """Return a concise human-readable summary for a network exception."""
    if isinstance(err, requests.exceptions.ConnectTimeout):
        msg = "Connect timeout"
    elif isinstance(err, requests.exceptions.ReadTimeout):
        msg = "Read timeout"
    elif isinstance(err, requests.exceptions.Timeout):
        msg = "Timeout"
    elif isinstance(err, requests.exceptions.SSLError):
        msg = "TLS/SSL error"
    elif isinstance(err, requests.exceptions.HTTPError):
        resp = getattr(err, "response", None)
        if resp is not None:
            reason = getattr(resp, "reason", "") or ""
            msg = f"HTTP {resp.status_code} {reason}".strip()
        else:
            msg = "HTTP error"
    elif isinstance(err, requests.exceptions.ConnectionError):
        raw = str(err)
        if "Name or service not known" in raw or "Temporary failure" in raw:
            msg = "DNS failure"
        elif "Connection refused" in raw:
            msg = "Connection refused"
        else:
            msg = "Connection error"
    elif isinstance(err, ValueError):
        msg = "Invalid JSON response"
    else:
        msg = str(err) or err.__class__.__name__

    if len(msg) > max_len:
        msg = msg[: max_len - 3] + "..."
    return msg
