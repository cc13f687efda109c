"""HTTP helper for network collaborators.

``fetch_json`` wraps :mod:`requests` with a bounded retry and concise error
summaries.  Retries stay inside the caller's time budget: a lookup that
must finish in *timeout* seconds never sleeps past it.
"""

from __future__ import annotations

import time
from typing import Any

import requests

from autotheme._lib.error_utils import summarize_error

USER_AGENT = "autotheme/1.0"


def fetch_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 6.0,
    retries: int = 1,
    backoff: float = 0.5,
) -> Any:
    """GET *url* and return parsed JSON.

    Args:
        url: Full URL to fetch.
        params: Query-string parameters.
        headers: Extra HTTP headers (``User-Agent`` is always set).
        timeout: Total time budget in seconds across all attempts.
        retries: Number of **additional** attempts after the first failure.
        backoff: Multiplier for sleep between retries (``backoff * attempt``).

    Raises:
        RuntimeError: On exhausted retries or non-JSON responses, with a
            human-readable summary.
    """
    hdrs = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if headers:
        hdrs.update(headers)

    deadline = time.monotonic() + timeout
    last_exc: Exception | None = None
    for attempt in range(1 + retries):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        try:
            resp = requests.get(url, params=params, headers=hdrs, timeout=remaining)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            last_exc = exc
            pause = backoff * (attempt + 1)
            if attempt < retries and time.monotonic() + pause < deadline:
                time.sleep(pause)

    if last_exc is None:
        raise RuntimeError("Timeout")
    raise RuntimeError(summarize_error(last_exc)) from last_exc
