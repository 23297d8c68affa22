"""
Example handler bodies.

Ordinary application code bound to event keys: a greeting, a file read and a
news lookup. None of it is part of the loop; it only shows the handler
contract (payload in, string out).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

logger = logging.getLogger(__name__)

NYT_TOP_STORIES_URL = "https://api.nytimes.com/svc/topstories/v2/technology.json"
NEWS_FAILURE = "Failed to get latest news"


def greet(payload: Any) -> str:
    return f"Hello! {payload}"


def read_file(path: str | Path) -> str:
    """Return the file's lines, each followed by a single space. Missing file: ""."""
    try:
        with open(path, encoding="utf-8") as fh:
            return "".join(line.rstrip("\r\n") + " " for line in fh)
    except FileNotFoundError:
        logger.warning("File not found: %s", path)
        return ""


def fetch_latest_news(
    api_key: str | None,
    *,
    client: httpx.Client | None = None,
    timeout: float = 10.0,
) -> str:
    """
    First NYT technology top story as "<title> - <byline>".

    Returns "" when the response has no results and NEWS_FAILURE on any HTTP
    or transport error.
    """
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout)
    try:
        response = http.get(NYT_TOP_STORIES_URL, params={"api-key": api_key or ""})
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("News fetch failed: %s", e)
        return NEWS_FAILURE
    finally:
        if owns_client:
            http.close()

    results = (data.get("results") or []) if isinstance(data, dict) else []
    if not results:
        return ""
    first = results[0]
    return f"{first.get('title') or ''} - {first.get('byline') or ''}"


def slow(handler: Callable[[Any], str], seconds: float) -> Callable[[Any], str]:
    """Wrap handler so it sleeps for seconds before running (stands in for slow I/O)."""

    def wrapped(payload: Any) -> str:
        time.sleep(seconds)
        return handler(payload)

    wrapped.__name__ = f"slow_{getattr(handler, '__name__', 'handler')}"
    return wrapped
