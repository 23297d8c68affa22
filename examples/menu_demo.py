"""
Interactive menu demo: submit tasks to the event loop, synchronously or not.

Each round registers a handler under a fresh key, dispatches one event and
ticks the loop once, so asynchronous output shows up on a later round.
Exiting flushes whatever is still running.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from tickloop import Event, EventLoop, LoopConfig, event_key
from tickloop.driver import run_until_idle
from tickloop.examples.handlers import fetch_latest_news, greet, read_file

MENU = """What kind of task would you like to submit to the event loop?
 1. Say hello
 2. Read the contents of a file
 3. Fetch latest news from the New York Times
 4. Exit"""

MODE_MENU = """How would you like to execute this operation?
 1. Synchronously (blocks the event loop until the operation completes)
 2. Asynchronously (does not block the event loop)"""


def _ask(prompt: str) -> str:
    print(prompt)
    try:
        return input(" > ").strip()
    except EOFError:
        return "4"


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(name)s - %(levelname)s - %(message)s")

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--file",
        default=str(Path(__file__).resolve().parent / "data" / "hello.txt"),
        help="File read by option 2",
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get("NYT_API_KEY", os.environ.get("API_KEY")),
        help="NYT API key for option 3 (default: $NYT_API_KEY or $API_KEY)",
    )
    args = parser.parse_args()

    tasks = {
        "1": ("hello", greet, "How are you doing today?"),
        "2": ("read-file", read_file, args.file),
        "3": ("fetch-latest-news", fetch_latest_news, args.api_key),
    }

    with EventLoop(LoopConfig.from_env()) as loop:
        sequence = 0
        while True:
            choice = _ask(MENU)
            if choice not in tasks:
                break
            is_async = _ask(MODE_MENU) == "2"
            kind, handler, payload = tasks[choice]
            key = event_key(kind, sequence)
            sequence += 1
            loop.on(key, handler).dispatch(Event(key=key, payload=payload, is_async=is_async))
            loop.tick()

        run_until_idle(loop, timeout=30.0)


if __name__ == "__main__":
    main()
