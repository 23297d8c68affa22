"""
Blocking comparison: the same slow handler run synchronously and asynchronously.

Synchronous events hold the loop for the whole handler; asynchronous ones only
for the handoff. The blocking report at the end shows the difference.
"""

from __future__ import annotations

import logging

from profiling import BlockingRecorder, print_report
from tickloop import ConsoleReporter, Event, EventLoop, LoopConfig, event_key
from tickloop.driver import run_until_idle
from tickloop.examples.handlers import greet, slow


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s - %(levelname)s - %(message)s")

    recorder = BlockingRecorder()
    config = LoopConfig(blocking_warn_ms=100.0)
    with EventLoop(config, reporters=[ConsoleReporter(), recorder]) as loop:
        handler = slow(greet, 0.25)
        for i in range(6):
            key = event_key("greet", i)
            loop.on(key, handler).dispatch(Event(key=key, payload=f"caller {i}", is_async=i % 2 == 1))
        loop.dispatch(Event(key="unregistered", payload="x"))

        run_until_idle(loop, timeout=10.0)

    print()
    print_report(recorder)
    print()
    print(recorder.to_dataframe().to_string(index=False))


if __name__ == "__main__":
    main()
