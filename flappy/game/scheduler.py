"""
Fixed-period tickers on a virtual millisecond clock.

The clock only moves when `advance()` is called, so the same code runs the
window (fed with real frame times) and headless training (fed with constant
steps). Due callbacks fire one at a time in time order.
"""
from __future__ import annotations
from typing import Callable, List


class Ticker:
    def __init__(self, period_ms: int, callback: Callable[[], None]):
        self.period_ms = period_ms
        self.callback = callback
        self.running = False
        self.due = 0
        self.fired = 0

    def start(self, now: int):
        # first fire is one full period after start
        if not self.running:
            self.running = True
            self.due = now + self.period_ms

    def stop(self):
        self.running = False


class Scheduler:
    def __init__(self):
        self.now = 0
        self.tickers: List[Ticker] = []

    def add(self, period_ms: int, callback: Callable[[], None]) -> Ticker:
        t = Ticker(period_ms, callback)
        self.tickers.append(t)
        return t

    def start_all(self):
        for t in self.tickers:
            t.start(self.now)

    def stop_all(self):
        for t in self.tickers:
            t.stop()

    def _next_due(self, until: int) -> Ticker | None:
        nxt = None
        for t in self.tickers:
            if t.running and t.due <= until and (nxt is None or t.due < nxt.due):
                nxt = t
        return nxt

    def advance(self, elapsed_ms: int):
        until = self.now + elapsed_ms
        while True:
            t = self._next_due(until)
            if t is None:
                break
            self.now = t.due
            t.due += t.period_ms
            t.fired += 1
            t.callback()   # may stop tickers; re-checked on the next pass
        self.now = until
