"""
One running game: the state, its RNG, the input queue and both tickers.

`post()` only appends to a deque and is safe to call from another thread.
Every mutation of the state happens inside `pump()`, which first drains the
queued actions and then advances the clock, so an action is always applied
before the ticks it precedes.
"""
from __future__ import annotations
import logging
import random
from collections import deque
from typing import Callable, Deque, Optional

from .constants import PIPE_SPAWN_MS, TICK_MS
from .controls import Action, handle_input
from .physics import spawn_pipes, step
from .scheduler import Scheduler
from .state import GameState, Phase, Snapshot, snapshot

logger = logging.getLogger(__name__)

Pilot = Callable[[GameState], bool]


class Session:
    def __init__(self, seed: int | None = None, pilot: Optional[Pilot] = None,
                 rng: random.Random | None = None):
        self.state = GameState()
        self.rng = rng or random.Random(seed)
        self.pilot = pilot
        self.inputs: Deque[str] = deque()
        self.running = True
        self.ticks = 0

        self.scheduler = Scheduler()
        self.sim_ticker = self.scheduler.add(TICK_MS, self._on_tick)
        self.pipe_ticker = self.scheduler.add(PIPE_SPAWN_MS, self._on_spawn)

    @property
    def phase(self) -> str:
        return self.state.phase

    def post(self, action: str):
        self.inputs.append(action)

    def pump(self, elapsed_ms: int):
        while self.inputs:
            self._apply(self.inputs.popleft())
        self.scheduler.advance(elapsed_ms)

    def view(self) -> Snapshot:
        return snapshot(self.state)

    def _apply(self, action: str):
        if action == Action.EXIT:
            self.running = False
            self.scheduler.stop_all()
            return
        handle_input(self.state, action)
        self._sync_tickers()

    def _sync_tickers(self):
        if self.state.phase == Phase.PLAYING:
            self.scheduler.start_all()
        else:
            self.scheduler.stop_all()

    def _on_tick(self):
        if self.pilot is not None and self.state.phase == Phase.PLAYING:
            if self.pilot(self.state):
                handle_input(self.state, Action.JUMP)
        step(self.state)
        self.ticks += 1
        if self.state.game_over:
            logger.info("game over score=%d ticks=%d", int(self.state.score), self.ticks)
            self._sync_tickers()

    def _on_spawn(self):
        spawn_pipes(self.state, self.rng)
