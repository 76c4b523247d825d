"""
Mutable game data and the read-only view handed to the renderer.

There is exactly one `GameState` per session; it is passed explicitly into
the physics and input functions instead of living in a module global.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

from .sprites import Bird, Pipe


class Phase:
    MENU = "MENU"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


@dataclass
class GameState:
    bird: Bird = field(default_factory=Bird)
    pipes: List[Pipe] = field(default_factory=list)
    score: float = 0.0
    game_over: bool = False
    paused: bool = False
    show_start_menu: bool = True

    @property
    def phase(self) -> str:
        if self.show_start_menu:
            return Phase.MENU
        if self.game_over:
            return Phase.GAME_OVER
        if self.paused:
            return Phase.PAUSED
        return Phase.PLAYING

    def reset(self):
        """Put the bird back, drop every pipe and zero the score.

        The start-menu flag is left alone; callers decide whether the reset
        leads into play or back to the menu.
        """
        self.bird.respawn()
        self.pipes.clear()
        self.score = 0.0
        self.game_over = False
        self.paused = False


@dataclass(frozen=True)
class Snapshot:
    bird: Tuple[int, int, int, int]
    pipes: Tuple[Tuple[str, Tuple[int, int, int, int]], ...]
    score: float
    phase: str
    game_over: bool
    paused: bool
    show_start_menu: bool


def snapshot(state: GameState) -> Snapshot:
    return Snapshot(
        bird=state.bird.rect,
        pipes=tuple((p.role, p.rect) for p in state.pipes),
        score=state.score,
        phase=state.phase,
        game_over=state.game_over,
        paused=state.paused,
        show_start_menu=state.show_start_menu,
    )
