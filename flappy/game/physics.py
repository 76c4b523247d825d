import logging
import random

from .constants import (
    BOARD_HEIGHT,
    GRAVITY,
    OPENING_GAP,
    PIPE_HEIGHT,
    PIPE_X,
    PIPE_Y,
    SCORE_PER_PIPE,
    VELOCITY_X,
)
from .sprites import Pipe, PipeRole
from .state import GameState

logger = logging.getLogger(__name__)

Rect = tuple[int, int, int, int]


def overlap(a: Rect, b: Rect) -> bool:
    """Strict AABB test on (x, y, w, h) rects; touching edges do not collide."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return (ax < bx + bw and   # a's left edge is left of b's right edge
            ax + aw > bx and   # a's right edge is right of b's left edge
            ay < by + bh and   # a's top is above b's bottom
            ay + ah > by)      # a's bottom is below b's top


def step(state: GameState):
    """Advance the world by one tick. A finished game is left untouched."""
    if state.game_over:
        return

    bird = state.bird

    # Bird
    bird.velocity_y += GRAVITY
    bird.y += bird.velocity_y
    bird.y = max(bird.y, 0)

    # Pipe moves
    for p in state.pipes:
        p.x += VELOCITY_X

    # Scoring
    for p in state.pipes:
        if not p.passed and bird.x > p.x + p.width:
            p.passed = True
            state.score += SCORE_PER_PIPE

    # Collisions, every pipe is checked even after a hit
    for p in state.pipes:
        if overlap(bird.rect, p.rect):
            state.game_over = True

    state.pipes = [p for p in state.pipes if not p.offscreen()]

    # Bounds
    if bird.y > BOARD_HEIGHT:
        state.game_over = True


def spawn_pipes(state: GameState, rng: random.Random):
    top_y = int(PIPE_Y - PIPE_HEIGHT / 4 - rng.uniform(0, PIPE_HEIGHT / 2))
    top = Pipe(PipeRole.TOP, x=PIPE_X, y=top_y)
    bottom = Pipe(PipeRole.BOTTOM, x=PIPE_X, y=top_y + PIPE_HEIGHT + OPENING_GAP)
    state.pipes.append(top)
    state.pipes.append(bottom)
    logger.debug("pipes spawned top_y=%d live=%d", top_y, len(state.pipes))
