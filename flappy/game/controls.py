import logging

from .constants import JUMP_IMPULSE
from .state import GameState, Phase

logger = logging.getLogger(__name__)


class Action:
    JUMP = "JUMP"
    PAUSE = "PAUSE"    # toggles pause / resume
    START = "START"
    MENU = "MENU"
    EXIT = "EXIT"


def handle_input(state: GameState, action: str) -> str:
    """Apply one discrete action to the state and return the new phase.

    EXIT is not a state change; the session owning the state deals with it.
    """
    phase = state.phase

    if action == Action.START:
        if phase in (Phase.MENU, Phase.GAME_OVER):
            state.reset()
            state.show_start_menu = False
            logger.info("game started")

    elif action == Action.JUMP:
        if phase == Phase.MENU:
            return phase
        # Velocity is assigned before looking at the phase; a restart then zeroes it.
        state.bird.velocity_y = JUMP_IMPULSE
        if state.game_over:
            state.reset()
            logger.info("game restarted")
        elif state.paused:
            state.paused = False
            logger.debug("resumed")

    elif action == Action.PAUSE:
        if phase == Phase.PLAYING:
            state.paused = True
            logger.debug("paused score=%.1f", state.score)
        elif phase == Phase.PAUSED:
            state.paused = False
            logger.debug("resumed")

    elif action == Action.MENU:
        if phase in (Phase.GAME_OVER, Phase.PAUSED):
            state.reset()
            state.show_start_menu = True

    return state.phase
