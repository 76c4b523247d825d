from flappy.game.constants import BIRD_Y, JUMP_IMPULSE
from flappy.game.controls import Action, handle_input
from flappy.game.sprites import Pipe, PipeRole
from flappy.game.state import GameState, Phase, snapshot


def started():
    state = GameState()
    assert handle_input(state, Action.START) == Phase.PLAYING
    return state


def test_new_state_is_on_the_menu():
    assert GameState().phase == Phase.MENU


def test_jump_ignored_on_menu():
    state = GameState()
    assert handle_input(state, Action.JUMP) == Phase.MENU
    assert state.bird.velocity_y == 0


def test_start_resets_world():
    state = GameState()
    state.score = 4
    state.bird.y = 12
    state.pipes.append(Pipe(PipeRole.TOP))
    handle_input(state, Action.START)
    assert state.score == 0
    assert state.bird.y == BIRD_Y
    assert state.pipes == []
    assert not state.show_start_menu


def test_jump_assigns_impulse():
    state = started()
    state.bird.velocity_y = 14
    handle_input(state, Action.JUMP)
    assert state.bird.velocity_y == JUMP_IMPULSE


def test_pause_toggles():
    state = started()
    state.score = 2.5
    assert handle_input(state, Action.PAUSE) == Phase.PAUSED
    assert state.paused
    assert handle_input(state, Action.PAUSE) == Phase.PLAYING
    assert state.score == 2.5


def test_jump_resumes_from_pause():
    state = started()
    handle_input(state, Action.PAUSE)
    assert handle_input(state, Action.JUMP) == Phase.PLAYING
    assert state.bird.velocity_y == JUMP_IMPULSE
    assert not state.paused


def test_jump_restarts_after_game_over():
    state = started()
    state.pipes += [Pipe(PipeRole.TOP, x=10), Pipe(PipeRole.BOTTOM, x=10)]
    state.score = 3.5
    state.bird.y = 500
    state.bird.velocity_y = 12
    state.game_over = True

    assert handle_input(state, Action.JUMP) == Phase.PLAYING
    assert state.score == 0
    assert state.pipes == []
    assert state.bird.y == BIRD_Y
    assert state.bird.velocity_y == 0
    assert not state.game_over


def test_start_ignored_while_playing():
    state = started()
    state.score = 1.0
    handle_input(state, Action.START)
    assert state.score == 1.0


def test_menu_from_game_over():
    state = started()
    state.game_over = True
    assert handle_input(state, Action.MENU) == Phase.MENU
    assert not state.game_over


def test_snapshot_is_read_only_copy():
    state = started()
    state.pipes.append(Pipe(PipeRole.TOP, x=100, y=-200))
    view = snapshot(state)
    state.pipes[0].x = 0
    assert view.pipes == ((PipeRole.TOP, (100, -200, 64, 512)),)
    assert view.bird == (45, 320, 34, 24)
    assert view.phase == Phase.PLAYING
