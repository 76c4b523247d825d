import json
import random

import pytest
import torch

from flappy.ai.pilot import (
    Autopilot, build_pilot, features, load_autopilot, load_pilot, observe, save_pilot,
)
from flappy.game.physics import spawn_pipes
from flappy.game.sprites import Pipe, PipeRole
from flappy.game.state import GameState


def test_observe_without_pipes():
    state = GameState()
    state.bird.velocity_y = -3
    assert observe(state) == (360.0, 0.0, -3.0)


def test_observe_targets_nearest_gap():
    state = GameState()
    spawn_pipes(state, random.Random(9))
    top = state.pipes[0]
    dx, dy, vy = observe(state)
    assert dx == 360 + 64 - 45
    assert dy == (top.y + 512 + 80) - (320 + 12)
    assert vy == 0.0


def test_observe_skips_pipes_behind_the_bird():
    state = GameState()
    state.pipes += [Pipe(PipeRole.TOP, x=-30, y=-200), Pipe(PipeRole.TOP, x=200, y=-300)]
    dx, _, _ = observe(state)
    assert dx == 200 + 64 - 45


def test_features_are_normalised():
    x = features(GameState())
    assert x.shape == (3,)
    assert x[0].item() == pytest.approx(1.0)


def test_save_and_load_keep_outputs(tmp_path):
    torch.manual_seed(0)
    model = build_pilot(hidden1=8, hidden2=4, activation="tanh")
    path = str(tmp_path / "pilot.pt")
    save_pilot(model, path)
    loaded = load_pilot(path)
    assert loaded.cfg == model.cfg
    x = torch.randn(5, 3)
    with torch.no_grad():
        assert torch.allclose(model(x), loaded(x))


def test_load_rejects_foreign_checkpoint(tmp_path):
    path = str(tmp_path / "other.pt")
    torch.save({"format": "policy.v2", "cfg": {}, "state_dict": {}}, path)
    with pytest.raises(ValueError):
        load_pilot(path)


def test_unknown_activation():
    with pytest.raises(ValueError):
        build_pilot(activation="gelu")


def test_autopilot_threshold():
    model = build_pilot()
    state = GameState()
    assert Autopilot(model, threshold=0.0)(state) is True
    assert Autopilot(model, threshold=1.0)(state) is False


def test_load_autopilot(tmp_path):
    model_path = str(tmp_path / "pilot.pt")
    save_pilot(build_pilot(), model_path)
    meta = tmp_path / "pilot.json"
    meta.write_text(json.dumps({"threshold": 3.0, "model_path": model_path}))
    pilot = load_autopilot(str(meta))
    assert pilot.threshold == 0.9


def test_load_autopilot_missing_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_autopilot(str(tmp_path / "nope.json"))
    meta = tmp_path / "pilot.json"
    meta.write_text(json.dumps({"threshold": 0.5}))
    with pytest.raises(FileNotFoundError):
        load_autopilot(str(meta))
