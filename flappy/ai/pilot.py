from __future__ import annotations
from dataclasses import dataclass, asdict
import json
import logging
import os

import torch
import torch.nn as nn

from flappy.game.constants import BOARD_WIDTH, BOARD_HEIGHT, OPENING_GAP
from flappy.game.sprites import PipeRole
from flappy.game.state import GameState

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "pilot.v1"
VELOCITY_SCALE = 10.0


@dataclass
class PilotConfig:
    in_dim: int = 3            # dx, dy, vy
    hidden1: int = 32
    hidden2: int = 16
    activation: str = "relu"


def _act(name: str) -> nn.Module:
    name = name.lower()
    if name == "relu":
        return nn.ReLU()
    if name == "tanh":
        return nn.Tanh()
    raise ValueError(f"Unsupported activation: {name}")


class PilotNet(nn.Module):
    """MLP from normalised (dx, dy, vy) to a flap probability."""

    def __init__(self, cfg: PilotConfig | None = None):
        super().__init__()
        self.cfg = cfg or PilotConfig()
        self.body = nn.Sequential(
            nn.Linear(self.cfg.in_dim, self.cfg.hidden1),
            _act(self.cfg.activation),
            nn.Linear(self.cfg.hidden1, self.cfg.hidden2),
            _act(self.cfg.activation),
            nn.Linear(self.cfg.hidden2, 1),
        )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if x.ndim == 1:
            x = x.unsqueeze(0)
        return torch.sigmoid(self.body(x)).squeeze(-1)   # (B,)


def build_pilot(**overrides) -> PilotNet:
    return PilotNet(PilotConfig(**{**asdict(PilotConfig()), **overrides}))


def save_pilot(model: PilotNet, path: str) -> None:
    torch.save({
        "format": CHECKPOINT_FORMAT,
        "cfg": asdict(model.cfg),
        "state_dict": model.state_dict(),
    }, path)


def load_pilot(path: str, map_location: str | torch.device = "cpu") -> PilotNet:
    payload = torch.load(path, map_location=map_location)
    fmt = payload.get("format")
    if fmt != CHECKPOINT_FORMAT:
        raise ValueError(f"Unknown checkpoint format {fmt!r} in {path}")
    model = PilotNet(PilotConfig(**payload["cfg"]))
    model.load_state_dict(payload["state_dict"])
    model.eval()
    return model


def observe(state: GameState) -> tuple[float, float, float]:
    """Raw (dx, dy, vy) against the nearest gap not yet behind the bird."""
    bird = state.bird
    nearest = None
    for p in state.pipes:
        if p.role != PipeRole.TOP or p.x + p.width < bird.x:
            continue
        if nearest is None or p.x < nearest.x:
            nearest = p
    if nearest is None:
        return float(BOARD_WIDTH), 0.0, float(bird.velocity_y)
    dx = nearest.x + nearest.width - bird.x
    gap_center = nearest.y + nearest.height + OPENING_GAP / 2
    dy = gap_center - (bird.y + bird.height / 2)
    return float(dx), float(dy), float(bird.velocity_y)


def features(state: GameState) -> torch.Tensor:
    dx, dy, vy = observe(state)
    return torch.tensor([dx / BOARD_WIDTH, dy / BOARD_HEIGHT, vy / VELOCITY_SCALE], dtype=torch.float32)


class Autopilot:
    """Callable handed to a Session; True means flap this tick."""

    def __init__(self, model: PilotNet, threshold: float = 0.5):
        self.model = model
        self.threshold = threshold

    def __call__(self, state: GameState) -> bool:
        with torch.no_grad():
            p = float(self.model(features(state))[0].item())
        return p > self.threshold


def load_autopilot(meta_json_path: str) -> Autopilot:
    if not os.path.isfile(meta_json_path):
        raise FileNotFoundError(f"Autopilot metadata not found: {meta_json_path}")

    with open(meta_json_path, "r", encoding="utf-8") as f:
        meta = json.load(f)

    threshold = max(0.1, min(0.9, float(meta.get("threshold", 0.5))))
    model_path = meta.get("model_path") or os.path.join(os.path.dirname(meta_json_path), "pilot.pt")
    if not os.path.isfile(model_path):
        raise FileNotFoundError(f"Autopilot weights not found: {model_path}")

    logger.info("autopilot loaded from %s threshold=%.2f", model_path, threshold)
    return Autopilot(load_pilot(model_path), threshold=threshold)
