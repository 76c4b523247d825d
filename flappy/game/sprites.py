from dataclasses import dataclass

from .constants import (
    BIRD_X, BIRD_Y, BIRD_WIDTH, BIRD_HEIGHT,
    PIPE_X, PIPE_Y, PIPE_WIDTH, PIPE_HEIGHT,
)


class PipeRole:
    TOP = "TOP"
    BOTTOM = "BOTTOM"


@dataclass
class Bird:
    x: int = BIRD_X
    y: int = BIRD_Y
    width: int = BIRD_WIDTH
    height: int = BIRD_HEIGHT
    velocity_y: int = 0

    @property
    def rect(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def respawn(self):
        self.y = BIRD_Y
        self.velocity_y = 0


@dataclass
class Pipe:
    role: str
    x: int = PIPE_X
    y: int = PIPE_Y
    width: int = PIPE_WIDTH
    height: int = PIPE_HEIGHT
    passed: bool = False  # set once the bird clears the trailing edge

    @property
    def rect(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def offscreen(self) -> bool:
        return self.x + self.width < 0
