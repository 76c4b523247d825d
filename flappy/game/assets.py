import logging
import os

import pygame
from .constants import (
    BIRD_PATH, BG_PATH, TOP_PIPE_PATH, BOTTOM_PIPE_PATH,
    BOARD_WIDTH, BOARD_HEIGHT, BIRD_WIDTH, BIRD_HEIGHT, PIPE_WIDTH, PIPE_HEIGHT,
)

logger = logging.getLogger(__name__)


def _image(path: str, size: tuple[int, int], color: tuple[int, int, int], alpha: bool = True) -> pygame.Surface:
    """Load `path` scaled to `size`, or a flat `color` surface when the file is absent."""
    if not os.path.isfile(path):
        logger.debug("sprite %s missing, using solid colour", os.path.basename(path))
        surf = pygame.Surface(size)
        surf.fill(color)
        return surf
    img = pygame.image.load(path)
    img = img.convert_alpha() if alpha else img.convert()
    return pygame.transform.scale(img, size)


def load_assets() -> dict:
    assets = {}
    assets["bird"] = _image(BIRD_PATH, (BIRD_WIDTH, BIRD_HEIGHT), (250, 220, 40))
    assets["bg"] = _image(BG_PATH, (BOARD_WIDTH, BOARD_HEIGHT), (112, 197, 206), alpha=False)
    assets["bottom_pipe"] = _image(BOTTOM_PIPE_PATH, (PIPE_WIDTH, PIPE_HEIGHT), (84, 180, 50))
    if os.path.isfile(TOP_PIPE_PATH):
        assets["top_pipe"] = _image(TOP_PIPE_PATH, (PIPE_WIDTH, PIPE_HEIGHT), (84, 180, 50))
    else:
        assets["top_pipe"] = pygame.transform.flip(assets["bottom_pipe"], False, True)
    return assets
