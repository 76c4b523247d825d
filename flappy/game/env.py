import argparse
import logging
import os

import pygame as pg
from pygame.locals import *

from flappy.ai.pilot import load_autopilot, observe
from flappy.logs import setup_logging
from .assets import load_assets
from .constants import BOARD_WIDTH, BOARD_HEIGHT, FPS, META_PATH
from .controls import Action
from .session import Session
from .sprites import PipeRole
from .state import Phase, Snapshot

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
RED = (255, 0, 0)
FONT_NAME = "JetBrains Mono"

JUMP_KEYS = (K_SPACE, K_w, K_UP)


def menu_buttons() -> dict[str, pg.Rect]:
    """Play sits just above the vertical centre, Exit just below."""
    w = int(BOARD_WIDTH / 1.965)
    h = int(BOARD_HEIGHT / 11.190)
    spacing = 10
    x = (BOARD_WIDTH - w) // 2
    center_y = BOARD_HEIGHT // 2
    return {
        Action.START: pg.Rect(x, center_y - h - spacing, w, h),
        Action.EXIT: pg.Rect(x, center_y + spacing, w, h),
    }


class FlappyEnv:

    def __init__(self, seed=None, fps=FPS, pilot_meta=None):
        # Screen
        pg.init()
        self.clock = pg.time.Clock()
        self.fps = fps
        self.screen = pg.display.set_mode((BOARD_WIDTH, BOARD_HEIGHT))
        pg.display.set_caption("Flappy Bird")

        # Assets
        self.assets = load_assets()
        self.bg_img = self.assets["bg"]
        self.bird_img = self.assets["bird"]
        self.pipe_imgs = {
            PipeRole.TOP: self.assets["top_pipe"],
            PipeRole.BOTTOM: self.assets["bottom_pipe"],
        }

        # Font
        self.title_font = pg.font.SysFont(FONT_NAME, 50)
        self.font = pg.font.SysFont(FONT_NAME, 32)
        self.button_font = pg.font.SysFont(FONT_NAME, 24, bold=True)
        self.small_font = pg.font.Font(None, 22)

        self.buttons = menu_buttons()
        self.pilot_meta = pilot_meta or os.path.join(META_PATH, "pilot.json")
        self.session = Session(seed=seed)

    def _start_with_pilot(self) -> bool:
        try:
            self.session.pilot = load_autopilot(self.pilot_meta)
        except Exception as ex:
            logger.error("autopilot load failed: %s", ex)
            return False
        self.session.post(Action.START)
        return True

    def handle_events(self):
        # phase as it will be once the queued actions apply; menu keys stop after a START
        phase = self.session.phase
        for e in pg.event.get():
            if e.type == QUIT:
                self.session.post(Action.EXIT)
            elif e.type == KEYDOWN:
                if e.key == K_ESCAPE:
                    self.session.post(Action.EXIT)
                elif phase == Phase.MENU:
                    if e.key in (K_1, K_KP1, K_RETURN):
                        self.session.pilot = None
                        self.session.post(Action.START)
                        phase = Phase.PLAYING
                    elif e.key in (K_2, K_KP2):
                        if self._start_with_pilot():
                            phase = Phase.PLAYING
                elif e.key in JUMP_KEYS:
                    self.session.post(Action.JUMP)
                elif e.key == K_p:
                    self.session.post(Action.PAUSE)
                elif e.key == K_m:
                    self.session.post(Action.MENU)
                elif e.key == K_RETURN and phase == Phase.GAME_OVER:
                    self.session.post(Action.START)
            elif e.type == MOUSEBUTTONDOWN and e.button == 1:
                if phase == Phase.MENU:
                    for action, rect in self.buttons.items():
                        if rect.collidepoint(e.pos):
                            self.session.pilot = None
                            self.session.post(action)
                            if action == Action.START:
                                phase = Phase.PLAYING
                else:
                    self.session.post(Action.JUMP)

    def _blit_center(self, surf: pg.Surface, y: int):
        x = (BOARD_WIDTH - surf.get_width()) // 2
        self.screen.blit(surf, (x, y))

    def _draw_button(self, label: str, rect: pg.Rect, color):
        pg.draw.rect(self.screen, color, rect, border_radius=15)
        text = self.button_font.render(label, True, WHITE)
        self.screen.blit(text, text.get_rect(center=rect.center))

    def _draw_menu(self):
        title = self.title_font.render("Flappy Bird", True, WHITE)
        self._blit_center(title, BOARD_HEIGHT // 4 - self.title_font.get_ascent())
        self._draw_button("Play", self.buttons[Action.START], GREEN)
        self._draw_button("Exit", self.buttons[Action.EXIT], RED)
        hint = self.small_font.render("1/Enter: Play   2: Autopilot   ESC: Exit", True, (220, 220, 220))
        self._blit_center(hint, BOARD_HEIGHT - 40)

    def _draw_world(self, view: Snapshot):
        self.screen.blit(self.bird_img, view.bird[:2])
        for role, (x, y, _, _) in view.pipes:
            self.screen.blit(self.pipe_imgs[role], (x, y))

        score = self.font.render(str(int(view.score)), True, WHITE)
        self.screen.blit(score, (10, 35 - self.font.get_ascent()))

        if view.paused:
            self._draw_centered("Paused")
        elif view.game_over:
            self._draw_centered("Game Over")

        if self.session.pilot is not None:
            dx, dy, vy = observe(self.session.state)
            info = self.small_font.render(f"AI dx={int(dx)} dy={int(dy)} vy={int(vy)}", True, (200, 255, 200))
            self.screen.blit(info, (10, 50))

    def _draw_centered(self, text: str):
        surf = self.font.render(text, True, WHITE)
        self._blit_center(surf, BOARD_HEIGHT // 2 - self.font.get_ascent())

    def render(self):
        view = self.session.view()
        self.screen.blit(self.bg_img, (0, 0))
        if view.show_start_menu:
            self._draw_menu()
        else:
            self._draw_world(view)
        pg.display.flip()

    def run(self):
        while self.session.running:
            elapsed = self.clock.tick(self.fps)
            self.handle_events()
            self.session.pump(elapsed)
            self.render()
        pg.quit()


def main():
    parser = argparse.ArgumentParser(description="Flappy Bird")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--fps", type=int, default=FPS)
    parser.add_argument("--pilot", default=None, help="autopilot metadata json (menu key 2)")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    setup_logging(args.log_level)
    FlappyEnv(seed=args.seed, fps=args.fps, pilot_meta=args.pilot).run()


if __name__ == "__main__":
    main()
