import os


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
ASSET_DIR = os.path.join(BASE_DIR, "..", "..", "assets")

BOARD_WIDTH  = 360
BOARD_HEIGHT = 640
FPS = 60
TICK_MS = 1000 // FPS          # simulation period, integer ms like a Swing timer
PIPE_SPAWN_MS = 1500

# Bird
BIRD_X = BOARD_WIDTH // 8
BIRD_Y = BOARD_HEIGHT // 2
BIRD_WIDTH = 34
BIRD_HEIGHT = 24

# Pipes
PIPE_X = BOARD_WIDTH
PIPE_Y = 0
PIPE_WIDTH = 64      # scale ratio 1:6
PIPE_HEIGHT = 512
OPENING_GAP = BOARD_HEIGHT // 4

# Physics (units per tick)
VELOCITY_X = -4
GRAVITY = 1
JUMP_IMPULSE = -9
SCORE_PER_PIPE = 0.5


BIRD_PATH = os.path.join(ASSET_DIR, "flappybird.png")
BG_PATH = os.path.join(ASSET_DIR, "flappybirdbg.png")
TOP_PIPE_PATH = os.path.join(ASSET_DIR, "toppipe.png")
BOTTOM_PIPE_PATH = os.path.join(ASSET_DIR, "bottompipe.png")


META_PATH = "artifacts"
