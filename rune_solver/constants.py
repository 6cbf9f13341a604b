"""**********************************************************************************
 * Title: constants.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This file contains all the static data and constants for the Rune Cube
 * solver. It centralizes the face and color indices of the rolling cube, the
 * fixed rotation tables, the grid character set used by level definitions,
 * the default time and move budgets of the solver pipeline, and the tuning
 * constants of the difficulty scorer.
 **********************************************************************************"""

# --- CUBE FACE CONSTANTS ---
# Index of each face inside the 6-element face-color array.
FACE_TOP = 0
FACE_BOTTOM = 1
FACE_NORTH = 2
FACE_SOUTH = 3
FACE_WEST = 4
FACE_EAST = 5
FACE_COUNT = 6

# --- COLOR CONSTANTS ---
# Color 0 means the face carries no color at all.
COLOR_NONE = 0
COLOR_RED = 1
COLOR_GREEN = 2
COLOR_BLUE = 3
COLOR_YELLOW = 4
COLOR_COUNT = 5

# Maps the uppercase pickup letter to its color index. Gates use the lowercase form.
COLOR_INDEX = {'R': COLOR_RED, 'G': COLOR_GREEN, 'B': COLOR_BLUE, 'Y': COLOR_YELLOW}

# --- DIRECTION CONSTANTS ---
DIR_UP = 0     # north, y - 1
DIR_DOWN = 1   # south, y + 1
DIR_LEFT = 2   # west,  x - 1
DIR_RIGHT = 3  # east,  x + 1
DIR_VALUES = (DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT)
DIR_COUNT = 4
DIR_LETTERS = 'UDLR'
DIR_DELTAS = {DIR_UP: (0, -1), DIR_DOWN: (0, 1), DIR_LEFT: (-1, 0), DIR_RIGHT: (1, 0)}
OPPOSITE_DIR = {DIR_UP: DIR_DOWN, DIR_DOWN: DIR_UP, DIR_LEFT: DIR_RIGHT, DIR_RIGHT: DIR_LEFT}

# Rotation permutation per direction: after rolling, face i holds the color that
# was previously on face ROTATE[d][i].
ROTATE = (
    (3, 2, 0, 1, 4, 5),  # U
    (2, 3, 1, 0, 4, 5),  # D
    (5, 4, 2, 3, 0, 1),  # L
    (4, 5, 2, 3, 1, 0),  # R
)

# --- GRID CHARACTER CONSTANTS ---
CHAR_VOID = '#'
CHAR_FLOOR = '.'
CHAR_START = 'S'
CHAR_END = 'E'
CHAR_WIPE = 'W'
PICKUP_CHARS = frozenset('RGBY')
GATE_CHARS = frozenset('rgby')
GRID_CHARS = frozenset((CHAR_VOID, CHAR_FLOOR, CHAR_START, CHAR_END, CHAR_WIPE)) | PICKUP_CHARS | GATE_CHARS

# --- TILE KINDS ---
TILE_VOID = 'void'
TILE_FLOOR = 'floor'
TILE_START = 'start'
TILE_END = 'end'
TILE_WIPE = 'wipe'
TILE_GATE = 'gate'
TILE_PICKUP = 'pickup'

# --- SOLVER BUDGETS ---
DEFAULT_MAX_MOVES = 140
DEFAULT_TIME_LIMIT_MS = 60000
DEFAULT_ALT_LIMIT = 12
DEFAULT_ALT_TIME_LIMIT_MS = 1500

# --- DIFFICULTY SCORING CONFIGURATION ---
# Empirical tuning values, kept as-is and overridable through ScoringWeights.
SCORE_WEIGHTS = {
    'par': 0.85,
    'gates': 3.2,
    'wipes': 1.8,
    'colors': 2.0,
    'scarcity': 6.0,
    'branching': 4.0,
    'revisits': 0.6,
}
TIER_EASY_BELOW = 40
TIER_HARD_FROM = 75
STAR2_FACTOR = 1.25
STAR1_FACTOR = 1.6

TIER_EASY = 'easy'
TIER_MEDIUM = 'medium'
TIER_HARD = 'hard'
