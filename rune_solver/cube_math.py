"""**********************************************************************************
 * Title: cube_math.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The rotation model of the rolling cube. Rolling one cell in a direction is
 * a fixed permutation of the six face colors, looked up in the ROTATE table.
 * No geometry is evaluated at runtime. Rolling in opposite directions applies
 * inverse permutations, so a roll followed by its opposite is a no-op.
 **********************************************************************************"""

# --- IMPORTS ---
from rune_solver.constants import (
    ROTATE, FACE_COUNT, DIR_VALUES, DIR_LETTERS, OPPOSITE_DIR
)

# Accepted spellings when reading move strings.
_DIRECTION_ALIASES = {'U': 0, 'N': 0, 'D': 1, 'S': 1, 'L': 2, 'W': 2, 'R': 3, 'E': 3}


def rotate(faces, direction):
    """
    Returns the face-color tuple after rolling one cell in `direction`.

    :param tuple[int] faces: Colors of (Top, Bottom, North, South, West, East).
    :param int direction: One of DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT.
    :returns: A new 6-tuple; the input is never modified.
    :rtype: tuple[int]
    """
    table = ROTATE[direction]
    return tuple(faces[table[i]] for i in range(FACE_COUNT))


def opposite(direction):
    return OPPOSITE_DIR[direction]


def direction_name(direction):
    return DIR_LETTERS[direction]


def format_moves(moves):
    """Renders a move sequence as a compact 'UDLR' string."""
    return ''.join(direction_name(m) for m in moves)


def parse_direction(char):
    """
    Parses one direction letter (U/D/L/R or N/S/W/E, any case).

    :raises ValueError: If the letter is not a direction.
    """
    try:
        return _DIRECTION_ALIASES[char.upper()]
    except KeyError:
        raise ValueError(f"Unknown direction letter: {char!r}") from None


def parse_moves(move_string):
    return [parse_direction(ch) for ch in move_string.strip()]


def is_valid_direction(direction):
    return direction in DIR_VALUES
