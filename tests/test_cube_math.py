import pytest

from rune_solver.cube_math import (
    rotate, opposite, format_moves, parse_direction, parse_moves, is_valid_direction
)
from rune_solver.constants import (
    DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT, DIR_VALUES,
    FACE_TOP, FACE_BOTTOM, FACE_NORTH, FACE_SOUTH, FACE_WEST, FACE_EAST
)

FACES = (10, 11, 12, 13, 14, 15)


@pytest.mark.parametrize('direction', DIR_VALUES)
def test_roll_then_opposite_is_identity(direction):
    assert rotate(rotate(FACES, direction), opposite(direction)) == FACES


@pytest.mark.parametrize('direction', DIR_VALUES)
def test_four_rolls_same_way_is_identity(direction):
    faces = FACES
    for _ in range(4):
        faces = rotate(faces, direction)
    assert faces == FACES


def test_rotation_tables():
    assert rotate(FACES, DIR_UP) == (13, 12, 10, 11, 14, 15)
    assert rotate(FACES, DIR_DOWN) == (12, 13, 11, 10, 14, 15)
    assert rotate(FACES, DIR_LEFT) == (15, 14, 12, 13, 10, 11)
    assert rotate(FACES, DIR_RIGHT) == (14, 15, 12, 13, 11, 10)


def test_rolling_east_moves_bottom_to_west():
    faces = rotate(FACES, DIR_RIGHT)
    assert faces[FACE_WEST] == FACES[FACE_BOTTOM]
    assert faces[FACE_BOTTOM] == FACES[FACE_EAST]
    # north/south are untouched by an east-west roll
    assert faces[FACE_NORTH] == FACES[FACE_NORTH]
    assert faces[FACE_SOUTH] == FACES[FACE_SOUTH]
    assert faces[FACE_TOP] == FACES[FACE_WEST]


def test_rotate_does_not_modify_input():
    faces = [1, 2, 3, 4, 0, 0]
    rotate(faces, DIR_UP)
    assert faces == [1, 2, 3, 4, 0, 0]


def test_move_strings():
    assert format_moves([DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT]) == 'UDLR'
    assert parse_moves('udlr') == [DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT]
    assert parse_moves('NSWE') == [DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT]
    assert format_moves([]) == ''


def test_parse_direction_rejects_unknown_letter():
    with pytest.raises(ValueError):
        parse_direction('X')


def test_is_valid_direction():
    assert is_valid_direction(DIR_RIGHT)
    assert not is_valid_direction(4)
