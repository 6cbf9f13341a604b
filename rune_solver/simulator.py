"""**********************************************************************************
 * Title: simulator.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Forward simulation of the rolling cube. `step` executes a single move and
 * is the function a live-play layer calls to validate an attempted move;
 * `run_moves` replays a full sequence and returns the state trace. States
 * are immutable values: every move produces a new CubeState.
 **********************************************************************************"""

# --- IMPORTS ---
from collections import namedtuple

from rune_solver.cube_math import rotate
from rune_solver.level_parser import neighbor, tile_at
from rune_solver.constants import (
    COLOR_NONE, FACE_BOTTOM, FACE_COUNT, DIR_VALUES,
    TILE_VOID, TILE_WIPE, TILE_PICKUP, TILE_GATE
)

# --- DATA TYPES ---
CubeState = namedtuple('CubeState', ['idx', 'faces', 'consumed'])
SimulationResult = namedtuple('SimulationResult', ['ok', 'states'])


def initial_state(level):
    """The cube on the start cell, every face blank, nothing consumed."""
    return CubeState(level.start_idx, (COLOR_NONE,) * FACE_COUNT, 0)


def step(level, state, direction):
    """
    Executes one move.

    The destination must be on the grid and not void. Faces are rotated, then
    the destination tile acts on the bottom face: a wipe clears it; an
    unconsumed pickup colors a blank bottom and is marked consumed; anything
    else leaves it as rolled. Finally a gate requires the bottom face to carry
    its color.

    :param ParsedLevel level: The level being played.
    :param CubeState state: The state before the move.
    :param int direction: The direction to roll.
    :returns: The new state, or None if the move is illegal.
    :rtype: CubeState | None
    """
    dest = neighbor(level, state.idx, direction)
    if dest < 0:
        return None
    tile = tile_at(level, dest)
    if tile.kind == TILE_VOID:
        return None

    faces = list(rotate(state.faces, direction))
    consumed = state.consumed

    if tile.kind == TILE_WIPE:
        faces[FACE_BOTTOM] = COLOR_NONE
    elif tile.kind == TILE_PICKUP:
        mask = 1 << tile.pickup_id
        if not consumed & mask and faces[FACE_BOTTOM] == COLOR_NONE:
            faces[FACE_BOTTOM] = tile.color
            consumed |= mask
    elif tile.kind == TILE_GATE and faces[FACE_BOTTOM] != tile.color:
        return None

    return CubeState(dest, tuple(faces), consumed)


def legal_moves(level, state):
    """Directions that `step` accepts from `state`, in direction order."""
    return [d for d in DIR_VALUES if step(level, state, d) is not None]


def run_moves(level, moves):
    """
    Replays a move sequence from the initial state.

    Stops at the first illegal move; the returned trace then ends with the
    last legal state.

    :returns: SimulationResult(ok, states) where states[0] is the initial state.
    :rtype: SimulationResult
    """
    state = initial_state(level)
    states = [state]
    for move in moves:
        state = step(level, state, move)
        if state is None:
            return SimulationResult(False, states)
        states.append(state)
    return SimulationResult(True, states)


def is_solution(level, moves):
    """True when `moves` replays legally and finishes on the end cell."""
    result = run_moves(level, moves)
    return result.ok and result.states[-1].idx == level.end_idx


def state_key(state):
    # Position, consumed bitset and face colors identify a revisit.
    return (state.idx, state.consumed, state.faces)
