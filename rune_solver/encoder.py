"""**********************************************************************************
 * Title: encoder.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Encodes "a legal H-move solution exists" for one level as CNF. Satisfying
 * assignments correspond exactly to legal H-move solutions that end on the
 * exit cell.
 *
 * Variable blocks, allocated contiguously in this order:
 *   position[t][w]       t = 0..H, w over walkable cells
 *   direction[t][d]      t = 0..H-1, 4 directions
 *   face[t][f][c]        t = 0..H, 6 faces, 5 colors; after tile interaction
 *   pre_face[t][f][c]    same shape; after rotation, before tile interaction
 *   consumed_pre[t][p]   pickup p consumed before the tile at t acts
 *   consumed[t][p]       pickup p consumed after the tile at t acts
 * followed by the auxiliaries of the sequential exactly-one encodings.
 *
 * The encoding is deterministic for a fixed (level, horizon): enumeration of
 * alternate solutions relies on re-deriving the same variable numbers.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from collections import namedtuple

from rune_solver.cnf import CNFBuilder
from rune_solver.errors import DecodeError
from rune_solver.level_parser import neighbor, tile_at, grid_distances
from rune_solver.constants import (
    FACE_COUNT, FACE_BOTTOM, COLOR_COUNT, COLOR_NONE, DIR_COUNT, DIR_VALUES, ROTATE,
    TILE_WIPE, TILE_PICKUP, TILE_GATE
)

# --- LAYOUT ---
SatLayout = namedtuple('SatLayout', [
    'horizon', 'var_count_base', 'var_count_total',
    'walkable', 'pickup_count',
    'pos_base', 'dir_base', 'face_base', 'pre_face_base', 'cons_pre_base', 'cons_base',
])

_FACE_BLOCK = FACE_COUNT * COLOR_COUNT


def build_sat_layout(level, horizon):
    """
    Computes the base offset of every variable block for (level, horizon).

    :returns: The layout; `var_count_total` equals `var_count_base` until the
              encoder adds auxiliary variables.
    :rtype: SatLayout
    """
    w_count = len(level.walkable)
    p_count = len(level.pickup_color_by_id)
    sizes = [
        (horizon + 1) * w_count,      # position
        horizon * DIR_COUNT,          # direction
        (horizon + 1) * _FACE_BLOCK,  # face
        (horizon + 1) * _FACE_BLOCK,  # pre_face
        (horizon + 1) * p_count,      # consumed_pre
        (horizon + 1) * p_count,      # consumed
    ]
    bases = []
    base = 1
    for size in sizes:
        bases.append(base)
        base += size
    return SatLayout(
        horizon, base - 1, base - 1, level.walkable, p_count, *bases
    )


def pos_var(layout, t, w):
    return layout.pos_base + t * len(layout.walkable) + w


def dir_var(layout, t, d):
    return layout.dir_base + t * DIR_COUNT + d


def face_var(layout, t, f, c):
    return layout.face_base + t * _FACE_BLOCK + f * COLOR_COUNT + c


def pre_face_var(layout, t, f, c):
    return layout.pre_face_base + t * _FACE_BLOCK + f * COLOR_COUNT + c


def cons_pre_var(layout, t, p):
    return layout.cons_pre_base + t * layout.pickup_count + p


def cons_var(layout, t, p):
    return layout.cons_base + t * layout.pickup_count + p


# --- ENCODING ---
def encode_level(level, horizon, prune=True):
    """
    Builds the CNF instance for one (level, horizon) attempt.

    :param ParsedLevel level: The parsed level.
    :param int horizon: The exact number of moves the solution must use.
    :param bool prune: Add redundant clauses ruling out positions that BFS
                       distance or checkerboard parity make unreachable at a
                       given timestep. They never exclude a legal solution and
                       let unit propagation refute short horizons outright.
    :returns: (cnf, layout) where `layout.var_count_total == cnf.var_count`.
    :rtype: tuple[CNFBuilder, SatLayout]
    """
    L = build_sat_layout(level, horizon)
    cnf = CNFBuilder(L.var_count_base)
    walkable = level.walkable
    w_of = {idx: w for w, idx in enumerate(walkable)}
    start_w, end_w = w_of[level.start_idx], w_of[level.end_idx]

    cnf.comment('position: exactly one walkable cell per timestep')
    for t in range(horizon + 1):
        cnf.exactly_one([pos_var(L, t, w) for w in range(len(walkable))], 'seq')
    cnf.add_clause(pos_var(L, 0, start_w))
    cnf.add_clause(pos_var(L, horizon, end_w))

    if prune:
        _add_reachability_pruning(cnf, L, level, w_of)

    cnf.comment('direction: exactly one per step')
    for t in range(horizon):
        cnf.exactly_one([dir_var(L, t, d) for d in DIR_VALUES], 'pair')

    cnf.comment('faces: exactly one color per face, before and after the tile')
    for t in range(horizon + 1):
        for f in range(FACE_COUNT):
            cnf.exactly_one([face_var(L, t, f, c) for c in range(COLOR_COUNT)], 'seq')
            cnf.exactly_one([pre_face_var(L, t, f, c) for c in range(COLOR_COUNT)], 'seq')
    for f in range(FACE_COUNT):
        cnf.add_clause(face_var(L, 0, f, COLOR_NONE))
        cnf.add_clause(pre_face_var(L, 0, f, COLOR_NONE))

    cnf.comment('tiles only ever touch the bottom face')
    for t in range(horizon + 1):
        for f in range(FACE_COUNT):
            if f == FACE_BOTTOM:
                continue
            for c in range(COLOR_COUNT):
                cnf.add_iff(pre_face_var(L, t, f, c), face_var(L, t, f, c))

    cnf.comment('consumption: nothing consumed at t=0, carried between steps')
    for p in range(L.pickup_count):
        cnf.add_clause(-cons_pre_var(L, 0, p))
        cnf.add_clause(-cons_var(L, 0, p))
    for t in range(horizon):
        for p in range(L.pickup_count):
            cnf.add_iff(cons_pre_var(L, t + 1, p), cons_var(L, t, p))

    cnf.comment('movement: position and direction fix the next position')
    for t in range(horizon):
        for w, idx in enumerate(walkable):
            for d in DIR_VALUES:
                nxt = neighbor(level, idx, d)
                nxt_w = w_of.get(nxt) if nxt >= 0 else None
                if nxt_w is None:
                    cnf.add_clause(-pos_var(L, t, w), -dir_var(L, t, d))
                else:
                    cnf.add_clause(-pos_var(L, t, w), -dir_var(L, t, d), pos_var(L, t + 1, nxt_w))

    cnf.comment('rotation: direction permutes face(t) into pre_face(t+1)')
    for t in range(horizon):
        for d in DIR_VALUES:
            d_lit = dir_var(L, t, d)
            for new_f in range(FACE_COUNT):
                old_f = ROTATE[d][new_f]
                for c in range(COLOR_COUNT):
                    cnf.add_clause(-d_lit, -face_var(L, t, old_f, c), pre_face_var(L, t + 1, new_f, c))
                    cnf.add_clause(-d_lit, -pre_face_var(L, t + 1, new_f, c), face_var(L, t, old_f, c))

    cnf.comment('tile interaction on the bottom face')
    for t in range(horizon + 1):
        for w, idx in enumerate(walkable):
            _add_tile_clauses(cnf, L, t, w, tile_at(level, idx))

    L = L._replace(var_count_total=cnf.var_count)
    logging.debug(
        f"Encoded level {level.id} at horizon {horizon}: "
        f"{cnf.var_count} vars ({L.var_count_base} base), {len(cnf.clauses)} clauses"
    )
    return cnf, L


def _add_reachability_pruning(cnf, L, level, w_of):
    from_start = grid_distances(level, level.start_idx)
    to_end = grid_distances(level, level.end_idx)
    horizon = L.horizon
    for t in range(horizon + 1):
        for idx, w in w_of.items():
            ds, de = from_start.get(idx), to_end.get(idx)
            if ds is None or de is None or ds > t or de > horizon - t or (t - ds) % 2:
                cnf.add_clause(-pos_var(L, t, w))


def _add_tile_clauses(cnf, L, t, w, tile):
    """Clauses for the tile at walkable cell `w`, all conditioned on position[t][w]."""
    pos = pos_var(L, t, w)
    pre_none = pre_face_var(L, t, FACE_BOTTOM, COLOR_NONE)

    if tile.kind == TILE_WIPE:
        cnf.add_clause(-pos, face_var(L, t, FACE_BOTTOM, COLOR_NONE))
        for c in range(1, COLOR_COUNT):
            cnf.add_clause(-pos, -face_var(L, t, FACE_BOTTOM, c))
        return

    if tile.kind == TILE_PICKUP:
        p = tile.pickup_id
        cons_pre, cons = cons_pre_var(L, t, p), cons_var(L, t, p)
        cnf.add_clause(-cons_pre, cons)
        # pos & !cons_pre & pre_none -> bottom = pickup color, consumed
        cnf.add_clause(-pos, cons_pre, -pre_none, face_var(L, t, FACE_BOTTOM, tile.color))
        cnf.add_clause(-pos, cons_pre, -pre_none, cons)
        # consumption only happens here, with a blank bottom
        cnf.add_clause(-cons, cons_pre, pos)
        cnf.add_clause(-cons, cons_pre, pre_none)
        for c in range(COLOR_COUNT):
            pre_c, post_c = pre_face_var(L, t, FACE_BOTTOM, c), face_var(L, t, FACE_BOTTOM, c)
            # already consumed: carry the bottom through
            cnf.add_clause(-pos, -cons_pre, -pre_c, post_c)
            cnf.add_clause(-pos, -cons_pre, -post_c, pre_c)
            # bottom already colored: carry the bottom through
            cnf.add_clause(-pos, pre_none, -pre_c, post_c)
            cnf.add_clause(-pos, pre_none, -post_c, pre_c)
        return

    for c in range(COLOR_COUNT):
        pre_c, post_c = pre_face_var(L, t, FACE_BOTTOM, c), face_var(L, t, FACE_BOTTOM, c)
        cnf.add_clause(-pos, -pre_c, post_c)
        cnf.add_clause(-pos, -post_c, pre_c)
    if tile.kind == TILE_GATE:
        cnf.add_clause(-pos, face_var(L, t, FACE_BOTTOM, tile.color))


# --- DECODING ---
def decode_moves(layout, assignment):
    """
    Reads the chosen direction of every timestep out of an assignment.

    :param SatLayout layout: Layout of the instance that was solved.
    :param list[int] assignment: Solver output indexed by variable (1 = true).
    :returns: The move sequence, one direction per timestep.
    :rtype: list[int]
    :raises DecodeError: If some timestep has no true direction variable.
    """
    moves = []
    for t in range(layout.horizon):
        chosen = next((d for d in DIR_VALUES if assignment[dir_var(layout, t, d)] == 1), None)
        if chosen is None:
            raise DecodeError(f"No move found in SAT assignment at step {t}")
        moves.append(chosen)
    return moves


def direction_literals(layout, moves):
    """The direction variables that are true for `moves`; used to block a solution."""
    return [dir_var(layout, t, d) for t, d in enumerate(moves)]
