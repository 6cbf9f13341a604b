import pytest

from rune_solver.encoder import (
    build_sat_layout, encode_level, decode_moves, direction_literals,
    pos_var, dir_var, face_var
)
from rune_solver.dpll import solve_cnf, FALSE
from rune_solver.errors import DecodeError
from rune_solver.simulator import is_solution, run_moves
from rune_solver.level_parser import parse_grid
from rune_solver.cube_math import parse_moves
from rune_solver.z3_solver import Z3CNFChecker, verify_par
from rune_solver.constants import DIR_RIGHT, DIR_DOWN, FACE_BOTTOM, COLOR_RED, COLOR_NONE


def test_layout_blocks_are_contiguous(square):
    layout = build_sat_layout(square, 2)
    walkable = len(square.walkable)
    assert layout.pos_base == 1
    assert layout.dir_base == 1 + 3 * walkable
    assert layout.face_base == layout.dir_base + 2 * 4
    assert layout.pre_face_base == layout.face_base + 3 * 30
    assert layout.cons_pre_base == layout.pre_face_base + 3 * 30
    assert layout.var_count_base == layout.cons_base - 1
    assert pos_var(layout, 2, walkable - 1) == layout.dir_base - 1


def test_var_count_total_covers_auxiliaries(square):
    cnf, layout = encode_level(square, 2)
    assert layout.var_count_total == cnf.var_count
    assert layout.var_count_total > layout.var_count_base


def test_encoding_is_deterministic(corridor):
    first, _ = encode_level(corridor, 4)
    second, _ = encode_level(corridor, 4)
    assert first.clauses == second.clauses


@pytest.mark.parametrize('prune', [True, False])
def test_solution_replays_in_simulator(square, prune):
    cnf, layout = encode_level(square, 2, prune=prune)
    model = solve_cnf(cnf.clauses, cnf.var_count)
    assert model is not None
    moves = decode_moves(layout, model)
    assert len(moves) == 2
    assert is_solution(square, moves)


@pytest.mark.parametrize('prune', [True, False])
def test_short_horizon_is_unsat(square, prune):
    cnf, _ = encode_level(square, 1, prune=prune)
    assert solve_cnf(cnf.clauses, cnf.var_count) is None


def test_pickup_and_gate_trace(red_gate_corridor):
    cnf, layout = encode_level(red_gate_corridor, 6)
    model = solve_cnf(cnf.clauses, cnf.var_count)
    moves = decode_moves(layout, model)
    assert moves == [DIR_RIGHT] * 6
    # bottom face is red right after the pickup and again on the gate cell
    assert model[face_var(layout, 1, FACE_BOTTOM, COLOR_RED)] == 1
    assert model[face_var(layout, 5, FACE_BOTTOM, COLOR_RED)] == 1
    sim = run_moves(red_gate_corridor, moves)
    assert sim.states[5].faces[FACE_BOTTOM] == COLOR_RED


def test_decode_without_direction_raises(corridor):
    cnf, layout = encode_level(corridor, 4)
    with pytest.raises(DecodeError):
        decode_moves(layout, [FALSE] * (cnf.var_count + 1))


def test_direction_literals(square):
    layout = build_sat_layout(square, 2)
    assert direction_literals(layout, [DIR_DOWN, DIR_RIGHT]) == [
        dir_var(layout, 0, DIR_DOWN), dir_var(layout, 1, DIR_RIGHT)
    ]


def test_z3_model_decodes_to_solution(square):
    cnf, layout = encode_level(square, 2)
    checker = Z3CNFChecker(cnf.clauses, cnf.var_count)
    assert checker.check() == 'sat'
    assert is_solution(square, decode_moves(layout, checker.model()))


def test_z3_agrees_on_unsat_horizon(square):
    cnf, _ = encode_level(square, 1, prune=False)
    assert Z3CNFChecker(cnf.clauses, cnf.var_count).check() == 'unsat'


def test_verify_par(square, red_gate_corridor):
    assert verify_par(square, 2)
    assert not verify_par(square, 4)
    assert verify_par(red_gate_corridor, 6)


def _solve_with_moves(level, moves_string):
    moves = parse_moves(moves_string)
    cnf, layout = encode_level(level, len(moves))
    for lit in direction_literals(layout, moves):
        cnf.add_clause(lit)
    return moves, layout, solve_cnf(cnf.clauses, cnf.var_count)


@pytest.mark.parametrize('grid, moves_string', [
    (["S.", ".E"], 'DURD'),
    (["S.", ".E"], 'RLRD'),
    (["SR...rE"], 'RRRRRR'),
    (["S.W", "R.E"], 'DURRD'),
])
def test_legal_replay_is_satisfiable(grid, moves_string):
    level = parse_grid(grid)
    assert is_solution(level, parse_moves(moves_string))
    moves, layout, model = _solve_with_moves(level, moves_string)
    assert model is not None
    assert decode_moves(layout, model) == moves
    end_w = level.walkable.index(level.end_idx)
    assert model[pos_var(layout, len(moves), end_w)] == 1


def test_illegal_replay_is_unsatisfiable():
    level = parse_grid(["S.", ".E"])
    # rolls off the grid on the first move
    _, _, model = _solve_with_moves(level, 'URDD')
    assert model is None


def test_wipe_clears_bottom_in_encoding():
    level = parse_grid(["SR...WE"])
    cnf, layout = encode_level(level, 6)
    model = solve_cnf(cnf.clauses, cnf.var_count)
    assert decode_moves(layout, model) == [DIR_RIGHT] * 6
    assert model[face_var(layout, 1, FACE_BOTTOM, COLOR_RED)] == 1
    assert model[face_var(layout, 5, FACE_BOTTOM, COLOR_NONE)] == 1
    sim = run_moves(level, [DIR_RIGHT] * 6)
    assert sim.states[5].faces[FACE_BOTTOM] == COLOR_NONE

    cnf.add_clause(face_var(layout, 5, FACE_BOTTOM, COLOR_RED))
    assert solve_cnf(cnf.clauses, cnf.var_count) is None

