import random

import pytest

from rune_solver.dpll import DPLLSolver, solve_cnf, format_duration, TRUE, FALSE
from rune_solver.z3_solver import Z3CNFChecker


def satisfies(clauses, assignment):
    for clause in clauses:
        if not any((assignment[abs(lit)] == TRUE) == (lit > 0) and assignment[abs(lit)] != 0
                   for lit in clause):
            return False
    return True


def random_3sat(rng, n_vars, n_clauses):
    clauses = []
    for _ in range(n_clauses):
        picked = rng.sample(range(1, n_vars + 1), 3)
        clauses.append([v if rng.random() < 0.5 else -v for v in picked])
    return clauses


def test_simple_sat():
    clauses = [[1, 2], [-1, 3], [-3, -2], [2, 3]]
    model = solve_cnf(clauses, 3)
    assert model is not None
    assert satisfies(clauses, model)


def test_contradicting_units():
    solver = DPLLSolver([[1], [-1]], 1)
    assert solver.solve() is None
    assert not solver.timed_out


def test_unsat_needs_branching():
    clauses = [[1, 2], [1, -2], [-1, 2], [-1, -2]]
    solver = DPLLSolver(clauses, 2)
    assert solver.solve() is None
    assert not solver.timed_out
    assert solver.stats['conflicts'] >= 2
    assert solver.stats['decisions'] >= 1


def test_pure_literals_are_fixed():
    clauses = [[1, 2], [1, -3], [2, -3]]
    solver = DPLLSolver(clauses, 3)
    model = solver.solve()
    assert satisfies(clauses, model)
    assert solver.stats['pure_literals'] >= 1


def test_unit_propagation_chain():
    clauses = [[1], [-1, 2], [-2, 3], [-3, 4]]
    model = solve_cnf(clauses, 4)
    assert model[1:] == [TRUE, TRUE, TRUE, TRUE]


def test_literal_out_of_range():
    with pytest.raises(ValueError):
        DPLLSolver([[1, 3]], 2)
    with pytest.raises(ValueError):
        DPLLSolver([[0]], 2)


def test_zero_budget_times_out():
    solver = DPLLSolver([[1, 2], [-1, 2], [1, -2]], 2, time_limit_ms=0)
    assert solver.solve() is None
    assert solver.timed_out


def test_clauses_are_not_modified():
    clauses = [[1, 2], [-1], [-2, 3]]
    snapshot = [list(c) for c in clauses]
    solve_cnf(clauses, 3)
    assert clauses == snapshot


@pytest.mark.parametrize('seed', range(12))
def test_agrees_with_z3(seed):
    rng = random.Random(seed)
    n_vars = 10
    clauses = random_3sat(rng, n_vars, rng.randint(30, 55))
    model = solve_cnf(clauses, n_vars)
    expected = Z3CNFChecker(clauses, n_vars).check()
    if model is None:
        assert expected == 'unsat'
    else:
        assert expected == 'sat'
        assert satisfies(clauses, model)


def test_format_duration():
    assert format_duration(0.0125) == '12.50 ms'
    assert format_duration(2.5) == '2.500 s'
    assert format_duration(61) == '1 min 1.00 s'
