"""**********************************************************************************
 * Title: optimal.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The optimal search driver. `solve_optimal` deepens the horizon one move at
 * a time and returns the first horizon whose CNF instance is satisfiable;
 * that horizon is the level's par. `count_alternate_optimal` enumerates
 * further solutions at a fixed horizon by blocking every solution found so
 * far, the standard model-enumeration technique.
 *
 * Every entry point takes a wall-clock budget shared by all the solver calls
 * it makes. Running out of budget raises SolveTimeoutError in the search
 * driver and ends the enumeration early; it never reads as "unsolvable".
 **********************************************************************************"""

# --- IMPORTS ---
import time
import logging
from collections import namedtuple

from rune_solver.dpll import DPLLSolver, format_duration
from rune_solver.errors import DecodeError, SolveTimeoutError, LevelUnsolvableError
from rune_solver.encoder import encode_level, decode_moves, direction_literals
from rune_solver.simulator import is_solution
from rune_solver.cube_math import format_moves
from rune_solver.constants import DEFAULT_MAX_MOVES, DEFAULT_ALT_LIMIT

# --- RESULT TYPES ---
OptimalSolution = namedtuple('OptimalSolution', ['moves', 'horizon'])
AlternateSolutions = namedtuple('AlternateSolutions', ['count', 'solutions', 'exhausted', 'timed_out'])


class SolverSession:
    """
    One CNF instance for one (level, horizon), plus the deadline it runs under.

    The clause list grows in place as solutions are blocked, so a session is
    owned by exactly one search and is discarded when that search returns.
    """

    def __init__(self, level, horizon, deadline=None, prune=True):
        self.level = level
        self.horizon = horizon
        self.deadline = deadline
        self.cnf, self.layout = encode_level(level, horizon, prune=prune)
        self.timed_out = False
        self.solver_stats = []

    def remaining_ms(self):
        if self.deadline is None:
            return None
        return max(0.0, (self.deadline - time.monotonic()) * 1000.0)

    def next_solution(self):
        """
        Solves the current instance.

        :returns: The decoded move sequence, or None (UNSAT, or timeout when
                  `timed_out` is set afterwards).
        :rtype: list[int] | None
        :raises DecodeError: If the assignment does not decode to a legal,
                             end-reaching sequence of exactly `horizon` moves.
        """
        remaining = self.remaining_ms()
        if remaining is not None and remaining <= 0:
            self.timed_out = True
            return None
        solver = DPLLSolver(self.cnf.clauses, self.cnf.var_count, remaining)
        assignment = solver.solve()
        self.solver_stats.append(solver.stats)
        if solver.timed_out:
            self.timed_out = True
            return None
        if assignment is None:
            return None
        moves = decode_moves(self.layout, assignment)
        if not is_solution(self.level, moves):
            raise DecodeError(
                f"Level {self.level.id}: decoded moves {format_moves(moves)} "
                f"do not replay as a solution at horizon {self.horizon}"
            )
        return moves

    def stats_summary(self):
        """Solver statistics summed over every solve this session ran."""
        totals = {}
        for stats in self.solver_stats:
            for key, value in stats.items():
                if key == 'max_depth':
                    totals[key] = max(totals.get(key, 0), value)
                else:
                    totals[key] = totals.get(key, 0) + value
        return totals

    def block(self, moves):
        """Forbids this exact direction vector; later solutions differ in at least one step."""
        self.cnf.add_clause(*[-lit for lit in direction_literals(self.layout, moves)])


def _deadline_for(time_limit_ms):
    if time_limit_ms is None:
        return None
    return time.monotonic() + time_limit_ms / 1000.0


def solve_optimal(level, max_moves=DEFAULT_MAX_MOVES, time_limit_ms=None):
    """
    Finds a provably minimal solution by iterative deepening.

    Horizons 0, 1, 2, ... max_moves are tried in order; the first satisfiable
    one is returned. Deepening stops at an undecided horizon, because a hit at
    a later horizon could not be proven minimal.

    :param ParsedLevel level: The level to solve.
    :param int max_moves: Largest horizon to try.
    :param int|None time_limit_ms: Budget for the whole search.
    :returns: OptimalSolution(moves, horizon), or None if every horizon up to
              `max_moves` is proven unsatisfiable.
    :rtype: OptimalSolution | None
    :raises SolveTimeoutError: If the budget runs out first.
    """
    start_time = time.monotonic()
    deadline = _deadline_for(time_limit_ms)
    nodes_visited = 0
    for horizon in range(max_moves + 1):
        session = SolverSession(level, horizon, deadline)
        moves = session.next_solution()
        nodes_visited += session.stats_summary().get('nodes_visited', 0)
        if session.timed_out:
            logging.warning(f"Level {level.id}: timed out at horizon {horizon}")
            raise SolveTimeoutError(level.id, horizon, time_limit_ms)
        if moves is not None:
            logging.info(
                f"Level {level.id}: par {horizon} ({format_moves(moves)}) "
                f"found in {format_duration(time.monotonic() - start_time)}, {nodes_visited:,} DPLL nodes"
            )
            return OptimalSolution(moves, horizon)
        logging.debug(f"Level {level.id}: horizon {horizon} unsatisfiable")
    logging.info(f"Level {level.id}: no solution within {max_moves} moves")
    return None


def count_alternate_optimal(level, horizon, limit=DEFAULT_ALT_LIMIT, time_limit_ms=None):
    """
    Enumerates distinct solutions of exactly `horizon` moves.

    Solutions are distinct direction vectors; two vectors that reach the end
    through different pickups count separately.

    :param ParsedLevel level: The level.
    :param int horizon: The optimal horizon (par).
    :param int limit: Stop after this many solutions.
    :param int|None time_limit_ms: Budget for the whole enumeration.
    :returns: AlternateSolutions(count, solutions, exhausted, timed_out).
              `exhausted` is True when the instance became UNSAT, i.e. the
              count is exact.
    :rtype: AlternateSolutions
    """
    session = SolverSession(level, horizon, _deadline_for(time_limit_ms))
    solutions = []
    exhausted = False
    while len(solutions) < limit:
        moves = session.next_solution()
        if moves is None:
            exhausted = not session.timed_out
            break
        if moves in solutions:
            raise DecodeError(f"Level {level.id}: blocked solution {format_moves(moves)} returned again")
        solutions.append(moves)
        if horizon == 0:
            exhausted = True
            break
        session.block(moves)

    logging.debug(
        f"Level {level.id}: {len(solutions)} optimal solutions at horizon {horizon}"
        f"{' (exhaustive)' if exhausted else ''}{' (timed out)' if session.timed_out else ''}, "
        f"{session.stats_summary().get('nodes_visited', 0):,} DPLL nodes"
    )
    return AlternateSolutions(len(solutions), solutions, exhausted, session.timed_out)


def require_optimal(level, max_moves=DEFAULT_MAX_MOVES, time_limit_ms=None):
    """
    Like solve_optimal, for callers that cannot continue without a par.

    :raises LevelUnsolvableError: If no horizon up to `max_moves` is satisfiable.
    :raises SolveTimeoutError: If the budget runs out first.
    """
    solution = solve_optimal(level, max_moves, time_limit_ms)
    if solution is None:
        raise LevelUnsolvableError(level.id, max_moves)
    return solution
