"""**********************************************************************************
 * Title: z3_solver.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Independent cross-check of a CNF instance with the Z3 SMT solver. The
 * batch driver uses it to confirm a par value (horizon par-1 UNSAT, horizon
 * par SAT) with a second engine; the tests use it to validate the DPLL
 * solver. The pipeline itself always solves with the DPLL solver.
 **********************************************************************************"""

# --- IMPORTS ---
import time
import logging

from z3 import Solver, Bool, Or, Not, is_true, sat, unsat

from rune_solver.dpll import TRUE, FALSE, format_duration
from rune_solver.encoder import encode_level


class Z3CNFChecker:
    """Loads a DIMACS-style clause list into a Z3 solver."""

    def __init__(self, clauses, variable_count):
        self.variable_count = variable_count
        self.solver = Solver()
        self.X = [None] + [Bool(f"v{i}") for i in range(1, variable_count + 1)]
        for clause in clauses:
            self.solver.add(Or([self.X[lit] if lit > 0 else Not(self.X[-lit]) for lit in clause]))

    def check(self, time_limit_ms=None):
        """
        :returns: 'sat', 'unsat' or 'unknown' (Z3 gave up, e.g. on timeout).
        :rtype: str
        """
        if time_limit_ms is not None:
            self.solver.set('timeout', int(time_limit_ms))
        start_time = time.monotonic()
        result = self.solver.check()
        logging.debug(f"Z3 solve time: {format_duration(time.monotonic() - start_time)}")
        if result == sat:
            return 'sat'
        if result == unsat:
            return 'unsat'
        return 'unknown'

    def model(self):
        """The last model as an assignment list in the DPLL solver's format."""
        m = self.solver.model()
        return [0] + [
            TRUE if is_true(m.evaluate(self.X[v], model_completion=True)) else FALSE
            for v in range(1, self.variable_count + 1)
        ]


def verify_par(level, par, time_limit_ms=None):
    """
    Confirms with Z3 that `par` is the minimal horizon of `level`.

    :returns: True if horizon `par` is SAT and every shorter horizon is UNSAT.
              False if Z3 disagrees or cannot decide.
    :rtype: bool
    """
    cnf, _ = encode_level(level, par)
    if Z3CNFChecker(cnf.clauses, cnf.var_count).check(time_limit_ms) != 'sat':
        logging.warning(f"Z3 could not confirm horizon {par} is solvable for level {level.id}")
        return False
    for horizon in range(par):
        cnf, _ = encode_level(level, horizon)
        if Z3CNFChecker(cnf.clauses, cnf.var_count).check(time_limit_ms) != 'unsat':
            logging.warning(f"Z3 could not confirm horizon {horizon} is unsolvable for level {level.id}")
            return False
    return True
