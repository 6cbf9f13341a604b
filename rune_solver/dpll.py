"""**********************************************************************************
 * Title: dpll.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * A from-scratch DPLL satisfiability solver over clause lists.
 *
 * Each search node runs unit propagation and pure-literal elimination to a
 * fixpoint. If every clause is satisfied the search succeeds; if a clause is
 * falsified the node fails and the search backtracks; otherwise the unassigned
 * variable occurring most often in unsatisfied clauses is branched on, true
 * first, then false.
 *
 * Branches are kept on an explicit stack of assignment snapshots (copy on
 * branch), so sibling branches never see each other's partial assignments and
 * the wall-clock deadline is checked at well-defined points. There is no
 * clause learning and no restarts; the instances this solver is built for are
 * tens of cells by tens of timesteps.
 *
 * A deadline hit returns None just like UNSAT does. The `timed_out` flag is
 * the only way to tell the two apart; callers must treat it as inconclusive.
 **********************************************************************************"""

# --- IMPORTS ---
import time
import logging
from collections import defaultdict

TRUE = 1
FALSE = -1
UNASSIGNED = 0

# Propagated literals between two deadline checks.
_DEADLINE_CHECK_INTERVAL = 64


class _DeadlineExceeded(Exception):
    pass


def format_duration(seconds):
    if seconds >= 60: return f"{int(seconds//60)} min {seconds%60:.2f} s"
    if seconds >= 1: return f"{seconds:.3f} s"
    return f"{seconds*1000:.2f} ms"


class DPLLSolver:
    """
    Solves one CNF instance.

    The clause list is read, never modified. A solver object is meant to be
    used for a single `solve()` call; build a new one after appending clauses.
    """

    def __init__(self, clauses, variable_count, time_limit_ms=None):
        """
        :param list[list[int]] clauses: DIMACS-style clauses.
        :param int variable_count: Highest variable number in use.
        :param int|None time_limit_ms: Wall-clock budget; None means unlimited.
        :raises ValueError: If a clause mentions literal 0 or a variable above
                            `variable_count`.
        """
        self.clauses = clauses
        self.variable_count = variable_count
        self.time_limit_ms = time_limit_ms
        self.timed_out = False
        self.stats = {
            'nodes_visited': 0,
            'decisions': 0,
            'conflicts': 0,
            'pure_literals': 0,
            'max_depth': 0,
        }
        self._deadline = None
        self._occurrences = defaultdict(list)
        for ci, clause in enumerate(clauses):
            for lit in clause:
                if lit == 0 or abs(lit) > variable_count:
                    raise ValueError(f"Literal {lit} out of range in clause {ci}")
                self._occurrences[lit].append(ci)

    # --- PUBLIC API ---
    def solve(self):
        """
        Runs the search.

        :returns: An assignment list indexed by variable (index 0 unused) with
                  TRUE, FALSE or UNASSIGNED entries, or None when no assignment
                  was found (UNSAT, or deadline hit if `timed_out` is set).
        :rtype: list[int] | None
        """
        start_time = time.monotonic()
        if self.time_limit_ms is not None:
            self._deadline = start_time + self.time_limit_ms / 1000.0
        try:
            result = self._search()
        except _DeadlineExceeded:
            self.timed_out = True
            result = None
        outcome = 'timeout' if self.timed_out else ('sat' if result is not None else 'unsat')
        logging.debug(
            f"DPLL {outcome} in {format_duration(time.monotonic() - start_time)}: "
            f"{self.variable_count} vars, {len(self.clauses)} clauses, "
            f"{self.stats['nodes_visited']:,} nodes, {self.stats['conflicts']:,} conflicts"
        )
        return result

    # --- SEARCH ---
    def _search(self):
        assignment = [UNASSIGNED] * (self.variable_count + 1)
        queue = self._initial_units(assignment)
        if queue is None:
            return None

        # Each frame: (snapshot before the decision, literal to try next, depth).
        stack = []
        depth = 0
        while True:
            self._check_deadline()
            self.stats['nodes_visited'] += 1
            if self._propagate(assignment, queue):
                var = self._simplify_and_choose(assignment)
                if var == 0:
                    return assignment
                if var is not None:
                    stack.append((assignment[:], -var, depth + 1))
                    depth += 1
                    self.stats['decisions'] += 1
                    self.stats['max_depth'] = max(self.stats['max_depth'], depth)
                    assignment[var] = TRUE
                    queue = [var]
                    continue

            self.stats['conflicts'] += 1
            if not stack:
                return None
            assignment, lit, depth = stack.pop()
            assignment[abs(lit)] = TRUE if lit > 0 else FALSE
            queue = [lit]

    def _initial_units(self, assignment):
        """Assigns the literals of unit clauses; None on an empty or contradictory input."""
        queue = []
        for clause in self.clauses:
            if not clause:
                return None
            if len(clause) == 1:
                lit = clause[0]
                value = TRUE if lit > 0 else FALSE
                current = assignment[abs(lit)]
                if current == UNASSIGNED:
                    assignment[abs(lit)] = value
                    queue.append(lit)
                elif current != value:
                    return None
        return queue

    def _propagate(self, assignment, queue):
        """
        Unit propagation from the literals in `queue` (already assigned true).

        Only clauses containing the negation of a newly true literal can turn
        unit or false, so those are the only ones inspected.

        :returns: False on a conflict, True at the fixpoint.
        """
        clauses = self.clauses
        i = 0
        while i < len(queue):
            if i % _DEADLINE_CHECK_INTERVAL == 0:
                self._check_deadline()
            lit = queue[i]
            i += 1
            for ci in self._occurrences.get(-lit, ()):
                free_count = 0
                free_lit = 0
                satisfied = False
                for other in clauses[ci]:
                    value = assignment[abs(other)]
                    if value == UNASSIGNED:
                        free_count += 1
                        free_lit = other
                    elif (value == TRUE) == (other > 0):
                        satisfied = True
                        break
                if satisfied:
                    continue
                if free_count == 0:
                    return False
                if free_count == 1:
                    assignment[abs(free_lit)] = TRUE if free_lit > 0 else FALSE
                    queue.append(free_lit)
        return True

    def _simplify_and_choose(self, assignment):
        """
        Pure-literal elimination to a fixpoint, then the branching choice.

        :returns: 0 when every clause is satisfied, None when a clause is
                  falsified, otherwise the variable to branch on.
        """
        n = self.variable_count
        while True:
            pos = [0] * (n + 1)
            neg = [0] * (n + 1)
            open_clauses = 0
            for clause in self.clauses:
                satisfied = False
                for lit in clause:
                    value = assignment[abs(lit)]
                    if value != UNASSIGNED and (value == TRUE) == (lit > 0):
                        satisfied = True
                        break
                if satisfied:
                    continue
                open_clauses += 1
                free_count = 0
                for lit in clause:
                    if assignment[abs(lit)] == UNASSIGNED:
                        free_count += 1
                        if lit > 0:
                            pos[lit] += 1
                        else:
                            neg[-lit] += 1
                if free_count == 0:
                    return None
            if open_clauses == 0:
                return 0

            pure = [
                v for v in range(1, n + 1)
                if assignment[v] == UNASSIGNED and (pos[v] > 0) != (neg[v] > 0)
            ]
            if not pure:
                break
            # Fixing a pure literal only satisfies clauses, it can never create a unit.
            for v in pure:
                assignment[v] = TRUE if pos[v] else FALSE
            self.stats['pure_literals'] += len(pure)

        best, best_occ = 0, 0
        for v in range(1, n + 1):
            if assignment[v] == UNASSIGNED and pos[v] + neg[v] > best_occ:
                best, best_occ = v, pos[v] + neg[v]
        return best

    def _check_deadline(self):
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise _DeadlineExceeded()


def solve_cnf(clauses, variable_count, time_limit_ms=None):
    """
    Convenience wrapper around DPLLSolver.

    :returns: The assignment list, or None (UNSAT or deadline hit; the two are
              indistinguishable here, use DPLLSolver directly to tell them apart).
    :rtype: list[int] | None
    """
    return DPLLSolver(clauses, variable_count, time_limit_ms).solve()
