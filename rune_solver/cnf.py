"""**********************************************************************************
 * Title: cnf.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * An append-only clause accumulator. Clauses are lists of non-zero integer
 * literals in DIMACS convention (v is "variable v is true", -v is "false").
 * The builder owns the variable counter so auxiliary variables introduced by
 * the exactly-one encodings never collide with the caller's variable blocks.
 *
 * A builder is a single-owner value: the enumeration code appends blocking
 * clauses to it in place, so it must never be shared between two searches.
 **********************************************************************************"""


class CNFBuilder:
    """Accumulates clauses and allocates auxiliary variables."""

    def __init__(self, initial_var_count=0):
        self.clauses = []
        self.var_count = initial_var_count
        self.comments = []

    def alloc_aux(self, n=1):
        """
        Reserves `n` fresh variables after every variable allocated so far.

        :returns: The new variable numbers in ascending order.
        :rtype: list[int]
        """
        first = self.var_count + 1
        self.var_count += n
        return list(range(first, first + n))

    def add_clause(self, *lits):
        if not lits:
            raise ValueError("Empty clause")
        if min(map(abs, lits)) == 0:
            raise ValueError("Illegal literal, 0")
        self.var_count = max(self.var_count, max(map(abs, lits)))
        self.clauses.append(list(lits))

    def add_implication(self, a, b):
        # a -> b  ===  -a v b
        self.add_clause(-a, b)

    def add_iff(self, a, b):
        self.add_implication(a, b)
        self.add_implication(b, a)

    def at_least_one(self, variables):
        self.add_clause(*variables)

    def at_most_one_pairwise(self, variables):
        for i in range(len(variables)):
            for j in range(i + 1, len(variables)):
                self.add_clause(-variables[i], -variables[j])

    def at_most_one_sequential(self, variables):
        """
        Sinz sequential at-most-one: n-1 auxiliary "seen so far" variables and
        3n-4 binary clauses, linear instead of the quadratic pairwise form.
        """
        n = len(variables)
        if n <= 1:
            return
        if n == 2:
            self.add_clause(-variables[0], -variables[1])
            return
        s = self.alloc_aux(n - 1)
        self.add_clause(-variables[0], s[0])
        for i in range(1, n - 1):
            self.add_clause(-variables[i], s[i])
            self.add_clause(-s[i - 1], s[i])
            self.add_clause(-variables[i], -s[i - 1])
        self.add_clause(-variables[n - 1], -s[n - 2])

    def exactly_one(self, variables, method='seq'):
        """
        At-least-one plus at-most-one over `variables`.

        :param str method: 'seq' for the sequential encoding, 'pair' for pairwise.
        """
        self.at_least_one(variables)
        if method == 'pair':
            self.at_most_one_pairwise(variables)
        elif method == 'seq':
            self.at_most_one_sequential(variables)
        else:
            raise ValueError(f"Unknown at-most-one method: {method}")

    def comment(self, text):
        """Records a section marker at the current clause position, kept for DIMACS output."""
        self.comments.append((len(self.clauses), text))

    def to_dimacs(self):
        lines = [f"p cnf {self.var_count} {len(self.clauses)}"]
        pending = list(self.comments)
        for i, clause in enumerate(self.clauses):
            while pending and pending[0][0] == i:
                lines.append('c ' + pending.pop(0)[1])
            lines.append(' '.join(map(str, clause + [0])))
        lines.extend('c ' + text for _, text in pending)
        return '\n'.join(lines)

    def __len__(self):
        return len(self.clauses)
