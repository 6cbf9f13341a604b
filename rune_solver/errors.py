"""**********************************************************************************
 * Title: errors.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Exception types raised by the solver pipeline. All failures surface at
 * content-build time; none of them are meant for a player.
 **********************************************************************************"""


class RuneSolverError(Exception):
    """Base class for every error raised by this package."""


class LevelDefError(RuneSolverError):
    """A level definition is malformed (bad grid shape, missing start/end, ...)."""


class DecodeError(RuneSolverError):
    """A satisfying assignment does not decode to a legal move sequence.

    This is an internal invariant violation between the encoder and the solver,
    not something a level author can fix.
    """


class SolveTimeoutError(RuneSolverError):
    """The wall-clock budget ran out before a horizon could be decided.

    A timeout is inconclusive: it says nothing about whether the level is
    solvable. Retrying with a larger budget is the expected remedy.
    """

    def __init__(self, level_id, horizon, time_limit_ms):
        self.level_id = level_id
        self.horizon = horizon
        self.time_limit_ms = time_limit_ms
        super().__init__(
            f"Level {level_id}: horizon {horizon} undecided after {time_limit_ms} ms"
        )


class LevelUnsolvableError(RuneSolverError):
    """No solution exists for any horizon up to the configured move limit."""

    def __init__(self, level_id, max_moves):
        self.level_id = level_id
        self.max_moves = max_moves
        super().__init__(f"Level {level_id}: proven unsolvable within {max_moves} moves")


class BatchAbortedError(RuneSolverError):
    """A batch run stopped because one level could not be shipped."""

    def __init__(self, level_id, reason):
        self.level_id = level_id
        self.reason = reason
        super().__init__(f"Batch aborted on level {level_id}: {reason}")
