"""Optimal solver and difficulty scorer for Rune Cube levels."""

from rune_solver.errors import (
    RuneSolverError, LevelDefError, DecodeError, SolveTimeoutError,
    LevelUnsolvableError, BatchAbortedError
)
from rune_solver.level_parser import LevelDef, ParsedLevel, parse_level, parse_grid
from rune_solver.simulator import CubeState, step, legal_moves, run_moves
from rune_solver.optimal import solve_optimal, count_alternate_optimal
from rune_solver.difficulty import score_level, DifficultyReport, ScoringWeights

__version__ = '1.0.0'
