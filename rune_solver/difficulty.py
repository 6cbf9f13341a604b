"""**********************************************************************************
 * Title: difficulty.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Rates a solved level. The optimal path is replayed to measure how many
 * legal moves each visited state offers and whether any state repeats, the
 * SAT enumerator counts alternate optimal solutions, and the level's static
 * features (gates, wipes, pickups, colors) are counted. These combine into a
 * numeric score, a tier and the star thresholds.
 *
 * The weights are empirical tuning values. They are kept as configuration
 * (ScoringWeights) rather than being hard-coded into the formula.
 **********************************************************************************"""

# --- IMPORTS ---
import math
import logging
from collections import namedtuple

from rune_solver.optimal import count_alternate_optimal
from rune_solver.simulator import run_moves, legal_moves, state_key
from rune_solver.level_parser import feature_counts
from rune_solver.constants import (
    SCORE_WEIGHTS, TIER_EASY_BELOW, TIER_HARD_FROM, STAR2_FACTOR, STAR1_FACTOR,
    TIER_EASY, TIER_MEDIUM, TIER_HARD, DEFAULT_ALT_LIMIT, DEFAULT_ALT_TIME_LIMIT_MS
)

# --- SCORING CONFIGURATION ---
ScoringWeights = namedtuple('ScoringWeights', [
    'par', 'gates', 'wipes', 'colors', 'scarcity', 'branching', 'revisits',
    'easy_below', 'hard_from', 'star2_factor', 'star1_factor',
])

DEFAULT_WEIGHTS = ScoringWeights(
    easy_below=TIER_EASY_BELOW, hard_from=TIER_HARD_FROM,
    star2_factor=STAR2_FACTOR, star1_factor=STAR1_FACTOR,
    **SCORE_WEIGHTS
)


class DifficultyReport:
    """The rating of one level."""

    def __init__(self, par_moves, star3, star2, star1, score, tier, metrics, alternates_exhausted):
        self.par_moves = par_moves
        self.star3 = star3
        self.star2 = star2
        self.star1 = star1
        self.score = score
        self.tier = tier
        self.metrics = metrics
        # False when the alternate count was capped by the limit or the budget.
        self.alternates_exhausted = alternates_exhausted

    def to_dict(self):
        return {
            'par': self.par_moves,
            'stars': {'3': self.star3, '2': self.star2, '1': self.star1},
            'score': self.score,
            'tier': self.tier,
            'metrics': dict(self.metrics),
            'alternates_exhausted': self.alternates_exhausted,
        }

    def __repr__(self):
        return f"DifficultyReport(par={self.par_moves}, score={self.score}, tier={self.tier!r})"


def round_half_up(value, digits=1):
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def tier_for(score, weights=DEFAULT_WEIGHTS):
    if score < weights.easy_below:
        return TIER_EASY
    if score >= weights.hard_from:
        return TIER_HARD
    return TIER_MEDIUM


def star_thresholds(par_moves, weights=DEFAULT_WEIGHTS):
    """
    Move counts for 3, 2 and 1 stars. Informational only: finishing with more
    moves still clears the level; enforcing a policy is up to the consumer.
    """
    return (
        par_moves,
        math.ceil(par_moves * weights.star2_factor),
        math.ceil(par_moves * weights.star1_factor),
    )


def path_statistics(level, moves):
    """
    Replays `moves` and measures branching along the path.

    :returns: dict with 'avg_branching', 'forced_steps' (states with at most
              one legal move) and 'revisits' (states identical to an earlier one).
    :rtype: dict
    :raises ValueError: If the moves do not replay legally.
    """
    sim = run_moves(level, moves)
    if not sim.ok:
        raise ValueError(f"Level {level.id}: moves do not replay legally")
    seen = set()
    total_branch = forced_steps = revisits = 0
    for state in sim.states:
        key = state_key(state)
        if key in seen:
            revisits += 1
        seen.add(key)
        branch = len(legal_moves(level, state))
        total_branch += branch
        if branch <= 1:
            forced_steps += 1
    return {
        'avg_branching': total_branch / max(1, len(sim.states)),
        'forced_steps': forced_steps,
        'revisits': revisits,
    }


def compute_score(par_moves, gates, wipes, colors_used, alt_count, avg_branching, revisits,
                  weights=DEFAULT_WEIGHTS):
    score = (
        weights.par * par_moves
        + weights.gates * gates
        + weights.wipes * wipes
        + weights.colors * colors_used
        + weights.scarcity / max(1, alt_count)
        + weights.branching * max(0.0, avg_branching - 1.0)
        + weights.revisits * revisits
    )
    return round_half_up(score, 1)


def score_level(level, optimal_moves, alt_limit=DEFAULT_ALT_LIMIT,
                sat_time_limit_ms=DEFAULT_ALT_TIME_LIMIT_MS, weights=DEFAULT_WEIGHTS):
    """
    Rates a level given one of its optimal solutions.

    :param ParsedLevel level: The level.
    :param list[int] optimal_moves: A minimal solution (its length is par).
    :param int alt_limit: Cap on alternate optimal solutions to enumerate.
    :param int|None sat_time_limit_ms: Budget for the enumeration.
    :param ScoringWeights weights: Formula constants and thresholds.
    :rtype: DifficultyReport
    """
    par_moves = len(optimal_moves)
    features = feature_counts(level)
    path = path_statistics(level, optimal_moves)
    alt = count_alternate_optimal(level, par_moves, alt_limit, sat_time_limit_ms)
    if alt.timed_out:
        logging.warning(f"Level {level.id}: alternate count capped by time budget at {alt.count}")

    colors_used = len(features['colors'])
    score = compute_score(
        par_moves, features['gates'], features['wipes'], colors_used,
        alt.count, path['avg_branching'], path['revisits'], weights
    )
    star3, star2, star1 = star_thresholds(par_moves, weights)
    metrics = {
        'optimal_solutions_seen': alt.count,
        'avg_branching': round(path['avg_branching'], 2),
        'forced_steps': path['forced_steps'],
        'revisits': path['revisits'],
        'pickups': features['pickups'],
        'gates': features['gates'],
        'wipes': features['wipes'],
        'colors_used': colors_used,
    }
    report = DifficultyReport(par_moves, star3, star2, star1, score, tier_for(score, weights),
                              metrics, alt.exhausted)
    logging.info(f"Level {level.id}: score {score} ({report.tier})")
    return report


def format_report(report):
    """Multi-line human-readable breakdown of a report."""
    lines = [
        "--- Difficulty Report ---",
        f"{'Par moves':<25}: {report.par_moves}",
        f"{'Stars (3/2/1)':<25}: {report.star3} / {report.star2} / {report.star1}",
        f"{'Score':<25}: {report.score}",
        f"{'Tier':<25}: {report.tier}",
    ]
    for name, value in report.metrics.items():
        lines.append(f"  - {name:<22}: {value}")
    if not report.alternates_exhausted:
        lines.append("  (alternate solution count is a lower bound)")
    return '\n'.join(lines)
