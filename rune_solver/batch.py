# ==================================================================================================
#
#   Batch Solver for Rune Cube Levels
#
#   Version: 1.0.0
#
# --------------------------------------------------------------------------------------------------
#
#   Overview:
#   This is the offline build step for level content. It reads a file or directory of level
#   definitions, proves the par of every level with the SAT pipeline, rates its difficulty,
#   and writes level content plus the computed par, score, tier and star thresholds as one
#   JSON artifact, so the shipped game never has to solve a level at runtime.
#
#   Failure policy:
#   A level that is malformed, proven unsolvable, or whose optimum cannot be decided inside
#   its time budget aborts the whole batch with an error naming that level. Nothing is
#   written in that case. Unsolvable and timed-out levels are reported differently: the
#   first needs a level redesign, the second only a larger --time-limit.
#
#   Levels are independent, so they are distributed across a `multiprocessing` pool. Each
#   worker builds its own CNF instances; nothing is shared between levels.
#
# ==================================================================================================

import os
import sys
import json
import time
import hashlib
import logging
import argparse
import multiprocessing

from tqdm import tqdm

from rune_solver.errors import (
    LevelDefError, SolveTimeoutError, LevelUnsolvableError, BatchAbortedError
)
from rune_solver.level_parser import load_level_defs, parse_level
from rune_solver.optimal import require_optimal
from rune_solver.difficulty import score_level, format_report
from rune_solver.z3_solver import verify_par
from rune_solver.cube_math import format_moves
from rune_solver.dpll import format_duration
from rune_solver.constants import (
    DEFAULT_MAX_MOVES, DEFAULT_TIME_LIMIT_MS, DEFAULT_ALT_LIMIT, DEFAULT_ALT_TIME_LIMIT_MS
)

OUTPUT_FILE = "levels.solved.json"
DEBUG_LOG_FILE = "debug_log.txt"

STATUS_OK = 'ok'
STATUS_MALFORMED = 'malformed'
STATUS_UNSOLVABLE = 'unsolvable'
STATUS_TIMEOUT = 'timeout'
STATUS_UNVERIFIED = 'unverified'


def solution_hash(level_id, moves):
    """md5 over the level id and its move string; lets consumers check a stored solution."""
    return hashlib.md5((level_id + format_moves(moves)).encode()).hexdigest()


def build_record(level_def, solution, report):
    return {
        'id': level_def.id,
        'difficulty': level_def.difficulty,
        'grid': list(level_def.grid),
        'par': solution.horizon,
        'moves': format_moves(solution.moves),
        'solution_hash': solution_hash(level_def.id, solution.moves),
        'score': report.score,
        'tier': report.tier,
        'stars': {'3': report.star3, '2': report.star2, '1': report.star1},
        'metrics': report.metrics,
        'alternates_exhausted': report.alternates_exhausted,
    }


# --- Worker Process ---

def solve_level_worker(task):
    """
    Solves and rates one level. Runs inside a worker process.

    Expected failures come back as a status tuple so the parent can name the
    level in its abort message. DecodeError is an internal bug and propagates.

    :param tuple task: (index, LevelDef, options dict).
    :returns: (index, level_id, status, record_or_reason)
    :rtype: tuple
    """
    index, level_def, options = task
    try:
        level = parse_level(level_def)
        solution = require_optimal(level, options['max_moves'], options['time_limit_ms'])
        report = score_level(level, solution.moves, options['alt_limit'], options['alt_time_limit_ms'])
        logging.debug(format_report(report))
        if options['verify'] and not verify_par(level, solution.horizon, options['time_limit_ms']):
            return (index, level_def.id, STATUS_UNVERIFIED,
                    f"Z3 cross-check did not confirm par {solution.horizon}")
        return index, level_def.id, STATUS_OK, build_record(level_def, solution, report)
    except LevelDefError as e:
        return index, level_def.id, STATUS_MALFORMED, str(e)
    except LevelUnsolvableError as e:
        return (index, level_def.id, STATUS_UNSOLVABLE,
                f"proven unsolvable within {e.max_moves} moves; redesign the level")
    except SolveTimeoutError as e:
        return (index, level_def.id, STATUS_TIMEOUT,
                f"optimum undecided at horizon {e.horizon} after {e.time_limit_ms} ms; "
                f"increase --time-limit")


def write_artifact(records, out_path):
    with open(out_path, 'w') as f:
        json.dump({'levels': records}, f, indent=2)
        f.write('\n')


# --- Main Execution ---

def main(input_path, out_path=OUTPUT_FILE, workers=1, max_moves=DEFAULT_MAX_MOVES,
         time_limit_ms=DEFAULT_TIME_LIMIT_MS, alt_limit=DEFAULT_ALT_LIMIT,
         alt_time_limit_ms=DEFAULT_ALT_TIME_LIMIT_MS, verify=False, progress=True):
    """
    Runs the batch and writes the artifact.

    :returns: The level records in input order.
    :rtype: list[dict]
    :raises BatchAbortedError: On the first level that cannot be shipped.
    """
    start_time = time.time()
    try:
        level_defs = load_level_defs(input_path)
    except LevelDefError as e:
        raise BatchAbortedError(input_path, f"malformed level file: {e}") from e

    seen_ids = set()
    for level_def in level_defs:
        if level_def.id in seen_ids:
            raise BatchAbortedError(level_def.id, "duplicate level id")
        seen_ids.add(level_def.id)

    options = {
        'max_moves': max_moves,
        'time_limit_ms': time_limit_ms,
        'alt_limit': alt_limit,
        'alt_time_limit_ms': alt_time_limit_ms,
        'verify': verify,
    }
    tasks = [(i, level_def, options) for i, level_def in enumerate(level_defs)]
    logging.info(f"Solving {len(tasks)} levels with {workers} worker(s)")

    records = [None] * len(tasks)
    if workers <= 1:
        _collect(map(solve_level_worker, tasks), len(tasks), records, progress)
    else:
        with multiprocessing.Pool(processes=workers) as pool:
            results_iterator = pool.imap_unordered(solve_level_worker, tasks)
            try:
                _collect(results_iterator, len(tasks), records, progress)
            except BatchAbortedError:
                pool.terminate()
                raise

    write_artifact(records, out_path)
    logging.info(
        f"Wrote {len(records)} levels to {out_path} in {format_duration(time.time() - start_time)}"
    )
    return records


def _collect(results, total, records, progress):
    if progress:
        results = tqdm(results, total=total, desc="Solving Levels")
    for index, level_id, status, payload in results:
        if status != STATUS_OK:
            logging.error(f"Level {level_id} failed ({status}): {payload}")
            raise BatchAbortedError(level_id, f"{status}: {payload}")
        records[index] = payload


def cli(argv=None):
    parser = argparse.ArgumentParser(
        description="Prove par and rate difficulty for Rune Cube levels.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("input_path", help="JSON level file, or a folder of them.")
    parser.add_argument("--out", default=OUTPUT_FILE, help=f"Artifact path (default: {OUTPUT_FILE}).")
    parser.add_argument("--workers", type=int, default=os.cpu_count() or 1, help="Number of parallel worker processes (default: all available cores).")
    parser.add_argument("--max-moves", type=int, default=DEFAULT_MAX_MOVES, help="Largest horizon to try per level.")
    parser.add_argument("--time-limit", type=int, default=DEFAULT_TIME_LIMIT_MS, help="Per-level budget in ms for proving par.")
    parser.add_argument("--alt-limit", type=int, default=DEFAULT_ALT_LIMIT, help="Cap on alternate optimal solutions counted.")
    parser.add_argument("--alt-time-limit", type=int, default=DEFAULT_ALT_TIME_LIMIT_MS, help="Per-level budget in ms for counting alternates.")
    parser.add_argument("--verify", action="store_true", help="Cross-check every par with the Z3 solver.")
    parser.add_argument("--debug", action="store_true", help=f"Enable verbose debug logging to {DEBUG_LOG_FILE}.")
    args = parser.parse_args(argv)

    handlers = [logging.StreamHandler()]
    if args.debug:
        handlers.append(logging.FileHandler(DEBUG_LOG_FILE, mode='w'))
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )

    try:
        records = main(
            args.input_path, args.out, workers=args.workers, max_moves=args.max_moves,
            time_limit_ms=args.time_limit, alt_limit=args.alt_limit,
            alt_time_limit_ms=args.alt_time_limit, verify=args.verify,
        )
    except BatchAbortedError as e:
        print(f"\033[91m[FAIL]\033[0m {e}")
        return 1
    except FileNotFoundError as e:
        print(f"\033[91m[FAIL]\033[0m {e}")
        return 2

    print(f"\033[92m[OK]\033[0m Solved {len(records)} levels -> {args.out}")
    return 0


if __name__ == "__main__":
    multiprocessing.freeze_support()
    sys.exit(cli())
