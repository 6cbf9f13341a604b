# run.py
# Command-line entry point for the Rune Cube batch solver.
# Equivalent to the `rune-solver` console script; freeze_support keeps the
# worker pool usable in frozen Windows builds.

import sys
import multiprocessing

from rune_solver.batch import cli

if __name__ == '__main__':
    multiprocessing.freeze_support()
    sys.exit(cli())
