"""**********************************************************************************
 * Title: level_parser.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This module turns a level definition (a rectangular grid of characters)
 * into the flat, index-based representation every other part of the solver
 * works on. A cell index is `y * width + x`. The parsed level carries the
 * void and wipe masks, the gate color and pickup id of each cell, the color
 * of each pickup, the start and end cells, and the list of walkable cells.
 * It also provides the tagged tile view of a cell, grid adjacency, BFS
 * distances, and loaders for JSON level files.
 **********************************************************************************"""

# --- IMPORTS ---
import os
import json
import logging
from collections import namedtuple, deque

from rune_solver.errors import LevelDefError
from rune_solver.constants import (
    CHAR_VOID, CHAR_START, CHAR_END, CHAR_WIPE, PICKUP_CHARS, GATE_CHARS, GRID_CHARS,
    COLOR_INDEX, COLOR_NONE, DIR_DELTAS,
    TILE_VOID, TILE_FLOOR, TILE_START, TILE_END, TILE_WIPE, TILE_GATE, TILE_PICKUP
)

# --- DATA TYPES ---
LevelDef = namedtuple('LevelDef', ['id', 'difficulty', 'grid'])

ParsedLevel = namedtuple('ParsedLevel', [
    'id', 'width', 'height', 'start_idx', 'end_idx',
    'is_void',            # tuple[bool] per cell
    'is_wipe',            # tuple[bool] per cell
    'gate_color_by_idx',  # tuple[int] per cell, COLOR_NONE when no gate
    'pickup_id_by_idx',   # tuple[int] per cell, -1 when no pickup
    'pickup_color_by_id', # tuple[int] per pickup id
    'walkable',           # tuple[int] of non-void cell indices, ascending
])

# Tagged view of a single cell. `color` is set for gates and pickups,
# `pickup_id` only for pickups.
Tile = namedtuple('Tile', ['kind', 'color', 'pickup_id'])


# --- PARSING ---
def parse_level(level_def):
    """
    Parses a LevelDef into a ParsedLevel.

    Pickup ids are assigned in row-major scan order. The walkable list holds
    every cell that is not void.

    :param LevelDef level_def: The level to parse.
    :returns: The immutable parsed level.
    :rtype: ParsedLevel
    :raises LevelDefError: On an empty or non-rectangular grid, an unknown
                           character, or a missing or duplicated start/end.
    """
    level_id, grid = level_def.id, level_def.grid
    if not grid or not grid[0]:
        raise LevelDefError(f"Level {level_id} grid is empty")
    width = len(grid[0])
    if any(len(row) != width for row in grid):
        raise LevelDefError(f"Level {level_id} grid must be rectangular")

    height = len(grid)
    n = width * height
    is_void = [False] * n
    is_wipe = [False] * n
    gate_color = [COLOR_NONE] * n
    pickup_id = [-1] * n
    pickup_colors = []
    start_idx = end_idx = -1

    for y, row in enumerate(grid):
        for x, ch in enumerate(row):
            idx = y * width + x
            if ch not in GRID_CHARS:
                raise LevelDefError(f"Level {level_id} has unknown cell {ch!r} at ({x}, {y})")
            if ch == CHAR_VOID:
                is_void[idx] = True
            elif ch == CHAR_START:
                if start_idx >= 0:
                    raise LevelDefError(f"Level {level_id} has more than one S")
                start_idx = idx
            elif ch == CHAR_END:
                if end_idx >= 0:
                    raise LevelDefError(f"Level {level_id} has more than one E")
                end_idx = idx
            elif ch == CHAR_WIPE:
                is_wipe[idx] = True
            elif ch in PICKUP_CHARS:
                pickup_id[idx] = len(pickup_colors)
                pickup_colors.append(COLOR_INDEX[ch])
            elif ch in GATE_CHARS:
                gate_color[idx] = COLOR_INDEX[ch.upper()]

    if start_idx < 0:
        raise LevelDefError(f"Level {level_id} missing S")
    if end_idx < 0:
        raise LevelDefError(f"Level {level_id} missing E")

    walkable = tuple(i for i in range(n) if not is_void[i])
    logging.debug(
        f"Parsed level {level_id}: {width}x{height}, {len(walkable)} walkable, "
        f"{len(pickup_colors)} pickups"
    )
    return ParsedLevel(
        id=level_id, width=width, height=height,
        start_idx=start_idx, end_idx=end_idx,
        is_void=tuple(is_void), is_wipe=tuple(is_wipe),
        gate_color_by_idx=tuple(gate_color), pickup_id_by_idx=tuple(pickup_id),
        pickup_color_by_id=tuple(pickup_colors), walkable=walkable,
    )


def parse_grid(grid, level_id='inline', difficulty=None):
    """Convenience wrapper: parses a bare grid (list of strings or one multi-line string)."""
    if isinstance(grid, str):
        grid = [line for line in grid.strip().splitlines()]
    return parse_level(LevelDef(level_id, difficulty, list(grid)))


# --- GRID HELPERS ---
def idx_to_xy(level, idx):
    return idx % level.width, idx // level.width


def xy_to_idx(level, x, y):
    return y * level.width + x


def neighbor(level, idx, direction):
    """
    Returns the index of the adjacent cell in `direction`, or -1 when it lies
    off the grid. Void cells are still returned; callers decide walkability.
    """
    dx, dy = DIR_DELTAS[direction]
    x, y = idx % level.width + dx, idx // level.width + dy
    if x < 0 or y < 0 or x >= level.width or y >= level.height:
        return -1
    return y * level.width + x


def tile_at(level, idx):
    """Returns the tagged Tile for a cell index."""
    if level.is_void[idx]:
        return Tile(TILE_VOID, COLOR_NONE, -1)
    if level.is_wipe[idx]:
        return Tile(TILE_WIPE, COLOR_NONE, -1)
    pid = level.pickup_id_by_idx[idx]
    if pid >= 0:
        return Tile(TILE_PICKUP, level.pickup_color_by_id[pid], pid)
    gate = level.gate_color_by_idx[idx]
    if gate != COLOR_NONE:
        return Tile(TILE_GATE, gate, -1)
    if idx == level.start_idx:
        return Tile(TILE_START, COLOR_NONE, -1)
    if idx == level.end_idx:
        return Tile(TILE_END, COLOR_NONE, -1)
    return Tile(TILE_FLOOR, COLOR_NONE, -1)


def grid_distances(level, source_idx):
    """
    Breadth-first move distances from `source_idx` over walkable cells.

    Gates are ignored, so the result is a lower bound on the true number of
    moves. Unreachable cells are absent from the returned dict.
    """
    dist = {source_idx: 0}
    queue = deque([source_idx])
    while queue:
        idx = queue.popleft()
        for d in DIR_DELTAS:
            n = neighbor(level, idx, d)
            if n >= 0 and not level.is_void[n] and n not in dist:
                dist[n] = dist[idx] + 1
                queue.append(n)
    return dist


def feature_counts(level):
    """
    Static feature counts used by the difficulty scorer.

    :returns: dict with 'pickups', 'gates', 'wipes' and 'colors' (a set of the
              distinct colors found on gates and pickups).
    :rtype: dict
    """
    colors = set(level.pickup_color_by_id)
    gates = 0
    for idx in level.walkable:
        if level.gate_color_by_idx[idx] != COLOR_NONE:
            gates += 1
            colors.add(level.gate_color_by_idx[idx])
    return {
        'pickups': len(level.pickup_color_by_id),
        'gates': gates,
        'wipes': sum(1 for idx in level.walkable if level.is_wipe[idx]),
        'colors': colors,
    }


# --- LEVEL FILE LOADING ---
def level_def_from_dict(record):
    """
    Builds a LevelDef from one JSON record `{"id", "difficulty", "grid"}`.

    :raises LevelDefError: If the record is missing its id or grid.
    """
    if not isinstance(record, dict) or 'id' not in record or 'grid' not in record:
        raise LevelDefError(f"Malformed level record: {record!r}")
    grid = record['grid']
    if isinstance(grid, str):
        grid = grid.strip().splitlines()
    if not isinstance(grid, list) or not all(isinstance(row, str) for row in grid):
        raise LevelDefError(f"Level {record['id']} grid must be a list of strings")
    return LevelDef(str(record['id']), record.get('difficulty'), grid)


def _read_level_file(file_path):
    with open(file_path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise LevelDefError(f"Could not read {file_path}: {e}") from e
    if isinstance(data, dict):
        data = data.get('levels', [data])
    if not isinstance(data, list):
        raise LevelDefError(f"{file_path} must hold a list of levels or an object with a 'levels' list")
    return [level_def_from_dict(record) for record in data]


def load_level_defs(path):
    """
    Loads level definitions from a JSON file or a directory of JSON files.

    A file holds either a list of level records or an object with a 'levels'
    list. Directory entries are read in sorted filename order.

    :param str path: File or directory path.
    :returns: The level definitions in file order.
    :rtype: list[LevelDef]
    :raises FileNotFoundError: If the path is neither a file nor a directory.
    """
    if os.path.isdir(path):
        level_defs = []
        for filename in sorted(os.listdir(path)):
            file_path = os.path.join(path, filename)
            if os.path.isfile(file_path) and filename.endswith('.json'):
                level_defs.extend(_read_level_file(file_path))
        logging.info(f"Loaded {len(level_defs)} levels from directory {path}")
        return level_defs
    if os.path.isfile(path):
        level_defs = _read_level_file(path)
        logging.info(f"Loaded {len(level_defs)} levels from {path}")
        return level_defs
    raise FileNotFoundError(f"Path '{path}' is not a valid file or directory")
