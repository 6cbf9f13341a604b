import os
import json

import pytest

from rune_solver.errors import LevelDefError
from rune_solver.level_parser import (
    LevelDef, parse_level, parse_grid, idx_to_xy, xy_to_idx, neighbor, tile_at,
    grid_distances, feature_counts, load_level_defs, level_def_from_dict
)
from rune_solver.constants import (
    COLOR_NONE, COLOR_RED, COLOR_GREEN, COLOR_BLUE, DIR_UP, DIR_DOWN, DIR_LEFT, DIR_RIGHT,
    TILE_VOID, TILE_FLOOR, TILE_START, TILE_END, TILE_WIPE, TILE_GATE, TILE_PICKUP
)


def test_parse_basic_level():
    level = parse_grid(["SR.", "#Gb", "BWE"], level_id='mixed')
    assert (level.width, level.height) == (3, 3)
    assert level.start_idx == 0
    assert level.end_idx == 8
    assert len(level.walkable) + sum(level.is_void) == level.width * level.height
    assert level.walkable == (0, 1, 2, 4, 5, 6, 7, 8)
    # pickup ids follow row-major scan order
    assert level.pickup_id_by_idx[1] == 0
    assert level.pickup_id_by_idx[4] == 1
    assert level.pickup_id_by_idx[6] == 2
    assert level.pickup_color_by_id == (COLOR_RED, COLOR_GREEN, COLOR_BLUE)
    assert level.gate_color_by_idx[5] == COLOR_BLUE
    assert level.is_wipe[7]
    assert level.is_void[3]


def test_parse_grid_accepts_multiline_string():
    level = parse_grid("""
        S.
        .E
    """.replace(' ', ''))
    assert (level.width, level.height) == (2, 2)
    assert level.end_idx == 3


@pytest.mark.parametrize('grid, message', [
    ([], 'empty'),
    ([""], 'empty'),
    (["S.", "E"], 'rectangular'),
    (["SXE"], 'unknown'),
    (["SSE"], 'more than one S'),
    (["SEE"], 'more than one E'),
    (["..E"], 'missing S'),
    (["S.."], 'missing E'),
])
def test_parse_errors(grid, message):
    with pytest.raises(LevelDefError, match=message):
        parse_level(LevelDef('bad', None, grid))


def test_coordinates_and_neighbors():
    level = parse_grid(["S.#", "..E"])
    assert idx_to_xy(level, 5) == (2, 1)
    assert xy_to_idx(level, 2, 1) == 5
    assert neighbor(level, 0, DIR_UP) == -1
    assert neighbor(level, 0, DIR_LEFT) == -1
    assert neighbor(level, 0, DIR_DOWN) == 3
    assert neighbor(level, 0, DIR_RIGHT) == 1
    # void cells are still neighbors, walkability is the caller's concern
    assert neighbor(level, 1, DIR_RIGHT) == 2
    assert neighbor(level, 5, DIR_RIGHT) == -1


def test_tile_kinds():
    level = parse_grid(["S.#", "RrW", "..E"])
    assert tile_at(level, 0).kind == TILE_START
    assert tile_at(level, 1).kind == TILE_FLOOR
    assert tile_at(level, 2).kind == TILE_VOID
    assert tile_at(level, 3) == (TILE_PICKUP, COLOR_RED, 0)
    assert tile_at(level, 4) == (TILE_GATE, COLOR_RED, -1)
    assert tile_at(level, 5).kind == TILE_WIPE
    assert tile_at(level, 8).kind == TILE_END
    assert tile_at(level, 1).color == COLOR_NONE


def test_grid_distances_skip_void():
    level = parse_grid(["S#E", "..."])
    dist = grid_distances(level, level.start_idx)
    assert dist[level.end_idx] == 4
    assert 1 not in dist


def test_feature_counts():
    level = parse_grid(["SRr", "WgE"])
    features = feature_counts(level)
    assert features['pickups'] == 1
    assert features['gates'] == 2
    assert features['wipes'] == 1
    assert features['colors'] == {COLOR_RED, COLOR_GREEN}


def test_load_list_file(tmp_path):
    path = tmp_path / 'a.json'
    path.write_text(json.dumps([{"id": "L1", "difficulty": "easy", "grid": ["SE"]}]))
    defs = load_level_defs(str(path))
    assert defs == [LevelDef('L1', 'easy', ["SE"])]


def test_load_directory_in_filename_order(tmp_path):
    (tmp_path / 'b.json').write_text(json.dumps({"levels": [{"id": "B", "grid": ["SE"]}]}))
    (tmp_path / 'a.json').write_text(json.dumps([{"id": "A", "grid": "S.\n.E"}]))
    (tmp_path / 'notes.txt').write_text("ignored")
    defs = load_level_defs(str(tmp_path))
    assert [d.id for d in defs] == ['A', 'B']
    assert defs[0].grid == ["S.", ".E"]
    assert defs[1].difficulty is None


def test_load_bad_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text("{not json")
    with pytest.raises(LevelDefError):
        load_level_defs(str(path))


def test_load_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_level_defs(str(tmp_path / 'nope.json'))


def test_record_without_grid():
    with pytest.raises(LevelDefError):
        level_def_from_dict({"id": "X"})
    with pytest.raises(LevelDefError):
        level_def_from_dict({"id": "X", "grid": [1, 2]})


def test_sample_level_file_parses():
    path = os.path.join(os.path.dirname(__file__), '..', 'levels', 'sample_levels.json')
    defs = load_level_defs(path)
    assert len(defs) == len({d.id for d in defs})
    for level_def in defs:
        level = parse_level(level_def)
        assert level.start_idx != level.end_idx


@pytest.mark.parametrize('content', ['42', '"levels"', '{"levels": 7}'])
def test_load_file_with_wrong_top_level(tmp_path, content):
    path = tmp_path / 'odd.json'
    path.write_text(content)
    with pytest.raises(LevelDefError, match='odd.json'):
        load_level_defs(str(path))
