import json

import pytest

from rune_solver.level_parser import parse_grid


@pytest.fixture
def corridor():
    return parse_grid(["S...E"], level_id='corridor')


@pytest.fixture
def square():
    return parse_grid(["S.", ".E"], level_id='square')


@pytest.fixture
def red_gate_corridor():
    # The picked color returns to the bottom face after four more rolls east.
    return parse_grid(["SR...rE"], level_id='red-gate')


@pytest.fixture
def write_levels(tmp_path):
    def _write(records, name='levels.json'):
        path = tmp_path / name
        path.write_text(json.dumps(records))
        return str(path)
    return _write
