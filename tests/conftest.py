import logging

import pytest

from thicknessadjuster.model.state import ProjectState
from thicknessadjuster.pre.flatten import Flattener
from thicknessadjuster.pre.path_data import parse_path_data
from thicknessadjuster.utils import mm_to_units

SQUARE_D = "M 0 0 L 10 0 L 10 10 L 0 10 Z"

# Panel edge with one tab: two tab sides (seg_1, seg_3) joined by a connector (seg_2)
TAB_PANEL_D = "M 0 0 L 10 0 L 10 -5 L 20 -5 L 20 0 L 30 0 L 30 20 L 0 20 Z"

TARGET_3MM = mm_to_units(3.0, 96.0)


def state_from_path_data(*paths: str) -> ProjectState:
    state = ProjectState()
    flattener = Flattener()
    segments = []
    for k, d in enumerate(paths):
        result = flattener.flatten(parse_path_data(d), path_id=f"path_{k}")
        segments.extend(result.segments)
        state.issues.extend(result.issues)
    state.load_segments(segments)
    return state


@pytest.fixture
def square_state() -> ProjectState:
    return state_from_path_data(SQUARE_D)


@pytest.fixture
def tab_panel_state() -> ProjectState:
    state = state_from_path_data(TAB_PANEL_D)
    state.mark_adjustable("path_0_seg_1")
    state.mark_adjustable("path_0_seg_3")
    return state


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("thicknessadjuster")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
