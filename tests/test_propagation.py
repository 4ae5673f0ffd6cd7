import pytest

from thicknessadjuster.analysis.shape_graph import build_adjacency, find_open_joints
from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.geometry_primitives import Point, Segment
from thicknessadjuster.solvers.adjustment import adjust_segment
from thicknessadjuster.solvers.propagation import Propagator

from conftest import TARGET_3MM


def _adjust_and_propagate(state, segment_ids):
    moved = []
    for segment_id in segment_ids:
        seg = state.get_segment(segment_id)
        old = (seg.start_point, seg.end_point)
        adjust_segment(seg, None, state.arena, state.parameters)
        moved.append((seg, *old))
    propagator = Propagator(state.arena)
    for seg, old_start, old_end in moved:
        propagator.propagate(seg, old_start, old_end)
    return propagator


def test_square_stays_closed(square_state):
    square_state.mark_adjustable("path_0_seg_0")
    _adjust_and_propagate(square_state, ["path_0_seg_0"])

    seg0 = square_state.get_segment("path_0_seg_0")
    assert square_state.get_segment("path_0_seg_3").end_point == seg0.start_point
    assert square_state.get_segment("path_0_seg_1").start_point == seg0.end_point
    assert find_open_joints(square_state.arena) == []


def test_tab_connector_is_translated(tab_panel_state):
    propagator = _adjust_and_propagate(tab_panel_state, ["path_0_seg_1", "path_0_seg_3"])

    connector = tab_panel_state.get_segment("path_0_seg_2")
    assert connector.start_point == Point(10, -TARGET_3MM)
    assert connector.end_point == Point(20, -TARGET_3MM)
    assert connector.length == pytest.approx(10.0)
    assert "path_0_seg_2" in propagator.touched
    assert find_open_joints(tab_panel_state.arena) == []


def test_slot_edges_are_not_moved(tab_panel_state):
    _adjust_and_propagate(tab_panel_state, ["path_0_seg_1", "path_0_seg_3"])
    assert tab_panel_state.get_segment("path_0_seg_0").end_point == Point(10, 0)
    assert tab_panel_state.get_segment("path_0_seg_4").start_point == Point(20, 0)


def test_visited_set_is_shared_across_the_batch(tab_panel_state):
    propagator = _adjust_and_propagate(tab_panel_state, ["path_0_seg_1", "path_0_seg_3"])
    assert {"path_0_seg_1", "path_0_seg_2", "path_0_seg_3"} <= propagator.visited
    assert propagator.touched.count("path_0_seg_2") == 1


def test_slot_edge_next_to_side_is_only_reanchored():
    points = [Point(0, 0), Point(0, -5), Point(5, -5), Point(10, -5), Point(10, 0)]
    segments = [Segment(f"s{i}", points[i], points[i + 1]) for i in range(4)]
    arena = SegmentArena(segments)
    build_adjacency(arena.segments)
    side = arena["s0"]
    side.set_adjustable()

    old_start, old_end = side.start_point, side.end_point
    side.set_endpoints(old_start, Point(0, -8))
    propagator = Propagator(arena)
    propagator.propagate(side, old_start, old_end)

    assert arena["s1"].start_point == Point(0, -8)
    assert arena["s1"].end_point == Point(5, -5)
    assert arena["s2"].start_point == Point(5, -5)


def test_cascade_through_tab_connectors():
    # side a - connector - side b - connector - side c, all on one chain
    points = [Point(0, 0), Point(0, -5), Point(5, -5), Point(5, 0), Point(10, 0), Point(10, -5)]
    segments = [Segment(f"s{i}", points[i], points[i + 1]) for i in range(5)]
    arena = SegmentArena(segments)
    build_adjacency(arena.segments)
    for segment_id in ("s0", "s2", "s4"):
        arena[segment_id].set_adjustable()

    side = arena["s0"]
    old_start, old_end = side.start_point, side.end_point
    side.set_endpoints(old_start, Point(0, -8))
    propagator = Propagator(arena)
    propagator.propagate(side, old_start, old_end)

    connector = arena["s1"]
    assert connector.start_point == Point(0, -8)
    assert connector.end_point == Point(5, -8)
    # The adjustable side beyond the connector is re-anchored, not translated
    assert arena["s2"].start_point == Point(5, -8)
    assert arena["s2"].end_point == Point(5, 0)
    assert "s2" not in propagator.visited


def test_curve_neighbour_is_left_in_place():
    a = Segment("a", Point(0, 0), Point(0, -5))
    curve = Segment("c", Point(0, -5), Point(10, -5), is_curve=True)
    arena = SegmentArena([a, curve])
    build_adjacency(arena.segments)
    a.set_adjustable()

    a.set_endpoints(Point(0, 0), Point(0, -8))
    Propagator(arena).propagate(a, Point(0, 0), Point(0, -5))

    assert curve.start_point == Point(0, -5)
