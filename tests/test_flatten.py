import pytest

from thicknessadjuster.model.errors import IssueCode, ZeroLengthSegmentError
from thicknessadjuster.model.geometry_primitives import CommandKind, Point, Segment
from thicknessadjuster.pre.flatten import CurveMode, Flattener, validate_segment
from thicknessadjuster.pre.path_data import parse_path_data


def flatten(d, **kwargs):
    return Flattener(**kwargs).flatten(parse_path_data(d))


def test_closed_square_gets_closing_segment():
    result = flatten("M 0 0 L 10 0 L 10 10 L 0 10 Z")
    assert [s.id for s in result.segments] == [f"path_0_seg_{i}" for i in range(4)]
    closing = result.segments[-1]
    assert closing.start_point == Point(0, 10)
    assert closing.end_point == Point(0, 0)
    assert closing.command_index == 4


def test_close_at_start_adds_nothing():
    result = flatten("M 0 0 L 10 0 L 10 10 L 0 0 Z")
    assert len(result.segments) == 3


def test_relative_commands():
    result = flatten("m 1 1 l 10 0 v 5 h -10 z")
    ends = [(s.end_point.x, s.end_point.y) for s in result.segments]
    assert ends == [(11, 1), (11, 6), (1, 6), (1, 1)]


def test_commands_before_first_move_are_ignored():
    result = flatten("L 5 5 M 0 0 L 10 0")
    assert len(result.segments) == 1
    assert result.segments[0].start_point == Point(0, 0)


def test_zero_length_segment_is_reported_and_excluded():
    result = flatten("M 0 0 L 0 0 L 10 0")
    assert [s.id for s in result.segments] == ["path_0_seg_1"]
    assert [s.id for s in result.degenerate] == ["path_0_seg_0"]
    assert result.issues[0].code is IssueCode.ZERO_LENGTH_SEGMENT
    assert result.issues[0].segment_id == "path_0_seg_0"


def test_validate_segment():
    validate_segment(Segment("ok", Point(0, 0), Point(1, 0)))
    with pytest.raises(ZeroLengthSegmentError):
        validate_segment(Segment("bad", Point(1, 1), Point(1, 1)))


def test_near_straight_cubic_becomes_plain_segment():
    result = flatten("M 0 0 C 3 0.1 6 -0.1 10 0")
    assert result.straightened_curves == 1
    (seg,) = result.segments
    assert not seg.is_curve
    assert seg.end_point == Point(10, 0)


def test_curve_reference_keeps_absolute_command():
    result = flatten("M 5 5 c 0 10 10 10 10 0")
    (seg,) = result.segments
    assert seg.is_curve
    assert seg.start_point == Point(5, 5)
    assert seg.end_point == Point(15, 5)
    assert seg.source_command.kind is CommandKind.CUBIC
    assert not seg.source_command.relative
    assert seg.source_command.args == (5, 15, 15, 15, 15, 5)
    assert result.curve_count == 1


def test_subdivided_cubic():
    result = flatten("M 0 0 C 0 10 10 10 10 0", curve_mode=CurveMode.SUBDIVIDE, curve_segments=4)
    assert len(result.segments) == 4
    assert not any(s.is_curve for s in result.segments)
    assert result.segments[1].end_point == Point(5, 7.5)
    assert result.segments[-1].end_point == Point(10, 0)
    # Consecutive sub-segments share endpoints
    for a, b in zip(result.segments, result.segments[1:]):
        assert a.end_point == b.start_point


def test_smooth_cubic_reflects_previous_control_point():
    result = flatten("M 0 0 C 0 10 10 10 10 0 S 20 -10 20 0")
    smooth = result.segments[1]
    assert smooth.source_command.kind is CommandKind.CUBIC
    assert smooth.source_command.args == (10, -10, 20, -10, 20, 0)


def test_smooth_quadratic_without_previous_uses_current_point():
    # No preceding Q: the control point is the current point, so the curve is straight
    result = flatten("M 0 0 T 10 0")
    assert result.straightened_curves == 1
    assert not result.segments[0].is_curve


def test_arc_is_always_a_curve():
    result = flatten("M 0 0 A 5 5 0 0 1 10 0")
    (seg,) = result.segments
    assert seg.is_curve
    assert seg.source_command.kind is CommandKind.ARC


def test_subdivided_arc_lies_on_circle():
    result = flatten("M 0 0 A 5 5 0 0 1 10 0", curve_mode=CurveMode.SUBDIVIDE, curve_segments=4)
    assert len(result.segments) == 4
    for seg in result.segments:
        assert seg.end_point.distance_to(Point(5, 0)) == pytest.approx(5.0)
    assert result.segments[-1].end_point == Point(10, 0)


def test_zero_radius_arc_follows_chord():
    result = flatten("M 0 0 A 0 0 0 0 1 10 0", curve_mode=CurveMode.SUBDIVIDE, curve_segments=5)
    assert len(result.segments) == 5
    assert all(s.end_point.y == pytest.approx(0.0) for s in result.segments)


def test_path_id_prefixes_segment_ids():
    result = Flattener().flatten(parse_path_data("M 0 0 L 1 0"), path_id="path_7")
    assert result.segments[0].id == "path_7_seg_0"
    assert result.segments[0].path_id == "path_7"


def test_invalid_curve_segment_count():
    with pytest.raises(ValueError):
        Flattener(curve_segments=0)
