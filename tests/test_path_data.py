import pytest

from thicknessadjuster.model.errors import PathDataError
from thicknessadjuster.model.geometry_primitives import CommandKind, PathCommand, Point, Segment
from thicknessadjuster.pre.path_data import fmt, format_path_data, parse_path_data, tokenize_path_data


def test_tokenize_compact_numbers():
    assert tokenize_path_data("M0,0L10-5.5e1") == ["M", "0", "0", "L", "10", "-5.5e1"]


def test_parse_basic_commands():
    commands = parse_path_data("M 0 0 L 10 0 H 20 V 5 Z")
    assert [c.kind for c in commands] == [
        CommandKind.MOVE, CommandKind.LINE, CommandKind.HORIZONTAL, CommandKind.VERTICAL, CommandKind.CLOSE,
    ]
    assert commands[1].args == (10.0, 0.0)
    assert commands[2].args == (20.0,)


def test_implicit_line_after_move():
    commands = parse_path_data("M 0 0 10 0 10 10")
    assert [c.letter for c in commands] == ["M", "L", "L"]

    commands = parse_path_data("m 1 1 5 5")
    assert [c.letter for c in commands] == ["m", "l"]


def test_implicit_repetition_of_curves():
    commands = parse_path_data("c 1 1 2 2 3 3 4 4 5 5 6 6")
    assert len(commands) == 2
    assert all(c.kind is CommandKind.CUBIC and c.relative for c in commands)


@pytest.mark.parametrize("d", [
    "M 0 0 L 10",
    "10 10 L 5 5",
    "M 0 0 X 5 5",
    "M 0 0 Z 1 2",
])
def test_malformed_path_data(d):
    with pytest.raises(PathDataError):
        parse_path_data(d)


def test_path_command_arity_is_checked():
    with pytest.raises(PathDataError):
        PathCommand(CommandKind.CUBIC, False, (1.0, 2.0))


def test_fmt():
    assert fmt(1.0) == "1"
    assert fmt(-0.00001) == "0"
    assert fmt(1.23456) == "1.2346"
    assert fmt(-11.3385827) == "-11.3386"


def test_format_path_data_closes_loops():
    pts = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
    segments = [Segment(f"s{i}", pts[i], pts[(i + 1) % 4]) for i in range(4)]
    assert format_path_data(segments) == "M 0 0 L 10 0 L 10 10 L 0 10 L 0 0 Z"


def test_format_path_data_breaks_chain_with_move():
    segments = [
        Segment("a", Point(0, 0), Point(5, 0)),
        Segment("b", Point(7, 0), Point(9, 0)),
    ]
    assert format_path_data(segments) == "M 0 0 L 5 0 M 7 0 L 9 0"


def test_format_path_data_reemits_curve_reference():
    curve = Segment(
        "c", Point(0, 0), Point(10, 0), is_curve=True,
        source_command=PathCommand(CommandKind.CUBIC, False, (0, 10, 10, 10, 10, 0)),
    )
    assert format_path_data([curve]) == "M 0 0 C 0 10 10 10 10 0"
