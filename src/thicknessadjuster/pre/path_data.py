"""
SVG path data (the `d` attribute) <-> PathCommand conversion.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

from thicknessadjuster.config import EPSILON
from thicknessadjuster.model.errors import PathDataError
from thicknessadjuster.model.geometry_primitives import (
    COMMAND_ARITY,
    CommandKind,
    PathCommand,
    Point,
    Segment,
)

logger = logging.getLogger(__name__)

_COMMAND_LETTERS = "MmZzLlHhVvCcSsQqTtAa"
_TOKEN_RE = re.compile(r"[MmZzLlHhVvCcSsQqTtAa]|[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_SEPARATOR_RE = re.compile(r"[\s,]*")


def fmt(n: float) -> str:
    text = f"{n:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def tokenize_path_data(d: str) -> List[str]:
    """Split path data into command letters and number strings."""
    tokens = _TOKEN_RE.findall(d)
    leftover = _SEPARATOR_RE.sub("", _TOKEN_RE.sub(" ", d))
    if leftover:
        raise PathDataError(f"Unexpected characters in path data: {leftover[:20]!r}")
    return tokens


def parse_path_data(d: str) -> List[PathCommand]:
    """
    Parse an SVG `d` attribute into a list of PathCommands.

    Repeated operand groups reuse the previous command letter; extra coordinate
    pairs after a move are implicit line commands, as in SVG.

    Args:
        d: The path data string.

    Returns:
        One PathCommand per drawn command, in input order.

    Raises:
        PathDataError: On unknown characters, missing operands or numbers
            before the first command.
    """
    tokens = tokenize_path_data(d)
    commands: List[PathCommand] = []
    letter: str | None = None
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token in _COMMAND_LETTERS:
            letter = token
            i += 1
            if letter in "Zz":
                commands.append(PathCommand.from_letter(letter))
                continue
        elif letter is None:
            raise PathDataError("Path data must start with a command letter.")
        elif letter in "Zz":
            raise PathDataError(f"Unexpected number '{token}' after close command.")

        arity = COMMAND_ARITY[CommandKind(letter.upper())]
        operands = tokens[i:i + arity]
        if len(operands) < arity or any(op in _COMMAND_LETTERS for op in operands):
            raise PathDataError(f"Command '{letter}' expects {arity} operands.")
        commands.append(PathCommand.from_letter(letter, tuple(float(op) for op in operands)))
        i += arity

        if letter in "Mm":
            letter = "L" if letter == "M" else "l"

    logger.debug(f"Parsed {len(commands)} path commands.")
    return commands


def format_command(command: PathCommand) -> str:
    if not command.args:
        return command.letter
    return command.letter + " " + " ".join(fmt(a) for a in command.args)


def format_path_data(segments: Sequence[Segment], epsilon: float = EPSILON) -> str:
    """
    Render segments back to path data.

    A move is emitted whenever a segment does not start where the previous one
    ended, and a close command whenever a run returns to its own start point.
    Curve references are re-emitted from their stored absolute command.
    """
    parts: List[str] = []
    current: Point | None = None
    run_start: Point | None = None

    for segment in segments:
        if current is None or not segment.start_point.is_close(current, epsilon):
            parts.append(f"M {fmt(segment.start_point.x)} {fmt(segment.start_point.y)}")
            run_start = segment.start_point

        if segment.is_curve and segment.source_command is not None:
            parts.append(format_command(segment.source_command))
        else:
            parts.append(f"L {fmt(segment.end_point.x)} {fmt(segment.end_point.y)}")

        current = segment.end_point
        if run_start is not None and current.is_close(run_start, epsilon):
            parts.append("Z")
            current = None
            run_start = None

    return " ".join(parts)
