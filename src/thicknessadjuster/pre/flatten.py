"""
Path flattening module.

This module converts path command sequences (lines, Bezier curves, arcs) into
straight Segments for the adjustment pipeline.

Curves are first tested for straightness: a Bezier whose control points all
lie within a tolerance of its chord is emitted as one ordinary Segment, so it
can be marked adjustable like any drawn line. Real curves are handled according
to the CurveMode:

  - REFERENCE: one Segment with ``is_curve=True`` spanning the curve's start and
    end. It keeps the shape graph connected but is never adjusted or moved.
  - SUBDIVIDE: N straight sub-segments sampled at t = i/N.

Arcs have no control points to test; they are always treated as curves.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional, Sequence

from thicknessadjuster.config import CURVE_SEGMENTS, EPSILON, STRAIGHTNESS_TOLERANCE
from thicknessadjuster.model.errors import Issue, IssueCode, ZeroLengthSegmentError
from thicknessadjuster.model.geometry_primitives import (
    CommandKind,
    PathCommand,
    Point,
    Segment,
)
from thicknessadjuster.model.geometry_utils import (
    is_curve_straight,
    reflect_point,
    sample_arc,
    sample_cubic,
    sample_quadratic,
)

logger = logging.getLogger(__name__)


class CurveMode(StrEnum):
    REFERENCE = "reference"
    SUBDIVIDE = "subdivide"


@dataclass
class FlattenResult:
    """Return object of a flatten run."""
    segments: List[Segment] = field(default_factory=list)
    # Zero-length segments, kept as data but excluded from the pipeline
    degenerate: List[Segment] = field(default_factory=list)
    straightened_curves: int = 0
    issues: List[Issue] = field(default_factory=list)

    @property
    def curve_count(self) -> int:
        return sum(1 for s in self.segments if s.is_curve)


def validate_segment(segment: Segment) -> None:
    """Raise ZeroLengthSegmentError if the segment has no length."""
    if segment.is_degenerate:
        raise ZeroLengthSegmentError(f"Segment '{segment.id}' has zero length.")


class Flattener:
    """
    Converts path commands to Segments.

    One instance can flatten many paths; all state is local to a `flatten` call.
    """
    def __init__(
        self,
        straightness_tolerance: float = STRAIGHTNESS_TOLERANCE,
        curve_segments: int = CURVE_SEGMENTS,
        curve_mode: CurveMode = CurveMode.REFERENCE,
        epsilon: float = EPSILON,
    ) -> None:
        if curve_segments < 1:
            raise ValueError(f"curve_segments must be at least 1, got {curve_segments}.")
        self.straightness_tolerance = straightness_tolerance
        self.curve_segments = curve_segments
        self.curve_mode = curve_mode
        self.epsilon = epsilon

    def flatten(self, commands: Sequence[PathCommand], path_id: str = "path_0") -> FlattenResult:
        """
        Flatten one path.

        Args:
            commands: Path commands in drawing order.
            path_id: Prefix for segment ids ("{path_id}_seg_{n}").

        Returns:
            FlattenResult with the usable segments, the degenerate ones and any issues.
        """
        run = _FlattenRun(self, path_id)
        for index, command in enumerate(commands):
            run.apply(index, command)

        result = run.result
        logger.debug(
            f"Flattened {path_id}: {len(result.segments)} segments "
            f"({result.curve_count} curves, {result.straightened_curves} straightened, "
            f"{len(result.degenerate)} degenerate)"
        )
        return result


class _FlattenRun:
    """Running state (current point, sub-path start, last control point) for one path."""

    def __init__(self, flattener: Flattener, path_id: str) -> None:
        self.flattener = flattener
        self.path_id = path_id
        self.result = FlattenResult()
        self.current: Optional[Point] = None
        self.subpath_start: Optional[Point] = None
        self.last_cubic_control: Optional[Point] = None
        self.last_quadratic_control: Optional[Point] = None
        self.segment_index = 0

    # --- helpers ---
    def _abs(self, x: float, y: float, relative: bool) -> Point:
        if relative and self.current is not None:
            return Point(self.current.x + x, self.current.y + y)
        return Point(x, y)

    def _emit(
        self,
        start: Point,
        end: Point,
        command_index: int,
        is_curve: bool = False,
        source_command: Optional[PathCommand] = None,
    ) -> None:
        segment = Segment(
            id=f"{self.path_id}_seg_{self.segment_index}",
            start_point=start,
            end_point=end,
            is_curve=is_curve,
            path_id=self.path_id,
            command_index=command_index,
            source_command=source_command,
        )
        self.segment_index += 1
        try:
            validate_segment(segment)
        except ZeroLengthSegmentError as e:
            logger.warning(f"Skipping degenerate segment: {e}")
            self.result.degenerate.append(segment)
            self.result.issues.append(Issue(IssueCode.ZERO_LENGTH_SEGMENT, str(e), segment_id=segment.id))
            return
        self.result.segments.append(segment)

    def _emit_polyline(self, start: Point, points: List[Point], command_index: int) -> None:
        prev = start
        for p in points:
            self._emit(prev, p, command_index)
            prev = p

    def _emit_curve(
        self,
        command_index: int,
        end: Point,
        controls: List[Point],
        explicit: PathCommand,
        samples: List[Point],
        testable: bool = True,
    ) -> None:
        start = self.current
        if testable and is_curve_straight(start, controls, end, self.flattener.straightness_tolerance):
            logger.debug(f"Converting straight curve '{explicit.letter}' from {start} to {end}")
            self.result.straightened_curves += 1
            self._emit(start, end, command_index)
        elif self.flattener.curve_mode is CurveMode.SUBDIVIDE:
            self._emit_polyline(start, samples, command_index)
        else:
            self._emit(start, end, command_index, is_curve=True, source_command=explicit)

    # --- command dispatch ---
    def apply(self, index: int, command: PathCommand) -> None:
        kind = command.kind
        a = command.args
        rel = command.relative

        if kind is CommandKind.MOVE:
            # A relative move with no current point is absolute
            self.current = self._abs(a[0], a[1], rel)
            self.subpath_start = self.current
            self._reset_controls()
            return

        if self.current is None:
            logger.debug(f"Ignoring '{command.letter}' before the first move command.")
            return

        n = self.flattener.curve_segments
        match kind:
            case CommandKind.LINE:
                end = self._abs(a[0], a[1], rel)
                self._emit(self.current, end, index)
                self._reset_controls()
                self.current = end

            case CommandKind.HORIZONTAL:
                x = self.current.x + a[0] if rel else a[0]
                end = Point(x, self.current.y)
                self._emit(self.current, end, index)
                self._reset_controls()
                self.current = end

            case CommandKind.VERTICAL:
                y = self.current.y + a[0] if rel else a[0]
                end = Point(self.current.x, y)
                self._emit(self.current, end, index)
                self._reset_controls()
                self.current = end

            case CommandKind.CUBIC | CommandKind.SMOOTH_CUBIC:
                if kind is CommandKind.CUBIC:
                    c1 = self._abs(a[0], a[1], rel)
                    c2 = self._abs(a[2], a[3], rel)
                    end = self._abs(a[4], a[5], rel)
                else:
                    c1 = (reflect_point(self.last_cubic_control, self.current)
                          if self.last_cubic_control is not None else self.current)
                    c2 = self._abs(a[0], a[1], rel)
                    end = self._abs(a[2], a[3], rel)
                explicit = PathCommand(CommandKind.CUBIC, False, (c1.x, c1.y, c2.x, c2.y, end.x, end.y))
                samples = sample_cubic(self.current, c1, c2, end, n)
                self._emit_curve(index, end, [c1, c2], explicit, samples)
                self.last_cubic_control = c2
                self.last_quadratic_control = None
                self.current = end

            case CommandKind.QUADRATIC | CommandKind.SMOOTH_QUADRATIC:
                if kind is CommandKind.QUADRATIC:
                    c1 = self._abs(a[0], a[1], rel)
                    end = self._abs(a[2], a[3], rel)
                else:
                    c1 = (reflect_point(self.last_quadratic_control, self.current)
                          if self.last_quadratic_control is not None else self.current)
                    end = self._abs(a[0], a[1], rel)
                explicit = PathCommand(CommandKind.QUADRATIC, False, (c1.x, c1.y, end.x, end.y))
                samples = sample_quadratic(self.current, c1, end, n)
                self._emit_curve(index, end, [c1], explicit, samples)
                self.last_quadratic_control = c1
                self.last_cubic_control = None
                self.current = end

            case CommandKind.ARC:
                rx, ry, rotation, large_arc, sweep = a[0], a[1], a[2], bool(a[3]), bool(a[4])
                end = self._abs(a[5], a[6], rel)
                explicit = PathCommand(
                    CommandKind.ARC, False, (rx, ry, rotation, float(large_arc), float(sweep), end.x, end.y)
                )
                samples = sample_arc(self.current, rx, ry, rotation, large_arc, sweep, end, n)
                self._emit_curve(index, end, [], explicit, samples, testable=False)
                self._reset_controls()
                self.current = end

            case CommandKind.CLOSE:
                if self.subpath_start is not None and not self.current.is_close(
                    self.subpath_start, self.flattener.epsilon
                ):
                    self._emit(self.current, self.subpath_start, index)
                self._reset_controls()
                self.current = self.subpath_start

    def _reset_controls(self) -> None:
        self.last_cubic_control = None
        self.last_quadratic_control = None
