"""
Geometric adjustment engine for resizing segments to a multiple of the material thickness.

An adjustable segment keeps its angle; only its length changes. Which endpoint
moves depends on the neighbours: slot edges and perimeter edges anchor the
shared endpoint, everything else (adjustable lines, tab connectors, no
neighbour) lets it move.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, List, Optional

from thicknessadjuster.analysis.classifier import neighbor_type
from thicknessadjuster.config import LENGTH_TOLERANCE
from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.errors import Issue, IssueCode, ZeroLengthSegmentError
from thicknessadjuster.model.geometry_primitives import LineType, Point, Segment, Shape

if TYPE_CHECKING:
    from thicknessadjuster.model.state import GlobalParameters

logger = logging.getLogger(__name__)


class AdjustmentCase(StrEnum):
    BOTH_ANCHORED = "both-anchored"
    START_ANCHORED = "start-anchored"
    END_ANCHORED = "end-anchored"
    BOTH_FREE = "both-free"


@dataclass(frozen=True)
class Adjustment:
    """New geometry computed for one adjustable segment."""
    segment_id: str
    case: AdjustmentCase
    start_type: LineType
    end_type: LineType
    old_start: Point
    old_end: Point
    new_start: Point
    new_end: Point
    target_length: float

    @property
    def old_length(self) -> float:
        return self.old_start.distance_to(self.old_end)

    @property
    def new_length(self) -> float:
        return self.new_start.distance_to(self.new_end)


def compute_adjustment(
    segment: Segment,
    arena: SegmentArena,
    parameters: GlobalParameters,
    length_tolerance: float = LENGTH_TOLERANCE,
) -> Optional[Adjustment]:
    """
    Compute new endpoints for an adjustable segment without modifying it.

    Args:
        segment: An adjustable, non-curve segment.
        arena: Current segment state, used to classify both neighbours.
        parameters: Material thickness and DPI.
        length_tolerance: Length differences below this need no change.

    Returns:
        The Adjustment, or None when the segment is already at its target length.
    """
    if not segment.is_adjustable:
        raise ValueError(f"Segment '{segment.id}' is not adjustable.")

    target = parameters.target_length(segment.multiplier)
    delta = target - segment.length
    if abs(delta) < length_tolerance:
        logger.debug(f"Line {segment.id} is already at target length ({target:.3f})")
        return None

    # The direction comes from the original endpoints and never changes
    direction = segment.direction()

    start_type = neighbor_type(arena.get(segment.adjacent.start), arena)
    end_type = neighbor_type(arena.get(segment.adjacent.end), arena)

    old_start = segment.start_point
    old_end = segment.end_point

    if start_type.is_anchor and end_type.is_anchor:
        case = AdjustmentCase.BOTH_ANCHORED
    elif start_type.is_anchor:
        case = AdjustmentCase.START_ANCHORED
    elif end_type.is_anchor:
        case = AdjustmentCase.END_ANCHORED
    else:
        case = AdjustmentCase.BOTH_FREE

    match case:
        case AdjustmentCase.START_ANCHORED:
            new_start = old_start
            new_end = old_start + direction * target
        case AdjustmentCase.END_ANCHORED:
            new_end = old_end
            new_start = old_end - direction * target
        case _:
            # Extend symmetrically about the original midpoint
            mid = segment.midpoint
            half = direction * (target / 2.0)
            new_start = mid - half
            new_end = mid + half

    logger.debug(
        f"Line {segment.id}: {segment.length:.3f} -> {target:.3f} units "
        f"(start: {start_type}, end: {end_type}, case: {case})"
    )
    return Adjustment(
        segment_id=segment.id,
        case=case,
        start_type=start_type,
        end_type=end_type,
        old_start=old_start,
        old_end=old_end,
        new_start=new_start,
        new_end=new_end,
        target_length=target,
    )


def adjust_segment(
    segment: Segment,
    shape: Optional[Shape],
    arena: SegmentArena,
    parameters: GlobalParameters,
    issues: Optional[List[Issue]] = None,
) -> Optional[Adjustment]:
    """
    Resize one adjustable segment in place.

    Only this segment is modified; neighbours are left for the propagator.
    A segment anchored at both ends is still resized about its midpoint, but the
    configuration is reported as an UnexpectedDoubleAnchor issue.
    """
    if segment.is_curve:
        logger.debug(f"Line {segment.id} is a curve reference, skipping")
        return None

    try:
        adjustment = compute_adjustment(segment, arena, parameters)
    except ZeroLengthSegmentError as e:
        logger.warning(f"Skipping adjustment: {e}")
        if issues is not None:
            issues.append(Issue(IssueCode.ZERO_LENGTH_SEGMENT, str(e), segment_id=segment.id))
        return None
    if adjustment is None:
        return None

    if adjustment.case is AdjustmentCase.BOTH_ANCHORED:
        shape_info = f" in {shape.id}" if shape is not None else ""
        msg = (
            f"Both ends of '{segment.id}'{shape_info} are anchored "
            f"({adjustment.start_type}/{adjustment.end_type}); extending from midpoint"
        )
        logger.warning(msg)
        if issues is not None:
            issues.append(Issue(IssueCode.UNEXPECTED_DOUBLE_ANCHOR, msg, segment_id=segment.id))

    segment.set_endpoints(adjustment.new_start, adjustment.new_end)
    return adjustment
