"""
Shape graph building and connectivity checks.

Segments are linked by matching endpoints (A.end ~ B.start), and closed shapes
are extracted by walking the end-adjacency links in input order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from thicknessadjuster.config import EPSILON
from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.errors import Issue, IssueCode
from thicknessadjuster.model.geometry_primitives import Endpoint, Segment, Shape
from thicknessadjuster.model.geometry_utils import calculate_winding_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenJoint:
    """An adjacency link whose two endpoints are no longer coincident."""
    segment_id: str
    neighbor_id: str
    endpoint: Endpoint
    gap: float


def build_adjacency(segments: Sequence[Segment], epsilon: float = EPSILON) -> None:
    """
    Link every segment to its neighbours by endpoint matching.

    For each ordered pair of distinct segments (A, B): A.end ~ B.start sets
    A.adjacent.end = B.id and A.start ~ B.end sets A.adjacent.start = B.id.
    When several segments match, the last one in input order wins. Any
    previous adjacency is discarded first.
    """
    for segment in segments:
        segment.adjacent.clear()

    n = len(segments)
    if n < 2:
        return

    starts = np.array([[s.start_point.x, s.start_point.y] for s in segments], dtype=np.float64)
    ends = np.array([[s.end_point.x, s.end_point.y] for s in segments], dtype=np.float64)

    # One row at a time keeps memory linear in the segment count
    for i, segment in enumerate(segments):
        end_matches = np.all(np.abs(starts - ends[i]) < epsilon, axis=1)
        end_matches[i] = False
        idx = np.flatnonzero(end_matches)
        if idx.size:
            segment.adjacent.end = segments[idx[-1]].id

        start_matches = np.all(np.abs(ends - starts[i]) < epsilon, axis=1)
        start_matches[i] = False
        idx = np.flatnonzero(start_matches)
        if idx.size:
            segment.adjacent.start = segments[idx[-1]].id


def extract_shapes(arena: SegmentArena, issues: Optional[List[Issue]] = None) -> List[Shape]:
    """
    Extract closed shapes by following end-adjacency.

    Each unvisited segment (in input order) starts a walk that marks segments
    visited until it returns to a segment of the same walk or runs out of
    links. A walk that closes becomes a Shape made of its cycle part (a leading
    tail that merely leads into the cycle is dropped). Open chains and cycles
    of two or fewer segments are discarded silently.

    Args:
        arena: All pipeline segments, with adjacency already built.
        issues: Optional list that receives MalformedAdjacency issues.

    Returns:
        Shapes in discovery order, ids "shape_0", "shape_1", ...
    """
    visited: set[str] = set()
    shapes: List[Shape] = []
    max_steps = 2 * len(arena)

    for start in arena:
        if start.id in visited:
            continue

        walk: List[Segment] = []
        position: dict[str, int] = {}
        closed_at: Optional[int] = None
        current: Optional[Segment] = start
        steps = 0

        while current is not None:
            if steps >= max_steps:
                msg = f"Walk from '{start.id}' exceeded {max_steps} steps without closing."
                logger.warning(msg)
                if issues is not None:
                    issues.append(Issue(IssueCode.MALFORMED_ADJACENCY, msg, segment_id=start.id))
                break
            if current.id in position:
                closed_at = position[current.id]
                break
            if current.id in visited:
                # Ran into a chain collected by an earlier walk
                break

            visited.add(current.id)
            position[current.id] = len(walk)
            walk.append(current)

            current = arena.get(current.adjacent.end)
            steps += 1

        if closed_at is None:
            if len(walk) > 1:
                logger.debug(f"Open chain of {len(walk)} segments starting at '{start.id}'")
            continue

        lines = walk[closed_at:]
        if len(lines) <= 2:
            continue

        shape = Shape(
            id=f"shape_{len(shapes)}",
            lines=lines,
            winding_order=calculate_winding_order(lines),
        )
        shapes.append(shape)
        logger.debug(f"Found shape {shape.id} with {len(lines)} lines, winding: {shape.winding_order}")

    return shapes


def build_shape_graph(
    arena: SegmentArena,
    epsilon: float = EPSILON,
    issues: Optional[List[Issue]] = None,
) -> List[Shape]:
    """Build adjacency over the arena and extract its closed shapes."""
    build_adjacency(arena.segments, epsilon=epsilon)
    shapes = extract_shapes(arena, issues=issues)
    logger.info(f"Built {len(shapes)} closed shapes from {len(arena)} segments")
    return shapes


def find_open_joints(arena: SegmentArena, epsilon: float = EPSILON) -> List[OpenJoint]:
    """
    Return every adjacency link whose shared endpoints are further apart than `epsilon`.

    A link A.adjacent.end = B pairs A.end with B.start; A.adjacent.start = B
    pairs A.start with B.end.
    """
    joints: List[OpenJoint] = []
    for segment in arena:
        for which in Endpoint:
            neighbor = arena.get(segment.adjacent.get(which))
            if neighbor is None:
                continue
            ours = segment.endpoint(which)
            theirs = neighbor.start_point if which is Endpoint.END else neighbor.end_point
            if not ours.is_close(theirs, epsilon):
                joints.append(OpenJoint(segment.id, neighbor.id, which, ours.distance_to(theirs)))
    return joints
