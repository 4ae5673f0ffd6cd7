from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

import math
import numpy as np

from thicknessadjuster.config import EPSILON, MIN_CHORD_LENGTH, STRAIGHTNESS_TOLERANCE
from thicknessadjuster.model.errors import ZeroLengthSegmentError
from thicknessadjuster.model.geometry_primitives import Point, Segment, Vector, WindingOrder

if TYPE_CHECKING:
    from numpy import typing as npt


def points_equal(p1: Point, p2: Point, epsilon: float = EPSILON) -> bool:
    """Return True if both coordinates differ by less than `epsilon`."""
    return p1.is_close(p2, epsilon=epsilon)

def normalize(vector: Vector) -> Vector:
    """Unit vector in the direction of `vector`; raises ZeroLengthSegmentError for a zero vector."""
    return vector.normalize()

def signed_area(lines: Sequence[Segment]) -> float:
    """
    Shoelace sum over a segment cycle.

    Uses the edge form sum((x2 - x1) * (y2 + y1)). With the SVG convention
    (Y axis pointing down) a positive value is a clockwise cycle on screen.

    Args:
        lines: Segments of the cycle in traversal order.

    Returns:
        The signed sum (twice the signed area).
    """
    if not lines:
        return 0.0
    starts = np.array([[line.start_point.x, line.start_point.y] for line in lines], dtype=np.float64)
    ends = np.array([[line.end_point.x, line.end_point.y] for line in lines], dtype=np.float64)
    return float(np.sum((ends[:, 0] - starts[:, 0]) * (ends[:, 1] + starts[:, 1])))

def calculate_winding_order(lines: Sequence[Segment]) -> WindingOrder:
    """Positive signed area is clockwise, anything else counter-clockwise."""
    return WindingOrder.CW if signed_area(lines) > 0 else WindingOrder.CCW

# ------------------------------------------------------------------------------
# Bezier curves
# ------------------------------------------------------------------------------
def cubic_bezier(t: float, p0: Point, p1: Point, p2: Point, p3: Point) -> Point:
    u = 1.0 - t
    uu = u * u
    tt = t * t
    return Point(
        uu * u * p0.x + 3 * uu * t * p1.x + 3 * u * tt * p2.x + tt * t * p3.x,
        uu * u * p0.y + 3 * uu * t * p1.y + 3 * u * tt * p2.y + tt * t * p3.y,
    )

def quadratic_bezier(t: float, p0: Point, p1: Point, p2: Point) -> Point:
    u = 1.0 - t
    return Point(
        u * u * p0.x + 2 * u * t * p1.x + t * t * p2.x,
        u * u * p0.y + 2 * u * t * p1.y + t * t * p2.y,
    )

def _parameter_steps(n_segments: int) -> npt.NDArray[np.float64]:
    if n_segments < 1:
        raise ValueError(f"Number of segments must be at least 1, got {n_segments}.")
    return np.arange(1, n_segments + 1, dtype=np.float64) / n_segments

def sample_cubic(p0: Point, p1: Point, p2: Point, p3: Point, n_segments: int) -> list[Point]:
    """
    Evaluate a cubic Bezier at t = i/N for i = 1..N.

    The start point is not included, so consecutive samples form the end
    points of N straight sub-segments. The last sample is exactly `p3`.
    """
    t = _parameter_steps(n_segments)[:, None]
    u = 1.0 - t
    pts = (
        u ** 3 * p0.to_array()
        + 3 * u ** 2 * t * p1.to_array()
        + 3 * u * t ** 2 * p2.to_array()
        + t ** 3 * p3.to_array()
    )
    samples = [Point.from_array(row) for row in pts[:-1]]
    samples.append(p3)
    return samples

def sample_quadratic(p0: Point, p1: Point, p2: Point, n_segments: int) -> list[Point]:
    """Evaluate a quadratic Bezier at t = i/N for i = 1..N."""
    t = _parameter_steps(n_segments)[:, None]
    u = 1.0 - t
    pts = u ** 2 * p0.to_array() + 2 * u * t * p1.to_array() + t ** 2 * p2.to_array()
    samples = [Point.from_array(row) for row in pts[:-1]]
    samples.append(p2)
    return samples

def reflect_point(point: Point, about: Point) -> Point:
    """Mirror `point` through `about` (smooth curve control points)."""
    return Point(2 * about.x - point.x, 2 * about.y - point.y)

# ------------------------------------------------------------------------------
# Distances & projections
# ------------------------------------------------------------------------------
def perpendicular_distance(point: Point, line_start: Point, line_end: Point) -> float:
    """
    Distance from `point` to the infinite line through `line_start` and `line_end`.

    Notes:
        - Line equation: (y2-y1)x - (x2-x1)y + x2*y1 - y2*x1 = 0
    """
    a = line_end.y - line_start.y
    b = -(line_end.x - line_start.x)
    c = line_end.x * line_start.y - line_end.y * line_start.x
    norm = math.hypot(a, b)
    if norm == 0.0:
        return point.distance_to(line_start)
    return abs(a * point.x + b * point.y + c) / norm

def is_curve_straight(
    start: Point,
    control_points: Sequence[Point],
    end: Point,
    tolerance: float = STRAIGHTNESS_TOLERANCE,
) -> bool:
    """
    Check whether a curve is effectively straight.

    A curve is straight when every control point lies within `tolerance` of the
    infinite line through its start and end points. Chords shorter than
    MIN_CHORD_LENGTH are always considered straight.
    """
    if start.distance_to(end) < MIN_CHORD_LENGTH:
        return True
    return all(perpendicular_distance(cp, start, end) <= tolerance for cp in control_points)

def project_point_onto_segment(point: Point, start: Point, end: Point) -> Point:
    """
    Orthogonal projection of `point` onto the segment [start, end].

    The line parameter is clamped to [0, 1] so the result never leaves the
    segment's own extent.
    """
    d = end - start
    length_sq = d.dot(d)
    if length_sq == 0.0:
        raise ZeroLengthSegmentError("Cannot project onto a zero-length segment.")
    t = (point - start).dot(d) / length_sq
    t = max(0.0, min(1.0, t))
    return start + d * t

# ------------------------------------------------------------------------------
# Elliptical arcs
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ArcParameters:
    """Centre parameterisation of an SVG elliptical arc."""
    center: Point
    rx: float
    ry: float
    phi: float  # x-axis rotation in radians
    theta_start: float
    delta_theta: float

    def point_at(self, theta: float) -> Point:
        cos_phi = math.cos(self.phi)
        sin_phi = math.sin(self.phi)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        return Point(
            self.center.x + self.rx * cos_phi * cos_t - self.ry * sin_phi * sin_t,
            self.center.y + self.rx * sin_phi * cos_t + self.ry * cos_phi * sin_t,
        )

def arc_center_parameters(
    start: Point,
    rx: float,
    ry: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
) -> Optional[ArcParameters]:
    """
    Convert an endpoint-parameterised arc to its centre form.

    Returns None when the arc degenerates to a straight line (zero radius or
    coincident endpoints). Radii that are too small to span the endpoints are
    scaled up, as SVG renderers do.
    """
    rx = abs(rx)
    ry = abs(ry)
    if rx == 0.0 or ry == 0.0 or start.distance_to(end) == 0.0:
        return None

    phi = math.radians(rotation_deg % 360.0)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    dx = (start.x - end.x) / 2.0
    dy = (start.y - end.y) / 2.0
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    lam = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    sign = -1.0 if large_arc == sweep else 1.0
    numerator = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    denom = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = sign * math.sqrt(max(0.0, numerator / denom))
    cxp = coef * (rx * y1p) / ry
    cyp = coef * -(ry * x1p) / rx

    center = Point(
        cos_phi * cxp - sin_phi * cyp + (start.x + end.x) / 2.0,
        sin_phi * cxp + cos_phi * cyp + (start.y + end.y) / 2.0,
    )

    def angle(u: Vector, v: Vector) -> float:
        return math.atan2(u.cross(v), u.dot(v))

    v1 = Vector((x1p - cxp) / rx, (y1p - cyp) / ry)
    v2 = Vector((-x1p - cxp) / rx, (-y1p - cyp) / ry)

    theta_start = angle(Vector(1.0, 0.0), v1)
    delta_theta = angle(v1, v2)
    if not sweep and delta_theta > 0:
        delta_theta -= 2 * math.pi
    elif sweep and delta_theta < 0:
        delta_theta += 2 * math.pi

    return ArcParameters(center, rx, ry, phi, theta_start, delta_theta)

def sample_arc(
    start: Point,
    rx: float,
    ry: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
    n_segments: int,
) -> list[Point]:
    """Evaluate an SVG arc at t = i/N for i = 1..N; a degenerate arc follows its chord."""
    steps = _parameter_steps(n_segments)
    params = arc_center_parameters(start, rx, ry, rotation_deg, large_arc, sweep, end)
    if params is None:
        chord = end - start
        samples = [start + chord * float(t) for t in steps[:-1]]
    else:
        samples = [params.point_at(params.theta_start + params.delta_theta * float(t)) for t in steps[:-1]]
    samples.append(end)
    return samples
