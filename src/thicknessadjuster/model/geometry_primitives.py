"""
Geometric Primitives for the flattened drawing.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional, Tuple, TYPE_CHECKING
import numpy as np
import math

from thicknessadjuster.config import EPSILON
from thicknessadjuster.model.errors import PathDataError, ZeroLengthSegmentError

if TYPE_CHECKING:
    import numpy.typing as npt


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class WindingOrder(StrEnum):
    CW = "cw"
    CCW = "ccw"

class Endpoint(StrEnum):
    START = "start"
    END = "end"

class LineType(StrEnum):
    """Role of a segment relative to its adjustable neighbours."""
    TAB_CONNECTOR = "tab-connector"
    SLOT_EDGE = "slot-edge"
    PERIMETER = "perimeter"
    # Neighbour kinds that are never the result of classification
    ADJUSTABLE = "adjustable"
    NONE = "none"

    @property
    def is_anchor(self) -> bool:
        """Slot edges and perimeter edges hold their shared endpoint in place."""
        return self in (LineType.SLOT_EDGE, LineType.PERIMETER)

class CommandKind(StrEnum):
    """Path command vocabulary, keyed by the absolute SVG letter."""
    MOVE = "M"
    LINE = "L"
    HORIZONTAL = "H"
    VERTICAL = "V"
    CUBIC = "C"
    QUADRATIC = "Q"
    SMOOTH_CUBIC = "S"
    SMOOTH_QUADRATIC = "T"
    ARC = "A"
    CLOSE = "Z"

# Number of numeric operands consumed by one command
COMMAND_ARITY: dict[CommandKind, int] = {
    CommandKind.MOVE: 2,
    CommandKind.LINE: 2,
    CommandKind.HORIZONTAL: 1,
    CommandKind.VERTICAL: 1,
    CommandKind.CUBIC: 6,
    CommandKind.QUADRATIC: 4,
    CommandKind.SMOOTH_CUBIC: 4,
    CommandKind.SMOOTH_QUADRATIC: 2,
    CommandKind.ARC: 7,
    CommandKind.CLOSE: 0,
}


# ------------------------------------------------------------------------------
# Vector / Point
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Vector:
    """
    A vector in the drawing plane representing direction and magnitude.
    """
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0:
            raise ZeroLengthSegmentError("Cannot normalize a zero-length vector.")
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector) -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])


@dataclass(frozen=True, eq=False)
class Point:
    """
    A point in drawing units.

    Equality is tolerance based (|dx| < EPSILON and |dy| < EPSILON), which makes
    points unhashable.
    """
    x: float
    y: float

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.is_close(other)

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Vector | Point) -> Vector | Point:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        # Point - Vector = Point (Inverse translation)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y)
        raise TypeError("Can only subtract a Vector or Point from a Point.")

    def is_close(self, other: Point, epsilon: float = EPSILON) -> bool:
        return abs(self.x - other.x) < epsilon and abs(self.y - other.y) < epsilon

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: Point) -> Point:
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])

    @classmethod
    def from_array(cls, arr: npt.ArrayLike) -> Point:
        return cls(float(arr[0]), float(arr[1]))


# ------------------------------------------------------------------------------
# Path commands
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class PathCommand:
    """One path command: kind, absolute/relative flag and numeric operands."""
    kind: CommandKind
    relative: bool = False
    args: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        expected = COMMAND_ARITY[self.kind]
        if len(self.args) != expected:
            raise PathDataError(
                f"Command '{self.letter}' expects {expected} operands, got {len(self.args)}."
            )

    @classmethod
    def from_letter(cls, letter: str, args: Tuple[float, ...] = ()) -> PathCommand:
        try:
            kind = CommandKind(letter.upper())
        except ValueError:
            raise PathDataError(f"Unknown path command '{letter}'.") from None
        return cls(kind=kind, relative=letter.islower(), args=tuple(float(a) for a in args))

    @property
    def letter(self) -> str:
        return self.kind.value.lower() if self.relative else self.kind.value


# ------------------------------------------------------------------------------
# Segments & Shapes
# ------------------------------------------------------------------------------
@dataclass
class Adjacency:
    """Ids of the neighbouring segments at each endpoint."""
    start: Optional[str] = None
    end: Optional[str] = None

    def get(self, which: Endpoint) -> Optional[str]:
        return self.start if which is Endpoint.START else self.end

    def set(self, which: Endpoint, segment_id: Optional[str]) -> None:
        if which is Endpoint.START:
            self.start = segment_id
        else:
            self.end = segment_id

    def clear(self) -> None:
        self.start = None
        self.end = None

    def ids(self) -> List[str]:
        return [i for i in (self.start, self.end) if i is not None]


@dataclass(eq=False)
class Segment:
    """
    A straight edge of the flattened geometry.

    ``length`` and ``angle`` are derived from the endpoints on every access, so
    they can never go stale after an endpoint moves. Curve references
    (``is_curve``) keep only the endpoints of an unflattened curve; they take
    part in connectivity but are never adjusted or moved.
    """
    id: str
    start_point: Point
    end_point: Point
    is_adjustable: bool = False
    multiplier: int = 1
    adjacent: Adjacency = field(default_factory=Adjacency)
    is_curve: bool = False
    path_id: Optional[str] = None
    command_index: Optional[int] = None
    source_command: Optional[PathCommand] = None  # absolute form, curve references only

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id={self.id}, "
            f"start=({self.start_point.x:.3f}, {self.start_point.y:.3f}), "
            f"end=({self.end_point.x:.3f}, {self.end_point.y:.3f}))"
        )

    @property
    def vector(self) -> Vector:
        return self.end_point - self.start_point

    @property
    def length(self) -> float:
        return self.start_point.distance_to(self.end_point)

    @property
    def angle(self) -> float:
        """Angle in radians, atan2(dy, dx)."""
        v = self.vector
        return math.atan2(v.y, v.x)

    @property
    def midpoint(self) -> Point:
        return self.start_point.midpoint(self.end_point)

    @property
    def is_degenerate(self) -> bool:
        return self.start_point == self.end_point

    def direction(self) -> Vector:
        """Unit vector from start to end."""
        try:
            return self.vector.normalize()
        except ZeroLengthSegmentError:
            raise ZeroLengthSegmentError(f"Segment '{self.id}' has zero length.") from None

    def endpoint(self, which: Endpoint) -> Point:
        return self.start_point if which is Endpoint.START else self.end_point

    def set_endpoints(self, start: Point, end: Point) -> None:
        self.start_point = start
        self.end_point = end

    def translate(self, delta: Vector) -> None:
        """Rigidly move both endpoints; length and angle are unchanged."""
        self.start_point = self.start_point + delta
        self.end_point = self.end_point + delta

    # --- adjustable toggle ---
    def set_adjustable(self, multiplier: int = 1) -> None:
        if self.is_curve:
            raise ValueError(f"Curve reference '{self.id}' cannot be adjustable.")
        if multiplier not in (1, 2):
            raise ValueError(f"Multiplier must be 1 or 2, got {multiplier}.")
        self.is_adjustable = True
        self.multiplier = multiplier

    def clear_adjustable(self) -> None:
        self.is_adjustable = False
        self.multiplier = 1

    def cycle_adjustable(self) -> None:
        """Cycle normal -> 1x -> 2x -> normal."""
        if not self.is_adjustable:
            self.set_adjustable(1)
        elif self.multiplier == 1:
            self.set_adjustable(2)
        else:
            self.clear_adjustable()


@dataclass
class Shape:
    """
    A closed cycle of segments, in traversal order along end-adjacency.
    """
    id: str
    lines: List[Segment] = field(default_factory=list)
    winding_order: WindingOrder = WindingOrder.CCW

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def segment_ids(self) -> List[str]:
        return [line.id for line in self.lines]

    @property
    def perimeter(self) -> float:
        return sum(line.length for line in self.lines)

    @property
    def is_closed(self) -> bool:
        """True while the last line's end-adjacency resolves to the first line."""
        if len(self.lines) <= 2:
            return False
        return self.lines[-1].adjacent.end == self.lines[0].id
