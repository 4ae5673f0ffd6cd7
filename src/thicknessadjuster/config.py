"""
Configuration & Global Constants
================================
This module serves as the central registry for tolerances and default
parameters shared by every pipeline stage.

Why is this file needed?
------------------------
1. Consistency: the same point-matching tolerance must be used by the
   flattener, the shape graph and the propagator, otherwise shapes that close
   in one stage would appear open in the next.
2. Parameter files: it loads the material thickness / DPI pair from a JSON file
   so a batch can be re-run with the same settings.

Exports:
    EPSILON (float): Point equality tolerance in drawing units.
    STRAIGHTNESS_TOLERANCE (float): Max control point distance for a "straight" curve.
    CURVE_SEGMENTS (int): Number of sub-segments used when subdividing a curve.
    LENGTH_TOLERANCE (float): Below this length difference a segment is left alone.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from thicknessadjuster.model.state import GlobalParameters

logger = logging.getLogger(__name__)

# Geometry tolerances (drawing units)
EPSILON: float = 0.001
STRAIGHTNESS_TOLERANCE: float = 0.5
MIN_CHORD_LENGTH: float = 0.1
CURVE_SEGMENTS: int = 10
LENGTH_TOLERANCE: float = 0.001

# Default physical parameters
DEFAULT_DPI: float = 96.0
DEFAULT_MATERIAL_THICKNESS_MM: float = 3.0


def load_parameters(path: Union[str, Path]) -> GlobalParameters:
    """
    Load material thickness and DPI from a JSON file.

    Args:
        path: Path to a JSON object with optional keys
            "material_thickness_mm" and "dpi".

    Returns:
        Validated GlobalParameters. Missing keys fall back to the defaults.
    """
    from thicknessadjuster.model.state import GlobalParameters

    path = Path(path)
    logger.info(f"Loading parameters from: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise TypeError(f"{path}: expected a JSON object, got {type(data).__name__}")

    return GlobalParameters(
        material_thickness_mm=float(data.get("material_thickness_mm", DEFAULT_MATERIAL_THICKNESS_MM)),
        dpi=float(data.get("dpi", DEFAULT_DPI)),
    )
