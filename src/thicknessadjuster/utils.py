from thicknessadjuster.model.errors import InvalidDPIError, NegativeLengthError

MM_PER_INCH = 25.4

def mm_to_units(mm: float, dpi: float) -> float:
    """Convert millimeters to drawing units at the given DPI."""
    if dpi <= 0:
        raise InvalidDPIError(f"DPI must be greater than 0, got {dpi}.")
    if mm < 0:
        raise NegativeLengthError(f"Length in millimeters must be non-negative, got {mm}.")
    return mm * dpi / MM_PER_INCH

def units_to_mm(units: float, dpi: float) -> float:
    """Convert drawing units back to millimeters at the given DPI."""
    if dpi <= 0:
        raise InvalidDPIError(f"DPI must be greater than 0, got {dpi}.")
    return units * MM_PER_INCH / dpi
