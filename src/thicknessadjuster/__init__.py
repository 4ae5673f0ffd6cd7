"""
Material thickness adjustment for laser-cut box and tab drawings.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("thicknessadjuster")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
