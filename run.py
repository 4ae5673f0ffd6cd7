"""
Run the adjuster from a source checkout without installing it.

    $ python run.py drawing.svg --adjust path_0_seg_3
"""
import sys
from pathlib import Path


def _bootstrap() -> None:
    src = Path(__file__).resolve().parent / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


if __name__ == "__main__":
    _bootstrap()
    from thicknessadjuster.main import main

    sys.exit(main())
