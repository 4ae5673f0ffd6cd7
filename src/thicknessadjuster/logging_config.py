"""
Log output for the command-line tool.

Only the package logger is configured; library users keep control of the root
logger. Console output goes to stderr so that `--list` output on stdout stays
clean for piping.
"""
import logging
import sys
from typing import List, Optional, TextIO, Union

PACKAGE_LOGGER = "thicknessadjuster"
LOG_FORMAT = "%(levelname)-7s %(name)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Accept either a numeric level or a name such as 'debug'."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _build_handlers(level: int, log_file: Optional[str], stream: Optional[TextIO]) -> List[logging.Handler]:
    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers: List[logging.Handler] = [console]

    if log_file:
        # The file receives the full run, with timestamps
        to_file = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        to_file.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(to_file)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Numeric level or level name.
        log_file: Optional path; the file is overwritten on each run.
        stream: Console stream, stderr when omitted.

    Returns:
        The configured package logger.
    """
    numeric = resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    logger.setLevel(numeric)
    for handler in _build_handlers(numeric, log_file, stream):
        logger.addHandler(handler)

    logger.debug("Logging initialized.")
    return logger
