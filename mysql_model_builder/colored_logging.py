"""
Colored console logging for the mysql-model-builder command line.

Messages logged through ``log_success``, ``log_progress`` and ``log_highlight``
start with a marker character; the formatter picks the color from that marker
so library modules can keep using plain ``logging.getLogger(__name__)``.
"""

import logging
import sys
from typing import Optional, TextIO

SUCCESS_MARKER = "✓"
PROGRESS_MARKER = "→"
HIGHLIGHT_MARKER = "•"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that wraps each record in an ANSI color.

    Warnings and errors are colored by level. INFO records are colored by
    their leading marker, and section headers (``extra={'section': True}``)
    are printed bold.
    """

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }

    MARKER_COLORS = {
        SUCCESS_MARKER: '\033[92m\033[1m',
        PROGRESS_MARKER: '\033[94m',
        HIGHLIGHT_MARKER: '\033[96m',
    }

    SECTION_COLOR = '\033[1m\033[96m'
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(fmt or "%(levelname)s: %(message)s")
        stream = stream if stream is not None else sys.stderr
        # Colors only make sense on a terminal
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def color_for(self, record: logging.LogRecord) -> Optional[str]:
        if record.levelname in self.LEVEL_COLORS:
            return self.LEVEL_COLORS[record.levelname]
        if getattr(record, 'section', False):
            return self.SECTION_COLOR
        return self.MARKER_COLORS.get(record.getMessage()[:1])

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_colors:
            return formatted
        color = self.color_for(record)
        return f"{color}{formatted}{self.RESET}" if color else formatted


def setup_colored_logging(
    level: int = logging.INFO, use_colors: bool = True, stream: Optional[TextIO] = None
) -> None:
    """
    Replace the root logger's handlers with one colored console handler.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
        stream: Where to write (default: stderr, so stdout stays free for output)
    """
    stream = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_colors=use_colors, stream=stream))
    handler.setLevel(level)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"{SUCCESS_MARKER} {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"{PROGRESS_MARKER} {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"{HIGHLIGHT_MARKER} {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header framed by separator lines."""
    separator = "=" * 60
    for line in (separator, f"  {section_name.upper()}", separator):
        logger.info(line, extra={'section': True})
