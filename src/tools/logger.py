import logging
import sys
from typing import Optional

from configs.settings import Config

LOG_FORMAT = "%(asctime)s | %(level_style)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[38;5;72m"
AMBER = "\033[38;5;178m"
RED = "\033[38;5;124m"
CYAN = "\033[36m"

# Level -> (color, emoji)
LEVEL_STYLES = {
    logging.DEBUG: (DIM + CYAN, "🔍"),
    logging.INFO: (GREEN, "ℹ️ "),
    logging.WARNING: (AMBER, "⚠️ "),
    logging.ERROR: (RED + BOLD, "❌"),
    logging.CRITICAL: (RED + BOLD, "🔥"),
}


class ColoredFormatter(logging.Formatter):
    """
    Adds a colored level tag and emoji when stderr is a terminal.
    Falls back to a plain padded level name otherwise (CI, pipes, MCP stdio).
    """

    def __init__(self, use_color: Optional[bool] = None):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        if use_color is None:
            use_color = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color and record.levelno in LEVEL_STYLES:
            color, emoji = LEVEL_STYLES[record.levelno]
            record.level_style = f"{emoji} {color}{record.levelname:<8}{RESET}"
        else:
            record.level_style = f"{record.levelname:<10}"
        return super().format(record)


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a console logger writing to stderr.

    The level defaults to LOG_LEVEL from the environment. Handlers are only
    attached once per logger name.

    Example:
        >>> logger = setup_logger("generation-client")
        >>> logger.info("ready")
    """
    if level is None:
        level = logging.getLevelName(Config.LOG_LEVEL)
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter())
    handler.setLevel(level)

    logger.addHandler(handler)
    logger.propagate = False

    return logger
