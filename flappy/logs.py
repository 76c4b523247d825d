"""Terminal logging for the game and the trainer."""

from __future__ import annotations

import logging
import sys
from datetime import datetime


class CompactFormatter(logging.Formatter):
    """One line per record: time, level letter, short logger name, message."""

    COLORS = {
        "DEBUG": "\033[90m",     # grey
        "INFO": "\033[36m",      # cyan
        "WARNING": "\033[33m",   # yellow
        "ERROR": "\033[31m",     # red
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name.replace("flappy.", "")
        line = f"{ts} [{record.levelname[0]}] {name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        if not self.color:
            return line
        return f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"


def setup_logging(level: str = "info") -> None:
    """Configure the `flappy` logger tree to write to stderr."""
    root = logging.getLogger("flappy")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(CompactFormatter(color=sys.stderr.isatty()))
    root.addHandler(console)
    root.propagate = False
