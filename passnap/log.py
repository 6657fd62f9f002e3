import logging
import sys

TAGS = {
    logging.DEBUG: "DEBU",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}

# Catppuccin Mocha
COLORS = {
    "DEBU": "\x1b[38;2;180;190;254m",
    "INFO": "\x1b[38;2;137;180;250m",
    "WARN": "\x1b[38;2;249;226;175m",
    "ERRO": "\x1b[38;2;243;139;168m",
}
RESET = "\x1b[0m"


class TagFormatter(logging.Formatter):
    """INFO[2025-11-26 10:00:00] message"""

    def __init__(self, color: bool = False):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag = TAGS.get(record.levelno, "LOGS")
        if self.color:
            tag = f"{COLORS.get(tag, '')}{tag}{RESET}"
        text = f"{tag}[{self.formatTime(record, self.datefmt)}] {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def setup_logging(debug: bool = False, stream=None):
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(TagFormatter(color=stream.isatty()))
    root = logging.getLogger("passnap")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return root
