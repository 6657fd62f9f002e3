"""
Progress bar pinned to the terminal's last row.

The scroll region is shrunk by one line so regular log output keeps
scrolling above the bar.
"""

import shutil
import sys

BAR_CHAR = "█"
EMPTY_CHAR = " "

SAVE_CURSOR = "\x1b7"
RESTORE_CURSOR = "\x1b8"
CLEAR_LINE = "\x1b[0K"
CURSOR_UP = "\x1b[1A"


def _move_to(row: int) -> str:
    return f"\x1b[{row};0H"


def _scroll_region(top: int, bottom: int) -> str:
    return f"\x1b[{top};{bottom}r"


def render_bar(current: int, total: int, columns: int) -> str:
    if total == 0:
        total = 1
    percent = current * 100 // total
    suffix = f" {current}/{total} ({percent}%)"
    length = max(columns - len(suffix) - 2, 0)
    filled = percent * length // 100
    return "[" + BAR_CHAR * filled + EMPTY_CHAR * (length - filled) + "]" + suffix


class ProgressReporter:
    def __init__(self, stream=None, enabled: bool | None = None):
        self.stream = stream or sys.stdout
        if enabled is None:
            enabled = self.stream.isatty()
        self.enabled = enabled
        self._reserved = False

    def _size(self):
        return shutil.get_terminal_size()

    def _write(self, text: str):
        self.stream.write(text)
        self.stream.flush()

    def __enter__(self):
        if self.enabled:
            lines = self._size().lines
            self._write("\n" + SAVE_CURSOR + _scroll_region(0, lines - 1)
                        + RESTORE_CURSOR + CURSOR_UP)
            self._reserved = True
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self):
        if not self._reserved:
            return
        lines = self._size().lines
        self._write(SAVE_CURSOR + _scroll_region(0, lines) + _move_to(lines)
                    + CLEAR_LINE + RESTORE_CURSOR)
        self._reserved = False

    def update(self, current: int, total: int):
        if not self.enabled:
            return
        size = self._size()
        bar = render_bar(current, total, size.columns)
        self._write(SAVE_CURSOR + _move_to(size.lines) + CLEAR_LINE + bar + RESTORE_CURSOR)
