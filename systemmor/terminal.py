"""Scoped terminal mode for the dashboard.

``TerminalSession`` puts the terminal into raw curses mode with mouse
capture on entry and always puts it back on exit, whether the block ends
normally or with an exception.
"""

from __future__ import annotations

import curses
from collections.abc import Callable

from systemmor.errors import DrawError, TerminalModeError
from systemmor.logging_setup import get_logger
from systemmor.renderer import init_colors

logger = get_logger(__name__)


class TerminalSession:
    """Owns the curses screen between ``__enter__`` and ``__exit__``."""

    def __init__(self) -> None:
        self.stdscr: curses.window | None = None
        self._saved_mousemask = 0

    def __enter__(self) -> TerminalSession:
        try:
            self.stdscr = curses.initscr()
        except curses.error as e:
            raise TerminalModeError(f"cannot initialise terminal: {e}") from e
        try:
            curses.noecho()
            curses.raw()
            self.stdscr.keypad(True)
            try:
                curses.curs_set(0)
            except curses.error:
                pass  # terminal has no cursor visibility control
            if curses.has_colors():
                init_colors()
            _, self._saved_mousemask = curses.mousemask(
                curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION
            )
        except curses.error as e:
            try:
                self.restore()
            except TerminalModeError as restore_error:
                logger.error("%s", restore_error)
            raise TerminalModeError(f"cannot enter raw mode: {e}") from e
        logger.info("terminal in raw mode")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.restore()
        except TerminalModeError:
            # An exception already leaving the block takes precedence
            if exc_type is None:
                raise

    def restore(self) -> None:
        """Leave raw mode and give the terminal back to the shell.

        ``endwin`` always runs. A failure at any step is raised as
        ``TerminalModeError`` once ``endwin`` has been attempted.
        """
        if self.stdscr is None:
            return
        stdscr, self.stdscr = self.stdscr, None
        failure: curses.error | None = None
        try:
            curses.mousemask(self._saved_mousemask)
            stdscr.keypad(False)
            curses.noraw()
            curses.echo()
            try:
                curses.curs_set(1)
            except curses.error:
                pass
        except curses.error as e:
            logger.error("failed to reset terminal modes: %s", e)
            failure = e
        finally:
            try:
                curses.endwin()
            except curses.error as e:
                logger.error("endwin failed: %s", e)
                failure = failure or e
        if failure is not None:
            raise TerminalModeError(f"cannot restore terminal: {failure}") from failure
        logger.info("terminal restored")

    def draw(self, paint: Callable[[], None]) -> None:
        """Paint one frame: clear, run *paint*, push to the terminal."""
        if self.stdscr is None:
            raise DrawError("terminal session is not active")
        try:
            self.stdscr.erase()
            paint()
            self.stdscr.refresh()
        except curses.error as e:
            raise DrawError(f"cannot draw to terminal: {e}") from e
