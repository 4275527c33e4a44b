"""Curses widgets for the dashboard: boxes, scrolling text, charts and the tab bar.

Every widget draws into a ``Rect`` of the main screen. Text that does not
fit is clipped; only whole-frame terminal failures are errors, and those
are raised by the terminal session, not here.
"""

from __future__ import annotations

import curses
from collections.abc import Sequence
from typing import Any, Protocol

from systemmor.layout import Rect

# ── Constants ──────────────────────────────────────────────────────────────

SPARK = " ▁▂▃▄▅▆▇█"
BAR_FILL = "█"
BAR_EMPTY = "░"
SCROLL_THUMB = "█"
TAB_DIVIDER = "|"
BAR_WIDTH = 3
BAR_GAP = 1

# Curses colour-pair IDs
C_NORMAL = 1
C_HIGHLIGHT = 2
C_ACCENT = 3
C_TITLE = 4
C_DIM = 5
C_BLUE = 6


def init_colors() -> None:
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(C_NORMAL, curses.COLOR_WHITE, -1)
    curses.init_pair(C_HIGHLIGHT, curses.COLOR_YELLOW, -1)
    curses.init_pair(C_ACCENT, curses.COLOR_MAGENTA, -1)
    curses.init_pair(C_TITLE, curses.COLOR_CYAN, -1)
    curses.init_pair(C_DIM, curses.COLOR_WHITE, -1)
    curses.init_pair(C_BLUE, curses.COLOR_BLUE, -1)


class Renderer(Protocol):
    def screen(self) -> Rect: ...

    def draw_block(self, region: Rect, title: str) -> None: ...

    def draw_text(
        self, region: Rect, title: str, lines: Sequence[str], center: bool = False
    ) -> None: ...

    def draw_scroll_text(
        self,
        region: Rect,
        title: str,
        lines: Sequence[str],
        offset: int,
        content_length: int,
    ) -> None: ...

    def draw_bar_chart(
        self, region: Rect, title: str, bars: Sequence[tuple[str, float]]
    ) -> None: ...

    def draw_gauge(self, region: Rect, title: str, ratio: float) -> None: ...

    def draw_sparkline(
        self, region: Rect, title: str, values: Sequence[float], max_val: float = 100.0
    ) -> None: ...

    def draw_tabs(self, region: Rect, titles: Sequence[str], selected: int) -> None: ...


# ── Pure geometry helpers ──────────────────────────────────────────────────


def scrollbar_thumb(offset: int, content_length: int, track: int) -> int | None:
    """Row of the scrollbar thumb within a track of *track* cells."""
    if content_length <= 0 or track <= 0:
        return None
    if content_length == 1 or track == 1:
        return 0
    offset = max(0, min(offset, content_length - 1))
    return round(offset * (track - 1) / (content_length - 1))


def bar_heights(values: Sequence[float], height: int) -> list[int]:
    """Scale *values* so the largest fills *height* cells."""
    if height <= 0:
        return [0 for _ in values]
    peak = max(values, default=0.0)
    if peak <= 0:
        return [0 for _ in values]
    return [int(round(max(0.0, v) / peak * height)) for v in values]


def gauge_fill(ratio: float, width: int) -> int:
    ratio = max(0.0, min(ratio, 1.0))
    return int(width * ratio)


def compact_value(value: float, width: int = BAR_WIDTH) -> str:
    """Whole *value* in at most *width* columns, scaled with K/M/G/T.

    A value below one unit of the scale it needs shows as tenths,
    e.g. 150000 in three columns is ``.1M``.
    """
    v = float(value)
    text = str(int(v))
    for suffix in "KMGT":
        if len(text) <= width:
            break
        v /= 1000
        text = f"{int(v)}{suffix}" if v >= 1 else f".{int(v * 10)}{suffix}"
    return text


def sparkline(values: Sequence[float], width: int, max_val: float = 100.0) -> str:
    """The most recent *width* values as block characters."""
    if width < 1 or not values or max_val <= 0:
        return ""
    chars: list[str] = []
    for v in list(values)[-width:]:
        idx = int(min(max(v, 0.0) / max_val, 1.0) * (len(SPARK) - 1))
        chars.append(SPARK[idx])
    return "".join(chars)


# ── Curses implementation ──────────────────────────────────────────────────


class CursesRenderer:
    """Draws widgets onto a curses screen."""

    def __init__(self, stdscr: curses.window) -> None:
        self.stdscr = stdscr

    def screen(self) -> Rect:
        max_y, max_x = self.stdscr.getmaxyx()
        return Rect(0, 0, max_y, max_x)

    # ── primitives ────────────────────────────────────────────────────────

    def _safe(self, win: curses.window, *args: Any) -> None:
        """addstr wrapper that swallows out-of-bounds errors."""
        try:
            win.addstr(*args)
        except curses.error:
            pass

    def _box(self, region: Rect, title: str = "") -> curses.window | None:
        """Draw a bordered box and return it as a sub-window."""
        max_y, max_x = self.stdscr.getmaxyx()
        h = min(region.h, max_y - region.y)
        w = min(region.w, max_x - region.x)
        if h < 3 or w < 4:
            return None
        try:
            sub = self.stdscr.subwin(h, w, region.y, region.x)
            sub.box()
            if title and len(title) + 4 < w:
                sub.addstr(0, 2, f" {title} ", curses.color_pair(C_TITLE) | curses.A_BOLD)
            return sub
        except curses.error:
            return None

    # ── widgets ───────────────────────────────────────────────────────────

    def draw_block(self, region: Rect, title: str) -> None:
        self._box(region, title)

    def draw_text(
        self, region: Rect, title: str, lines: Sequence[str], center: bool = False
    ) -> None:
        box = self._box(region, title)
        if not box:
            return
        h, w = box.getmaxyx()
        inner_w = w - 2
        for row, line in enumerate(lines[: h - 2], start=1):
            text = line[:inner_w]
            col = 1 + (inner_w - len(text)) // 2 if center else 1
            self._safe(box, row, col, text, curses.color_pair(C_NORMAL))

    def draw_scroll_text(
        self,
        region: Rect,
        title: str,
        lines: Sequence[str],
        offset: int,
        content_length: int,
    ) -> None:
        box = self._box(region, title)
        if not box:
            return
        h, w = box.getmaxyx()
        visible = lines[offset : offset + h - 2]
        for row, line in enumerate(visible, start=1):
            self._safe(box, row, 1, line[: w - 3], curses.color_pair(C_NORMAL))

        # Scrollbar thumb on the right border
        thumb = scrollbar_thumb(offset, content_length, h - 2)
        if thumb is not None:
            self._safe(box, 1 + thumb, w - 1, SCROLL_THUMB, curses.color_pair(C_HIGHLIGHT))

    def draw_bar_chart(
        self, region: Rect, title: str, bars: Sequence[tuple[str, float]]
    ) -> None:
        box = self._box(region, title)
        if not box:
            return
        h, w = box.getmaxyx()
        # Bottom inner row holds labels, the row above it holds values
        chart_h = h - 4
        if chart_h < 1:
            return
        fit = max(0, (w - 2 + BAR_GAP) // (BAR_WIDTH + BAR_GAP))
        shown = list(bars)[:fit]
        heights = bar_heights([v for _, v in shown], chart_h)
        label_row = h - 2
        value_row = h - 3
        for i, ((label, value), height) in enumerate(zip(shown, heights)):
            col = 1 + i * (BAR_WIDTH + BAR_GAP)
            for level in range(height):
                self._safe(
                    box,
                    value_row - 1 - level,
                    col,
                    BAR_FILL * BAR_WIDTH,
                    curses.color_pair(C_BLUE) | curses.A_BOLD,
                )
            self._safe(
                box,
                value_row,
                col,
                f"{compact_value(value):>{BAR_WIDTH}}",
                curses.color_pair(C_NORMAL) | curses.A_BOLD,
            )
            self._safe(box, label_row, col, label[:BAR_WIDTH], curses.color_pair(C_DIM))

    def draw_gauge(self, region: Rect, title: str, ratio: float) -> None:
        box = self._box(region, title)
        if not box:
            return
        h, w = box.getmaxyx()
        bar_w = w - 2
        if bar_w < 3:
            return
        filled = gauge_fill(ratio, bar_w)
        row = max(1, (h - 1) // 2)
        self._safe(box, row, 1, BAR_FILL * filled, curses.color_pair(C_ACCENT) | curses.A_BOLD)
        self._safe(box, BAR_EMPTY * (bar_w - filled), curses.color_pair(C_DIM))
        label = f"{max(0.0, min(ratio, 1.0)) * 100:.0f}%"
        self._safe(box, row, 1 + (bar_w - len(label)) // 2, label, curses.A_BOLD)

    def draw_sparkline(
        self, region: Rect, title: str, values: Sequence[float], max_val: float = 100.0
    ) -> None:
        box = self._box(region, title)
        if not box:
            return
        h, w = box.getmaxyx()
        line = sparkline(values, w - 2, max_val)
        if line:
            self._safe(box, h - 2, 1, line, curses.color_pair(C_BLUE))

    def draw_tabs(self, region: Rect, titles: Sequence[str], selected: int) -> None:
        box = self._box(region, "Menu")
        if not box:
            return
        col = 1
        for i, title in enumerate(titles):
            if i:
                self._safe(box, 1, col, f" {TAB_DIVIDER} ", curses.color_pair(C_DIM))
                col += 3
            base = curses.color_pair(C_HIGHLIGHT if i == selected else C_NORMAL)
            if i == selected:
                base |= curses.A_REVERSE
            # Hotkey letter underlined
            self._safe(
                box, 1, col, title[:1], curses.color_pair(C_HIGHLIGHT) | curses.A_UNDERLINE
            )
            self._safe(box, 1, col + 1, title[1:], base)
            col += len(title)
