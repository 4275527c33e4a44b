"""View state: the active tab, the scroll cursor and the pure transition function."""

from __future__ import annotations

import curses
from dataclasses import dataclass, field, replace
from enum import Enum

from systemmor.events import Event, KeyPress, Tick


class Tab(Enum):
    HOME = "home"
    CPU = "cpu"
    MEMORY = "memory"
    NETWORK = "network"
    PROCESS = "process"
    DISK = "disk"
    TEMPERATURE = "temperature"
    BATTERY = "battery"
    QUIT = "quit"


@dataclass(frozen=True, slots=True)
class TabDescriptor:
    tab: Tab
    title: str
    hotkey: str


# Display order of the tab bar. Every Tab appears exactly once.
TABS: tuple[TabDescriptor, ...] = (
    TabDescriptor(Tab.HOME, "Home", "h"),
    TabDescriptor(Tab.CPU, "CPU", "c"),
    TabDescriptor(Tab.MEMORY, "Memory", "m"),
    TabDescriptor(Tab.NETWORK, "Network", "n"),
    TabDescriptor(Tab.PROCESS, "Process", "p"),
    TabDescriptor(Tab.DISK, "Disk", "d"),
    TabDescriptor(Tab.TEMPERATURE, "Temperature", "t"),
    TabDescriptor(Tab.BATTERY, "Battery", "b"),
    TabDescriptor(Tab.QUIT, "Quit", "q"),
)

QUIT_KEY = ord("q")

_SELECT_KEYS: dict[int, Tab] = {
    ord(d.hotkey): d.tab for d in TABS if d.tab is not Tab.QUIT
}


def tab_index(tab: Tab) -> int:
    """Position of *tab* in the tab bar."""
    for i, descriptor in enumerate(TABS):
        if descriptor.tab is tab:
            return i
    raise ValueError(f"unknown tab: {tab!r}")


@dataclass(slots=True)
class ScrollCursor:
    """Scroll position plus the length of whatever is currently scrollable.

    ``offset`` is only guaranteed to be inside ``[0, content_length)`` right
    after :meth:`clamp`; key presses move it freely and the next render
    pulls it back into range.
    """

    offset: int = 0
    content_length: int = 0

    def clamp(self, content_length: int) -> int:
        self.content_length = max(0, content_length)
        if self.content_length == 0:
            self.offset = 0
        else:
            self.offset = max(0, min(self.offset, self.content_length - 1))
        return self.offset


@dataclass(slots=True)
class ViewState:
    tab: Tab = Tab.HOME
    cursor: ScrollCursor = field(default_factory=ScrollCursor)
    running: bool = True


def apply(event: Event, state: ViewState) -> ViewState:
    """Return the state that follows *event*. Never raises, never mutates *state*.

    Switching tabs keeps the scroll offset; the next render clamps it to
    the new tab's content.
    """
    if isinstance(event, Tick):
        return state
    if not isinstance(event, KeyPress):
        return state

    code = event.code
    if code == QUIT_KEY:
        return replace(state, running=False)
    if code in _SELECT_KEYS:
        return replace(state, tab=_SELECT_KEYS[code])
    if code == curses.KEY_DOWN:
        cursor = replace(state.cursor, offset=state.cursor.offset + 1)
        return replace(state, cursor=cursor)
    if code == curses.KEY_UP:
        cursor = replace(state.cursor, offset=max(0, state.cursor.offset - 1))
        return replace(state, cursor=cursor)
    return state
