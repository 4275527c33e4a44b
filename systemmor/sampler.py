"""Input sampler: keyboard polling and periodic ticks on one background thread.

Keys are read straight from the stdin descriptor rather than through
``getch`` so the sampler thread never touches curses state owned by the
main loop.
"""

from __future__ import annotations

import curses
import os
import select
import threading
import time
from typing import Protocol

from systemmor.errors import ChannelClosed, InputDeviceError
from systemmor.events import EventChannel, KeyPress, Tick
from systemmor.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_TICK_INTERVAL = 0.25

ESC = 0x1B
_ARROWS: dict[bytes, int] = {
    b"\x1b[A": curses.KEY_UP,
    b"\x1bOA": curses.KEY_UP,
    b"\x1b[B": curses.KEY_DOWN,
    b"\x1bOB": curses.KEY_DOWN,
}


class KeySource(Protocol):
    def poll(self, timeout: float) -> list[int]:
        """Wait up to *timeout* seconds and return the key codes read, if any."""
        ...


def decode_keys(data: bytes) -> list[int]:
    """Turn a raw terminal read into key codes.

    Arrow sequences map to ``curses.KEY_UP``/``KEY_DOWN``. Other escape
    sequences (function keys, mouse reports) are skipped and decoding
    carries on after them.
    """
    keys: list[int] = []
    i = 0
    while i < len(data):
        if data[i] != ESC:
            keys.append(data[i])
            i += 1
            continue
        if i + 1 == len(data):
            # A lone ESC press
            keys.append(ESC)
            break
        seq = data[i : i + 3]
        if seq in _ARROWS:
            keys.append(_ARROWS[seq])
            i += 3
        else:
            i = _skip_sequence(data, i)
    return keys


def _skip_sequence(data: bytes, start: int) -> int:
    """Index just past the escape sequence that begins at *start*."""
    intro = data[start + 1]
    if intro == ord("O"):
        # SS3: one final byte
        return start + 3
    if intro != ord("["):
        # ESC followed by a plain key (Alt+key)
        return start + 2
    i = start + 2
    if i < len(data) and data[i] == ord("M"):
        # X10 mouse report: button, column, row
        return i + 4
    while i < len(data) and not 0x40 <= data[i] <= 0x7E:
        i += 1
    return i + 1


class TerminalKeySource:
    """Reads key presses from a terminal file descriptor."""

    def __init__(self, fd: int) -> None:
        self.fd = fd

    def poll(self, timeout: float) -> list[int]:
        try:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout))
            if not ready:
                return []
            data = os.read(self.fd, 64)
        except (OSError, ValueError) as e:
            raise InputDeviceError(f"cannot read keyboard input: {e}") from e
        if not data:
            raise InputDeviceError("keyboard input closed")
        return decode_keys(data)


class InputSampler:
    """
    Merges key presses and ticks into one ordered event channel.

    Runs in a daemon thread until the receiving side of the channel goes
    away. A failure to read input ends the thread and closes the sending
    side, which the main loop sees as ``ChannelClosed``.
    """

    def __init__(
        self,
        channel: EventChannel,
        key_source: KeySource,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        self._channel = channel
        self._keys = key_source
        self._tick_interval = tick_interval
        self._thread: threading.Thread | None = None
        self.error: InputDeviceError | None = None

    @property
    def tick_interval(self) -> float:
        return self._tick_interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="InputSampler",
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        logger.info("input sampler started (tick %.3fs)", self._tick_interval)
        try:
            self._sample_loop()
        except ChannelClosed:
            logger.info("event receiver gone; input sampler stopping")
        except InputDeviceError as e:
            logger.error("input sampler failed: %s", e)
            self.error = e
            self._channel.close_sender(e)

    def _sample_loop(self) -> None:
        last_tick = time.monotonic()
        while True:
            elapsed = time.monotonic() - last_tick
            timeout = max(0.0, self._tick_interval - elapsed)

            for code in self._keys.poll(timeout):
                self._channel.send(KeyPress(code))

            if time.monotonic() - last_tick >= self._tick_interval:
                self._channel.send(Tick())
                last_tick = time.monotonic()
