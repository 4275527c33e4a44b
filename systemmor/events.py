"""Events and the ordered channel between the input sampler and the main loop."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Queue

from systemmor.errors import ChannelClosed


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A key read from the terminal (``ord(ch)`` or a ``curses.KEY_*`` code)."""

    code: int


@dataclass(frozen=True, slots=True)
class Tick:
    """Periodic redraw signal."""


Event = KeyPress | Tick

# Marks the end of the stream once the sender has closed.
_CLOSED = object()


class EventChannel:
    """Single-producer, single-consumer blocking channel.

    Events come out in exactly the order they were sent. Either side can
    close: once the receiver is gone, ``send`` raises ``ChannelClosed`` so
    the producer knows to stop; once the sender is gone, ``recv`` drains
    what is left and then raises ``ChannelClosed``.
    """

    def __init__(self) -> None:
        self._queue: Queue[object] = Queue()
        self._receiver_closed = threading.Event()
        self._sender_closed = False
        self._cause: BaseException | None = None

    @property
    def receiver_closed(self) -> bool:
        return self._receiver_closed.is_set()

    def send(self, event: Event) -> None:
        if self._receiver_closed.is_set():
            raise ChannelClosed("event receiver is gone")
        if self._sender_closed:
            raise ChannelClosed("event sender already closed")
        self._queue.put(event)

    def recv(self) -> Event:
        item = self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place so later calls fail the same way
            self._queue.put(_CLOSED)
            raise ChannelClosed("event channel closed") from self._cause
        return item  # type: ignore[return-value]

    def close_sender(self, cause: BaseException | None = None) -> None:
        """Mark the producer side finished, optionally recording why."""
        if self._sender_closed:
            return
        self._sender_closed = True
        self._cause = cause
        self._queue.put(_CLOSED)

    def close_receiver(self) -> None:
        """Mark the consumer side gone; the producer stops on its next send."""
        self._receiver_closed.set()
