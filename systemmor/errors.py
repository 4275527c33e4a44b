"""Fatal error types for the systemmor render loop.

None of these are retried: a broken terminal or input device cannot be
recovered mid-session, so each one ends the run after the terminal mode
has been restored.
"""

from __future__ import annotations


class SystemmorError(Exception):
    """Base class for every fatal dashboard error."""


class InputDeviceError(SystemmorError):
    """Polling or reading the keyboard failed."""


class TerminalModeError(SystemmorError):
    """Entering or leaving raw terminal mode failed."""


class ChannelClosed(SystemmorError):
    """The other side of the event channel has gone away."""


class DrawError(SystemmorError):
    """Writing a frame to the terminal failed."""
