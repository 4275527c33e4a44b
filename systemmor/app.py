"""systemmor: tabbed terminal dashboard for host metrics.

Shows CPU (per-core), memory, network, processes, disks, temperatures and
batteries, one tab at a time. A background thread merges key presses and a
fixed-rate tick into one event channel; the main loop redraws after every
event.

Usage:
    uv run systemmor

Keys: q quit, h/c/m/n/p/d/t/b switch tab, Up/Down scroll.
Settings are read from ~/.config/systemmor/config.toml when present.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from typing import Protocol

from systemmor.config import load_config, tick_interval
from systemmor.dispatcher import RenderDispatcher
from systemmor.errors import SystemmorError
from systemmor.events import EventChannel
from systemmor.logging_setup import get_logger, setup_logging
from systemmor.metrics import PsutilMetricsProvider
from systemmor.renderer import CursesRenderer
from systemmor.sampler import InputSampler, TerminalKeySource
from systemmor.state import ViewState, apply
from systemmor.terminal import TerminalSession

logger = get_logger(__name__)

# How long to wait for the sampler thread once the loop has ended
SAMPLER_JOIN_TIMEOUT = 1.0


class Painter(Protocol):
    def draw(self, paint: Callable[[], None]) -> None: ...


# ── Main loop ──────────────────────────────────────────────────────────────


def run_loop(
    session: Painter,
    channel: EventChannel,
    dispatcher: RenderDispatcher,
    state: ViewState | None = None,
) -> ViewState:
    """Draw, wait for the next event, apply it; repeat until quit.

    Raises:
        DrawError: A frame could not be written.
        ChannelClosed: The input sampler stopped producing events.
    """
    state = state if state is not None else ViewState()
    while state.running:
        current = state
        session.draw(lambda: dispatcher.render(current))

        event = channel.recv()
        next_state = apply(event, state)
        if next_state.tab is not state.tab:
            logger.debug("tab %s -> %s", state.tab.value, next_state.tab.value)
        state = next_state

    logger.info("quit requested")
    return state


def run(config: dict) -> None:
    """Run the dashboard until quit; the terminal is restored on every path."""
    channel = EventChannel()
    sampler = InputSampler(
        channel,
        TerminalKeySource(sys.stdin.fileno()),
        tick_interval=tick_interval(config),
    )
    provider = PsutilMetricsProvider()
    try:
        with TerminalSession() as session:
            dispatcher = RenderDispatcher(
                CursesRenderer(session.stdscr),
                provider,
                cpu_history=int(config.get("display", {}).get("cpu_history", 120)),
            )
            sampler.start()
            run_loop(session, channel, dispatcher)
    finally:
        channel.close_receiver()
        sampler.join(timeout=SAMPLER_JOIN_TIMEOUT)


# ── CLI entry point ────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="systemmor",
        description="Tabbed terminal dashboard for CPU, memory, network, "
        "processes, disks, temperatures and batteries.",
    )
    parser.parse_args(argv)

    config = load_config()
    log_cfg = config.get("logging", {})
    setup_logging(log_cfg.get("level", "WARNING"), log_cfg.get("file") or None)

    try:
        run(config)
    except KeyboardInterrupt:
        pass
    except SystemmorError as e:
        logger.error("fatal: %s", e)
        cause = f" ({e.__cause__})" if e.__cause__ is not None else ""
        print(f"systemmor: {e}{cause}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
