"""Render dispatcher: turns the view state plus fresh metrics into widget calls.

Only the active tab's metrics are read. Scrollable tabs (network, process,
temperature) record their line count on the shared scroll cursor and clamp
its offset before drawing; every other tab leaves the cursor alone.
"""

from __future__ import annotations

import time
from collections import deque

from systemmor.layout import Rect, split_columns, split_frame, split_rows
from systemmor.metrics import MetricsProvider
from systemmor.renderer import Renderer
from systemmor.state import TABS, Tab, ViewState, tab_index

# ── Layout constants ───────────────────────────────────────────────────────

SCREEN_MARGIN = 2
HEADER_HEIGHT = 3
FOOTER_HEIGHT = 3

WIDE_STATS = (30, 70)
NARROW_STATS = (20, 80)
GAUGE_BAND = (40, 25, 40)
CPU_VISUALS = (50, 50)

GIB = 1_073_741_824.0
MIB = 1_048_576.0

HOME_LINES = (
    "Welcome to System Monitor!",
    "",
    "Press q to exit.",
    "",
    "Press ↑, ↓ to scroll.",
    "",
    "Press c, m, n, p, d, t and b to choose what to display.",
    "Press h to come back here.",
)

FOOTER_HINT = "q quit  ↑/↓ scroll  h c m n p d t b tabs"


# ── Formatting helpers ─────────────────────────────────────────────────────


def fmt_gb(n: int | float) -> str:
    return f"{n / GIB:.2f} GB"


def fmt_bytes(n: int | float) -> str:
    """Human-readable byte count (binary prefixes)."""
    v = float(n)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(v) < 1024:
            return f"{v:.1f} {unit}"
        v /= 1024
    return f"{v:.1f} TiB"


# ── Dispatcher ─────────────────────────────────────────────────────────────


class RenderDispatcher:
    """Draws one frame for a view state.

    Args:
        renderer: Widget drawing backend.
        provider: Source of metric snapshots.
        cpu_history: How many CPU averages the sparkline keeps.
    """

    def __init__(
        self,
        renderer: Renderer,
        provider: MetricsProvider,
        cpu_history: int = 120,
    ) -> None:
        self.renderer = renderer
        self.provider = provider
        self.cpu_history: deque[float] = deque(maxlen=max(1, cpu_history))

    def render(self, state: ViewState) -> None:
        """Draw the tab bar, the active panel and the footer."""
        screen = self.renderer.screen().inner(SCREEN_MARGIN)
        header, body, footer = split_frame(screen, HEADER_HEIGHT, FOOTER_HEIGHT)

        self._render_body(state, body)
        self.renderer.draw_tabs(header, [d.title for d in TABS], tab_index(state.tab))
        self.renderer.draw_text(footer, "", [f"{FOOTER_HINT}  {time.strftime('%H:%M:%S')}"])

    def _render_body(self, state: ViewState, body: Rect) -> None:
        tab = state.tab
        if tab is Tab.HOME:
            self.renderer.draw_text(body, "Home", HOME_LINES, center=True)
        elif tab is Tab.CPU:
            self._render_cpu(body)
        elif tab is Tab.MEMORY:
            self._render_memory(body)
        elif tab is Tab.NETWORK:
            self._render_network(state, body)
        elif tab is Tab.PROCESS:
            self._render_process(state, body)
        elif tab is Tab.DISK:
            self._render_disk(body)
        elif tab is Tab.TEMPERATURE:
            self._render_temperature(state, body)
        elif tab is Tab.BATTERY:
            self._render_battery(body)
        elif tab is Tab.QUIT:
            self.renderer.draw_block(body, "Quit")
        else:
            raise ValueError(f"unhandled tab: {tab!r}")

    def _scroll(
        self, state: ViewState, region: Rect, title: str, lines: list[str]
    ) -> None:
        offset = state.cursor.clamp(len(lines))
        self.renderer.draw_scroll_text(
            region, title, lines, offset, state.cursor.content_length
        )

    # ── fixed panels ──────────────────────────────────────────────────────

    def _render_cpu(self, body: Rect) -> None:
        cpu = self.provider.cpu()
        self.cpu_history.append(cpu.average)

        lines = [f"Average CPU Usage: {cpu.average:.2f}%"]
        lines += [f"CPU {i} {pct:.2f}%" for i, pct in enumerate(cpu.per_core)]

        stats, visuals = split_columns(body, WIDE_STATS)
        chart, bars = split_rows(visuals, CPU_VISUALS)
        self.renderer.draw_text(stats, "CPU Usage", lines)
        self.renderer.draw_sparkline(chart, "CPU Chart", list(self.cpu_history))
        self.renderer.draw_bar_chart(
            bars, "CPU Bar Graph", [(f"C{i}", pct) for i, pct in enumerate(cpu.per_core)]
        )

    def _render_memory(self, body: Rect) -> None:
        mem = self.provider.memory()
        lines = [
            f"Memory: {mem.used / GIB:.2f} / {fmt_gb(mem.total)}",
            f"Available memory: {fmt_gb(mem.available)}",
        ]
        stats, visuals = split_columns(body, NARROW_STATS)
        gauge = split_rows(visuals, GAUGE_BAND)[1]
        self.renderer.draw_gauge(gauge, "Memory Gauge", mem.ratio)
        self.renderer.draw_text(stats, "Memory", lines)

    def _render_disk(self, body: Rect) -> None:
        disks = self.provider.disks()
        stats, visuals = split_columns(body, NARROW_STATS)
        if not disks:
            self.renderer.draw_text(stats, "Disk", ["No disks found"])
            return

        lines: list[str] = []
        for disk in disks:
            lines += [
                f"Name: {disk.name}",
                f"Type: {disk.kind}",
                f"Total space: {fmt_gb(disk.total)}",
                f"Used space: {fmt_gb(disk.used)}",
                f"Free space: {fmt_gb(disk.available)}",
                "",
            ]
        self.renderer.draw_text(stats, "Disk", lines)
        gauge = split_rows(visuals, GAUGE_BAND)[1]
        self.renderer.draw_gauge(gauge, f"Disk Gauge ({disks[0].name})", disks[0].ratio)

    def _render_battery(self, body: Rect) -> None:
        batteries = self.provider.batteries()
        lines = [
            f"Battery {i}: {b.status}, Current Battery {b.charge * 100:.2f}%"
            for i, b in enumerate(batteries, start=1)
        ] or ["No battery found"]

        stats, visuals = split_columns(body, WIDE_STATS)
        gauge = split_rows(visuals, GAUGE_BAND)[1]
        self.renderer.draw_text(stats, "Battery", lines)
        self.renderer.draw_gauge(
            gauge, "Battery Gauge", batteries[0].charge if batteries else 0.0
        )

    # ── scrollable panels ─────────────────────────────────────────────────

    def _render_network(self, state: ViewState, body: Rect) -> None:
        interfaces = self.provider.networks()
        lines: list[str] = []
        for iface in interfaces:
            lines += [
                f"Network [{iface.name}]",
                f"Received: {fmt_bytes(iface.received)} "
                f"Transmitted: {fmt_bytes(iface.transmitted)}",
                " ",
            ]
        stats, visuals = split_columns(body, WIDE_STATS)
        self._scroll(state, stats, "Network", lines)
        self.renderer.draw_bar_chart(
            visuals,
            "Network Bar Graph",
            [(iface.name, float(iface.received)) for iface in interfaces],
        )

    def _render_process(self, state: ViewState, body: Rect) -> None:
        lines = [
            f"[Process ID: {p.pid:7}] {p.name:40} {p.rss / MIB:.2f} MB"
            for p in self.provider.processes()
        ]
        self._scroll(state, body, "Process", lines)

    def _render_temperature(self, state: ViewState, body: Rect) -> None:
        sensors = self.provider.temperatures()
        lines = [f"[{s.label:17}], {s.celsius:.1f}°C" for s in sensors]
        stats, visuals = split_columns(body, WIDE_STATS)
        self.renderer.draw_bar_chart(
            visuals, "Temperature Bar Graph", [(s.label, s.celsius) for s in sensors]
        )
        self._scroll(state, stats, "Temperature", lines)
