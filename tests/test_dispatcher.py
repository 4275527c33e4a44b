"""Tests for systemmor.dispatcher."""

from __future__ import annotations

import curses
from typing import Any

import pytest

from systemmor.dispatcher import (
    FOOTER_HEIGHT,
    HEADER_HEIGHT,
    SCREEN_MARGIN,
    RenderDispatcher,
    fmt_bytes,
    fmt_gb,
)
from systemmor.events import KeyPress
from systemmor.layout import Rect
from systemmor.metrics import (
    BatteryInfo,
    CpuSnapshot,
    DiskInfo,
    MemorySnapshot,
    NetworkInterface,
    ProcessInfo,
    TemperatureSensor,
)
from systemmor.state import ScrollCursor, Tab, ViewState, apply

DOWN = KeyPress(curses.KEY_DOWN)


class RecordingRenderer:
    """Renderer double that records every widget call."""

    def __init__(self, h: int = 40, w: int = 120) -> None:
        self.size = Rect(0, 0, h, w)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def screen(self) -> Rect:
        return self.size

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))

    def draw_block(self, region, title):
        self._record("block", region=region, title=title)

    def draw_text(self, region, title, lines, center=False):
        self._record("text", region=region, title=title, lines=list(lines))

    def draw_scroll_text(self, region, title, lines, offset, content_length):
        self._record(
            "scroll",
            region=region,
            title=title,
            lines=list(lines),
            offset=offset,
            content_length=content_length,
        )

    def draw_bar_chart(self, region, title, bars):
        self._record("bars", region=region, title=title, bars=list(bars))

    def draw_gauge(self, region, title, ratio):
        self._record("gauge", region=region, title=title, ratio=ratio)

    def draw_sparkline(self, region, title, values, max_val=100.0):
        self._record("spark", region=region, title=title, values=list(values))

    def draw_tabs(self, region, titles, selected):
        self._record("tabs", region=region, titles=list(titles), selected=selected)

    def named(self, name: str) -> list[dict[str, Any]]:
        return [kw for n, kw in self.calls if n == name]

    def titled(self, title: str) -> dict[str, Any]:
        matches = [kw for _, kw in self.calls if kw.get("title") == title]
        assert len(matches) == 1, f"expected one {title!r} widget, got {len(matches)}"
        return matches[0]


class FakeProvider:
    """Metrics provider with settable snapshots and per-category call counts."""

    def __init__(self) -> None:
        self.per_core = [10.0, 20.0, 30.0, 40.0]
        self.mem = MemorySnapshot(total=16 * 1024**3, used=4 * 1024**3)
        self.ifaces = [NetworkInterface("eth0", 2048, 1024), NetworkInterface("lo", 0, 0)]
        self.procs = [ProcessInfo(i, f"proc{i}", 1024 * 1024) for i in range(50)]
        self.disk_list = [DiskInfo("/dev/sda1", "ext4", 100 * 1024**3, 25 * 1024**3)]
        self.sensors = [TemperatureSensor("Core 0", 45.0), TemperatureSensor("Core 1", 50.5)]
        self.battery_list = [BatteryInfo(0.75, "Discharging")]
        self.calls: list[str] = []

    def cpu(self):
        self.calls.append("cpu")
        return CpuSnapshot(list(self.per_core))

    def memory(self):
        self.calls.append("memory")
        return self.mem

    def networks(self):
        self.calls.append("networks")
        return list(self.ifaces)

    def processes(self):
        self.calls.append("processes")
        return list(self.procs)

    def disks(self):
        self.calls.append("disks")
        return list(self.disk_list)

    def temperatures(self):
        self.calls.append("temperatures")
        return list(self.sensors)

    def batteries(self):
        self.calls.append("batteries")
        return list(self.battery_list)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def dispatcher(renderer: RecordingRenderer, provider: FakeProvider) -> RenderDispatcher:
    return RenderDispatcher(renderer, provider)


# ── Formatting helpers ─────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "0.0 B"),
        (512, "512.0 B"),
        (1024, "1.0 KiB"),
        (1536, "1.5 KiB"),
        (1024**3, "1.0 GiB"),
        (1024**4, "1.0 TiB"),
    ],
)
def test_fmt_bytes(value: int, expected: str) -> None:
    assert fmt_bytes(value) == expected


def test_fmt_gb() -> None:
    assert fmt_gb(3 * 1024**3) == "3.00 GB"


# ── Frame layout ───────────────────────────────────────────────────────────


class TestFrame:
    def test_tab_bar_highlights_active_tab(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.DISK))
        (tabs,) = renderer.named("tabs")
        assert tabs["titles"][tabs["selected"]] == "Disk"
        assert tabs["titles"][0] == "Home"
        assert tabs["titles"][-1] == "Quit"

    def test_header_body_footer_split(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.PROCESS))
        header = renderer.named("tabs")[0]["region"]
        body = renderer.titled("Process")["region"]
        footer = renderer.titled("")["region"]
        assert header == Rect(SCREEN_MARGIN, SCREEN_MARGIN, HEADER_HEIGHT, 120 - 2 * SCREEN_MARGIN)
        assert footer.h == FOOTER_HEIGHT
        assert body.y == header.y + header.h
        assert footer.y == body.y + body.h
        assert footer.y + footer.h == 40 - SCREEN_MARGIN

    @pytest.mark.parametrize("tab", [Tab.HOME, Tab.QUIT])
    def test_static_tabs_skip_provider(
        self, dispatcher: RenderDispatcher, provider: FakeProvider, tab: Tab
    ) -> None:
        dispatcher.render(ViewState(tab=tab))
        assert provider.calls == []

    def test_home_text(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState())
        lines = renderer.titled("Home")["lines"]
        assert any("q" in line and "exit" in line for line in lines)

    def test_quit_draws_block(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.QUIT))
        assert renderer.named("block")[0]["title"] == "Quit"

    @pytest.mark.parametrize(
        ("tab", "category"),
        [
            (Tab.CPU, "cpu"),
            (Tab.MEMORY, "memory"),
            (Tab.NETWORK, "networks"),
            (Tab.PROCESS, "processes"),
            (Tab.DISK, "disks"),
            (Tab.TEMPERATURE, "temperatures"),
            (Tab.BATTERY, "batteries"),
        ],
    )
    def test_only_active_tab_is_sampled(
        self,
        dispatcher: RenderDispatcher,
        provider: FakeProvider,
        tab: Tab,
        category: str,
    ) -> None:
        dispatcher.render(ViewState(tab=tab))
        assert provider.calls == [category]


# ── Fixed-shape panels ─────────────────────────────────────────────────────


class TestFixedPanels:
    @pytest.mark.parametrize(
        "tab", [Tab.HOME, Tab.CPU, Tab.MEMORY, Tab.DISK, Tab.BATTERY, Tab.QUIT]
    )
    def test_cursor_untouched(self, dispatcher: RenderDispatcher, tab: Tab) -> None:
        state = ViewState(tab=tab, cursor=ScrollCursor(offset=99, content_length=7))
        dispatcher.render(state)
        assert state.cursor == ScrollCursor(offset=99, content_length=7)

    def test_cpu_panels(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.CPU))
        stats = renderer.titled("CPU Usage")
        assert stats["lines"][0] == "Average CPU Usage: 25.00%"
        assert stats["lines"][1:] == [
            "CPU 0 10.00%",
            "CPU 1 20.00%",
            "CPU 2 30.00%",
            "CPU 3 40.00%",
        ]
        bars = renderer.titled("CPU Bar Graph")["bars"]
        assert bars == [("C0", 10.0), ("C1", 20.0), ("C2", 30.0), ("C3", 40.0)]
        assert renderer.titled("CPU Chart")["values"] == [25.0]

    def test_cpu_stats_column_is_30_percent(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.CPU))
        stats = renderer.titled("CPU Usage")["region"]
        chart = renderer.titled("CPU Chart")["region"]
        body_w = 120 - 2 * SCREEN_MARGIN
        assert stats.w == body_w * 30 // 100
        assert chart.x == stats.x + stats.w

    def test_cpu_history_accumulates(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer, provider: FakeProvider
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.CPU))
        provider.per_core = [100.0, 100.0]
        renderer.calls.clear()
        dispatcher.render(ViewState(tab=Tab.CPU))
        assert renderer.titled("CPU Chart")["values"] == [25.0, 100.0]

    def test_memory_gauge(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.MEMORY))
        assert renderer.titled("Memory Gauge")["ratio"] == pytest.approx(0.25)
        lines = renderer.titled("Memory")["lines"]
        assert lines == ["Memory: 4.00 / 16.00 GB", "Available memory: 12.00 GB"]

    def test_disk_panel(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.DISK))
        lines = renderer.titled("Disk")["lines"]
        assert "Name: /dev/sda1" in lines
        assert "Type: ext4" in lines
        assert "Used space: 75.00 GB" in lines
        assert "Free space: 25.00 GB" in lines
        assert renderer.titled("Disk Gauge (/dev/sda1)")["ratio"] == pytest.approx(0.75)

    def test_no_disks(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer, provider: FakeProvider
    ) -> None:
        provider.disk_list = []
        dispatcher.render(ViewState(tab=Tab.DISK))
        assert renderer.titled("Disk")["lines"] == ["No disks found"]
        assert renderer.named("gauge") == []

    def test_battery_panel(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.BATTERY))
        assert renderer.titled("Battery")["lines"] == [
            "Battery 1: Discharging, Current Battery 75.00%"
        ]
        assert renderer.titled("Battery Gauge")["ratio"] == pytest.approx(0.75)

    def test_no_battery(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer, provider: FakeProvider
    ) -> None:
        provider.battery_list = []
        dispatcher.render(ViewState(tab=Tab.BATTERY))
        assert renderer.titled("Battery")["lines"] == ["No battery found"]
        assert renderer.titled("Battery Gauge")["ratio"] == 0.0


# ── Scrollable panels ──────────────────────────────────────────────────────


class TestScrollablePanels:
    def test_process_lines(self, dispatcher: RenderDispatcher, renderer: RecordingRenderer) -> None:
        dispatcher.render(ViewState(tab=Tab.PROCESS))
        scroll = renderer.titled("Process")
        assert len(scroll["lines"]) == 50
        assert scroll["lines"][3].startswith("[Process ID:       3] proc3")
        assert scroll["lines"][3].endswith("1.00 MB")
        assert scroll["content_length"] == 50

    def test_down_presses_clamp_to_last_process(self, dispatcher: RenderDispatcher) -> None:
        state = ViewState(tab=Tab.PROCESS)
        dispatcher.render(state)
        for _ in range(60):
            state = apply(DOWN, state)
            dispatcher.render(state)
        assert state.cursor.offset == 49

    def test_down_presses_then_single_render(self, dispatcher: RenderDispatcher) -> None:
        state = ViewState(tab=Tab.PROCESS)
        for _ in range(60):
            state = apply(DOWN, state)
        dispatcher.render(state)
        assert state.cursor.offset == 49

    def test_shrinking_list_pulls_offset_back(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer, provider: FakeProvider
    ) -> None:
        state = ViewState(tab=Tab.PROCESS, cursor=ScrollCursor(offset=49, content_length=50))
        provider.procs = provider.procs[:10]
        dispatcher.render(state)
        assert state.cursor.offset == 9
        assert state.cursor.content_length == 10
        assert renderer.titled("Process")["offset"] == 9

    def test_empty_list_resets_offset(
        self, dispatcher: RenderDispatcher, provider: FakeProvider
    ) -> None:
        provider.sensors = []
        state = ViewState(tab=Tab.TEMPERATURE, cursor=ScrollCursor(offset=5))
        dispatcher.render(state)
        assert state.cursor.offset == 0
        assert state.cursor.content_length == 0

    def test_network_three_lines_per_interface(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.NETWORK))
        scroll = renderer.titled("Network")
        assert scroll["content_length"] == 6
        assert scroll["lines"][0] == "Network [eth0]"
        assert scroll["lines"][1] == "Received: 2.0 KiB Transmitted: 1.0 KiB"
        assert renderer.titled("Network Bar Graph")["bars"] == [("eth0", 2048.0), ("lo", 0.0)]

    def test_temperature_panel(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        dispatcher.render(ViewState(tab=Tab.TEMPERATURE))
        scroll = renderer.titled("Temperature")
        assert scroll["lines"][1] == "[Core 1           ], 50.5°C"
        assert scroll["content_length"] == 2
        assert renderer.titled("Temperature Bar Graph")["bars"] == [
            ("Core 0", 45.0),
            ("Core 1", 50.5),
        ]

    def test_offset_carries_across_tabs_until_clamped(
        self, dispatcher: RenderDispatcher, renderer: RecordingRenderer
    ) -> None:
        state = ViewState(tab=Tab.PROCESS)
        for _ in range(40):
            state = apply(DOWN, state)
        dispatcher.render(state)
        assert state.cursor.offset == 40

        # Switching tabs keeps the offset...
        state = apply(KeyPress(ord("n")), state)
        assert state.cursor.offset == 40

        # ...until the network panel clamps it to its own six lines
        renderer.calls.clear()
        dispatcher.render(state)
        assert state.cursor.offset == 5
        assert renderer.titled("Network")["offset"] == 5

    def test_fixed_tab_does_not_refresh_stale_length(self, dispatcher: RenderDispatcher) -> None:
        state = ViewState(tab=Tab.PROCESS)
        dispatcher.render(state)
        state = apply(KeyPress(ord("c")), state)
        dispatcher.render(state)
        assert state.cursor.content_length == 50
