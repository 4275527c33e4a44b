"""Host metrics provider backed by psutil.

Each query reads fresh values, one metric category at a time, so the
dashboard only pays for the tab that is on screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import psutil

from systemmor.logging_setup import get_logger

logger = get_logger(__name__)


# ── Snapshot types ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CpuSnapshot:
    per_core: list[float]

    @property
    def average(self) -> float:
        if not self.per_core:
            return 0.0
        return sum(self.per_core) / len(self.per_core)


@dataclass(frozen=True, slots=True)
class MemorySnapshot:
    total: int
    used: int

    @property
    def available(self) -> int:
        return max(0, self.total - self.used)

    @property
    def ratio(self) -> float:
        return self.used / self.total if self.total > 0 else 0.0


@dataclass(frozen=True, slots=True)
class NetworkInterface:
    name: str
    received: int  # bytes since the previous refresh
    transmitted: int


@dataclass(frozen=True, slots=True)
class ProcessInfo:
    pid: int
    name: str
    rss: int  # Bytes


@dataclass(frozen=True, slots=True)
class DiskInfo:
    name: str
    kind: str  # filesystem type
    total: int
    available: int

    @property
    def used(self) -> int:
        return max(0, self.total - self.available)

    @property
    def ratio(self) -> float:
        return self.used / self.total if self.total > 0 else 0.0


@dataclass(frozen=True, slots=True)
class TemperatureSensor:
    label: str
    celsius: float


@dataclass(frozen=True, slots=True)
class BatteryInfo:
    charge: float  # 0.0 - 1.0
    status: str  # "Charging", "Discharging", "Full" or "Unknown"


class MetricsProvider(Protocol):
    def cpu(self) -> CpuSnapshot: ...

    def memory(self) -> MemorySnapshot: ...

    def networks(self) -> list[NetworkInterface]: ...

    def processes(self) -> list[ProcessInfo]: ...

    def disks(self) -> list[DiskInfo]: ...

    def temperatures(self) -> list[TemperatureSensor]: ...

    def batteries(self) -> list[BatteryInfo]: ...


# ── psutil implementation ──────────────────────────────────────────────────


def battery_status(percent: float, plugged: bool | None) -> str:
    if plugged is None:
        return "Unknown"
    if plugged:
        return "Full" if percent >= 100.0 else "Charging"
    return "Discharging"


class PsutilMetricsProvider:
    """Reads metrics from psutil on demand."""

    def __init__(self) -> None:
        self._prev_net: dict[str, tuple[int, int]] = {}
        # Warm-up: the first per-core reading is always 0.0
        psutil.cpu_percent(interval=None, percpu=True)

    def cpu(self) -> CpuSnapshot:
        return CpuSnapshot(per_core=list(psutil.cpu_percent(interval=None, percpu=True)))

    def memory(self) -> MemorySnapshot:
        ram = psutil.virtual_memory()
        return MemorySnapshot(total=ram.total, used=ram.used)

    def networks(self) -> list[NetworkInterface]:
        """Per-interface byte counts since the previous call (0 on the first)."""
        counters = psutil.net_io_counters(pernic=True) or {}
        interfaces: list[NetworkInterface] = []
        current: dict[str, tuple[int, int]] = {}
        for name, io in sorted(counters.items()):
            current[name] = (io.bytes_recv, io.bytes_sent)
            prev = self._prev_net.get(name)
            if prev is None:
                received, transmitted = 0, 0
            else:
                received = max(0, io.bytes_recv - prev[0])
                transmitted = max(0, io.bytes_sent - prev[1])
            interfaces.append(NetworkInterface(name, received, transmitted))
        self._prev_net = current
        return interfaces

    def processes(self) -> list[ProcessInfo]:
        procs: list[ProcessInfo] = []
        for proc in psutil.process_iter(["pid", "name", "memory_info"]):
            try:
                info: dict[str, Any] = proc.info
                mem_info = info.get("memory_info")
                procs.append(
                    ProcessInfo(
                        pid=info.get("pid", 0),
                        name=info.get("name") or "?",
                        rss=mem_info.rss if mem_info else 0,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return procs

    def disks(self) -> list[DiskInfo]:
        disks: list[DiskInfo] = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as e:
                logger.debug("skipping disk %s: %s", part.mountpoint, e)
                continue
            disks.append(
                DiskInfo(
                    name=part.device or part.mountpoint,
                    kind=part.fstype or "unknown",
                    total=usage.total,
                    available=usage.free,
                )
            )
        return disks

    def temperatures(self) -> list[TemperatureSensor]:
        try:
            temps = psutil.sensors_temperatures()
        except AttributeError:
            return []
        sensors: list[TemperatureSensor] = []
        for chip, entries in (temps or {}).items():
            for entry in entries:
                sensors.append(TemperatureSensor(entry.label or chip, float(entry.current)))
        return sensors

    def batteries(self) -> list[BatteryInfo]:
        try:
            battery = psutil.sensors_battery()
        except AttributeError:
            return []
        if battery is None:
            return []
        percent = float(battery.percent)
        return [
            BatteryInfo(
                charge=max(0.0, min(percent / 100.0, 1.0)),
                status=battery_status(percent, battery.power_plugged),
            )
        ]
