"""Process memory monitoring with warning and critical thresholds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024

_PAGE_SIZE = 4096
_DEFAULT_SYSTEM_MEMORY = 16 * _GB
_WARNING_INTERVAL = 1000

MemoryReader = Callable[[], Optional[tuple[int, int]]]


@dataclass(frozen=True)
class MemoryStats:
    """Memory usage of the process."""

    rss_bytes: int = 0
    vms_bytes: int = 0
    percent_used: float = 0.0


@dataclass(frozen=True)
class MemoryThresholds:
    """Warning and critical levels; ``max_memory_mb`` of 0 means no absolute limit."""

    warning_percent: float = 70.0
    critical_percent: float = 85.0
    max_memory_mb: int = 0


class MemoryLevel(Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class MemoryAction:
    """Outcome of a memory check together with the stats it was based on."""

    level: MemoryLevel
    stats: MemoryStats

    def is_critical(self) -> bool:
        return self.level is MemoryLevel.CRITICAL

    def is_warning(self) -> bool:
        return self.level is MemoryLevel.WARNING


def _read_process_memory() -> Optional[tuple[int, int]]:
    """(rss, vms) in bytes from /proc/self/statm, or None where unavailable."""
    try:
        parts = Path("/proc/self/statm").read_text().split()
        vms_pages, rss_pages = int(parts[0]), int(parts[1])
    except (OSError, ValueError, IndexError):
        return None
    return rss_pages * _PAGE_SIZE, vms_pages * _PAGE_SIZE


def _read_total_system_memory() -> Optional[int]:
    """Total system memory in bytes, assuming 16 GB where /proc is missing."""
    try:
        text = Path("/proc/meminfo").read_text()
    except OSError:
        return _DEFAULT_SYSTEM_MEMORY
    for line in text.splitlines():
        if line.startswith("MemTotal:"):
            parts = line.split()
            if len(parts) >= 2:
                try:
                    return int(parts[1]) * 1024
                except ValueError:
                    return None
    return None


class MemoryMonitor:
    """Watches process memory and reports when thresholds are crossed."""

    def __init__(
        self,
        thresholds: Optional[MemoryThresholds] = None,
        *,
        total_memory: Optional[int] = None,
        memory_reader: Optional[MemoryReader] = None,
    ) -> None:
        self._thresholds = thresholds if thresholds is not None else MemoryThresholds()
        if total_memory is None:
            total_memory = _read_total_system_memory()
        self._total_system_memory = (
            total_memory if total_memory is not None else _DEFAULT_SYSTEM_MEMORY
        )
        self._reader = memory_reader if memory_reader is not None else _read_process_memory
        self._last_warning_time = 0
        self._warning_issued = False
        self._critical_issued = False

    def get_stats(self) -> MemoryStats:
        """Current memory usage; zeros when it cannot be read."""
        rss, vms = self._reader() or (0, 0)
        percent = (
            rss / self._total_system_memory * 100.0
            if self._total_system_memory > 0
            else 0.0
        )
        return MemoryStats(rss_bytes=rss, vms_bytes=vms, percent_used=percent)

    def check(self, current_time: int) -> MemoryAction:
        """Check memory; warnings are issued at most once per 1000 time units."""
        stats = self.get_stats()
        limits = self._thresholds

        if limits.max_memory_mb > 0 and stats.rss_bytes // _MB >= limits.max_memory_mb:
            self._critical_issued = True
            return MemoryAction(MemoryLevel.CRITICAL, stats)

        if stats.percent_used >= limits.critical_percent:
            self._critical_issued = True
            return MemoryAction(MemoryLevel.CRITICAL, stats)

        if stats.percent_used >= limits.warning_percent:
            if current_time - self._last_warning_time >= _WARNING_INTERVAL:
                self._last_warning_time = current_time
                self._warning_issued = True
                return MemoryAction(MemoryLevel.WARNING, stats)
        else:
            self._critical_issued = False
            self._warning_issued = False

        return MemoryAction(MemoryLevel.OK, stats)

    def is_critical(self) -> bool:
        return self._critical_issued

    def thresholds(self) -> MemoryThresholds:
        return self._thresholds

    def set_thresholds(self, thresholds: MemoryThresholds) -> None:
        self._thresholds = thresholds

    def total_system_memory(self) -> int:
        return self._total_system_memory


def format_bytes(num_bytes: int) -> str:
    """Human-readable size in B, KB, MB or GB (powers of 1024)."""
    if num_bytes >= _GB:
        return f"{num_bytes / _GB:.2f} GB"
    if num_bytes >= _MB:
        return f"{num_bytes / _MB:.2f} MB"
    if num_bytes >= _KB:
        return f"{num_bytes / _KB:.2f} KB"
    return f"{num_bytes} B"