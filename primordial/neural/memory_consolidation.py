"""Memory consolidation: short-term weight changes become long-term stable changes."""

from __future__ import annotations

from dataclasses import dataclass

MAX_LONG_TERM_CHANGES = 1000

_Key = tuple[int, int, int]


@dataclass
class WeightChange:
    """A single recorded weight change."""

    layer: int
    i: int
    j: int
    delta: float
    timestamp: int
    importance: float


@dataclass
class _LongTermChange:
    accumulated_delta: float = 0.0
    count: int = 0
    total_importance: float = 0.0


@dataclass
class ConsolidationStats:
    """Statistics about consolidation."""

    short_term_count: int = 0
    long_term_count: int = 0
    consolidations_performed: int = 0


class MemoryConsolidator:
    """Consolidates short-term weight changes into long-term stable changes."""

    def __init__(self, consolidation_threshold: float, working_memory_size: int) -> None:
        self.consolidation_threshold = consolidation_threshold
        self.working_memory_size = working_memory_size
        self._short_term: list[WeightChange] = []
        self._long_term: dict[_Key, _LongTermChange] = {}
        self._consolidations_performed = 0

    def record_change(self, change: WeightChange) -> None:
        """Store a change; consolidate once working memory is full."""
        self._short_term.append(change)
        if len(self._short_term) >= self.working_memory_size:
            self.consolidate()

    def consolidate(self) -> None:
        """Fold short-term changes into importance-weighted long-term totals."""
        if not self._short_term:
            return

        for change in self._short_term:
            entry = self._long_term.setdefault(
                (change.layer, change.i, change.j), _LongTermChange()
            )
            entry.accumulated_delta += change.delta * change.importance
            entry.total_importance += change.importance
            entry.count += 1
        self._short_term.clear()

        self._consolidations_performed += 1
        if len(self._long_term) > MAX_LONG_TERM_CHANGES:
            self._prune_long_term()

    def _prune_long_term(self) -> None:
        excess = len(self._long_term) - MAX_LONG_TERM_CHANGES
        if excess <= 0:
            return
        least_important = sorted(
            self._long_term, key=lambda key: self._long_term[key].total_importance
        )[:excess]
        for key in least_important:
            del self._long_term[key]

    def get_consolidated_changes(self) -> list[tuple[int, int, int, float]]:
        """Averaged changes whose magnitude reaches the threshold, as (layer, i, j, delta)."""
        self.consolidate()
        results = []
        for (layer, i, j), change in self._long_term.items():
            if change.total_importance > 0.0:
                avg_delta = change.accumulated_delta / change.total_importance
                if abs(avg_delta) >= self.consolidation_threshold:
                    results.append((layer, i, j, avg_delta))
        return results

    def stats(self) -> ConsolidationStats:
        return ConsolidationStats(
            short_term_count=len(self._short_term),
            long_term_count=len(self._long_term),
            consolidations_performed=self._consolidations_performed,
        )

    def clear(self) -> None:
        """Forget all short- and long-term changes."""
        self._short_term.clear()
        self._long_term.clear()