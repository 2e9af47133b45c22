"""Diversity metrics for population genetics analysis."""

from __future__ import annotations

import math
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence

from primordial.genetics.phylogeny import PhylogeneticTree

MAX_DIVERSITY_RECORDS = 5_000
_DISTANCE_SAMPLE_SIZE = 100
_SPECIES_THRESHOLD = 3


class _Brain(Protocol):
    def complexity(self) -> int: ...


class Organism(Protocol):
    """What the metrics need to know about an organism."""

    id: int
    lineage_id: int
    offspring_count: int
    brain: _Brain

    def is_alive(self) -> bool: ...


def _alive(organisms: Iterable[Organism]) -> list[Organism]:
    return [org for org in organisms if org.is_alive()]


def _lineage_proportions(alive: Sequence[Organism]) -> list[float]:
    total = len(alive)
    counts = Counter(org.lineage_id for org in alive)
    return [count / total for count in counts.values()]


@dataclass
class DiversityMetrics:
    """Collection of diversity metrics for a population."""

    simpsons_index: float = 0.0
    shannon_entropy: float = 0.0
    mean_genetic_distance: float = 0.0
    lineage_count: int = 0
    species_count: int = 0
    effective_population: float = 0.0
    heterozygosity: float = 0.0

    def summary(self) -> str:
        """One-line human-readable summary."""
        return (
            f"Diversity: Simpson={self.simpsons_index:.3f}, "
            f"Shannon={self.shannon_entropy:.3f}, "
            f"MeanDist={self.mean_genetic_distance:.1f}, "
            f"Lineages={self.lineage_count}, Species={self.species_count}, "
            f"Ne={self.effective_population:.1f}"
        )


def calculate_simpsons_index(organisms: Iterable[Organism]) -> float:
    """Simpson's index ``1 - sum(p_i^2)`` over lineage proportions of living organisms."""
    alive = _alive(organisms)
    if not alive:
        return 0.0
    return 1.0 - sum(p * p for p in _lineage_proportions(alive))


def calculate_shannon_entropy(organisms: Iterable[Organism]) -> float:
    """Shannon entropy ``-sum(p_i ln p_i)`` over lineage proportions."""
    alive = _alive(organisms)
    if not alive:
        return 0.0
    return sum(-p * math.log(p) for p in _lineage_proportions(alive) if p > 0.0)


def calculate_mean_genetic_distance(
    organisms: Iterable[Organism], phylogeny: PhylogeneticTree
) -> float:
    """Mean phylogenetic distance over pairs among the first 100 living organisms."""
    alive = _alive(organisms)
    if len(alive) < 2:
        return 0.0

    sample = alive[:_DISTANCE_SAMPLE_SIZE]
    distances = [
        distance
        for i, first in enumerate(sample)
        for second in sample[i + 1:]
        if (distance := phylogeny.genetic_distance(first.id, second.id)) is not None
    ]
    if not distances:
        return 0.0
    return sum(distances) / len(distances)


def count_lineages(organisms: Iterable[Organism]) -> int:
    """Number of distinct lineages among living organisms."""
    return len({org.lineage_id for org in _alive(organisms)})


def count_species(organisms: Iterable[Organism], threshold: int) -> int:
    """Number of brain-complexity buckets of width ``threshold`` (at least 1)."""
    width = max(threshold, 1)
    return len({org.brain.complexity() // width for org in _alive(organisms)})


def calculate_effective_population(organisms: Iterable[Organism]) -> float:
    """Effective population size from the variance in offspring counts."""
    alive = _alive(organisms)
    if not alive:
        return 0.0

    n = len(alive)
    mean = sum(org.offspring_count for org in alive) / n
    variance = sum((org.offspring_count - mean) ** 2 for org in alive) / n

    if variance > 0.0:
        mean_k = max(mean, 1.0)
        return n * mean_k / max(variance + mean_k - 1.0, 1.0)
    return float(n)


def calculate_heterozygosity(organisms: Iterable[Organism]) -> float:
    """Expected heterozygosity ``(1 - sum(p_i^2)) * n / (n - 1)`` over lineages."""
    alive = _alive(organisms)
    if len(alive) < 2:
        return 0.0
    n = len(alive)
    sum_squares = sum(p * p for p in _lineage_proportions(alive))
    return (1.0 - sum_squares) * n / (n - 1)


def calculate_all_metrics(
    organisms: Sequence[Organism], phylogeny: PhylogeneticTree
) -> DiversityMetrics:
    """Every diversity metric for the population at once."""
    return DiversityMetrics(
        simpsons_index=calculate_simpsons_index(organisms),
        shannon_entropy=calculate_shannon_entropy(organisms),
        mean_genetic_distance=calculate_mean_genetic_distance(organisms, phylogeny),
        lineage_count=count_lineages(organisms),
        species_count=count_species(organisms, _SPECIES_THRESHOLD),
        effective_population=calculate_effective_population(organisms),
        heterozygosity=calculate_heterozygosity(organisms),
    )


@dataclass
class DiversityRecord:
    """Diversity metrics at one point in time."""

    time: int
    population: int
    metrics: DiversityMetrics


@dataclass
class DiversityHistory:
    """Bounded history of diversity records, oldest dropped first."""

    record_interval: int
    max_records: int = MAX_DIVERSITY_RECORDS
    records: deque[DiversityRecord] = field(default_factory=deque)

    def record(
        self,
        time: int,
        organisms: Sequence[Organism],
        phylogeny: PhylogeneticTree,
    ) -> None:
        """Append the current metrics, dropping the oldest record when full."""
        population = len(_alive(organisms))
        metrics = calculate_all_metrics(organisms, phylogeny)
        if self.records and len(self.records) >= self.max_records:
            self.records.popleft()
        self.records.append(DiversityRecord(time, population, metrics))

    def latest(self) -> Optional[DiversityRecord]:
        return self.records[-1] if self.records else None

    def diversity_trend(self, window: int) -> float:
        """Change in Simpson's index across the last ``window`` records."""
        if len(self.records) < 2:
            return 0.0
        recent = list(self.records)[-window:] if window > 0 else []
        if len(recent) < 2:
            return 0.0
        return recent[-1].metrics.simpsons_index - recent[0].metrics.simpsons_index

    def to_csv(self) -> str:
        """All records as CSV with a header line."""
        lines = [
            "time,population,simpsons,shannon,mean_distance,lineages,species,"
            "effective_pop,heterozygosity\n"
        ]
        for rec in self.records:
            m = rec.metrics
            lines.append(
                f"{rec.time},{rec.population},{m.simpsons_index:.4f},"
                f"{m.shannon_entropy:.4f},{m.mean_genetic_distance:.2f},"
                f"{m.lineage_count},{m.species_count},"
                f"{m.effective_population:.1f},{m.heterozygosity:.4f}\n"
            )
        return "".join(lines)