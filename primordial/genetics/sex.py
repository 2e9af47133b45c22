"""Sexual reproduction: sex determination, mating rules and speciation barriers."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from primordial.genetics.phylogeny import PhylogeneticTree


class Sex(Enum):
    """Biological sex for sexual reproduction."""

    MALE = "male"
    FEMALE = "female"

    @classmethod
    def random(cls) -> "Sex":
        """A sex drawn 50/50."""
        return cls.MALE if random.random() < 0.5 else cls.FEMALE

    def symbol(self) -> str:
        """The display character for this sex."""
        return "\u2642" if self is Sex.MALE else "\u2640"


@dataclass
class SexualReproductionConfig:
    """Configuration for sexual reproduction."""

    enabled: bool = False
    min_energy: float = 50.0
    energy_cost: float = 25.0
    offspring_energy: float = 50.0
    cooldown: int = 30
    inbreeding_fitness_cost: float = 0.3
    max_mating_distance: int = 2


@dataclass
class SpeciationConfig:
    """Genetic-distance limits that decide whether two organisms can interbreed."""

    speciation_enabled: bool
    min_genetic_distance: int
    max_genetic_distance: int
    boundary_mating_probability: float


@dataclass
class SexualReproductionSystem:
    """Counters describing mating activity over a simulation."""

    total_matings: int = 0
    failed_matings: int = 0
    inbreeding_events: int = 0
    total_offspring: int = 0
    speciation_blocks: int = 0
    boundary_zone_attempts: int = 0

    @staticmethod
    def can_mate(
        sex1: Sex,
        sex2: Sex,
        energy1: float,
        energy2: float,
        cooldown1: int,
        cooldown2: int,
        distance: int,
        config: SexualReproductionConfig,
    ) -> bool:
        """True when two organisms are of opposite sex, adjacent, rested and fed."""
        if sex1 == sex2:
            return False
        if distance > 1:
            return False
        if cooldown1 > 0 or cooldown2 > 0:
            return False
        return energy1 >= config.min_energy and energy2 >= config.min_energy

    @staticmethod
    def is_inbred(lineage1: int, lineage2: int) -> bool:
        """Two organisms of the same lineage count as inbred."""
        return lineage1 == lineage2

    @staticmethod
    def inbreeding_penalty(config: SexualReproductionConfig) -> float:
        return config.inbreeding_fitness_cost

    def record_mating(self, was_inbred: bool) -> None:
        self.total_matings += 1
        if was_inbred:
            self.inbreeding_events += 1

    def record_failed_mating(self) -> None:
        self.failed_matings += 1

    def record_offspring(self) -> None:
        self.total_offspring += 1

    def success_rate(self) -> float:
        """Successful matings as a fraction of all attempts."""
        total = self.total_matings + self.failed_matings
        return self.total_matings / total if total else 0.0

    def inbreeding_rate(self) -> float:
        """Inbred matings as a fraction of successful matings."""
        if self.total_matings == 0:
            return 0.0
        return self.inbreeding_events / self.total_matings

    def record_speciation_block(self) -> None:
        self.speciation_blocks += 1

    def record_boundary_zone_attempt(self) -> None:
        self.boundary_zone_attempts += 1

    def speciation_block_rate(self) -> float:
        """Speciation blocks as a fraction of all mating attempts."""
        total = self.total_matings + self.failed_matings + self.speciation_blocks
        return self.speciation_blocks / total if total else 0.0


def check_speciation_compatibility(
    org1_id: int,
    org2_id: int,
    phylogeny: PhylogeneticTree,
    config: SpeciationConfig,
) -> tuple[bool, float]:
    """Whether two organisms may mate, and with what probability.

    Within ``min_genetic_distance`` they always may; at or beyond
    ``max_genetic_distance`` (or when unrelated) they never may; in between
    the probability falls linearly towards ``boundary_mating_probability``.
    """
    if not config.speciation_enabled:
        return True, 1.0

    distance = phylogeny.genetic_distance(org1_id, org2_id)
    if distance is None:
        distance = config.max_genetic_distance + 1

    if distance <= config.min_genetic_distance:
        return True, 1.0
    if distance >= config.max_genetic_distance:
        return False, 0.0

    span = config.max_genetic_distance - config.min_genetic_distance
    position = distance - config.min_genetic_distance
    probability = 1.0 - (position / span) * (1.0 - config.boundary_mating_probability)
    return True, probability