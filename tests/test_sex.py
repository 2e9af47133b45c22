import pytest

from primordial.genetics.phylogeny import PhylogeneticTree
from primordial.genetics.sex import (
    Sex,
    SexualReproductionConfig,
    SexualReproductionSystem,
    SpeciationConfig,
    check_speciation_compatibility,
)


def _can_mate(sex1, sex2, e1=100.0, e2=100.0, c1=0, c2=0, distance=1):
    return SexualReproductionSystem.can_mate(
        sex1, sex2, e1, e2, c1, c2, distance, SexualReproductionConfig()
    )


def _tree():
    tree = PhylogeneticTree()
    tree.record_birth(0, None, None, 0, 5, 100.0, 1.0, 1, 0, 12345)
    tree.record_birth(1, 0, None, 100, 6, 80.0, 1.1, 1, 1, 12346)
    tree.record_birth(2, 1, None, 200, 7, 90.0, 1.2, 1, 2, 12347)
    tree.record_birth(3, 0, None, 150, 5, 85.0, 1.0, 1, 1, 12348)
    tree.record_birth(9, None, None, 0, 5, 100.0, 1.0, 2, 0, 99)
    return tree


def _speciation(enabled=True):
    return SpeciationConfig(
        speciation_enabled=enabled,
        min_genetic_distance=1,
        max_genetic_distance=5,
        boundary_mating_probability=0.5,
    )


def test_sex_random_roughly_balanced():
    draws = [Sex.random() for _ in range(1000)]
    males = draws.count(Sex.MALE)
    females = draws.count(Sex.FEMALE)
    assert 400 < males < 600
    assert 400 < females < 600


def test_sex_symbols():
    assert Sex.MALE.symbol() == "\u2642"
    assert Sex.FEMALE.symbol() == "\u2640"


def test_can_mate_opposite_sex():
    assert _can_mate(Sex.MALE, Sex.FEMALE) is True
    assert _can_mate(Sex.MALE, Sex.MALE) is False
    assert _can_mate(Sex.FEMALE, Sex.FEMALE) is False


def test_can_mate_distance():
    assert _can_mate(Sex.MALE, Sex.FEMALE, distance=1) is True
    assert _can_mate(Sex.MALE, Sex.FEMALE, distance=0) is True
    assert _can_mate(Sex.MALE, Sex.FEMALE, distance=2) is False


def test_can_mate_energy():
    assert _can_mate(Sex.MALE, Sex.FEMALE) is True
    assert _can_mate(Sex.MALE, Sex.FEMALE, e1=30.0) is False
    assert _can_mate(Sex.MALE, Sex.FEMALE, e1=30.0, e2=30.0) is False


def test_can_mate_cooldown():
    assert _can_mate(Sex.MALE, Sex.FEMALE) is True
    assert _can_mate(Sex.MALE, Sex.FEMALE, c1=10) is False
    assert _can_mate(Sex.MALE, Sex.FEMALE, c2=1) is False


def test_inbreeding_detection():
    assert SexualReproductionSystem.is_inbred(42, 42) is True
    assert SexualReproductionSystem.is_inbred(42, 43) is False


def test_inbreeding_penalty_from_config():
    config = SexualReproductionConfig(inbreeding_fitness_cost=0.45)
    assert SexualReproductionSystem.inbreeding_penalty(config) == 0.45
    assert SexualReproductionSystem.inbreeding_penalty(SexualReproductionConfig()) == 0.3


def test_default_config_values():
    config = SexualReproductionConfig()
    assert config.enabled is False
    assert config.min_energy == 50.0
    assert config.cooldown == 30
    assert config.max_mating_distance == 2


def test_mating_stats():
    system = SexualReproductionSystem()
    system.record_mating(False)
    system.record_mating(False)
    system.record_mating(True)
    system.record_failed_mating()

    assert system.total_matings == 3
    assert system.failed_matings == 1
    assert system.inbreeding_events == 1
    assert system.success_rate() == pytest.approx(0.75, abs=0.01)
    assert system.inbreeding_rate() == pytest.approx(0.333, abs=0.01)


def test_rates_are_zero_without_events():
    system = SexualReproductionSystem()
    assert system.success_rate() == 0.0
    assert system.inbreeding_rate() == 0.0
    assert system.speciation_block_rate() == 0.0


def test_speciation_block_rate_and_counters():
    system = SexualReproductionSystem()
    system.record_mating(False)
    system.record_speciation_block()
    system.record_boundary_zone_attempt()
    system.record_offspring()
    assert system.speciation_blocks == 1
    assert system.boundary_zone_attempts == 1
    assert system.total_offspring == 1
    assert system.speciation_block_rate() == pytest.approx(0.5)


def test_speciation_disabled_always_compatible():
    assert check_speciation_compatibility(2, 9, _tree(), _speciation(False)) == (True, 1.0)


def test_speciation_same_species():
    assert check_speciation_compatibility(0, 1, _tree(), _speciation()) == (True, 1.0)


def test_speciation_unrelated_incompatible():
    assert check_speciation_compatibility(2, 9, _tree(), _speciation()) == (False, 0.0)


def test_speciation_boundary_zone_interpolates():
    can, probability = check_speciation_compatibility(2, 3, _tree(), _speciation())
    assert can is True
    assert probability == pytest.approx(0.75)


def test_speciation_at_max_distance_incompatible():
    config = SpeciationConfig(True, 0, 3, 0.5)
    assert check_speciation_compatibility(2, 3, _tree(), config) == (False, 0.0)