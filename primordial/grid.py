"""Spatial grids: organism index, food amounts and food complexity."""

from __future__ import annotations

from enum import Enum
from itertools import product

import numpy as np

_rng = np.random.default_rng()

_FOOD_PRESENT = 0.1


def _uniform(low: float, high: float) -> float:
    if not low < high:
        raise ValueError(f"empty range: [{low}, {high})")
    return float(_rng.uniform(low, high))


class SpatialIndex:
    """Index of organism indices by cell, for fast neighbour queries."""

    def __init__(self, grid_size: int) -> None:
        self.grid_size = grid_size
        self._cells: list[list[list[int]]] = [
            [[] for _ in range(grid_size)] for _ in range(grid_size)
        ]

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    def clear(self) -> None:
        """Remove every entry."""
        for row in self._cells:
            for cell in row:
                cell.clear()

    def insert(self, x: int, y: int, org_idx: int) -> None:
        """Add an organism index at a cell; positions off the grid are ignored."""
        if self._in_bounds(x, y):
            self._cells[y][x].append(org_idx)

    def get(self, x: int, y: int) -> list[int]:
        """Organism indices at a cell (empty off the grid)."""
        if self._in_bounds(x, y):
            return list(self._cells[y][x])
        return []

    def _window(self, x: int, y: int, radius: int):
        x_min = max(x - radius, 0)
        x_max = min(x + radius, self.grid_size - 1)
        y_min = max(y - radius, 0)
        y_max = min(y + radius, self.grid_size - 1)
        return product(range(y_min, y_max + 1), range(x_min, x_max + 1))

    def query_radius(self, x: int, y: int, radius: int) -> list[int]:
        """All organism indices in the square of the given radius around a cell."""
        return [
            idx for cy, cx in self._window(x, y, radius) for idx in self._cells[cy][cx]
        ]

    def query_neighbors(self, x: int, y: int, radius: int) -> list[int]:
        """Like :meth:`query_radius` but leaving out the centre cell."""
        return [
            idx
            for cy, cx in self._window(x, y, radius)
            if (cx, cy) != (x, y)
            for idx in self._cells[cy][cx]
        ]

    def is_occupied(self, x: int, y: int) -> bool:
        return bool(self.get(x, y))

    def count_at(self, x: int, y: int) -> int:
        return len(self.get(x, y))


class FoodGrid:
    """Amount of food held in each cell, capped at ``max_food``."""

    def __init__(self, grid_size: int, max_food: float) -> None:
        self.grid_size = grid_size
        self.max_food = max_food
        self._cells = np.zeros((grid_size, grid_size), dtype=np.float64)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    def initialize(self, density: float) -> None:
        """Give each cell, with probability ``density``, a random amount below the cap."""
        mask = _rng.random(self._cells.shape) < density
        if not mask.any():
            return
        if self.max_food <= 0:
            raise ValueError("max_food must be positive to place food")
        self._cells[mask] = _rng.uniform(0.0, self.max_food, size=int(mask.sum()))

    def get(self, x: int, y: int) -> float:
        """Food at a cell (0 off the grid)."""
        if self._in_bounds(x, y):
            return float(self._cells[y, x])
        return 0.0

    def set(self, x: int, y: int, amount: float) -> None:
        """Set the food at a cell, clamped to [0, max_food]."""
        if self._in_bounds(x, y):
            self._cells[y, x] = min(max(amount, 0.0), self.max_food)

    def consume(self, x: int, y: int, max_amount: float) -> float:
        """Take up to ``max_amount`` from a cell and return how much was taken."""
        if not self._in_bounds(x, y):
            return 0.0
        consumed = min(float(self._cells[y, x]), max_amount)
        self._cells[y, x] -= consumed
        return consumed

    def regenerate(self, rate: float) -> None:
        """Add ``rate`` to every cell, up to the cap."""
        np.minimum(self._cells + rate, self.max_food, out=self._cells)

    def spawn_random(self, amount: float, probability: float) -> None:
        """Add ``amount`` to each cell with the given probability, up to the cap."""
        mask = _rng.random(self._cells.shape) < probability
        self._cells[mask] = np.minimum(self._cells[mask] + amount, self.max_food)

    def sense_direction(self, x: int, y: int, dx: int, dy: int, steps: int) -> float:
        """Sum of food in the ``steps`` cells beyond (x, y) in direction (dx, dy)."""
        return sum(
            (
                self.get(x + dx * k, y + dy * k)
                for k in range(1, steps + 1)
            ),
            0.0,
        )

    def total_food(self) -> float:
        return float(self._cells.sum())

    def size(self) -> int:
        return self.grid_size


class FoodTier(Enum):
    """Food complexity tier, which decides the brain needed to eat it."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"

    def energy(self) -> float:
        """Default energy value of this tier."""
        return self.energy_with_config(23.0, 27.0, 32.0)

    def energy_with_config(self, simple: float, medium: float, complex_: float) -> float:
        """Energy value chosen from the given per-tier values."""
        return {
            FoodTier.SIMPLE: simple,
            FoodTier.MEDIUM: medium,
            FoodTier.COMPLEX: complex_,
        }[self]

    def complexity_range(self) -> tuple[float, float]:
        """Default complexity range of this tier; neighbouring ranges overlap."""
        return {
            FoodTier.SIMPLE: (0.0, 0.25),
            FoodTier.MEDIUM: (0.20, 0.60),
            FoodTier.COMPLEX: (0.55, 1.0),
        }[self]

    def random_complexity_with_range(self, low: float, high: float) -> float:
        """A random complexity in [low, high)."""
        return _uniform(low, high)

    def random_complexity(self) -> float:
        """A random complexity within this tier's default range."""
        return _uniform(*self.complexity_range())

    @classmethod
    def from_complexity_with_thresholds(
        cls, complexity: float, simple_max: float, medium_max: float
    ) -> "FoodTier":
        if complexity < simple_max:
            return cls.SIMPLE
        if complexity < medium_max:
            return cls.MEDIUM
        return cls.COMPLEX

    @classmethod
    def from_complexity(cls, complexity: float) -> "FoodTier":
        return cls.from_complexity_with_thresholds(complexity, 0.25, 0.60)

    @classmethod
    def random_tier(cls) -> "FoodTier":
        """A tier drawn 40% simple, 40% medium, 20% complex."""
        roll = float(_rng.random())
        if roll < 0.40:
            return cls.SIMPLE
        if roll < 0.80:
            return cls.MEDIUM
        return cls.COMPLEX


class ComplexityGrid:
    """Complexity of the food in each cell, from 0 to 1."""

    def __init__(self, grid_size: int) -> None:
        self.grid_size = grid_size
        self._cells = np.zeros((grid_size, grid_size), dtype=np.float64)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    def get(self, x: int, y: int) -> float:
        if self._in_bounds(x, y):
            return float(self._cells[y, x])
        return 0.0

    def get_tier(self, x: int, y: int) -> FoodTier:
        return FoodTier.from_complexity(self.get(x, y))

    def set(self, x: int, y: int, complexity: float) -> None:
        """Set the complexity at a cell, clamped to [0, 1]."""
        if self._in_bounds(x, y):
            self._cells[y, x] = min(max(complexity, 0.0), 1.0)

    def set_tier(self, x: int, y: int, tier: FoodTier) -> None:
        """Give a cell a random complexity within the tier's range."""
        self.set(x, y, tier.random_complexity())

    def clear(self, x: int, y: int) -> None:
        if self._in_bounds(x, y):
            self._cells[y, x] = 0.0

    def initialize(self, food_grid: FoodGrid) -> None:
        """Give every cell holding food a complexity from a random tier; others get 0."""
        for y, x in product(range(self.grid_size), repeat=2):
            if food_grid.get(x, y) > _FOOD_PRESENT:
                self._cells[y, x] = FoodTier.random_tier().random_complexity()
            else:
                self._cells[y, x] = 0.0

    def size(self) -> int:
        return self.grid_size

    def count_by_tier(self, food_grid: FoodGrid) -> tuple[int, int, int]:
        """Number of food-holding cells per tier, as (simple, medium, complex)."""
        counts = {tier: 0 for tier in FoodTier}
        for y, x in product(range(self.grid_size), repeat=2):
            if food_grid.get(x, y) > _FOOD_PRESENT:
                counts[self.get_tier(x, y)] += 1
        return counts[FoodTier.SIMPLE], counts[FoodTier.MEDIUM], counts[FoodTier.COMPLEX]