"""Phylogenetic tree tracking for complete lineage history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TreeNode:
    """One organism in the phylogenetic tree."""

    organism_id: int
    parent1_id: Optional[int]
    parent2_id: Optional[int]
    birth_time: int
    death_time: Optional[int]
    brain_complexity: int
    birth_energy: float
    birth_size: float
    peak_energy: float
    offspring_count: int
    kills: int
    lineage_id: int
    generation: int
    genome_hash: int

    def parents(self) -> list[int]:
        """Known parent ids, first parent first."""
        return [p for p in (self.parent1_id, self.parent2_id) if p is not None]

    def lifespan(self) -> Optional[int]:
        """Time from birth to death, or None while alive."""
        if self.death_time is None:
            return None
        return self.death_time - self.birth_time

    def is_alive(self) -> bool:
        return self.death_time is None


@dataclass
class PhylogenyStatistics:
    """Summary statistics of a phylogenetic tree."""

    total_organisms: int
    alive_organisms: int
    dead_organisms: int
    root_count: int
    max_generation: int
    unique_lineages: int
    average_lifespan: float
    average_offspring: float


@dataclass
class PhylogeneticTree:
    """Complete birth and death record of every organism in a simulation."""

    nodes: dict[int, TreeNode] = field(default_factory=dict)
    root_ids: list[int] = field(default_factory=list)
    max_generation: int = 0
    total_organisms: int = 0
    total_deaths: int = 0

    def record_birth(
        self,
        organism_id: int,
        parent1_id: Optional[int],
        parent2_id: Optional[int],
        time: int,
        brain_complexity: int,
        birth_energy: float,
        birth_size: float,
        lineage_id: int,
        generation: int,
        genome_hash: int,
    ) -> None:
        """Add a newly born organism; one without parents becomes a root."""
        self.nodes[organism_id] = TreeNode(
            organism_id=organism_id,
            parent1_id=parent1_id,
            parent2_id=parent2_id,
            birth_time=time,
            death_time=None,
            brain_complexity=brain_complexity,
            birth_energy=birth_energy,
            birth_size=birth_size,
            peak_energy=birth_energy,
            offspring_count=0,
            kills=0,
            lineage_id=lineage_id,
            generation=generation,
            genome_hash=genome_hash,
        )
        self.total_organisms += 1
        self.max_generation = max(self.max_generation, generation)
        if parent1_id is None and parent2_id is None:
            self.root_ids.append(organism_id)

    def record_death(self, organism_id: int, time: int) -> None:
        """Mark a known organism as dead at ``time``."""
        node = self.nodes.get(organism_id)
        if node is not None:
            node.death_time = time
            self.total_deaths += 1

    def update_peak_energy(self, organism_id: int, energy: float) -> None:
        node = self.nodes.get(organism_id)
        if node is not None and energy > node.peak_energy:
            node.peak_energy = energy

    def record_offspring(
        self, parent1_id: Optional[int], parent2_id: Optional[int]
    ) -> None:
        """Count one more offspring for each known parent."""
        for parent_id in (parent1_id, parent2_id):
            if parent_id is None:
                continue
            node = self.nodes.get(parent_id)
            if node is not None:
                node.offspring_count += 1

    def record_kill(self, organism_id: int) -> None:
        node = self.nodes.get(organism_id)
        if node is not None:
            node.kills += 1

    def get_ancestors(self, organism_id: int) -> list[int]:
        """Ancestors along the first-parent chain, nearest first."""
        ancestors = []
        node = self.nodes.get(organism_id)
        while node is not None and node.parent1_id is not None:
            ancestors.append(node.parent1_id)
            node = self.nodes.get(node.parent1_id)
        return ancestors

    def get_all_ancestors(self, organism_id: int) -> set[int]:
        """Every ancestor reachable through either parent."""
        ancestors: set[int] = set()
        to_visit = [organism_id]
        while to_visit:
            node = self.nodes.get(to_visit.pop())
            if node is None:
                continue
            for parent in node.parents():
                if parent not in ancestors:
                    ancestors.add(parent)
                    to_visit.append(parent)
        return ancestors

    def common_ancestor(self, id1: int, id2: int) -> Optional[int]:
        """A common ancestor of two organisms (either may be the other's ancestor)."""
        ancestors1 = self.get_all_ancestors(id1)
        ancestors1_with_self = ancestors1 | {id1}

        to_visit = [id2]
        visited: set[int] = set()
        while to_visit:
            current = to_visit.pop()
            if current in ancestors1_with_self:
                return current
            if current not in visited:
                visited.add(current)
                node = self.nodes.get(current)
                if node is not None:
                    to_visit.extend(node.parents())

        if id2 in ancestors1:
            return id2
        return None

    def genetic_distance(self, id1: int, id2: int) -> Optional[int]:
        """Generations from both organisms to their common ancestor, summed."""
        if id1 == id2:
            return 0
        mrca = self.common_ancestor(id1, id2)
        if mrca is None:
            return None
        dist1 = self._distance_to_ancestor(id1, mrca)
        dist2 = self._distance_to_ancestor(id2, mrca)
        if dist1 is None or dist2 is None:
            return None
        return dist1 + dist2

    def _distance_to_ancestor(self, organism_id: int, ancestor_id: int) -> Optional[int]:
        if organism_id == ancestor_id:
            return 0
        to_visit = [(organism_id, 0)]
        visited: set[int] = set()
        while to_visit:
            current, distance = to_visit.pop()
            if current == ancestor_id:
                return distance
            if current not in visited:
                visited.add(current)
                node = self.nodes.get(current)
                if node is not None:
                    to_visit.extend((p, distance + 1) for p in node.parents())
        return None

    def _children_map(self) -> dict[int, list[int]]:
        children: dict[int, list[int]] = {}
        for node_id, node in self.nodes.items():
            for parent in dict.fromkeys(node.parents()):
                children.setdefault(parent, []).append(node_id)
        return children

    def get_children(self, organism_id: int) -> list[int]:
        """Organisms that have ``organism_id`` as either parent."""
        return [
            node_id
            for node_id, node in self.nodes.items()
            if organism_id in (node.parent1_id, node.parent2_id)
        ]

    def get_descendants(self, organism_id: int) -> set[int]:
        """Every organism descended from ``organism_id``."""
        children = self._children_map()
        descendants: set[int] = set()
        to_visit = list(children.get(organism_id, []))
        while to_visit:
            current = to_visit.pop()
            if current not in descendants:
                descendants.add(current)
                to_visit.extend(children.get(current, []))
        return descendants

    def export_newick(self, root_id: int) -> str:
        """The subtree under ``root_id`` in Newick form, with generations as lengths."""
        children = self._children_map()
        stack: list[tuple[int, bool]] = [(root_id, False)]
        built: list[str] = []
        while stack:
            node_id, expanded = stack.pop()
            node = self.nodes.get(node_id)
            if node is None:
                built.append(str(node_id))
                continue
            kids = children.get(node_id, [])
            if not kids:
                built.append(f"{node_id}:{node.generation}")
            elif not expanded:
                stack.append((node_id, True))
                stack.extend((kid, False) for kid in reversed(kids))
            else:
                parts = built[-len(kids):]
                del built[-len(kids):]
                built.append(f"({','.join(parts)}){node_id}:{node.generation}")
        return built[0]

    def export_all_newick(self) -> list[str]:
        """One terminated Newick string per root."""
        return [f"{self.export_newick(root_id)};" for root_id in self.root_ids]

    def statistics(self) -> PhylogenyStatistics:
        nodes = list(self.nodes.values())
        alive = sum(1 for n in nodes if n.is_alive())
        dead = len(nodes) - alive

        lifespans = [n.lifespan() for n in nodes]
        avg_lifespan = (
            sum(span for span in lifespans if span is not None) / dead if dead else 0.0
        )
        avg_offspring = (
            sum(n.offspring_count for n in nodes) / len(nodes) if nodes else 0.0
        )

        return PhylogenyStatistics(
            total_organisms=len(nodes),
            alive_organisms=alive,
            dead_organisms=dead,
            root_count=len(self.root_ids),
            max_generation=self.max_generation,
            unique_lineages=len({n.lineage_id for n in nodes}),
            average_lifespan=avg_lifespan,
            average_offspring=avg_offspring,
        )

    def prune_dead_branches(self) -> None:
        """Drop every node that is neither alive nor an ancestor of a living one."""
        living = [node_id for node_id, node in self.nodes.items() if node.is_alive()]
        to_keep = set(living)
        for node_id in living:
            to_keep |= self.get_all_ancestors(node_id)

        self.nodes = {k: v for k, v in self.nodes.items() if k in to_keep}
        self.root_ids = [r for r in self.root_ids if r in to_keep]