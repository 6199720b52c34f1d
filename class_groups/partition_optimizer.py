"""
Balanced Group Partition Optimizer

Splits a roster of students into a fixed number of near-equal-size groups
while keeping the total intra-group conflict score low. Uses pure random
multi-start search: every trial builds a fresh random partition and the
lowest-scoring one is kept.
"""

from typing import List, Dict, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np


SCORE_BY_POSITION = "position"
SCORE_BY_INDEX = "index"
SCORE_MODES = (SCORE_BY_POSITION, SCORE_BY_INDEX)


class GroupingError(Exception):
    """Base class for grouping failures"""
    pass


class InvalidArgumentError(GroupingError, ValueError):
    """Raised for non-positive group or trial counts"""
    pass


class IndexOutOfRangeError(GroupingError, IndexError):
    """Raised when the affinity matrix is read outside its triangle"""
    pass


class NoValidPartitionError(GroupingError):
    """Raised when the roster cannot fill the requested groups"""
    pass


@dataclass(frozen=True)
class Entity:
    """A roster entry with its row/column position in the affinity matrix"""
    name: str
    index: int


class EntityRegistry:
    """Deduplicates roster names and hands out stable indices"""

    def __init__(self):
        self._entities: List[Entity] = []
        self._by_name: Dict[str, Entity] = {}
        self._frozen = False

    def register(self, name: str) -> Entity:
        """
        Return the entity for a name, creating it on first sight

        Args:
            name: Exact, case-sensitive roster name

        Returns:
            The canonical Entity for this name
        """
        existing = self._by_name.get(name)
        if existing is not None:
            return existing

        if self._frozen:
            raise GroupingError(f"Cannot register '{name}' after the search has started")

        entity = Entity(name=name, index=len(self._entities))
        self._entities.append(entity)
        self._by_name[name] = entity
        return entity

    def get(self, name: str) -> Optional[Entity]:
        return self._by_name.get(name)

    def all_entities(self) -> List[Entity]:
        """Entities in first-seen order"""
        return list(self._entities)

    def freeze(self):
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name


class AffinityMatrix:
    """
    Jagged triangular store of pairwise scores

    Row ``i`` holds the scores between entity ``i`` and every entity
    registered after it, so ``relationships[i][j]`` is the score for the
    pair ``(i, i + j + 1)``.
    """

    def __init__(self):
        self.relationships: List[List[float]] = []
        self._frozen = False

    def append(self, row_scores: Sequence[float]):
        """Append the scores for the next row entity"""
        if self._frozen:
            raise GroupingError("Cannot append scores after the search has started")
        self.relationships.append([float(score) for score in row_scores])

    def score_between(self, i: int, j: int) -> float:
        """
        Score for the pair (i, j), which must satisfy i < j

        Raises:
            IndexOutOfRangeError: If i >= j or the pair lies outside the
                populated triangle
        """
        if i < 0 or i >= j:
            raise IndexOutOfRangeError(f"score_between requires 0 <= i < j, got i={i}, j={j}")
        if i >= len(self.relationships):
            raise IndexOutOfRangeError(f"Row {i} not loaded ({len(self.relationships)} rows)")

        row = self.relationships[i]
        offset = j - i - 1
        if offset >= len(row):
            raise IndexOutOfRangeError(
                f"Offset {offset} beyond row {i} length {len(row)}"
            )
        return row[offset]

    def check_complete(self, entity_count: int):
        """Verify every row holds exactly the scores to later entities"""
        if len(self.relationships) != entity_count:
            raise IndexOutOfRangeError(
                f"Matrix has {len(self.relationships)} rows for {entity_count} entities"
            )
        for i, row in enumerate(self.relationships):
            expected = entity_count - i - 1
            if len(row) != expected:
                raise IndexOutOfRangeError(
                    f"Row {i} has {len(row)} scores, expected {expected}"
                )

    def as_square_array(self) -> np.ndarray:
        """Symmetric square view with a zero diagonal"""
        n = len(self.relationships)
        square = np.zeros((n, n))
        for i, row in enumerate(self.relationships):
            for offset, score in enumerate(row):
                j = i + offset + 1
                if j < n:
                    square[i, j] = score
                    square[j, i] = score
        return square

    def freeze(self):
        self._frozen = True

    def __len__(self) -> int:
        return len(self.relationships)


def compute_group_sizes(total_entities: int, num_groups: int) -> List[int]:
    """
    Size of each group, with earlier groups absorbing any remainder

    Example:
        >>> compute_group_sizes(7, 3)
        [3, 2, 2]
    """
    if num_groups <= 0:
        raise InvalidArgumentError(f"Number of groups must be positive, got {num_groups}")
    if total_entities < 0:
        raise InvalidArgumentError(f"Number of entities cannot be negative, got {total_entities}")

    sizes = []
    remaining = total_entities

    for i in range(num_groups):
        remaining_groups = num_groups - i
        group_size = remaining // remaining_groups

        # Odd count left over for the remaining groups
        if remaining % remaining_groups > 0:
            group_size += 1

        sizes.append(group_size)
        remaining -= group_size

    return sizes


@dataclass
class Group:
    """Size-capped, insertion-ordered set of members"""
    capacity: int
    members: List[Entity] = field(default_factory=list)

    def add_if_possible(self, entity: Entity) -> bool:
        """Add the entity unless the group is full"""
        if len(self.members) < self.capacity:
            self.members.append(entity)
            return True
        return False

    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    def __contains__(self, entity: Entity) -> bool:
        return entity in self.members

    def __len__(self) -> int:
        return len(self.members)


class Partition:
    """One candidate assignment of the roster to N groups"""

    def __init__(self, sizes: Sequence[int]):
        self._groups = [Group(capacity=size) for size in sizes]
        self.score: Optional[float] = None

    @property
    def groups(self) -> List[Group]:
        return self._groups

    def insert_into_random_group(self, entity: Entity, rng: np.random.Generator) -> bool:
        """
        Try to add the entity to a uniformly drawn group

        The draw covers all groups, full ones included; a full group
        rejects the entity and the caller draws again.
        """
        group = self._groups[int(rng.integers(len(self._groups)))]
        return group.add_if_possible(entity)

    def place(self, entity: Entity, rng: np.random.Generator):
        """Redraw until some group accepts the entity"""
        while not self.insert_into_random_group(entity, rng):
            pass

    def total_capacity(self) -> int:
        return sum(group.capacity for group in self._groups)

    def member_count(self) -> int:
        return sum(len(group) for group in self._groups)

    def group_of(self, name: str) -> Optional[int]:
        """Index of the group holding ``name``, if any"""
        for group_index, group in enumerate(self._groups):
            if any(member.name == name for member in group.members):
                return group_index
        return None

    def __len__(self) -> int:
        return len(self._groups)


def score_group(group: Group, matrix: AffinityMatrix, score_by: str = SCORE_BY_POSITION) -> float:
    """
    Sum of pair scores inside one group

    With ``score_by="position"`` the matrix is read with each member's
    position inside the group; with ``score_by="index"`` it is read with
    each member's registry index.
    """
    members = group.members
    total = 0.0
    for position1 in range(len(members)):
        for position2 in range(position1 + 1, len(members)):
            if score_by == SCORE_BY_POSITION:
                total += matrix.score_between(position1, position2)
            else:
                i = min(members[position1].index, members[position2].index)
                j = max(members[position1].index, members[position2].index)
                total += matrix.score_between(i, j)
    return total


def score_partition(partition: Partition, matrix: AffinityMatrix, score_by: str = SCORE_BY_POSITION) -> float:
    """Total intra-group score over all groups"""
    return sum(score_group(group, matrix, score_by) for group in partition.groups)


def check_score_by(score_by: str) -> str:
    if score_by not in SCORE_MODES:
        raise InvalidArgumentError(
            f"Invalid score_by: '{score_by}'. Must be one of {', '.join(SCORE_MODES)}"
        )
    return score_by


class PartitionOptimizer:
    """Random multi-start search for a low-scoring partition"""

    def __init__(self,
                 trials: int = 1000,
                 random_seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None,
                 score_by: str = SCORE_BY_POSITION):
        """
        Initialize optimizer

        Args:
            trials: Number of independent random partitions to try
            random_seed: Seed for reproducible runs (ignored if rng given)
            rng: Explicit random generator to draw group indices from
            score_by: Matrix lookup for pair scores, "position" or "index"
        """
        if trials <= 0:
            raise InvalidArgumentError(f"Number of trials must be positive, got {trials}")

        self.trials = trials
        self.random_seed = random_seed
        self.rng = rng if rng is not None else np.random.default_rng(random_seed)
        self.score_by = check_score_by(score_by)
        self.best_score_history: List[float] = []
        self.trial_scores: List[float] = []

    def run(self,
            entities: Sequence[Entity],
            matrix: AffinityMatrix,
            sizes: Sequence[int],
            trials: Optional[int] = None) -> Partition:
        """
        Build ``trials`` random partitions and return the lowest-scoring one

        Ties keep the earliest partition. Entities are placed in the order
        given.
        """
        if trials is None:
            trials = self.trials
        if trials <= 0:
            raise InvalidArgumentError(f"Number of trials must be positive, got {trials}")

        if entities and not sizes:
            raise NoValidPartitionError(f"Cannot place {len(entities)} entities into zero groups")
        if not entities and sizes:
            raise NoValidPartitionError(f"No entities to place into {len(sizes)} groups")
        if sum(sizes) != len(entities):
            raise NoValidPartitionError(
                f"Group capacity {sum(sizes)} does not match entity count {len(entities)}"
            )

        best: Optional[Partition] = None
        self.best_score_history = []
        self.trial_scores = []

        for _ in range(trials):
            partition = Partition(sizes)
            for entity in entities:
                partition.place(entity, self.rng)

            partition.score = score_partition(partition, matrix, self.score_by)
            self.trial_scores.append(partition.score)

            if best is None or partition.score < best.score:
                best = partition

            self.best_score_history.append(best.score)

        return best


@dataclass
class GroupingArgs:
    """Parameters that define one grouping run"""
    class_name: str = ""
    num_groups: int = 5
    trials: int = 1000
    random_seed: Optional[int] = None
    score_by: str = SCORE_BY_POSITION


class GroupCreator:
    """
    Drives a grouping run from roster load to the winning partition

    The run has two states: loading, while roster names and scores are
    added, and searching, once ``calculate_groups`` freezes the registry
    and matrix.
    """

    def __init__(self, args: Optional[GroupingArgs] = None):
        self.args = args if args is not None else GroupingArgs()
        if self.args.num_groups <= 0:
            raise InvalidArgumentError(f"Number of groups must be positive, got {self.args.num_groups}")
        if self.args.trials <= 0:
            raise InvalidArgumentError(f"Number of trials must be positive, got {self.args.trials}")

        self.registry = EntityRegistry()
        self.matrix = AffinityMatrix()
        self.optimizer = PartitionOptimizer(
            trials=self.args.trials,
            random_seed=self.args.random_seed,
            score_by=self.args.score_by
        )
        self.minimum_group_set: Optional[Partition] = None
        self.roster_path = None

    @property
    def searching(self) -> bool:
        return self.registry.frozen

    def add_student(self, name: str) -> Entity:
        return self.registry.register(name)

    def add_relationships(self, row_scores: Sequence[float]):
        self.matrix.append(row_scores)

    def group_sizes(self) -> List[int]:
        return compute_group_sizes(len(self.registry), self.args.num_groups)

    def calculate_groups(self) -> Partition:
        """Freeze the roster and search for the minimum-score group set"""
        if not self.searching:
            self.matrix.check_complete(len(self.registry))
            self.registry.freeze()
            self.matrix.freeze()

        self.minimum_group_set = self.optimizer.run(
            self.registry.all_entities(),
            self.matrix,
            self.group_sizes()
        )
        return self.minimum_group_set
