"""
Group Export System

Projects a winning partition into plain name and index lists, renders the
numbered listing shown for approval, and persists the pending group set
until it is accepted.
"""

import csv
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .partition_optimizer import Partition


class PendingGroupsError(Exception):
    """Raised when a pending group set is missing or malformed"""
    pass


def to_name_groups(partition: Partition) -> List[List[str]]:
    """Member names per group, in group order then insertion order"""
    return [[member.name for member in group.members] for group in partition.groups]


def to_index_groups(partition: Partition) -> List[List[int]]:
    """Member registry indices per group, aligned with to_name_groups"""
    return [[member.index for member in group.members] for group in partition.groups]


@dataclass
class PendingGroupSet:
    """
    A calculated group set waiting for approval.

    Attributes:
        class_name: Class the groups were made for
        roster_path: Roster table the scores came from
        name_groups: Member names per group
        index_groups: Member indices per group
        score: Total intra-group score of the set
        random_seed: Seed the search ran with
        created_at: When the set was calculated
    """
    class_name: str
    roster_path: str
    name_groups: List[List[str]]
    index_groups: List[List[int]]
    score: float
    random_seed: Optional[int] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        if len(self.name_groups) != len(self.index_groups):
            raise PendingGroupsError("Name and index groups must have the same number of groups")
        for names, indices in zip(self.name_groups, self.index_groups):
            if len(names) != len(indices):
                raise PendingGroupsError("Name and index groups must be aligned group for group")

    @classmethod
    def from_partition(cls,
                       partition: Partition,
                       class_name: str,
                       roster_path: Union[str, Path],
                       random_seed: Optional[int] = None) -> "PendingGroupSet":
        return cls(
            class_name=class_name,
            roster_path=str(roster_path),
            name_groups=to_name_groups(partition),
            index_groups=to_index_groups(partition),
            score=float(partition.score),
            random_seed=random_seed
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'class_name': self.class_name,
            'roster_path': self.roster_path,
            'score': self.score,
            'random_seed': self.random_seed,
            'created_at': self.created_at,
            'name_groups': self.name_groups,
            'index_groups': self.index_groups,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingGroupSet":
        try:
            return cls(
                class_name=data['class_name'],
                roster_path=data['roster_path'],
                name_groups=[list(group) for group in data['name_groups']],
                index_groups=[[int(i) for i in group] for group in data['index_groups']],
                score=float(data['score']),
                random_seed=data.get('random_seed'),
                created_at=data.get('created_at', '')
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PendingGroupsError(f"Invalid pending group set: {e}")


def save_pending_groups(pending: PendingGroupSet, output_path: Union[str, Path]) -> Path:
    """Write the pending group set to a YAML sidecar, replacing any earlier one"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.dump(pending.to_dict(), f, default_flow_style=False, sort_keys=False)

    return output_path


def load_pending_groups(pending_path: Union[str, Path]) -> PendingGroupSet:
    """
    Read a pending group set.

    Raises:
        PendingGroupsError: If there is no pending set or it can't be parsed
    """
    pending_path = Path(pending_path)

    if not pending_path.exists():
        raise PendingGroupsError(
            f"No pending group set at {pending_path}. Calculate groups first."
        )

    try:
        with open(pending_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PendingGroupsError(f"Invalid YAML in pending group set: {e}")

    if not isinstance(data, dict):
        raise PendingGroupsError(f"Pending group set is empty: {pending_path}")

    return PendingGroupSet.from_dict(data)


def render_group_display(name_groups: List[List[str]]) -> str:
    """Numbered group listing shown before a set is accepted"""
    lines = []
    for group_number, names in enumerate(name_groups, start=1):
        lines.append(f"Group {group_number}")
        for position, name in enumerate(names, start=1):
            lines.append(f"  {position}. {name}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def export_groups_csv(pending: PendingGroupSet, output_path: Union[str, Path]) -> str:
    """Export the group set as group,position,name,index rows"""
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['group', 'position', 'name', 'index'])

        for group_number, (names, indices) in enumerate(
                zip(pending.name_groups, pending.index_groups), start=1):
            for position, (name, index) in enumerate(zip(names, indices), start=1):
                writer.writerow([group_number, position, name, index])

    return str(output_file)
