"""
Group acceptance.

Once a pending group set is approved, every pair of students placed
together gets its stored score raised by one, so the next calculation is
less likely to put them together again.
"""

from pathlib import Path
from typing import List, Optional, Union

from .group_exporter import PendingGroupSet, PendingGroupsError
from .roster_loader import ScoreTable, read_score_table, validate_score_table, write_score_table


def format_acceptance_summary(class_name: str, name_groups: List[List[str]]) -> str:
    """Plain-text announcement of the accepted groups"""
    body = f"Next {class_name} groups:\n"
    for group_number, names in enumerate(name_groups, start=1):
        body += f"Group #{group_number}\n"
        for name in names:
            body += f"\t{name}\n"
        body += "\n"
    return body


def apply_acceptance(pending: PendingGroupSet, table: ScoreTable, increment: float = 1.0) -> int:
    """
    Raise the stored score for every intra-group pair.

    The cell the loader reads (row of the lower index, column of the
    higher index) is raised and its mirror below the diagonal is set to
    the same value.

    Args:
        pending: Accepted group set
        table: Roster table the set was calculated from
        increment: Amount added to each pair score

    Returns:
        Number of pair scores updated
    """
    validate_score_table(table)

    for names, indices in zip(pending.name_groups, pending.index_groups):
        for name, index in zip(names, indices):
            if index < 0 or index >= len(table) or table.row_names[index] != name:
                raise PendingGroupsError(
                    f"Student '{name}' is no longer at position {index} of the roster. "
                    f"Recalculate groups before accepting."
                )

    updated = 0
    for indices in pending.index_groups:
        for position1 in range(len(indices)):
            for position2 in range(position1 + 1, len(indices)):
                row = min(indices[position1], indices[position2])
                column = max(indices[position1], indices[position2])
                value = table.get_value(row, column) + increment
                table.set_value(row, column, value)
                table.set_value(column, row, value)
                updated += 1

    return updated


def accept_groups(
    pending: PendingGroupSet,
    roster_path: Optional[Union[str, Path]] = None,
    increment: float = 1.0
) -> str:
    """
    Accept a pending group set and write the updated roster.

    Args:
        pending: Group set to accept
        roster_path: Roster table to update (defaults to the set's own)
        increment: Amount added to each pair score

    Returns:
        Summary body listing the accepted groups
    """
    roster_path = Path(roster_path or pending.roster_path)
    table = read_score_table(roster_path)
    apply_acceptance(pending, table, increment)
    write_score_table(table, roster_path)

    return format_acceptance_summary(pending.class_name, pending.name_groups)
