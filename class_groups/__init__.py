"""
Class Groups - Balanced Student Grouping

Splits a class roster into near-equal groups that keep conflicting
students apart, using randomized multi-start search.
"""

__version__ = "1.0.0"
__author__ = "Class Groups Team"

# Export main classes for easy importing
from .partition_optimizer import (
    Entity,
    EntityRegistry,
    AffinityMatrix,
    Group,
    Partition,
    PartitionOptimizer,
    GroupCreator,
    GroupingArgs,
    GroupingError,
    InvalidArgumentError,
    IndexOutOfRangeError,
    NoValidPartitionError,
    compute_group_sizes,
    score_partition
)

from .roster_loader import ScoreTable, RosterFormatError, read_score_table, load_score_table
from .group_exporter import (
    PendingGroupSet,
    PendingGroupsError,
    to_name_groups,
    to_index_groups,
    render_group_display
)
from .acceptance import accept_groups
from .group_metrics import GroupMetrics
from .config_loader import create_group_creator_from_config, load_config, ConfigurationError

__all__ = [
    'Entity',
    'EntityRegistry',
    'AffinityMatrix',
    'Group',
    'Partition',
    'PartitionOptimizer',
    'GroupCreator',
    'GroupingArgs',
    'GroupingError',
    'InvalidArgumentError',
    'IndexOutOfRangeError',
    'NoValidPartitionError',
    'compute_group_sizes',
    'score_partition',
    'ScoreTable',
    'RosterFormatError',
    'read_score_table',
    'load_score_table',
    'PendingGroupSet',
    'PendingGroupsError',
    'to_name_groups',
    'to_index_groups',
    'render_group_display',
    'accept_groups',
    'GroupMetrics',
    'create_group_creator_from_config',
    'load_config',
    'ConfigurationError'
]
