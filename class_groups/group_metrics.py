"""
Group Metrics and Reporting System

Summarizes the quality of a winning partition and of the search that
found it.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .partition_optimizer import SCORE_BY_INDEX, SCORE_BY_POSITION, AffinityMatrix, Group, Partition, score_group


class GroupMetrics:
    """Metrics calculator for a calculated group set"""

    def __init__(self, matrix: AffinityMatrix, score_by: str = SCORE_BY_POSITION):
        self.matrix = matrix
        self.score_by = score_by

    def analyze_partition(self,
                          partition: Partition,
                          trial_scores: Optional[Sequence[float]] = None,
                          best_score_history: Optional[Sequence[float]] = None) -> Dict[str, Any]:
        """
        Analysis of a partition and, optionally, of the trials behind it

        Returns:
            Dictionary containing all metrics
        """
        metrics = {
            'total_score': partition.score,
            'group_metrics': self._analyze_groups(partition),
            'size_balance': self._analyze_size_balance(partition),
            'registry_index_score': self._registry_index_score(partition),
        }

        if trial_scores:
            metrics['trial_statistics'] = self._analyze_trials(trial_scores, best_score_history)

        return metrics

    def _analyze_groups(self, partition: Partition) -> List[Dict[str, Any]]:
        groups = []
        for group_number, group in enumerate(partition.groups, start=1):
            groups.append({
                'group': group_number,
                'capacity': group.capacity,
                'size': len(group),
                'members': [member.name for member in group.members],
                'score': score_group(group, self.matrix, self.score_by),
                'registry_index_score': self._registry_index_group_score(group),
            })
        return groups

    def _analyze_size_balance(self, partition: Partition) -> Dict[str, Any]:
        sizes = [len(group) for group in partition.groups]
        return {
            'sizes': sizes,
            'min_size': min(sizes) if sizes else 0,
            'max_size': max(sizes) if sizes else 0,
            'balanced': (max(sizes) - min(sizes) <= 1) if sizes else True,
        }

    def _registry_index_group_score(self, group: Group) -> float:
        return score_group(group, self.matrix, SCORE_BY_INDEX)

    def _registry_index_score(self, partition: Partition) -> float:
        """Score of the same groups looked up by each member's registry index"""
        return sum(self._registry_index_group_score(group) for group in partition.groups)

    def _analyze_trials(self,
                        trial_scores: Sequence[float],
                        best_score_history: Optional[Sequence[float]]) -> Dict[str, Any]:
        scores = np.asarray(trial_scores, dtype=float)
        stats = {
            'trials': int(scores.size),
            'best': float(scores.min()),
            'worst': float(scores.max()),
            'mean': float(scores.mean()),
            'std': float(scores.std()),
            'best_found_at_trial': int(scores.argmin()) + 1,
        }
        if best_score_history:
            history = np.asarray(best_score_history, dtype=float)
            stats['improvements'] = int(np.count_nonzero(np.diff(history) < 0))
        return stats


def print_group_report(metrics: Dict[str, Any]) -> str:
    """Plain-text report of group metrics"""
    lines = []
    lines.append("=" * 60)
    lines.append("GROUP SET REPORT")
    lines.append("=" * 60)
    lines.append(f"Total score: {metrics['total_score']:.2f}")

    balance = metrics['size_balance']
    lines.append(f"Group sizes: {balance['sizes']} "
                 f"({'balanced' if balance['balanced'] else 'UNBALANCED'})")

    lines.append("")
    lines.append("Per-group scores:")
    for group in metrics['group_metrics']:
        lines.append(f"  Group {group['group']}: {group['size']}/{group['capacity']} members, "
                     f"score {group['score']:.2f}")

    lines.append("")
    lines.append(f"Score by registry index: {metrics['registry_index_score']:.2f}")

    trial_stats = metrics.get('trial_statistics')
    if trial_stats:
        lines.append("")
        lines.append("Search statistics:")
        lines.append(f"  Trials: {trial_stats['trials']}")
        lines.append(f"  Best / mean / worst: {trial_stats['best']:.2f} / "
                     f"{trial_stats['mean']:.2f} / {trial_stats['worst']:.2f}")
        lines.append(f"  Std dev: {trial_stats['std']:.2f}")
        lines.append(f"  Best found at trial: {trial_stats['best_found_at_trial']}")
        if 'improvements' in trial_stats:
            lines.append(f"  Improvements: {trial_stats['improvements']}")

    lines.append("=" * 60)
    return "\n".join(lines)
