"""
Visualization for Class Groups

Plots the roster score matrix reordered by group, per-group scores and the
best score found across trials.
"""

import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .partition_optimizer import AffinityMatrix, EntityRegistry, Partition


class GroupVisualizer:
    """Visualization system for calculated group sets"""

    def __init__(self, registry: EntityRegistry, matrix: AffinityMatrix):
        self.registry = registry
        self.matrix = matrix

    def plot_comprehensive_analysis(self,
                                    partition: Partition,
                                    metrics: Dict[str, Any],
                                    best_score_history: Optional[Sequence[float]] = None,
                                    figsize: Tuple[int, int] = (14, 6),
                                    save_path: Optional[str] = None,
                                    show: bool = False):
        """
        Create a multi-panel visualization

        Args:
            partition: Winning partition
            metrics: Analysis metrics from GroupMetrics
            best_score_history: Best score after each trial
            figsize: Figure size (width, height)
            save_path: Optional path to save the figure
            show: Display the figure interactively
        """
        fig = plt.figure(figsize=figsize)
        gs = fig.add_gridspec(2, 2, width_ratios=[3, 2])

        ax_heatmap = fig.add_subplot(gs[:, 0])
        self.plot_grouped_heatmap(partition, ax_heatmap)

        ax_groups = fig.add_subplot(gs[0, 1])
        self.plot_group_scores(metrics, ax_groups)

        ax_history = fig.add_subplot(gs[1, 1])
        self.plot_score_history(best_score_history or [], ax_history)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()
        else:
            plt.close(fig)

        return fig

    def group_order(self, partition: Partition) -> List[int]:
        """Registry indices ordered group by group"""
        return [member.index for group in partition.groups for member in group.members]

    def plot_grouped_heatmap(self, partition: Partition, ax: plt.Axes = None):
        """Score matrix with rows and columns ordered by group"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(8, 8))

        order = self.group_order(partition)
        square = self.matrix.as_square_array()
        if order:
            square = square[np.ix_(order, order)]

        im = ax.imshow(square, cmap='YlOrRd', aspect='equal')
        plt.colorbar(im, ax=ax, label='Pair score')

        entities = self.registry.all_entities()
        names = [entities[index].name for index in order]
        ax.set_xticks(range(len(names)))
        ax.set_yticks(range(len(names)))
        ax.set_xticklabels(names, rotation=90, fontsize=7)
        ax.set_yticklabels(names, fontsize=7)

        # Outline each group's block on the diagonal
        start = 0
        for group in partition.groups:
            size = len(group)
            if size:
                ax.add_patch(patches.Rectangle(
                    (start - 0.5, start - 0.5), size, size,
                    fill=False, edgecolor='blue', linewidth=2
                ))
            start += size

        ax.set_title('Pair Scores Ordered by Group')
        return ax

    def plot_group_scores(self, metrics: Dict[str, Any], ax: plt.Axes = None):
        """Bar chart of each group's intra-group score"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(6, 4))

        group_metrics = metrics.get('group_metrics', [])
        labels = [f"G{group['group']}" for group in group_metrics]
        scores = [group['score'] for group in group_metrics]

        bars = ax.bar(range(len(labels)), scores, color='steelblue', alpha=0.7)
        for bar, score in zip(bars, scores):
            ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                    f'{score:g}', ha='center', va='bottom', fontsize=8)

        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels)
        ax.set_ylabel('Score')
        ax.set_title('Score by Group')
        return ax

    def plot_score_history(self, best_score_history: Sequence[float], ax: plt.Axes = None):
        """Best score found so far after each trial"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(6, 4))

        if best_score_history:
            trials = np.arange(1, len(best_score_history) + 1)
            ax.step(trials, best_score_history, where='post', color='darkred')
        else:
            ax.text(0.5, 0.5, 'No trial history', ha='center', va='center',
                    transform=ax.transAxes)

        ax.set_xlabel('Trial')
        ax.set_ylabel('Best score')
        ax.set_title('Best Score by Trial')
        ax.grid(True, alpha=0.3)
        return ax
