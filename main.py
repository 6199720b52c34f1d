#!/usr/bin/env python3
"""
Class Groups - Balanced Student Grouping

Main entry point for calculating and accepting class groups.
Calculating writes a pending group set; accepting it records the
pairings back into the roster so they are less likely to repeat.
"""

import sys
import argparse
import time
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from class_groups.config_loader import (
    create_group_creator_from_config,
    print_config_summary,
    get_output_paths,
    get_visualization_config
)
from class_groups.group_exporter import (
    PendingGroupSet,
    export_groups_csv,
    load_pending_groups,
    render_group_display,
    save_pending_groups
)
from class_groups.group_metrics import GroupMetrics, print_group_report
from class_groups.acceptance import accept_groups


def pending_file_path(config_path):
    return get_output_paths(config_path)[1]


def run_calculation(config_path="config.yaml", trials=None, num_groups=None, random_seed=None,
                    output_name=None, show_summary=True):
    """Calculate a group set and save it for approval"""
    if show_summary:
        print("=" * 60)
        print("CLASS GROUPS")
        print("=" * 60)
        print_config_summary(config_path)

    creator = create_group_creator_from_config(config_path, trials, num_groups, random_seed)
    print(f"\nLoaded {len(creator.registry)} students from {creator.roster_path}")

    print(f"Calculating {creator.args.num_groups} groups over {creator.args.trials} trials...")
    start_time = time.time()
    partition = creator.calculate_groups()
    elapsed_time = time.time() - start_time
    print(f"Search completed in {elapsed_time:.3f} seconds")

    pending = PendingGroupSet.from_partition(
        partition,
        class_name=creator.args.class_name,
        roster_path=Path(creator.roster_path).resolve(),
        random_seed=creator.args.random_seed
    )

    print(f"\nBest score: {pending.score:g}")
    print()
    print(render_group_display(pending.name_groups))

    pending_path = save_pending_groups(pending, pending_file_path(config_path))
    print(f"Pending group set saved to {pending_path}")
    print("Run with --accept to accept these groups, or run again to recalculate.")

    if output_name is None:
        output_name = f"groups_{int(time.time())}"

    output_dir, _ = get_output_paths(config_path)
    try:
        csv_path = export_groups_csv(pending, output_dir / f"{output_name}.csv")
        print(f"  ✓ CSV: {csv_path}")
    except OSError as e:
        print(f"  ✗ CSV: Failed - {e}")

    return creator, partition


def run_detailed_analysis(config_path="config.yaml", trials=None, num_groups=None, random_seed=None,
                          output_name=None, visualize=False):
    """Calculate groups with a metrics report and optional plot"""
    creator, partition = run_calculation(config_path, trials, num_groups, random_seed, output_name)

    print("\nAnalyzing group set...")
    metrics = GroupMetrics(creator.matrix, creator.optimizer.score_by).analyze_partition(
        partition,
        creator.optimizer.trial_scores,
        creator.optimizer.best_score_history
    )
    print("\n" + print_group_report(metrics))

    if visualize:
        print("\nGenerating visualization plot...")
        # Non-interactive backend to avoid display issues
        import matplotlib
        matplotlib.use('Agg')
        from class_groups.visualization import GroupVisualizer

        vis_config = get_visualization_config(config_path)
        output_dir, _ = get_output_paths(config_path)
        output_dir.mkdir(parents=True, exist_ok=True)
        plot_path = output_dir / f"{output_name or 'groups'}_plot.png"

        visualizer = GroupVisualizer(creator.registry, creator.matrix)
        visualizer.plot_comprehensive_analysis(
            partition,
            metrics,
            creator.optimizer.best_score_history,
            figsize=tuple(vis_config.get('figure_size', [14, 6])),
            save_path=str(plot_path)
        )
        print(f"  ✓ Plot: {plot_path}")

    return creator, partition, metrics


def run_acceptance(config_path="config.yaml"):
    """Accept the pending group set"""
    pending_path = pending_file_path(config_path)
    pending = load_pending_groups(pending_path)

    print("=" * 60)
    print(f"ACCEPTING GROUPS FOR {pending.class_name or 'CLASS'}")
    print("=" * 60)

    summary = accept_groups(pending)
    print(summary)
    print(f"Roster updated: {pending.roster_path}")

    pending_path.unlink()
    return summary


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Class Groups - Balanced Student Grouping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py                               # Calculate groups (pending set + CSV)
  python3 main.py --detailed                    # With metrics report
  python3 main.py --visualize                   # With metrics report + plot
  python3 main.py --trials 5000 --groups 6      # Override search settings
  python3 main.py --seed 42                     # Reproducible run
  python3 main.py --accept                      # Accept the pending group set
  python3 main.py --config period3.yaml         # Custom config file
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config.yaml',
        help='Configuration file path (default: config.yaml)'
    )

    parser.add_argument(
        '--detailed', '-d',
        action='store_true',
        help='Print a metrics report'
    )

    parser.add_argument(
        '--visualize', '-v',
        action='store_true',
        help='Save a visualization plot (implies --detailed)'
    )

    parser.add_argument(
        '--trials', '-t',
        type=int,
        metavar='N',
        help='Number of random group sets to try'
    )

    parser.add_argument(
        '--groups', '-g',
        type=int,
        metavar='N',
        help='Number of groups to create'
    )

    parser.add_argument(
        '--seed', '-s',
        metavar='SEED',
        help='Random seed (integer or "random")'
    )

    parser.add_argument(
        '--accept', '-a',
        action='store_true',
        help='Accept the pending group set and update the roster'
    )

    parser.add_argument(
        '--output-name', '-n',
        type=str,
        metavar='NAME',
        help='Base name for output files (default: groups_TIMESTAMP)'
    )

    args = parser.parse_args()

    try:
        if args.accept:
            run_acceptance(args.config)
        elif args.detailed or args.visualize:
            run_detailed_analysis(args.config, args.trials, args.groups, args.seed,
                                  args.output_name, visualize=args.visualize)
        else:
            run_calculation(args.config, args.trials, args.groups, args.seed, args.output_name)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
