"""
Configuration Loading System

Loads YAML configuration files and converts them into a configured
GroupCreator for the class grouping run.
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .partition_optimizer import SCORE_BY_POSITION, SCORE_MODES, GroupCreator, GroupingArgs
from .roster_loader import RosterFormatError, load_score_table, read_class_settings, read_score_table


DEFAULT_NUM_GROUPS = 5
DEFAULT_TRIALS = 1000


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError(f"Configuration file is empty: {config_path}")
    return config


def resolve_random_seed(random_seed: Any) -> int:
    """
    Turn the configured seed into an integer

    ``None`` and ``"random"`` produce a time-derived seed.
    """
    if random_seed is None or random_seed == "random":
        random_seed = int(time.time() * 1000000) % 2147483647
        print(f"Using random seed: {random_seed}")
    elif isinstance(random_seed, str) and random_seed.isdigit():
        random_seed = int(random_seed)
    elif not isinstance(random_seed, int) or isinstance(random_seed, bool):
        raise ConfigurationError(f"Invalid random_seed: {random_seed!r}")
    return random_seed


def resolve_roster_path(config: Dict[str, Any], base_dir: Union[str, Path] = ".") -> Path:
    """
    Find the roster table for the configured class

    Uses ``roster.path`` when given, otherwise looks the class up in the
    ``roster.settings_file`` table.
    """
    base_dir = Path(base_dir)
    roster_config = config.get("roster", {}) or {}

    if roster_config.get("path"):
        return _relative_to(base_dir, roster_config["path"])

    settings_file = roster_config.get("settings_file")
    if not settings_file:
        raise ConfigurationError("Roster configuration needs either 'path' or 'settings_file'")

    class_name = config.get("class_name")
    if not class_name:
        raise ConfigurationError("'class_name' is required to look up a roster in the settings file")

    class_column = roster_config.get("class_column", "Class")
    roster_column = roster_config.get("roster_column", "Roster")
    settings_path = _relative_to(base_dir, settings_file)

    try:
        settings = read_class_settings(settings_path, class_column)
    except (FileNotFoundError, RosterFormatError) as e:
        raise ConfigurationError(str(e))

    class_settings = settings.get(class_name)
    if class_settings is None:
        raise ConfigurationError(
            f"Could not find class '{class_name}' in settings file '{settings_path}'"
        )

    roster_file = (class_settings.get(roster_column) or "").strip()
    if not roster_file:
        raise ConfigurationError(
            f"Could not find roster for class '{class_name}' in column '{roster_column}' "
            f"of settings file '{settings_path}'"
        )

    return _relative_to(settings_path.parent, roster_file)


def _relative_to(base_dir: Path, path: Union[str, Path]) -> Path:
    path = Path(path)
    if not path.is_absolute():
        path = base_dir / path
    return path


def create_grouping_args(config: Dict[str, Any],
                         trials: Optional[int] = None,
                         num_groups: Optional[int] = None,
                         random_seed: Optional[Any] = None) -> GroupingArgs:
    """Build run arguments from config, with optional overrides"""
    grouping_config = config.get("grouping", {}) or {}

    if random_seed is None:
        random_seed = grouping_config.get("random_seed")

    return GroupingArgs(
        class_name=config.get("class_name", ""),
        num_groups=num_groups if num_groups is not None else grouping_config.get("num_groups", DEFAULT_NUM_GROUPS),
        trials=trials if trials is not None else grouping_config.get("trials", DEFAULT_TRIALS),
        random_seed=resolve_random_seed(random_seed),
        score_by=grouping_config.get("score_by", SCORE_BY_POSITION)
    )


def create_group_creator_from_config(config_path: str = "config.yaml",
                                     trials: Optional[int] = None,
                                     num_groups: Optional[int] = None,
                                     random_seed: Optional[Any] = None) -> GroupCreator:
    """
    Create a GroupCreator with its roster loaded from YAML configuration

    Args:
        config_path: Path to the configuration file
        trials: Override for grouping.trials
        num_groups: Override for grouping.num_groups
        random_seed: Override for grouping.random_seed

    Returns:
        GroupCreator in the loading state, roster already read
    """
    config = load_config(config_path)

    issues = validate_config(config)
    if issues:
        raise ConfigurationError("; ".join(issues))

    args = create_grouping_args(config, trials, num_groups, random_seed)
    roster_path = resolve_roster_path(config, Path(config_path).parent)

    try:
        table = read_score_table(roster_path)
    except FileNotFoundError as e:
        raise ConfigurationError(str(e))

    creator = GroupCreator(args)
    load_score_table(table, creator.registry, creator.matrix)
    creator.roster_path = roster_path
    return creator


def get_output_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Get output configuration"""
    config = load_config(config_path)
    return config.get("output", {}) or {}


def get_output_paths(config_path: str = "config.yaml") -> Tuple[Path, Path]:
    """
    Output directory and pending group set file, relative to the config file

    Returns:
        (output directory, pending file path)
    """
    output_config = get_output_config(config_path)
    base_dir = Path(config_path).parent

    output_dir = _relative_to(base_dir, output_config.get("directory", "output"))
    pending_file = output_config.get("pending_file")
    if pending_file:
        pending_path = _relative_to(base_dir, pending_file)
    else:
        pending_path = output_dir / "pending_groups.yaml"
    return output_dir, pending_path


def get_visualization_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Get visualization configuration"""
    config = load_config(config_path)
    return config.get("visualization", {}) or {}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    if "roster" not in config:
        issues.append("Missing required section: roster")
    else:
        roster_config = config["roster"] or {}
        if not roster_config.get("path") and not roster_config.get("settings_file"):
            issues.append("Roster section needs either 'path' or 'settings_file'")
        if roster_config.get("settings_file") and not roster_config.get("path") \
                and not config.get("class_name"):
            issues.append("'class_name' is required when using a settings file")

    grouping_config = config.get("grouping", {}) or {}

    num_groups = grouping_config.get("num_groups", DEFAULT_NUM_GROUPS)
    if not isinstance(num_groups, int) or num_groups <= 0:
        issues.append("grouping.num_groups must be a positive integer")

    trials = grouping_config.get("trials", DEFAULT_TRIALS)
    if not isinstance(trials, int) or trials <= 0:
        issues.append("grouping.trials must be a positive integer")

    score_by = grouping_config.get("score_by", SCORE_BY_POSITION)
    if score_by not in SCORE_MODES:
        issues.append(f"grouping.score_by must be one of: {', '.join(SCORE_MODES)}")

    return issues


def print_config_summary(config_path: str = "config.yaml"):
    """Print a summary of the configuration"""
    try:
        config = load_config(config_path)

        print("=" * 50)
        print("CONFIGURATION SUMMARY")
        print("=" * 50)

        print(f"Class: {config.get('class_name', 'N/A')}")

        roster_config = config.get("roster", {}) or {}
        if roster_config.get("path"):
            print(f"Roster: {roster_config['path']}")
        else:
            print(f"Roster settings: {roster_config.get('settings_file', 'N/A')}")

        grouping_config = config.get("grouping", {}) or {}
        print(f"Groups: {grouping_config.get('num_groups', DEFAULT_NUM_GROUPS)}")
        print(f"Trials: {grouping_config.get('trials', DEFAULT_TRIALS)}")
        random_seed = grouping_config.get('random_seed')
        print(f"Random seed: {'random' if random_seed is None else random_seed}")
        print(f"Score by: {grouping_config.get('score_by', SCORE_BY_POSITION)}")

        issues = validate_config(config)
        if issues:
            print(f"\nValidation Issues ({len(issues)}):")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print("\nConfiguration is valid ✓")

        print("=" * 50)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}")
