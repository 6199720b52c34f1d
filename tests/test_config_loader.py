"""
Tests for YAML configuration loading
"""

import unittest
import sys
import tempfile
from unittest import mock
from pathlib import Path

import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from class_groups.config_loader import (
    ConfigurationError, create_group_creator_from_config, create_grouping_args,
    get_output_paths, load_config, resolve_random_seed, resolve_roster_path, validate_config
)
from class_groups.partition_optimizer import SCORE_BY_INDEX, GroupCreator


ROSTER_CSV = """Student,Alice,Bob,Cara,Dan,Eve
Alice,,5,0,0,1
Bob,,,0,1,0
Cara,,,,2,0
Dan,,,,,0
Eve,,,,,
"""


class TestConfigLoader(unittest.TestCase):
    """Test configuration parsing and GroupCreator construction"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)
        (self.dir / "rosters").mkdir()
        (self.dir / "rosters" / "p3.csv").write_text(ROSTER_CSV)
        (self.dir / "rosters" / "classes.csv").write_text(
            "Class,Roster,Notes\nPeriod 3,p3.csv,\nPeriod 5,,no roster yet\n"
        )

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_config(self, config):
        path = self.dir / "config.yaml"
        with open(path, 'w') as f:
            yaml.dump(config, f)
        return str(path)

    def test_load_config(self):
        path = self.write_config({"class_name": "Period 3", "roster": {"path": "rosters/p3.csv"}})
        self.assertEqual(load_config(path)["class_name"], "Period 3")

    def test_load_missing_config(self):
        with self.assertRaises(ConfigurationError):
            load_config(str(self.dir / "missing.yaml"))

    def test_load_invalid_yaml(self):
        path = self.dir / "config.yaml"
        path.write_text("roster: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_config(str(path))

    def test_load_empty_config(self):
        path = self.dir / "config.yaml"
        path.write_text("")
        with self.assertRaises(ConfigurationError):
            load_config(str(path))

    def test_resolve_random_seed(self):
        self.assertEqual(resolve_random_seed(42), 42)
        self.assertEqual(resolve_random_seed("17"), 17)
        self.assertIsInstance(resolve_random_seed("random"), int)
        self.assertIsInstance(resolve_random_seed(None), int)

        with self.assertRaises(ConfigurationError):
            resolve_random_seed("soon")
        with self.assertRaises(ConfigurationError):
            resolve_random_seed(1.5)
        with self.assertRaises(ConfigurationError):
            resolve_random_seed(True)

    def test_roster_path_relative_to_config(self):
        config = {"roster": {"path": "rosters/p3.csv"}}
        self.assertEqual(resolve_roster_path(config, self.dir), self.dir / "rosters" / "p3.csv")

    def test_roster_path_from_settings_file(self):
        config = {"class_name": "Period 3", "roster": {"settings_file": "rosters/classes.csv"}}
        self.assertEqual(resolve_roster_path(config, self.dir), self.dir / "rosters" / "p3.csv")

    def test_unknown_class_in_settings(self):
        config = {"class_name": "Period 9", "roster": {"settings_file": "rosters/classes.csv"}}
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_roster_path(config, self.dir)
        self.assertIn("Period 9", str(ctx.exception))

    def test_blank_roster_in_settings(self):
        config = {"class_name": "Period 5", "roster": {"settings_file": "rosters/classes.csv"}}
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_roster_path(config, self.dir)
        self.assertIn("Roster", str(ctx.exception))

    def test_missing_settings_column(self):
        config = {"class_name": "Period 3",
                  "roster": {"settings_file": "rosters/classes.csv", "class_column": "Section"}}
        with self.assertRaises(ConfigurationError):
            resolve_roster_path(config, self.dir)

    def test_create_grouping_args(self):
        config = {"class_name": "Period 3",
                  "grouping": {"num_groups": 3, "trials": 200, "random_seed": 9, "score_by": "index"}}
        args = create_grouping_args(config)

        self.assertEqual(args.class_name, "Period 3")
        self.assertEqual(args.num_groups, 3)
        self.assertEqual(args.trials, 200)
        self.assertEqual(args.random_seed, 9)
        self.assertEqual(args.score_by, SCORE_BY_INDEX)

    def test_grouping_overrides(self):
        config = {"grouping": {"num_groups": 3, "trials": 200, "random_seed": 9}}
        args = create_grouping_args(config, trials=50, num_groups=2, random_seed="4")

        self.assertEqual(args.num_groups, 2)
        self.assertEqual(args.trials, 50)
        self.assertEqual(args.random_seed, 4)

    def test_grouping_defaults(self):
        with mock.patch('class_groups.config_loader.time.time', return_value=5.0):
            args = create_grouping_args({})
        self.assertEqual(args.num_groups, 5)
        self.assertEqual(args.trials, 1000)
        self.assertEqual(args.random_seed, 5000000)

    def test_unset_seed_differs_between_runs(self):
        """Each run without a configured seed draws a fresh one"""
        with mock.patch('class_groups.config_loader.time.time', side_effect=[5.0, 7.0]):
            first = create_grouping_args({"grouping": {"num_groups": 3}})
            second = create_grouping_args({"grouping": {"num_groups": 3}})
        self.assertNotEqual(first.random_seed, second.random_seed)

    def test_random_seed_keyword(self):
        with mock.patch('class_groups.config_loader.time.time', return_value=7.0):
            args = create_grouping_args({"grouping": {"random_seed": "random"}})
        self.assertEqual(args.random_seed, 7000000)

    def test_output_paths_relative_to_config(self):
        path = self.write_config({
            "roster": {"path": "rosters/p3.csv"},
            "output": {"directory": "out", "pending_file": "state/pending.yaml"},
        })
        output_dir, pending_path = get_output_paths(path)
        self.assertEqual(output_dir, self.dir / "out")
        self.assertEqual(pending_path, self.dir / "state" / "pending.yaml")

    def test_output_paths_defaults(self):
        path = self.write_config({"roster": {"path": "rosters/p3.csv"}})
        output_dir, pending_path = get_output_paths(path)
        self.assertEqual(output_dir, self.dir / "output")
        self.assertEqual(pending_path, self.dir / "output" / "pending_groups.yaml")

    def test_validate_config(self):
        self.assertEqual(validate_config({"roster": {"path": "p3.csv"}}), [])

        issues = validate_config({"grouping": {"num_groups": 0, "trials": -5, "score_by": "rank"}})
        self.assertEqual(len(issues), 4)

    def test_validate_settings_file_needs_class(self):
        issues = validate_config({"roster": {"settings_file": "classes.csv"}})
        self.assertEqual(len(issues), 1)

    def test_create_group_creator(self):
        path = self.write_config({
            "class_name": "Period 3",
            "roster": {"path": "rosters/p3.csv"},
            "grouping": {"num_groups": 2, "trials": 20, "random_seed": 1},
        })

        creator = create_group_creator_from_config(path)

        self.assertIsInstance(creator, GroupCreator)
        self.assertFalse(creator.searching)
        self.assertEqual(len(creator.registry), 5)
        self.assertEqual(creator.matrix.score_between(0, 1), 5)
        self.assertEqual(creator.roster_path, self.dir / "rosters" / "p3.csv")
        self.assertEqual(creator.group_sizes(), [3, 2])

        partition = creator.calculate_groups()
        self.assertEqual(sum(len(g) for g in partition.groups), 5)

    def test_create_group_creator_with_settings_file(self):
        path = self.write_config({
            "class_name": "Period 3",
            "roster": {"settings_file": "rosters/classes.csv"},
            "grouping": {"num_groups": 5, "trials": 5, "random_seed": 1},
        })

        creator = create_group_creator_from_config(path)
        self.assertEqual(creator.group_sizes(), [1, 1, 1, 1, 1])

    def test_invalid_config_rejected(self):
        path = self.write_config({"roster": {"path": "rosters/p3.csv"}, "grouping": {"trials": 0}})
        with self.assertRaises(ConfigurationError):
            create_group_creator_from_config(path)

    def test_missing_roster_file(self):
        path = self.write_config({"roster": {"path": "rosters/p4.csv"}})
        with self.assertRaises(ConfigurationError):
            create_group_creator_from_config(path)


if __name__ == '__main__':
    unittest.main()
