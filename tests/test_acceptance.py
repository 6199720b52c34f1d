"""
Tests for accepting a pending group set
"""

import unittest
import sys
import tempfile
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from class_groups.acceptance import accept_groups, apply_acceptance, format_acceptance_summary
from class_groups.group_exporter import PendingGroupSet, PendingGroupsError
from class_groups.partition_optimizer import AffinityMatrix, EntityRegistry
from class_groups.roster_loader import load_score_table, read_score_table


ROSTER_CSV = """Student,Alice,Bob,Cara,Dan
Alice,,3,,1
Bob,,,0,2
Cara,,,,4
Dan,,,,
"""


class TestAcceptance(unittest.TestCase):
    """Test roster updates on acceptance"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.roster_path = Path(self.temp_dir.name) / "roster.csv"
        self.roster_path.write_text(ROSTER_CSV)

    def tearDown(self):
        self.temp_dir.cleanup()

    def pending(self, name_groups, index_groups):
        return PendingGroupSet("Period 3", str(self.roster_path), name_groups, index_groups, 0.0)

    def test_summary_format(self):
        body = format_acceptance_summary("Period 3", [["Alice", "Dan"], ["Bob"]])
        self.assertEqual(
            body,
            "Next Period 3 groups:\n"
            "Group #1\n"
            "\tAlice\n"
            "\tDan\n"
            "\n"
            "Group #2\n"
            "\tBob\n"
            "\n"
        )

    def test_pair_scores_incremented(self):
        table = read_score_table(self.roster_path)
        pending = self.pending([["Dan", "Alice"], ["Cara", "Bob"]], [[3, 0], [2, 1]])

        updated = apply_acceptance(pending, table)

        self.assertEqual(updated, 2)
        self.assertEqual(table.get_value(0, 3), 2)
        self.assertEqual(table.get_value(1, 2), 1)
        # Pairs split across groups are unchanged
        self.assertEqual(table.get_value(0, 1), 3)
        self.assertEqual(table.get_value(2, 3), 4)

    def test_all_pairs_in_large_group(self):
        table = read_score_table(self.roster_path)
        pending = self.pending([["Alice", "Bob", "Cara"], ["Dan"]], [[0, 1, 2], [3]])

        self.assertEqual(apply_acceptance(pending, table, increment=2), 3)
        self.assertEqual(table.get_value(0, 1), 5)
        self.assertEqual(table.get_value(0, 2), 2)
        self.assertEqual(table.get_value(1, 2), 2)

    def test_accept_writes_roster(self):
        pending = self.pending([["Dan", "Alice"], ["Cara", "Bob"]], [[3, 0], [2, 1]])

        summary = accept_groups(pending)

        self.assertTrue(summary.startswith("Next Period 3 groups:\n"))
        table = read_score_table(self.roster_path)
        registry = EntityRegistry()
        matrix = AffinityMatrix()
        load_score_table(table, registry, matrix)
        self.assertEqual(matrix.score_between(0, 3), 2)
        self.assertEqual(matrix.score_between(1, 2), 1)
        self.assertEqual(matrix.score_between(0, 1), 3)

    def test_accept_to_explicit_roster(self):
        other = Path(self.temp_dir.name) / "other.csv"
        other.write_text(ROSTER_CSV)
        pending = PendingGroupSet("Period 3", "missing.csv", [["Alice", "Bob"]], [[0, 1]], 3.0)

        accept_groups(pending, other)

        self.assertEqual(read_score_table(other).get_value(0, 1), 4)
        self.assertEqual(read_score_table(self.roster_path).get_value(0, 1), 3)

    def test_stale_roster_rejected(self):
        table = read_score_table(self.roster_path)
        pending = self.pending([["Bob", "Alice"]], [[0, 1]])

        with self.assertRaises(PendingGroupsError):
            apply_acceptance(pending, table)

    def test_mirrored_cell_matches(self):
        """The table stays symmetric after acceptance"""
        table = read_score_table(self.roster_path)
        pending = self.pending([["Dan", "Alice"], ["Cara", "Bob"]], [[3, 0], [2, 1]])

        apply_acceptance(pending, table)

        self.assertEqual(table.get_value(3, 0), table.get_value(0, 3))
        self.assertEqual(table.get_value(2, 1), table.get_value(1, 2))
        self.assertEqual(table.cells[3][0], "2")

    def test_negative_index_rejected(self):
        table = read_score_table(self.roster_path)
        pending = self.pending([["Dan", "Alice"]], [[-1, 0]])

        with self.assertRaises(PendingGroupsError):
            apply_acceptance(pending, table)
        self.assertEqual(table.get_value(0, 3), 1)

    def test_index_beyond_roster_rejected(self):
        table = read_score_table(self.roster_path)
        pending = self.pending([["Alice", "Eve"]], [[0, 4]])

        with self.assertRaises(PendingGroupsError):
            apply_acceptance(pending, table)


if __name__ == '__main__':
    unittest.main()
