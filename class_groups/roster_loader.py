"""
Roster table I/O.

Reads and writes the square score tables that feed the group optimizer.

CSV format:
    Student,Alice,Bob,Cara
    Alice,0,3,1
    Bob,3,0,0
    Cara,1,0,0

Only the cells right of the diagonal are read; row ``i`` supplies the
scores between student ``i`` and every later student.
"""

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .partition_optimizer import AffinityMatrix, EntityRegistry, GroupingError


class RosterFormatError(GroupingError):
    """Raised when a roster table is malformed"""
    pass


@dataclass
class ScoreTable:
    """
    Ordered score table with named rows and columns.

    Attributes:
        label: Text of the top-left header cell
        column_names: Student names from the header row
        row_names: Student names from the first column
        cells: Raw cell text, one list per row aligned with column_names
        source: Path the table was read from (if any)
    """
    label: str
    column_names: List[str]
    row_names: List[str]
    cells: List[List[str]]
    source: Optional[Path] = None

    def iter_rows(self) -> Iterator[Tuple[str, Dict[str, str]]]:
        """
        Yield (row name, {column name: cell}) pairs in table order.

        Each call starts a fresh pass over the table.
        """
        for row_name, row_cells in zip(self.row_names, self.cells):
            yield row_name, dict(zip(self.column_names, row_cells))

    def get_value(self, row: int, column: int) -> float:
        """Numeric value of a cell, blank cells read as 0"""
        return parse_score(self.cells[row][column], self.row_names[row], self.column_names[column])

    def set_value(self, row: int, column: int, value: float):
        self.cells[row][column] = format_score(value)

    def __len__(self) -> int:
        return len(self.row_names)


def parse_score(text: str, row_name: str = "", column_name: str = "") -> float:
    """Convert a cell to a float, treating blanks as 0"""
    text = (text or "").strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        raise RosterFormatError(
            f"Score for '{row_name}' and '{column_name}' is not a number: '{text}'"
        )


def format_score(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def read_score_table(csv_path: Union[str, Path]) -> ScoreTable:
    """
    Read a roster score table from CSV.

    Args:
        csv_path: Path to the table

    Returns:
        ScoreTable with raw cell text

    Raises:
        FileNotFoundError: If the file doesn't exist
        RosterFormatError: If rows and header disagree
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"Roster file not found: {csv_path}")

    with open(csv_path, 'r', newline='') as f:
        rows = [row for row in csv.reader(f) if any(cell.strip() for cell in row)]

    if not rows:
        raise RosterFormatError(f"Roster file is empty: {csv_path}")

    header = [cell.strip() for cell in rows[0]]
    label, column_names = header[0], header[1:]

    row_names = []
    cells = []
    for line_number, row in enumerate(rows[1:], start=2):
        name = row[0].strip()
        values = row[1:]
        if len(values) > len(column_names):
            raise RosterFormatError(
                f"Row {line_number} of {csv_path} has {len(values)} scores "
                f"for {len(column_names)} columns"
            )
        # Short rows are padded with blanks
        values = values + [""] * (len(column_names) - len(values))
        row_names.append(name)
        cells.append(values)

    return ScoreTable(
        label=label,
        column_names=column_names,
        row_names=row_names,
        cells=cells,
        source=csv_path
    )


def write_score_table(table: ScoreTable, output_path: Union[str, Path]) -> Path:
    """Write a score table back to CSV"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow([table.label] + table.column_names)
        for name, row_cells in zip(table.row_names, table.cells):
            writer.writerow([name] + row_cells)

    return output_path


def validate_score_table(table: ScoreTable) -> None:
    """
    Check that rows and columns name the same students in the same order.

    Raises:
        RosterFormatError: On blank, duplicate or mismatched names
    """
    seen = set()
    for name in table.row_names:
        if not name:
            raise RosterFormatError("Student name cannot be blank")
        if name in seen:
            raise RosterFormatError(f"Student '{name}' appears in more than one row")
        seen.add(name)

    if table.row_names != table.column_names:
        raise RosterFormatError(
            "Header row and first column must list the same students in the same order"
        )


def load_score_table(
    table: ScoreTable,
    registry: EntityRegistry,
    matrix: AffinityMatrix
) -> int:
    """
    Register every student and append their scores to the matrix.

    Args:
        table: Validated score table
        registry: Registry receiving row and column names
        matrix: Matrix receiving one row per student

    Returns:
        Number of students loaded
    """
    validate_score_table(table)

    if len(table) == 0:
        print("WARNING: No students found in roster table")

    for row_index, (row_name, row) in enumerate(table.iter_rows()):
        registry.register(row_name)

        scores = []
        for column_name in table.column_names[row_index + 1:]:
            registry.register(column_name)
            scores.append(parse_score(row[column_name], row_name, column_name))

        matrix.append(scores)

    return len(table)


def read_class_settings(
    settings_path: Union[str, Path],
    class_column: str = "Class"
) -> Dict[str, Dict[str, str]]:
    """
    Read a class settings table keyed by class name.

    CSV format:
        Class,Roster
        Period 3,period3.csv
    """
    settings_path = Path(settings_path)

    if not settings_path.exists():
        raise FileNotFoundError(f"Class settings file not found: {settings_path}")

    settings = {}
    with open(settings_path, 'r', newline='') as f:
        reader = csv.DictReader(f)

        if class_column not in (reader.fieldnames or []):
            raise RosterFormatError(
                f"Could not find column '{class_column}' in settings file '{settings_path}'"
            )

        for row in reader:
            class_name = (row.get(class_column) or "").strip()
            if class_name:
                settings[class_name] = row

    return settings
