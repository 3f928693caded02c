"""
Delimited-text parsing, quality analysis and cleaning for raw datasets.

Everything here is a pure function of its input text so the same raw data
always produces the same cleaned output.
"""

import csv
import io
import statistics
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

SAMPLE_DATA = """id,productivity_score,satisfaction_rating,work_location,hours_worked
1,85,4.2,remote,40
2,78,3.8,office,42
3,92,4.5,remote,38
4,73,3.2,office,45
5,88,4.1,remote,39"""

MISSING_TOKENS = {"", "na", "n/a", "null", "nan", "none"}
BOOLEAN_TOKENS = {"true", "false", "yes", "no", "t", "f", "y", "n"}
DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d-%m-%Y", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S")

TYPE_SAMPLE_SIZE = 100
MIN_OUTLIER_VALUES = 4

# Single cells may hold free text of any length
csv.field_size_limit(sys.maxsize)


@dataclass
class Table:
	"""A parsed delimited-text table."""
	columns: list[str]
	rows: list[list[str]] = field(default_factory=list)

	def column_values(self, index: int) -> list[str]:
		return [row[index] if index < len(row) else "" for row in self.rows]


@dataclass
class QualityReport:
	"""Per-column quality measures for a table."""
	rows: int
	columns: list[str]
	missing_values: dict[str, int]
	missing_percentages: dict[str, float]
	column_types: dict[str, str]
	outliers: dict[str, list[float]]
	duplicate_rows: int
	incomplete_rows: int

	def to_dict(self) -> dict[str, Any]:
		return {
			"rows": self.rows,
			"columns": self.columns,
			"missingValues": self.missing_values,
			"missingPercentages": self.missing_percentages,
			"columnTypes": self.column_types,
			"outliers": self.outliers,
			"duplicateRows": self.duplicate_rows,
			"incompleteRows": self.incomplete_rows,
		}


def parse_table(text: str) -> Table:
	"""Parse comma-delimited text. Blank lines are skipped; the first row is the header."""
	reader = csv.reader(io.StringIO(text))
	records = [
		[cell.strip() for cell in record]
		for record in reader
		if any(cell.strip() for cell in record)
	]
	if not records:
		return Table(columns=[])
	return Table(columns=records[0], rows=records[1:])


def is_missing(value: str) -> bool:
	return value.strip().lower() in MISSING_TOKENS


def _is_int(value: str) -> bool:
	try:
		int(value)
	except ValueError:
		return False
	return True


def _is_float(value: str) -> bool:
	try:
		float(value)
	except ValueError:
		return False
	return value.strip().lower() not in {"nan", "inf", "-inf", "infinity", "-infinity"}


def _is_date(value: str) -> bool:
	for fmt in DATE_FORMATS:
		try:
			datetime.strptime(value, fmt)
		except ValueError:
			continue
		return True
	return False


def infer_type(values: list[str]) -> str:
	"""Coarse type tag from a sample of the column's non-missing values."""
	sample = [v for v in values if not is_missing(v)][:TYPE_SAMPLE_SIZE]
	if not sample:
		return "categorical"
	if all(_is_int(v) for v in sample):
		return "integer"
	if all(_is_float(v) for v in sample):
		return "numeric"
	if all(_is_date(v) for v in sample):
		return "date"
	if all(v.lower() in BOOLEAN_TOKENS for v in sample):
		return "boolean"
	return "categorical"


def iqr_bounds(values: list[float]) -> tuple[float, float]:
	"""Tukey fences (Q1 - 1.5*IQR, Q3 + 1.5*IQR), quartiles by linear interpolation."""
	q1, _, q3 = statistics.quantiles(values, n=4, method="inclusive")
	iqr = q3 - q1
	return q1 - 1.5 * iqr, q3 + 1.5 * iqr


def find_outliers(values: list[float]) -> list[float]:
	"""Values strictly outside the IQR fences, in their original order."""
	if len(values) < MIN_OUTLIER_VALUES:
		return []
	low, high = iqr_bounds(values)
	return [v for v in values if v < low or v > high]


def _is_incomplete(row: list[str], width: int) -> bool:
	return len(row) != width or any(is_missing(cell) for cell in row)


def analyze_quality(table: Table) -> QualityReport:
	"""Missing values, type tags, outliers and row defects for every column."""
	row_count = len(table.rows)
	missing_values: dict[str, int] = {}
	missing_percentages: dict[str, float] = {}
	column_types: dict[str, str] = {}
	outliers: dict[str, list[float]] = {}

	for index, column in enumerate(table.columns):
		values = table.column_values(index)
		missing = sum(1 for v in values if is_missing(v))
		missing_values[column] = missing
		missing_percentages[column] = round(missing / row_count * 100, 2) if row_count else 0.0

		col_type = infer_type(values)
		column_types[column] = col_type
		if col_type in ("integer", "numeric"):
			numbers = [float(v) for v in values if not is_missing(v) and _is_float(v)]
			flagged = find_outliers(numbers)
			if flagged:
				outliers[column] = flagged

	width = len(table.columns)
	seen: set[tuple[str, ...]] = set()
	duplicates = 0
	for row in table.rows:
		key = tuple(row)
		if key in seen:
			duplicates += 1
		seen.add(key)

	return QualityReport(
		rows=row_count,
		columns=list(table.columns),
		missing_values=missing_values,
		missing_percentages=missing_percentages,
		column_types=column_types,
		outliers=outliers,
		duplicate_rows=duplicates,
		incomplete_rows=sum(1 for row in table.rows if _is_incomplete(row, width)),
	)


def clean_table(table: Table) -> tuple[Table, list[str]]:
	"""
	Drop incomplete rows, then exact duplicates (first occurrence kept).

	Returns:
		Tuple of (cleaned table, processing steps)
	"""
	width = len(table.columns)
	steps = [f"Initial data: {len(table.rows)} rows"]

	complete = [row for row in table.rows if not _is_incomplete(row, width)]
	steps.append(f"After removing incomplete rows: {len(complete)} rows")

	seen: set[tuple[str, ...]] = set()
	unique: list[list[str]] = []
	for row in complete:
		key = tuple(row)
		if key not in seen:
			seen.add(key)
			unique.append(row)
	steps.append(f"After removing duplicate rows: {len(unique)} rows")

	return Table(columns=list(table.columns), rows=unique), steps


def to_csv(table: Table) -> str:
	"""Serialize a table with \\n line endings and no trailing newline."""
	buffer = io.StringIO()
	writer = csv.writer(buffer, lineterminator="\n")
	writer.writerow(table.columns)
	writer.writerows(table.rows)
	return buffer.getvalue().rstrip("\n")
