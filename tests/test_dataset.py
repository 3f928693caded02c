"""Tests for CSV parsing, quality analysis and cleaning."""

from research_suite import dataset
from research_suite.dataset import (
	analyze_quality,
	clean_table,
	find_outliers,
	infer_type,
	parse_table,
	to_csv,
)

MESSY = """id,score,group,joined
1,10,a,2024-01-01
2,12,b,2024-01-02
2,12,b,2024-01-02

3,NA,a,2024-01-03
4,11,,2024-01-04
5,13,b
6,100,a,2024-01-06
"""


class TestParse:
	"""Tests for parse_table."""

	def test_header_and_rows(self):
		table = parse_table("a,b\n1,2\n3,4\n")
		assert table.columns == ["a", "b"]
		assert table.rows == [["1", "2"], ["3", "4"]]

	def test_blank_lines_skipped(self):
		table = parse_table("a,b\n\n1,2\n   \n3,4")
		assert len(table.rows) == 2

	def test_quoted_commas(self):
		table = parse_table('name,note\nx,"hello, world"\n')
		assert table.rows == [["x", "hello, world"]]

	def test_empty_text(self):
		table = parse_table("")
		assert table.columns == []
		assert table.rows == []


class TestInferType:
	"""Tests for column type tags."""

	def test_integer(self):
		assert infer_type(["1", "2", "-3"]) == "integer"

	def test_numeric(self):
		assert infer_type(["1", "2.5", "3"]) == "numeric"

	def test_date(self):
		assert infer_type(["2024-01-01", "2024/02/03"]) == "date"

	def test_boolean(self):
		assert infer_type(["true", "False", "yes"]) == "boolean"

	def test_categorical(self):
		assert infer_type(["remote", "office"]) == "categorical"

	def test_missing_values_ignored(self):
		assert infer_type(["1", "NA", "", "2"]) == "integer"

	def test_all_missing_is_categorical(self):
		assert infer_type(["", "null", "None"]) == "categorical"


def test_find_outliers_flags_values_outside_fences():
	values = [10.0, 12.0, 11.0, 13.0, 12.0, 100.0]
	assert find_outliers(values) == [100.0]


def test_find_outliers_needs_four_values():
	assert find_outliers([1.0, 2.0, 1000.0]) == []


def test_find_outliers_none_for_constant_column():
	assert find_outliers([5.0, 5.0, 5.0, 5.0]) == []


class TestQualityReport:
	"""Tests for analyze_quality."""

	def test_counts(self):
		report = analyze_quality(parse_table(MESSY))
		assert report.rows == 7
		assert report.columns == ["id", "score", "group", "joined"]
		assert report.missing_values["score"] == 1
		assert report.missing_values["group"] == 1
		# short row counts as a missing joined cell
		assert report.missing_values["joined"] == 1
		assert report.duplicate_rows == 1
		assert report.incomplete_rows == 3

	def test_invariants(self):
		report = analyze_quality(parse_table(MESSY))
		assert set(report.missing_values) == set(report.columns)
		for col in report.columns:
			assert 0 <= report.missing_values[col] <= report.rows
			assert 0 <= report.missing_percentages[col] <= 100
		assert report.duplicate_rows <= report.rows
		assert report.incomplete_rows <= report.rows

	def test_types_and_outliers(self):
		report = analyze_quality(parse_table(MESSY))
		assert report.column_types["id"] == "integer"
		assert report.column_types["group"] == "categorical"
		assert report.column_types["joined"] == "date"
		assert 100.0 in report.outliers["score"]

	def test_to_dict_keys(self):
		data = analyze_quality(parse_table(dataset.SAMPLE_DATA)).to_dict()
		assert set(data) == {
			"rows", "columns", "missingValues", "missingPercentages",
			"columnTypes", "outliers", "duplicateRows", "incompleteRows",
		}
		assert data["rows"] == 5
		assert data["duplicateRows"] == 0


class TestClean:
	"""Tests for clean_table."""

	def test_drops_incomplete_then_duplicates(self):
		cleaned, steps = clean_table(parse_table(MESSY))
		assert [row[0] for row in cleaned.rows] == ["1", "2", "6"]
		assert steps[0] == "Initial data: 7 rows"
		assert steps[-1] == "After removing duplicate rows: 3 rows"

	def test_clean_is_deterministic(self):
		first, _ = clean_table(parse_table(MESSY))
		second, _ = clean_table(parse_table(MESSY))
		assert to_csv(first) == to_csv(second)

	def test_sample_data_survives_cleaning(self):
		cleaned, _ = clean_table(parse_table(dataset.SAMPLE_DATA))
		assert to_csv(cleaned) == dataset.SAMPLE_DATA
