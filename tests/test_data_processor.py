"""Tests for the data processor server."""

import csv
import json
from pathlib import Path

import pytest

from research_suite import dataset
from research_suite.servers import create_server

from .helpers import make_config

RAW = """id,productivity_score,work_location
1,85,remote
2,78,office
2,78,office
3,,remote
4,90,office
"""


def _args(raw_data: str, **overrides) -> dict:
	args = {
		"project_id": "proj_dp",
		"refined_question": "Does remote work help?",
		"hypotheses": ["H1: remote work raises productivity", "H2: office hours matter"],
		"operational_definitions": {"productivity_score": "survey", "wellbeing": "scale"},
		"raw_data": raw_data,
	}
	args.update(overrides)
	return args


@pytest.fixture
def raw_file(tmp_path: Path) -> Path:
	path = tmp_path / "raw.csv"
	path.write_text(RAW)
	return path


@pytest.mark.asyncio
async def test_process_writes_outputs(tmp_path: Path, raw_file: Path):
	"""process should write the cleaned CSV and quality report under processed_data_dir."""
	config = make_config(tmp_path)
	server = create_server("data-processor", config)

	result = await server.invoke("process", _args(str(raw_file)))

	assert result["status"] == "success"
	cleaned = Path(result["cleaned_data"])
	assert cleaned == config.processed_data_dir / "proj_dp_cleaned.csv"
	assert cleaned.read_text() == "id,productivity_score,work_location\n1,85,remote\n2,78,office\n4,90,office"

	report_file = config.processed_data_dir / "proj_dp_quality_report.json"
	assert json.loads(report_file.read_text()) == result["quality_report"]
	assert result["quality_report"]["rows"] == 5
	assert result["quality_report"]["duplicateRows"] == 1
	assert result["quality_report"]["missingValues"]["productivity_score"] == 1


@pytest.mark.asyncio
async def test_process_logs_and_rationale(tmp_path: Path, raw_file: Path):
	server = create_server("data-processor", make_config(tmp_path))
	result = await server.invoke("process", _args(str(raw_file)))

	steps = result["processing_log"]
	assert "Warning: Missing expected columns: wellbeing" in steps
	assert sum(1 for s in steps if s.startswith("Processing for hypothesis")) == 2
	assert 'research question: "Does remote work help?"' in result["decision_rationale"]
	assert "wellbeing" in result["decision_rationale"]
	assert f"Successfully read raw data from: {raw_file}" in result["log"]


@pytest.mark.asyncio
async def test_process_is_idempotent(tmp_path: Path, raw_file: Path):
	"""Same raw data in, byte-identical cleaned data out."""
	server = create_server("data-processor", make_config(tmp_path))
	first = await server.invoke("process", _args(str(raw_file)))
	first_bytes = Path(first["cleaned_data"]).read_bytes()
	second = await server.invoke("process", _args(str(raw_file)))
	assert Path(second["cleaned_data"]).read_bytes() == first_bytes
	assert first["quality_report"] == second["quality_report"]


@pytest.mark.asyncio
async def test_missing_raw_data_uses_sample(tmp_path: Path):
	"""A nonexistent raw_data path should fall back to the sample dataset and still succeed."""
	server = create_server("data-processor", make_config(tmp_path))
	missing = tmp_path / "does-not-exist.csv"

	result = await server.invoke("process", _args(str(missing)))

	assert result["status"] == "success"
	assert f"Raw data file not found at {missing}, using sample data for demonstration" in result["log"]
	assert Path(result["cleaned_data"]).read_text() == dataset.SAMPLE_DATA
	assert result["quality_report"]["rows"] == 5


@pytest.mark.asyncio
async def test_invalid_arguments_touch_nothing(tmp_path: Path, raw_file: Path):
	"""Validation failures should not create any output files."""
	config = make_config(tmp_path)
	server = create_server("data-processor", config)
	args = _args(str(raw_file))
	del args["hypotheses"]

	result = await server.invoke("process", args)

	assert result["status"] == "error"
	assert result["errors"] == ["hypotheses: Field required"]
	assert result["cleaned_data"] == ""
	assert not config.processed_data_dir.exists()


@pytest.mark.asyncio
async def test_process_accepts_oversized_cell(tmp_path: Path):
	"""A free-text cell larger than the csv module's default limit is still parsed."""
	raw = tmp_path / "long.csv"
	raw.write_text("a,b\n1," + "x" * 200_000 + "\n")
	server = create_server("data-processor", make_config(tmp_path))

	result = await server.invoke("process", _args(str(raw), operational_definitions={}))

	assert result["status"] == "success"
	assert result["quality_report"]["rows"] == 1
	assert result["quality_report"]["columnTypes"]["b"] == "categorical"


@pytest.mark.asyncio
async def test_process_reports_unparseable_data(tmp_path: Path, raw_file: Path, monkeypatch):
	def broken(text):
		raise csv.Error("field larger than field limit (131072)")

	monkeypatch.setattr(dataset, "parse_table", broken)
	config = make_config(tmp_path)
	server = create_server("data-processor", config)

	result = await server.invoke("process", _args(str(raw_file)))

	assert result["status"] == "error"
	assert result["errors"] == ["Could not parse raw data: field larger than field limit (131072)"]
	assert result["cleaned_data"] == ""
	assert not (config.processed_data_dir / "proj_dp_cleaned.csv").exists()
