"""
Data processor: quality analysis and cleaning of the raw dataset.

Writes the cleaned CSV and a JSON quality report under the configured
processed-data directory, keyed by project id.
"""

import csv
import json
import logging
from pathlib import Path

from .. import dataset
from ..config import Config
from ..schemas import ProcessInput, ProcessOutput, ToolStatus
from ..toolkit import ToolServer

logger = logging.getLogger(__name__)

DISPLAY_NAME = "academic-data-processor-wrangler"


def read_raw_data(path: str, log: list[str]) -> str:
	"""Read the raw dataset, substituting the built-in sample when it cannot be read."""
	try:
		text = Path(path).read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as e:
		logger.warning(f"Could not read raw data at {path}: {e}")
		log.append(f"Raw data file not found at {path}, using sample data for demonstration")
		return dataset.SAMPLE_DATA
	log.append(f"Successfully read raw data from: {path}")
	return text


def _rationale(args: ProcessInput, decisions: list[str]) -> str:
	lines = [f"Data processing decisions for project {args.project_id}:"]
	lines += [f"{i}. {d}" for i, d in enumerate(decisions, 1)]
	lines += ["", f'Processing was guided by the research question: "{args.refined_question}"']
	lines.append("and the following hypotheses:")
	lines += [f"{i}. {h}" for i, h in enumerate(args.hypotheses, 1)]
	lines += ["", "Operational definitions applied:"]
	lines += [f"- {key}: {json.dumps(value)}" for key, value in args.operational_definitions.items()]
	return "\n".join(lines)


def process_data(args: ProcessInput, config: Config) -> ProcessOutput:
	log = [f"Starting data processing for project: {args.project_id}"]
	raw = read_raw_data(args.raw_data, log)

	try:
		table = dataset.parse_table(raw)
	except csv.Error as e:
		logger.error(f"{args.project_id}: could not parse raw data: {e}")
		log.append(f"Could not parse raw data: {e}")
		return ProcessOutput(status=ToolStatus.ERROR, errors=[f"Could not parse raw data: {e}"], log=log)
	quality = dataset.analyze_quality(table)
	cleaned, steps = dataset.clean_table(table)

	decisions = [
		f"Removed {quality.incomplete_rows} incomplete row(s) with missing or malformed cells",
		f"Removed {len(table.rows) - quality.incomplete_rows - len(cleaned.rows)} duplicate row(s), keeping first occurrences",
	]
	steps.append(f"Detected columns: {', '.join(table.columns)}")

	missing_columns = [key for key in args.operational_definitions if key not in table.columns]
	if missing_columns:
		steps.append(f"Warning: Missing expected columns: {', '.join(missing_columns)}")
		decisions.append(
			f"Proceeding without columns: {', '.join(missing_columns)} - may need manual data mapping"
		)

	if quality.outliers:
		flagged = ", ".join(f"{col} ({len(vals)})" for col, vals in quality.outliers.items())
		steps.append(f"Outliers flagged (IQR method): {flagged}")
		decisions.append("Retained flagged outliers; they are reported for review rather than removed")

	for i, hypothesis in enumerate(args.hypotheses, 1):
		steps.append(f"Processing for hypothesis {i}: {hypothesis[:50]}...")

	out_dir = config.processed_data_dir
	out_dir.mkdir(parents=True, exist_ok=True)
	cleaned_path = out_dir / f"{args.project_id}_cleaned.csv"
	report_path = out_dir / f"{args.project_id}_quality_report.json"
	cleaned_path.write_text(dataset.to_csv(cleaned), encoding="utf-8", newline="")
	report_path.write_text(json.dumps(quality.to_dict(), indent=2), encoding="utf-8")

	log.extend(steps)
	log.append(f"Cleaned data written to: {cleaned_path}")
	log.append(f"Quality report written to: {report_path}")
	logger.info(f"{args.project_id}: {len(table.rows)} rows in, {len(cleaned.rows)} rows out")

	return ProcessOutput(
		status=ToolStatus.SUCCESS,
		cleaned_data=str(cleaned_path),
		processing_log=steps,
		decision_rationale=_rationale(args, decisions),
		quality_report=quality.to_dict(),
		log=log,
	)


def create_server(config: Config) -> ToolServer:
	server = ToolServer("data-processor", DISPLAY_NAME)

	@server.tool(
		"process",
		"Cleans, transforms, and prepares raw data for analysis based on the research design.",
		ProcessInput,
		ProcessOutput,
	)
	def process(args: ProcessInput) -> ProcessOutput:
		return process_data(args, config)

	return server
