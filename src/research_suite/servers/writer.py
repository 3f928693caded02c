"""Research writer: assembles the markdown report for a project."""

import logging

from .. import report
from ..config import Config
from ..schemas import ComposeInput, ComposeOutput, ToolStatus
from ..toolkit import ToolServer

logger = logging.getLogger(__name__)

DISPLAY_NAME = "academic-research-writer"


def compose_report(args: ComposeInput, config: Config) -> ComposeOutput:
	log = [
		f"Starting report composition for project: {args.project_id}",
		"Generating executive summary, literature review, methodology, results, discussion and references...",
	]
	content = report.build_report(
		project_id=args.project_id,
		question=args.refined_question,
		hypotheses=args.hypotheses,
		results=args.results,
		lit_review_notes=args.lit_review_notes,
		methodology=args.methodology,
		data_description=args.data_description,
	)

	config.reports_dir.mkdir(parents=True, exist_ok=True)
	path = config.reports_dir / f"{args.project_id}_research_report.md"
	path.write_text(content, encoding="utf-8")
	log.append(f"Report saved to: {path}")
	logger.info(f"{args.project_id}: report written ({len(content)} chars)")

	return ComposeOutput(
		status=ToolStatus.SUCCESS,
		research_report=str(path),
		summary=report.summarize(args.project_id, args.refined_question, len(args.hypotheses)),
		log=log,
	)


def create_server(config: Config) -> ToolServer:
	server = ToolServer("writer", DISPLAY_NAME)

	@server.tool(
		"compose",
		"Composes a comprehensive research report from analysis results and research components.",
		ComposeInput,
		ComposeOutput,
	)
	def compose(args: ComposeInput) -> ComposeOutput:
		return compose_report(args, config)

	return server
