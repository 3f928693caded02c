"""Research initiator: turns a raw prompt into a research design."""

import re

from ..config import Config
from ..schemas import RefineInput, RefineOutput, ToolStatus
from ..toolkit import ToolServer

DISPLAY_NAME = "academic-research-initiator-developer"


def definition_key(prompt: str) -> str:
	"""Operational-definition key derived from the first ten characters of the prompt."""
	return re.sub(r"\s", "_", prompt[:10])


def refine(args: RefineInput) -> RefineOutput:
	refs = ", ".join(args.references)
	return RefineOutput(
		status=ToolStatus.SUCCESS,
		refined_question=f"Refined version of: {args.prompt} based on {refs}.",
		hypotheses=[f"H1: {args.prompt} is positively correlated with outcome X."],
		operational_definitions={
			definition_key(args.prompt): "Measured by survey score Y.",
			"outcome_X": "Measured by metric Z.",
		},
		lit_review_notes=(
			f"Initial literature review suggests strong support for exploring '{args.prompt}'. "
			f"Key papers include {refs}."
		),
		log=[
			f"Processing project_id: {args.project_id}",
			f"Received prompt: {args.prompt}",
			f"Received {len(args.references)} references.",
			"Refined question and generated hypotheses.",
			"Operationalized concepts.",
			"Generated literature review notes.",
		],
	)


def create_server(config: Config) -> ToolServer:
	"""Build the initiator server. Holds no configuration-dependent state."""
	server = ToolServer("initiator", DISPLAY_NAME)
	server.tool(
		"refine",
		"Refines a research question, generates hypotheses, operationalizes concepts, "
		"and outlines a literature review strategy.",
		RefineInput,
		RefineOutput,
	)(refine)
	return server
