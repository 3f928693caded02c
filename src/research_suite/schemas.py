"""
Tool Schemas - Pydantic models for tool inputs and outputs.

Every tool server validates its arguments against one of the input models
and returns a payload shaped by the matching output model. Output models
carry defaults for all payload fields so that a failed call can still be
reported in the declared shape.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator


class ToolStatus(str, Enum):
	"""Status discriminator on every tool payload."""
	SUCCESS = "success"
	PARTIAL_SUCCESS = "partial_success"
	ERROR = "error"


def validation_messages(exc: ValidationError) -> list[str]:
	"""One human-readable message per schema violation."""
	messages = []
	for err in exc.errors():
		loc = ".".join(str(part) for part in err.get("loc", ()))
		msg = err.get("msg", "Invalid value")
		messages.append(f"{loc}: {msg}" if loc else msg)
	return messages


def _not_only_dots(value: str) -> str:
	if not value.strip("."):
		raise ValueError("must not consist only of dots")
	return value


# Project ids name per-project files and directories
ProjectId = Annotated[str, Field(pattern=r"^[A-Za-z0-9_.-]+$"), AfterValidator(_not_only_dots)]


# ---------------------------------------------------------------------------
# Shared result envelope
# ---------------------------------------------------------------------------

class ToolResult(BaseModel):
	"""Fields common to every tool payload."""
	status: ToolStatus = Field(default=ToolStatus.SUCCESS)
	errors: list[str] = Field(default_factory=list)
	log: list[str] = Field(default_factory=list, description="Trace of what the server did")


# ---------------------------------------------------------------------------
# initiator.refine
# ---------------------------------------------------------------------------

class RefineInput(BaseModel):
	project_id: ProjectId = Field(description="Unique project identifier")
	prompt: str = Field(description="Initial research question or prompt")
	references: list[str] = Field(description="List of reference materials")


class RefineOutput(ToolResult):
	refined_question: str = ""
	hypotheses: list[str] = Field(default_factory=list)
	operational_definitions: dict[str, Any] = Field(default_factory=dict)
	lit_review_notes: str = ""


# ---------------------------------------------------------------------------
# data-processor.process
# ---------------------------------------------------------------------------

class ProcessInput(BaseModel):
	project_id: ProjectId = Field(description="Unique project identifier")
	refined_question: str = Field(description="The refined research question")
	hypotheses: list[str] = Field(description="List of research hypotheses")
	operational_definitions: dict[str, Any] = Field(description="Operational definitions of key concepts")
	raw_data: str = Field(description="Path to raw data file")


class ProcessOutput(ToolResult):
	cleaned_data: str = Field(default="", description="Path to the cleaned CSV file")
	processing_log: list[str] = Field(default_factory=list)
	decision_rationale: str = ""
	quality_report: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# code-generator.generate
# ---------------------------------------------------------------------------

class GenerateInput(BaseModel):
	project_id: ProjectId = Field(description="Unique project identifier")
	cleaned_data: str = Field(description="Path to the cleaned data file")
	hypotheses: list[str] = Field(description="List of research hypotheses")
	analysis_plan: list[str] = Field(
		description="Analysis steps, as a list or a single comma-separated string",
	)

	@field_validator("analysis_plan", mode="before")
	@classmethod
	def _split_plan(cls, value: Any) -> Any:
		if isinstance(value, str):
			return [step.strip() for step in value.split(",") if step.strip()]
		return value


class ExploratoryFindings(BaseModel):
	description: str = ""
	outliers: Optional[str] = None


class GenerateOutput(ToolResult):
	analysis_scripts: dict[str, str] = Field(default_factory=dict, description="filename -> script source")
	exploratory_findings: ExploratoryFindings = Field(default_factory=ExploratoryFindings)


# ---------------------------------------------------------------------------
# code-executor.run
# ---------------------------------------------------------------------------

class RunInput(BaseModel):
	project_id: ProjectId = Field(description="Unique project identifier")
	scripts: dict[str, str] = Field(description="Map of filename to script content")
	data: str = Field(description="Path to data file for analysis")
	environment: Literal["python", "r", "node"] = Field(
		default="python",
		description="Execution environment used when the file extension is not recognised",
	)


class RunOutput(ToolResult):
	execution_logs: list[str] = Field(default_factory=list)
	output_files: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# writer.compose
# ---------------------------------------------------------------------------

class ComposeInput(BaseModel):
	project_id: ProjectId = Field(description="Unique project identifier")
	refined_question: str = Field(description="The refined research question")
	hypotheses: list[str] = Field(description="List of research hypotheses")
	results: str = Field(description="Analysis results and findings")
	lit_review_notes: Optional[str] = Field(default=None, description="Literature review notes")
	methodology: Optional[str] = Field(default=None, description="Research methodology description")
	data_description: Optional[str] = Field(default=None, description="Description of data used")


class ComposeOutput(ToolResult):
	research_report: str = Field(default="", description="Path to the markdown report")
	summary: str = ""


# ---------------------------------------------------------------------------
# orchestrator.initiate / orchestrator.project_status
# ---------------------------------------------------------------------------

class InitiateInput(BaseModel):
	project_title: str = Field(description="Title of the research project")
	user_prompt: str = Field(description="Initial research question or prompt")
	references: list[str] = Field(description="List of reference materials")
	raw_data: str = Field(description="Path to raw data file")


class InitiateOutput(ToolResult):
	project_id: str = ""
	workflow_stage: str = "initiated"
	next_steps: list[str] = Field(default_factory=list)


class ProjectStatusInput(BaseModel):
	project_id: str = Field(description="Project identifier returned by initiate")


class ProjectStatusOutput(ToolResult):
	project: dict[str, Any] = Field(default_factory=dict)
	next_steps: list[str] = Field(default_factory=list)
