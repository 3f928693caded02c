"""
Research workflow coordination.

Drives a project through research design, data processing and code
generation. Each stage is attempted at most once; a downstream failure is
recorded on the project and gates advancement, but later stages whose
precondition still holds are attempted anyway.
"""

import logging
import secrets
import string
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .errors import ToolUnavailable
from .gateway import ToolGateway
from .schemas import (
	InitiateInput,
	InitiateOutput,
	ProjectStatusOutput,
	ToolStatus,
)

logger = logging.getLogger(__name__)

ANALYSIS_PLAN = "descriptive statistics, correlation analysis, hypothesis testing"
RETRY_STEPS = ["Fix errors and retry"]

_ID_ALPHABET = string.ascii_lowercase + string.digits


class WorkflowStage(str, Enum):
	"""Pipeline stages, in order."""
	INITIATED = "initiated"
	RESEARCH_DESIGN_COMPLETE = "research_design_complete"
	DATA_PROCESSING_COMPLETE = "data_processing_complete"
	CODE_GENERATION_COMPLETE = "code_generation_complete"

	@property
	def rank(self) -> int:
		return list(WorkflowStage).index(self)


NEXT_STEPS: dict[WorkflowStage, list[str]] = {
	WorkflowStage.CODE_GENERATION_COMPLETE: ["Execute analysis scripts", "Generate research report"],
	WorkflowStage.DATA_PROCESSING_COMPLETE: ["Generate analysis code"],
	WorkflowStage.RESEARCH_DESIGN_COMPLETE: ["Process raw data", "Generate analysis code"],
	WorkflowStage.INITIATED: ["Complete research design"],
}


def next_steps_for(stage: WorkflowStage) -> list[str]:
	return list(NEXT_STEPS[stage])


def generate_project_id() -> str:
	"""proj_<epoch millis>_<9 random lowercase alphanumerics>"""
	suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
	return f"proj_{int(time.time() * 1000)}_{suffix}"


@dataclass
class ProjectState:
	"""Everything known about one research project."""
	project_id: str
	project_title: str
	user_prompt: str
	references: list[str]
	raw_data_path: str
	created_at: str = field(default_factory=lambda: datetime.now().isoformat())
	workflow_stage: WorkflowStage = WorkflowStage.INITIATED
	errors: list[str] = field(default_factory=list)
	log: list[str] = field(default_factory=list)

	# Filled in by research design
	refined_question: Optional[str] = None
	hypotheses: Optional[list[str]] = None
	operational_definitions: Optional[dict[str, Any]] = None
	lit_review_notes: Optional[str] = None

	# Filled in by data processing
	cleaned_data_path: Optional[str] = None
	processing_log: Optional[list[str]] = None
	decision_rationale: Optional[str] = None

	# Filled in by code generation
	analysis_scripts: Optional[dict[str, str]] = None
	exploratory_findings: Optional[dict[str, Any]] = None

	def __post_init__(self) -> None:
		if not self.log:
			self.log.append(f"Project {self.project_id} initiated at {self.created_at}")

	def advance(self, stage: WorkflowStage) -> None:
		"""Move forward to stage. Never moves backward."""
		if stage.rank > self.workflow_stage.rank:
			self.workflow_stage = stage

	def to_dict(self) -> dict[str, Any]:
		data = asdict(self)
		data["workflow_stage"] = self.workflow_stage.value
		return data


class ProjectStore:
	"""In-memory project registry. Lives as long as the process."""

	def __init__(self) -> None:
		self._projects: dict[str, ProjectState] = {}

	def create(
		self,
		project_title: str,
		user_prompt: str,
		references: list[str],
		raw_data_path: str,
	) -> ProjectState:
		project_id = generate_project_id()
		while project_id in self._projects:
			project_id = generate_project_id()
		state = ProjectState(
			project_id=project_id,
			project_title=project_title,
			user_prompt=user_prompt,
			references=list(references),
			raw_data_path=raw_data_path,
		)
		self._projects[project_id] = state
		return state

	def get(self, project_id: str) -> ProjectState | None:
		return self._projects.get(project_id)

	def list_ids(self) -> list[str]:
		return list(self._projects)

	def __len__(self) -> int:
		return len(self._projects)


# Singleton
_store: ProjectStore | None = None


def get_project_store() -> ProjectStore:
	"""Get or create the process-wide project store."""
	global _store
	if _store is None:
		_store = ProjectStore()
	return _store


def _is_success(result: dict[str, Any]) -> bool:
	return result.get("status") == ToolStatus.SUCCESS.value


def _joined_errors(result: dict[str, Any]) -> str:
	return ", ".join(str(e) for e in result.get("errors") or [])


class WorkflowCoordinator:
	"""Runs the research pipeline for new projects."""

	def __init__(self, store: ProjectStore, gateway: ToolGateway):
		self.store = store
		self.gateway = gateway

	async def initiate(self, request: InitiateInput) -> InitiateOutput:
		"""
		Create a project and push it as far down the pipeline as it will go.

		Returns:
			InitiateOutput with status success, partial_success, or error
		"""
		state = self.store.create(
			project_title=request.project_title,
			user_prompt=request.user_prompt,
			references=request.references,
			raw_data_path=request.raw_data,
		)
		logger.info(f"{state.project_id}: workflow started for '{request.project_title}'")

		try:
			await self._research_design(state)
			await self._data_processing(state, request.raw_data)
			await self._code_generation(state, request.raw_data)
		except Exception as e:
			logger.exception(f"{state.project_id}: workflow aborted")
			state.errors.append(f"Workflow error: {e}")
			state.log.append(f"Error occurred: {e}")
			return InitiateOutput(
				status=ToolStatus.ERROR,
				project_id=state.project_id,
				workflow_stage=state.workflow_stage.value,
				next_steps=list(RETRY_STEPS),
				errors=list(state.errors),
				log=list(state.log),
			)

		status = ToolStatus.PARTIAL_SUCCESS if state.errors else ToolStatus.SUCCESS
		logger.info(f"{state.project_id}: finished at {state.workflow_stage.value} ({status.value})")
		return InitiateOutput(
			status=status,
			project_id=state.project_id,
			workflow_stage=state.workflow_stage.value,
			next_steps=next_steps_for(state.workflow_stage),
			errors=list(state.errors),
			log=list(state.log),
		)

	async def _research_design(self, state: ProjectState) -> None:
		# Call failures here are not caught; they abort the whole workflow
		state.log.append("Calling Research Initiator Developer...")
		result = await self.gateway.refine({
			"project_id": state.project_id,
			"prompt": state.user_prompt,
			"references": state.references,
		})
		if not _is_success(result):
			state.errors.append(f"Research design failed: {_joined_errors(result)}")
			return

		state.refined_question = result.get("refined_question")
		state.hypotheses = result.get("hypotheses")
		state.operational_definitions = result.get("operational_definitions")
		state.lit_review_notes = result.get("lit_review_notes")
		state.advance(WorkflowStage.RESEARCH_DESIGN_COMPLETE)
		state.log.append("Research design completed successfully")

	async def _data_processing(self, state: ProjectState, raw_data: str) -> None:
		if state.workflow_stage is not WorkflowStage.RESEARCH_DESIGN_COMPLETE:
			return

		state.log.append("Calling Data Processor...")
		try:
			result = await self.gateway.process({
				"project_id": state.project_id,
				"refined_question": state.refined_question,
				"hypotheses": state.hypotheses,
				"operational_definitions": state.operational_definitions,
				"raw_data": raw_data,
			})
		except ToolUnavailable as e:
			logger.warning(f"{state.project_id}: {e}")
			state.errors.append(f"Data processor not available: {e}")
			state.log.append("Skipping data processing - server not available")
			return

		if not _is_success(result):
			state.errors.append(f"Data processing failed: {_joined_errors(result)}")
			return

		state.cleaned_data_path = result.get("cleaned_data")
		state.processing_log = result.get("processing_log")
		state.decision_rationale = result.get("decision_rationale")
		state.advance(WorkflowStage.DATA_PROCESSING_COMPLETE)
		state.log.append("Data processing completed successfully")

	async def _code_generation(self, state: ProjectState, raw_data: str) -> None:
		if state.workflow_stage not in (
			WorkflowStage.DATA_PROCESSING_COMPLETE,
			WorkflowStage.RESEARCH_DESIGN_COMPLETE,
		):
			return

		state.log.append("Calling Code Generator...")
		try:
			result = await self.gateway.generate({
				"project_id": state.project_id,
				"cleaned_data": state.cleaned_data_path or raw_data,
				"hypotheses": state.hypotheses,
				"analysis_plan": ANALYSIS_PLAN,
			})
		except ToolUnavailable as e:
			logger.warning(f"{state.project_id}: {e}")
			state.errors.append(f"Code generator not available: {e}")
			return

		if not _is_success(result):
			state.errors.append(f"Code generation failed: {_joined_errors(result)}")
			return

		state.analysis_scripts = result.get("analysis_scripts")
		state.exploratory_findings = result.get("exploratory_findings")
		state.advance(WorkflowStage.CODE_GENERATION_COMPLETE)
		state.log.append("Code generation completed successfully")

	def project_status(self, project_id: str) -> ProjectStatusOutput:
		state = self.store.get(project_id)
		if state is None:
			return ProjectStatusOutput(
				status=ToolStatus.ERROR,
				errors=[f"Project not found: {project_id}"],
				log=[f"Status requested for unknown project: {project_id}"],
			)
		return ProjectStatusOutput(
			status=ToolStatus.SUCCESS,
			project=state.to_dict(),
			next_steps=next_steps_for(state.workflow_stage),
			log=[f"Status requested for project: {project_id}"],
		)
