"""Tests for tool input/output models and error kinds."""

import pytest
from pydantic import ValidationError

from research_suite.errors import (
	CallTimeout,
	ErrorKind,
	ResourceUnavailable,
	ToolUnavailable,
	UnknownOperation,
	ValidationFailed,
)
from research_suite.schemas import (
	GenerateInput,
	GenerateOutput,
	InitiateOutput,
	ProcessOutput,
	RunInput,
	ToolStatus,
	validation_messages,
)


class TestGenerateInput:
	"""analysis_plan accepts both shapes."""

	def test_list_plan(self):
		args = GenerateInput(project_id="p", cleaned_data="c", hypotheses=[], analysis_plan=["EDA", "anova"])
		assert args.analysis_plan == ["EDA", "anova"]

	def test_string_plan_is_split(self):
		args = GenerateInput(project_id="p", cleaned_data="c", hypotheses=[], analysis_plan="a, b ,, c")
		assert args.analysis_plan == ["a", "b", "c"]

	def test_wrong_type_rejected(self):
		with pytest.raises(ValidationError):
			GenerateInput(project_id="p", cleaned_data="c", hypotheses=[], analysis_plan=42)


def test_validation_messages_name_the_field():
	with pytest.raises(ValidationError) as exc_info:
		RunInput.model_validate({"project_id": "p", "scripts": {"a.py": 1}})
	messages = validation_messages(exc_info.value)
	assert "data: Field required" in messages
	assert any(m.startswith("scripts.a.py:") for m in messages)


def test_run_input_defaults_to_python():
	assert RunInput(project_id="p", scripts={}, data="d").environment == "python"


def test_failure_shapes_have_empty_payloads():
	"""Output models must be constructible with only status and errors."""
	process = ProcessOutput(status=ToolStatus.ERROR, errors=["x"]).model_dump(mode="json")
	assert process == {
		"status": "error",
		"errors": ["x"],
		"log": [],
		"cleaned_data": "",
		"processing_log": [],
		"decision_rationale": "",
		"quality_report": {},
	}
	generate = GenerateOutput(status=ToolStatus.ERROR).model_dump(mode="json")
	assert generate["exploratory_findings"] == {"description": "", "outliers": None}
	assert InitiateOutput().workflow_stage == "initiated"


class TestErrors:
	"""Each exception carries its kind."""

	def test_kinds(self):
		assert ValidationFailed(["a: bad"]).kind is ErrorKind.VALIDATION
		assert ResourceUnavailable("gone").kind is ErrorKind.RESOURCE_UNAVAILABLE
		assert ToolUnavailable("s", "t", "r").kind is ErrorKind.RESOURCE_UNAVAILABLE
		assert CallTimeout("s", "t", 2).kind is ErrorKind.CALL_TIMEOUT
		assert UnknownOperation("x").kind is ErrorKind.UNKNOWN_OPERATION

	def test_messages(self):
		assert str(ValidationFailed(["a: bad", "b: worse"])) == "a: bad; b: worse"
		assert str(ToolUnavailable("initiator", "refine", "boom")) == "Failed to call initiator.refine: boom"
		assert str(CallTimeout("initiator", "refine", 1.5)) == "Failed to call initiator.refine: timed out after 1.5s"
		assert str(UnknownOperation("x")) == "Unknown tool: x"

	def test_timeout_is_unavailability(self):
		assert issubclass(CallTimeout, ToolUnavailable)
		assert issubclass(ToolUnavailable, ResourceUnavailable)
