"""Shared test fixtures and helpers for research-suite tests."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from research_suite.config import Config
from research_suite.errors import ToolUnavailable
from research_suite.gateway import ToolGateway
from research_suite.logging_config import CONSOLE_HANDLER, FILE_HANDLER, ROOT_LOGGER


def make_config(tmp_path: Path, **overrides: Any) -> Config:
	"""Config rooted entirely under tmp_path."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		workspace_dir=tmp_path / "workspace",
		**overrides,
	)
	config.ensure_dirs()
	return config


def refine_success(**fields: Any) -> dict:
	payload = {
		"status": "success",
		"refined_question": "Refined version of: remote work based on a.pdf.",
		"hypotheses": ["H1: remote work is positively correlated with outcome X."],
		"operational_definitions": {"remote_wor": "Measured by survey score Y."},
		"lit_review_notes": "notes",
		"errors": [],
		"log": [],
	}
	payload.update(fields)
	return payload


def process_success(**fields: Any) -> dict:
	payload = {
		"status": "success",
		"cleaned_data": "/tmp/proj_cleaned.csv",
		"processing_log": ["Initial data: 5 rows"],
		"decision_rationale": "rationale",
		"quality_report": {},
		"errors": [],
		"log": [],
	}
	payload.update(fields)
	return payload


def generate_success(**fields: Any) -> dict:
	payload = {
		"status": "success",
		"analysis_scripts": {"01_eda_x.py": "print('hi')"},
		"exploratory_findings": {"description": "ok", "outliers": None},
		"errors": [],
		"log": [],
	}
	payload.update(fields)
	return payload


def failure(*errors: str) -> dict:
	return {"status": "error", "errors": list(errors), "log": []}


class FakeGateway(ToolGateway):
	"""
	Gateway with canned replies per tool.

	A reply may be a payload dict or an exception instance to raise.
	Every call is recorded in `calls` as (server, tool, arguments).
	"""

	def __init__(self, **replies: Any):
		self.replies = {"refine": refine_success(), "process": process_success(), "generate": generate_success()}
		self.replies.update(replies)
		self.calls: list[tuple[str, str, dict]] = []

	async def call(self, server: str, tool: str, arguments: dict) -> dict:
		self.calls.append((server, tool, arguments))
		reply = self.replies.get(tool)
		if reply is None:
			raise ToolUnavailable(server, tool, "no canned reply")
		if isinstance(reply, BaseException):
			raise reply
		return reply

	def tools_called(self) -> list[str]:
		return [tool for _, tool, _ in self.calls]


@contextmanager
def package_logger_state(clear: bool = False) -> Iterator[logging.Logger]:
	"""Restore the research_suite logger's handlers, level and propagation on exit."""
	logger = logging.getLogger(ROOT_LOGGER)
	handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
	if clear:
		logger.handlers.clear()
		logger.propagate = True
	try:
		yield logger
	finally:
		for handler in logger.handlers:
			if handler not in handlers and handler.get_name() in (CONSOLE_HANDLER, FILE_HANDLER):
				handler.close()
		logger.handlers[:] = handlers
		logger.setLevel(level)
		logger.propagate = propagate
