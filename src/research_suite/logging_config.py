"""Centralized logging configuration for the research suite servers."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "research_suite"
CONSOLE_HANDLER = "research_suite.console"
FILE_HANDLER = "research_suite.file"


def setup_logging(
	level: str | None = None,
	log_dir: Path | str | None = None,
	name: str = "research_suite",
) -> logging.Logger:
	"""
	Set up logging with a stderr console handler and a rotating file handler.

	stdout is reserved for the MCP stdio channel, so nothing is ever logged there.

	Args:
		level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env var or INFO.
		log_dir: Directory for log files. No file handler when omitted.
		name: Base name of the log file

	Returns:
		Configured package logger
	"""
	level = level or os.getenv("LOG_LEVEL", "INFO")
	log_level = getattr(logging, level.upper(), logging.INFO)

	logger = logging.getLogger(ROOT_LOGGER)
	logger.setLevel(log_level)
	# FastMCP installs its own root handler
	logger.propagate = False

	# Avoid duplicate handlers
	if any(h.get_name() in (CONSOLE_HANDLER, FILE_HANDLER) for h in logger.handlers):
		return logger

	detailed_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	simple_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(message)s",
		datefmt="%H:%M:%S",
	)

	console_handler = logging.StreamHandler(sys.stderr)
	console_handler.set_name(CONSOLE_HANDLER)
	console_handler.setLevel(log_level)
	console_handler.setFormatter(simple_formatter)
	logger.addHandler(console_handler)

	if log_dir is not None:
		log_path = Path(log_dir)
		log_path.mkdir(parents=True, exist_ok=True)

		file_handler = RotatingFileHandler(
			log_path / f"{name}.log",
			maxBytes=10 * 1024 * 1024,  # 10 MB
			backupCount=5,
		)
		file_handler.set_name(FILE_HANDLER)
		file_handler.setLevel(logging.DEBUG)  # File gets all logs
		file_handler.setFormatter(detailed_formatter)
		logger.addHandler(file_handler)

	return logger
