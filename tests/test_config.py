"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from research_suite.config import Config, _apply_env_overrides, load_config


def test_config_defaults():
	"""Config should have sensible defaults."""
	config = Config()
	assert config.config_dir.is_absolute()
	assert config.data_dir.is_absolute()
	assert config.log_dir == config.data_dir / "logs"
	assert config.output_dir == config.data_dir / "workspace" / "output"
	assert config.processed_data_dir == config.data_dir / "workspace" / "processed_data"
	assert config.reports_dir == config.data_dir / "workspace" / "reports"
	assert config.call_mode == "subprocess"
	assert config.call_timeout == 30.0
	assert config.script_timeout == 60.0


def test_workspace_dir_moves_outputs(tmp_path: Path):
	"""An explicit workspace should hold all generated artifacts."""
	config = Config(data_dir=tmp_path / "data", workspace_dir=tmp_path / "ws")
	assert config.output_dir == tmp_path / "ws" / "output"
	assert config.reports_dir == tmp_path / "ws" / "reports"
	assert config.log_dir == tmp_path / "data" / "logs"


def test_config_env_overrides():
	"""Environment variables should override defaults."""
	config = Config()
	with patch.dict(os.environ, {
		"RESEARCH_SUITE_DATA_DIR": "/tmp/test-data",
		"RESEARCH_SUITE_CONFIG_DIR": "/tmp/test-config",
		"RESEARCH_SUITE_CALL_TIMEOUT": "5",
		"RESEARCH_SUITE_CALL_MODE": "local",
	}):
		config = _apply_env_overrides(config)
		assert config.data_dir == Path("/tmp/test-data")
		assert config.config_dir == Path("/tmp/test-config")
		assert config.call_timeout == 5.0
		assert config.call_mode == "local"
		# Derived paths should be recomputed
		assert config.log_dir == Path("/tmp/test-data/logs")
		assert config.output_dir == Path("/tmp/test-data/workspace/output")


def test_config_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
	)
	assert not config.config_dir.exists()
	assert not config.data_dir.exists()

	config.ensure_dirs()

	assert config.config_dir.exists()
	assert config.data_dir.exists()
	assert config.log_dir.exists()


def test_load_config_creates_dirs(tmp_path: Path):
	"""load_config should create directories."""
	with patch.dict(os.environ, {
		"RESEARCH_SUITE_DATA_DIR": str(tmp_path / "data"),
		"RESEARCH_SUITE_CONFIG_DIR": str(tmp_path / "config"),
	}):
		config = load_config()
		assert config.data_dir.exists()
		assert config.config_dir.exists()


def test_load_config_reads_toml(tmp_path: Path):
	"""config.toml values apply, and env vars still win over them."""
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'script_timeout = 12\n'
		'call_timeout = 7\n'
		f'workspace_dir = "{(tmp_path / "ws").as_posix()}"\n'
	)
	with patch.dict(os.environ, {
		"RESEARCH_SUITE_DATA_DIR": str(tmp_path / "data"),
		"RESEARCH_SUITE_CONFIG_DIR": str(config_dir),
		"RESEARCH_SUITE_CALL_TIMEOUT": "3",
	}):
		config = load_config()
	assert config.script_timeout == 12.0
	assert config.call_timeout == 3.0
	assert config.output_dir == tmp_path / "ws" / "output"


def test_load_config_rejects_unknown_call_mode(tmp_path: Path):
	with patch.dict(os.environ, {
		"RESEARCH_SUITE_DATA_DIR": str(tmp_path / "data"),
		"RESEARCH_SUITE_CONFIG_DIR": str(tmp_path / "config"),
		"RESEARCH_SUITE_CALL_MODE": "carrier-pigeon",
	}):
		with pytest.raises(ValueError, match="call_mode"):
			load_config()


def test_get_config_is_cached(tmp_path: Path, monkeypatch):
	"""get_config loads once and then returns the same instance."""
	from research_suite import config as config_module

	monkeypatch.setattr(config_module, "_config", None)
	with patch.dict(os.environ, {
		"RESEARCH_SUITE_DATA_DIR": str(tmp_path / "data"),
		"RESEARCH_SUITE_CONFIG_DIR": str(tmp_path / "config"),
	}):
		first = config_module.get_config()
	assert first.data_dir == tmp_path / "data"
	assert config_module.get_config() is first
