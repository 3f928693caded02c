"""Configuration system using platformdirs for cross-platform paths."""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "research-suite"
APP_AUTHOR = "research-suite"

CALL_MODES = ("subprocess", "local")


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))
	workspace_dir: Path | None = None

	# Derived paths
	log_dir: Path = field(init=False)
	output_dir: Path = field(init=False)
	processed_data_dir: Path = field(init=False)
	reports_dir: Path = field(init=False)

	# User-configurable
	call_mode: str = "subprocess"
	call_timeout: float = 30.0
	script_timeout: float = 60.0
	python_command: str = field(default_factory=lambda: sys.executable or "python3")
	log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

	def __post_init__(self) -> None:
		workspace = self.workspace_dir or self.data_dir / "workspace"
		self.log_dir = self.data_dir / "logs"
		self.output_dir = workspace / "output"
		self.processed_data_dir = workspace / "processed_data"
		self.reports_dir = workspace / "reports"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


_PATH_FIELDS = {"config_dir", "data_dir", "workspace_dir"}
_FLOAT_FIELDS = {"call_timeout", "script_timeout"}


def _coerce(attr: str, val: object) -> object:
	if attr in _PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if attr in _FLOAT_FIELDS:
		return float(val)
	return val


def _apply_env_overrides(config: Config) -> Config:
	"""Apply RESEARCH_SUITE_* environment variable overrides."""
	env_map = {
		"RESEARCH_SUITE_CONFIG_DIR": "config_dir",
		"RESEARCH_SUITE_DATA_DIR": "data_dir",
		"RESEARCH_SUITE_WORKSPACE": "workspace_dir",
		"RESEARCH_SUITE_CALL_MODE": "call_mode",
		"RESEARCH_SUITE_CALL_TIMEOUT": "call_timeout",
		"RESEARCH_SUITE_SCRIPT_TIMEOUT": "script_timeout",
		"RESEARCH_SUITE_PYTHON": "python_command",
		"RESEARCH_SUITE_LOG_LEVEL": "log_level",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if hasattr(config, key):
			setattr(config, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config = _apply_env_overrides(config)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	if config.call_mode not in CALL_MODES:
		raise ValueError(f"call_mode must be one of {', '.join(CALL_MODES)}, got {config.call_mode!r}")
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
