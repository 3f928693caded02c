"""
Code executor: runs analysis scripts in a per-project working directory.

Each script runs in its own child process with a hard deadline. A failing
script is recorded and the remaining scripts still run.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..config import Config
from ..schemas import RunInput, RunOutput, ToolStatus
from ..toolkit import ToolServer

logger = logging.getLogger(__name__)

DISPLAY_NAME = "academic-code-executor"
SUMMARY_FILE = "execution_summary.txt"

_EXTENSION_ENVIRONMENTS = {
	".py": "python",
	".r": "r",
	".js": "node",
}

_ENVIRONMENT_LABELS = {
	"python": "Python",
	"r": "R",
	"node": "Node.js",
}


class ScriptFailed(Exception):
	"""A script could not be run to a zero exit status."""


@dataclass
class ScriptRun:
	"""Outcome of one script execution."""
	stdout: str
	stderr: str
	returncode: int


def resolve_environment(filename: str, declared: str) -> str:
	"""Environment from the file extension, else the declared one."""
	return _EXTENSION_ENVIRONMENTS.get(Path(filename).suffix.lower(), declared)


def interpreter_for(environment: str, config: Config) -> str:
	return {
		"python": config.python_command,
		"r": "Rscript",
		"node": "node",
	}[environment]


async def run_script(cmd: list[str], cwd: Path, timeout: float) -> ScriptRun:
	"""
	Run one command in cwd, killing it if the deadline passes.

	Raises:
		ScriptFailed: on a missing interpreter or timeout
	"""
	try:
		proc = await asyncio.create_subprocess_exec(
			*cmd,
			stdout=asyncio.subprocess.PIPE,
			stderr=asyncio.subprocess.PIPE,
			cwd=str(cwd),
		)
	except FileNotFoundError:
		raise ScriptFailed(f"Interpreter not found: {cmd[0]}")

	try:
		stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
	except asyncio.TimeoutError:
		proc.kill()
		await proc.wait()
		raise ScriptFailed(f"Timed out after {timeout:g}s")

	return ScriptRun(
		stdout=stdout.decode("utf-8", errors="replace"),
		stderr=stderr.decode("utf-8", errors="replace"),
		returncode=proc.returncode,
	)


def _snapshot(directory: Path) -> set[str]:
	return {p.name for p in directory.iterdir() if p.is_file()}


def _summary_text(args: RunInput, output_files: list[str], execution_logs: list[str], errors: list[str]) -> str:
	lines = [
		f"Execution Summary for Project: {args.project_id}",
		f"Timestamp: {datetime.now(timezone.utc).isoformat()}",
		f"Environment: {args.environment}",
		f"Data File: {args.data}",
		"",
		"Scripts Executed:",
		*[f"- {name}" for name in args.scripts],
		"",
		"Output Files Generated:",
		*[f"- {path}" for path in output_files],
		"",
		"Execution Logs:",
		*execution_logs,
		"",
	]
	if errors:
		lines += ["Errors:", *errors]
	else:
		lines.append("No errors occurred.")
	return "\n".join(lines)


async def execute_scripts(args: RunInput, config: Config) -> RunOutput:
	log = [f"Starting code execution for project: {args.project_id}"]
	work_dir = config.output_dir / args.project_id
	work_dir.mkdir(parents=True, exist_ok=True)
	log.append(f"Created working directory: {work_dir}")

	execution_logs: list[str] = []
	output_files: list[str] = []
	errors: list[str] = []
	script_names = set(args.scripts)

	for filename, content in args.scripts.items():
		log.append(f"Processing script: {filename}")
		try:
			if Path(filename).name != filename:
				raise ScriptFailed("script name must not contain a directory component")

			(work_dir / filename).write_text(content, encoding="utf-8")
			execution_logs.append(f"Created script file: {filename}")

			env = resolve_environment(filename, args.environment)
			cmd = [interpreter_for(env, config), filename, args.data]
			before = _snapshot(work_dir)
			result = await run_script(cmd, work_dir, config.script_timeout)
			execution_logs.append(f"Executed {_ENVIRONMENT_LABELS[env]} script: {filename}")

			if result.stdout:
				execution_logs.append(f"STDOUT from {filename}:")
				execution_logs.append(result.stdout)
			if result.stderr:
				execution_logs.append(f"STDERR from {filename}:")
				execution_logs.append(result.stderr)

			for name in sorted(_snapshot(work_dir) - before - script_names):
				output_files.append(str(work_dir / name))

			if result.returncode != 0:
				raise ScriptFailed(f"exited with code {result.returncode}")
		except (ScriptFailed, OSError) as e:
			message = f"Failed to execute {filename}: {e}"
			logger.warning(message)
			errors.append(message)
			execution_logs.append(message)
			log.append(message)

	summary_path = work_dir / SUMMARY_FILE
	summary_path.write_text(_summary_text(args, output_files, execution_logs, errors), encoding="utf-8")
	output_files.append(str(summary_path))
	log.append(f"Execution summary written to: {summary_path}")

	return RunOutput(
		status=ToolStatus.PARTIAL_SUCCESS if errors else ToolStatus.SUCCESS,
		execution_logs=execution_logs,
		output_files=output_files,
		errors=errors,
		log=log,
	)


def create_server(config: Config) -> ToolServer:
	server = ToolServer("code-executor", DISPLAY_NAME)

	@server.tool(
		"run",
		"Executes analysis scripts in a controlled environment and captures outputs.",
		RunInput,
		RunOutput,
	)
	async def run(args: RunInput) -> RunOutput:
		return await execute_scripts(args, config)

	return server
