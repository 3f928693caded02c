"""
Calls from the orchestrator to the other tool servers.

SubprocessGateway runs each call as a short-lived `research_suite call`
process and reads its JSON reply from the merged output stream.
LocalGateway dispatches to ToolServer objects in this process.
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any

from .errors import CallTimeout, ToolUnavailable, UnknownOperation
from .toolkit import ToolServer

logger = logging.getLogger(__name__)


def extract_json_line(output: str) -> dict[str, Any] | None:
	"""
	Find the first line that is a complete brace-delimited object.

	Returns:
		The parsed object, or None when no line looks like one

	Raises:
		json.JSONDecodeError: if the first candidate line is not valid JSON
	"""
	for line in output.splitlines():
		candidate = line.strip()
		if candidate.startswith("{") and candidate.endswith("}"):
			value = json.loads(candidate)
			if isinstance(value, dict):
				return value
	return None


class ToolGateway(ABC):
	"""Access to the downstream operations the orchestrator uses."""

	@abstractmethod
	async def call(self, server: str, tool: str, arguments: dict[str, Any]) -> dict[str, Any]:
		"""
		Invoke one tool and return its payload.

		Raises:
			ToolUnavailable: if the server cannot be reached or gives no usable reply
		"""

	async def refine(self, arguments: dict[str, Any]) -> dict[str, Any]:
		return await self.call("initiator", "refine", arguments)

	async def process(self, arguments: dict[str, Any]) -> dict[str, Any]:
		return await self.call("data-processor", "process", arguments)

	async def generate(self, arguments: dict[str, Any]) -> dict[str, Any]:
		return await self.call("code-generator", "generate", arguments)


class LocalGateway(ToolGateway):
	"""Dispatch to in-process ToolServers keyed by server name."""

	def __init__(self, servers: dict[str, ToolServer]):
		self.servers = servers

	async def call(self, server: str, tool: str, arguments: dict[str, Any]) -> dict[str, Any]:
		target = self.servers.get(server)
		if target is None:
			raise ToolUnavailable(server, tool, "server not registered")
		try:
			return await target.invoke(tool, arguments)
		except UnknownOperation as e:
			raise ToolUnavailable(server, tool, e.message)
		except Exception as e:
			# Same outcome as a child process that crashes in subprocess mode
			logger.exception(f"{server}.{tool} raised")
			raise ToolUnavailable(server, tool, str(e)) from e


class SubprocessGateway(ToolGateway):
	"""Run each call as `<python> -m research_suite call <server> <tool> <json>`."""

	def __init__(self, python_command: str, timeout: float = 30.0, module: str = "research_suite"):
		self.python_command = python_command
		self.timeout = timeout
		self.module = module

	def command(self, server: str, tool: str, arguments: dict[str, Any]) -> list[str]:
		return [self.python_command, "-m", self.module, "call", server, tool, json.dumps(arguments)]

	async def _run(self, cmd: list[str], server: str, tool: str) -> tuple[int, str]:
		try:
			proc = await asyncio.create_subprocess_exec(
				*cmd,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.STDOUT,
				env=os.environ.copy(),
			)
		except OSError as e:
			raise ToolUnavailable(server, tool, f"could not start {cmd[0]}: {e}")

		try:
			stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
		except asyncio.TimeoutError:
			proc.kill()
			await proc.wait()
			raise CallTimeout(server, tool, self.timeout)

		return proc.returncode, stdout.decode("utf-8", errors="replace")

	async def call(self, server: str, tool: str, arguments: dict[str, Any]) -> dict[str, Any]:
		logger.debug(f"Calling {server}.{tool} in a subprocess")
		returncode, output = await self._run(self.command(server, tool, arguments), server, tool)

		if returncode != 0:
			tail = output.strip().splitlines()[-1:] or ["no output"]
			raise ToolUnavailable(server, tool, f"exited with code {returncode}: {tail[0]}")

		try:
			payload = extract_json_line(output)
		except json.JSONDecodeError as e:
			raise ToolUnavailable(server, tool, f"malformed JSON reply: {e}")
		if payload is None:
			raise ToolUnavailable(server, tool, "no JSON object in output")
		return payload
