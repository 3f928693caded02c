"""
Tool server core shared by every server in the suite.

A ToolServer owns a fixed set of ToolSpecs. It advertises them through
list_capabilities() and runs them through invoke(), which validates the
arguments before the handler ever sees them. ToolServerApp exposes a
ToolServer over MCP using FastMCP's stdio transport.
"""

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from mcp.types import Tool as MCPTool
from pydantic import BaseModel, ValidationError

from .errors import ResearchSuiteError, UnknownOperation, ValidationFailed
from .schemas import ToolResult, ToolStatus, validation_messages

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Union[ToolResult, Awaitable[ToolResult]]]


@dataclass
class ToolSpec:
	"""A named operation with declared input and output schemas."""
	name: str
	description: str
	input_model: type[BaseModel]
	output_model: type[ToolResult]
	handler: Handler

	def capability(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"description": self.description,
			"inputSchema": self.input_model.model_json_schema(),
		}

	def failure(self, errors: list[str], log: list[str]) -> dict[str, Any]:
		"""Build an error payload in this tool's declared output shape."""
		result = self.output_model(status=ToolStatus.ERROR, errors=errors, log=log)
		return result.model_dump(mode="json")


class ToolServer:
	"""
	A set of tools served under one name.

	Stateless across invocations apart from whatever handlers write to disk.
	"""

	def __init__(self, name: str, display_name: str, version: str = "1.0.0"):
		self.name = name
		self.display_name = display_name
		self.version = version
		self._tools: dict[str, ToolSpec] = {}

	def add_tool(self, spec: ToolSpec) -> None:
		if spec.name in self._tools:
			raise ValueError(f"Tool already registered on {self.name}: {spec.name}")
		self._tools[spec.name] = spec

	def tool(
		self,
		name: str,
		description: str,
		input_model: type[BaseModel],
		output_model: type[ToolResult],
	) -> Callable[[Handler], Handler]:
		"""Decorator form of add_tool."""
		def decorator(fn: Handler) -> Handler:
			self.add_tool(ToolSpec(name, description, input_model, output_model, fn))
			return fn
		return decorator

	@property
	def tool_names(self) -> list[str]:
		return list(self._tools)

	def list_capabilities(self) -> list[dict[str, Any]]:
		"""Static {name, description, inputSchema} for each tool."""
		return [spec.capability() for spec in self._tools.values()]

	async def invoke(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
		"""
		Validate arguments and run the named tool.

		Returns:
			The tool payload as a JSON-compatible dict

		Raises:
			UnknownOperation: if no tool with this name is served here
		"""
		spec = self._tools.get(name)
		if spec is None:
			raise UnknownOperation(name)

		try:
			args = spec.input_model.model_validate(arguments or {})
		except ValidationError as e:
			failed = ValidationFailed(validation_messages(e))
			logger.warning(f"{self.name}.{name}: {failed.kind.value}: {failed.message}")
			return spec.failure(failed.messages, [f"Input validation failed for '{name}'"])

		logger.info(f"{self.name}.{name}: invoked")
		try:
			result = spec.handler(args)
			if inspect.isawaitable(result):
				result = await result
		except (ResearchSuiteError, OSError) as e:
			logger.error(f"{self.name}.{name}: {e}")
			return spec.failure([str(e)], [f"Error in '{name}' tool: {e}"])

		return result.model_dump(mode="json")


class ToolServerApp(FastMCP):
	"""FastMCP app whose tool listing and dispatch come from a ToolServer."""

	def __init__(self, server: ToolServer, **settings: Any):
		self.tool_server = server
		super().__init__(server.display_name, **settings)

	async def list_tools(self) -> list[MCPTool]:
		return [
			MCPTool(
				name=cap["name"],
				description=cap["description"],
				inputSchema=cap["inputSchema"],
			)
			for cap in self.tool_server.list_capabilities()
		]

	async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
		payload = await self.tool_server.invoke(name, arguments)
		return CallToolResult(
			content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
			isError=payload.get("status") == ToolStatus.ERROR.value,
		)


def build_app(server: ToolServer) -> ToolServerApp:
	"""Wrap a ToolServer for stdio serving."""
	return ToolServerApp(server)
