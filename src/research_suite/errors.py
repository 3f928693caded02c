"""Error kinds raised across tool servers and the orchestrator."""

from enum import Enum


class ErrorKind(str, Enum):
	"""Closed set of failure categories."""
	VALIDATION = "validation"
	RESOURCE_UNAVAILABLE = "resource_unavailable"
	CALL_TIMEOUT = "call_timeout"
	UNKNOWN_OPERATION = "unknown_operation"


class ResearchSuiteError(RuntimeError):
	"""Base class for expected failures. Carries an ErrorKind."""

	kind: ErrorKind = ErrorKind.RESOURCE_UNAVAILABLE

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class ValidationFailed(ResearchSuiteError):
	"""Arguments did not match a tool's input schema."""

	kind = ErrorKind.VALIDATION

	def __init__(self, messages: list[str]) -> None:
		super().__init__("; ".join(messages) or "Invalid arguments")
		self.messages = messages


class ResourceUnavailable(ResearchSuiteError):
	"""An interpreter, file, or directory the operation needs cannot be used."""

	kind = ErrorKind.RESOURCE_UNAVAILABLE

	def __init__(self, message: str, resource: str = "") -> None:
		super().__init__(message)
		self.resource = resource


class ToolUnavailable(ResourceUnavailable):
	"""A downstream tool server could not be reached or gave no usable reply."""

	def __init__(self, server: str, tool: str, reason: str) -> None:
		super().__init__(f"Failed to call {server}.{tool}: {reason}", resource=server)
		self.server = server
		self.tool = tool
		self.reason = reason


class CallTimeout(ToolUnavailable):
	"""A downstream call exceeded its deadline."""

	kind = ErrorKind.CALL_TIMEOUT

	def __init__(self, server: str, tool: str, timeout: float) -> None:
		super().__init__(server, tool, f"timed out after {timeout:g}s")
		self.timeout = timeout


class UnknownOperation(ResearchSuiteError):
	"""The requested tool name is not served here."""

	kind = ErrorKind.UNKNOWN_OPERATION

	def __init__(self, name: str) -> None:
		super().__init__(f"Unknown tool: {name}")
		self.name = name
