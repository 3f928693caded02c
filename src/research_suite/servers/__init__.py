"""Tool server registry - one factory per server key."""

from typing import Callable

from ..config import Config
from ..toolkit import ToolServer
from . import code_executor, code_generator, data_processor, initiator, orchestrator, writer

ServerFactory = Callable[[Config], ToolServer]

SERVERS: dict[str, tuple[str, ServerFactory]] = {
	"initiator": (initiator.DISPLAY_NAME, initiator.create_server),
	"data-processor": (data_processor.DISPLAY_NAME, data_processor.create_server),
	"code-generator": (code_generator.DISPLAY_NAME, code_generator.create_server),
	"code-executor": (code_executor.DISPLAY_NAME, code_executor.create_server),
	"writer": (writer.DISPLAY_NAME, writer.create_server),
	"orchestrator": (orchestrator.DISPLAY_NAME, orchestrator.create_server),
}


def all_server_keys() -> list[str]:
	return list(SERVERS)


def display_name(key: str) -> str:
	return SERVERS[key][0]


def create_server(key: str, config: Config) -> ToolServer:
	"""
	Build the server registered under key.

	Raises:
		KeyError: if no server is registered under key
	"""
	if key not in SERVERS:
		raise KeyError(f"Unknown server: {key}. Choose from: {', '.join(SERVERS)}")
	_, factory = SERVERS[key]
	return factory(config)
