"""Research orchestrator: runs the pipeline and reports project status."""

import logging

from ..config import Config
from ..gateway import LocalGateway, SubprocessGateway, ToolGateway
from ..schemas import InitiateInput, InitiateOutput, ProjectStatusInput, ProjectStatusOutput
from ..toolkit import ToolServer
from ..workflow import ProjectStore, WorkflowCoordinator, get_project_store
from . import code_generator, data_processor, initiator

logger = logging.getLogger(__name__)

DISPLAY_NAME = "academic-research-orchestrator"


def build_gateway(config: Config) -> ToolGateway:
	"""Gateway for the configured call mode."""
	if config.call_mode == "local":
		return LocalGateway({
			"initiator": initiator.create_server(config),
			"data-processor": data_processor.create_server(config),
			"code-generator": code_generator.create_server(config),
		})
	return SubprocessGateway(config.python_command, timeout=config.call_timeout)


def create_server(
	config: Config,
	gateway: ToolGateway | None = None,
	store: ProjectStore | None = None,
) -> ToolServer:
	coordinator = WorkflowCoordinator(
		store if store is not None else get_project_store(),
		gateway if gateway is not None else build_gateway(config),
	)
	logger.debug(f"Orchestrator using {type(coordinator.gateway).__name__}")

	server = ToolServer("orchestrator", DISPLAY_NAME)
	server.tool(
		"initiate",
		"Initiates a new research project and coordinates the research workflow.",
		InitiateInput,
		InitiateOutput,
	)(coordinator.initiate)

	@server.tool(
		"project_status",
		"Returns the recorded state and next steps for a project started by initiate.",
		ProjectStatusInput,
		ProjectStatusOutput,
	)
	def project_status(args: ProjectStatusInput) -> ProjectStatusOutput:
		return coordinator.project_status(args.project_id)

	return server
