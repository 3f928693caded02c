"""CLI for research-suite: serve, call, tools, setup, and doctor commands."""

import argparse
import asyncio
import json
import platform
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import Config, get_config
from .errors import UnknownOperation
from .logging_config import setup_logging
from .servers import SERVERS, all_server_keys, create_server, display_name
from .toolkit import build_app

CORE_DEPS = ["mcp", "pydantic", "platformdirs", "python-dotenv", "rich"]
DEFAULT_MCP_CONFIG = Path(".mcp.json")


def _mcp_entry(key: str) -> dict:
	return {
		"type": "stdio",
		"command": "research-suite",
		"args": ["serve", key],
	}


def _inject_mcp_config(config_path: Path) -> bool:
	"""Add a stdio entry for every server to an MCP client config file. Existing entries are kept."""
	try:
		if config_path.exists():
			with open(config_path) as f:
				data = json.load(f)
		else:
			data = {}

		servers = data.setdefault("mcpServers", {})
		added = []
		for key in all_server_keys():
			name = display_name(key)
			if name in servers:
				print(f"  {name}: already configured")
				continue
			servers[name] = _mcp_entry(key)
			added.append(name)

		if not added:
			print(f"  Nothing to add to {config_path}")
			return True

		config_path.parent.mkdir(parents=True, exist_ok=True)
		with open(config_path, "w") as f:
			json.dump(data, f, indent=2)
		for name in added:
			print(f"  {name}: added")
		print(f"  Updated {config_path}")
		return True
	except (json.JSONDecodeError, OSError) as e:
		print(f"  Failed to update {config_path}: {e}")
		return False


def _load(args: argparse.Namespace) -> Config:
	config = get_config()
	setup_logging(config.log_level, config.log_dir, name=f"research_suite-{args.command}")
	return config


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run one tool server on stdio."""
	config = _load(args)
	app = build_app(create_server(args.server, config))
	app.run()


def cmd_call(args: argparse.Namespace) -> None:
	"""Invoke a tool once and print its payload as a single JSON line."""
	config = _load(args)
	try:
		arguments = json.loads(args.arguments)
	except json.JSONDecodeError as e:
		print(f"Invalid JSON arguments: {e}", file=sys.stderr)
		sys.exit(2)
	if not isinstance(arguments, dict):
		print("Arguments must be a JSON object", file=sys.stderr)
		sys.exit(2)

	server = create_server(args.server, config)
	try:
		payload = asyncio.run(server.invoke(args.tool, arguments))
	except UnknownOperation as e:
		print(e.message, file=sys.stderr)
		sys.exit(1)
	print(json.dumps(payload))


def cmd_tools(args: argparse.Namespace) -> None:
	"""List the tools a server exposes."""
	config = get_config()
	server = create_server(args.server, config)
	capabilities = server.list_capabilities()

	if args.json:
		print(json.dumps({"tools": capabilities}, indent=2))
		return

	table = Table(title=f"{server.display_name} ({server.name})", show_lines=False)
	table.add_column("Tool", style="cyan")
	table.add_column("Description")
	table.add_column("Required", style="yellow")
	for cap in capabilities:
		required = ", ".join(cap["inputSchema"].get("required", []))
		table.add_row(cap["name"], cap["description"], required)
	Console().print(table)


def cmd_setup(args: argparse.Namespace) -> None:
	"""Register every server in an MCP client config file."""
	config_path = Path(args.config).expanduser() if args.config else DEFAULT_MCP_CONFIG
	print("research-suite setup")
	print(f"{'=' * 40}")
	if not _inject_mcp_config(config_path):
		sys.exit(1)


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("research-suite doctor")
	print(f"{'=' * 40}")
	issues: list[str] = []

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	print("  Core deps:")
	for dep in CORE_DEPS:
		try:
			print(f"    {dep:22s} {pkg_version(dep)}")
		except PackageNotFoundError:
			print(f"    {dep:22s} NOT INSTALLED")
			issues.append(f"{dep} package not installed")
	print()

	try:
		config = get_config()
	except (ValueError, OSError) as e:
		print(f"  Config:       INVALID ({e})")
		issues.append(f"Configuration error: {e}")
		config = None

	if config is not None:
		print("  Config:")
		print(f"    config dir:          {config.config_dir}")
		print(f"    workspace output:    {config.output_dir}")
		print(f"    processed data:      {config.processed_data_dir}")
		print(f"    reports:             {config.reports_dir}")
		print(f"    call mode:           {config.call_mode} (timeout {config.call_timeout:g}s)")
		print()

		print("  Servers:")
		for key in SERVERS:
			try:
				server = create_server(key, config)
				print(f"    {key:16s} OK ({len(server.tool_names)} tools)")
			except Exception as e:
				print(f"    {key:16s} FAILED ({e})")
				issues.append(f"Server {key} failed to build: {e}")
	print()

	if issues:
		print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			print(f"    - {issue}")
		sys.exit(1)
	else:
		print("  All checks passed.")


def main(argv: list[str] | None = None) -> None:
	"""CLI entry point."""
	load_dotenv()

	parser = argparse.ArgumentParser(
		prog="research-suite",
		description="MCP tool servers for an academic research pipeline",
	)
	subparsers = parser.add_subparsers(dest="command")
	server_keys = all_server_keys()

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run one MCP server (stdio)")
	serve_parser.add_argument("server", choices=server_keys)
	serve_parser.set_defaults(func=cmd_serve)

	# call
	call_parser = subparsers.add_parser("call", help="Invoke one tool and print its JSON payload")
	call_parser.add_argument("server", choices=server_keys)
	call_parser.add_argument("tool")
	call_parser.add_argument("arguments", nargs="?", default="{}", help="Tool arguments as a JSON object")
	call_parser.set_defaults(func=cmd_call)

	# tools
	tools_parser = subparsers.add_parser("tools", help="List a server's tools")
	tools_parser.add_argument("server", choices=server_keys)
	tools_parser.add_argument("--json", action="store_true", help="Print the raw capability listing")
	tools_parser.set_defaults(func=cmd_tools)

	# setup
	setup_parser = subparsers.add_parser("setup", help="Add all servers to an MCP client config")
	setup_parser.add_argument("--config", type=str, default=None, help=f"Config file (default: {DEFAULT_MCP_CONFIG})")
	setup_parser.set_defaults(func=cmd_setup)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args(argv)

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)
