"""
Duality CLI - Command-line interface for the engine.

Usage:
    duality tools                              List tools
    duality call <tool> [--args JSON] [--seed N] [--summary]
                                               Run one tool in a throwaway session
    duality serve [--host H] [--port P]        Run the HTTP API
"""

import argparse
import json
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Duality - Rules engine for an LLM game master",
        prog="duality",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("DUALITY_LOG_LEVEL", "INFO"),
        help="Logging level (default: $DUALITY_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Tools command
    subparsers.add_parser("tools", help="List available tools")

    # Call command
    call_parser = subparsers.add_parser("call", help="Run a tool in a throwaway session")
    call_parser.add_argument("tool", help="Tool name (see `duality tools`)")
    call_parser.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    call_parser.add_argument("--seed", type=int, help="Seed for the session's dice")
    call_parser.add_argument("--summary", action="store_true", help="Print the state digest afterwards")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "tools":
        cmd_tools(args)
    elif args.command == "call":
        cmd_call(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_tools(args):
    """List tools."""
    from .api.tools import TOOL_REGISTRY

    for tool in TOOL_REGISTRY.values():
        print(f"{tool.name:<24} {tool.description}")


def cmd_call(args):
    """Run one tool in a throwaway session."""
    from .api.service import ToolService, UnknownToolError
    from .session import SessionManager

    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        print(f"Error: --args is not valid JSON: {e}")
        sys.exit(1)
    if not isinstance(arguments, dict):
        print("Error: --args must be a JSON object")
        sys.exit(1)

    service = ToolService(session_manager=SessionManager())
    session = service.create_session("cli", seed=args.seed)

    try:
        result = service.call(session.session_id, args.tool, arguments)
    except UnknownToolError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    print(json.dumps(result.to_dict()["output"], indent=2))
    if args.summary:
        print()
        print(service.render_state(session.session_id))


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install duality-engine[server]")
        sys.exit(1)

    uvicorn.run("duality.api.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
