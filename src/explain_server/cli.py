"""
Command-line interface for Explain Server.

Provides CLI commands for running and exercising the service:
- run: Start the API server
- format: Run the formatting pipeline over raw model text
- config: Print the resolved configuration

Usage:
    explain-server run [--port PORT] [--host HOST]
    explain-server format [FILE] [--limit N] [--seed N]
    explain-server config

Environment Variables:
    EXPLAIN_HOST: Host to bind the API server (default: 0.0.0.0)
    EXPLAIN_PORT: Port for the API server (default: 8000)
    OPENAI_API_KEY: Provider key used by POST /api/explain
    See explain_server.config for the full list.
"""

import argparse
import random
import sys


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the API server in the foreground.

    Configuration Priority:
        1. CLI arguments (--port, --host)
        2. Environment variables (EXPLAIN_PORT, EXPLAIN_HOST)
        3. config/server.ini, then built-in defaults

    Returns:
        0 on clean shutdown (Ctrl+C), 1 on startup error
    """
    from explain_server.config import config, configure_logging

    configure_logging(config.logging)

    try:
        from explain_server.api.server import start_server

        start_server(host=getattr(args, "host", None), port=getattr(args, "port", None))
    except KeyboardInterrupt:
        return 0
    except (OSError, ValueError) as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_format(args: argparse.Namespace) -> int:
    """
    Format raw model text read from FILE (or stdin) and print the result.

    ``--seed`` makes the decoration glyphs reproducible; ``--limit``
    overrides the configured character budget.

    Returns:
        0 on success, 1 if the input or the formatting policy can't be read
    """
    from explain_server.config import config
    from explain_server.formatting import ExplanationFormatter

    path = getattr(args, "file", None)
    try:
        if path and path != "-":
            with open(path, encoding="utf-8") as f:
                raw_text = f.read()
        else:
            raw_text = sys.stdin.read()
        policy = config.formatting.load_policy()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    seed = getattr(args, "seed", None)
    rng = random.Random(seed) if seed is not None else None
    formatter = ExplanationFormatter(policy, rng=rng)
    print(formatter.format(raw_text, getattr(args, "limit", None)))
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print the resolved server configuration."""
    from explain_server.config import print_config_summary

    print_config_summary()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="explain-server",
        description="Explain Server - formatted model explanations for short passages",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run the API server",
        description="Start the FastAPI server that answers /api/explain.",
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="API server port (default: 8000, or EXPLAIN_PORT env var)",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind the server to (default: 0.0.0.0, or EXPLAIN_HOST env var)",
    )
    run_parser.set_defaults(func=cmd_run)

    # format command
    format_parser = subparsers.add_parser(
        "format",
        help="Format raw model text",
        description="Run the formatting pipeline over raw text from FILE or stdin.",
    )
    format_parser.add_argument("file", nargs="?", help="Input file (default: stdin)")
    format_parser.add_argument(
        "--limit",
        type=int,
        help="Character budget (default: configured length limit)",
    )
    format_parser.add_argument(
        "--seed",
        type=int,
        help="Seed for decoration glyph selection",
    )
    format_parser.set_defaults(func=cmd_format)

    # config command
    config_parser = subparsers.add_parser("config", help="Show the resolved configuration")
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
