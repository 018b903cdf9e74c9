"""CLI entry point for the relay service."""

import argparse
import sys

import uvicorn

from captcha_relay.core.settings import get_settings


def main() -> int:
    """
    Main CLI entry point.

        int: Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        description="CAPTCHA Relay Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    server_parser = subparsers.add_parser("server", help="Start the API server")
    server_parser.add_argument("--host", default=None, help="Server host")
    server_parser.add_argument("--port", type=int, default=None, help="Server port")
    server_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    if args.command == "server":
        return run_server(args)
    else:
        parser.print_help()
        return 0


def run_server(args: argparse.Namespace) -> int:
    """
    Run the API server.

    uvicorn handles SIGTERM/SIGINT: it stops accepting connections and waits
    up to the graceful shutdown timeout for in-flight requests before exiting.

    Args:
        args (argparse.Namespace): Parsed command line arguments.

        int: Exit code (0 for success).
    """
    settings = get_settings()

    host = args.host or settings.api_server.host
    port = args.port or settings.api_server.port

    uvicorn.run(
        app="captcha_relay.api.server:app",
        host=host,
        port=port,
        reload=args.reload,
        proxy_headers=True,
        forwarded_allow_ips=settings.api_server.forwarded_allow_ips,
        timeout_keep_alive=settings.api_server.keep_alive_timeout,
        timeout_graceful_shutdown=settings.api_server.graceful_shutdown_timeout,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
