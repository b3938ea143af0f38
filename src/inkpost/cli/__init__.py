"""Inkpost CLI — serve the site and inspect its routes.

Entry point registered as ``inkpost`` in ``pyproject.toml``::

    [project.scripts]
    inkpost = "inkpost.cli:main"
"""

import argparse
import sys

DEFAULT_APP = "inkpost.site:create_app"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``inkpost`` command."""
    parser = argparse.ArgumentParser(
        prog="inkpost",
        description="Inkpost — a multi-user blog application.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- inkpost run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument(
        "app",
        nargs="?",
        default=DEFAULT_APP,
        help=f"Import string (default: {DEFAULT_APP})",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- inkpost routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "app",
        nargs="?",
        default=DEFAULT_APP,
        help=f"Import string (default: {DEFAULT_APP})",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from inkpost.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from inkpost.cli._routes import run_routes

        run_routes(args)
