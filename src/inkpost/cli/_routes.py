"""``inkpost routes`` — list registered routes in matching order."""

import argparse

from inkpost.cli._resolve import load_app
from inkpost.routing.router import describe_routes


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / HANDLER table for ``args.app``."""
    app = load_app(args.app)

    rows = describe_routes(app.router)
    if not rows:
        print("No routes registered.")
        return

    header = ("METHOD", "PATH", "HANDLER")
    method_width = max(len(row[0]) for row in (header, *rows))
    path_width = max(len(row[1]) for row in (header, *rows))
    for method, path, handler in (header, *rows):
        print(f"{method:<{method_width}}  {path:<{path_width}}  {handler}")
