"""``inkpost run`` — serve an app with uvicorn."""

import argparse
import logging

from inkpost.cli._resolve import load_app


def configure_logging(level: str) -> None:
    """Route inkpost's loggers to stderr at *level* (a ``LOG_LEVEL`` name)."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override the config."""
    app = load_app(args.app)

    configure_logging(app.config.log_level)
    app.run(host=args.host, port=args.port)
