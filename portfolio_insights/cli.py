from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import AppConfig, load_config
from .errors import InsightsError, InvalidInputError
from .github_api import GitHubSession
from .log import setup_logging
from .normalizer import normalize
from .orchestrator import run_query
from .report import write_report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-insights",
        description="Summarize a GitHub profile or repository: KPIs, languages, commits and issue mix.",
    )
    parser.add_argument("--config", type=Path, help="Path to settings YAML file", default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    query = commands.add_parser("query", help="Fetch a profile or repository and write a report")
    query.add_argument("url", help="GitHub link, e.g. https://github.com/octocat or octocat/hello-world")
    query.add_argument("--format", dest="output_format", choices=("markdown", "json"), help="Report format")
    query.add_argument("--output-dir", dest="output_dir", type=Path, help="Directory for the generated report")

    serve = commands.add_parser("serve", help="Run the dashboard API server")
    serve.add_argument("--host", help="Interface to bind")
    serve.add_argument("--port", type=int, help="Port to listen on")
    serve.add_argument("--debug", action="store_true", default=None, help="Enable Flask debug mode")
    return parser


def _query(parser: argparse.ArgumentParser, args: argparse.Namespace, config: AppConfig) -> None:
    if args.output_format:
        config.output.format = args.output_format
    if args.output_dir:
        config.output.directory = args.output_dir

    reference = normalize(args.url)
    try:
        if reference is None:
            raise InvalidInputError()
        with GitHubSession.create(config.github) as github:
            result = run_query(reference, github, config.query)
        report_path = write_report(reference, result, config)
    except InsightsError as exc:
        parser.error(str(exc))
        return

    print(f"Report generated: {report_path}")


def _serve(args: argparse.Namespace, config: AppConfig) -> None:
    from .server import create_app

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.debug is not None:
        config.server.debug = args.debug
    create_app(config).run(host=config.server.host, port=config.server.port, debug=config.server.debug)


def app(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging)

    if args.command == "serve":
        _serve(args, config)
    else:
        _query(parser, args, config)


if __name__ == "__main__":  # pragma: no cover
    app(sys.argv[1:])
