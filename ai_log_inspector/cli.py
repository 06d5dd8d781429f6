"""Command line interface for the AI Log Inspector."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from .config import InspectorSettings, load_settings
from .inspector import LogInspector, create_openai_inspector

DEFAULT_STORE_DIR = "data/store"


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI Log Inspector CLI")
    parser.add_argument(
        "--store-dir",
        default=None,
        help=f"Directory used to persist the vector store (default: settings, then {DEFAULT_STORE_DIR})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON settings file",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index log files into the vector store")
    index_parser.add_argument("paths", nargs="*", type=Path, help="Log files to index")
    index_parser.add_argument(
        "--directory",
        type=Path,
        help="Index every file in this directory matching --pattern",
    )
    index_parser.add_argument("--pattern", default="*.log", help="Glob used with --directory")
    index_parser.add_argument("--recursive", action="store_true", help="Search --directory recursively")
    index_parser.add_argument("--strict", action="store_true", help="Abort on the first failing file")

    search_parser = subparsers.add_parser("search", help="Ask why something happened")
    search_parser.add_argument("query", help="Natural language question")
    search_parser.add_argument("--max-results", type=int, help="Maximum evidence entries")
    search_parser.add_argument("--threshold", type=float, help="Minimum similarity score")

    trace_parser = subparsers.add_parser("trace", help="Follow one request/trace/session id")
    trace_parser.add_argument("identifier", help="Identifier to follow")

    web_parser = subparsers.add_parser("serve", help="Launch the HTTP API")
    web_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface for the web server (default: 127.0.0.1)",
    )
    web_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the web server (default: 8000)",
    )

    return parser


def _settings_from_args(args: argparse.Namespace) -> InspectorSettings:
    settings = load_settings(
        args.config,
        store_dir=args.store_dir,
        strict_indexing=getattr(args, "strict", None) or None,
        max_results=getattr(args, "max_results", None),
        relevance_threshold=getattr(args, "threshold", None),
    )
    if settings.store_dir is None:
        settings = settings.model_copy(update={"store_dir": Path(DEFAULT_STORE_DIR)})
    return settings


def main(
    argv: List[str] | None = None,
    *,
    inspector_factory: Callable[[InspectorSettings], LogInspector] = create_openai_inspector,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = _settings_from_args(args)

    if args.command == "serve":
        from .web.app import create_app

        try:
            import uvicorn
        except ImportError as exc:  # pragma: no cover - runtime guard
            raise SystemExit(
                "uvicorn is required to launch the web server. Install it with 'pip install uvicorn'."
            ) from exc

        app = create_app(settings=settings, inspector=inspector_factory(settings))
        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    inspector = inspector_factory(settings)

    if args.command == "index":
        if args.directory is None and not args.paths:
            parser.error("index requires at least one path or --directory")
        indexer = inspector.indexer
        summary = indexer.index_files(args.paths)
        if args.directory is not None:
            summary = summary.merge(
                indexer.index_directory(args.directory, pattern=args.pattern, recursive=args.recursive)
            )
        _print_json(summary.to_dict())
        return 1 if summary.failed else 0

    if args.command == "search":
        result = inspector.search_tool(args.query)
        _print_json(result)
        return 0 if result["success"] else 1

    if args.command == "trace":
        result = inspector.request_context_tool(args.identifier)
        _print_json(result)
        return 0 if result["success"] else 1

    return 2  # pragma: no cover - argparse enforces the sub-command


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
