"""CLI entrypoints for tsarchitect commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator, PathOutsideRootError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_file_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file_path",
        help="File path relative to the project root (e.g. src/app.ts).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsarchitect",
        description="Summarize a TypeScript codebase: export map, skeletons and dependencies.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--root",
        default=os.environ.get("TSARCHITECT_ROOT", "."),
        help="Project root (defaults to $TSARCHITECT_ROOT or the current directory).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when no module-resolution configuration can be loaded.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write DEBUG-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    repo_map_parser = subparsers.add_parser(
        "repo-map",
        help="List every source file with the names it exports.",
    )
    _add_verbose_option(repo_map_parser, suppress_default=True)

    deps_parser = subparsers.add_parser(
        "deps",
        help="Show a file's imports resolved to project paths.",
    )
    _add_verbose_option(deps_parser, suppress_default=True)
    _add_file_argument(deps_parser)

    skeleton_parser = subparsers.add_parser(
        "skeleton",
        help="Show a file's declarations with implementation bodies hidden.",
    )
    _add_verbose_option(skeleton_parser, suppress_default=True)
    _add_file_argument(skeleton_parser)

    locate_parser = subparsers.add_parser(
        "locate",
        help="Print the full source of one named function, method or variable.",
    )
    _add_verbose_option(locate_parser, suppress_default=True)
    _add_file_argument(locate_parser)
    locate_parser.add_argument("name", help="Exact declaration name to look up.")

    read_parser = subparsers.add_parser(
        "read",
        help="Print a file's full contents.",
    )
    _add_verbose_option(read_parser, suppress_default=True)
    _add_file_argument(read_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tsarchitect commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    strict = True if args.strict else None

    if args.command == "serve":
        from .service import run_service

        run_service(args.root, host=args.host, port=args.port, strict=strict)
        return

    try:
        orchestrator = Orchestrator(args.root, strict=strict)
    except ConfigError as exc:
        parser.exit(1, f"tsarchitect: {exc}\n")

    if args.command == "repo-map":
        print(orchestrator.get_repo_map())
    elif args.command == "deps":
        print(orchestrator.get_deps(args.file_path))
    elif args.command == "skeleton":
        print(orchestrator.get_skeleton(args.file_path))
    elif args.command == "locate":
        print(orchestrator.get_method_implementation(args.file_path, args.name))
    elif args.command == "read":
        try:
            content = orchestrator.read_full_file(args.file_path)
        except (PathOutsideRootError, OSError) as exc:
            parser.exit(1, f"Error reading file: {exc}\n")
        sys.stdout.write(content)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
