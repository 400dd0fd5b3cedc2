"""CLI entrypoints for assetgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import AssetgenError
from .loaders import build_loaders
from .logging import configure_logging
from .matching import GlobMatcher
from .orchestrator import Orchestrator


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
        "default": argparse.SUPPRESS if suppress_default else False,
    }
    parser.add_argument("-v", "--verbose", **verbose_kwargs)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only report warnings and failures.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write logs to this file.",
    )


def _add_project_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory or .assetgen.yml file (defaults to current directory).",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop a pass at the first failing loader.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetgen",
        description="Bundle fonts, images, stylesheets and templates with incremental rebuilds.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Run every loader once.")
    _add_common_options(build_parser, suppress_default=True)
    _add_project_argument(build_parser)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Build, then rebuild affected bundles whenever watched files change.",
    )
    _add_common_options(watch_parser, suppress_default=True)
    _add_project_argument(watch_parser)
    watch_parser.add_argument(
        "--glob",
        dest="globs",
        action="append",
        default=[],
        help="Pattern to watch (repeatable). Defaults to the loaders' own patterns.",
    )
    watch_parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        help="Pattern to ignore (repeatable), e.g. 'dist/**'.",
    )
    watch_parser.add_argument(
        "--debounce",
        type=float,
        default=None,
        help="Coalesce events arriving within this many seconds.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for assetgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=args.log_file or config.log_file,
    )

    matcher = GlobMatcher(config.root)
    try:
        loaders = build_loaders(config, matcher=matcher)
    except (ConfigError, AssetgenError) as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    if not loaders:
        parser.exit(1, f"No loaders configured in {config.root}\n")

    orchestrator = Orchestrator(
        loaders,
        fail_fast=bool(args.fail_fast) or config.build.fail_fast,
        matcher=matcher,
    )

    if args.command == "build":
        report = orchestrator.build()
        if not report.ok:
            parser.exit(
                1,
                f"assetgen build failed: {len(report.failures)} loader(s) failed\n"
                "Run with --verbose for more details.\n",
            )
        print(f"Built {len(report.completed)} bundle(s)")
    elif args.command == "watch":
        debounce = args.debounce if args.debounce is not None else config.watch.debounce
        if debounce < 0:
            parser.exit(1, "--debounce must not be negative\n")
        try:
            orchestrator.watch(
                args.globs or config.watch.paths or None,
                args.ignore or config.watch.ignore,
                debounce=debounce,
            )
        except AssetgenError as exc:
            parser.exit(1, f"assetgen watch failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
