"""CLI entry point for bundle-diff."""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog
from pydantic import ValidationError

from bundle_diff import __version__
from bundle_diff.config import Settings
from bundle_diff.errors import BundleDiffError, ExitCode
from bundle_diff.models import Report

log = structlog.get_logger("bundle_diff.cli")


def parse_args(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> argparse.Namespace:
    """Parse command line arguments, taking defaults from ``settings``."""
    settings = settings or Settings()
    parser = argparse.ArgumentParser(
        prog="bundle-diff",
        description="Print the diff between the Gemfile.lock at SOURCE and TARGET git refs.",
    )
    parser.add_argument("source", nargs="?", default=settings.source,
                        help=f"git ref to compare from (default: {settings.source})")
    parser.add_argument("target", nargs="?", default=settings.target,
                        help=f"git ref to compare to (default: {settings.target})")
    parser.add_argument("--repo", default=".",
                        help="path inside the git repository (default: current directory)")
    parser.add_argument("--lockfile", default=settings.lockfile,
                        help=f"lock file path relative to the repository root (default: {settings.lockfile})")
    parser.add_argument("--archive-dir", default=None,
                        help="also save both lock files under this directory")
    parser.add_argument("--toolbox-url", default=settings.toolbox_url,
                        help="Ruby Toolbox API base URL")
    parser.add_argument("--tui", action="store_true",
                        help="browse the report in a terminal UI instead of printing it")
    parser.add_argument("--log-level", default=settings.log_level,
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="logging level for messages on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: Settings) -> Report:
    from bundle_diff.differ import LockfileDiffer
    from bundle_diff.fetcher import ToolboxFetcher
    from bundle_diff.snapshots import SnapshotSource

    differ = LockfileDiffer(
        args.source,
        args.target,
        SnapshotSource(args.repo, lockfile=args.lockfile),
        ToolboxFetcher(base_url=args.toolbox_url, timeout=settings.timeout),
        archive_dir=args.archive_dir,
    )
    try:
        return await differ.run()
    finally:
        await differ.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Compare the two refs and write the report; returns the exit code."""
    from dotenv import load_dotenv

    load_dotenv()  # Load .env file (e.g. BUNDLE_DIFF_TOOLBOX_URL)

    from bundle_diff.analysis.report import render_tsv
    from bundle_diff.logging import setup_logging

    try:
        settings = Settings.from_env()
    except ValidationError as e:
        print(f"bundle-diff: invalid environment settings: {e}", file=sys.stderr)
        return int(ExitCode.input_error)
    args = parse_args(argv, settings)
    setup_logging(args.log_level, settings.log_format)

    try:
        report = asyncio.run(_run(args, settings))
    except BundleDiffError as e:
        log.error("diff.failed", error=str(e), kind=type(e).__name__)
        print(f"bundle-diff: {e}", file=sys.stderr)
        return int(e.exit_code)

    if args.tui:
        from bundle_diff.app import BundleDiffApp

        BundleDiffApp(report, args.source, args.target).run()
    else:
        sys.stdout.write(render_tsv(report))
    return int(ExitCode.success)


if __name__ == "__main__":
    sys.exit(main())
