"""CLI entrypoint for animate-upgrade."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import ConfigError, load_config
from .logging import configure_logging
from .models import OutputMode
from .orchestrator import Orchestrator

MODE_TOKENS = {
    "-c": OutputMode.COMMONJS,
    "-e": OutputMode.ES6,
    "-a": OutputMode.ES6_AUTORUN,
}
HELP_TOKENS = {"-h", "--help"}

_MODES_HELP = """Modes (apply to every file listed after them):
    -c (Default) CommonJS/Node style export
    -e ES6 style export (export default)
    -a ES6 style export with auto import of pixi-animate and run of setup(),
       exports library items as well as the default.
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="animate-upgrade",
        usage="%(prog)s [options] <mode> path/to/file1.js path/to/file2.js",
        description="Upgrade legacy animation library exports to class-based modules.",
        epilog=_MODES_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as a diff without writing any file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .animate-upgrade.yml (defaults to the current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def plan_batch(
    tokens: Sequence[str], default_mode: OutputMode
) -> Optional[List[Tuple[Path, OutputMode]]]:
    """Turn interleaved mode selectors and paths into ``(path, mode)`` jobs.

    Returns None when a help token is present.
    """
    if any(token in HELP_TOKENS for token in tokens):
        return None
    mode = default_mode
    jobs: List[Tuple[Path, OutputMode]] = []
    for token in tokens:
        if token in MODE_TOKENS:
            mode = MODE_TOKENS[token]
            continue
        if token.startswith("-") and token != "-":
            raise ValueError(f"unrecognized option: {token}")
        jobs.append((Path(token), mode))
    return jobs


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for animate-upgrade."""
    parser = _build_parser()
    args, tokens = parser.parse_known_args(argv)

    try:
        config = load_config(args.config or Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file or config.log_file)

    try:
        jobs = plan_batch(tokens, config.mode)
    except ValueError as exc:
        parser.error(str(exc))
    if jobs is None:
        parser.print_help()
        return 0
    if not jobs:
        parser.print_usage()
        return 0

    report = Orchestrator(config).run(jobs, dry_run=bool(args.dry_run))

    if args.dry_run:
        for outcome in report.outcomes:
            if outcome.diff is not None:
                print(outcome.diff or f"{outcome.path}: (no diff)")
    print(
        f"{report.count('migrated')} migrated, {report.count('skipped')} skipped, "
        f"{report.count('failed')} failed"
    )
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
