from __future__ import annotations

import argparse
import logging
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, Sequence, TextIO

from pydantic import ValidationError
from tabulate import tabulate

from git_diff_export import __version__
from git_diff_export.bootstrap.container import Container
from git_diff_export.config.logging_setup import configure_logging
from git_diff_export.config.settings_loader import AppConfig, SettingsLoader
from git_diff_export.domain.errors import ExportError
from git_diff_export.domain.models.export_result import ExportResult
from git_diff_export.domain.models.progress import ProgressEvent
from git_diff_export.domain.services.decision_engine import export_set
from git_diff_export.domain.services.manifest import ERRORS_ENTRY, generate_manifest
from git_diff_export.domain.workflows.transfer_engine import CancellationToken

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2
EXIT_CANCELLED = 130

_EXAMPLES = """\
examples:
  git-de HEAD~5                              # preview changes
  git-de HEAD~5 HEAD -o ./export             # export to a directory
  git-de --from v1.0.0 --to v2.0.0 -o ./export --concurrent
  git-de HEAD~5 -I "*.go" -i "*_test.go" -o ./export
  git-de HEAD~5 -o ./export --max-size 10MB
  git-de HEAD~5 -a export.zip
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-de",
        description="Export files changed between Git commits.",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("from_commit", nargs="?", help="starting commit")
    parser.add_argument("to_commit", nargs="?", help="ending commit (defaults to HEAD)")
    parser.add_argument("-f", "--from", dest="from_flag", help="starting commit")
    parser.add_argument("-t", "--to", dest="to_flag", help="ending commit")
    destination = parser.add_mutually_exclusive_group()
    destination.add_argument("-o", "--output", help="output directory (preview when omitted)")
    destination.add_argument(
        "-a", "--archive", help="export to archive file (.zip, .tar, .tar.gz, .tgz)"
    )
    parser.add_argument("-w", "--overwrite", action="store_true", help="replace an existing output directory")
    parser.add_argument("-c", "--concurrent", action="store_true", help="copy files concurrently")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument(
        "-i", "--ignore", action="append", default=[], help="ignore patterns (comma-separated or repeated)"
    )
    parser.add_argument(
        "-I", "--include", action="append", default=[], help="only export files matching these patterns"
    )
    parser.add_argument("--max-size", help="maximum file size to export (e.g. 10MB, 500KB, 1GB)")
    parser.add_argument("--json", action="store_true", help="emit a JSON report")
    parser.add_argument("--json-file", help="write the JSON report to this file")
    parser.add_argument("--version", action="version", version=f"Git Diff Export version {__version__}")
    return parser


def _config_values(args: argparse.Namespace) -> dict[str, object]:
    return {
        "from_ref": args.from_flag or args.from_commit or "",
        "to_ref": args.to_flag or args.to_commit,
        "output_dir": args.output,
        "archive_path": args.archive,
        "overwrite": args.overwrite,
        "concurrent": args.concurrent,
        "verbose": args.verbose,
        "include_patterns": args.include,
        "ignore_patterns": args.ignore,
        "max_size": args.max_size,
        "json_report": args.json or bool(args.json_file),
        "json_file": args.json_file,
    }


class ProgressPrinter:
    def __init__(self, stream: TextIO, enabled: bool = True) -> None:
        self._stream = stream
        self._enabled = enabled

    def __call__(self, event: ProgressEvent) -> None:
        if not self._enabled:
            return
        self._stream.write(
            f"\r[{event.percent:3.0f}%] {event.processed}/{event.total} files"
        )
        if event.processed >= event.total:
            self._stream.write("\n")
        self._stream.flush()


@contextmanager
def cancel_on_signals(token: CancellationToken) -> Iterator[None]:
    def _stop_handler(_signum: int, _frame) -> None:
        token.cancel()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[signum] = signal.signal(signum, _stop_handler)
        except ValueError:
            # Not on the main thread; leave default handling in place.
            continue
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _print_preview(result: ExportResult, out: TextIO) -> None:
    files = export_set(result.classifications)
    out.write("=== PREVIEW MODE (no files will be copied) ===\n")
    out.write(f"\nFiles that would be exported ({len(files)}):\n")
    for change in files:
        out.write(f"  -> {change.describe()}\n")
    out.write("\n=== Summary ===\n")
    out.write(generate_manifest(item.change for item in result.classifications) + "\n")


def _print_summary(result: ExportResult, out: TextIO) -> None:
    outcome = result.outcome
    if outcome is None:
        return
    rows = [
        ["Destination", str(result.destination)],
        ["Exported", outcome.success_count],
        ["Failed", outcome.failed_count],
        ["Skipped", result.skipped_count],
    ]
    if outcome.cancelled:
        rows.append(["Cancelled", "yes"])
    out.write(tabulate(rows, tablefmt="rounded_outline") + "\n")
    if outcome.failed_count:
        out.write(f"List of failed files saved to: {ERRORS_ENTRY} in {result.destination}\n")


def run(config: AppConfig, container: Container, out: TextIO, err: TextIO) -> int:
    log = logging.getLogger("git_diff_export.cli")
    export = container.build_export_use_case()
    token = CancellationToken()
    # JSON on stdout must stay parseable.
    progress = ProgressPrinter(
        err,
        enabled=not config.export.verbose and not config.export.preview,
    )

    try:
        with cancel_on_signals(token):
            result = export(config.export, cancel_token=token, on_progress=progress)
    except ExportError as exc:
        log.debug("Export aborted", exc_info=True)
        err.write(f"Error: {exc}\n")
        return EXIT_ERROR

    if not result.classifications:
        err.write("No changes found.\n")
        return EXIT_OK
    if result.exported_count == 0:
        err.write("No files to export after filtering.\n")
        return EXIT_OK
    if config.export.preview:
        _print_preview(result, err if config.export.json_report else out)
        return EXIT_OK

    _print_summary(result, err)
    if result.cancelled:
        return EXIT_CANCELLED
    if result.has_failures:
        return EXIT_PARTIAL
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = SettingsLoader.load(_config_values(args))
    except (ValidationError, ValueError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_ERROR

    configure_logging(config.runtime.log_level, config.runtime.log_file)
    container = Container(config)
    return run(config, container, sys.stdout, sys.stderr)
