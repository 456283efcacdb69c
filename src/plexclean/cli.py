"""CLI interface for plexclean."""

from __future__ import annotations

import json
import logging
import queue
import sys
from pathlib import Path
from typing import Any, Callable

import click

from plexclean import __version__
from plexclean.core.classifier import category_label
from plexclean.core.session import CleanupSession
from plexclean.models.clean_result import DeletionOutcome
from plexclean.models.scan_result import ScanReport, ScanStatus, StatsSnapshot
from plexclean.settings import Settings
from plexclean.storage import DeletionLog
from plexclean.utils import bytes_to_human

_POLL_INTERVAL = 0.1


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    console = logging.StreamHandler()
    console.setLevel(level)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", handlers=[console])


def _build_session() -> CleanupSession:
    settings = Settings.instance()
    return CleanupSession(classifier=settings.classifier(), options=settings.scan_options())


def _show_progress() -> bool:
    return sys.stderr.isatty()


def _run_phase(
    session: CleanupSession,
    start: Callable[[Callable[[Any], None], Callable[[Any], None]], None],
    render: Callable[[Any], None],
) -> Any:
    """Run one session phase, rendering progress on this thread until it completes.

    Worker callbacks only enqueue; Ctrl-C requests cancellation and keeps
    waiting so the partial result is still reported.
    """
    events: queue.Queue[tuple[str, Any]] = queue.Queue()
    start(lambda result: events.put(("done", result)), lambda value: events.put(("progress", value)))
    while True:
        try:
            kind, value = events.get(timeout=_POLL_INTERVAL)
            if kind == "done":
                break
            render(value)
        except queue.Empty:
            continue
        except KeyboardInterrupt:
            click.echo("\nCancelling...", err=True)
            session.cancel()
    session.wait()
    return value


def _scan(session: CleanupSession, path: Path, as_json: bool) -> ScanReport:
    def start(on_done, on_progress) -> None:
        session.start_scan(path, on_progress=on_progress, on_complete=on_done)

    def render(snap: StatsSnapshot) -> None:
        if as_json or not _show_progress():
            return
        click.echo(
            f"\rFiles scanned: {snap.files_scanned:,} | Directories scanned: {snap.dirs_scanned:,} | "
            f"Unwanted files found: {snap.unwanted_count:,} ({bytes_to_human(snap.unwanted_bytes)})",
            nl=False,
            err=True,
        )

    report = _run_phase(session, start, render)
    if not as_json and _show_progress():
        click.echo(err=True)
    return report


def _print_report(report: ScanReport) -> None:
    stats = report.stats
    click.echo(f"\n  Files scanned: {stats.files_scanned:,} | Directories scanned: {stats.dirs_scanned:,}\n")

    if stats.categories:
        click.echo(f"  {'File Type':40s} {'Count':>8s}  {'Total Size':>10s}")
        for key, cat in sorted(stats.categories.items(), key=lambda x: x[1].total_bytes, reverse=True):
            click.echo(f"  {category_label(key):40s} {cat.count:>8,}  {bytes_to_human(cat.total_bytes):>10s}")
        click.echo(
            f"  {click.style('TOTAL', fg='blue', bold=True):40s} {stats.unwanted_count:>8,}  "
            f"{bytes_to_human(stats.unwanted_bytes):>10s}"
        )
        click.echo()

    match report.status:
        case ScanStatus.FAILED:
            click.echo(f"{click.style('Scan failed:', fg='red', bold=True)} {report.error}", err=True)
        case ScanStatus.CANCELLED:
            click.echo(
                f"Scan cancelled. Found {stats.unwanted_count:,} unwanted files "
                f"({bytes_to_human(stats.unwanted_bytes)}) before stopping."
            )
        case _ if stats.unwanted_count == 0:
            click.echo("No unwanted files found.")
        case _:
            click.echo(
                f"Found {click.style(f'{stats.unwanted_count:,}', bold=True)} unwanted files "
                f"({click.style(bytes_to_human(stats.unwanted_bytes), fg='green', bold=True)})"
            )


def _exit_code(report: ScanReport) -> int:
    match report.status:
        case ScanStatus.FAILED:
            return 1
        case ScanStatus.CANCELLED:
            return 130
        case _:
            return 0


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.version_option(__version__, prog_name="plexclean")
def main(verbose: int) -> None:
    """plexclean — remove leftover archive, checksum and image files from media libraries."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(path: Path, as_json: bool) -> None:
    """Scan a directory for leftover files (preview only, never deletes)."""
    session = _build_session()
    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {path}...")

    report = _scan(session, path, as_json)

    if as_json:
        click.echo(json.dumps(report.as_dict(), indent=2))
    else:
        _print_report(report)
    sys.exit(_exit_code(report))


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(file_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the deletion log file",
)
def clean(path: Path, yes: bool, dry_run: bool, as_json: bool, log_dir: Path | None) -> None:
    """Scan a directory and permanently delete the leftover files found."""
    session = _build_session()
    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {path}...")

    report = _scan(session, path, as_json)

    if not report.ok:
        if as_json:
            click.echo(json.dumps({"scan": report.as_dict(include_candidates=False), "deletion": None}, indent=2))
        else:
            _print_report(report)
        sys.exit(_exit_code(report))

    if not as_json:
        _print_report(report)

    if not report.candidates:
        if as_json:
            click.echo(json.dumps({"scan": report.as_dict(include_candidates=False), "deletion": None}, indent=2))
        return

    if dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "scan": report.as_dict()}, indent=2))
        else:
            for candidate in report.candidates:
                click.echo(f"  {candidate.path}  ({bytes_to_human(candidate.size)})")
            click.echo("\n(dry run — no files were deleted)")
        return

    # Confirm
    if not yes and not as_json:
        question = (
            f"Are you sure you want to delete {len(report.candidates):,} files "
            f"({bytes_to_human(report.total_bytes)})? This cannot be undone."
        )
        if not click.confirm(question, default=False):
            click.echo("Aborted.")
            return

    if not as_json:
        click.echo(f"\n{click.style('🧹', bold=True)} Deleting...\n")

    with DeletionLog(log_dir) as log_path:
        outcome = _delete(session, len(report.candidates), as_json)

    if as_json:
        data = {
            "scan": report.as_dict(include_candidates=False),
            "deletion": outcome.as_dict(),
            "log_file": str(log_path),
        }
        click.echo(json.dumps(data, indent=2))
    else:
        _print_outcome(outcome, log_path)
    if outcome.cancelled:
        sys.exit(130)


def _delete(session: CleanupSession, total: int, as_json: bool) -> DeletionOutcome:
    def start(on_done, on_progress) -> None:
        session.start_delete(on_progress=lambda done, _total: on_progress(done), on_complete=on_done)

    if as_json or not _show_progress():
        return _run_phase(session, start, lambda done: None)

    with click.progressbar(length=total, label="Deleting", file=sys.stderr) as bar:
        last = 0

        def render(done: int) -> None:
            nonlocal last
            bar.update(done - last)
            last = done

        return _run_phase(session, start, render)


def _print_outcome(outcome: DeletionOutcome, log_path: Path) -> None:
    freed = bytes_to_human(outcome.deleted_bytes)
    if outcome.cancelled:
        click.echo(f"Deletion cancelled. Deleted {outcome.deleted_count:,} files ({freed})")
    else:
        click.echo(
            f"Deleted {click.style(f'{outcome.deleted_count:,}', bold=True)} of {outcome.attempted:,} files, "
            f"freed {click.style(freed, fg='green', bold=True)}"
        )
    if outcome.errors:
        click.echo(f"\n  {click.style('!', fg='yellow')} {len(outcome.errors)} file(s) could not be deleted:")
        for error in outcome.errors:
            click.echo(f"    {error}")
    click.echo(f"\nLog file: {log_path}\n")


# ── classify ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def classify(names: tuple[str, ...], as_json: bool) -> None:
    """Show how file names would be classified."""
    classifier = Settings.instance().classifier()
    verdicts = [(name, classifier.classify(name)) for name in names]

    if as_json:
        data = [{"name": name, "unwanted": v.unwanted, "category": v.category} for name, v in verdicts]
        click.echo(json.dumps(data, indent=2))
        return

    for name, verdict in verdicts:
        if verdict.unwanted:
            click.echo(f"  {click.style('✗', fg='red')} {name:40s} — delete ({category_label(verdict.category)})")
        else:
            click.echo(f"  {click.style('✓', fg='green')} {name:40s} — keep")


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Configuration commands."""


@config.command("show")
def config_show() -> None:
    """Show the effective configuration."""
    settings = Settings.instance()
    options = settings.scan_options()
    classifier = settings.classifier()
    data = {
        "settings_file": str(settings.path),
        "scan": {
            "progress_every": options.progress_every,
            "on_error": options.on_error,
            "follow_symlinks": options.follow_symlinks,
        },
        "classifier": {
            "unwanted_extensions": list(classifier.unwanted_extensions),
            "safe_extensions": list(classifier.safe_extensions),
        },
    }
    click.echo(json.dumps(data, indent=2))


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from plexclean.dbus_service import start_service

    click.echo("Starting plexclean D-Bus service...")
    start_service()
