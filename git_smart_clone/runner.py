"""Sequential run loop over a repo-list file."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings
from .context import FallbackContext, RemoteRegistry, initialize_fallback
from .dispatcher import Dispatcher
from .exceptions import CloneError
from .git import GitClient
from .models import LineKind, LineResult, Outcome, RunCounters
from .parser import parse_line, read_lines
from .planner import build_plan

logger = logging.getLogger(__name__)


def run_repo_list(settings: Settings, git: GitClient, console: Console) -> RunCounters:
    """Process every line of ``settings.repo_list`` in file order.

    Setup problems (unreadable list, no remote on the enclosing repository)
    raise; anything that goes wrong on a single line is counted and reported
    without stopping the run.
    """

    lines = read_lines(settings.repo_list)
    fallback = initialize_fallback(git, settings.repo_path)
    own_remote, own_path = fallback.current()
    registry = RemoteRegistry()
    registry.register(own_remote, own_path)
    dispatcher = Dispatcher(
        git=git,
        root=settings.clone_root,
        own_remote=own_remote,
        own_path=own_path,
        plan=build_plan(lines, own_remote),
        registry=registry,
    )
    logger.debug("Processing %d line(s) from %s into %s", len(lines), settings.repo_list, settings.clone_root)

    counters = RunCounters()
    for text in lines:
        result = process_line(text, dispatcher, fallback)
        counters.record(result, text)
        if result.fallback_update is not None:
            fallback.advance(*result.fallback_update)
        report_result(console, text, result)
    render_summary(console, counters)
    return counters


def process_line(text: str, dispatcher: Dispatcher, fallback: FallbackContext) -> LineResult:
    try:
        parsed = parse_line(text, fallback.remote)
        for warning in parsed.warnings:
            logger.warning("%s: %s", text, warning)
        line = parsed.line
        if line.kind is not LineKind.WORKTREE:
            # Later @branch lines belong to this remote even if its clone fails or is skipped.
            fallback.advance(line.remote, dispatcher.registry.get(line.remote))
        return dispatcher.dispatch(line, fallback)
    except CloneError as exc:
        logger.debug("line %r failed", text, exc_info=True)
        return LineResult.error(str(exc), exc.returncode)
    except OSError as exc:
        logger.debug("line %r failed", text, exc_info=True)
        return LineResult.error(str(exc))


def report_result(console: Console, text: str, result: LineResult) -> None:
    if result.outcome is Outcome.SUCCESS:
        logger.info("%s: %s", text, result.message)
        return
    if result.outcome is Outcome.BENIGN_SKIP:
        console.print(f"[yellow]skipped:[/yellow] {escape(text)} [dim]({escape(result.message)})[/dim]")
        return
    console.print(f"[red]line failed (rc={result.returncode}):[/red] {escape(text)}")
    console.print(f"  [dim]{escape(result.message)}[/dim]")


def render_summary(console: Console, counters: RunCounters) -> None:
    table = Table(title="Summary", show_header=True, header_style="bold")
    table.add_column("Result")
    table.add_column("Count", justify="right")
    for label, value in counters.as_rows():
        table.add_row(label, str(value))
    console.print(table)


__all__ = ["run_repo_list", "process_line", "report_result", "render_summary"]
