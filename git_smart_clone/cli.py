"""Typer-based CLI for git-smart-clone."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import load_settings
from .exceptions import CloneError
from .git import GitClient, require_binary
from .runner import run_repo_list

app = typer.Typer(
    help="Clone the repositories, branches and worktrees listed in a repo-list file",
    add_completion=False,
)
console = Console()


@app.command()
def main(
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Repo list to read (default: repos.list, or repos-to-clone.list, in the repository root).",
        dir_okay=False,
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Path inside the repository whose remote seeds @branch lines.",
        file_okay=False,
    ),
    dest: Path | None = typer.Option(
        None,
        "--dest",
        help="Directory new clones and worktrees are placed in (default: the repository's parent).",
        file_okay=False,
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Seconds allowed per git operation; 0 disables the limit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace every step and git command."),
) -> None:
    """Clone every repository listed in a repo-list file.

    Line formats:

        owner/repo [target_dir] [-a|--all-branches]

        owner/repo@branch [target_dir]

        https://host/owner/repo[@branch] [target_dir]

        @branch [target_dir] [-n|--no-worktree]
    """
    try:
        require_binary("git")
        settings = load_settings(
            repo_override=repo,
            list_override=file,
            root_override=dest,
            timeout_override=timeout,
            verbose=verbose,
        )
        configure_logging(settings.verbose)
        run_repo_list(settings, GitClient(timeout=settings.timeout), console)
    except CloneError as err:
        _fail(str(err))


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, markup=False)],
        force=True,
    )


def _fail(message: str, code: int = 1) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
