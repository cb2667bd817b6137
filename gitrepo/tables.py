"""Table creation and data display functionality for the gitrepo CLI."""

import json
from typing import List, Sequence

from packaging import version
from rich.console import Console
from rich.table import Table

from .formatting import format_action, format_short_sha
from .models import Commit, File

console = Console()


def sort_version_names(names: Sequence[str]) -> List[str]:
    """Sort tag names by version; names that are not versions go last, lexically."""
    versions = []
    others = []
    for name in names:
        try:
            versions.append((version.parse(name.lstrip("v")), name))
        except version.InvalidVersion:
            others.append(name)

    return [name for _, name in sorted(versions)] + sorted(others)


def create_commit_table(commits: Sequence[Commit], title: str) -> Table:
    """Create a table with one row per changed file, grouped by commit."""
    table = Table(title=title, expand=True)
    table.add_column("Commit", style="green", width=10)
    table.add_column("Action", width=8)
    table.add_column("File", style="white", overflow="fold")

    for commit in commits:
        if not commit.files:
            table.add_row(commit.short_id, "", "[dim](base commit)[/dim]")
            continue
        for index, file in enumerate(commit.files):
            table.add_row(
                commit.short_id if index == 0 else "",
                format_action(file.action),
                file.filename,
            )

    return table


def create_file_table(files: Sequence[File], title: str) -> Table:
    """Create a table of changed files."""
    table = Table(title=title, expand=True)
    table.add_column("Action", width=8)
    table.add_column("File", style="white", overflow="fold")
    table.add_column("Commit", style="green", width=10)

    for file in files:
        table.add_row(
            format_action(file.action),
            file.filename,
            format_short_sha(file.commit_id) if file.commit_id else "",
        )

    return table


def create_name_table(names: Sequence[str], title: str, current: str = "") -> Table:
    """Create a single-column table of branch or tag names."""
    table = Table(title=title, show_header=False)
    table.add_column("Name", style="cyan")

    for name in names:
        table.add_row(f"[bold]* {name}[/bold]" if name == current else f"  {name}")

    return table


def display_commits(commits: Sequence[Commit], branch: str, format_type: str = "table") -> None:
    """Display commits on a branch."""
    if format_type == "json":
        console.print(json.dumps([c.to_dict() for c in commits], indent=2))
        return

    if not commits:
        console.print(f"[yellow]No commits found on {branch}[/yellow]")
        return

    console.print(create_commit_table(commits, f"[bold]Commits on {branch}[/bold]"))


def display_files(files: Sequence[File], title: str, format_type: str = "table") -> None:
    """Display a list of changed files."""
    if format_type == "json":
        console.print(json.dumps([f.to_dict() for f in files], indent=2))
        return

    if not files:
        console.print("[dim]No changes[/dim]")
        return

    console.print(create_file_table(files, title))


def display_names(
    names: Sequence[str], title: str, format_type: str = "table", current: str = ""
) -> None:
    """Display branch or tag names."""
    if format_type == "json":
        console.print(json.dumps(list(names), indent=2))
        return

    if not names:
        console.print(f"[dim]No {title.lower()} found[/dim]")
        return

    console.print(create_name_table(names, f"[bold]{title}[/bold]", current))
