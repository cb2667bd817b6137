"""gitrepo CLI - typed views of a local git repository."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import (
    get_default_format,
    get_git_binary,
    get_mainline_branch,
    get_remote,
    get_repo_path,
    set_mainline_command,
    set_repo_command,
    show_config_command,
)
from .git_basic import GitError
from .git_repo import GitRepo
from .tables import display_commits, display_files, display_names, sort_version_names

app = typer.Typer(
    name="gitrepo",
    help="Inspect commits, changed files, branches and tags of a git repository",
    no_args_is_help=True,
)

console = Console()

REPO_OPTION = typer.Option(
    None, "--repo", "-r", help="Repository path (defaults to configured repo, then cwd)"
)
FORMAT_OPTION = typer.Option(None, "--format", help="Output format: table or json")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Echo git commands as they run")


def open_repo(repo: Optional[str], verbose: bool = False) -> GitRepo:
    """Open the repository given on the command line, configured, or in cwd."""
    repo_path = Path(repo or get_repo_path() or Path.cwd()).expanduser().resolve()
    if not (repo_path / ".git").exists():
        console.print(f"[red]Error: Not a git repository: {repo_path}[/red]")
        raise typer.Exit(1)

    return GitRepo(
        repo_path,
        mainline_branch=get_mainline_branch(),
        remote=get_remote(),
        console=console,
        verbose=verbose,
        git_binary=get_git_binary(),
    )


def fail(error: GitError) -> NoReturn:
    """Report a git failure and exit."""
    console.print(f"[red]Error: {escape(str(error))}[/red]", highlight=False)
    raise typer.Exit(1) from None


@app.command("log")
def log(
    branch: str = typer.Argument(help="Branch to list commits for"),
    repo: Optional[str] = REPO_OPTION,
    format_type: Optional[str] = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show commits on a branch with the files each one changed."""
    git = open_repo(repo, verbose)
    try:
        commits = git.get_commits(branch)
    except GitError as e:
        fail(e)
    display_commits(commits, branch, format_type or get_default_format())


@app.command("files")
def files(
    commit_id: str = typer.Argument(help="Commit to list changed files for"),
    repo: Optional[str] = REPO_OPTION,
    format_type: Optional[str] = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show files changed by a single commit."""
    git = open_repo(repo, verbose)
    try:
        changed = git.get_files_in_commit(commit_id)
    except GitError as e:
        fail(e)
    display_files(changed, f"[bold]Files in {commit_id}[/bold]", format_type or get_default_format())


@app.command("status")
def status(
    repo: Optional[str] = REPO_OPTION,
    format_type: Optional[str] = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show uncommitted files in the working tree."""
    git = open_repo(repo, verbose)
    try:
        uncommitted = git.get_uncommitted_files()
    except GitError as e:
        fail(e)
    display_files(uncommitted, "[bold]Uncommitted files[/bold]", format_type or get_default_format())


@app.command("branches")
def branches(
    repo: Optional[str] = REPO_OPTION,
    format_type: Optional[str] = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List local branches."""
    git = open_repo(repo, verbose)
    try:
        names = git.list_branches()
        current = git.current_branch()
    except GitError as e:
        fail(e)
    display_names(names, "Branches", format_type or get_default_format(), current)


@app.command("tags")
def tags(
    repo: Optional[str] = REPO_OPTION,
    format_type: Optional[str] = FORMAT_OPTION,
    sort_version: bool = typer.Option(
        False, "--sort-version", help="Sort tags by version instead of git's order"
    ),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List tags."""
    git = open_repo(repo, verbose)
    try:
        names = git.get_tag_list()
    except GitError as e:
        fail(e)
    if sort_version:
        names = sort_version_names(names)
    display_names(names, "Tags", format_type or get_default_format())


@app.command("show")
def show(
    commit_id: str = typer.Argument(help="Commit to read the file from"),
    path: str = typer.Argument(help="File path relative to the repository root"),
    repo: Optional[str] = REPO_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print a file as of a commit."""
    git = open_repo(repo, verbose)
    try:
        contents = git.get_file_contents(commit_id, path)
    except GitError as e:
        fail(e)
    typer.echo(contents)


@app.command("head")
def head(repo: Optional[str] = REPO_OPTION, verbose: bool = VERBOSE_OPTION) -> None:
    """Print the HEAD commit id."""
    git = open_repo(repo, verbose)
    try:
        typer.echo(git.get_head_commit_id())
    except GitError as e:
        fail(e)


@app.command("current-branch")
def current_branch(repo: Optional[str] = REPO_OPTION, verbose: bool = VERBOSE_OPTION) -> None:
    """Print the checked-out branch."""
    git = open_repo(repo, verbose)
    try:
        typer.echo(git.current_branch())
    except GitError as e:
        fail(e)


# Create config subcommand group
config_app = typer.Typer(name="config", help="Manage gitrepo configuration")
app.add_typer(config_app)


@config_app.command("set-repo")
def set_repo(
    repo_path: str = typer.Argument(help="Path to a git repository"),
) -> None:
    """Set the default repository."""
    set_repo_command(repo_path)


@config_app.command("set-mainline")
def set_mainline(
    branch: str = typer.Argument(help="Mainline branch merges go through (e.g., master, main)"),
) -> None:
    """Set the mainline branch."""
    set_mainline_command(branch)


@config_app.command("show")
def show_config(
    format_type: str = typer.Option("table", "--format", help="Output format: table or json"),
) -> None:
    """Show current configuration."""
    show_config_command(format_type)


@app.command()
def version() -> None:
    """Show version information."""
    print(f"gitrepo version: [bold]{__version__}[/bold]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
