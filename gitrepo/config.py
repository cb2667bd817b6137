"""Configuration management for gitrepo."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from rich.console import Console

console = Console()

DEFAULT_MAINLINE_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_GIT_BINARY = "git"


def get_config_dir() -> Path:
    """Get gitrepo configuration directory."""
    config_dir = Path.home() / ".gitrepo"
    config_dir.mkdir(exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get configuration file path."""
    return get_config_dir() / "config.yml"


def default_config() -> Dict[str, Any]:
    """Configuration used when no config file exists yet."""
    return {
        "default": {
            "repo_path": None,
            "mainline_branch": DEFAULT_MAINLINE_BRANCH,
            "remote": DEFAULT_REMOTE,
            "git_binary": DEFAULT_GIT_BINARY,
        },
        "preferences": {"default_format": "table"},
    }


def load_config() -> Dict[str, Any]:
    """Load configuration from file."""
    config_file = get_config_file()
    if not config_file.exists():
        return default_config()

    with open(config_file) as f:
        return yaml.safe_load(f) or {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file."""
    config_file = get_config_file()
    with open(config_file, "w") as f:
        yaml.dump(config, f, default_flow_style=False)


def _get_default(key: str) -> Optional[Any]:
    default_config_section = load_config().get("default", {})
    if isinstance(default_config_section, dict):
        return default_config_section.get(key)
    return None


def get_repo_path() -> Optional[str]:
    """Get configured repository path."""
    repo_path = _get_default("repo_path")
    return repo_path if isinstance(repo_path, str) else None


def get_mainline_branch() -> str:
    """Get configured mainline branch."""
    return _get_default("mainline_branch") or DEFAULT_MAINLINE_BRANCH


def get_remote() -> str:
    """Get configured default remote."""
    return _get_default("remote") or DEFAULT_REMOTE


def get_git_binary() -> str:
    """Get configured git executable."""
    return _get_default("git_binary") or DEFAULT_GIT_BINARY


def get_default_format() -> str:
    """Get preferred output format for listings."""
    preferences = load_config().get("preferences", {})
    if isinstance(preferences, dict):
        return preferences.get("default_format") or "table"
    return "table"


def set_repo_command(repo_path: str) -> None:
    """Set the repository path."""
    # Expand ~ to home directory
    expanded_path = Path(repo_path).expanduser().resolve()

    if not expanded_path.exists():
        console.print(f"[red]Error: Path does not exist: {expanded_path}[/red]")
        raise typer.Exit(1)

    if not (expanded_path / ".git").exists():
        console.print(f"[red]Error: Not a git repository: {expanded_path}[/red]")
        raise typer.Exit(1)

    config = load_config()
    config.setdefault("default", {})["repo_path"] = str(expanded_path)
    save_config(config)

    console.print(f"[green]✅ Repository path set to: {expanded_path}[/green]")


def set_mainline_command(branch: str) -> None:
    """Set the mainline branch merges go through."""
    config = load_config()
    config.setdefault("default", {})["mainline_branch"] = branch
    save_config(config)

    console.print(f"[green]✅ Mainline branch set to: {branch}[/green]")


def show_config_command(format_type: str = "table") -> None:
    """Show current configuration."""
    repo_path = get_repo_path()

    if format_type == "json":
        output = {
            "repo_path": repo_path,
            "mainline_branch": get_mainline_branch(),
            "remote": get_remote(),
            "git_binary": get_git_binary(),
            "config_file": str(get_config_file()),
        }
        console.print(json.dumps(output, indent=2))
    else:
        console.print("[bold]gitrepo Configuration[/bold]")
        console.print(f"Repository: {repo_path or '[red]Not set[/red]'}")
        console.print(f"Mainline branch: {get_mainline_branch()}")
        console.print(f"Remote: {get_remote()}")
        console.print(f"Git executable: {get_git_binary()}")
        console.print(f"Config file: {get_config_file()}")

        if not repo_path:
            console.print(
                "\n[yellow]Commands default to the repository in the current directory[/yellow]"
            )
