"""Core git command execution."""

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from rich.console import Console
from rich.markup import escape

from .models import CommandResult


class GitError(Exception):
    """Custom exception for git operation errors."""

    pass


class CommandFailure(GitError):
    """A git command wrote to stderr."""

    def __init__(self, result: CommandResult, history: Sequence[CommandResult] = ()):
        self.result = result
        self.history = tuple(history)
        super().__init__(format_failure(result, self.history))


def format_failure(result: CommandResult, history: Sequence[CommandResult]) -> str:
    """Build the diagnostic for a failed command, newest previous command first."""
    message = f"\n{result.command}\n{result.stderr}"
    if history:
        message += "Previous git commands (most recent is on top):\n"
        for previous in reversed(history):
            message += (
                f"\n{previous.command}\nstdout: {previous.stdout}\nstderr: {previous.stderr}"
            )
    return message


def _read_lines(text: Optional[str]) -> str:
    """Normalize captured output so every line ends with a single newline."""
    if not text:
        return ""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return "".join(line + "\n" for line in lines)


class GitCommandRunner:
    """
    Runs git against one repository and keeps a history of what it ran.

    Every command is prefixed with ``--git-dir`` and ``--work-tree`` pointing
    at the repository, so the current directory of the calling process does
    not matter. A command fails when it writes anything to stderr; the exit
    code is recorded but not used to decide failure.
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        git_binary: str = "git",
        console: Optional[Console] = None,
        verbose: bool = False,
    ):
        """Initialize GitCommandRunner with repository path and console."""
        self.repo_path = Path(repo_path)
        self.git_binary = git_binary
        self.console = console or Console()
        self.verbose = verbose
        self._history: List[CommandResult] = []

        self.command_base = [
            git_binary,
            f"--git-dir={self.repo_path / '.git'}",
            f"--work-tree={self.repo_path}",
        ]

    @property
    def history(self) -> Tuple[CommandResult, ...]:
        """Successfully executed commands, oldest first."""
        return tuple(self._history)

    def build_command(self, args: Union[str, Sequence[str]]) -> List[str]:
        """Prepend the repository location arguments to ``args``."""
        if isinstance(args, str):
            args = args.split()
        return self.command_base + list(args)

    def run_command(
        self, args: Union[str, Sequence[str]], allow_failure: bool = False
    ) -> CommandResult:
        """
        Execute a git subcommand and return its captured output.

        Args:
            args: Subcommand arguments. A string is split on whitespace; pass
                a list to keep an argument containing spaces (such as a commit
                message) intact.
            allow_failure: Return the result instead of raising when git
                writes to stderr. Such results are not added to the history.

        Raises:
            CommandFailure: git wrote to stderr and ``allow_failure`` is False.
            GitError: the git executable could not be started.
        """
        full_command = self.build_command(args)
        command_line = " ".join(full_command)

        if self.verbose:
            self.console.print(f"[dim]$ {escape(command_line)}[/dim]", highlight=False)

        try:
            process = subprocess.run(
                full_command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise GitError(f"Git executable not found: {self.git_binary}") from e

        result = CommandResult(
            command=command_line,
            stdout=_read_lines(process.stdout),
            stderr=_read_lines(process.stderr),
            returncode=process.returncode,
        )

        if result.failed:
            if allow_failure:
                return result
            raise CommandFailure(result, self._history)

        self._history.append(result)
        return result
