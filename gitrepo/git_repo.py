"""Repository-level git operations built on the command runner and parsers."""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from rich.console import Console

from .git_basic import GitCommandRunner, GitError
from .git_parser import (
    MalformedOutputError,
    parse_branch_list,
    parse_commit_ids,
    parse_committed_file_list,
    parse_tag_list,
    parse_working_tree_status,
    strip_trailing_newline,
)
from .models import CommandResult, Commit, File


class FetchFailure(GitError):
    """Fetching a remote branch before merging it failed."""

    def __init__(self, branch: str, stderr: str):
        self.branch = branch
        self.stderr = stderr
        super().__init__(f"Failed to fetch remote branch before merging '{branch}': {stderr}")


class GitRepo:
    """
    Typed operations on one local git repository.

    Each method issues one or more git commands through a
    :class:`GitCommandRunner` and turns their output into commit ids,
    :class:`Commit` and :class:`File` objects. A handle is meant for a single
    caller; it keeps no state besides the runner's command history.
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        mainline_branch: str = "master",
        remote: str = "origin",
        console: Optional[Console] = None,
        verbose: bool = False,
        git_binary: str = "git",
        runner: Optional[GitCommandRunner] = None,
    ):
        """Initialize GitRepo with repository path, mainline branch and console."""
        self.console = console or Console()
        self.runner = runner or GitCommandRunner(
            repo_path, git_binary=git_binary, console=self.console, verbose=verbose
        )
        self.repo_path = self.runner.repo_path
        self.mainline_branch = mainline_branch
        self.remote = remote

    @property
    def history(self) -> Tuple[CommandResult, ...]:
        """Commands run successfully through this handle, oldest first."""
        return self.runner.history

    def _run(self, args: Union[str, Sequence[str]]) -> CommandResult:
        return self.runner.run_command(args)

    # Repository setup
    def init(self) -> None:
        """Create the repository with the mainline branch checked out."""
        self._run(["init", "--quiet", f"--initial-branch={self.mainline_branch}"])

    def set_user_config(self, email: str, name: str) -> None:
        """Set the committer identity for this repository only."""
        self._run(["config", "user.email", email])
        self._run(["config", "user.name", name])

    # Branch Management Operations
    def switch_branch(self, branch: str) -> None:
        """Create or reset ``branch`` and check it out."""
        self._run(["checkout", "--quiet", "-B", branch])

    def remove_branch(self, branch: str) -> None:
        """Force-delete ``branch``."""
        self._run(["branch", "--quiet", "-D", branch])

    def list_branches(self) -> List[str]:
        """Local branch names."""
        return parse_branch_list(self._run(["branch"]).stdout)

    def current_branch(self) -> str:
        """Name of the checked-out branch."""
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()

    def tag_head(self, name: str) -> None:
        """Tag the current HEAD."""
        self._run(["tag", name])

    def get_tag_list(self) -> List[str]:
        """Tag names."""
        result = self._run(["tag"])
        try:
            return parse_tag_list(result.stdout)
        except MalformedOutputError as e:
            raise GitError(f"Get tag list failed: {e}") from e

    # History queries
    def get_head_commit_id(self) -> str:
        """Full id of HEAD."""
        return self._run(["rev-parse", "HEAD"]).stdout.replace("\n", "")

    def get_commit_ids(self, branch: str) -> List[str]:
        """Ids of the commits reachable from ``branch``, oldest first."""
        return parse_commit_ids(self._run(["log", "--pretty=%H", branch]).stdout)

    def get_commits(self, branch: str) -> List[Commit]:
        """
        Commits reachable from ``branch``, oldest first.

        The oldest commit is the point the branch was cut from, not new work,
        so its file list is left empty and no diff is computed for it.
        """
        commit_ids = self.get_commit_ids(branch)
        commits = []
        for index, commit_id in enumerate(commit_ids):
            if index == 0:
                commits.append(Commit(id=commit_id))
            else:
                files = self.get_files_in_commit(commit_id)
                commits.append(Commit(id=commit_id, files=tuple(files)))
        return commits

    def get_files_in_commit(self, commit_id: str) -> List[File]:
        """Files changed by a single commit."""
        result = self._run(["diff-tree", "--no-commit-id", "--name-status", "-r", commit_id])
        return parse_committed_file_list(result.stdout, commit_id)

    def get_uncommitted_files(self) -> List[File]:
        """Staged, unstaged and untracked files in the working tree."""
        return parse_working_tree_status(self._run(["status", "--short"]).stdout)

    def get_file_contents(self, commit_id: str, path: str) -> str:
        """Contents of ``path`` as of ``commit_id``."""
        result = self._run(["show", f"{commit_id}:{path}"])
        return strip_trailing_newline(result.stdout)

    # Changes
    def add_file(self, path: str) -> None:
        """Stage ``path``."""
        self._run(["add", path])

    def commit(self, files: Sequence[File], message: str) -> Commit:
        """Stage ``files``, commit them with ``message`` and return the new commit."""
        for file in files:
            self.add_file(file.filename)
        self._run(["commit", "-m", message])
        commit_id = self.get_head_commit_id()
        return Commit(id=commit_id, files=tuple(f.with_commit_id(commit_id) for f in files))

    def reset(self, ref: str, hard: bool = True) -> None:
        """Move the current branch to ``ref``."""
        args = ["reset", "--hard", ref] if hard else ["reset", ref]
        self._run(args)

    # Remote operations
    def push_all(self) -> None:
        """Push all branches to the default remote."""
        self._run(["push", "--quiet", "--all", self.remote])

    def pull(self) -> None:
        """Fetch and merge from the default remote."""
        self._run(["pull", "--quiet"])

    # Merging
    def _switch_to_mainline(self) -> None:
        if self.current_branch() != self.mainline_branch:
            self.console.print(
                f"[yellow]You are not on the {self.mainline_branch} branch[/yellow]"
            )
            self.console.print(f"[yellow]Switching to the {self.mainline_branch} branch...[/yellow]")
            self._run(["checkout", "--quiet", self.mainline_branch])

    def _merge_succeeded(self, result: CommandResult) -> bool:
        if result.failed or result.returncode != 0:
            self.console.print(f"[red]Merge did not complete cleanly: {result.command}[/red]")
            return False
        return True

    def merge(self, branch: str, remote: bool = False) -> bool:
        """
        Merge ``branch`` into the mainline branch.

        Checks out the mainline branch first if needed. With ``remote``, the
        branch is fetched from the default remote and ``<remote>/<branch>`` is
        merged instead.

        Returns:
            True if the merge completed, False if it stopped on conflicts or
            git reported an error.

        Raises:
            FetchFailure: the fetch wrote to stderr; no merge is attempted.
        """
        self._switch_to_mainline()
        if remote:
            fetch_result = self.runner.run_command(
                ["fetch", "--quiet", self.remote, branch], allow_failure=True
            )
            if fetch_result.failed:
                raise FetchFailure(branch, fetch_result.stderr)
            remote_branch = f"{self.remote}/{branch}"
            merge_result = self.runner.run_command(
                ["merge", remote_branch, "-m", f"Merge remote-tracking branch '{remote_branch}'"],
                allow_failure=True,
            )
        else:
            merge_result = self.runner.run_command(["merge", branch], allow_failure=True)
        return self._merge_succeeded(merge_result)

    def merge_theirs(self, branch: str) -> bool:
        """Merge ``branch`` into the mainline, resolving conflicts in its favor."""
        self._switch_to_mainline()
        result = self.runner.run_command(
            ["merge", branch, "-s", "recursive", "-Xtheirs"], allow_failure=True
        )
        return self._merge_succeeded(result)

    def is_merged(self, branch: str) -> bool:
        """Check if ``branch`` is fully merged into the mainline branch."""
        result = self._run(["branch", "--merged", self.mainline_branch])
        return branch in parse_branch_list(result.stdout)
