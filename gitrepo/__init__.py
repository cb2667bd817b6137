"""Typed wrapper around the git command line."""

__version__ = "0.1.0"

from .git_basic import CommandFailure, GitCommandRunner, GitError
from .git_parser import MalformedOutputError, ParseContextError, UnknownActionError
from .git_repo import FetchFailure, GitRepo
from .models import Action, CommandResult, Commit, File
