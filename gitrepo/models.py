"""Value types for commits, changed files and executed git commands."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .formatting import format_short_sha


class Action(str, Enum):
    """How a file was changed."""

    ADD = "ADD"
    DELETE = "DELETE"
    RENAME = "RENAME"
    MODIFY = "MODIFY"
    COPY = "COPY"


@dataclass(frozen=True)
class File:
    """
    A changed file, relative to the repository root.

    Files read from the working tree carry no commit id; files read from
    history, or returned by a commit, are stamped with their owning commit.
    """

    filename: str
    action: Action
    commit_id: Optional[str] = None

    def with_commit_id(self, commit_id: str) -> "File":
        """Return a copy of this file owned by ``commit_id``."""
        return replace(self, commit_id=commit_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "File":
        """Create a File from a dictionary (e.g., from YAML data)."""
        return cls(
            filename=data["filename"],
            action=Action(data["action"]),
            commit_id=data.get("commit_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML/JSON serialization."""
        return {
            "filename": self.filename,
            "action": self.action.value,
            "commit_id": self.commit_id,
        }


@dataclass(frozen=True)
class Commit:
    """A commit id and the files it changed, in diff order."""

    id: str
    files: Tuple[File, ...] = field(default_factory=tuple)

    @property
    def short_id(self) -> str:
        """8-character abbreviated id for display."""
        return format_short_sha(self.id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Create a Commit from a dictionary (e.g., from YAML data)."""
        return cls(
            id=data["id"],
            files=tuple(File.from_dict(f) for f in data.get("files", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML/JSON serialization."""
        return {"id": self.id, "files": [f.to_dict() for f in self.files]}

    def __str__(self) -> str:
        return f"{self.short_id} ({len(self.files)} files)"


@dataclass(frozen=True)
class CommandResult:
    """One executed git command line and what it printed."""

    command: str
    stdout: str
    stderr: str
    returncode: int = 0

    @property
    def failed(self) -> bool:
        """Whether git wrote anything to stderr."""
        return bool(self.stderr)
