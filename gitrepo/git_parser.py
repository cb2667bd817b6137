"""Parsing of raw git output into commit ids, files and name lists."""

import re
from typing import List

from .git_basic import GitError
from .models import Action, File

# Width of the "* " / "  " checked-out marker in `git branch` output
BRANCH_MARKER_WIDTH = 2

ACTION_CODES = {
    "A": Action.ADD,
    "D": Action.DELETE,
    "R": Action.RENAME,
    "RM": Action.RENAME,
    "M": Action.MODIFY,
    "C": Action.COPY,
    "AM": Action.COPY,
    "??": Action.ADD,
}

_NEWLINE = re.compile(r"\r?\n")
_TWO_WHITESPACES = re.compile(r"\s{2}")
# diff-tree reports renames and copies with a similarity score, e.g. R100 or C075
_SCORED_CODE = re.compile(r"^([RC])\d+$")


class UnknownActionError(GitError):
    """A status code outside the known change vocabulary."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown change type {code}")


class MalformedOutputError(GitError):
    """A line of git output lacks the fields it should have."""

    pass


class ParseContextError(GitError):
    """Parsing the file list of a commit failed."""

    def __init__(self, commit_id: str, cause: Exception):
        self.commit_id = commit_id
        super().__init__(f"Failed to get files in commit {commit_id}: {cause}")


def split_non_empty_lines(text: str) -> List[str]:
    """Split on newlines, dropping empty lines."""
    return [line for line in _NEWLINE.split(text) if line]


def parse_commit_ids(text: str) -> List[str]:
    """Parse `log --pretty=%H` output into ids, oldest first."""
    # git log prints newest first
    return list(reversed(split_non_empty_lines(text)))


def parse_change_action(code: str) -> Action:
    """Map a short-status or name-status code to an Action."""
    scored = _SCORED_CODE.match(code)
    if scored:
        code = scored.group(1)
    try:
        return ACTION_CODES[code]
    except KeyError:
        raise UnknownActionError(code) from None


def parse_committed_file_list(text: str, commit_id: str) -> List[File]:
    """
    Parse `diff-tree --no-commit-id --name-status -r` output.

    Each line is ``<code>\\t<path>``; renames and copies carry a source and
    a destination path, and the destination is kept. Every file is stamped
    with ``commit_id``.

    Raises:
        ParseContextError: a line has an unknown code or no path.
    """
    files = []
    try:
        for line in split_non_empty_lines(text):
            parts = line.split("\t")
            if len(parts) < 2:
                raise MalformedOutputError(f"Expected '<code>\\t<path>', got {line!r}")
            action = parse_change_action(parts[0].strip())
            files.append(File(filename=parts[-1].strip(), action=action, commit_id=commit_id))
    except (UnknownActionError, MalformedOutputError) as e:
        raise ParseContextError(commit_id, e) from e
    return files


def parse_working_tree_status(text: str) -> List[File]:
    """
    Parse `status --short` output into uncommitted files.

    Lines look like ``M  file.txt``, `` M file.txt``, ``?? new.txt`` or
    ``R  old.txt -> new.txt``. Renames report the destination path.
    """
    files = []
    for line in split_non_empty_lines(text):
        parts = _TWO_WHITESPACES.sub(" ", line, count=1).strip().split()
        if len(parts) < 2:
            raise MalformedOutputError(f"Expected '<code> <path>', got {line!r}")

        action = parse_change_action(parts[0])
        if action == Action.RENAME:
            if len(parts) < 4:
                raise MalformedOutputError(f"Expected '<code> <old> -> <new>', got {line!r}")
            filename = parts[3]
        else:
            filename = parts[1]
        files.append(File(filename=filename, action=action))
    return files


def parse_name_list(text: str, strip_prefix_length: int = 0) -> List[str]:
    """
    Extract one name per non-empty line, dropping a fixed-width prefix.

    Raises:
        MalformedOutputError: a line holds no name once the prefix is removed.
    """
    names = []
    for line in split_non_empty_lines(text):
        name = line[strip_prefix_length:]
        if not name.strip():
            raise MalformedOutputError(f"Expected a name, got {line!r}")
        names.append(name)
    return names


def parse_branch_list(text: str) -> List[str]:
    """Parse `git branch` output, removing the checked-out marker."""
    return parse_name_list(text, BRANCH_MARKER_WIDTH)


def parse_tag_list(text: str) -> List[str]:
    """Parse `git tag` output."""
    return parse_name_list(text)


def strip_trailing_newline(text: str) -> str:
    """Remove exactly one trailing newline, if present."""
    if text.endswith("\n"):
        return text[:-1]
    return text
