"""Common formatting utilities for gitrepo display code."""

ACTION_STYLES = {
    "ADD": "green",
    "DELETE": "red",
    "RENAME": "cyan",
    "MODIFY": "yellow",
    "COPY": "blue",
}


def format_short_sha(sha: str) -> str:
    """
    Format SHA to 8-character abbreviated format for display.

    Args:
        sha: Full or partial SHA string

    Returns:
        8-character SHA or original if shorter than 8 chars
    """
    if not sha:
        return ""
    return sha[:8] if len(sha) >= 8 else sha


def format_action(action: str) -> str:
    """Format a change action as a colored Rich markup label."""
    # Action is a str enum, so .value and plain strings both work here
    name = getattr(action, "value", action)
    style = ACTION_STYLES.get(name)
    if not style:
        return name
    return f"[{style}]{name}[/{style}]"
