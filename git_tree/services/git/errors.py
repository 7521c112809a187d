"""Helpers for turning GitPython failures into GitOperationError."""

from typing import Optional

import git

from git_tree.exceptions import GitOperationError


def describe_git_error(e: git.exc.GitCommandError) -> str:
    """Extract git's diagnostic output from a GitCommandError."""
    command = e.command if hasattr(e, "command") else "git"
    if isinstance(command, (list, tuple)):
        command = " ".join(str(part) for part in command)
    stderr = (e.stderr if hasattr(e, "stderr") and e.stderr else "").strip()
    stdout = (e.stdout if hasattr(e, "stdout") and e.stdout else "").strip()
    status = e.status if hasattr(e, "status") else "unknown"

    # GitPython prefixes captured streams with "stderr: '...'"
    for prefix in ("stderr: ", "stdout: "):
        if stderr.startswith(prefix):
            stderr = stderr[len(prefix):].strip("'")
        if stdout.startswith(prefix):
            stdout = stdout[len(prefix):].strip("'")

    output = "\n".join(part for part in (stdout, stderr) if part)
    if output:
        return f"'{command}' failed (exit {status}):\n{output}"
    return f"'{command}' failed with exit code {status}"


def to_operation_error(
    operation: str, e: git.exc.GitCommandError, branch: Optional[str] = None
) -> GitOperationError:
    """Wrap a GitCommandError with its raw diagnostic text."""
    return GitOperationError(operation, branch, describe_git_error(e))
