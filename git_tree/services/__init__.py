"""Services used by the worktree manager: persistence, git and reporting."""
