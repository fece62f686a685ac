"""
Commit and push updated snapshots with git.
"""

import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import structlog

from monitor.exceptions import VCSError

logger = structlog.get_logger(__name__)

DEFAULT_COMMIT_MESSAGE = "chore: update snapshots [skip ci]"


class GitCommitter:
    """Stages, commits and pushes snapshot files in a git working tree."""

    def __init__(
        self,
        repo_dir: Path = Path("."),
        author_name: str = "ChangeBot",
        author_email: str = "github-actions[bot]@users.noreply.github.com",
        paths: Optional[Sequence[str]] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Initialize committer.

        Args:
            repo_dir: Working tree to run git in
            author_name: Commit author name
            author_email: Commit author email
            paths: Paths to stage, defaults to the whole tree
            runner: Function with the signature of subprocess.run
        """
        self.repo_dir = Path(repo_dir)
        self.author_name = author_name
        self.author_email = author_email
        self.paths = list(paths) if paths else ["."]
        self.runner = runner
        self.logger = logger.bind(component="git_committer")

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"

    def has_changes(self) -> bool:
        """True if any of the staged paths differ from HEAD or are untracked."""
        output = self._git(["status", "--porcelain", "--", *self.paths])
        return bool(output.strip())

    def commit(self, message: str) -> None:
        self._git(["add", "--", *self.paths])
        self._git(["commit", "--author", self.author, "-m", message])
        self.logger.info("Committed snapshots", message=message, author=self.author)

    def push(self) -> None:
        self._git(["push"])
        self.logger.info("Pushed snapshots")

    def commit_and_push(self, message: str = DEFAULT_COMMIT_MESSAGE) -> bool:
        """
        Commit and push snapshot changes.

        Args:
            message: Commit message

        Returns:
            True if a commit was pushed, False if there was nothing to commit

        Raises:
            VCSError: If a git command fails
        """
        if not self.has_changes():
            self.logger.info("No snapshot changes to commit")
            return False

        self.commit(message)
        self.push()
        return True

    def _git(self, args: List[str]) -> str:
        command = ["git", *args]
        try:
            completed = self.runner(
                command,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise VCSError(f"Failed to run {' '.join(command)}: {e}") from e

        if completed.returncode != 0:
            error = (completed.stderr or completed.stdout or "").strip()
            self.logger.error("Git command failed", command=args[0], error=error)
            raise VCSError(f"git {args[0]} failed: {error}")

        return completed.stdout or ""
