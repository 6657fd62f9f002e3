import logging
import shutil
import subprocess
from datetime import datetime
from pathlib import Path

from .errors import TrackingError

log = logging.getLogger(__name__)

GIT_DIR = ".git"
SUSPENDED_DIR = ".git-suspended"


class ChangeTrackingGuard:
    """
    Moves the store's .git aside for the duration of a bulk import, then moves
    it back and records everything the import changed in a single commit.
    """

    def __init__(self, store_dir: Path, message: str | None = None):
        self.store_dir = Path(store_dir)
        self.message = message
        self.git_dir = self.store_dir / GIT_DIR
        self.suspended_dir = self.store_dir / SUSPENDED_DIR

    def suspend(self):
        if self.git_dir.is_dir() and self.suspended_dir.is_dir():
            raise TrackingError(
                f"Both {self.git_dir} and {self.suspended_dir} exist; remove or merge the "
                "stale one before importing.")
        if self.git_dir.is_dir():
            log.info("Temporarily disabling git integration to speed up import...")
            self.git_dir.rename(self.suspended_dir)
        elif self.suspended_dir.is_dir():
            log.warning("Found git integration still suspended from an earlier run; "
                        "it will be restored when this run ends.")

    def restore(self):
        if self.suspended_dir.is_dir():
            log.info("Restoring git integration...")
            self.suspended_dir.rename(self.git_dir)

    def __enter__(self):
        self.suspend()
        return self

    def __exit__(self, *exc):
        self.restore()
        self.commit()
        return False

    def _git(self, *args) -> subprocess.CompletedProcess:
        return subprocess.run(["git", *args], cwd=self.store_dir,
                              capture_output=True, text=True)

    def commit(self) -> bool:
        """Stage everything and commit once; True if a commit was made."""
        if not self.git_dir.is_dir():
            return False
        if shutil.which("git") is None:
            log.warning("git not found; leaving password store changes uncommitted.")
            return False

        added = self._git("add", "-A")
        for line in (added.stdout + added.stderr).splitlines():
            log.debug(line)
        if added.returncode != 0:
            log.error("Failed to stage git changes.")
            return False

        # exit status 1 means the index differs from HEAD
        if self._git("diff", "--cached", "--quiet").returncode == 0:
            log.info("No changes to commit in password store.")
            return False

        log.info("Committing changes to password store...")
        message = self.message or (
            f"LastPass snapshot import on {datetime.now():%Y-%m-%d %H:%M:%S}")
        committed = self._git("commit", "-m", message)
        for line in committed.stdout.splitlines():
            log.info(line)
        if committed.returncode != 0:
            log.error("Failed to commit password store changes: %s", committed.stderr.strip())
            return False
        log.info("Changes committed to password store.")
        return True
