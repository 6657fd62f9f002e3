import subprocess

import pytest

from passnap import tracking
from passnap.errors import TrackingError
from passnap.tracking import ChangeTrackingGuard


class FakeGit:
    def __init__(self, add=0, diff=1, commit=0):
        self.codes = {"add": add, "diff": diff, "commit": commit}
        self.calls = []

    def __call__(self, cmd, cwd=None, **kwargs):
        self.calls.append(cmd[1])
        return subprocess.CompletedProcess(cmd, self.codes[cmd[1]], "", "")


@pytest.fixture
def git_store(store_dir, monkeypatch):
    (store_dir / ".git").mkdir()
    (store_dir / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    monkeypatch.setattr(tracking.shutil, "which", lambda name: "/usr/bin/git")
    return store_dir


def test_suspends_and_restores(git_store, monkeypatch):
    git = FakeGit()
    monkeypatch.setattr(subprocess, "run", git)
    with ChangeTrackingGuard(git_store):
        assert not (git_store / ".git").exists()
        assert (git_store / ".git-suspended" / "HEAD").is_file()
    assert (git_store / ".git" / "HEAD").is_file()
    assert not (git_store / ".git-suspended").exists()
    assert git.calls == ["add", "diff", "commit"]


def test_restores_on_error(git_store, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeGit())
    with pytest.raises(RuntimeError):
        with ChangeTrackingGuard(git_store):
            raise RuntimeError("export failed")
    assert (git_store / ".git").is_dir()


def test_no_commit_when_nothing_staged(git_store, monkeypatch, caplog):
    git = FakeGit(diff=0)
    monkeypatch.setattr(subprocess, "run", git)
    assert ChangeTrackingGuard(git_store).commit() is False
    assert git.calls == ["add", "diff"]


def test_staging_failure_is_logged_not_raised(git_store, monkeypatch, caplog):
    monkeypatch.setattr(subprocess, "run", FakeGit(add=128))
    assert ChangeTrackingGuard(git_store).commit() is False
    assert "Failed to stage git changes" in caplog.text


def test_commit_failure_is_logged_not_raised(git_store, monkeypatch, caplog):
    monkeypatch.setattr(subprocess, "run", FakeGit(commit=1))
    assert ChangeTrackingGuard(git_store).commit() is False
    assert "Failed to commit" in caplog.text


def test_store_without_git_is_left_alone(store_dir, monkeypatch):
    git = FakeGit()
    monkeypatch.setattr(subprocess, "run", git)
    with ChangeTrackingGuard(store_dir):
        pass
    assert not (store_dir / ".git").exists()
    assert git.calls == []


def test_leftover_suspension_is_restored(store_dir, monkeypatch):
    (store_dir / ".git-suspended").mkdir()
    monkeypatch.setattr(subprocess, "run", FakeGit())
    monkeypatch.setattr(tracking.shutil, "which", lambda name: "/usr/bin/git")
    with ChangeTrackingGuard(store_dir):
        pass
    assert (store_dir / ".git").is_dir()


def test_commit_message(git_store, monkeypatch):
    seen = []

    def run(cmd, cwd=None, **kwargs):
        seen.append(cmd)
        return subprocess.CompletedProcess(cmd, 1 if cmd[1] == "diff" else 0, "", "")

    monkeypatch.setattr(subprocess, "run", run)
    ChangeTrackingGuard(git_store).commit()
    assert seen[-1][:3] == ["git", "commit", "-m"]
    assert seen[-1][3].startswith("LastPass snapshot import on ")


def test_stale_suspension_next_to_live_git_is_fatal(git_store, monkeypatch):
    (git_store / ".git-suspended").mkdir()
    git = FakeGit()
    monkeypatch.setattr(subprocess, "run", git)
    with pytest.raises(TrackingError, match="remove or merge"):
        with ChangeTrackingGuard(git_store):
            pass
    assert (git_store / ".git" / "HEAD").is_file()
    assert (git_store / ".git-suspended").is_dir()
    assert git.calls == []
