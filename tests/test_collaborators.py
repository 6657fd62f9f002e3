import dataclasses
import io
import smtplib
import tarfile
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from passnap import backup, deps, notify
from passnap.config import Config, NotifyConfig
from passnap.errors import MissingDependencyError

from conftest import FakeStore


class TestBackup:
    def test_disabled(self, config, store, caplog):
        assert backup.create_backup(config, store) is None

    def test_archive_and_encrypt(self, tmp_path, store_dir):
        (store_dir / "bank.gpg").write_bytes(b"secret")
        config = Config(store_dir=store_dir, backup=True, backup_dir=tmp_path / "backups")
        dest = backup.create_backup(config, FakeStore(store_dir))
        assert dest.parent == tmp_path / "backups"
        assert dest.name.startswith("pass-backup-") and dest.name.endswith(".tar.gz")
        data = dest.read_bytes()
        assert data.startswith(b"ENC")
        with tarfile.open(fileobj=io.BytesIO(data[3:]), mode="r:gz") as tar:
            assert "./bank.gpg" in tar.getnames()

    def test_missing_store_dir_warns(self, tmp_path, caplog):
        config = Config(store_dir=tmp_path / "missing", backup=True, backup_dir=tmp_path)
        assert backup.create_backup(config, FakeStore(tmp_path / "missing")) is None
        assert "Skipping backup" in caplog.text

    def test_encryption_failure_is_not_fatal(self, tmp_path, store_dir, caplog):
        config = Config(store_dir=store_dir, backup=True, backup_dir=tmp_path)
        store = FakeStore(store_dir)
        store.encrypt_backup = MagicMock(side_effect=OSError("disk full"))
        assert backup.create_backup(config, store) is None
        assert "Backup failed" in caplog.text

    def test_filename_timestamp(self, tmp_path, store):
        path = backup.backup_path(tmp_path, store, datetime(2025, 11, 26, 9, 5, 1))
        assert path.name == "pass-backup-2025-11-26_09-05-01.tar.gz"


class TestNotify:
    NOTIFY = NotifyConfig(enabled=True, mailrise_url="smtp://mailrise:8025",
                          mailrise_from="bot@example.com", mailrise_rcpt="me@example.com")

    def test_disabled(self):
        assert not notify.send_notification(NotifyConfig(), "body")

    def test_incomplete_settings_warn(self, caplog):
        assert not notify.send_notification(NotifyConfig(enabled=True), "body")
        assert "Notification variables not set" in caplog.text

    def test_sends_over_smtp(self, monkeypatch):
        smtp = MagicMock()
        factory = MagicMock()
        factory.return_value.__enter__.return_value = smtp
        monkeypatch.setattr(smtplib, "SMTP", factory)
        assert notify.send_notification(self.NOTIFY, "Import completed successfully.")
        assert factory.call_args[0][:2] == ("mailrise", 8025)
        msg = smtp.send_message.call_args[0][0]
        assert msg["Subject"] == notify.SUBJECT
        assert "me@example.com" in msg["To"]

    def test_send_failure_is_logged(self, monkeypatch, caplog):
        monkeypatch.setattr(smtplib, "SMTP", MagicMock(side_effect=OSError("refused")))
        assert not notify.send_notification(self.NOTIFY, "body")
        assert "Failed to send notification" in caplog.text


class TestDeps:
    def test_pass_backend_needs_lpass_and_pass(self, config):
        names = [name for name, _ in deps.required_executables(config)]
        assert names == ["lpass", "pass"]

    def test_backup_needs_gpg(self, config):
        names = [n for n, _ in deps.required_executables(dataclasses.replace(config, backup=True))]
        assert "gpg" in names

    def test_fernet_backend_needs_only_lpass(self, config):
        fernet = dataclasses.replace(config, backend="fernet", backup=True)
        assert [n for n, _ in deps.required_executables(fernet)] == ["lpass"]

    def test_missing_executable_is_fatal(self, config, monkeypatch):
        monkeypatch.setattr(deps.shutil, "which", lambda name: None if name == "pass" else "/bin/x")
        with pytest.raises(MissingDependencyError, match="'pass'"):
            deps.check_dependencies(config)
