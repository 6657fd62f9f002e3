"""Shared test fixtures and fakes."""

import logging
from pathlib import Path

import pytest

from passnap.config import Config
from passnap.errors import AttachmentError, StoreReadError, StoreWriteError
from passnap.store import SecretStore

HEADER = "url,username,password,extra,name,grouping,fav,id,attachpresent\n"


def export_text(*rows: str) -> str:
    return HEADER + "".join(rows)


class FakeStore(SecretStore):
    """In-memory store recording every write."""

    def __init__(self, store_dir: Path, entries=None):
        super().__init__(store_dir)
        self.entries = dict(entries or {})
        self.writes = []
        self.unreadable = set()
        self.unwritable = set()

    def exists(self, identifier):
        return identifier in self.entries

    def read(self, identifier):
        if identifier in self.unreadable:
            raise StoreReadError("gpg: decryption failed: No secret key")
        return self.entries[identifier]

    def write(self, identifier, content):
        if identifier in self.unwritable:
            raise StoreWriteError("permission denied")
        self.entries[identifier] = content
        self.writes.append(identifier)

    def encrypt_backup(self, data, dest):
        dest.write_bytes(b"ENC" + data)


class FakeLastPass:
    def __init__(self, export=None, attachments=None, blobs=None):
        self.export_data = export
        self.attachment_map = attachments or {}
        self.blobs = blobs or {}
        self.fetched = []

    def export(self, dest):
        dest.write_text(self.export_data, encoding="utf-8")

    def attachments(self, item_id):
        value = self.attachment_map.get(item_id, [])
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_attachment(self, item_id, attachment_id, dest):
        self.fetched.append((item_id, attachment_id))
        data = self.blobs.get(attachment_id)
        if data is None:
            raise AttachmentError("lpass exited with status 1")
        dest.write_bytes(data)


@pytest.fixture
def store_dir(tmp_path):
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def store(store_dir):
    return FakeStore(store_dir)


@pytest.fixture
def config(store_dir):
    return Config(store_dir=store_dir)


@pytest.fixture(autouse=True)
def _reset_passnap_logger():
    logger = logging.getLogger("passnap")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
