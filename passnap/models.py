from dataclasses import dataclass
from typing import NamedTuple

FIELDS = ("url", "username", "password", "extra", "name",
          "grouping", "fav", "id", "attachpresent")
RECORD_WIDTH = len(FIELDS)


class VaultRecord(NamedTuple):
    url: str
    username: str
    password: str
    extra: str
    name: str
    grouping: str
    fav: str
    id: str
    attachpresent: str

    @property
    def is_header(self) -> bool:
        return self.url == "url" and self.username == "username"

    @property
    def has_attachments(self) -> bool:
        return self.attachpresent == "1"


@dataclass
class SecretEntry:
    identifier: str
    content: str


@dataclass(frozen=True)
class AttachmentBlob:
    id: str
    filename: str
    data: bytes


@dataclass
class ImportStats:
    total: int = 0
    written: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    attachments: int = 0

    def summary(self) -> str:
        return (f"{self.total} items: {self.written} written, {self.unchanged} unchanged, "
                f"{self.skipped} skipped, {self.failed} failed, "
                f"{self.attachments} attachments")
