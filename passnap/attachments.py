import base64
import logging
import tempfile
from pathlib import Path

from .errors import AttachmentError
from .models import AttachmentBlob, SecretEntry, VaultRecord

log = logging.getLogger(__name__)

FETCH = "fetch"
WARN = "warn"


def encode_block(blob: AttachmentBlob) -> str:
    encoded = base64.encodebytes(blob.data).decode("ascii").rstrip("\n")
    return (f"attachment: {blob.filename}\n"
            f"attachment_encoding: base64\n"
            f"attachment_data:\n"
            f"{encoded}")


class AttachmentResolver:
    """Embeds a record's attachments into its entry, one block per file."""

    def __init__(self, lastpass, mode: str = FETCH):
        self.lastpass = lastpass
        self.mode = mode

    def resolve(self, record: VaultRecord, entry: SecretEntry) -> int:
        """Append attachment blocks to entry.content; returns how many were embedded."""
        if not record.has_attachments:
            return 0
        if self.mode == WARN:
            log.warning("Entry '%s' (LastPass ID: %s) has attachments; they are not imported.",
                        entry.identifier, record.id)
            return 0

        log.info("Entry '%s' (LastPass ID: %s) has attachments. Fetching...",
                 entry.identifier, record.id)
        try:
            pairs = self.lastpass.attachments(record.id)
        except AttachmentError as e:
            log.error("Failed to fetch JSON details for '%s': %s", entry.identifier, e)
            return 0
        if not pairs:
            log.warning("No attachments found in JSON details for '%s' despite flag.",
                        entry.identifier)
            return 0

        embedded = 0
        for att_id, filename in pairs:
            log.info("Processing attachment: %s", filename)
            try:
                blob = self.fetch(record.id, att_id, filename)
            except (AttachmentError, OSError) as e:
                log.error("Failed to download attachment %s: %s", filename, e)
                continue
            entry.content += "\n" + encode_block(blob)
            embedded += 1
        return embedded

    def fetch(self, item_id: str, att_id: str, filename: str) -> AttachmentBlob:
        with tempfile.TemporaryDirectory(prefix="passnap-att-") as tmp:
            # lpass must create the file itself or it prompts before overwriting
            dest = Path(tmp) / "attachment"
            self.lastpass.fetch_attachment(item_id, att_id, dest)
            return AttachmentBlob(att_id, filename, dest.read_bytes())
