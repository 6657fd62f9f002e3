import json
import logging
import subprocess
from pathlib import Path

from .errors import AttachmentError, ExportError, VaultAuthError
from .models import FIELDS

log = logging.getLogger(__name__)

EXPORT_FIELDS = ",".join(FIELDS)


class LastPass:
    """Thin wrapper over the `lpass` executable."""

    def __init__(self, executable: str = "lpass"):
        self.executable = executable

    def _run(self, *args, **kwargs) -> subprocess.CompletedProcess:
        return subprocess.run([self.executable, *args], **kwargs)

    def logged_in(self) -> bool:
        result = self._run("status", capture_output=True, text=True)
        return result.returncode == 0

    def login(self, username: str | None):
        if self.logged_in():
            log.info("Already logged into LastPass.")
            return
        log.info("Not logged into LastPass. Attempting to log in...")
        if not username:
            raise VaultAuthError(
                "LPASS_USERNAME is not set. Set it in .env, pass --username, "
                "or log into LastPass manually.")
        log.info("Attempting to log in as %s...", username)
        # interactive: lpass prompts for the master password on the terminal
        if self._run("login", username).returncode != 0:
            raise VaultAuthError(
                f"Failed to log in to LastPass as {username}. Check your credentials "
                "or run 'lpass login' manually.")

    def export(self, dest: Path):
        log.info("Exporting data from LastPass to temporary file...")
        with open(dest, "w", encoding="utf-8") as out:
            result = self._run("export", "--color=never", f"--fields={EXPORT_FIELDS}",
                               stdout=out, stderr=subprocess.PIPE, text=True)
        if result.returncode != 0:
            log.warning("If you see 'Could not unbase64 the given bytes', try running "
                        "'lpass logout -f' and logging in again.")
            raise ExportError(f"Failed to export data from LastPass: {result.stderr.strip()}")

    def show_json(self, item_id: str) -> list:
        result = self._run("show", "--json", item_id, capture_output=True, text=True)
        if result.returncode != 0:
            raise AttachmentError(f"Failed to fetch JSON details for item {item_id}.")
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise AttachmentError(f"Unreadable JSON details for item {item_id}: {e}") from e

    def attachments(self, item_id: str) -> list[tuple[str, str]]:
        details = self.show_json(item_id)
        if not details:
            return []
        pairs = []
        try:
            for att in details[0].get("attachments") or []:
                if att.get("id"):
                    pairs.append((str(att["id"]), att.get("filename") or ""))
        except (AttributeError, KeyError, TypeError) as e:
            raise AttachmentError(f"Unexpected JSON details for item {item_id}: {e!r}") from e
        return pairs

    def fetch_attachment(self, item_id: str, attachment_id: str, dest: Path):
        result = self._run("show", item_id, "--attach", attachment_id, "--quiet", str(dest),
                           capture_output=True)
        if result.returncode != 0:
            raise AttachmentError(f"lpass exited with status {result.returncode}")
        if not dest.is_file():
            raise AttachmentError("attachment file was not created")
