"""
Secret-store backends.

Every backend answers the same four questions: is there an entry at this
identifier, what does it decrypt to, overwrite it with this content, and
encrypt this backup archive. The backend is chosen once, from configuration.
"""

import os
import subprocess
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from . import crypto
from .errors import ConfigError, StoreReadError, StoreWriteError


PASS = "pass"
GOPASS = "gopass"
FERNET = "fernet"
BACKENDS = (PASS, GOPASS, FERNET)


class SecretStore:
    suffix = ""
    backup_suffix = ""

    def __init__(self, store_dir: Path):
        self.store_dir = Path(store_dir)

    def path_for(self, identifier: str) -> Path:
        return self.store_dir / f"{identifier}{self.suffix}"

    def exists(self, identifier: str) -> bool:
        return self.path_for(identifier).is_file()

    def read(self, identifier: str) -> str:
        raise NotImplementedError

    def write(self, identifier: str, content: str):
        raise NotImplementedError

    def encrypt_backup(self, data: bytes, dest: Path):
        raise NotImplementedError


class PassStore(SecretStore):
    """The standard Unix password store, driven through its executable."""

    executable = "pass"
    suffix = ".gpg"
    backup_suffix = ".gpg"

    def _env(self) -> dict:
        return {**os.environ, "PASSWORD_STORE_DIR": str(self.store_dir)}

    def read(self, identifier: str) -> str:
        result = subprocess.run([self.executable, "show", identifier],
                                capture_output=True, text=True, env=self._env())
        if result.returncode != 0:
            raise StoreReadError(result.stderr.strip() or f"exit status {result.returncode}")
        return result.stdout

    def write(self, identifier: str, content: str):
        result = subprocess.run([self.executable, "insert", "-f", "--multiline", identifier],
                                input=content, capture_output=True, text=True, env=self._env())
        if result.returncode != 0:
            raise StoreWriteError(result.stderr.strip() or f"exit status {result.returncode}")

    def recipient(self) -> str:
        gpg_id = self.store_dir / ".gpg-id"
        if not gpg_id.is_file():
            raise StoreWriteError(f"GPG ID file not found at {gpg_id}. Cannot encrypt backup.")
        lines = gpg_id.read_text(encoding="utf-8").splitlines()
        if not lines or not lines[0].strip():
            raise StoreWriteError(f"GPG ID file {gpg_id} is empty. Cannot encrypt backup.")
        return lines[0].strip()

    def encrypt_backup(self, data: bytes, dest: Path):
        result = subprocess.run(["gpg", "--batch", "--yes", "--encrypt",
                                 "--recipient", self.recipient(), "--output", str(dest)],
                                input=data, capture_output=True)
        if result.returncode != 0:
            raise StoreWriteError(result.stderr.decode("utf-8", "replace").strip())


class GopassStore(PassStore):
    executable = "gopass"

    def _env(self) -> dict:
        # gopass resolves its own mounts; PASSWORD_STORE_DIR would confuse it
        return dict(os.environ)


class FernetStore(SecretStore):
    """One Fernet-encrypted file per identifier, keyed by a master password."""

    suffix = ".fernet"
    backup_suffix = ".fernet"

    def __init__(self, store_dir: Path, fernet: Fernet):
        super().__init__(store_dir)
        self.fernet = fernet

    def read(self, identifier: str) -> str:
        try:
            return self.fernet.decrypt(self.path_for(identifier).read_bytes()).decode("utf-8")
        except (OSError, InvalidToken, UnicodeDecodeError) as e:
            raise StoreReadError(f"cannot decrypt '{identifier}': {e!r}") from e

    def write(self, identifier: str, content: str):
        path = self.path_for(identifier)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(self.fernet.encrypt(content.encode("utf-8")))
        except OSError as e:
            raise StoreWriteError(str(e)) from e

    def encrypt_backup(self, data: bytes, dest: Path):
        dest.write_bytes(self.fernet.encrypt(data))


def default_store_dir(backend: str, environ=None) -> Path:
    if backend == FERNET:
        return Path.home() / ".passnap" / "store"
    env = (os.environ if environ is None else environ).get("PASSWORD_STORE_DIR")
    store_dir = Path(env) if env else Path.home() / ".password-store"
    if backend == GOPASS and not store_dir.is_dir():
        store_dir = Path.home() / ".local" / "share" / "gopass" / "stores" / "root"
    return store_dir


def open_store(config) -> SecretStore:
    if config.backend == PASS:
        return PassStore(config.store_dir)
    if config.backend == GOPASS:
        return GopassStore(config.store_dir)
    if config.backend == FERNET:
        f = crypto.require_master_and_fernet(config.store_dir, config.master_password)
        return FernetStore(config.store_dir, f)
    raise ConfigError(f"Unknown store backend: {config.backend}")
