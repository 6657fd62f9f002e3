import io
import logging
import tarfile
from datetime import datetime
from pathlib import Path

from .errors import StoreWriteError
from .store import SecretStore

log = logging.getLogger(__name__)


def backup_path(backup_dir: Path, store: SecretStore, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return Path(backup_dir) / f"pass-backup-{stamp}.tar.gz{store.backup_suffix}"


def archive(store_dir: Path) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        # members relative to the store root, like `tar -C store .`
        tar.add(store_dir, arcname=".")
    return buf.getvalue()


def create_backup(config, store: SecretStore) -> Path | None:
    if not config.backup:
        log.info("Backup disabled.")
        return None
    if not store.store_dir.is_dir():
        log.warning("Password store directory not found at %s. Skipping backup.", store.store_dir)
        return None

    dest = backup_path(config.backup_dir, store)
    log.info("Creating backup of password store at %s...", dest)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        store.encrypt_backup(archive(store.store_dir), dest)
    except (OSError, tarfile.TarError, StoreWriteError) as e:
        log.error("Backup failed: %s", e)
        return None
    log.info("Backup created successfully.")
    return dest
