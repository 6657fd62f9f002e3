import base64
import json
import os
from getpass import getpass
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend

from .errors import ConfigError

DEFAULT_KDF_ITERS = 200_000
BACKEND = default_backend()
META_FILE = ".passnap-meta.json"


def derive_key(master_password: str, salt: bytes, kdf_iters: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=kdf_iters,
        backend=BACKEND
    )
    key = kdf.derive(master_password.encode("utf-8"))
    return base64.urlsafe_b64encode(key)


def read_meta(store_dir: Path) -> dict | None:
    path = store_dir / META_FILE
    if not path.is_file():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def init_meta(store_dir: Path, master_password: str, kdf_iters: int = DEFAULT_KDF_ITERS) -> Fernet:
    store_dir.mkdir(parents=True, exist_ok=True)
    salt = os.urandom(16)
    f = Fernet(derive_key(master_password, salt, kdf_iters))
    meta = {
        "salt": base64.b64encode(salt).decode("ascii"),
        "kdf_iters": kdf_iters,
        "verifier": f.encrypt(b"verify").decode("ascii"),
    }
    (store_dir / META_FILE).write_text(json.dumps(meta), encoding="utf-8")
    return f


def unlock(meta: dict, master_password: str) -> Fernet:
    salt = base64.b64decode(meta["salt"])
    kdf_iters = int(meta.get("kdf_iters") or DEFAULT_KDF_ITERS)
    f = Fernet(derive_key(master_password, salt, kdf_iters))
    try:
        ok = f.decrypt(meta["verifier"].encode("ascii")) == b"verify"
    except InvalidToken:
        ok = False
    if not ok:
        raise ConfigError("Incorrect master password for the encrypted store.")
    return f


def require_master_and_fernet(store_dir: Path, master_password: str | None = None) -> Fernet:
    """
    - store without metadata: SET the master password (asked twice) and write the verifier.
    - existing store: UNLOCK with the given or prompted password.
    """
    meta = read_meta(store_dir)
    if meta is None:
        if master_password is None:
            while True:
                pw1 = getpass("Create master password: ")
                pw2 = getpass("Confirm master password: ")
                if pw1 != pw2:
                    print("Passwords do not match. Try again.\n")
                    continue
                if len(pw1) < 8:
                    print("Use at least 8 characters.\n")
                    continue
                break
            master_password = pw1
        elif len(master_password) < 8:
            raise ConfigError("Master password must be at least 8 characters.")
        return init_meta(store_dir, master_password)

    if master_password is None:
        master_password = getpass("Master password: ")
    return unlock(meta, master_password)
