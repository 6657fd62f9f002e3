import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .attachments import FETCH, WARN
from .errors import ConfigError
from .store import BACKENDS, PASS, default_store_dir

log = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


@dataclass(frozen=True)
class NotifyConfig:
    enabled: bool = False
    mailrise_url: str = ""
    mailrise_from: str = ""
    mailrise_rcpt: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.mailrise_url and self.mailrise_from and self.mailrise_rcpt)


@dataclass(frozen=True)
class Config:
    store_dir: Path
    backend: str = PASS
    debug: bool = False
    verbose: bool = False
    test_mode: bool = False
    backup: bool = False
    backup_dir: Path = field(default_factory=Path.home)
    lastpass_username: str | None = None
    attachments: str = FETCH
    master_password: str | None = field(default=None, repr=False)
    notify: NotifyConfig = field(default_factory=NotifyConfig)

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown store backend '{self.backend}' "
                              f"(choose from {', '.join(BACKENDS)}).")
        if self.attachments not in (FETCH, WARN):
            raise ConfigError(f"Unknown attachment mode '{self.attachments}' "
                              f"(choose from {FETCH}, {WARN}).")


def env_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no", ""):
        return False
    return default


def load_env_file(path: str | None = None) -> bool:
    """Load KEY=VALUE pairs into os.environ without overriding what is already set."""
    env_file = Path(path or DEFAULT_ENV_FILE)
    if not env_file.is_file():
        log.warning("No .env file found at %s. Skipping environment variable loading.", env_file)
        return False
    log.info("Loading environment variables from %s...", env_file)
    load_dotenv(env_file, override=False)
    return True


def from_args(args, environ=None) -> Config:
    # Priority: CLI arg > env var > default
    env = os.environ if environ is None else environ
    backend = args.backend or env.get("PASSNAP_BACKEND") or PASS
    if args.store_dir:
        store_dir = Path(args.store_dir).expanduser()
    else:
        store_dir = default_store_dir(backend, env)
    backup_dir = args.backup_dir or env.get("PASSNAP_BACKUP_DIR")

    return Config(
        store_dir=store_dir,
        backend=backend,
        debug=args.debug,
        verbose=args.verbose,
        test_mode=args.test,
        backup=args.backup,
        backup_dir=Path(backup_dir).expanduser() if backup_dir else Path.home(),
        lastpass_username=args.username or env.get("LPASS_USERNAME") or None,
        attachments=args.attachments or env.get("PASSNAP_ATTACHMENTS") or FETCH,
        master_password=env.get("PASSNAP_MASTER_PASSWORD") or None,
        notify=NotifyConfig(
            enabled=env_bool(env.get("ENABLE_NOTIFICATIONS")),
            mailrise_url=env.get("MAILRISE_URL", ""),
            mailrise_from=env.get("MAILRISE_FROM", ""),
            mailrise_rcpt=env.get("MAILRISE_RCPT", ""),
        ),
    )
