import argparse
import logging

from . import config as cfg
from . import deps
from . import pipeline
from .attachments import FETCH, WARN
from .backup import create_backup
from .errors import FatalError
from .lastpass import LastPass
from .log import setup_logging
from .notify import send_notification
from .store import BACKENDS, open_store

log = logging.getLogger(__name__)


def cmd_run(args):
    setup_logging(debug=args.debug)
    log.info("Starting passnap...")
    try:
        cfg.load_env_file(args.env_file)
        config = cfg.from_args(args)
        deps.check_dependencies(config)
        store = open_store(config)
        create_backup(config, store)

        lastpass = LastPass()
        lastpass.login(config.lastpass_username)
        stats = pipeline.run(config, store, lastpass)
        log.info("Import complete: %s", stats.summary())
        send_notification(config.notify, f"Import completed successfully.\n\n{stats.summary()}\n")
        return stats
    except FatalError as e:
        log.error("%s", e)
        raise SystemExit(1)
    finally:
        log.info("Finished.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="passnap",
        description="One-way snapshot of a LastPass vault (lpass) into a local password store.")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-b", "--backup", action="store_true",
                        help="Back up the password store before importing")
    parser.add_argument("--backup-dir",
                        help="Directory to store the backup (or set PASSNAP_BACKUP_DIR). Default: $HOME")
    parser.add_argument("-t", "--test", action="store_true",
                        help="Test mode: report what would be imported, change nothing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print entry names")
    parser.add_argument("-u", "--username", help="LastPass username (or set LPASS_USERNAME)")
    parser.add_argument("--backend", choices=BACKENDS,
                        help="Password store backend (or set PASSNAP_BACKEND). Default: pass")
    parser.add_argument("--store-dir",
                        help="Password store directory (default: $PASSWORD_STORE_DIR or ~/.password-store)")
    parser.add_argument("--attachments", choices=(FETCH, WARN),
                        help="Embed attachments in entries, or only warn about them. Default: fetch")
    parser.add_argument("--env-file", help=f"Settings file to load. Default: ./{cfg.DEFAULT_ENV_FILE}")
    parser.set_defaults(func=cmd_run)
    return parser
