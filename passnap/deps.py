import logging
import shutil

from .errors import MissingDependencyError
from .store import FERNET, GOPASS, PASS

log = logging.getLogger(__name__)


def required_executables(config) -> list[tuple[str, str]]:
    needed = [("lpass", "LastPass CLI")]
    if config.backend == PASS:
        needed.append(("pass", "Unix Password Store"))
    elif config.backend == GOPASS:
        needed.append(("gopass", "gopass"))
    if config.backup and config.backend != FERNET:
        needed.append(("gpg", "GnuPG, to encrypt the backup"))
    return needed


def check_dependencies(config):
    log.info("Checking dependencies...")
    for executable, description in required_executables(config):
        if shutil.which(executable) is None:
            raise MissingDependencyError(
                f"Required dependency '{executable}' ({description}) is not installed.")
    if shutil.which("git") is None:
        log.debug("git not found; store changes will not be committed.")
    log.info("All dependencies are installed. Using '%s'.", config.backend)
