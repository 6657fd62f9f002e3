import logging

from .errors import StoreReadError
from .store import SecretStore

log = logging.getLogger(__name__)


def same_content(existing: str, candidate: str) -> bool:
    # `pass show` may add one newline of its own after the stored text
    return existing == candidate or existing == candidate + "\n"


def needs_write(store: SecretStore, identifier: str, content: str, verbose: bool = False) -> bool:
    """Decide whether `content` differs from what the store already holds."""
    if not store.exists(identifier):
        return True
    try:
        existing = store.read(identifier)
    except StoreReadError as e:
        log.warning("Failed to read existing entry '%s' (%s). Proceeding with overwrite.",
                    identifier, e)
        return True
    if same_content(existing, content):
        if verbose:
            log.info("Entry '%s' is unchanged. Skipping.", identifier)
        return False
    return True
