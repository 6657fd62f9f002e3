import re

from .errors import UnusableIdentifierError
from .models import SecretEntry, VaultRecord

_HYPHEN_RUNS = re.compile(r"-{2,}")


def normalize_name(name: str) -> str:
    """
    Derive a store identifier from an item name.

    Order matters: lowercase, '/' -> '_', ' ' -> '-', drop everything from the
    last '.', squeeze hyphens, trim leading/trailing hyphen.
    The last-dot cut is unconditional ("v1.2 key" -> "v1"); existing stores
    depend on it.
    """
    cleaned = name.lower()
    cleaned = cleaned.replace("/", "_")
    cleaned = cleaned.replace(" ", "-")
    dot = cleaned.rfind(".")
    if dot != -1:
        cleaned = cleaned[:dot]
    cleaned = _HYPHEN_RUNS.sub("-", cleaned)
    if cleaned.startswith("-"):
        cleaned = cleaned[1:]
    if cleaned.endswith("-"):
        cleaned = cleaned[:-1]
    return cleaned


def is_empty(record: VaultRecord) -> bool:
    return not record.name and not record.url and not record.username


def build_content(record: VaultRecord) -> str:
    lines = [record.password]
    if record.username:
        lines.append(f"username: {record.username}")
    if record.url:
        lines.append(f"url: {record.url}")
    if record.extra:
        lines.append(f"extra: {record.extra}")
    return "\n".join(lines)


def to_entry(record: VaultRecord) -> SecretEntry:
    identifier = normalize_name(record.name)
    if not identifier:
        raise UnusableIdentifierError(
            f"Skipping entry with empty normalized name. Original: '{record.name}', "
            f"URL: '{record.url}', ID: '{record.id}'")
    return SecretEntry(identifier, build_content(record))
