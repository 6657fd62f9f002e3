"""
The import run: export the vault, walk its records, write what changed.

    suspend git -> export -> count -> for each record:
        header? empty? -> transform -> attachments -> diff -> write | skip
    -> restore git -> single commit
"""

import logging
import tempfile
from contextlib import ExitStack
from pathlib import Path

from . import csvstream
from .attachments import AttachmentResolver
from .diffguard import needs_write
from .errors import MalformedExportError, RecordError, StoreWriteError, UnusableIdentifierError
from .models import RECORD_WIDTH, ImportStats, VaultRecord
from .progress import ProgressReporter
from .store import SecretStore
from .tracking import ChangeTrackingGuard
from .transform import is_empty, to_entry

log = logging.getLogger(__name__)


def open_export(path: Path):
    # newlines pass through untranslated; bytes that are not UTF-8 become U+FFFD
    return open(path, encoding="utf-8", errors="replace", newline="")


def survey(path: Path) -> int:
    """Count data records (header excluded) and reject a truncated export up front."""
    records = fields = 0
    with open_export(path) as f:
        for record in csvstream.logical_records(f):
            records += 1
            fields += len(csvstream.split_record(record))
    if fields % RECORD_WIDTH:
        raise MalformedExportError(
            f"Export holds {fields} fields, not a multiple of {RECORD_WIDTH}; refusing to import.")
    return records - 1 if records > 0 else 0


class Importer:
    def __init__(self, config, store: SecretStore, resolver: AttachmentResolver,
                 progress: ProgressReporter | None = None):
        self.config = config
        self.store = store
        self.resolver = resolver
        self.progress = progress or ProgressReporter(enabled=False)
        self.seen = set()

    def import_file(self, path: Path) -> ImportStats:
        log.info("Counting total items...")
        stats = ImportStats(total=survey(path))
        log.info("Found %d items. Starting import to password store...", stats.total)

        current = 0
        with self.progress, open_export(path) as f:
            for record in csvstream.read_records(f):
                if record.is_header:
                    continue
                current += 1
                try:
                    self.process(record, stats)
                except RecordError as e:
                    log.error("Failed to process LastPass item %s: %s", record.id, e)
                    stats.failed += 1
                self.progress.update(current, stats.total)
        return stats

    def process(self, record: VaultRecord, stats: ImportStats):
        if is_empty(record):
            log.debug("Skipping item %s: no name, url or username.", record.id)
            stats.skipped += 1
            return
        try:
            entry = to_entry(record)
        except UnusableIdentifierError as e:
            log.warning("%s", e)
            stats.skipped += 1
            return

        if entry.identifier in self.seen:
            log.warning("'%s' appears more than once in the export; the later item wins.",
                        entry.identifier)
        self.seen.add(entry.identifier)

        if self.config.verbose:
            log.info("Processing '%s'...", entry.identifier)

        stats.attachments += self.resolver.resolve(record, entry)

        if not needs_write(self.store, entry.identifier, entry.content, self.config.verbose):
            stats.unchanged += 1
            return

        if self.config.test_mode:
            log.info("[TEST MODE] Would import '%s' into password store.", entry.identifier)
            log.debug("[TEST MODE] Content for '%s':\n%s", entry.identifier, entry.content)
            stats.written += 1
            return

        try:
            self.store.write(entry.identifier, entry.content)
        except StoreWriteError as e:
            log.error("Failed to import '%s' into password store: %s", entry.identifier, e)
            stats.failed += 1
            return
        stats.written += 1


def run(config, store: SecretStore, lastpass, progress: ProgressReporter | None = None) -> ImportStats:
    """Export the vault and import it; every scoped resource is released on any exit path."""
    with ExitStack() as stack:
        scratch = Path(stack.enter_context(tempfile.TemporaryDirectory(prefix="passnap-")))
        stack.enter_context(ChangeTrackingGuard(store.store_dir))

        export_path = scratch / "export.csv"
        lastpass.export(export_path)

        importer = Importer(config, store, AttachmentResolver(lastpass, config.attachments),
                            progress or ProgressReporter())
        return importer.import_file(export_path)
