class PassnapError(Exception):
    pass


# --- Fatal: abort the whole run ---

class FatalError(PassnapError):
    pass


class ConfigError(FatalError):
    pass


class MissingDependencyError(FatalError):
    pass


class VaultAuthError(FatalError):
    pass


class ExportError(FatalError):
    pass


class MalformedExportError(FatalError):
    """The export's field count is not a multiple of the record width."""


class TrackingError(FatalError):
    pass


# --- Per-record: logged, the loop moves on ---

class RecordError(PassnapError):
    pass


class UnusableIdentifierError(RecordError):
    pass


class AttachmentError(RecordError):
    pass


class StoreReadError(RecordError):
    pass


class StoreWriteError(RecordError):
    pass
