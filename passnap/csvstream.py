"""
Streaming reader for `lpass export` output.

The export is CSV-like: fields may be wrapped in double quotes, `""` inside a
quoted field is a literal quote, and quoted fields may span several physical
lines. Physical lines are accumulated until the buffer holds an even number of
quote characters, then the buffer is scanned by a small state machine.
"""

from typing import Iterable, Iterator

from .errors import MalformedExportError
from .models import RECORD_WIDTH, VaultRecord

UNQUOTED = "unquoted"
QUOTED = "quoted"
QUOTED_SEEN_QUOTE = "quoted-seen-quote"

QUOTE = "quote"
COMMA = "comma"
OTHER = "other"

APPEND = "append"
APPEND_QUOTE = "append-quote"
EMIT = "emit"
NOOP = "noop"

# (state, char class) -> (next state, action)
TRANSITIONS = {
    (UNQUOTED, QUOTE): (QUOTED, NOOP),
    (UNQUOTED, COMMA): (UNQUOTED, EMIT),
    (UNQUOTED, OTHER): (UNQUOTED, APPEND),
    (QUOTED, QUOTE): (QUOTED_SEEN_QUOTE, NOOP),
    (QUOTED, COMMA): (QUOTED, APPEND),
    (QUOTED, OTHER): (QUOTED, APPEND),
    (QUOTED_SEEN_QUOTE, QUOTE): (QUOTED, APPEND_QUOTE),
    (QUOTED_SEEN_QUOTE, COMMA): (UNQUOTED, EMIT),
    (QUOTED_SEEN_QUOTE, OTHER): (UNQUOTED, APPEND),
}


def _char_class(c: str) -> str:
    if c == '"':
        return QUOTE
    if c == ",":
        return COMMA
    return OTHER


def split_record(record: str) -> list[str]:
    """Split one complete logical record (ending in its newline) into fields."""
    body = record[:-1] if record.endswith("\n") else record
    fields = []
    field = []
    state = UNQUOTED
    for c in body:
        state, action = TRANSITIONS[(state, _char_class(c))]
        if action == APPEND:
            field.append(c)
        elif action == APPEND_QUOTE:
            field.append('"')
        elif action == EMIT:
            fields.append("".join(field))
            field = []
    # the record's own newline always closes the last field
    fields.append("".join(field))
    return fields


def physical_lines(chunks: Iterable[str]) -> Iterator[str]:
    """Rejoin chunks so that only `\\n` ends a line; a lone `\\r` is field content."""
    pending = ""
    for chunk in chunks:
        pending += chunk
        if pending.endswith("\n"):
            yield pending
            pending = ""
    if pending:
        yield pending


def logical_records(lines: Iterable[str]) -> Iterator[str]:
    """Join physical lines into logical records by quote parity."""
    buf = []
    quotes = 0
    for line in physical_lines(lines):
        line = line[:-1] if line.endswith("\n") else line
        buf.append(line + "\n")
        quotes += line.count('"')
        if quotes % 2 == 0:
            yield "".join(buf)
            buf = []
            quotes = 0
    if buf:
        raise MalformedExportError("Export ends inside an unterminated quoted field.")


def count_records(lines: Iterable[str]) -> int:
    return sum(1 for _ in logical_records(lines))


def tokenize(lines: Iterable[str]) -> Iterator[str]:
    """Flat, lazy sequence of field values across all records."""
    for record in logical_records(lines):
        yield from split_record(record)


def assemble(fields: Iterable[str]) -> Iterator[VaultRecord]:
    group = []
    for value in fields:
        group.append(value)
        if len(group) == RECORD_WIDTH:
            yield VaultRecord(*group)
            group = []
    if group:
        raise MalformedExportError(
            f"Export ended with {len(group)} dangling field(s); "
            f"expected a multiple of {RECORD_WIDTH}.")


def read_records(lines: Iterable[str]) -> Iterator[VaultRecord]:
    return assemble(tokenize(lines))
