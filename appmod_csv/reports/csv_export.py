"""CSV serialization of projected incident rows.

Usage:
    count = export_csv(rows, "out.csv", excel=True)   # file, BOM-prefixed
    count = export_csv(rows, None)                    # stdout

Fields are quoted only when they contain a comma, a double quote, ``\\n`` or
``\\r``. Records end with a single ``\\n``.
"""

import io
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, TextIO

from appmod_csv.models import CsvRow

CSV_COLUMNS: tuple[str, ...] = (
    "Project",
    "RuleId",
    "RuleTitle",
    "IncidentId",
    "Location",
    "LocationKind",
    "Line",
    "Column",
    "Snippet",
    "Severity",
    "Effort",
    "Labels",
)

_SPECIAL_CHARS = frozenset(',"\n\r')
_RECORD_SEPARATOR = "\n"


class OutputWriteError(Exception):
    """Raised when the CSV output cannot be opened or written."""


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def escape_field(value: str) -> str:
    if not _SPECIAL_CHARS.intersection(value):
        return value
    return '"' + value.replace('"', '""') + '"'


def format_row(fields: Iterable[str]) -> str:
    return ",".join(escape_field(f) for f in fields)


def write_csv(rows: Iterable[CsvRow], stream: TextIO) -> int:
    """Write the header and every row to *stream*. Returns the row count."""
    stream.write(format_row(CSV_COLUMNS))
    stream.write(_RECORD_SEPARATOR)

    count = 0
    for row in rows:
        stream.write(format_row(row.fields()))
        stream.write(_RECORD_SEPARATOR)
        count += 1
    return count


# ---------------------------------------------------------------------------
# Output selection
# ---------------------------------------------------------------------------

def _encoding(excel: bool) -> str:
    # utf-8-sig emits EF BB BF before the first write
    return "utf-8-sig" if excel else "utf-8"


@contextmanager
def open_output(
    path: str | Path | None,
    excel: bool = False,
    stdout: BinaryIO | None = None,
) -> Iterator[TextIO]:
    """Yield a text stream for the CSV.

    With a *path* the file is created or truncated and closed on exit.
    Otherwise stdout's binary stream is wrapped and detached again on exit,
    leaving stdout itself open.
    """
    if path is not None:
        with open(path, "w", encoding=_encoding(excel), newline="") as f:
            yield f
        return

    binary = stdout if stdout is not None else sys.stdout.buffer
    wrapper = io.TextIOWrapper(binary, encoding=_encoding(excel), newline="")
    try:
        yield wrapper
    finally:
        wrapper.detach()


def export_csv(
    rows: Iterable[CsvRow],
    path: str | Path | None,
    excel: bool = False,
) -> int:
    """Write *rows* to *path* (or stdout) and return the number of rows.

    A partially written file is left in place when writing fails.

    Raises:
        OutputWriteError: the output could not be opened or written
    """
    try:
        with open_output(path, excel) as stream:
            return write_csv(rows, stream)
    except OSError as exc:
        raise OutputWriteError(f"Could not write output. {exc}") from exc
