"""
File parsing utilities for uploaded delimited-text files.

Provides:
- File format identification from content signatures
- Encoding and delimiter detection
- Streaming row reader with parse errors reported as SourceReadError
- Cell sanitizing and column-name derivation for staging tables
"""

import codecs
import csv
import logging
import re
from collections.abc import Iterator
from pathlib import Path

from .exceptions import SourceReadError

logger = logging.getLogger(__name__)

NON_BREAKING_SPACE = "\u00a0"

# Formats identify_format() can report; only FORMAT_CSV is loadable
FORMAT_CSV = "csv"
FORMAT_XLSX = "xlsx"
FORMAT_ODS = "ods"
FORMAT_XLS = "xls"
FORMAT_BINARY = "binary"

ZIP_SIGNATURE = b"PK\x03\x04"
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]
ALLOWED_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_SIZE = 64 * 1024
READ_CHUNK_SIZE = 64 * 1024

MAX_COLUMN_NAME_LENGTH = 64
_UNSAFE_COLUMN_CHARS = re.compile(r"[^A-Za-z0-9_]")


def identify_format(file_path: str | Path) -> str:
    """
    Identify the format of a file from its leading bytes.

    Spreadsheet containers are recognised by signature (zip for xlsx/ods,
    OLE for legacy xls); anything else containing NUL bytes outside a UTF-16
    byte-order mark is binary. Everything else is treated as delimited text.

    Args:
        file_path: Path to the file

    Returns:
        One of the FORMAT_* constants
    """
    path = Path(file_path)
    with open(path, "rb") as f:
        head = f.read(4096)

    if head.startswith(ZIP_SIGNATURE):
        return FORMAT_ODS if path.suffix.lower() == ".ods" else FORMAT_XLSX
    if head.startswith(OLE_SIGNATURE):
        return FORMAT_XLS
    if head.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return FORMAT_CSV
    if b"\x00" in head:
        return FORMAT_BINARY
    return FORMAT_CSV


def detect_encoding(file_path: str | Path) -> str:
    """
    Pick the first encoding that decodes the whole file.

    The file is decoded chunk by chunk so large uploads are never held in
    memory at once. latin-1 decodes any byte sequence, so it always matches
    last.

    Args:
        file_path: Path to the file

    Returns:
        Name of the encoding to open the file with
    """
    with open(file_path, "rb") as f:
        head = f.read(2)
    if head in (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE):
        return "utf-16"

    for encoding in ENCODINGS:
        decoder = codecs.getincrementaldecoder(encoding)()
        try:
            with open(file_path, "rb") as f:
                while chunk := f.read(READ_CHUNK_SIZE):
                    decoder.decode(chunk)
                decoder.decode(b"", final=True)
            return encoding
        except UnicodeDecodeError:
            logger.debug(f"{file_path} is not valid {encoding}")
            continue

    raise SourceReadError("Unable to decode file with supported encodings")


def detect_delimiter(sample: str) -> str:
    """
    Detect the field delimiter from a text sample.

    Falls back to a comma when the sample has a single column or is too
    irregular for the sniffer.
    """
    if not sample.strip():
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters=ALLOWED_DELIMITERS).delimiter
    except csv.Error:
        return ","


def read_rows(file_path: str | Path, file_name: str | None = None) -> Iterator[list[str]]:
    """
    Stream the non-empty records of a delimited-text file.

    The file stays open only while the generator is being consumed; closing
    the generator early (or an exception in the consumer) releases it.

    Args:
        file_path: Path to the file
        file_name: Name reported in errors (defaults to the path's basename)

    Yields:
        Each record as a list of raw cell strings

    Raises:
        SourceReadError: The file is missing, cannot be decoded or is malformed
    """
    path = Path(file_path)
    file_name = file_name or path.name

    try:
        encoding = detect_encoding(path)
        with open(path, encoding=encoding, newline="") as f:
            delimiter = detect_delimiter(f.read(SNIFF_SAMPLE_SIZE))
            f.seek(0)
            logger.debug(f"Reading {file_name} as {encoding}, delimiter {delimiter!r}")

            reader = csv.reader(f, delimiter=delimiter, strict=True)
            try:
                for record in reader:
                    # Blank lines come back as empty records
                    if record:
                        yield record
            except csv.Error as e:
                raise SourceReadError(f"line {reader.line_num}: {e}", file_name=file_name) from e
    except FileNotFoundError as e:
        raise SourceReadError(f"File not found: {file_name}", file_name=file_name) from e
    except SourceReadError as e:
        if e.file_name is None:
            e.file_name = file_name
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(str(e), file_name=file_name) from e


def trim_non_breaking_spaces(value: str) -> str:
    """Trim leading and trailing non-breaking spaces, as left by spreadsheet exports."""
    return value.strip(NON_BREAKING_SPACE)


def sanitize_row(row: list[str]) -> list[str]:
    """
    Sanitize every cell of a record before it is staged.

    Cells are trimmed of non-breaking spaces here; quoting for SQL happens
    through parameter binding when the row is inserted.
    """
    return [trim_non_breaking_spaces(cell) for cell in row]


def column_name_from_header(header: str) -> str:
    """
    Turn a header cell into a staging table column identifier.

    Characters outside [A-Za-z0-9_] become underscores and the result is cut
    to 64 characters. Duplicates and empty names are not fixed up.
    """
    return _UNSAFE_COLUMN_CHARS.sub("_", header)[:MAX_COLUMN_NAME_LENGTH]


def get_column_names_from_headers(headers: list[str]) -> list[str]:
    return [column_name_from_header(header) for header in headers]


def get_column_names_for_unnamed_columns(row: list[str]) -> list[str]:
    """Synthesize positional names (column_0, column_1, ...) for a header-less file."""
    return [f"column_{index}" for index in range(len(row))]
