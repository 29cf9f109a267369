"""
Source table access.

Returns the first sheet of a spreadsheet as a plain cell grid (row 0 = header).
The source is always passed in explicitly.

- .xlsx / .xlsm: openpyxl, typed cell values (dates come back as datetime)
- .csv / .tsv / .txt: encoding detection + delimiter sniffing, text cells
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from charset_normalizer import from_bytes
from openpyxl import load_workbook

from .rules import SNIFF_DELIMITERS, SOURCE_ENCODING_FALLBACK

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}

Grid = List[List[Any]]


class DealFeedError(Exception):
    """Base error for request-level faults."""


class TableReadError(DealFeedError):
    """Raised when the source table cannot be read."""


def decode_text(raw: bytes) -> Tuple[str, str]:
    """
    Decode source bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - UTF-8 input with a BOM is decoded with utf-8-sig so the BOM never reaches the header.
    - If decode fails, try UTF-8, then UTF-8 with replacement characters.
    - Newlines are normalized to LF.
    """
    match = from_bytes(raw).best()
    decode_used = match.encoding if match is not None else SOURCE_ENCODING_FALLBACK

    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            text = raw.decode("utf-8-sig", errors="replace")
            decode_used = "utf-8-sig"
            logger.warning("source is not valid UTF-8, undecodable bytes replaced")

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text, decode_used


def sniff_delimiter(text: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=SNIFF_DELIMITERS)
    except csv.Error:
        return ","
    return dialect.delimiter


def _text_cell(value: str) -> Optional[str]:
    return value if value != "" else None


def read_text_table(raw: bytes) -> Grid:
    text, encoding = decode_text(raw)
    delimiter = sniff_delimiter(text)
    logger.debug("text source decoded as %s, delimiter %r", encoding, delimiter)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    return [[_text_cell(cell) for cell in row] for row in reader]


def read_workbook_table(raw: bytes) -> Grid:
    wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def read_table(path: Path | str) -> Grid:
    """Read the first sheet of the source at `path` as a cell grid."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in EXCEL_SUFFIXES | TEXT_SUFFIXES:
        raise TableReadError(f"unsupported source type '{suffix or path.name}'")

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise TableReadError(f"cannot read source '{path}': {exc.strerror or exc}") from exc

    if suffix in TEXT_SUFFIXES:
        return read_text_table(raw)

    try:
        return read_workbook_table(raw)
    except Exception as exc:
        raise TableReadError(f"cannot open workbook '{path}': {exc}") from exc
