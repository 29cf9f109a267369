"""
Core extraction logic lives here.

Responsibilities (v1):
- header -> column index resolution
- rep filtering + row validation
- close date normalization to YYYY-MM-DD
- billing cycle normalization to a closed set of tokens
- success / failure envelope
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence

from dateutil import parser as dparse

from .rules import (
    CLOSE_DATE_ALIASES,
    COLUMN_NAMES,
    CYCLE_MONTHLY,
    CYCLE_SIX_MONTH,
    CYCLE_TWO_YEAR,
    CYCLE_YEARLY,
    MONTH_NAMES,
    TARGET_REP,
)

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_YEAR_RE = re.compile(r"^\d{4}$")

# Two defaults that differ only in the year: a string parses unambiguously
# when both yield the same date.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 1, 1))


@dataclass(frozen=True)
class ColumnIndexMap:
    month: Optional[int] = None
    close_date: Optional[int] = None
    customer: Optional[int] = None
    rep: Optional[int] = None
    setup_fee: Optional[int] = None
    subscription: Optional[int] = None
    billing_cycle: Optional[int] = None


def _index_of(header: Sequence[Any], name: str) -> Optional[int]:
    # duplicate headers: first occurrence wins
    for i, cell in enumerate(header):
        if cell == name:
            return i
    return None


def resolve_columns(header: Sequence[Any]) -> ColumnIndexMap:
    """
    Map logical fields to column positions by exact, case-sensitive header text.

    The close date probes CLOSE_DATE_ALIASES in order and keeps the first hit.
    Columns that are not present resolve to None.
    """
    close_date = None
    for alias in CLOSE_DATE_ALIASES:
        close_date = _index_of(header, alias)
        if close_date is not None:
            break

    return ColumnIndexMap(
        close_date=close_date,
        **{field: _index_of(header, name) for field, name in COLUMN_NAMES.items()},
    )


def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _today() -> date:
    return datetime.now(timezone.utc).date()


def parse_amount(value: Any) -> float:
    """
    Parse a money cell. Numbers pass through; text keeps its leading decimal
    after dropping a currency sign and thousands separators. Anything else is 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
        return amount if math.isfinite(amount) else 0.0

    text = str(value).strip().replace(",", "").replace("$", "")
    match = _AMOUNT_RE.match(text)
    if match is None:
        return 0.0
    try:
        amount = float(match.group(0))
    except (ValueError, OverflowError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def format_date_to_iso(value: date) -> str:
    # calendar fields as-is, no timezone conversion
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _parse_calendar_text(text: str) -> Optional[date]:
    parsed = []
    for default in _PARSE_DEFAULTS:
        try:
            parsed.append(dparse.parse(text, default=default).date())
        except (ValueError, OverflowError):
            return None
    if parsed[0] != parsed[1]:
        # no year in the text
        return None
    return parsed[0]


def _parse_month_year(text: str) -> Optional[str]:
    parts = text.lower().split()
    if len(parts) != 2:
        return None
    month_name, year = parts
    month_num = MONTH_NAMES.get(month_name)
    if month_num is None or not _YEAR_RE.match(year):
        return None
    return f"{year}-{month_num}-01"


def parse_month_to_date(value: Any, today: Optional[date] = None) -> str:
    """
    Normalize a date-ish cell to YYYY-MM-DD.

    Handles date values, generic calendar text ("7/15/2025", "2025-07"),
    and "Month Year" labels ("July 2025", "Sept 2025"). Falls back to today.
    """
    if _is_empty(value):
        return format_date_to_iso(today or _today())

    if isinstance(value, (date, datetime)):
        return format_date_to_iso(value)

    text = str(value).strip()

    parsed = _parse_calendar_text(text)
    if parsed is not None:
        return format_date_to_iso(parsed)

    month_year = _parse_month_year(text)
    if month_year is not None:
        return month_year

    logger.debug("unparseable date %r, using today", text)
    return format_date_to_iso(today or _today())


def normalize_close_date(close_raw: Any, month: Any, today: Optional[date] = None) -> str:
    """Prefer the explicit close date cell; otherwise derive from the month label."""
    source = month if _is_empty(close_raw) else close_raw
    return parse_month_to_date(source, today=today)


def normalize_billing_cycle(value: Any) -> str:
    if _is_empty(value):
        return CYCLE_MONTHLY

    cycle = str(value).lower().strip()

    if "month" in cycle and "6" not in cycle:
        return CYCLE_MONTHLY
    elif "6" in cycle:
        return CYCLE_SIX_MONTH
    elif "year" in cycle and "2" not in cycle:
        return CYCLE_YEARLY
    elif "2" in cycle:
        return CYCLE_TWO_YEAR

    return CYCLE_MONTHLY


def _iter_deal_fields(
    rows: Sequence[Sequence[Any]], cols: ColumnIndexMap, today: Optional[date]
) -> Iterator[Dict[str, Any]]:
    for row_number, row in enumerate(rows, start=2):
        if _cell(row, cols.rep) != TARGET_REP:
            continue

        month = _cell(row, cols.month)
        close_raw = _cell(row, cols.close_date)
        customer = _cell(row, cols.customer)
        setup_fee = parse_amount(_cell(row, cols.setup_fee))
        subscription = parse_amount(_cell(row, cols.subscription))

        if _is_empty(customer) or (_is_empty(month) and _is_empty(close_raw)) or subscription <= 0:
            logger.debug("row %d skipped", row_number)
            continue

        yield {
            "name": str(customer).strip(),
            "close": normalize_close_date(close_raw, month, today=today),
            "subscription": subscription,
            "setup": setup_fee,
            "cycle": normalize_billing_cycle(_cell(row, cols.billing_cycle)),
            "churnDate": None,
        }


def extract_deals(grid: Sequence[Sequence[Any]], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Turn a raw cell grid (row 0 = header) into deal dicts for the target rep.

    Ids are the 1-based position in the output, so skipped rows never consume one.
    """
    if not grid:
        return []

    cols = resolve_columns(grid[0])
    return [
        {"id": i, **fields}
        for i, fields in enumerate(_iter_deal_fields(grid[1:], cols, today), start=1)
    ]


def _utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_success(deals: List[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "data": deals,
        "timestamp": _utc_timestamp(now),
    }


def build_failure(exc: BaseException) -> Dict[str, Any]:
    return {
        "success": False,
        "error": f"{type(exc).__name__}: {exc}",
    }
