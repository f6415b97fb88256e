# backend/parkmap/services/contract/term.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

# PostgreSQL daterange のテキスト表現: "[2024-01-01,2025-01-01)" / "(,2025-01-01]" / "empty"
_RANGE_RE = re.compile(
    r"^\s*(?P<lo>[\[(])\s*(?P<start>[^,\s]*)\s*,\s*(?P<end>[^,\s\])]*)\s*(?P<hi>[\])])\s*$"
)

EMPTY = "empty"
DISPLAY_FORMAT = "%d.%m.%Y"


class ContractTermError(ValueError):
    pass


@dataclass(frozen=True)
class DateRange:
    """Half-open date interval ``[start, end)``; ``None`` bounds are unbounded."""

    start: Optional[date]
    end: Optional[date]
    empty: bool = False

    def __str__(self) -> str:
        if self.empty:
            return EMPTY
        lo = self.start.isoformat() if self.start else ""
        hi = self.end.isoformat() if self.end else ""
        lo_br = "[" if self.start else "("
        return f"{lo_br}{lo},{hi})"

    def contains(self, day: date) -> bool:
        if self.empty:
            return False
        if self.start and day < self.start:
            return False
        if self.end and day >= self.end:
            return False
        return True

    @property
    def last_day(self) -> Optional[date]:
        # 半開区間なので表示上の終了日は end の前日
        return self.end - timedelta(days=1) if self.end else None


def _parse_date(s: str) -> Optional[date]:
    s = s.strip().strip('"')
    if not s or s.lower() in ("infinity", "-infinity"):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise ContractTermError(f"invalid date in contract term: {s!r}") from e


def parse_date_range(text: str) -> DateRange:
    """Parse a daterange literal and canonicalize it to ``[start,end)``.

    Inclusive upper bounds and exclusive lower bounds are shifted by one day,
    the same way PostgreSQL canonicalizes discrete ranges.
    """
    if text is None:
        raise ContractTermError("contract term is required")
    if text.strip().lower() == EMPTY:
        return DateRange(None, None, empty=True)
    m = _RANGE_RE.match(text)
    if not m:
        raise ContractTermError(f"contract term must look like [YYYY-MM-DD,YYYY-MM-DD): {text!r}")

    start = _parse_date(m.group("start"))
    end = _parse_date(m.group("end"))
    if start and m.group("lo") == "(":
        start += timedelta(days=1)
    if end and m.group("hi") == "]":
        end += timedelta(days=1)

    if start and end and end <= start:
        return DateRange(None, None, empty=True)
    return DateRange(start, end)


def normalize_contract_term(text: Optional[str]) -> Optional[str]:
    if text is None or not text.strip():
        return None
    return str(parse_date_range(text))


def format_contract_term(text: Optional[str]) -> Optional[tuple[str, str]]:
    """Localized ``(start, last day)`` strings, or ``None`` without a contract window."""
    if not text:
        return None
    try:
        term = parse_date_range(text)
    except ContractTermError:
        return None
    if term.empty:
        return None
    start = term.start.strftime(DISPLAY_FORMAT) if term.start else "…"
    last = term.last_day.strftime(DISPLAY_FORMAT) if term.last_day else "…"
    return start, last
