# statement_helper/utilities/converters_scalar.py
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Final, Optional, overload

CENT: Final[Decimal] = Decimal("0.01")
ZERO: Final[Decimal] = Decimal(0)


# region Numeric


def try_parse_numeric(raw: Any) -> Optional[Decimal]:
    """
    Parse a bank-export numeric cell into a Decimal.

    Currency symbols, thousands separators and parenthesis characters are
    stripped before parsing. Parentheses are *not* interpreted as a negative
    sign here; callers that care about that notation inspect the raw string.

    Like a lenient float parser, the longest leading numeric prefix is used,
    so ``"12.50 USD"`` parses as ``12.50``.

    Returns:
        ``Decimal(0)`` for ``None`` and empty input, the parsed value when a
        numeric prefix exists, and ``None`` when the text is not numeric.
    """
    if raw is None:
        return ZERO
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        # Avoid binary float artifacts
        return Decimal(str(raw))

    txt = str(raw)
    if txt == "":
        return ZERO

    cleaned = _CURRENCY_MARKUP.sub("", txt).replace(_UNICODE_MINUS, "-").lstrip()
    m = _NUMERIC_PREFIX.match(cleaned)
    if not m:
        return None
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return None


def parse_numeric(raw: Any, default: Decimal = ZERO) -> Decimal:
    """
    Lenient numeric parse: anything :func:`try_parse_numeric` cannot read
    becomes ``default`` (zero unless told otherwise). Never raises.
    """
    value = try_parse_numeric(raw)
    return default if value is None else value


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Render a money amount with exactly two decimals, e.g. ``-42.50``."""
    return f"{round_cents(value):.2f}"


# endregion Numeric

# region Dates

_DEFAULT_DATE = date(1900, 1, 1)


def default_date() -> date:
    return _DEFAULT_DATE


def is_default_date(d: date) -> bool:
    return d == _DEFAULT_DATE


@overload
def to_date(s: datetime, should_raise: bool = True, /) -> date: ...
@overload
def to_date(s: date, should_raise: bool = True, /) -> date: ...
@overload
def to_date(s: str, should_raise: bool = True, /) -> date: ...


def to_date(s: object, should_raise: bool = True, /) -> date:
    """
    Parse the date encodings banks put in statement exports.

    Supported examples:
      - 12/31/2024, 12/31/24  (US)
      - 12-31-2024, 12.31.2024
      - 2024-12-31            (ISO)
      - 2024/12/31, 2024.12.31
      - 20241231              (ISO compact / OFX)
      - 31/12/2024            (D/M/Y when unambiguous: first token > 12)
      - 2024-12-31T23:59:59Z  (ISO datetime; time/offset ignored)
      - Dec 31, 2024 / 31 Dec 2024

    Returns:
        The parsed date. Blank input returns the default sentinel date.
        Unrecognized input raises ``ValueError`` unless ``should_raise`` is
        False, in which case the default sentinel date is returned.
    """
    if s is None:
        return _DEFAULT_DATE

    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s

    txt = str(s).strip()
    if not txt:
        return _DEFAULT_DATE

    if "T" in txt:
        iso_dt_clean = re.sub(r"Z$", "", txt)
        try:
            return datetime.fromisoformat(iso_dt_clean).date()
        except ValueError:
            pass  # fall through

    for fmt in _DATE_PATTERNS:
        try:
            return datetime.strptime(txt, fmt).date()
        except ValueError:
            continue

    # Heuristic for D/M/Y vs M/D/Y ambiguity
    m = _DATE_RE_01.match(txt)
    if m:
        a, b, c = m.groups()
        sep = _DATE_RE_02.search(txt).group(0)  # type: ignore[union-attr]
        first = int(a)
        second = int(b)
        year_fmt = "%Y" if len(c) == 4 else "%y"
        is_dmy = first > 12 and second <= 12
        fmt = ("%d{sep}%m{sep}" + year_fmt) if is_dmy else ("%m{sep}%d{sep}" + year_fmt)
        try:
            return datetime.strptime(txt, fmt.format(sep=sep)).date()
        except ValueError:
            pass

    if should_raise:
        raise ValueError(f"Unrecognized date format: {s!r}")
    return _DEFAULT_DATE


def parse_ofx_date(raw: str) -> str:
    """
    Convert an OFX ``YYYYMMDD[HHMMSS[.XXX]][TZ]`` stamp to ``YYYY-MM-DD``.

    A bracketed timezone suffix such as ``[-5:EST]`` is discarded. Returns ``""``
    for blank input.

    >>> parse_ofx_date("20240315120000[-5:EST]")
    '2024-03-15'
    """
    if not raw:
        return ""
    clean = raw.split("[", 1)[0].strip()
    return f"{clean[0:4]}-{clean[4:6]}-{clean[6:8]}"


def ofx_date_to_date(raw: str) -> date:
    """Like :func:`parse_ofx_date` but returns a ``date`` (sentinel when invalid)."""
    iso = parse_ofx_date(raw)
    if not iso:
        return _DEFAULT_DATE
    try:
        return date.fromisoformat(iso)
    except ValueError:
        return _DEFAULT_DATE


def week_start(d: date) -> date:
    """Return the Sunday that starts the calendar week containing ``d``."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


# endregion Dates

_DATE_PATTERNS: Final[tuple[str, ...]] = (
    "%m/%d/%Y",  # 01/02/2025
    "%Y-%m-%d",  # 2025-01-02
    "%Y/%m/%d",  # 2025/01/02
    "%Y.%m.%d",  # 2025.01.02
    "%m-%d-%Y",  # 01-02-2025
    "%m.%d.%Y",  # 01.02.2025
    "%Y%m%d",  # 20250102
    "%m/%d/%y",  # 01/02/25
    "%b %d, %Y",  # Jan 02, 2025
    "%d %b %Y",  # 02 Jan 2025
)
_DATE_RE_01: Final[re.Pattern[str]] = re.compile(
    r"^\s*(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})\s*$"
)
_DATE_RE_02: Final[re.Pattern[str]] = re.compile(r"[/\-.]")
_CURRENCY_MARKUP: Final[re.Pattern[str]] = re.compile(r"[$,()£€¥]")
_NUMERIC_PREFIX: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
)
_UNICODE_MINUS = "−"  # '−'
