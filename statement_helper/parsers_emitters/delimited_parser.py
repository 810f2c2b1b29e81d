# statement_helper/parsers_emitters/delimited_parser.py
"""
Delimited-text (CSV) bank statement parser.

Columns are located through the shared synonym table, so the same parser
handles exports that carry a single signed ``Amount`` column as well as
exports with separate withdrawal/deposit columns.
"""

from __future__ import annotations

import io
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from statement_helper.data_model import (
    UNCATEGORIZED,
    IStatementParser,
    ParsedStatement,
    StatementFormat,
    Transaction,
    TransactionType,
)
from statement_helper.utilities import (
    ZERO,
    infer_account_from_filename,
    is_null_or_whitespace,
    parse_numeric,
    resolve_columns,
    to_date,
)
from statement_helper.utilities.converters_scalar import is_default_date

log = logging.getLogger(__name__)

MAX_ROWS = 100_000

Row = Dict[str, str]


def read_delimited_rows(
    content: str, max_rows: int = MAX_ROWS
) -> Tuple[List[str], List[Row]]:
    """
    Split raw delimited text into ``(headers, rows)``.

    Headers are trimmed; every cell is kept as text (no NaN coercion). Blank
    lines are skipped and malformed lines are dropped. At most ``max_rows``
    data rows are returned.

    Returns ``([], [])`` for empty or unreadable input rather than raising.
    """
    if is_null_or_whitespace(content):
        return [], []
    try:
        df = pd.read_csv(
            io.StringIO(content),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
            nrows=max_rows + 1,
        )
    except pd.errors.EmptyDataError:
        return [], []
    except pd.errors.ParserError as e:
        log.warning("Could not tokenize delimited text: %s", e)
        return [], []

    headers = [str(c).strip() for c in df.columns]
    df.columns = headers
    if len(df) > max_rows:
        log.warning("Delimited input truncated to %d rows", max_rows)
        df = df.iloc[:max_rows]
    rows: List[Row] = [
        {k: ("" if v is None else str(v)) for k, v in rec.items()}
        for rec in df.to_dict(orient="records")
    ]
    return headers, rows


def _row_amount(
    row: Mapping[str, str],
    amount_col: Optional[str],
    withdrawal_col: Optional[str],
    deposit_col: Optional[str],
) -> Tuple[Decimal, TransactionType]:
    """Work out the magnitude and direction of one row."""
    if amount_col:
        raw = str(row.get(amount_col) or "")
        amount = abs(parse_numeric(raw))
        # Negative sign or accounting parentheses mark money going out
        if "-" in raw or "(" in raw:
            return amount, TransactionType.EXPENSE
        return amount, TransactionType.INCOME

    withdrawal = abs(parse_numeric(row.get(withdrawal_col))) if withdrawal_col else ZERO
    deposit = abs(parse_numeric(row.get(deposit_col))) if deposit_col else ZERO
    if withdrawal > 0:
        return withdrawal, TransactionType.EXPENSE
    if deposit > 0:
        return deposit, TransactionType.INCOME
    return ZERO, TransactionType.EXPENSE


class DelimitedStatementParser:
    """Parse bank CSV exports into a :class:`ParsedStatement`."""

    file_format: StatementFormat = StatementFormat.DELIMITED

    def __init__(self, max_rows: int = MAX_ROWS):
        self.max_rows = max_rows

    def parse(self, content: str, filename: str = "upload.csv") -> ParsedStatement:
        headers, rows = read_delimited_rows(content, self.max_rows)
        return self.parse_rows(headers, rows, filename)

    def parse_rows(
        self, headers: List[str], rows: List[Row], filename: str = "upload.csv"
    ) -> ParsedStatement:
        """Convert already-split rows; useful when the caller also validates them."""
        cols = resolve_columns(headers)
        date_col = cols["date"]
        desc_col = cols["description"]
        balance_col = cols["balance"]
        category_col = cols["category"]

        account = infer_account_from_filename(filename)
        transactions: List[Transaction] = []
        dropped = 0

        for row in rows:
            date_str = (row.get(date_col) or "").strip() if date_col else ""
            if not date_str:
                dropped += 1
                continue
            posted = to_date(date_str, False)
            if is_default_date(posted):
                log.debug("%s: unparseable date %r, row dropped", filename, date_str)
                dropped += 1
                continue

            amount, txn_type = _row_amount(
                row, cols["amount"], cols["withdrawal"], cols["deposit"]
            )
            if amount == 0:
                dropped += 1
                continue

            description = (row.get(desc_col) or "").strip() if desc_col else ""
            category = (row.get(category_col) or "").strip() if category_col else ""
            transactions.append(
                Transaction(
                    date=posted,
                    description=description or "Unknown",
                    amount=amount,
                    type=txn_type,
                    category=category or UNCATEGORIZED,
                    balance=parse_numeric(row.get(balance_col)) if balance_col else ZERO,
                    account=account,
                )
            )

        # Most recent first; sorted() is stable so same-day rows keep file order
        transactions = sorted(transactions, key=lambda t: t.date, reverse=True)

        log.info(
            "Parsed %d transactions from %s (%d rows dropped)",
            len(transactions),
            filename,
            dropped,
        )
        return ParsedStatement(
            transactions=transactions,
            account=account,
            start_balance=transactions[-1].balance if transactions else ZERO,
            end_balance=transactions[0].balance if transactions else ZERO,
            source=filename,
            file_format=self.file_format,
        )


def parse_delimited(content: str, filename: str = "upload.csv") -> ParsedStatement:
    return DelimitedStatementParser().parse(content, filename)


if TYPE_CHECKING:
    _is_parser: type[IStatementParser[ParsedStatement]] = DelimitedStatementParser
