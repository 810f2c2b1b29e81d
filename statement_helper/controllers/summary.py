# statement_helper/controllers/summary.py
"""
Merge parsed statements and compute the dashboard aggregates.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from statement_helper.data_model import UNCATEGORIZED, ParsedStatement, Transaction

log = logging.getLogger(__name__)

WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
TOP_MERCHANT_COUNT = 10
MERCHANT_NAME_LENGTH = 30

_MERCHANT_PREFIX = re.compile(
    r"^(POS PURCHASE|DEBIT CARD PURCHASE|RECURRING DEBIT CARD|ACH WEB|ACH CREDIT)\s*",
    re.IGNORECASE,
)
_MASKED_CARD = re.compile(r"XXXXX\d+\s*")
_LONG_NUMBER = re.compile(r"\d{4,}")
_MULTI_SPACE = re.compile(r"\s{2,}")


@dataclass
class StatementSummary:
    total_income: Decimal = Decimal(0)
    total_expenses: Decimal = Decimal(0)
    net_change: Decimal = Decimal(0)
    start_balance: Decimal = Decimal(0)
    end_balance: Decimal = Decimal(0)
    transaction_count: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def period(self) -> str:
        if self.start_date is None or self.end_date is None:
            return ""
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"


@dataclass
class DailyAmount:
    date: date
    amount: Decimal


@dataclass
class MerchantTotal:
    name: str
    amount: Decimal
    count: int


@dataclass
class ProcessedData:
    transactions: List[Transaction] = field(default_factory=list)
    summary: StatementSummary = field(default_factory=StatementSummary)
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    daily_spending: List[DailyAmount] = field(default_factory=list)
    top_merchants: List[MerchantTotal] = field(default_factory=list)
    weekday_spending: Dict[str, Decimal] = field(default_factory=dict)

    def top_categories(self) -> List[str]:
        """Expense categories, biggest spend first."""
        return [c for c, _ in sorted(self.category_breakdown.items(), key=lambda kv: kv[1], reverse=True)]


def extract_merchant(description: str) -> str:
    """
    Best-effort merchant name from a bank description.

    Strips card-network prefixes, masked card numbers and long digit runs,
    then title-cases what is left.

    >>> extract_merchant("POS PURCHASE STARBUCKS STORE 123456")
    'Starbucks Store'
    """
    cleaned = _MERCHANT_PREFIX.sub("", description)
    cleaned = _MASKED_CARD.sub("", cleaned)
    cleaned = _LONG_NUMBER.sub("", cleaned)
    cleaned = _MULTI_SPACE.sub(" ", cleaned).strip()
    merchant = re.split(r"\s{2,}|\t", cleaned)[0] or cleaned
    titled = " ".join(w[:1].upper() + w[1:].lower() for w in merchant.split(" "))
    return titled[:MERCHANT_NAME_LENGTH]


def merge_transactions(statements: Sequence[ParsedStatement]) -> List[Transaction]:
    """All transactions of ``statements``, newest first; stable across files."""
    merged = [t for s in statements for t in s.transactions]
    return sorted(merged, key=lambda t: t.date, reverse=True)


def process_statements(
    statements: Sequence[ParsedStatement],
    transactions: Optional[Sequence[Transaction]] = None,
) -> ProcessedData:
    """
    Summarize one session's statements.

    ``transactions`` overrides the merged statement transactions (e.g. after
    categorization and rule application); balances always come from the
    statements themselves.
    """
    if transactions is None:
        all_txns = merge_transactions(statements)
    else:
        all_txns = sorted(transactions, key=lambda t: t.date, reverse=True)

    expenses = [t for t in all_txns if t.is_expense]
    total_income = sum((t.amount for t in all_txns if t.is_income), Decimal(0))
    total_expenses = sum((t.amount for t in expenses), Decimal(0))

    summary = StatementSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_change=total_income - total_expenses,
        start_balance=sum((s.start_balance for s in statements), Decimal(0)),
        end_balance=sum((s.end_balance for s in statements), Decimal(0)),
        transaction_count=len(all_txns),
        start_date=min((t.date for t in all_txns), default=None),
        end_date=max((t.date for t in all_txns), default=None),
    )

    category_breakdown: Dict[str, Decimal] = {}
    daily: Dict[date, Decimal] = {}
    merchants: Dict[str, MerchantTotal] = {}
    weekday_spending: Dict[str, Decimal] = {day: Decimal(0) for day in WEEKDAYS}
    for t in expenses:
        cat = t.category or UNCATEGORIZED
        category_breakdown[cat] = category_breakdown.get(cat, Decimal(0)) + t.amount
        daily[t.date] = daily.get(t.date, Decimal(0)) + t.amount

        name = extract_merchant(t.description)
        entry = merchants.setdefault(name, MerchantTotal(name, Decimal(0), 0))
        entry.amount += t.amount
        entry.count += 1

        # date.weekday() is Monday=0; the table starts on Sunday
        weekday_spending[WEEKDAYS[(t.date.weekday() + 1) % 7]] += t.amount

    top_merchants = sorted(merchants.values(), key=lambda m: m.amount, reverse=True)

    log.debug("Summarized %d transactions from %d statements", len(all_txns), len(statements))
    return ProcessedData(
        transactions=all_txns,
        summary=summary,
        category_breakdown=category_breakdown,
        daily_spending=[DailyAmount(d, daily[d]) for d in sorted(daily)],
        top_merchants=top_merchants[:TOP_MERCHANT_COUNT],
        weekday_spending=weekday_spending,
    )
