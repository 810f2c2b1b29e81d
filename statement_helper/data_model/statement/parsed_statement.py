# statement_helper/data_model/statement/parsed_statement.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from ..interfaces import StatementFormat
from .transaction import Transaction


@dataclass
class ParsedStatement:
    """
    Output of parsing one uploaded file.

    ``transactions`` are sorted newest first. ``start_balance`` is the balance
    before the oldest transaction (or the oldest row's balance for delimited
    files), ``end_balance`` the balance after the newest one.
    """

    transactions: List[Transaction] = field(default_factory=list)
    account: str = "Account"
    start_balance: Decimal = Decimal(0)
    end_balance: Decimal = Decimal(0)
    source: str = ""
    file_format: StatementFormat = StatementFormat.UNKNOWN

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass
class OfxStatement(ParsedStatement):
    """ParsedStatement plus the account metadata found in an OFX/QBO file."""

    bank_id: str = ""
    account_id: str = ""
    account_type: str = ""
    start_date: str = ""
    end_date: str = ""
    balance_as_of: str = ""
    warnings: List[str] = field(default_factory=list)

    def to_parsed_statement(self) -> ParsedStatement:
        return ParsedStatement(
            transactions=list(self.transactions),
            account=self.account,
            start_balance=self.start_balance,
            end_balance=self.end_balance,
            source=self.source,
            file_format=self.file_format,
        )
