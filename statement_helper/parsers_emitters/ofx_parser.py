# statement_helper/parsers_emitters/ofx_parser.py
"""
OFX / QBO / QFX statement parser.

These files are SGML-ish: aggregate elements are closed (``</STMTTRN>``) but
leaf elements frequently are not (``<TRNAMT>-20.00`` followed by a newline
or the next tag). Tag lookup therefore tries the closing-tag form first and
falls back to the open-ended form.

OFX does not carry a running balance per transaction, so balances are
rebuilt by walking backwards in time from the statement's ledger balance.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, NamedTuple, Set

from statement_helper.data_model import (
    UNCATEGORIZED,
    IStatementParser,
    OfxStatement,
    StatementFormat,
    Transaction,
    TransactionType,
)
from statement_helper.utilities import (
    infer_account_from_filename,
    parse_numeric,
    parse_ofx_date,
)
from statement_helper.utilities.converters_scalar import (
    is_default_date,
    ofx_date_to_date,
)

log = logging.getLogger(__name__)

MAX_TRANSACTIONS = 100_000

_ACCOUNT_TYPES = {
    "CHECKING": "Checking",
    "SAVINGS": "Savings",
    "CREDITCARD": "Credit Card",
}


# region Tag helpers


def extract_tag(content: str, tag: str) -> str:
    """
    Return the trimmed value of the first ``tag`` in ``content`` ("" if absent).

    Handles both ``<TAG>value</TAG>`` and ``<TAG>value`` (value ends at the next
    tag or line break). Tag names are case-insensitive.
    """
    t = re.escape(tag)
    m = re.search(rf"<{t}>([^<]*)</{t}>", content, flags=re.IGNORECASE)
    if m:
        return m.group(1).strip()
    m = re.search(rf"<{t}>([^<\r\n]+)", content, flags=re.IGNORECASE)
    return m.group(1).strip() if m else ""


def extract_blocks(content: str, tag: str) -> List[str]:
    """Return the inner text of every ``<tag>...</tag>`` aggregate, in order."""
    lower = content.lower()
    open_tag = f"<{tag.lower()}>"
    close_tag = f"</{tag.lower()}>"
    blocks: List[str] = []
    pos = 0
    while True:
        i = lower.find(open_tag, pos)
        if i == -1:
            break
        j = lower.find(close_tag, i)
        if j == -1:
            break
        blocks.append(content[i + len(open_tag) : j])
        pos = j + len(close_tag)
    return blocks


# endregion Tag helpers


class _OfxEntry(NamedTuple):
    txn: Transaction
    signed_amount: Decimal
    fit_id: str


def compose_description(name: str, memo: str, check_num: str) -> str:
    if memo:
        return f"{name} - {memo}"
    if check_num:
        return f"{name} #{check_num}"
    return name


def infer_account_type(filename: str, content: str) -> str:
    label = infer_account_from_filename(filename)
    if label != "Account":
        return label
    acct_type = extract_tag(content, "ACCTTYPE").upper()
    if acct_type in _ACCOUNT_TYPES:
        return _ACCOUNT_TYPES[acct_type]
    if "<CREDITCARDMSGSRSV1>" in content.upper():
        return "Credit Card"
    return "Account"


def mask_account_id(account_id: str) -> str:
    return f"****{account_id[-4:]}" if account_id else ""


class OfxStatementParser:
    """Parse OFX/QBO/QFX text into an :class:`OfxStatement`."""

    file_format: StatementFormat = StatementFormat.OFX

    def __init__(self, max_transactions: int = MAX_TRANSACTIONS):
        self.max_transactions = max_transactions

    def parse(self, content: str, filename: str = "upload.qbo") -> OfxStatement:
        account = infer_account_type(filename, content)

        ledger_blocks = extract_blocks(content, "LEDGERBAL")
        ledger_scope = ledger_blocks[0] if ledger_blocks else content
        end_balance = parse_numeric(extract_tag(ledger_scope, "BALAMT"))
        balance_as_of = parse_ofx_date(extract_tag(ledger_scope, "DTASOF"))

        blocks = extract_blocks(content, "STMTTRN")
        if len(blocks) > self.max_transactions:
            log.warning(
                "%s: %d transaction blocks, only the first %d are read",
                filename,
                len(blocks),
                self.max_transactions,
            )
            blocks = blocks[: self.max_transactions]

        warnings: List[str] = []
        entries: List[_OfxEntry] = []
        seen_fit_ids: Set[str] = set()
        for block in blocks:
            entry = self._parse_block(block, account)
            if entry is None:
                warnings.append(
                    f"Skipped transaction with invalid posted date "
                    f"({extract_tag(block, 'DTPOSTED')!r})"
                )
                continue
            if entry.fit_id and entry.fit_id in seen_fit_ids:
                warnings.append(f"Duplicate transaction id (FITID {entry.fit_id!r})")
            seen_fit_ids.add(entry.fit_id)
            entries.append(entry)

        # Newest first, matching the delimited parser; stable for same-day entries
        entries.sort(key=lambda e: e.txn.date, reverse=True)

        transactions: List[Transaction] = []
        balance = end_balance
        for entry in entries:
            transactions.append(entry.txn.with_changes(balance=balance))
            balance -= entry.signed_amount  # step backwards in time

        if balance_as_of and transactions:
            as_of = ofx_date_to_date(balance_as_of)
            latest = transactions[0].date
            if not is_default_date(as_of) and as_of < latest:
                msg = (
                    f"Ledger balance is dated {as_of.isoformat()} but the latest "
                    f"transaction is {latest.isoformat()}; reconstructed balances "
                    "may be wrong"
                )
                log.warning("%s: %s", filename, msg)
                warnings.append(msg)

        account_id = extract_tag(content, "ACCTID")
        log.info("Parsed %d OFX transactions from %s", len(transactions), filename)
        return OfxStatement(
            transactions=transactions,
            account=account,
            start_balance=balance,
            end_balance=end_balance,
            source=filename,
            file_format=self.file_format,
            bank_id=extract_tag(content, "BANKID"),
            account_id=mask_account_id(account_id),
            account_type=account,
            start_date=parse_ofx_date(extract_tag(content, "DTSTART")),
            end_date=parse_ofx_date(extract_tag(content, "DTEND")),
            balance_as_of=balance_as_of,
            warnings=warnings,
        )

    @staticmethod
    def _parse_block(block: str, account: str) -> _OfxEntry | None:
        posted: date = ofx_date_to_date(extract_tag(block, "DTPOSTED"))
        if is_default_date(posted):
            return None

        amount = parse_numeric(extract_tag(block, "TRNAMT"))
        name = extract_tag(block, "NAME") or extract_tag(block, "PAYEE")
        txn = Transaction(
            date=posted,
            description=compose_description(
                name, extract_tag(block, "MEMO"), extract_tag(block, "CHECKNUM")
            ),
            amount=abs(amount),
            type=TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE,
            category=UNCATEGORIZED,
            account=account,
        )
        return _OfxEntry(
            txn=txn,
            signed_amount=amount,
            fit_id=extract_tag(block, "FITID"),
        )


def parse_ofx(content: str, filename: str = "upload.qbo") -> OfxStatement:
    return OfxStatementParser().parse(content, filename)


if TYPE_CHECKING:
    _is_parser: type[IStatementParser[OfxStatement]] = OfxStatementParser
