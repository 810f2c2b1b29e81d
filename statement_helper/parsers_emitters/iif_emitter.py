# statement_helper/parsers_emitters/iif_emitter.py
"""
IIF (Intuit Interchange Format) emitter.

IIF is tab-delimited with CRLF line endings. Every transaction block is one
``TRNS`` row against the bank account, one or more ``SPL`` offset rows, and
a closing ``ENDTRNS``. The ``SPL`` amounts of a block always sum to the
negation of its ``TRNS`` amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, Final, Iterable, List, Mapping, Optional, Sequence, Union

from statement_helper.data_model import SplitTransaction, Transaction, TransactionType
from statement_helper.utilities import format_amount, open_for_write

log = logging.getLogger(__name__)

IIF_NEWLINE: Final[str] = "\r\n"
MAX_FIELD_LENGTH: Final[int] = 100
MAX_NAME_LENGTH: Final[int] = 50

IIF_HEADER: Final[tuple[str, ...]] = (
    "!TRNS\tTRNSID\tTRNSTYPE\tDATE\tACCNT\tNAME\tAMOUNT\tDOCNUM\tMEMO\tCLEAR\tTOPRINT",
    "!SPL\tSPLID\tTRNSTYPE\tDATE\tACCNT\tNAME\tAMOUNT\tDOCNUM\tMEMO\tCLEAR\tQNTY\tREIMBEXP",
    "!ENDTRNS",
)

DEFAULT_CATEGORY_MAPPING: Final[Mapping[str, str]] = {
    # Expenses
    "Groceries": "Groceries",
    "Restaurants & Dining": "Meals & Entertainment",
    "Restaurants and Dining": "Meals & Entertainment",
    "Entertainment": "Entertainment",
    "Gas": "Auto:Fuel",
    "Transportation": "Auto:Transportation",
    "Travel": "Travel",
    "Utilities": "Utilities",
    "Internet & Cable": "Utilities:Cable",
    "Cable": "Utilities:Cable",
    "Phone": "Utilities:Telephone",
    "Insurance": "Insurance",
    "Health & Medical": "Medical",
    "Healthcare": "Medical",
    "Fitness": "Health & Fitness",
    "Subscriptions": "Subscriptions",
    "Subscriptions and Renewals": "Subscriptions",
    "Services and Supplies": "Office Supplies",
    "Software & Services": "Computer & Internet",
    "Shopping": "Supplies",
    "General Merchandise": "Supplies",
    "Clothing": "Clothing",
    "Personal Care": "Personal Care",
    "Home Improvement": "Repairs & Maintenance",
    "Rent": "Rent",
    "Loans": "Loan Interest",
    "Transfers": "Transfer",
    "ATM/Cash": "Cash",
    "ATM": "Cash",
    "Fees": "Bank Service Charges",
    # Income
    "Salary": "Payroll Income",
    "Bonus": "Payroll Income",
    "Other Income": "Other Income",
    "Interest": "Interest Income",
    "Dividends": "Dividend Income",
    "Refunds": "Other Income",
    "Refund": "Other Income",
    # Default
    "Uncategorized": "Uncategorized Expense",
}


@dataclass
class IifExportOptions:
    bank_account_name: str = "Checking"
    default_expense_account: str = "Uncategorized Expense"
    default_income_account: str = "Other Income"
    include_memo: bool = True
    category_mapping: Dict[str, str] = field(default_factory=dict)


def escape_iif(text: str) -> str:
    """Replace tabs and line breaks with spaces and cap the length."""
    clean = text.replace("\t", " ").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return clean[:MAX_FIELD_LENGTH]


def format_iif_date(txn: Transaction) -> str:
    return txn.date.strftime("%m/%d/%Y")


def get_account_for_category(
    category: str, txn_type: TransactionType, options: IifExportOptions
) -> str:
    """Custom mapping, then the built-in table, then the per-type default."""
    if options.category_mapping.get(category):
        return options.category_mapping[category]
    if category in DEFAULT_CATEGORY_MAPPING:
        return DEFAULT_CATEGORY_MAPPING[category]
    if txn_type is TransactionType.INCOME:
        return options.default_income_account or "Other Income"
    return options.default_expense_account or "Uncategorized Expense"


def _trns_type(txn: Transaction) -> str:
    return "DEPOSIT" if txn.is_income else "CHECK"


def _trns_row(trns_id: int, txn: Transaction, amount: Decimal, memo: str, bank: str) -> str:
    return "\t".join(
        [
            "TRNS",
            str(trns_id),
            _trns_type(txn),
            format_iif_date(txn),
            escape_iif(bank),
            escape_iif(txn.description[:MAX_NAME_LENGTH]),
            format_amount(amount),
            "",  # DOCNUM
            memo,
            "N",  # CLEAR
            "N",  # TOPRINT
        ]
    )


def _spl_row(trns_id: int, txn: Transaction, account: str, amount: Decimal, memo: str) -> str:
    return "\t".join(
        [
            "SPL",
            str(trns_id),
            _trns_type(txn),
            format_iif_date(txn),
            escape_iif(account),
            escape_iif(txn.description[:MAX_NAME_LENGTH]),
            format_amount(amount),
            "",  # DOCNUM
            memo,
            "N",  # CLEAR
            "",  # QNTY
            "",  # REIMBEXP
        ]
    )


Block = Union[Transaction, List[SplitTransaction]]


def group_blocks(transactions: Iterable[Transaction]) -> List[Block]:
    """
    Collapse split fragments sharing a ``split_parent_id`` into one block.

    Blocks keep the order in which each transaction (or the first fragment of
    a group) appears in ``transactions``. Fragments within a group are ordered
    by ``split_index``.
    """
    blocks: List[Block] = []
    groups: Dict[str, List[SplitTransaction]] = {}
    for txn in transactions:
        if isinstance(txn, SplitTransaction) and txn.split_parent_id:
            group = groups.get(txn.split_parent_id)
            if group is None:
                group = groups[txn.split_parent_id] = []
                blocks.append(group)
            group.append(txn)
        else:
            blocks.append(txn)
    for group in groups.values():
        group.sort(key=lambda s: s.split_index)
    return blocks


def _emit_single(trns_id: int, txn: Transaction, opts: IifExportOptions) -> List[str]:
    amount = txn.signed_amount
    memo = escape_iif(txn.description) if opts.include_memo else ""
    account = get_account_for_category(txn.category, txn.type, opts)
    return [
        _trns_row(trns_id, txn, amount, memo, opts.bank_account_name),
        _spl_row(trns_id, txn, account, -amount, memo),
        "ENDTRNS",
    ]


def _emit_split_group(
    trns_id: int, splits: Sequence[SplitTransaction], opts: IifExportOptions
) -> List[str]:
    first = splits[0]
    original = first.original_amount or sum((s.amount for s in splits), Decimal(0))
    amount = -original if first.is_expense else original
    memo = escape_iif(first.description) if opts.include_memo else ""

    lines = [_trns_row(trns_id, first, amount, memo, opts.bank_account_name)]
    for split in splits:
        split_amount = split.amount if split.is_expense else -split.amount
        account = get_account_for_category(split.category, split.type, opts)
        split_memo = escape_iif(split.split_memo) if opts.include_memo and split.split_memo else memo
        lines.append(_spl_row(trns_id, first, account, split_amount, split_memo))
    lines.append("ENDTRNS")
    return lines


def generate_iif(
    transactions: Iterable[Transaction], options: Optional[IifExportOptions] = None
) -> str:
    """
    Render ``transactions`` (plain and split fragments mixed) as IIF text.

    Plain transactions become one TRNS + one SPL. A split group becomes one
    TRNS carrying the original amount and one SPL per fragment.
    """
    opts = options or IifExportOptions()
    lines: List[str] = list(IIF_HEADER)
    trns_id = 0
    for block in group_blocks(transactions):
        if isinstance(block, list):
            if not block:
                continue
            trns_id += 1
            lines.extend(_emit_split_group(trns_id, block, opts))
        else:
            trns_id += 1
            lines.extend(_emit_single(trns_id, block, opts))
    log.debug("Generated %d IIF transaction blocks", trns_id)
    return IIF_NEWLINE.join(lines)


def _account_type(account: str) -> str:
    if "Income" in account or "Payroll" in account:
        return "INC"
    if "Transfer" in account or "Cash" in account:
        return "OASSET"
    return "EXP"


def generate_iif_with_accounts(
    transactions: Sequence[Transaction], options: Optional[IifExportOptions] = None
) -> str:
    """
    Like :func:`generate_iif`, preceded by an ``!ACCNT`` list declaring every
    account the transactions post to. Handy when importing into a new company
    file.
    """
    opts = options or IifExportOptions()
    accounts: Dict[str, None] = {opts.bank_account_name: None}
    for txn in transactions:
        accounts[get_account_for_category(txn.category, txn.type, opts)] = None

    lines = [
        "!ACCNT\tNAME\tACCNTTYPE\tDESC",
        f"ACCNT\t{escape_iif(opts.bank_account_name)}\tBANK\tImported Bank Account",
    ]
    for account in accounts:
        if account != opts.bank_account_name:
            lines.append(f"ACCNT\t{escape_iif(account)}\t{_account_type(account)}\tImported Account")
    lines.append("")
    lines.append(generate_iif(transactions, opts))
    return IIF_NEWLINE.join(lines)


def write_iif(path: Path, content: str) -> Path:
    """Write IIF text to ``path`` byte-for-byte (CRLF preserved)."""
    path = Path(path)
    with open_for_write(path, newline="", encoding="utf-8") as f:
        f.write(content)
    log.info("Wrote IIF export to %s", path)
    return path
