from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from statement_helper.controllers import validate_iif
from statement_helper.data_model import SplitTransaction, Transaction, TransactionType
from statement_helper.parsers_emitters import (
    IifExportOptions,
    escape_iif,
    generate_iif,
    generate_iif_with_accounts,
    get_account_for_category,
    write_iif,
)
from statement_helper.parsers_emitters.iif_emitter import IIF_HEADER, group_blocks


def _expense(desc="STARBUCKS", amount="42.50", category="Restaurants & Dining", d=date(2024, 3, 15)):
    return Transaction(
        date=d, description=desc, amount=Decimal(amount), type=TransactionType.EXPENSE, category=category
    )


def _fragments(parent: Transaction, parts, parent_id="split_abc"):
    return [
        SplitTransaction.from_transaction(
            parent,
            amount=Decimal(amt),
            category=cat,
            split_parent_id=parent_id,
            split_index=i,
            original_amount=parent.amount,
            split_memo=memo,
        )
        for i, (cat, amt, memo) in enumerate(parts)
    ]


def test_single_expense_block():
    # Act
    iif = generate_iif([_expense()])

    # Assert
    lines = iif.split("\r\n")
    assert lines[:3] == list(IIF_HEADER)
    trns, spl, end = lines[3], lines[4], lines[5]
    assert trns.split("\t") == [
        "TRNS", "1", "CHECK", "03/15/2024", "Checking", "STARBUCKS", "-42.50", "", "STARBUCKS", "N", "N",
    ]
    assert spl.split("\t")[4] == "Meals & Entertainment"
    assert spl.split("\t")[6] == "42.50"
    assert end == "ENDTRNS"

    result = validate_iif(iif)
    assert result.valid
    assert result.stats.transaction_count == 1
    assert result.stats.split_count == 1


def test_income_block_is_deposit_with_positive_trns():
    txn = Transaction(
        date=date(2024, 3, 1), description="PAYROLL", amount=Decimal("1000"),
        type=TransactionType.INCOME, category="Salary",
    )
    lines = generate_iif([txn]).split("\r\n")
    trns, spl = lines[3].split("\t"), lines[4].split("\t")
    assert trns[2] == "DEPOSIT"
    assert trns[6] == "1000.00"
    assert spl[4] == "Payroll Income"
    assert spl[6] == "-1000.00"


def test_split_group_emits_one_trns_and_spl_per_fragment():
    # Arrange
    parent = _expense(desc="COSTCO WHSE", amount="100.00", category="Uncategorized")
    frags = _fragments(parent, [("Groceries", "70.00", ""), ("Home Improvement", "30.00", "bulbs")])

    # Act
    iif = generate_iif(frags)

    # Assert
    rows = [line.split("\t") for line in iif.split("\r\n")[3:]]
    assert [r[0] for r in rows] == ["TRNS", "SPL", "SPL", "ENDTRNS"]
    assert rows[0][6] == "-100.00"
    assert (rows[1][4], rows[1][6], rows[1][8]) == ("Groceries", "70.00", "COSTCO WHSE")
    assert (rows[2][4], rows[2][6], rows[2][8]) == ("Repairs & Maintenance", "30.00", "bulbs")
    assert validate_iif(iif).valid


def test_split_group_fragments_ordered_by_index_and_blocks_by_first_appearance():
    parent = _expense(desc="COSTCO", amount="10.00")
    a, b = _fragments(parent, [("Groceries", "6.00", ""), ("Other", "4.00", "")])
    other = _expense(desc="SHELL", amount="20.00", category="Gas")

    blocks = group_blocks([b, other, a])

    assert blocks[0] == [a, b]
    assert blocks[1] is other


def test_trns_ids_are_sequential():
    iif = generate_iif([_expense(), _expense(desc="SHELL", category="Gas")])
    trns_ids = [line.split("\t")[1] for line in iif.split("\r\n") if line.startswith("TRNS\t")]
    assert trns_ids == ["1", "2"]


def test_no_memo_option_blanks_memos():
    parent = _expense(desc="COSTCO", amount="10.00")
    frags = _fragments(parent, [("Groceries", "6.00", "food"), ("Other", "4.00", "")])
    iif = generate_iif(frags, IifExportOptions(include_memo=False))
    assert all(line.split("\t")[8] == "" for line in iif.split("\r\n")[3:-1])


@pytest.mark.parametrize(
    "category,txn_type,mapping,expected",
    [
        ("Groceries", TransactionType.EXPENSE, {}, "Groceries"),
        ("Groceries", TransactionType.EXPENSE, {"Groceries": "Food:Groceries"}, "Food:Groceries"),
        ("Mystery", TransactionType.EXPENSE, {}, "Uncategorized Expense"),
        ("Mystery", TransactionType.INCOME, {}, "Other Income"),
        ("Mystery", TransactionType.EXPENSE, {"Mystery": ""}, "Uncategorized Expense"),
    ],
)
def test_get_account_for_category(category, txn_type, mapping, expected):
    opts = IifExportOptions(category_mapping=mapping)
    assert get_account_for_category(category, txn_type, opts) == expected


def test_escape_iif():
    assert escape_iif("a\tb\r\nc\nd") == "a b c d"
    assert len(escape_iif("x" * 500)) == 100


def test_description_with_tab_does_not_break_columns():
    iif = generate_iif([_expense(desc="BAD\tNAME")])
    assert len(iif.split("\r\n")[3].split("\t")) == 11


def test_account_names_with_tabs_do_not_break_columns():
    opts = IifExportOptions(
        bank_account_name="Chase\tChecking", category_mapping={"Restaurants & Dining": "Meals\nOut"}
    )

    out = generate_iif_with_accounts([_expense()], opts)

    lines = out.split("\r\n")
    assert "ACCNT\tChase Checking\tBANK\tImported Bank Account" in lines
    trns = next(line for line in lines if line.startswith("TRNS\t")).split("\t")
    spl = next(line for line in lines if line.startswith("SPL\t")).split("\t")
    assert len(trns) == 11 and trns[4] == "Chase Checking"
    assert len(spl) == 12 and spl[4] == "Meals Out"
    assert validate_iif(out).valid


def test_with_accounts_declares_every_posting_account():
    txns = [
        _expense(),
        Transaction(
            date=date(2024, 3, 1), description="PAY", amount=Decimal("5"),
            type=TransactionType.INCOME, category="Interest",
        ),
    ]
    out = generate_iif_with_accounts(txns, IifExportOptions(bank_account_name="Chase Checking"))
    lines = out.split("\r\n")
    assert lines[0] == "!ACCNT\tNAME\tACCNTTYPE\tDESC"
    assert "ACCNT\tChase Checking\tBANK\tImported Bank Account" in lines
    assert "ACCNT\tMeals & Entertainment\tEXP\tImported Account" in lines
    assert "ACCNT\tInterest Income\tINC\tImported Account" in lines
    assert validate_iif(out).valid


def test_write_iif_keeps_crlf(tmp_path):
    out = write_iif(tmp_path / "export" / "out.iif", generate_iif([_expense()]))
    data = out.read_bytes()
    assert b"\r\nENDTRNS" in data
    assert b"\r\r\n" not in data
