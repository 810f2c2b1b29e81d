from __future__ import annotations

from datetime import date
from decimal import Decimal

from statement_helper.data_model import UNCATEGORIZED, StatementFormat, TransactionType
from statement_helper.parsers_emitters import (
    DelimitedStatementParser,
    parse_delimited,
    read_delimited_rows,
)

SIGNED_CSV = """Date,Description,Amount,Balance
03/01/2024,PAYROLL ACME CORP,"$2,500.00","3,000.00"
03/03/2024,STARBUCKS STORE #123,-5.75,2994.25
03/02/2024,NETFLIX.COM,(15.49),2999.25
03/04/2024,ZERO ROW,0.00,2994.25
,NO DATE,-1.00,0
"""

SPLIT_COLUMN_CSV = """Posted Date,Payee,Debit,Credit,Running Balance,Category
2024-03-02,SHELL OIL 123,40.00,,960.00,
2024-03-01,TRANSFER FROM SAVINGS,,1000.00,1000.00,Transfers
"""


def test_signed_amount_column_sign_and_parentheses():
    # Act
    stmt = parse_delimited(SIGNED_CSV, "checking.csv")

    # Assert
    by_desc = {t.description: t for t in stmt.transactions}
    assert by_desc["PAYROLL ACME CORP"].type is TransactionType.INCOME
    assert by_desc["PAYROLL ACME CORP"].amount == Decimal("2500.00")
    assert by_desc["STARBUCKS STORE #123"].type is TransactionType.EXPENSE
    assert by_desc["STARBUCKS STORE #123"].amount == Decimal("5.75")
    assert by_desc["NETFLIX.COM"].type is TransactionType.EXPENSE
    assert by_desc["NETFLIX.COM"].amount == Decimal("15.49")
    assert all(t.amount >= 0 for t in stmt.transactions)


def test_zero_amount_and_missing_date_rows_are_dropped():
    stmt = parse_delimited(SIGNED_CSV, "checking.csv")
    descriptions = [t.description for t in stmt.transactions]
    assert "ZERO ROW" not in descriptions
    assert "NO DATE" not in descriptions
    assert len(stmt) == 3


def test_sorted_newest_first_with_start_end_balances():
    stmt = parse_delimited(SIGNED_CSV, "checking.csv")

    assert [t.date for t in stmt.transactions] == [
        date(2024, 3, 3),
        date(2024, 3, 2),
        date(2024, 3, 1),
    ]
    assert stmt.start_balance == Decimal("3000.00")  # oldest row
    assert stmt.end_balance == Decimal("2994.25")  # newest row
    assert stmt.account == "Checking"
    assert stmt.file_format is StatementFormat.DELIMITED


def test_withdrawal_and_deposit_columns():
    stmt = DelimitedStatementParser().parse(SPLIT_COLUMN_CSV, "export.csv")

    shell, transfer = stmt.transactions
    assert shell.type is TransactionType.EXPENSE
    assert shell.amount == Decimal("40.00")
    assert shell.category == UNCATEGORIZED
    assert transfer.type is TransactionType.INCOME
    assert transfer.amount == Decimal("1000.00")
    assert transfer.category == "Transfers"
    assert transfer.balance == Decimal("1000.00")
    assert stmt.account == "Account"


def test_same_day_rows_keep_file_order():
    csv = "Date,Description,Amount\n03/01/2024,FIRST,-1\n03/01/2024,SECOND,-2\n03/02/2024,LATER,-3\n"
    stmt = parse_delimited(csv)
    assert [t.description for t in stmt.transactions] == ["LATER", "FIRST", "SECOND"]


def test_missing_description_defaults_to_unknown():
    stmt = parse_delimited("Date,Amount\n03/01/2024,-9.99\n")
    assert stmt.transactions[0].description == "Unknown"


def test_unparseable_date_row_is_dropped():
    stmt = parse_delimited("Date,Description,Amount\nyesterday,COFFEE,-3\n03/01/2024,TEA,-2\n")
    assert [t.description for t in stmt.transactions] == ["TEA"]


def test_read_delimited_rows_trims_headers_and_keeps_text():
    headers, rows = read_delimited_rows(" Date , Amount \n03/01/2024,007.50\n\n")
    assert headers == ["Date", "Amount"]
    assert rows == [{"Date": "03/01/2024", "Amount": "007.50"}]


def test_read_delimited_rows_empty_input():
    assert read_delimited_rows("") == ([], [])
    assert read_delimited_rows("   \n") == ([], [])


def test_row_limit_truncates():
    body = "".join(f"03/01/2024,ROW {i},-1\n" for i in range(10))
    stmt = DelimitedStatementParser(max_rows=4).parse("Date,Description,Amount\n" + body)
    assert len(stmt) == 4
