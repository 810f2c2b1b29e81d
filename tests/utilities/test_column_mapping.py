from __future__ import annotations

import pytest

from statement_helper.utilities import (
    find_column,
    infer_account_from_filename,
    resolve_columns,
)


def test_find_column_is_case_insensitive_and_returns_actual_header():
    headers = ["Posted Date", " DESCRIPTION ", "Debit", "Credit", "Running Balance"]

    assert find_column(headers, "date") == "Posted Date"
    assert find_column(headers, "description") == " DESCRIPTION "
    assert find_column(headers, "withdrawal") == "Debit"
    assert find_column(headers, "deposit") == "Credit"
    assert find_column(headers, "balance") == "Running Balance"


def test_find_column_first_synonym_wins():
    # "memo" and "payee" are both description spellings; "memo" is listed first
    headers = ["payee", "memo"]
    assert find_column(headers, "description") == "memo"


def test_find_column_has_no_fuzzy_matching():
    assert find_column(["Trans. Date"], "date") is None
    assert find_column(["Amount ($)"], "amount") is None


def test_resolve_columns_maps_missing_to_none():
    cols = resolve_columns(["Date", "Amount"])
    assert cols["date"] == "Date"
    assert cols["amount"] == "Amount"
    assert cols["balance"] is None
    assert cols["withdrawal"] is None


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("chase_checking_2024.csv", "Checking"),
        ("CHK-export.csv", "Checking"),
        ("my_savings.qbo", "Savings"),
        ("amex_credit.ofx", "Credit Card"),
        ("cc_statement.csv", "Credit Card"),
        ("download.csv", "Account"),
    ],
)
def test_infer_account_from_filename(filename, expected):
    assert infer_account_from_filename(filename) == expected
