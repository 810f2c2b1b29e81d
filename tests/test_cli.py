from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path

import pytest

from statement_helper import cli
from statement_helper.controllers import (
    JsonFileRuleStore,
    RuleBook,
    create_categorization_rule,
    validate_iif,
)

GOOD_CSV = """Date,Description,Withdrawal,Deposit,Balance
03/04/2024,STARBUCKS STORE #123,5.00,,1955.00
03/01/2024,ACME PAYROLL,,1960.00,1960.00
"""

BROKEN_CSV = """Date,Description,Withdrawal,Deposit,Balance
03/04/2024,SHELL OIL,40.00,,900.00
03/01/2024,ACME PAYROLL,,1000.00,1000.00
"""


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "configure_logging", lambda: None)
    (tmp_path / "checking.csv").write_text(GOOD_CSV, encoding="utf-8")
    (tmp_path / "broken.csv").write_text(BROKEN_CSV, encoding="utf-8")
    return tmp_path


def test_validate_ok(workdir, capsys):
    assert cli.main(["validate", "checking.csv"]) == 0
    assert "checking.csv: ✓ Validation passed" in capsys.readouterr().out


def test_validate_reports_balance_mismatch(workdir, capsys):
    rc = cli.main(["validate", "checking.csv", "broken.csv"])

    out = capsys.readouterr().out
    assert rc == 1
    assert "Row 2 (03/04/2024): Balance mismatch! Expected $960.00, got $900.00" in out


def test_validate_balance_never(workdir):
    assert cli.main(["validate", "broken.csv", "--validate-balance", "never"]) == 0


def test_required_columns(workdir, capsys):
    (workdir / "amounts.csv").write_text("Date,Amount\n03/01/2024,-5\n", encoding="utf-8")

    assert cli.main(["validate", "amounts.csv"]) == 0
    assert cli.main(["validate", "amounts.csv", "--require-columns"]) == 1
    assert cli.main(["validate", "amounts.csv", "--required-columns", "date", "amount"]) == 0
    assert "Missing required columns: description, deposit, withdrawal, balance" in capsys.readouterr().out


def test_missing_input_exits(workdir):
    with pytest.raises(SystemExit, match="Input statement not found"):
        cli.main(["validate", "nope.csv"])


def test_convert_writes_balanced_iif(workdir, capsys):
    # Act
    rc = cli.main(["convert", "checking.csv", "-o", "out/export.iif", "--bank-account", "Chase"])

    # Assert
    assert rc == 0
    raw = (workdir / "out" / "export.iif").read_bytes()
    assert b"\r\n" in raw
    content = raw.decode("utf-8")
    assert "\tChase\t" in content
    result = validate_iif(content)
    assert result.valid
    assert result.stats.total_credit == Decimal("1960.00")
    assert "IIF: 2 transactions, 2 split lines" in capsys.readouterr().out


def test_convert_with_mapping_rules_and_options(workdir):
    # Arrange
    (workdir / "mapping.json").write_text(json.dumps({"Coffee": "Meals:Coffee"}), encoding="utf-8")
    RuleBook(JsonFileRuleStore(workdir / "rules.json")).add_rule(
        create_categorization_rule("Coffee", "starbucks", "Coffee")
    )

    # Act
    rc = cli.main(
        [
            "convert", "checking.csv", "-o", "out.iif",
            "--rules", "rules.json", "--mapping", "mapping.json",
            "--no-memo", "--with-accounts",
        ]
    )

    # Assert
    assert rc == 0
    content = (workdir / "out.iif").read_bytes().decode("utf-8")
    assert content.startswith("!ACCNT")
    assert "ACCNT\tMeals:Coffee\tEXP\tImported Account" in content
    spl = next(line for line in content.split("\r\n") if line.startswith("SPL\t") and "Meals:Coffee" in line)
    assert spl.split("\t")[8] == ""


def test_convert_bad_mapping_exits(workdir):
    (workdir / "mapping.json").write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SystemExit, match="must be a JSON object"):
        cli.main(["convert", "checking.csv", "-o", "out.iif", "--mapping", "mapping.json"])


def test_insights(workdir, capsys):
    rc = cli.main(["insights", "checking.csv", "--today", "2024-03-20"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "Period: 2024-03-01 - 2024-03-04 (2 transactions)" in out
    assert "Income 1960.00  Expenses 5.00  Net 1955.00" in out
    assert "runway 999 months" in out


def test_configure_logging_creates_log_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    package_log = logging.getLogger("statement_helper")
    saved = list(root.handlers), root.level
    try:
        cli.configure_logging()
        assert (tmp_path / "logs").is_dir()
        assert package_log.level == logging.DEBUG
        console = next(h for h in root.handlers if type(h) is logging.StreamHandler)
        assert console.level == logging.WARNING
    finally:
        package_log.setLevel(logging.NOTSET)
        for h in root.handlers:
            if h not in saved[0]:
                h.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
