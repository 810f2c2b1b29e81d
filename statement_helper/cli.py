# statement_helper/cli.py
"""
Command line entry point.

    statement-helper convert  checking.csv card.qbo -o out.iif
    statement-helper validate checking.csv
    statement-helper insights checking.csv --today 2024-03-31
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.config
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

from statement_helper.controllers import (
    DEFAULT_REQUIRED_COLUMNS,
    CsvValidationOptions,
    DataSession,
    JsonFileRuleStore,
    RuleBook,
    format_validation_errors,
    generate_novel_insights,
)
from statement_helper.parsers_emitters import IifExportOptions, write_iif
from statement_helper.utilities import LOG_DIR, LOGGING, format_amount

log = logging.getLogger(__name__)

_BALANCE_MODES = {"auto": None, "always": True, "never": False}


def configure_logging() -> None:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(LOGGING)


def _existing_files(paths: Sequence[Path]) -> List[Path]:
    for p in paths:
        if not p.exists():
            raise SystemExit(f"Input statement not found: {p}")
        if not p.is_file():
            raise SystemExit(f"Input path is not a file: {p}")
    return list(paths)


def _build_session(args: argparse.Namespace) -> DataSession:
    required = args.required_columns
    if required is None and args.require_columns:
        required = list(DEFAULT_REQUIRED_COLUMNS)
    options = CsvValidationOptions(
        validate_balance=_BALANCE_MODES[args.validate_balance],
        required_columns=required,
    )
    rule_book = RuleBook(JsonFileRuleStore(args.rules)) if args.rules else None
    session = DataSession(rule_book=rule_book, validation_options=options)
    session.load_files(_existing_files(args.inputs))
    return session


def _print_validations(session: DataSession) -> None:
    for filename, result in session.validations.items():
        print(f"{filename}: {format_validation_errors(result)}")
        if result.valid and result.warnings:
            for w in result.warnings:
                print(f"  ⚠ {w}")


def _load_mapping(path: Optional[Path]) -> dict:
    if path is None:
        return {}
    try:
        mapping = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"Could not read category mapping {path}: {e}")
    if not isinstance(mapping, dict):
        raise SystemExit(f"Category mapping {path} must be a JSON object")
    return {str(k): str(v) for k, v in mapping.items()}


# region Commands


def cmd_convert(args: argparse.Namespace) -> int:
    session = _build_session(args)
    _print_validations(session)

    options = IifExportOptions(
        bank_account_name=args.bank_account,
        default_expense_account=args.expense_account,
        default_income_account=args.income_account,
        include_memo=not args.no_memo,
        category_mapping=_load_mapping(args.mapping),
    )
    content, result = session.export_iif(options, with_accounts=args.with_accounts)
    s = result.stats
    print(
        f"IIF: {s.transaction_count} transactions, {s.split_count} split lines, "
        f"debits {format_amount(s.total_debit)}, credits {format_amount(s.total_credit)}"
    )
    for w in result.warnings:
        print(f"  ⚠ {w}")
    if not result.valid:
        for e in result.errors:
            print(f"  ✗ {e}")
        if not args.force:
            print("Export has errors; re-run with --force to write it anyway.")
            return 1

    write_iif(args.output, content)
    print(f"Wrote {args.output}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    session = _build_session(args)
    _print_validations(session)
    return 0 if session.is_valid else 1


def cmd_insights(args: argparse.Namespace) -> int:
    session = _build_session(args)
    txns = session.transactions()
    data = session.summarize(txns)
    s = data.summary
    print(f"Period: {s.period or 'n/a'} ({s.transaction_count} transactions)")
    print(f"Income {format_amount(s.total_income)}  Expenses {format_amount(s.total_expenses)}  "
          f"Net {format_amount(s.net_change)}")

    insights = generate_novel_insights(txns, data, args.today)
    b = insights.burn_rate
    print(f"Monthly burn {format_amount(b.current_monthly_burn)}, runway {b.projected_runway} months")
    for category, amount in sorted(data.category_breakdown.items(), key=lambda kv: kv[1], reverse=True):
        print(f"  {category:<28} {format_amount(amount):>12}")
    for line in insights.insights:
        print(f"- {line}")
    return 0


# endregion Commands


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="statement-helper",
        description="Convert bank statement exports (CSV, OFX/QBO) to QuickBooks IIF.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("inputs", type=Path, nargs="+", help="Statement files (.csv, .ofx, .qbo, .qfx)")
    common.add_argument("--rules", type=Path, help="JSON rule store to apply custom rules from")
    common.add_argument("--validate-balance", choices=sorted(_BALANCE_MODES), default="auto",
                        help="Running-balance check for CSV files (default: auto, when columns exist)")
    common.add_argument("--require-columns", action="store_true",
                        help="Fail CSV validation when required columns are missing")
    common.add_argument("--required-columns", nargs="+",
                        help=f"Columns to require (default: {' '.join(DEFAULT_REQUIRED_COLUMNS)})")

    conv = sub.add_parser("convert", parents=[common], help="Export statements to IIF")
    conv.add_argument("-o", "--output", type=Path, required=True, help="Path to output .iif file")
    conv.add_argument("--bank-account", default="Checking", help="QuickBooks bank account name")
    conv.add_argument("--expense-account", default="Uncategorized Expense",
                      help="Account for unmapped expense categories")
    conv.add_argument("--income-account", default="Other Income",
                      help="Account for unmapped income categories")
    conv.add_argument("--mapping", type=Path, help="JSON object of category -> account overrides")
    conv.add_argument("--no-memo", action="store_true", help="Leave the MEMO column blank")
    conv.add_argument("--with-accounts", action="store_true", help="Prepend an !ACCNT account list")
    conv.add_argument("--force", action="store_true", help="Write the export even if it fails validation")
    conv.set_defaults(func=cmd_convert)

    val = sub.add_parser("validate", parents=[common], help="Validate statements only")
    val.set_defaults(func=cmd_validate)

    ins = sub.add_parser("insights", parents=[common], help="Print spending summary and insights")
    ins.add_argument("--today", type=date.fromisoformat, help="Reference date for projections (YYYY-MM-DD)")
    ins.set_defaults(func=cmd_insights)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    log.debug("statement-helper %s", args.command)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
