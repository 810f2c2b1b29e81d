# statement_helper/controllers/csv_validators.py
"""
Consistency checks for delimited statement rows.

The checks run on the raw ``{header: cell}`` rows, before they become
``Transaction`` objects, and report problems instead of raising:

* structural: the file has rows and columns
* required columns: every canonical column resolves through the synonym table
* running balance: ``balance[i] == balance[i+1] - withdrawal[i] + deposit[i]``
  for rows ordered newest first
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Final, List, Mapping, Optional, Sequence

from statement_helper.utilities import find_column, parse_numeric

log = logging.getLogger(__name__)

BALANCE_TOLERANCE: Final[Decimal] = Decimal("0.01")
MAX_BALANCE_ERRORS: Final[int] = 5
HEADER_ROWS: Final[int] = 1

DEFAULT_REQUIRED_COLUMNS: Final[tuple[str, ...]] = (
    "date",
    "description",
    "deposit",
    "withdrawal",
    "balance",
)


@dataclass
class ValidationError:
    """One problem found in a file. ``row`` is the 1-based line number in the file."""

    file: str
    message: str
    row: Optional[int] = None
    date: Optional[str] = None
    expected: Optional[Decimal] = None
    actual: Optional[Decimal] = None


@dataclass
class ValidationResult:
    valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class CsvValidationOptions:
    """
    ``validate_balance``: ``None`` checks balances when the needed columns
    exist, ``True`` additionally warns when they do not, ``False`` skips it.
    ``required_columns``: canonical names to require; ``None`` skips the check.
    """

    validate_balance: Optional[bool] = None
    required_columns: Optional[Sequence[str]] = None


def validate_csv_parseable(
    rows: Sequence[Mapping[str, str]], filename: str
) -> List[ValidationError]:
    if not rows:
        return [ValidationError(file=filename, message="CSV file is empty")]
    if len(rows[0]) == 0:
        return [ValidationError(file=filename, message="CSV has no columns")]
    return []


def validate_required_columns(
    headers: Sequence[str],
    filename: str,
    required: Sequence[str] = DEFAULT_REQUIRED_COLUMNS,
) -> List[ValidationError]:
    missing = [col for col in required if find_column(headers, col) is None]
    if missing:
        return [
            ValidationError(
                file=filename,
                message=f"Missing required columns: {', '.join(missing)}",
            )
        ]
    return []


def validate_balance_consistency(
    rows: Sequence[Mapping[str, str]],
    filename: str,
    columns: Mapping[str, str],
) -> List[ValidationError]:
    """
    Check the running balance of ``rows`` (index 0 is the newest row).

    ``columns`` maps ``deposit``, ``withdrawal``, ``balance`` and ``date`` to
    the actual header names. Each row i (from the second oldest up to the
    newest) must satisfy ``balance[i] == balance[i+1] - withdrawal[i] +
    deposit[i]`` within one cent. At most five mismatches are reported
    individually; any further ones are summarized in a final entry.
    """
    if len(rows) < 2:
        return []

    deposits = [parse_numeric(r.get(columns["deposit"])) for r in rows]
    withdrawals = [parse_numeric(r.get(columns["withdrawal"])) for r in rows]
    balances = [parse_numeric(r.get(columns["balance"])) for r in rows]
    dates = [r.get(columns["date"]) or "unknown" for r in rows]

    errors: List[ValidationError] = []
    error_count = 0
    for i in range(len(rows) - 2, -1, -1):
        expected = balances[i + 1] - withdrawals[i] + deposits[i]
        actual = balances[i]
        if abs(expected - actual) > BALANCE_TOLERANCE:
            error_count += 1
            if error_count <= MAX_BALANCE_ERRORS:
                errors.append(
                    ValidationError(
                        file=filename,
                        row=i + 1 + HEADER_ROWS,
                        date=dates[i],
                        message=f"Balance mismatch! Expected ${expected:.2f}, got ${actual:.2f}",
                        expected=expected,
                        actual=actual,
                    )
                )

    if error_count > MAX_BALANCE_ERRORS:
        errors.append(
            ValidationError(
                file=filename,
                message=f"... and {error_count - MAX_BALANCE_ERRORS} more balance errors",
            )
        )
    if error_count:
        log.warning("%s: %d balance mismatches", filename, error_count)
    return errors


def validate_parsed_csv(
    rows: Sequence[Mapping[str, str]],
    headers: Sequence[str],
    filename: str,
    options: Optional[CsvValidationOptions] = None,
) -> ValidationResult:
    """Run the structural, required-column and balance checks on one file."""
    opts = options or CsvValidationOptions()
    result = ValidationResult()

    parse_errors = validate_csv_parseable(rows, filename)
    if parse_errors:
        result.errors.extend(parse_errors)
        result.valid = False
        return result

    if opts.required_columns is not None:
        result.errors.extend(
            validate_required_columns(headers, filename, opts.required_columns)
        )

    if opts.validate_balance is not False:
        cols = {name: find_column(headers, name) for name in ("deposit", "withdrawal", "balance", "date")}
        if all(cols.values()):
            result.errors.extend(
                validate_balance_consistency(rows, filename, cols)  # type: ignore[arg-type]
            )
        elif opts.validate_balance is True:
            result.warnings.append("Could not validate balances: missing required columns")

    result.valid = not result.errors
    return result


def format_validation_errors(result: ValidationResult) -> str:
    """Render ``result`` as a short human-readable report."""
    if result.valid:
        return "✓ Validation passed"

    lines = ["✗ Validation failed:"]
    for error in result.errors:
        if error.row:
            lines.append(f"  Row {error.row} ({error.date}): {error.message}")
        else:
            lines.append(f"  {error.file}: {error.message}")
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  ⚠ {w}" for w in result.warnings)
    return "\n".join(lines)
