# statement_helper/controllers/iif_validator.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from statement_helper.utilities import format_amount, parse_numeric

log = logging.getLogger(__name__)

_TOLERANCE = Decimal("0.01")
_AMOUNT_COLUMN = 6


@dataclass
class IifValidationStats:
    transaction_count: int = 0
    split_count: int = 0
    total_debit: Decimal = Decimal(0)
    total_credit: Decimal = Decimal(0)


@dataclass
class IifValidationResult:
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: IifValidationStats = field(default_factory=IifValidationStats)


def _amount(parts: List[str]) -> Decimal:
    return parse_numeric(parts[_AMOUNT_COLUMN]) if len(parts) > _AMOUNT_COLUMN else Decimal(0)


def validate_iif(content: str) -> IifValidationResult:
    """
    Check IIF text for block structure and double-entry balance.

    Walks the lines with a two-state machine (idle / inside a TRNS block).
    Every closed block must have ``TRNS + sum(SPL) == 0`` within one cent.
    Structural problems are errors; unknown row types are warnings.
    """
    result = IifValidationResult()
    stats = result.stats
    lines = re.split(r"\r?\n", content)

    if not any(line.startswith("!TRNS") for line in lines):
        result.errors.append("Missing !TRNS header")

    in_transaction = False
    trns_amount = Decimal(0)
    splits_total = Decimal(0)
    trns_id = ""

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("!"):
            continue
        parts = line.split("\t")
        row_type = parts[0]

        if row_type == "TRNS":
            if in_transaction:
                result.errors.append(
                    f"Line {lineno}: TRNS without ENDTRNS for previous transaction"
                )
            in_transaction = True
            stats.transaction_count += 1
            trns_id = parts[1] if len(parts) > 1 else ""
            trns_amount = _amount(parts)
            splits_total = Decimal(0)
            if trns_amount >= 0:
                stats.total_credit += trns_amount
            else:
                stats.total_debit += abs(trns_amount)
        elif row_type == "SPL":
            if not in_transaction:
                result.errors.append(f"Line {lineno}: SPL without TRNS")
            stats.split_count += 1
            splits_total += _amount(parts)
        elif row_type == "ENDTRNS":
            if not in_transaction:
                result.errors.append(f"Line {lineno}: ENDTRNS without TRNS")
                continue
            if abs(trns_amount + splits_total) > _TOLERANCE:
                result.errors.append(
                    f"Transaction {trns_id}: TRNS ({format_amount(trns_amount)}) + "
                    f"SPL ({format_amount(splits_total)}) should equal 0"
                )
            in_transaction = False
        elif row_type == "ACCNT":
            pass
        else:
            result.warnings.append(f'Line {lineno}: Unknown row type "{row_type}"')

    if in_transaction:
        result.errors.append("File ends without ENDTRNS for last transaction")
    if stats.transaction_count == 0:
        result.warnings.append("No transactions found in IIF file")

    result.valid = not result.errors
    if not result.valid:
        log.warning("IIF validation found %d errors", len(result.errors))
    return result
