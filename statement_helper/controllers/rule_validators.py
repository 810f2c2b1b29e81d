# statement_helper/controllers/rule_validators.py
"""
Validation of user-authored rules and of the fragments a split rule produces.

Rules arrive either as :class:`CustomRule` objects or as the camelCase draft
dictionaries the rule editor sends; both are checked the same way. Nothing
here raises for bad input; problems come back as field-level messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Sequence, Union

from statement_helper.data_model import (
    ConditionField,
    ConditionLogic,
    CustomRule,
    MatchType,
    SplitAllocation,
    SplitTransaction,
)
from statement_helper.utilities import compile_user_pattern, format_amount

log = logging.getLogger(__name__)

_TOLERANCE = Decimal("0.01")


@dataclass
class RuleValidationResult:
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def finish(self) -> "RuleValidationResult":
        self.valid = not self.errors
        return self


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _not_number(value: Any) -> bool:
    if _blank(value) or isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return False
    try:
        Decimal(str(value))
    except (InvalidOperation, ValueError):
        return True
    return False


_FIELDS = {f.value for f in ConditionField}
_MATCH_TYPES = {m.value for m in MatchType}
_LOGIC = {c.value for c in ConditionLogic}


def _validate_condition(i: int, cond: Any, result: RuleValidationResult) -> None:
    n = i + 1
    if not isinstance(cond, Mapping):
        result.errors.append(f"Condition {n}: must be an object")
        return
    fld = cond.get("field")
    match_type = cond.get("matchType")
    if not fld:
        result.errors.append(f"Condition {n}: Field is required")
    elif fld not in _FIELDS:
        result.errors.append(f"Condition {n}: Unknown field {fld!r}")
    if not match_type:
        result.errors.append(f"Condition {n}: Match type is required")
    elif match_type not in _MATCH_TYPES:
        result.errors.append(f"Condition {n}: Unknown match type {match_type!r}")
    if fld != "amount" and _blank(cond.get("value")):
        result.errors.append(f"Condition {n}: Value is required for non-amount conditions")
    if fld == "amount" and _blank(cond.get("minAmount")) and _blank(cond.get("maxAmount")):
        result.errors.append(f"Condition {n}: Amount range (min or max) is required")
    for key in ("minAmount", "maxAmount"):
        if _not_number(cond.get(key)):
            result.errors.append(f"Condition {n}: {key} must be a number")
    if match_type == "regex" and compile_user_pattern(str(cond.get("value") or "")) is None:
        result.errors.append(f"Condition {n}: Invalid regex pattern")


def validate_custom_rule(rule: Union[CustomRule, Mapping[str, Any]]) -> RuleValidationResult:
    """Check a rule (or rule draft) before it is saved."""
    result = RuleValidationResult()
    if not isinstance(rule, (CustomRule, Mapping)):
        result.errors.append("Rule must be an object")
        return result.finish()
    draft: Mapping[str, Any] = rule.to_json_obj() if isinstance(rule, CustomRule) else rule

    if _blank(draft.get("name")):
        result.errors.append("Rule name is required")
    conditions = draft.get("conditions") or []
    if not isinstance(conditions, (list, tuple)):
        result.errors.append("Conditions must be a list")
        conditions = []
    elif not conditions:
        result.errors.append("At least one condition is required")
    logic = draft.get("conditionLogic")
    if logic and logic not in _LOGIC:
        result.errors.append(f"Unknown condition logic {logic!r}")
    priority = draft.get("priority")
    if priority is not None and (isinstance(priority, bool) or not str(priority).strip().lstrip("-").isdigit()):
        result.errors.append("Priority must be a whole number")
    action = draft.get("action")
    if not action or not isinstance(action, Mapping):
        result.errors.append("Action is required")
        action = None

    for i, cond in enumerate(conditions):
        _validate_condition(i, cond, result)

    if action:
        kind = action.get("type")
        if kind == "categorize":
            if _blank(action.get("category")):
                result.errors.append("Categorize action requires a category")
        elif kind == "rename":
            if _blank(action.get("newName")):
                result.errors.append("Rename action requires a new name")
        elif kind == "split":
            splits = action.get("splits") or []
            if not isinstance(splits, (list, tuple)) or len(splits) < 2:
                result.errors.append("Split action requires at least 2 splits")
            else:
                split_result = validate_split_allocations(splits)
                result.errors.extend(split_result.errors)
                result.warnings.extend(split_result.warnings)
        else:
            result.errors.append("Invalid action type")

    return result.finish()


def validate_split_allocations(
    splits: Sequence[Union[SplitAllocation, Mapping[str, Any]]],
) -> RuleValidationResult:
    """
    Check a split action's allocations.

    Errors: fewer than two splits, missing category, percentage outside
    0..100, negative fixed amount, percentages totalling more than 100.
    Warnings: a non-final split without an amount (it takes the remainder),
    all-percentage splits totalling less than 100.
    """
    result = RuleValidationResult()
    if len(splits) < 2:
        result.errors.append("At least 2 splits are required")
        return result.finish()

    allocations: List[SplitAllocation] = []
    for i, split in enumerate(splits):
        if isinstance(split, SplitAllocation):
            allocations.append(split)
            continue
        if not isinstance(split, Mapping):
            result.errors.append(f"Split {i + 1}: must be an object")
            return result.finish()
        try:
            allocations.append(SplitAllocation.from_dict(split))
        except (InvalidOperation, ValueError):
            result.errors.append(f"Split {i + 1}: Percentage and fixed amount must be numbers")
            return result.finish()

    last = len(allocations) - 1
    for i, alloc in enumerate(allocations):
        n = i + 1
        if _blank(alloc.category):
            result.errors.append(f"Split {n}: Category is required")
        if alloc.takes_remainder and i < last:
            result.warnings.append(f"Split {n}: No percentage or fixed amount - will get remainder")
        if alloc.percentage is not None and not (0 <= alloc.percentage <= 100):
            result.errors.append(f"Split {n}: Percentage must be between 0 and 100")
        if alloc.fixed_amount is not None and alloc.fixed_amount < 0:
            result.errors.append(f"Split {n}: Fixed amount cannot be negative")

    total = sum((a.percentage for a in allocations if a.percentage is not None), Decimal(0))
    if total > 100:
        result.errors.append(f"Split percentages sum to {total}% (must be ≤100%)")
    elif total < 100 and all(a.percentage is not None for a in allocations):
        result.warnings.append(
            f"Split percentages sum to {total}% - remainder will be uncategorized"
        )

    return result.finish()


def validate_split_transactions(
    splits: Sequence[SplitTransaction], expected_total: Decimal
) -> RuleValidationResult:
    """Check that fragments add back up to the original amount."""
    result = RuleValidationResult()
    actual = sum((s.amount for s in splits), Decimal(0))
    if abs(actual - expected_total) > _TOLERANCE:
        result.errors.append(
            f"Split amounts (${format_amount(actual)}) don't match original "
            f"(${format_amount(expected_total)})"
        )
    categories = [s.category for s in splits]
    if len(set(categories)) < len(categories):
        result.warnings.append("Multiple splits use the same category - consider consolidating")
    return result.finish()
