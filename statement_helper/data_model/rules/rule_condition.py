# statement_helper/data_model/rules/rule_condition.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from ..interfaces import RecursiveDictStr


class ConditionField(Enum):
    DESCRIPTION = "description"
    CATEGORY = "category"
    AMOUNT = "amount"


class MatchType(Enum):
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    EXACT = "exact"
    REGEX = "regex"


def optional_decimal(value: Any) -> Optional[Decimal]:
    """``None``/blank stay ``None``; numbers and numeric strings become Decimal."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class RuleCondition:
    """
    One test a rule applies to a transaction.

    Text fields (description, category) use ``match_type`` and ``value``.
    The amount field uses the inclusive ``[min_amount, max_amount]`` range;
    a missing bound leaves that side open.
    """

    field: ConditionField
    match_type: MatchType = MatchType.CONTAINS
    value: str = ""
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        d: dict[str, RecursiveDictStr] = {
            "field": self.field.value,
            "matchType": self.match_type.value,
            "value": self.value,
        }
        if self.min_amount is not None:
            d["minAmount"] = str(self.min_amount)
        if self.max_amount is not None:
            d["maxAmount"] = str(self.max_amount)
        return d

    @classmethod
    def from_dict(cls, src: Mapping[str, Any]) -> "RuleCondition":
        return cls(
            field=ConditionField(src["field"]),
            match_type=MatchType(src.get("matchType") or MatchType.CONTAINS.value),
            value=str(src.get("value") or ""),
            min_amount=optional_decimal(src.get("minAmount")),
            max_amount=optional_decimal(src.get("maxAmount")),
        )
