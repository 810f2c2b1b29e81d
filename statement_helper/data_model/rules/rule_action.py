# statement_helper/data_model/rules/rule_action.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union

from ..interfaces import RecursiveDictStr
from .rule_condition import optional_decimal


@dataclass(frozen=True)
class SplitAllocation:
    """
    One share of a split: either a ``percentage`` (0-100, of the original
    amount) or a ``fixed_amount``. An allocation with neither takes whatever
    remains.
    """

    category: str
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    memo: str = ""

    @property
    def takes_remainder(self) -> bool:
        return self.percentage is None and self.fixed_amount is None

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        d: dict[str, RecursiveDictStr] = {"category": self.category}
        if self.percentage is not None:
            d["percentage"] = str(self.percentage)
        if self.fixed_amount is not None:
            d["fixedAmount"] = str(self.fixed_amount)
        if self.memo:
            d["memo"] = self.memo
        return d

    @classmethod
    def from_dict(cls, src: Mapping[str, Any]) -> "SplitAllocation":
        return cls(
            category=str(src.get("category") or ""),
            percentage=optional_decimal(src.get("percentage")),
            fixed_amount=optional_decimal(src.get("fixedAmount")),
            memo=str(src.get("memo") or ""),
        )


@dataclass(frozen=True)
class CategorizeAction:
    category: str

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        return {"type": "categorize", "category": self.category}


@dataclass(frozen=True)
class RenameAction:
    new_name: str

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        return {"type": "rename", "newName": self.new_name}


@dataclass(frozen=True)
class SplitAction:
    splits: Tuple[SplitAllocation, ...] = ()

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        return {"type": "split", "splits": [s.to_dict() for s in self.splits]}


RuleAction = Union[CategorizeAction, RenameAction, SplitAction]


def action_from_dict(src: Mapping[str, Any]) -> RuleAction:
    """
    Rebuild a rule action from its stored form (``{"type": ..., ...}``).

    Raises:
        ValueError: for an unknown action type.
    """
    kind = src.get("type")
    if kind == "categorize":
        return CategorizeAction(category=str(src.get("category") or ""))
    if kind == "rename":
        return RenameAction(new_name=str(src.get("newName") or ""))
    if kind == "split":
        return SplitAction(
            splits=tuple(SplitAllocation.from_dict(s) for s in src.get("splits") or ())
        )
    raise ValueError(f"Unknown rule action type: {kind!r}")
