# statement_helper/data_model/rules/custom_rule.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Tuple

from ..interfaces import RecursiveDictStr
from .rule_action import RuleAction, action_from_dict
from .rule_condition import RuleCondition


class ConditionLogic(Enum):
    """How a rule combines its conditions: every one (ALL) or at least one (ANY)."""

    ALL = "AND"
    ANY = "OR"


@dataclass(frozen=True)
class CustomRule:
    """
    A user-authored transformation. Lower ``priority`` runs first.

    The stored form (``to_dict``/``from_dict``) uses the camelCase keys of the
    rule-editor JSON, so exported rule files round-trip unchanged.
    """

    id: str
    name: str
    action: RuleAction
    conditions: Tuple[RuleCondition, ...] = ()
    condition_logic: ConditionLogic = ConditionLogic.ALL
    enabled: bool = True
    priority: int = 50
    created_at: str = ""
    updated_at: str = field(default="", compare=False)

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        return {
            "id": self.id,
            "name": self.name,
            "enabled": "true" if self.enabled else "false",
            "priority": str(self.priority),
            "conditions": [c.to_dict() for c in self.conditions],
            "conditionLogic": self.condition_logic.value,
            "action": self.action.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_json_obj(self) -> dict[str, Any]:
        """Like :meth:`to_dict` but with native JSON booleans and numbers."""
        d: dict[str, Any] = dict(self.to_dict())
        d["enabled"] = self.enabled
        d["priority"] = self.priority
        return d

    @classmethod
    def from_dict(cls, src: Mapping[str, Any]) -> "CustomRule":
        """
        Raises:
            KeyError, TypeError, ValueError: when ``src`` is not a rule.
        """
        enabled = src.get("enabled", True)
        if isinstance(enabled, str):
            enabled = enabled.strip().lower() in {"1", "true", "yes", "y", "on"}
        return cls(
            id=str(src["id"]),
            name=str(src.get("name") or ""),
            enabled=bool(enabled),
            priority=int(src.get("priority", 50)),
            conditions=tuple(RuleCondition.from_dict(c) for c in src.get("conditions") or ()),
            condition_logic=ConditionLogic(src.get("conditionLogic") or ConditionLogic.ALL.value),
            action=action_from_dict(src["action"]),
            created_at=str(src.get("createdAt") or ""),
            updated_at=str(src.get("updatedAt") or ""),
        )
