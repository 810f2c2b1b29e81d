from .custom_rule import ConditionLogic, CustomRule
from .rule_action import (
    CategorizeAction,
    RenameAction,
    RuleAction,
    SplitAction,
    SplitAllocation,
    action_from_dict,
)
from .rule_condition import ConditionField, MatchType, RuleCondition

__all__ = [
    "ConditionField",
    "MatchType",
    "RuleCondition",
    "SplitAllocation",
    "CategorizeAction",
    "RenameAction",
    "SplitAction",
    "RuleAction",
    "action_from_dict",
    "ConditionLogic",
    "CustomRule",
]
