# statement_helper/data_model/__init__.py
from .interfaces import (
    IRuleStore,
    IStatementParser,
    IToDict,
    ITransaction,
    RecursiveDictStr,
    StatementFormat,
    TransactionType,
)
from .rules import (
    CategorizeAction,
    ConditionField,
    ConditionLogic,
    CustomRule,
    MatchType,
    RenameAction,
    RuleAction,
    RuleCondition,
    SplitAction,
    SplitAllocation,
)
from .statement import (
    UNCATEGORIZED,
    OfxStatement,
    ParsedStatement,
    SplitTransaction,
    Transaction,
)

__all__ = [
    "IRuleStore", "IStatementParser", "IToDict", "ITransaction",
    "RecursiveDictStr", "StatementFormat", "TransactionType",
    "CategorizeAction", "ConditionField", "ConditionLogic", "CustomRule",
    "MatchType", "RenameAction", "RuleAction", "RuleCondition", "SplitAction",
    "SplitAllocation", "UNCATEGORIZED", "OfxStatement", "ParsedStatement",
    "SplitTransaction", "Transaction"]
