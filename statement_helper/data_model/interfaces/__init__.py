# statement_helper/data_model/interfaces/__init__.py
"""
Interfaces and Enums for the statement data model.
"""

from .enum_statement_format import StatementFormat
from .enum_transaction_type import TransactionType
from .i_rule_store import IRuleStore
from .i_statement_parser import IStatementParser
from .i_to_dict import IToDict, RecursiveDictStr
from .i_transaction import ITransaction

__all__ = [
    "StatementFormat",
    "TransactionType",
    "IRuleStore",
    "IStatementParser",
    "IToDict",
    "ITransaction",
    "RecursiveDictStr",
]
