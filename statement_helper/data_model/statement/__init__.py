from .parsed_statement import OfxStatement, ParsedStatement
from .split_transaction import SplitTransaction
from .transaction import UNCATEGORIZED, Transaction

__all__ = [
    "UNCATEGORIZED",
    "Transaction",
    "SplitTransaction",
    "ParsedStatement",
    "OfxStatement",
]
