# statement_helper/data_model/interfaces/i_transaction.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from typing_extensions import Protocol, runtime_checkable

from .enum_transaction_type import TransactionType
from .i_to_dict import IToDict


@runtime_checkable
class ITransaction(IToDict, Protocol):
    """Structural shape of a canonical statement transaction."""

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    balance: Decimal
    account: str

    @property
    def signed_amount(self) -> Decimal: ...
    @property
    def is_split(self) -> bool: ...
