# statement_helper/data_model/statement/transaction.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ..interfaces import IToDict, ITransaction, RecursiveDictStr, TransactionType

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Transaction:
    """
    Canonical unit of financial activity produced by every statement parser.

    ``amount`` is a non-negative magnitude; direction is carried only by
    ``type``. ``balance`` is the account running balance after this
    transaction (zero when the source does not say).
    """

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: str = UNCATEGORIZED
    balance: Decimal = Decimal(0)
    account: str = ""

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(
                f"Transaction amount must be non-negative (got {self.amount}); "
                "use type to encode direction"
            )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by ``type`` (expenses negative)."""
        return self.amount if self.type is TransactionType.INCOME else -self.amount

    @property
    def is_split(self) -> bool:
        return False

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    def with_changes(self, **changes: Any) -> "Transaction":
        """Return a copy with ``changes`` applied (the original is untouched)."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "category": self.category,
            "balance": str(self.balance),
            "account": self.account,
        }


if TYPE_CHECKING:
    _is_i_transaction: type[ITransaction] = Transaction
    _is_IToDict: type[IToDict] = Transaction
