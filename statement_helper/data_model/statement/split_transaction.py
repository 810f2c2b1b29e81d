# statement_helper/data_model/statement/split_transaction.py
from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import TYPE_CHECKING

from ..interfaces import IToDict, ITransaction, RecursiveDictStr
from .transaction import Transaction


@dataclass(frozen=True)
class SplitTransaction(Transaction):
    """
    One fragment of an original transaction that a split rule divided.

    All fragments of one original share ``split_parent_id`` and
    ``original_amount``; their amounts sum to ``original_amount`` and
    ``split_index`` gives their order.
    """

    split_parent_id: str = ""
    split_index: int = 0
    original_amount: Decimal = Decimal(0)
    split_memo: str = ""

    @property
    def is_split(self) -> bool:
        return True

    @classmethod
    def from_transaction(
        cls,
        txn: Transaction,
        *,
        amount: Decimal,
        category: str,
        split_parent_id: str,
        split_index: int,
        original_amount: Decimal,
        split_memo: str = "",
    ) -> "SplitTransaction":
        """Build a fragment that inherits every base field of ``txn``."""
        base = {f.name: getattr(txn, f.name) for f in fields(Transaction)}
        base.update(amount=amount, category=category)
        return cls(
            **base,
            split_parent_id=split_parent_id,
            split_index=split_index,
            original_amount=original_amount,
            split_memo=split_memo,
        )

    def to_dict(self) -> dict[str, RecursiveDictStr]:
        d = super().to_dict()
        d.update(
            {
                "is_split": "true",
                "split_parent_id": self.split_parent_id,
                "split_index": str(self.split_index),
                "original_amount": str(self.original_amount),
            }
        )
        if self.split_memo:
            d["split_memo"] = self.split_memo
        return d


if TYPE_CHECKING:
    _is_i_transaction: type[ITransaction] = SplitTransaction
    _is_IToDict: type[IToDict] = SplitTransaction
