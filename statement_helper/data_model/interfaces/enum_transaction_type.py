from enum import Enum


class TransactionType(Enum):
    """
    Direction of money movement. Amounts are always non-negative magnitudes;
    the sign lives here.
    """
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def sign(self) -> int:
        return 1 if self is TransactionType.INCOME else -1

    def __str__(self) -> str:
        return self.value
