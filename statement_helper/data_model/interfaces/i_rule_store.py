# statement_helper/data_model/interfaces/i_rule_store.py
from __future__ import annotations

from typing import Optional

from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class IRuleStore(Protocol):
    """Key/value persistence used by the rule book (string values only)."""

    def get(self, key: str) -> Optional[str]: ...
    def put(self, key: str, value: str) -> None: ...
