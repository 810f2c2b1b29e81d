# statement_helper/data_model/interfaces/i_statement_parser.py
"""
Runtime-checkable protocol for statement parsers.

A parser converts the full text of one uploaded file into a statement object
(``ParsedStatement`` or a richer subclass). Implementations must be pure:
they perform no I/O, keep no state between calls, and report lossy input by
dropping rows or logging rather than raising.
"""

from __future__ import annotations

from typing import TypeVar

from typing_extensions import Protocol, runtime_checkable

from .enum_statement_format import StatementFormat

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class IStatementParser(Protocol[T_co]):
    """
    Attributes
    ----------
    file_format : StatementFormat
        The concrete format handled by this implementation, used for dispatch
        and log labels.
    """

    file_format: StatementFormat

    def parse(self, content: str, filename: str = ...) -> T_co:
        """Parse ``content``; ``filename`` is a label for account inference."""
        ...
