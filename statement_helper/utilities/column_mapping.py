# statement_helper/utilities/column_mapping.py
"""
Header synonym table shared by the delimited parser and the CSV validators.

Banks spell the same column many different ways. Each canonical field maps to
the header spellings recognized for it; lookup is a case-insensitive exact
match on the trimmed header, and the first synonym (in table order) that is
present wins. There is no fuzzy matching.
"""

from __future__ import annotations

from typing import Final, Mapping, Optional, Sequence

COLUMN_SYNONYMS: Final[Mapping[str, tuple[str, ...]]] = {
    "date": ("date", "trans date", "transaction date", "posted date", "posting date"),
    "description": (
        "description",
        "memo",
        "details",
        "transaction description",
        "payee",
    ),
    "amount": ("amount", "transaction amount"),
    "withdrawal": ("withdrawal", "withdrawals", "debit", "debits", "amount debit"),
    "deposit": ("deposit", "deposits", "credit", "credits", "amount credit"),
    "balance": ("balance", "running balance", "available balance"),
    "category": ("category", "type", "transaction type"),
}


def column_synonyms(canonical: str) -> tuple[str, ...]:
    """Return the recognized spellings for ``canonical`` (itself if unknown)."""
    return COLUMN_SYNONYMS.get(canonical.lower(), (canonical.lower(),))


def find_column(headers: Sequence[str], canonical: str) -> Optional[str]:
    """
    Resolve ``canonical`` against the actual ``headers``.

    Returns the header exactly as it appears in ``headers`` or ``None``.
    """
    lower_headers = [h.lower().strip() for h in headers]
    for spelling in column_synonyms(canonical):
        if spelling in lower_headers:
            return headers[lower_headers.index(spelling)]
    return None


def resolve_columns(
    headers: Sequence[str], canonical: Sequence[str] = tuple(COLUMN_SYNONYMS)
) -> dict[str, Optional[str]]:
    """Resolve every field in ``canonical``; unresolved fields map to ``None``."""
    return {name: find_column(headers, name) for name in canonical}


def infer_account_from_filename(filename: str) -> str:
    """Guess an account display label from an uploaded file's name."""
    lower = filename.lower()
    if "check" in lower or "chk" in lower:
        return "Checking"
    if "saving" in lower or "sav" in lower:
        return "Savings"
    if "credit" in lower or "cc" in lower:
        return "Credit Card"
    return "Account"
