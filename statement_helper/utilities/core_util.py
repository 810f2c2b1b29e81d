#!/usr/bin/env python3
"""
Core Utilities

Features:
- File I/O helpers
- String utilities
- Text matching for user-authored patterns
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import IO, Any, Literal, Optional, cast, overload

log = logging.getLogger(__name__)

# region Common functions


def is_null_or_whitespace(s: Optional[str]) -> bool:
    """Check if a string is None, empty, or consists only of whitespace."""
    return s is None or s.strip() == ""


@overload
def open_for_read(path: Path, binary: Literal[True], **kwargs: Any) -> IO[bytes]: ...
@overload
def open_for_read(path: Path, binary: Literal[False], **kwargs: Any) -> IO[str]: ...


def open_for_read(path: Path, binary: bool = False, **kwargs: Any) -> IO[Any]:
    mode = "rb" if binary else "r"
    return open(path, mode, **kwargs)


def open_for_write(
    path: Path,
    *,
    ensure_parent: bool = True,
    newline: str | None = "",
    encoding: str | None = "utf-8",
) -> IO[str]:
    """
    Open ``path`` for text writing. ``newline=""`` keeps line endings exactly as
    written (the IIF emitter produces CRLF itself).
    """
    if ensure_parent:
        path.parent.mkdir(parents=True, exist_ok=True)
    return cast(IO[str], open(path, "w", newline=newline, encoding=encoding))


def read_statement_text(path: Path, encoding: str = "utf-8-sig") -> str:
    """Read an uploaded statement file; undecodable bytes are replaced."""
    with open_for_read(path, binary=False, encoding=encoding, errors="replace") as f:
        return f.read()


# endregion Common functions

# region Pattern matching


@lru_cache(maxsize=256)
def compile_user_pattern(pattern: str, flags: int = re.IGNORECASE) -> Optional[re.Pattern[str]]:
    """
    Compile a user-supplied regular expression.

    Returns ``None`` instead of raising when the pattern is malformed.
    Results are cached, so a bad pattern is logged once rather than once per
    transaction.
    """
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        log.warning("Invalid regex pattern %r: %s", pattern, e)
        return None


def match_text(value: str, query: str, mode: str, case_sensitive: bool = False) -> bool:
    """
    Test ``value`` against ``query`` using one of the match modes
    ``contains``, ``startsWith``, ``endsWith``, ``exact`` or ``regex``.

    A regex that fails to compile never matches. Unknown modes never match.
    """
    if mode == "regex":
        flags = 0 if case_sensitive else re.IGNORECASE
        rx = compile_user_pattern(query, flags)
        return rx is not None and rx.search(value) is not None

    if not case_sensitive:
        value_cmp = value.lower()
        query_cmp = query.lower()
    else:
        value_cmp = value
        query_cmp = query

    if mode == "contains":
        return query_cmp in value_cmp
    if mode == "exact":
        return value_cmp == query_cmp
    if mode == "startsWith":
        return value_cmp.startswith(query_cmp)
    if mode == "endsWith":
        return value_cmp.endswith(query_cmp)
    return False


# endregion Pattern matching
