from .column_mapping import (
    COLUMN_SYNONYMS,
    column_synonyms,
    find_column,
    infer_account_from_filename,
    resolve_columns,
)
from .config_logging import LOG_DIR, LOGGING
from .converters_scalar import (
    CENT,
    ZERO,
    format_amount,
    parse_numeric,
    parse_ofx_date,
    round_cents,
    to_date,
    try_parse_numeric,
)
from .core_util import (
    compile_user_pattern,
    is_null_or_whitespace,
    match_text,
    open_for_read,
    open_for_write,
    read_statement_text,
)

__all__ = [
    "CENT",
    "ZERO",
    "COLUMN_SYNONYMS",
    "column_synonyms",
    "find_column",
    "resolve_columns",
    "infer_account_from_filename",
    "is_null_or_whitespace",
    "to_date",
    "parse_numeric",
    "try_parse_numeric",
    "parse_ofx_date",
    "round_cents",
    "format_amount",
    "compile_user_pattern",
    "match_text",
    "open_for_read",
    "open_for_write",
    "read_statement_text",
    "LOG_DIR",
    "LOGGING",
]
