from .delimited_parser import (
    MAX_ROWS,
    DelimitedStatementParser,
    parse_delimited,
    read_delimited_rows,
)
from .iif_emitter import (
    DEFAULT_CATEGORY_MAPPING,
    IifExportOptions,
    escape_iif,
    generate_iif,
    generate_iif_with_accounts,
    get_account_for_category,
    write_iif,
)
from .ofx_parser import (
    OfxStatementParser,
    compose_description,
    extract_blocks,
    extract_tag,
    parse_ofx,
)
from .statement_format import detect_format, is_ofx_format, load_statement, parse_statement

__all__ = [
    "MAX_ROWS",
    "DelimitedStatementParser",
    "parse_delimited",
    "read_delimited_rows",
    "OfxStatementParser",
    "compose_description",
    "extract_tag",
    "extract_blocks",
    "parse_ofx",
    "detect_format",
    "is_ofx_format",
    "parse_statement",
    "load_statement",
    "DEFAULT_CATEGORY_MAPPING",
    "IifExportOptions",
    "escape_iif",
    "get_account_for_category",
    "generate_iif",
    "generate_iif_with_accounts",
    "write_iif",
]
