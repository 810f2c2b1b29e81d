# statement_helper/parsers_emitters/statement_format.py
"""
Format detection and parser dispatch for uploaded statement files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from statement_helper.data_model import ParsedStatement, StatementFormat
from statement_helper.utilities import read_statement_text

from .delimited_parser import DelimitedStatementParser
from .ofx_parser import OfxStatementParser

log = logging.getLogger(__name__)

OFX_SIGNATURES: Final[tuple[str, ...]] = (
    "OFXHEADER",
    "<OFX>",
    "<STMTTRN>",
    "<BANKMSGSRSV1>",
    "<CREDITCARDMSGSRSV1>",
)


def is_ofx_format(content: str) -> bool:
    """True when ``content`` carries any OFX/QBO signature token."""
    upper = content.upper()
    return any(sig in upper for sig in OFX_SIGNATURES)


def detect_format(content: str) -> StatementFormat:
    """Markup when a signature is present, otherwise delimited text."""
    return StatementFormat.OFX if is_ofx_format(content) else StatementFormat.DELIMITED


def parse_statement(content: str, filename: str) -> ParsedStatement:
    """Parse ``content`` with whichever parser its detected format calls for."""
    fmt = detect_format(content)
    log.debug("%s detected as %s", filename, fmt.value)
    if fmt is StatementFormat.OFX:
        return OfxStatementParser().parse(content, filename)
    return DelimitedStatementParser().parse(content, filename)


def load_statement(path: Path) -> ParsedStatement:
    """Read ``path`` from disk and parse it; the file name labels the account."""
    path = Path(path)
    return parse_statement(read_statement_text(path), path.name)
