# statement_helper/controllers/data_session.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from statement_helper.data_model import (
    CustomRule,
    OfxStatement,
    ParsedStatement,
    StatementFormat,
    Transaction,
)
from statement_helper.parsers_emitters import (
    DelimitedStatementParser,
    IifExportOptions,
    OfxStatementParser,
    detect_format,
    generate_iif,
    generate_iif_with_accounts,
    read_delimited_rows,
)
from statement_helper.utilities import read_statement_text

from .categorizer import categorize_all
from .csv_validators import (
    CsvValidationOptions,
    ValidationError,
    ValidationResult,
    validate_parsed_csv,
)
from .iif_validator import IifValidationResult, validate_iif
from .insights import NovelInsights, generate_novel_insights
from .rule_book import RuleBook
from .rule_engine import IdFactory, apply_rules_to_all
from .summary import ProcessedData, merge_transactions, process_statements

log = logging.getLogger(__name__)


@dataclass
class DataSession:
    """
    One user's working set of uploaded statements.

    Responsibilities:
    • Load and memoize each statement file once per path.
    • Validate each file on load; problems are recorded against the file
      name and never stop the other files from loading.
    • Run the pipeline: merge, categorize, apply custom rules, summarize,
      export to IIF with a post-export balance check.
    """

    rule_book: Optional[RuleBook] = None
    validation_options: CsvValidationOptions = field(default_factory=CsvValidationOptions)
    id_factory: Optional[IdFactory] = None

    statements: Dict[Path, ParsedStatement] = field(default_factory=dict)
    validations: Dict[str, ValidationResult] = field(default_factory=dict)

    # region Loading

    def load_file(self, path: Path) -> Optional[ParsedStatement]:
        """Parse and validate ``path``; ``None`` when the file cannot be read."""
        path = Path(path)
        if path in self.statements:
            log.debug("Reusing cached statement for %s", path)
            return self.statements[path]

        log.info("Loading statement: %s", path)
        try:
            content = read_statement_text(path)
        except OSError as e:
            log.error("Could not read %s: %s", path, e)
            self.validations[path.name] = ValidationResult(
                valid=False, errors=[ValidationError(file=path.name, message=f"Could not read file: {e}")]
            )
            return None

        statement = self.parse_content(content, path.name)
        self.statements[path] = statement
        return statement

    def load_files(self, paths: Iterable[Path]) -> List[ParsedStatement]:
        loaded = [self.load_file(p) for p in paths]
        return [s for s in loaded if s is not None]

    def parse_content(self, content: str, filename: str) -> ParsedStatement:
        """Parse already-read file text, recording its validation result."""
        if detect_format(content) is StatementFormat.OFX:
            statement: ParsedStatement = OfxStatementParser().parse(content, filename)
            warnings = statement.warnings if isinstance(statement, OfxStatement) else []
            self.validations[filename] = ValidationResult(valid=True, warnings=list(warnings))
            return statement

        headers, rows = read_delimited_rows(content)
        result = validate_parsed_csv(rows, headers, filename, self.validation_options)
        self.validations[filename] = result
        if not result.valid:
            log.warning("%s failed validation with %d errors", filename, len(result.errors))
        return DelimitedStatementParser().parse_rows(headers, rows, filename)

    def invalidate(self, path: Optional[Path] = None) -> None:
        """Forget one loaded file, or all of them."""
        if path is None:
            self.statements.clear()
            self.validations.clear()
            return
        path = Path(path)
        self.statements.pop(path, None)
        self.validations.pop(path.name, None)

    # endregion Loading

    # region Pipeline

    @property
    def parsed_statements(self) -> List[ParsedStatement]:
        return list(self.statements.values())

    @property
    def is_valid(self) -> bool:
        return all(v.valid for v in self.validations.values())

    def rules(self) -> List[CustomRule]:
        return self.rule_book.active_rules() if self.rule_book else []

    def transactions(self, rules: Optional[List[CustomRule]] = None) -> List[Transaction]:
        """Merged, categorized and rule-transformed transactions, newest first."""
        merged = merge_transactions(self.parsed_statements)
        categorized = categorize_all(merged)
        active = self.rules() if rules is None else rules
        return apply_rules_to_all(categorized, active, id_factory=self.id_factory)

    def summarize(self, transactions: Optional[List[Transaction]] = None) -> ProcessedData:
        txns = self.transactions() if transactions is None else transactions
        return process_statements(self.parsed_statements, txns)

    def insights(self, today: Optional[date] = None) -> NovelInsights:
        txns = self.transactions()
        return generate_novel_insights(txns, self.summarize(txns), today)

    def export_iif(
        self,
        options: Optional[IifExportOptions] = None,
        *,
        with_accounts: bool = False,
    ) -> Tuple[str, IifValidationResult]:
        """Render the session as IIF and check the result's balances."""
        txns = self.transactions()
        if with_accounts:
            content = generate_iif_with_accounts(txns, options)
        else:
            content = generate_iif(txns, options)
        result = validate_iif(content)
        if not result.valid:
            log.warning("IIF export failed validation: %s", "; ".join(result.errors))
        return content, result

    # endregion Pipeline
