from .categorizer import CATEGORY_RULES, categorize_all, categorize_transaction
from .csv_validators import (
    DEFAULT_REQUIRED_COLUMNS,
    CsvValidationOptions,
    ValidationError,
    ValidationResult,
    format_validation_errors,
    validate_balance_consistency,
    validate_csv_parseable,
    validate_parsed_csv,
    validate_required_columns,
)
from .data_session import DataSession
from .iif_validator import IifValidationResult, IifValidationStats, validate_iif
from .insights import NovelInsights, generate_novel_insights
from .rule_book import (
    InMemoryRuleStore,
    InvalidRuleError,
    JsonFileRuleStore,
    RuleBook,
    create_categorization_rule,
    create_split_rule,
    generate_rule_id,
)
from .rule_engine import apply_rules, apply_rules_to_all, matches_rule
from .rule_validators import (
    RuleValidationResult,
    validate_custom_rule,
    validate_split_allocations,
    validate_split_transactions,
)
from .summary import ProcessedData, extract_merchant, process_statements

__all__ = [
    "CATEGORY_RULES",
    "categorize_transaction",
    "categorize_all",
    "DEFAULT_REQUIRED_COLUMNS",
    "CsvValidationOptions",
    "ValidationError",
    "ValidationResult",
    "validate_csv_parseable",
    "validate_required_columns",
    "validate_balance_consistency",
    "validate_parsed_csv",
    "format_validation_errors",
    "DataSession",
    "IifValidationResult",
    "IifValidationStats",
    "validate_iif",
    "NovelInsights",
    "generate_novel_insights",
    "InMemoryRuleStore",
    "JsonFileRuleStore",
    "InvalidRuleError",
    "RuleBook",
    "generate_rule_id",
    "create_categorization_rule",
    "create_split_rule",
    "apply_rules",
    "apply_rules_to_all",
    "matches_rule",
    "RuleValidationResult",
    "validate_custom_rule",
    "validate_split_allocations",
    "validate_split_transactions",
    "ProcessedData",
    "process_statements",
    "extract_merchant",
]
