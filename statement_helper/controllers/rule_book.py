# statement_helper/controllers/rule_book.py
"""
Persistence and management of custom rules.

The rule book keeps the whole rule list as one JSON string under a single key
of an injected :class:`IRuleStore`. Two stores ship here: an in-memory one
(tests, one-shot CLI runs) and a JSON file on disk.
"""

from __future__ import annotations

import json
import logging
import random
import string
import time
from dataclasses import replace
from datetime import datetime, timezone
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from statement_helper.data_model import (
    CategorizeAction,
    ConditionField,
    ConditionLogic,
    CustomRule,
    IRuleStore,
    MatchType,
    RuleCondition,
    SplitAction,
    SplitAllocation,
)
from statement_helper.utilities import open_for_read, open_for_write

from .rule_engine import active_rules
from .rule_validators import RuleValidationResult, validate_custom_rule

log = logging.getLogger(__name__)

RULES_STORAGE_KEY = "financeRules"

RuleDraft = Union[CustomRule, Mapping[str, Any]]

_MALFORMED = (json.JSONDecodeError, KeyError, TypeError, ValueError, InvalidOperation, AttributeError)


class InvalidRuleError(ValueError):
    """Raised when a rule that fails validation is about to be saved."""

    def __init__(self, result: RuleValidationResult):
        super().__init__("; ".join(result.errors) or "Invalid rule")
        self.result = result


# region Stores


class InMemoryRuleStore:
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileRuleStore:
    """Key/value store persisted as one JSON object in ``path``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open_for_read(self.path, binary=False, encoding="utf-8") as f:
            text = f.read()
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def put(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (json.JSONDecodeError, ValueError):
            log.error("Rule store %s is corrupt; rewriting it", self.path)
            data = {}
        data[key] = value
        with open_for_write(self.path, encoding="utf-8") as f:
            json.dump(data, f, indent=2)


# endregion Stores


def generate_rule_id() -> str:
    """``rule_<epoch millis>_<9 random base-36 chars>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"rule_{int(time.time() * 1000)}_{suffix}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_categorization_rule(
    name: str,
    pattern: str,
    category: str,
    match_type: MatchType = MatchType.CONTAINS,
) -> CustomRule:
    """Unsaved rule: description matches ``pattern`` -> set ``category``."""
    return CustomRule(
        id="",
        name=name,
        enabled=True,
        priority=50,
        conditions=(RuleCondition(ConditionField.DESCRIPTION, match_type, pattern),),
        condition_logic=ConditionLogic.ALL,
        action=CategorizeAction(category),
    )


def create_split_rule(
    name: str,
    pattern: str,
    splits: Sequence[SplitAllocation],
    match_type: MatchType = MatchType.CONTAINS,
) -> CustomRule:
    """Unsaved split rule; priority 10 so it runs before categorization rules."""
    return CustomRule(
        id="",
        name=name,
        enabled=True,
        priority=10,
        conditions=(RuleCondition(ConditionField.DESCRIPTION, match_type, pattern),),
        condition_logic=ConditionLogic.ALL,
        action=SplitAction(tuple(splits)),
    )


class RuleBook:
    """
    CRUD over the persisted rule list.

    Invalid rules are never stored: :meth:`add_rule` and :meth:`update_rule`
    raise :class:`InvalidRuleError`; :meth:`import_rules` skips them.
    """

    def __init__(
        self,
        store: IRuleStore,
        key: str = RULES_STORAGE_KEY,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.key = key
        self.clock = clock

    def load_rules(self) -> List[CustomRule]:
        """Stored rules, or ``[]`` when nothing (or nothing readable) is stored."""
        try:
            raw = self.store.get(self.key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored rules are not a list")
            return [CustomRule.from_dict(r) for r in data]
        except _MALFORMED as e:
            log.error("Failed to parse stored rules: %s", e)
            return []

    def save_rules(self, rules: Sequence[CustomRule]) -> None:
        self.store.put(self.key, json.dumps([r.to_json_obj() for r in rules]))

    def active_rules(self) -> List[CustomRule]:
        return active_rules(self.load_rules())

    def add_rule(self, draft: RuleDraft) -> CustomRule:
        """Validate ``draft``, give it an id and timestamps, and store it."""
        result = validate_custom_rule(draft)
        if not result.valid:
            raise InvalidRuleError(result)
        rule = draft if isinstance(draft, CustomRule) else CustomRule.from_dict({**draft, "id": ""})
        stamp = _iso(self.clock())
        rule = replace(rule, id=generate_rule_id(), created_at=stamp, updated_at=stamp)

        rules = self.load_rules()
        rules.append(rule)
        self.save_rules(rules)
        log.info("Added rule %s (%s)", rule.id, rule.name)
        return rule

    def update_rule(self, rule_id: str, updates: Mapping[str, Any]) -> Optional[CustomRule]:
        """
        Merge camelCase ``updates`` into the stored rule ``rule_id``.

        Returns the updated rule, or ``None`` when no rule has that id.
        """
        rules = self.load_rules()
        for i, existing in enumerate(rules):
            if existing.id == rule_id:
                break
        else:
            return None

        merged: Dict[str, Any] = {**existing.to_json_obj(), **updates, "id": rule_id}
        result = validate_custom_rule(merged)
        if not result.valid:
            raise InvalidRuleError(result)
        merged["updatedAt"] = _iso(self.clock())
        rules[i] = CustomRule.from_dict(merged)
        self.save_rules(rules)
        return rules[i]

    def delete_rule(self, rule_id: str) -> bool:
        rules = self.load_rules()
        kept = [r for r in rules if r.id != rule_id]
        if len(kept) == len(rules):
            return False
        self.save_rules(kept)
        return True

    def export_rules(self) -> str:
        """Pretty-printed JSON backup of every stored rule."""
        return json.dumps([r.to_json_obj() for r in self.load_rules()], indent=2)

    def import_rules(self, json_text: str, merge: bool = True) -> int:
        """
        Load rules from a backup made by :meth:`export_rules`.

        ``merge`` keeps existing rules and adds only unseen ids; otherwise the
        stored list is replaced. Returns how many rules were imported (0 when
        ``json_text`` is not a rule list).
        """
        try:
            data = json.loads(json_text)
            if not isinstance(data, list):
                raise ValueError("Invalid format")
        except (json.JSONDecodeError, ValueError) as e:
            log.error("Failed to import rules: %s", e)
            return 0

        imported: List[CustomRule] = []
        for item in data:
            try:
                if not isinstance(item, Mapping) or not validate_custom_rule(item).valid:
                    log.warning("Skipping invalid rule in import: %r", item)
                    continue
                imported.append(CustomRule.from_dict(item))
            except _MALFORMED as e:
                log.warning("Skipping malformed rule in import: %s", e)

        if merge:
            existing = self.load_rules()
            seen = {r.id for r in existing}
            new_rules = [r for r in imported if r.id not in seen]
            self.save_rules(existing + new_rules)
            return len(new_rules)

        self.save_rules(imported)
        return len(imported)
