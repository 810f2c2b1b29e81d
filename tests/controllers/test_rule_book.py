from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from statement_helper.controllers import (
    InMemoryRuleStore,
    InvalidRuleError,
    JsonFileRuleStore,
    RuleBook,
    create_categorization_rule,
    create_split_rule,
    generate_rule_id,
)
from statement_helper.controllers.rule_book import RULES_STORAGE_KEY
from statement_helper.data_model import CategorizeAction, SplitAction, SplitAllocation


def _clock():
    return datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def book() -> RuleBook:
    return RuleBook(InMemoryRuleStore(), clock=_clock)


def test_generate_rule_id_shape():
    assert re.fullmatch(r"rule_\d{13}_[a-z0-9]{9}", generate_rule_id())


def test_factories_set_priorities():
    cat = create_categorization_rule("Coffee", "starbucks", "Coffee")
    split = create_split_rule("Costco", "costco", [SplitAllocation("A", Decimal(50)), SplitAllocation("B")])

    assert cat.priority == 50 and cat.id == ""
    assert isinstance(cat.action, CategorizeAction)
    assert split.priority == 10
    assert isinstance(split.action, SplitAction)


def test_add_rule_assigns_id_and_timestamps(book):
    # Act
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))

    # Assert
    assert rule.id.startswith("rule_")
    assert rule.created_at == rule.updated_at == "2024-05-01T12:30:00.000Z"
    assert book.load_rules() == [rule]


def test_add_rule_accepts_camel_case_draft(book):
    draft = {
        "name": "Gym",
        "conditions": [{"field": "description", "matchType": "contains", "value": "equinox"}],
        "action": {"type": "categorize", "category": "Fitness"},
    }
    rule = book.add_rule(draft)
    assert rule.action == CategorizeAction("Fitness")
    assert rule.priority == 50


def test_add_invalid_rule_raises_and_stores_nothing(book):
    with pytest.raises(InvalidRuleError) as exc_info:
        book.add_rule(create_categorization_rule("", "starbucks", "Coffee"))

    assert "Rule name is required" in exc_info.value.result.errors
    assert book.load_rules() == []


def test_update_rule_merges_camel_case_fields(book):
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))

    updated = book.update_rule(rule.id, {"enabled": False, "priority": 5})

    assert updated is not None
    assert updated.enabled is False
    assert updated.priority == 5
    assert updated.id == rule.id
    assert book.active_rules() == []


def test_update_unknown_or_invalid(book):
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))

    assert book.update_rule("rule_missing", {"name": "x"}) is None
    with pytest.raises(InvalidRuleError):
        book.update_rule(rule.id, {"conditions": []})


def test_delete_rule(book):
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))
    assert book.delete_rule("nope") is False
    assert book.delete_rule(rule.id) is True
    assert book.load_rules() == []


def test_active_rules_sorted_by_priority(book):
    low = book.add_rule(create_categorization_rule("Later", "a", "A"))
    high = book.add_rule(create_split_rule("First", "b", [SplitAllocation("A", Decimal(50)), SplitAllocation("B")]))
    assert [r.id for r in book.active_rules()] == [high.id, low.id]


def test_corrupt_storage_loads_as_empty(caplog):
    caplog.set_level(logging.ERROR)
    book = RuleBook(InMemoryRuleStore({RULES_STORAGE_KEY: "{not json"}))

    assert book.load_rules() == []
    assert "Failed to parse stored rules" in caplog.text


@pytest.mark.parametrize("content", ["{not json", "[]"])
def test_corrupt_rule_file_loads_as_empty(tmp_path, caplog, content):
    caplog.set_level(logging.ERROR)
    path = tmp_path / "rules.json"
    path.write_text(content, encoding="utf-8")
    book = RuleBook(JsonFileRuleStore(path))

    assert book.load_rules() == []
    assert book.active_rules() == []
    assert "Failed to parse stored rules" in caplog.text


def test_add_rule_rejects_malformed_draft(book):
    with pytest.raises(InvalidRuleError, match="Condition 1: must be an object"):
        book.add_rule({"name": "Bad", "conditions": ["oops"], "action": {"type": "categorize", "category": "X"}})
    assert book.load_rules() == []


def test_export_import_round_trip(book):
    # Arrange
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))
    backup = book.export_rules()
    other = RuleBook(InMemoryRuleStore(), clock=_clock)

    # Act
    count = other.import_rules(backup)

    # Assert
    assert count == 1
    assert other.load_rules() == [rule]
    assert json.loads(backup)[0]["conditionLogic"] == "AND"


def test_import_merge_skips_known_ids_and_invalid_items(book):
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))
    backup = json.loads(book.export_rules())
    fresh = dict(backup[0], id="rule_other", name="Coffee 2")
    payload = json.dumps(backup + [fresh, {"id": "rule_bad", "name": ""}, "junk"])

    assert book.import_rules(payload, merge=True) == 1
    assert [r.id for r in book.load_rules()] == [rule.id, "rule_other"]


def test_import_replace(book):
    book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))
    assert book.import_rules("[]", merge=False) == 0
    assert book.load_rules() == []


@pytest.mark.parametrize("text", ["{oops", '{"rules": []}'])
def test_import_rejects_non_list(book, text):
    assert book.import_rules(text) == 0


def test_json_file_store_persists(tmp_path):
    path = tmp_path / "rules.json"
    book = RuleBook(JsonFileRuleStore(path), clock=_clock)
    rule = book.add_rule(create_categorization_rule("Coffee", "starbucks", "Coffee"))

    reopened = RuleBook(JsonFileRuleStore(path))

    assert reopened.load_rules() == [rule]
    assert RULES_STORAGE_KEY in json.loads(path.read_text(encoding="utf-8"))


def test_json_file_store_rewrites_corrupt_file(tmp_path, caplog):
    caplog.set_level(logging.ERROR)
    path = tmp_path / "rules.json"
    path.write_text("garbage", encoding="utf-8")

    JsonFileRuleStore(path).put("k", "v")

    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
    assert "is corrupt" in caplog.text
