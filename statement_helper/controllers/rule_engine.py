# statement_helper/controllers/rule_engine.py
"""
Custom rule engine.

Rules are applied in ascending priority. Each rule is tested against every
fragment produced so far, so a later split rule can subdivide a fragment of
an earlier one. The engine never raises on user data: a rule whose action
cannot be carried out leaves the transaction untouched.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from statement_helper.data_model import (
    UNCATEGORIZED,
    CategorizeAction,
    ConditionField,
    ConditionLogic,
    CustomRule,
    RenameAction,
    RuleCondition,
    SplitAction,
    SplitAllocation,
    SplitTransaction,
    Transaction,
)
from statement_helper.utilities import CENT, ZERO, match_text, round_cents

log = logging.getLogger(__name__)

IdFactory = Callable[[], str]

REMAINDER_MEMO = "Remaining amount"


def new_split_id() -> str:
    return f"split_{uuid.uuid4().hex}"


# region Matching


def matches_condition(txn: Transaction, condition: RuleCondition) -> bool:
    if condition.field is ConditionField.AMOUNT:
        if condition.min_amount is not None and txn.amount < condition.min_amount:
            return False
        if condition.max_amount is not None and txn.amount > condition.max_amount:
            return False
        return True

    value = txn.description if condition.field is ConditionField.DESCRIPTION else txn.category
    return match_text(value or "", condition.value, condition.match_type.value)


def matches_rule(txn: Transaction, rule: CustomRule) -> bool:
    """A disabled rule, or one without conditions, never matches."""
    if not rule.enabled or not rule.conditions:
        return False
    results = (matches_condition(txn, c) for c in rule.conditions)
    if rule.condition_logic is ConditionLogic.ALL:
        return all(results)
    return any(results)


# endregion Matching

# region Splitting


def is_valid_split(splits: Sequence[SplitAllocation]) -> bool:
    """A split the engine can carry out: non-empty, non-negative, at most 100%."""
    if not splits:
        return False
    total_pct = ZERO
    for alloc in splits:
        if alloc.percentage is not None:
            if alloc.percentage < 0:
                return False
            total_pct += alloc.percentage
        if alloc.fixed_amount is not None and alloc.fixed_amount < 0:
            return False
    return total_pct <= 100


def split_transaction(
    txn: Transaction,
    splits: Sequence[SplitAllocation],
    split_parent_id: str,
) -> List[SplitTransaction]:
    """
    Divide ``txn`` into one fragment per allocation.

    Walks ``splits`` in order with a running remainder starting at the
    transaction's amount M. A fixed amount takes ``min(fixed, remainder)``,
    a percentage takes ``M * pct / 100`` (of M, not of the remainder) and an
    allocation with neither takes the whole remainder. No allocation takes
    more than what is left. Amounts are rounded to cents as they are taken.
    A leftover above one cent becomes an extra ``Uncategorized`` fragment;
    a smaller leftover is added to the last fragment, so the fragments
    always sum to M exactly.

    Splitting an existing fragment keeps its parent id and original amount.
    """
    total = txn.amount
    if isinstance(txn, SplitTransaction):
        original = txn.original_amount
    else:
        original = total

    count = len(splits)
    remainder = total
    fragments: List[SplitTransaction] = []
    for index, alloc in enumerate(splits):
        if alloc.fixed_amount is not None:
            share = min(alloc.fixed_amount, remainder)
        elif alloc.percentage is not None:
            share = min(total * alloc.percentage / 100, remainder)
        else:
            share = remainder
        share = round_cents(max(share, ZERO))
        remainder -= share
        fragments.append(
            SplitTransaction.from_transaction(
                txn,
                amount=share,
                category=alloc.category,
                split_parent_id=split_parent_id,
                split_index=index,
                original_amount=original,
                split_memo=alloc.memo or f"Split {index + 1} of {count}",
            )
        )

    if remainder > CENT:
        fragments.append(
            SplitTransaction.from_transaction(
                txn,
                amount=remainder,
                category=UNCATEGORIZED,
                split_parent_id=split_parent_id,
                split_index=count,
                original_amount=original,
                split_memo=REMAINDER_MEMO,
            )
        )
    elif remainder != 0:
        # Rounding residue goes to the last fragment that can absorb it
        for j in range(len(fragments) - 1, -1, -1):
            adjusted = fragments[j].amount + remainder
            if adjusted >= 0:
                fragments[j] = fragments[j].with_changes(amount=adjusted)  # type: ignore[assignment]
                break

    return fragments


# endregion Splitting


def apply_rule(txn: Transaction, rule: CustomRule, id_factory: IdFactory = new_split_id) -> List[Transaction]:
    """
    Apply ``rule``'s action to one (already matched) transaction.

    Categorize and rename keep a fragment a fragment. An action that cannot
    be carried out returns ``[txn]``.
    """
    action = rule.action
    if isinstance(action, CategorizeAction):
        if action.category:
            return [txn.with_changes(category=action.category)]
    elif isinstance(action, RenameAction):
        if action.new_name:
            return [txn.with_changes(description=action.new_name)]
    elif isinstance(action, SplitAction):
        if is_valid_split(action.splits):
            parent_id = (
                txn.split_parent_id if isinstance(txn, SplitTransaction) else id_factory()
            )
            return list(split_transaction(txn, action.splits, parent_id))
        log.warning("Rule %r has a malformed split action; left unchanged", rule.name)
    return [txn]


def _renumber(fragments: List[Transaction]) -> List[Transaction]:
    """Give fragments of each parent consecutive split indexes in list order."""
    counters: Dict[str, int] = {}
    out: List[Transaction] = []
    for txn in fragments:
        if isinstance(txn, SplitTransaction):
            index = counters.get(txn.split_parent_id, 0)
            counters[txn.split_parent_id] = index + 1
            if txn.split_index != index:
                txn = txn.with_changes(split_index=index)
        out.append(txn)
    return out


def active_rules(rules: Iterable[CustomRule]) -> List[CustomRule]:
    """Enabled rules in execution order (stable on equal priority)."""
    return sorted((r for r in rules if r.enabled), key=lambda r: r.priority)


def apply_rules(
    txn: Transaction,
    rules: Iterable[CustomRule],
    *,
    id_factory: Optional[IdFactory] = None,
) -> List[Transaction]:
    """
    Run every enabled rule over ``txn``.

    Returns ``[txn]`` when nothing matches, otherwise the transformed
    transaction or its split fragments.
    """
    make_id = id_factory or new_split_id
    results: List[Transaction] = [txn]
    for rule in active_rules(rules):
        next_results: List[Transaction] = []
        nested = False
        for current in results:
            if matches_rule(current, rule):
                nested = nested or isinstance(current, SplitTransaction)
                next_results.extend(apply_rule(current, rule, make_id))
            else:
                next_results.append(current)
        results = _renumber(next_results) if nested else next_results
    return results


def apply_rules_to_all(
    transactions: Iterable[Transaction],
    rules: Iterable[CustomRule],
    *,
    id_factory: Optional[IdFactory] = None,
) -> List[Transaction]:
    ordered = active_rules(rules)
    out: List[Transaction] = []
    count_in = 0
    for txn in transactions:
        count_in += 1
        out.extend(apply_rules(txn, ordered, id_factory=id_factory))
    log.debug("Applied %d rules: %d transactions in, %d out", len(ordered), count_in, len(out))
    return out
