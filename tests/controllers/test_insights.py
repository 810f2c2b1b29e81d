from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from statement_helper.controllers import generate_novel_insights, process_statements
from statement_helper.controllers.insights import (
    MAX_RUNWAY_MONTHS,
    Trend,
    analyze_category_trends,
    analyze_recurring,
    calculate_burn_rate,
    calculate_savings_rate,
    calculate_spending_velocity,
    is_recurring,
)
from statement_helper.controllers.summary import DailyAmount, ProcessedData, StatementSummary
from statement_helper.data_model import ParsedStatement, Transaction, TransactionType

TODAY = date(2024, 3, 20)


def _txn(d: date, desc: str, amount: str, kind=TransactionType.EXPENSE, category="Other") -> Transaction:
    return Transaction(date=d, description=desc, amount=Decimal(amount), type=kind, category=category)


@pytest.fixture
def transactions():
    return [
        _txn(date(2024, 3, 4), "STARBUCKS STORE 777777", "10.00", category="Restaurants & Dining"),
        _txn(date(2024, 3, 3), "SHELL OIL", "40.00", category="Gas"),
        _txn(date(2024, 3, 2), "POS PURCHASE STARBUCKS STORE 123456", "5.00", category="Restaurants & Dining"),
        _txn(date(2024, 3, 2), "NETFLIX.COM", "15.00", category="Subscriptions"),
        _txn(date(2024, 3, 1), "ACME PAYROLL", "2000.00", TransactionType.INCOME, "Salary"),
    ]


@pytest.fixture
def data(transactions) -> ProcessedData:
    stmt = ParsedStatement(
        transactions=transactions, start_balance=Decimal("1000.00"), end_balance=Decimal("2930.00")
    )
    return process_statements([stmt])


def _spending_only(end_balance: str, days: int = 10, daily: str = "30") -> ProcessedData:
    return ProcessedData(
        summary=StatementSummary(
            total_expenses=Decimal(daily) * days, end_balance=Decimal(end_balance)
        ),
        daily_spending=[DailyAmount(date(2024, 3, i + 1), Decimal(daily)) for i in range(days)],
    )


@pytest.mark.parametrize(
    "change,threshold,expected",
    [
        (10.5, 10, Trend.INCREASING),
        (10.0, 10, Trend.STABLE),
        (-12.0, 10, Trend.DECREASING),
        (-12.0, 15, Trend.STABLE),
    ],
)
def test_trend_classify(change, threshold, expected):
    assert Trend.classify(change, threshold) is expected


def test_spending_velocity(data):
    velocity = calculate_spending_velocity(data)

    # daily totals 20, 40, 10: first half 20, second half mean 25
    assert velocity.daily_average == Decimal("23.33")
    assert velocity.change_percent == pytest.approx(25.0)
    assert velocity.trend is Trend.INCREASING
    assert velocity.period == "2024-03-01 - 2024-03-04"


def test_recurring_split(transactions):
    analysis = analyze_recurring(transactions)

    assert is_recurring("NETFLIX.COM") and not is_recurring("SHELL OIL")
    assert analysis.recurring_total == Decimal("15.00")
    assert analysis.recurring_count == 1
    assert analysis.one_time_total == Decimal("55.00")
    assert analysis.one_time_count == 3
    assert analysis.recurring_items[0].name == "NETFLIX.COM"


def test_recurring_groups_case_insensitively():
    txns = [
        _txn(date(2024, 3, 1), "Spotify USA", "9.99"),
        _txn(date(2024, 2, 1), "SPOTIFY USA", "9.99"),
    ]
    analysis = analyze_recurring(txns)
    assert analysis.recurring_count == 1
    assert analysis.recurring_items[0].amount == Decimal("19.98")


def test_burn_rate_with_positive_net_is_capped(data):
    burn = calculate_burn_rate(data, today=TODAY)

    assert burn.projected_runway == MAX_RUNWAY_MONTHS
    assert burn.average_daily_burn == Decimal("23.33")
    assert burn.current_monthly_burn == Decimal("700.00")
    # 2930 + (1930 / 3) * 10 days left
    assert burn.projected_end_of_month == Decimal("9363.33")


def test_burn_rate_runway_in_whole_months():
    # -30/day against 2000 is 2.2 months
    burn = calculate_burn_rate(_spending_only("2000"), today=date(2024, 3, 31))

    assert burn.projected_runway == 2
    assert burn.current_monthly_burn == Decimal("900.00")
    assert burn.projected_end_of_month == Decimal("2000.00")


def test_burn_rate_overdrawn_account_has_no_runway():
    assert calculate_burn_rate(_spending_only("-50"), today=TODAY).projected_runway == 0


def test_savings_rate_by_week(transactions):
    points = calculate_savings_rate(transactions)

    assert [p.period for p in points] == [date(2024, 2, 25), date(2024, 3, 3)]
    first, second = points
    assert first.income == Decimal("2000.00")
    assert first.expenses == Decimal("20.00")
    assert first.savings_rate == pytest.approx(99.0)
    assert second.savings == Decimal("-50.00")
    assert second.savings_rate == 0.0


def test_category_trends_need_two_weeks(transactions, data):
    trends = analyze_category_trends(transactions, data.top_categories())

    assert [t.category for t in trends] == ["Restaurants & Dining"]
    assert trends[0].percent_change == pytest.approx(100.0)
    assert trends[0].trend is Trend.INCREASING


def test_generate_novel_insights_messages(transactions, data):
    result = generate_novel_insights(transactions, data, today=TODAY)

    assert result.insights == [
        "Excellent! You're saving 96.5% of your income this period.",
        "Recurring expenses are 21% of total spending (1 subscriptions).",
        "Spending is increasing - up 25% vs earlier in the period.",
        '"Gas" is your biggest expense category at 57% of spending.',
    ]
    assert result.burn_rate.projected_runway == MAX_RUNWAY_MONTHS


def test_insights_when_spending_exceeds_income():
    data = _spending_only("500")
    result = generate_novel_insights([], data, today=TODAY)

    assert result.insights[0] == "You're spending more than you earn. Review discretionary spending."
    assert "At current spending, your runway is ~0 months." not in result.insights
