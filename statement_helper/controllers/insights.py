# statement_helper/controllers/insights.py
"""
Derived analytics over a processed session.

Every function here is read-only over its inputs. Money stays ``Decimal``;
percentages are ``float``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from enum import Enum
from typing import Dict, List, Optional, Sequence

from statement_helper.data_model import Transaction
from statement_helper.utilities import round_cents
from statement_helper.utilities.converters_scalar import week_start

from .summary import ProcessedData

log = logging.getLogger(__name__)

VELOCITY_THRESHOLD = 10.0
CATEGORY_TREND_THRESHOLD = 15.0
MAX_RUNWAY_MONTHS = 999
TREND_CATEGORY_COUNT = 5
TOP_RECURRING_COUNT = 10

RECURRING_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"netflix", r"spotify", r"hulu", r"disney", r"hbo", r"max\.com",
        r"openai", r"anthropic", r"cursor", r"github", r"vercel",
        r"aws", r"google cloud", r"azure", r"digitalocean",
        r"rent", r"mortgage", r"insurance", r"spectrum", r"verizon",
        r"con ?ed", r"national grid", r"utility",
        r"gym", r"fitness", r"subscription", r"membership",
        r"recurring", r"monthly",
    )
)

_RECURRING_PREFIX = re.compile(r"^(POS PURCHASE|DEBIT CARD|RECURRING|ACH)\s*", re.IGNORECASE)
_MASKED_CARD = re.compile(r"XXXXX\d+\s*")


class Trend(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"

    @classmethod
    def classify(cls, change_percent: float, threshold: float) -> "Trend":
        if change_percent > threshold:
            return cls.INCREASING
        if change_percent < -threshold:
            return cls.DECREASING
        return cls.STABLE


@dataclass
class SpendingVelocity:
    period: str
    daily_average: Decimal
    trend: Trend
    change_percent: float


@dataclass
class RecurringItem:
    name: str
    amount: Decimal
    frequency: str = "monthly"


@dataclass
class RecurringAnalysis:
    recurring_total: Decimal = Decimal(0)
    one_time_total: Decimal = Decimal(0)
    recurring_count: int = 0
    one_time_count: int = 0
    recurring_items: List[RecurringItem] = field(default_factory=list)


@dataclass
class BurnRateProjection:
    current_monthly_burn: Decimal
    projected_runway: int
    average_daily_burn: Decimal
    projected_end_of_month: Decimal


@dataclass
class SavingsRatePoint:
    period: date
    income: Decimal
    expenses: Decimal
    savings: Decimal
    savings_rate: float


@dataclass
class CategoryTrend:
    category: str
    data: List[tuple[date, Decimal]]
    trend: Trend
    percent_change: float


@dataclass
class NovelInsights:
    spending_velocity: SpendingVelocity
    recurring_analysis: RecurringAnalysis
    burn_rate: BurnRateProjection
    savings_rate: List[SavingsRatePoint]
    category_trends: List[CategoryTrend]
    insights: List[str]


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / (len(values) or 1)


def _percent_change(before: Decimal, after: Decimal) -> float:
    if before <= 0:
        return 0.0
    return float((after - before) / before * 100)


def is_recurring(description: str) -> bool:
    return any(p.search(description) for p in RECURRING_PATTERNS)


def recurring_merchant_name(description: str) -> str:
    cleaned = _RECURRING_PREFIX.sub("", description)
    cleaned = _MASKED_CARD.sub("", cleaned)
    return re.split(r"\s{2,}", cleaned)[0].strip()[:25]


def calculate_spending_velocity(data: ProcessedData) -> SpendingVelocity:
    """Daily average spend and first-half vs second-half trend (10% band)."""
    amounts = [d.amount for d in data.daily_spending]
    daily_average = data.summary.total_expenses / (len(amounts) or 1)

    mid = len(amounts) // 2
    change = _percent_change(_mean(amounts[:mid]), _mean(amounts[mid:]))
    return SpendingVelocity(
        period=data.summary.period,
        daily_average=round_cents(daily_average),
        trend=Trend.classify(change, VELOCITY_THRESHOLD),
        change_percent=change,
    )


def analyze_recurring(transactions: Sequence[Transaction]) -> RecurringAnalysis:
    """Split expenses into recurring (by merchant, case-insensitive) and one-time."""
    recurring: Dict[str, RecurringItem] = {}
    one_time: List[Transaction] = []
    for t in transactions:
        if not t.is_expense:
            continue
        if is_recurring(t.description):
            name = recurring_merchant_name(t.description)
            item = recurring.setdefault(name.lower(), RecurringItem(name, Decimal(0)))
            item.amount += t.amount
        else:
            one_time.append(t)

    items = sorted(recurring.values(), key=lambda r: r.amount, reverse=True)
    return RecurringAnalysis(
        recurring_total=sum((r.amount for r in items), Decimal(0)),
        one_time_total=sum((t.amount for t in one_time), Decimal(0)),
        recurring_count=len(items),
        one_time_count=len(one_time),
        recurring_items=items[:TOP_RECURRING_COUNT],
    )


def calculate_burn_rate(data: ProcessedData, today: Optional[date] = None) -> BurnRateProjection:
    """
    Monthly burn and runway.

    Runway is whole months until the ending balance reaches zero at the
    current net daily rate; a non-negative rate reports ``MAX_RUNWAY_MONTHS``.
    """
    today = today or date.today()
    s = data.summary
    days = len(data.daily_spending) or 30
    average_daily_burn = s.total_expenses / days
    net_daily_change = (s.total_income - s.total_expenses) / days

    if net_daily_change < 0:
        months = (s.end_balance / abs(net_daily_change) / 30).to_integral_value(rounding=ROUND_FLOOR)
        runway = max(0, min(MAX_RUNWAY_MONTHS, int(months)))
    else:
        runway = MAX_RUNWAY_MONTHS

    days_remaining = max(0, 30 - today.day)
    return BurnRateProjection(
        current_monthly_burn=round_cents(average_daily_burn * 30),
        projected_runway=runway,
        average_daily_burn=round_cents(average_daily_burn),
        projected_end_of_month=round_cents(s.end_balance + net_daily_change * days_remaining),
    )


def calculate_savings_rate(transactions: Sequence[Transaction]) -> List[SavingsRatePoint]:
    """Income, spend and savings rate per Sunday-started week, oldest first."""
    weekly: Dict[date, List[Decimal]] = {}
    for t in transactions:
        bucket = weekly.setdefault(week_start(t.date), [Decimal(0), Decimal(0)])
        bucket[0 if t.is_income else 1] += t.amount

    points: List[SavingsRatePoint] = []
    for period in sorted(weekly):
        income, expenses = weekly[period]
        savings = income - expenses
        rate = float(savings / income * 100) if income > 0 else 0.0
        points.append(SavingsRatePoint(period, income, expenses, savings, rate))
    return points


def analyze_category_trends(
    transactions: Sequence[Transaction], top_categories: Sequence[str]
) -> List[CategoryTrend]:
    """
    Weekly spend for the top five categories, with a first-half vs
    second-half trend (15% band). Categories with fewer than two weeks of
    data are left out.
    """
    trends: List[CategoryTrend] = []
    for category in top_categories[:TREND_CATEGORY_COUNT]:
        weekly: Dict[date, Decimal] = {}
        for t in transactions:
            if t.is_expense and t.category == category:
                key = week_start(t.date)
                weekly[key] = weekly.get(key, Decimal(0)) + t.amount

        series = sorted(weekly.items())
        if len(series) < 2:
            continue
        mid = len(series) // 2
        change = _percent_change(
            _mean([a for _, a in series[:mid]]), _mean([a for _, a in series[mid:]])
        )
        trends.append(
            CategoryTrend(category, series, Trend.classify(change, CATEGORY_TREND_THRESHOLD), change)
        )
    return trends


def generate_insights(
    data: ProcessedData,
    recurring: RecurringAnalysis,
    burn_rate: BurnRateProjection,
    velocity: SpendingVelocity,
) -> List[str]:
    """Short plain-language observations about the session."""
    s = data.summary
    insights: List[str] = []

    savings_rate = float(s.net_change / s.total_income * 100) if s.total_income > 0 else 0.0
    if savings_rate > 20:
        insights.append(f"Excellent! You're saving {savings_rate:.1f}% of your income this period.")
    elif savings_rate > 0:
        insights.append(
            f"You're saving {savings_rate:.1f}% of your income. "
            "Consider increasing to 20%+ for long-term goals."
        )
    else:
        insights.append("You're spending more than you earn. Review discretionary spending.")

    recurring_pct = (
        float(recurring.recurring_total / s.total_expenses * 100) if s.total_expenses > 0 else 0.0
    )
    insights.append(
        f"Recurring expenses are {recurring_pct:.0f}% of total spending "
        f"({recurring.recurring_count} subscriptions)."
    )

    if velocity.trend is Trend.INCREASING:
        insights.append(
            f"Spending is increasing - up {velocity.change_percent:.0f}% vs earlier in the period."
        )
    elif velocity.trend is Trend.DECREASING:
        insights.append(
            f"Great job! Spending decreased {abs(velocity.change_percent):.0f}% vs earlier."
        )

    if 0 < burn_rate.projected_runway < 12:
        insights.append(f"At current spending, your runway is ~{burn_rate.projected_runway} months.")

    top = data.top_categories()
    if top and s.total_expenses > 0:
        pct = float(data.category_breakdown[top[0]] / s.total_expenses * 100)
        insights.append(f'"{top[0]}" is your biggest expense category at {pct:.0f}% of spending.')

    return insights


def generate_novel_insights(
    transactions: Sequence[Transaction],
    data: ProcessedData,
    today: Optional[date] = None,
) -> NovelInsights:
    velocity = calculate_spending_velocity(data)
    recurring = analyze_recurring(transactions)
    burn_rate = calculate_burn_rate(data, today)
    result = NovelInsights(
        spending_velocity=velocity,
        recurring_analysis=recurring,
        burn_rate=burn_rate,
        savings_rate=calculate_savings_rate(transactions),
        category_trends=analyze_category_trends(transactions, data.top_categories()),
        insights=generate_insights(data, recurring, burn_rate, velocity),
    )
    log.debug("Generated %d insight messages", len(result.insights))
    return result
