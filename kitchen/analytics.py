"""
Revenue and usage figures for the admin dashboard.

Everything here folds an already-loaded list of users; there is no query in
this module, so the same functions serve the dashboard view, the payments
screen and the tests.

The headline monthly/yearly revenue figures keep the kitchen's long-standing
fixed-rate approximation: every paid member is counted at both the monthly
and the yearly rate regardless of the plan they are actually on. Exact
per-member amounts, priced through ``price_for``, are reported next to them
as ``collected_revenue`` and ``outstanding_revenue``.
"""
import math
from collections import Counter
from dataclasses import dataclass, field

from .choices import PaymentStatus, PlanType, TimePreference
from .rules import PLAN_PRICES, is_priced, price_for

MONTHLY_FULL = PLAN_PRICES[PlanType.MONTHLY]["full"]
MONTHLY_HALF = PLAN_PRICES[PlanType.MONTHLY]["half"]
YEARLY_FULL = PLAN_PRICES[PlanType.YEARLY]["full"]
YEARLY_HALF = PLAN_PRICES[PlanType.YEARLY]["half"]


def percent(part, whole):
    """Whole-number percentage, rounding halves up; 0 when there is nothing to divide by."""
    if not whole:
        return 0
    return math.floor(part * 100 / whole + 0.5)


@dataclass(frozen=True)
class Metrics:
    total_users: int = 0
    paid_users: int = 0
    half_paid_users: int = 0
    unpaid_users: int = 0
    afternoon_users: int = 0
    night_users: int = 0
    both_time_users: int = 0
    unpriced_users: int = 0

    monthly_revenue: int = 0
    yearly_revenue: int = 0
    total_revenue: int = 0
    pending_revenue: int = 0
    collected_revenue: int = 0
    outstanding_revenue: int = 0

    payment_success_rate: int = 0
    payment_shares: dict = field(default_factory=dict)
    time_preference_shares: dict = field(default_factory=dict)
    revenue_breakdown: dict = field(default_factory=dict)


def aggregate(users) -> Metrics:
    users = list(users)
    total = len(users)
    payments = Counter(u.payment_status for u in users)
    preferences = Counter(u.time_preference for u in users)

    paid = payments[PaymentStatus.PAID]
    half_paid = payments[PaymentStatus.HALF_PAID]
    unpaid = payments[PaymentStatus.UNPAID]

    monthly_revenue = paid * MONTHLY_FULL + half_paid * MONTHLY_HALF
    yearly_revenue = paid * YEARLY_FULL + half_paid * YEARLY_HALF
    total_revenue = monthly_revenue + yearly_revenue

    collected = outstanding = unpriced = 0
    for user in users:
        if not is_priced(user.plan_type):
            unpriced += 1
            continue
        price = price_for(user.plan_type, user.payment_status)
        collected += price.paid
        outstanding += price.due

    return Metrics(
        total_users=total,
        paid_users=paid,
        half_paid_users=half_paid,
        unpaid_users=unpaid,
        afternoon_users=preferences[TimePreference.AFTERNOON],
        night_users=preferences[TimePreference.NIGHT],
        both_time_users=preferences[TimePreference.BOTH],
        unpriced_users=unpriced,
        monthly_revenue=monthly_revenue,
        yearly_revenue=yearly_revenue,
        total_revenue=total_revenue,
        pending_revenue=unpaid * MONTHLY_FULL + half_paid * MONTHLY_HALF,
        collected_revenue=collected,
        outstanding_revenue=outstanding,
        payment_success_rate=percent(paid, total),
        payment_shares={status.value: percent(payments[status], total) for status in PaymentStatus},
        time_preference_shares={pref.value: percent(preferences[pref], total) for pref in TimePreference},
        revenue_breakdown={
            PlanType.MONTHLY.value: percent(monthly_revenue, total_revenue),
            PlanType.YEARLY.value: percent(yearly_revenue, total_revenue),
        },
    )


def payment_summary(users):
    """
    Per-status rows for the payments screen: how many members, what they have
    paid and what they still owe, priced on each member's own plan.
    """
    rows = {status.value: {"label": str(status.label), "count": 0, "paid": 0, "due": 0} for status in PaymentStatus}
    for user in users:
        row = rows[user.payment_status]
        row["count"] += 1
        if is_priced(user.plan_type):
            price = price_for(user.plan_type, user.payment_status)
            row["paid"] += price.paid
            row["due"] += price.due
    return rows


def chart_data(metrics: Metrics):
    """Label/data pairs in the shape the dashboard charts expect."""
    return {
        "payments": {
            "labels": [str(s.label) for s in PaymentStatus],
            "data": [metrics.paid_users, metrics.half_paid_users, metrics.unpaid_users],
        },
        "time_preferences": {
            "labels": [str(p.label) for p in TimePreference],
            "data": [metrics.afternoon_users, metrics.night_users, metrics.both_time_users],
        },
        "revenue": {
            "labels": ["Monthly Plans", "Yearly Plans"],
            "data": [metrics.monthly_revenue, metrics.yearly_revenue],
        },
    }
