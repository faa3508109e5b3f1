"""
Pure business rules shared by the admin and member sides.

Nothing in here touches the database: callers load the records, ask these
functions what the new state or amount should be, and persist it themselves.
"""
import datetime
from dataclasses import dataclass

from django.db import models
from django.utils import timezone

from .choices import (
    PaymentRecordStatus,
    PaymentStatus,
    PlanType,
    RegistrationStatus,
)
from .exceptions import InvariantViolation


class StatusAxis(models.TextChoices):
    REGISTRATION = "registration", "Registration"
    PAYMENT = "payment", "Payment standing"
    DELIVERY_REQUEST = "delivery_request", "Delivery request"
    FEEDBACK = "feedback", "Feedback"
    PAYMENT_RECORD = "payment_record", "Payment record"


class StatusAction(models.TextChoices):
    APPROVE = "approve", "Approve"
    REJECT = "reject", "Reject"
    ADVANCE = "advance", "Advance"
    CONFIRM = "confirm", "Confirm"


_APPROVAL_FLOW = {
    (RegistrationStatus.PENDING, StatusAction.APPROVE): RegistrationStatus.APPROVED,
    (RegistrationStatus.PENDING, StatusAction.REJECT): RegistrationStatus.REJECTED,
}

TRANSITIONS = {
    StatusAxis.REGISTRATION: _APPROVAL_FLOW,
    StatusAxis.DELIVERY_REQUEST: _APPROVAL_FLOW,
    StatusAxis.FEEDBACK: _APPROVAL_FLOW,
    StatusAxis.PAYMENT: {
        (PaymentStatus.PAID, StatusAction.ADVANCE): PaymentStatus.HALF_PAID,
        (PaymentStatus.HALF_PAID, StatusAction.ADVANCE): PaymentStatus.UNPAID,
        (PaymentStatus.UNPAID, StatusAction.ADVANCE): PaymentStatus.PAID,
    },
    StatusAxis.PAYMENT_RECORD: {
        (PaymentRecordStatus.PENDING, StatusAction.CONFIRM): PaymentRecordStatus.CONFIRMED,
    },
}


def next_status(axis, current, action):
    """
    Returns the status that ``action`` moves ``current`` to on ``axis``.

    Undefined moves (approving something already approved, advancing a
    registration, ...) return ``current`` unchanged, so callers can compare
    the result with the input to find out whether anything happened.
    """
    return TRANSITIONS[StatusAxis(axis)].get((current, action), current)


@dataclass(frozen=True)
class PlanPrice:
    due: int
    paid: int


# AED; half is what a half_paid member still owes
PLAN_PRICES = {
    PlanType.MONTHLY: {"full": 750, "half": 375},
    PlanType.YEARLY: {"full": 8000, "half": 4000},
}


def is_priced(plan_type):
    return plan_type in PLAN_PRICES


def full_price(plan_type):
    if not is_priced(plan_type):
        raise InvariantViolation(f"Plan '{plan_type}' has no price.")
    return PLAN_PRICES[plan_type]["full"]


def price_for(plan_type, payment_status) -> PlanPrice:
    """Amount still due and amount already paid for a plan in a given standing."""
    if not is_priced(plan_type):
        raise InvariantViolation(f"Plan '{plan_type}' has no price.")
    prices = PLAN_PRICES[plan_type]
    if payment_status == PaymentStatus.PAID:
        due = 0
    elif payment_status == PaymentStatus.HALF_PAID:
        due = prices["half"]
    else:
        due = prices["full"]
    return PlanPrice(due=due, paid=prices["full"] - due)


MENU_CUTOFF = datetime.time(12, 0)


def can_edit_next_day(now) -> bool:
    """True while tomorrow's menu can still be customised (before noon, local time)."""
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    return now.time() < MENU_CUTOFF
