import datetime
import random
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from member.models import DeliveryRequest, Feedback

from . import services
from .analytics import aggregate, chart_data, payment_summary, percent
from .choices import (
    ApprovalStatus,
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
    PlanType,
    RegistrationStatus,
    TimePreference,
    TimeSlot,
)
from .exceptions import InvariantViolation
from .forms import DailyMenuForm, MenuItemForm
from .models import Banner, DailyMenu, MenuItem, Payment
from .rules import (
    PlanPrice,
    StatusAction,
    StatusAxis,
    can_edit_next_day,
    next_status,
    price_for,
)


def _user(payment_status, plan_type=PlanType.MONTHLY, time_preference=TimePreference.AFTERNOON):
    return User(payment_status=payment_status, plan_type=plan_type, time_preference=time_preference)


# --- rules ---

@pytest.mark.parametrize("plan_type", [PlanType.MONTHLY, PlanType.YEARLY])
@pytest.mark.parametrize("payment_status", PaymentStatus.values)
def test_nothing_due_only_when_paid(plan_type, payment_status):
    price = price_for(plan_type, payment_status)
    assert (price.due == 0) == (payment_status == PaymentStatus.PAID)


def test_price_table():
    assert price_for(PlanType.MONTHLY, PaymentStatus.HALF_PAID) == PlanPrice(due=375, paid=375)
    assert price_for(PlanType.YEARLY, PaymentStatus.UNPAID) == PlanPrice(due=8000, paid=0)
    assert price_for(PlanType.YEARLY, PaymentStatus.PAID) == PlanPrice(due=0, paid=8000)


def test_weekly_plan_has_no_price():
    with pytest.raises(InvariantViolation):
        price_for(PlanType.WEEKLY, PaymentStatus.PAID)


@pytest.mark.parametrize("start", PaymentStatus.values)
def test_payment_cycle_returns_to_start(start):
    status = start
    for _ in range(3):
        status = next_status(StatusAxis.PAYMENT, status, StatusAction.ADVANCE)
    assert status == start


def test_payment_cycle_order():
    assert next_status(StatusAxis.PAYMENT, PaymentStatus.PAID, StatusAction.ADVANCE) == PaymentStatus.HALF_PAID
    assert next_status(StatusAxis.PAYMENT, PaymentStatus.HALF_PAID, StatusAction.ADVANCE) == PaymentStatus.UNPAID
    assert next_status(StatusAxis.PAYMENT, PaymentStatus.UNPAID, StatusAction.ADVANCE) == PaymentStatus.PAID


def test_registration_is_forward_only():
    assert next_status(StatusAxis.REGISTRATION, RegistrationStatus.PENDING, StatusAction.APPROVE) == RegistrationStatus.APPROVED
    assert next_status(StatusAxis.REGISTRATION, RegistrationStatus.PENDING, StatusAction.REJECT) == RegistrationStatus.REJECTED
    assert next_status(StatusAxis.REGISTRATION, RegistrationStatus.APPROVED, StatusAction.REJECT) == RegistrationStatus.APPROVED
    assert next_status(StatusAxis.REGISTRATION, RegistrationStatus.REJECTED, StatusAction.APPROVE) == RegistrationStatus.REJECTED


def test_undefined_move_is_a_no_op():
    assert next_status(StatusAxis.REGISTRATION, RegistrationStatus.PENDING, StatusAction.ADVANCE) == RegistrationStatus.PENDING
    assert next_status(StatusAxis.PAYMENT_RECORD, PaymentRecordStatus.CONFIRMED, StatusAction.CONFIRM) == PaymentRecordStatus.CONFIRMED


def test_menu_cutoff():
    day = datetime.date(2026, 3, 10)
    assert can_edit_next_day(datetime.datetime.combine(day, datetime.time(11, 59)))
    assert not can_edit_next_day(datetime.datetime.combine(day, datetime.time(12, 0)))
    assert not can_edit_next_day(datetime.datetime.combine(day, datetime.time(12, 1)))
    assert can_edit_next_day(datetime.datetime.combine(day + datetime.timedelta(days=1), datetime.time(0, 0)))


def test_menu_cutoff_uses_local_time():
    # 07:30 UTC is 11:30 in Dubai, 08:30 UTC is 12:30
    assert can_edit_next_day(datetime.datetime(2026, 3, 10, 7, 30, tzinfo=datetime.timezone.utc))
    assert not can_edit_next_day(datetime.datetime(2026, 3, 10, 8, 30, tzinfo=datetime.timezone.utc))


# --- analytics ---

def test_percent_rounds_halves_up():
    assert percent(1, 8) == 13
    assert percent(1, 3) == 33
    assert percent(5, 0) == 0


def test_aggregate_empty():
    metrics = aggregate([])
    assert metrics.total_users == 0
    assert metrics.payment_success_rate == 0
    assert metrics.total_revenue == 0
    assert set(metrics.payment_shares.values()) == {0}
    assert set(metrics.time_preference_shares.values()) == {0}
    assert metrics.revenue_breakdown == {"monthly": 0, "yearly": 0}


def test_aggregate_two_monthly_members():
    metrics = aggregate([_user(PaymentStatus.PAID), _user(PaymentStatus.HALF_PAID)])
    assert metrics.monthly_revenue == 1125
    assert metrics.pending_revenue == 375
    assert metrics.payment_success_rate == 50
    assert metrics.collected_revenue == 1125
    assert metrics.outstanding_revenue == 375


def test_aggregate_fixed_rate_counts_paid_members_at_both_rates():
    metrics = aggregate([_user(PaymentStatus.PAID, plan_type=PlanType.YEARLY)])
    assert metrics.monthly_revenue == 750
    assert metrics.yearly_revenue == 8000
    assert metrics.total_revenue == 8750
    assert metrics.collected_revenue == 8000
    assert metrics.revenue_breakdown == {"monthly": 9, "yearly": 91}


def test_aggregate_is_order_independent():
    users = [
        _user(status, plan, pref)
        for status in PaymentStatus.values
        for plan in (PlanType.MONTHLY, PlanType.YEARLY)
        for pref in TimePreference.values
    ]
    shuffled = users[:]
    random.Random(7).shuffle(shuffled)
    assert aggregate(shuffled) == aggregate(users)


def test_aggregate_skips_unpriced_plans_for_exact_figures():
    metrics = aggregate([_user(PaymentStatus.UNPAID, plan_type=PlanType.WEEKLY), _user(PaymentStatus.UNPAID)])
    assert metrics.unpriced_users == 1
    assert metrics.outstanding_revenue == 750
    assert metrics.unpaid_users == 2


def test_payment_summary_and_charts():
    users = [_user(PaymentStatus.HALF_PAID, plan_type=PlanType.YEARLY), _user(PaymentStatus.UNPAID)]
    summary = payment_summary(users)
    assert summary["half_paid"] == {"label": "Half Paid", "count": 1, "paid": 4000, "due": 4000}
    assert summary["unpaid"]["due"] == 750
    assert summary["paid"]["count"] == 0

    charts = chart_data(aggregate(users))
    assert charts["payments"]["labels"] == ["Fully Paid", "Half Paid", "Unpaid"]
    assert charts["payments"]["data"] == [0, 1, 1]


# --- models and forms ---

@pytest.mark.django_db
def test_daily_menu_gets_default_cutoff():
    menu = DailyMenu.objects.create(date=datetime.date(2026, 3, 11), time_slot=TimeSlot.NIGHT)
    assert menu.cutoff_time == datetime.time(18, 0)


@pytest.mark.django_db
def test_only_optional_dishes_have_alternatives():
    dish = MenuItem(name="Sambar", alternatives=["Rasam"])
    with pytest.raises(ValidationError):
        dish.full_clean()
    dish.is_optional = True
    dish.full_clean()
    assert dish.choices() == ["Sambar", "Rasam"]


@pytest.mark.django_db
def test_menu_item_form_parses_alternatives():
    form = MenuItemForm(data={"name": "Appam", "is_optional": "on", "alternatives": "Chapati, Idiyappam ,"})
    assert form.is_valid(), form.errors
    dish = form.save()
    assert dish.alternatives == ["Chapati", "Idiyappam"]

    duplicate = MenuItemForm(data={"name": "appam"})
    assert not duplicate.is_valid()
    assert "name" in duplicate.errors


@pytest.mark.django_db
def test_daily_menu_form_rejects_today():
    dish = MenuItem.objects.create(name="Avial")
    form = DailyMenuForm(data={
        "date": timezone.localdate().isoformat(),
        "time_slot": TimeSlot.AFTERNOON,
        "items": [dish.pk],
    })
    assert not form.is_valid()
    assert form.has_error("date", code="past_date")


@pytest.mark.django_db
def test_daily_menu_form_accepts_tomorrow():
    dish = MenuItem.objects.create(name="Avial")
    tomorrow = timezone.localdate() + datetime.timedelta(days=1)
    form = DailyMenuForm(data={"date": tomorrow.isoformat(), "time_slot": TimeSlot.AFTERNOON, "items": [dish.pk]})
    assert form.is_valid(), form.errors
    menu = form.save()
    assert list(menu.items.all()) == [dish]
    assert menu.cutoff_time == datetime.time(12, 0)


# --- services ---

def test_review_registration(make_member):
    member = make_member(status=RegistrationStatus.PENDING)
    assert services.review_registration(member.pk, "approve").status == RegistrationStatus.APPROVED
    with pytest.raises(ValidationError):
        services.review_registration(member.pk, "reject")
    member.refresh_from_db()
    assert member.status == RegistrationStatus.APPROVED


@pytest.mark.django_db
def test_review_registration_unknown_member():
    with pytest.raises(User.DoesNotExist):
        services.review_registration(999, "approve")


def test_advance_payment_status(make_member):
    member = make_member(payment_status=PaymentStatus.UNPAID)
    assert services.advance_payment_status(member.pk).payment_status == PaymentStatus.PAID

    weekly = make_member(plan_type=PlanType.WEEKLY)
    with pytest.raises(InvariantViolation):
        services.advance_payment_status(weekly.pk)


def test_approving_delivery_request_updates_member(make_member):
    member = make_member(time_preference=TimePreference.AFTERNOON)
    assert member.estimated_delivery_time == "01:00 PM"
    request = DeliveryRequest.objects.create(
        user=member,
        current_time=member.estimated_delivery_time,
        requested_time_slot=TimeSlot.NIGHT,
        requested_time="09:00 PM",
        reason="Night shift",
    )

    services.process_delivery_request(request.pk, "approve")

    member.refresh_from_db()
    request.refresh_from_db()
    assert member.estimated_delivery_time == "09:00 PM"
    assert member.time_preference == TimePreference.NIGHT
    assert request.status == ApprovalStatus.APPROVED
    assert request.processed_at is not None
    with pytest.raises(ValidationError):
        services.process_delivery_request(request.pk, "reject")


def test_delivery_request_cannot_be_approved_for_both_time_member(make_member):
    member = make_member(time_preference=TimePreference.AFTERNOON)
    request = DeliveryRequest.objects.create(
        user=member, current_time="01:00 PM", requested_time_slot=TimeSlot.NIGHT,
        requested_time="09:00 PM", reason="Night shift",
    )
    member.time_preference = TimePreference.BOTH
    member.save()

    with pytest.raises(ValidationError):
        services.process_delivery_request(request.pk, "approve")

    member.refresh_from_db()
    request.refresh_from_db()
    assert member.time_preference == TimePreference.BOTH
    assert member.estimated_delivery_time == "01:00 PM / 09:00 PM"
    assert request.status == ApprovalStatus.PENDING

    services.process_delivery_request(request.pk, "reject")
    request.refresh_from_db()
    assert request.status == ApprovalStatus.REJECTED


def test_rejecting_delivery_request_leaves_member_alone(make_member):
    member = make_member(time_preference=TimePreference.AFTERNOON)
    request = DeliveryRequest.objects.create(
        user=member, current_time="01:00 PM", requested_time_slot=TimeSlot.AFTERNOON,
        requested_time="12:30 PM", reason="Lunch break moved",
    )
    services.process_delivery_request(request.pk, "reject")
    member.refresh_from_db()
    assert member.estimated_delivery_time == "01:00 PM"


def test_moderate_feedback(make_member):
    feedback = Feedback.objects.create(user=make_member(), rating=5, message="Lovely fish curry")
    services.moderate_feedback(feedback.pk, "approve")
    feedback.refresh_from_db()
    assert feedback.status == ApprovalStatus.APPROVED
    assert feedback.approved_at is not None
    with pytest.raises(ValidationError):
        services.moderate_feedback(feedback.pk, "approve")


def test_record_and_confirm_payment(make_member):
    member = make_member()
    payment = services.record_payment(member, Decimal("375.00"), PaymentMethod.CASH)
    assert payment.status == PaymentRecordStatus.PENDING

    assert services.confirm_payment(payment.pk).status == PaymentRecordStatus.CONFIRMED
    with pytest.raises(ValidationError):
        services.confirm_payment(payment.pk)

    with pytest.raises(ValidationError):
        services.record_payment(member, Decimal("0"), PaymentMethod.CASH)


def test_payment_reminder(make_member, mailoutbox):
    member = make_member(payment_status=PaymentStatus.HALF_PAID)
    assert services.send_payment_reminder(member) == 375
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == [member.email]
    assert "AED 375" in mailoutbox[0].body

    with pytest.raises(ValidationError):
        services.send_payment_reminder(make_member(payment_status=PaymentStatus.PAID))
    assert len(mailoutbox) == 1


@pytest.mark.django_db
def test_toggle_active():
    banner = Banner.objects.create(title="Onam Sadya", content="Friday special")
    services.toggle_active(banner)
    banner.refresh_from_db()
    assert banner.is_active is False


# --- views ---

def test_dashboard(admin_client, make_member):
    make_member(payment_status=PaymentStatus.PAID)
    make_member(payment_status=PaymentStatus.HALF_PAID, status=RegistrationStatus.PENDING)
    response = admin_client.get(reverse("admin_dashboard"))
    assert response.status_code == 200
    assert response.context["metrics"].total_users == 2
    assert response.context["pending_registrations"] == 1


def test_members_cannot_see_admin_pages(client, make_member):
    client.force_login(make_member())
    assert client.get(reverse("admin_dashboard")).status_code == 403
    response = client.get(reverse("manage_users"))
    assert response.status_code == 302
    assert response.url == reverse("login")


def test_manage_users_filters(admin_client, make_member):
    make_member(full_name="Rahul Nair", status=RegistrationStatus.PENDING)
    make_member(full_name="Divya Pillai")
    response = admin_client.get(reverse("manage_users"), {"status": "pending"})
    assert [u.full_name for u in response.context["users"]] == ["Rahul Nair"]


def test_advance_payment_view(admin_client, make_member):
    member = make_member(payment_status=PaymentStatus.PAID)
    response = admin_client.post(reverse("advance_payment", args=[member.pk]))
    assert response.status_code == 302
    member.refresh_from_db()
    assert member.payment_status == PaymentStatus.HALF_PAID


def test_review_registration_view_unknown_member(admin_client):
    assert admin_client.post(reverse("review_registration", args=[999, "approve"])).status_code == 404


def test_payments_page(admin_client, make_member):
    make_member(payment_status=PaymentStatus.UNPAID)
    make_member(plan_type=PlanType.WEEKLY)
    response = admin_client.get(reverse("payments"))
    assert response.status_code == 200
    prices = [row["price"] for row in response.context["rows"]]
    assert None in prices
    assert PlanPrice(due=750, paid=0) in prices


def test_record_payment_view(admin_client, make_member):
    member = make_member()
    prefix = f"member-{member.pk}"
    admin_client.post(
        reverse("record_payment", args=[member.pk]),
        {f"{prefix}-amount": "750", f"{prefix}-method": "cash"},
    )
    assert Payment.objects.get(user=member).amount == Decimal("750")


def test_payment_rows_have_their_own_form_ids(admin_client, make_member):
    first, second = make_member(), make_member()
    response = admin_client.get(reverse("payments"))
    content = response.content.decode()
    for member in (first, second):
        assert content.count(f'id="id_member-{member.pk}-amount"') == 1
    assert 'id="id_amount"' not in content


def test_announcement_create_and_toggle(admin_client):
    response = admin_client.post(reverse("announcements"), {
        "kind": "banner",
        "banner-title": "Rain delays",
        "banner-content": "Deliveries may run late today.",
        "banner-type": "warning",
        "banner-is_active": "on",
    })
    assert response.status_code == 302
    banner = Banner.objects.get(title="Rain delays")
    admin_client.post(reverse("toggle_announcement", args=["banner", banner.pk]))
    banner.refresh_from_db()
    assert not banner.is_active
    assert admin_client.post(reverse("toggle_announcement", args=["poster", banner.pk])).status_code == 404
