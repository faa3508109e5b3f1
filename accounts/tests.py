import datetime

import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone

from kitchen.choices import (
    BOTH_DELIVERY_TIME,
    PaymentStatus,
    PlanType,
    RegistrationStatus,
    TimePreference,
)
from kitchen.models import DailyMenu, MenuItem

from .forms import MemberEditForm, RegistrationForm
from .models import User
from .tasks import advance_days_active


def _registration(**overrides):
    data = {
        "full_name": "Lakshmi Varma",
        "phone": "0501234567",
        "email": "Lakshmi@Example.com",
        "password": "curryleaf123",
        "address": "Villa 12, Al Rashidiya, Ajman",
        "time_preference": TimePreference.NIGHT,
    }
    data.update(overrides)
    return data


def _edit(member, **overrides):
    data = {
        "full_name": member.full_name,
        "phone": member.phone,
        "email": member.email,
        "address": member.address,
        "plan_type": member.plan_type,
        "payment_status": member.payment_status,
        "time_preference": member.time_preference,
        "estimated_delivery_time": member.estimated_delivery_time,
        "expiry_date": "",
    }
    data.update(overrides)
    return data


# --- registration ---

@pytest.mark.django_db
def test_registration_creates_pending_monthly_member():
    form = RegistrationForm(data=_registration())
    assert form.is_valid(), form.errors
    user = form.save()
    assert user.username == user.email == "lakshmi@example.com"
    assert user.role == User.Role.MEMBER
    assert user.status == RegistrationStatus.PENDING
    assert user.plan_type == PlanType.MONTHLY
    assert user.estimated_delivery_time == "09:00 PM"
    assert user.check_password("curryleaf123")


@pytest.mark.parametrize("phone", ["12345", "05012345678", "050-123456"])
@pytest.mark.django_db
def test_registration_needs_ten_digit_phone(phone):
    form = RegistrationForm(data=_registration(phone=phone))
    assert not form.is_valid()
    assert "phone" in form.errors


def test_registration_rejects_duplicates(make_member):
    make_member(email="lakshmi@example.com", phone="0501234567")
    form = RegistrationForm(data=_registration())
    assert not form.is_valid()
    assert "email" in form.errors
    assert "phone" in form.errors


# --- member edits ---

def test_edit_rejects_weekly_plan(make_member):
    member = make_member()
    form = MemberEditForm(data=_edit(member, plan_type=PlanType.WEEKLY), instance=member)
    assert not form.is_valid()
    assert "plan_type" in form.errors


def test_edit_requires_delivery_time_unless_both(make_member):
    member = make_member()
    form = MemberEditForm(data=_edit(member, estimated_delivery_time=""), instance=member)
    assert not form.is_valid()
    assert "estimated_delivery_time" in form.errors

    form = MemberEditForm(
        data=_edit(member, time_preference=TimePreference.BOTH, estimated_delivery_time=""), instance=member,
    )
    assert form.is_valid(), form.errors
    assert form.save().estimated_delivery_time == BOTH_DELIVERY_TIME


def test_both_time_members_keep_fixed_times(make_member):
    member = make_member(time_preference=TimePreference.BOTH, estimated_delivery_time="11:00 AM")
    assert member.estimated_delivery_time == BOTH_DELIVERY_TIME
    assert member.delivery_times == ["01:00 PM", "09:00 PM"]

    member.time_preference = TimePreference.NIGHT
    member.save(update_fields=["time_preference"])
    member.refresh_from_db()
    assert member.estimated_delivery_time == "09:00 PM"


def test_unknown_time_preference_is_reported_by_validation(make_member):
    member = make_member()
    member.time_preference = "brunch"
    member.estimated_delivery_time = ""
    with pytest.raises(ValidationError) as excinfo:
        member.full_clean()
    assert "time_preference" in excinfo.value.message_dict

    member.save()
    assert member.estimated_delivery_time == ""


def test_days_remaining(make_member):
    member = make_member(expiry_date=datetime.date(2026, 4, 1))
    assert member.days_remaining(today=datetime.date(2026, 3, 22)) == 10
    assert make_member().days_remaining() is None


# --- login ---

def test_member_login(client, make_member):
    make_member(email="anjali@example.com", username="anjali@example.com", status=RegistrationStatus.PENDING)
    response = client.post(reverse("login"), {"email": "ANJALI@example.com", "password": "curryleaf123"})
    assert response.status_code == 302
    assert response.url == reverse("member_dashboard")


def test_admin_login(client, kitchen_admin):
    response = client.post(reverse("login"), {"email": kitchen_admin.email, "password": "admin12345"})
    assert response.url == reverse("admin_dashboard")


def test_rejected_member_cannot_log_in(client, make_member):
    member = make_member(status=RegistrationStatus.REJECTED)
    response = client.post(reverse("login"), {"email": member.email, "password": "curryleaf123"})
    assert response.status_code == 200
    assert "_auth_user_id" not in client.session


def test_wrong_password(client, make_member):
    member = make_member()
    response = client.post(reverse("login"), {"email": member.email, "password": "wrong-password"})
    assert response.status_code == 200
    assert "_auth_user_id" not in client.session


@pytest.mark.django_db
def test_register_view(client):
    response = client.post(reverse("register"), _registration())
    assert response.status_code == 302
    assert User.objects.get(email="lakshmi@example.com").status == RegistrationStatus.PENDING


# --- background work ---

def test_advance_days_active(make_member):
    today = timezone.localdate()
    active = make_member(days_active=3, expiry_date=today)
    open_ended = make_member()
    expired = make_member(days_active=30, expiry_date=today - datetime.timedelta(days=1))
    pending = make_member(status=RegistrationStatus.PENDING)

    assert advance_days_active() == 2

    for member in (active, open_ended, expired, pending):
        member.refresh_from_db()
    assert active.days_active == 4
    assert open_ended.days_active == 1
    assert expired.days_active == 30
    assert pending.days_active == 0


def test_advance_days_active_command(make_member):
    member = make_member()
    call_command("advance_days_active")
    member.refresh_from_db()
    assert member.days_active == 1


@pytest.mark.django_db
def test_seed_command():
    call_command("seed", members=5, seed=42)
    assert User.objects.filter(role=User.Role.MEMBER).count() == 5
    assert User.objects.filter(role=User.Role.ADMIN, email="admin@keralakitchen.com").exists()
    assert MenuItem.objects.count() == 8
    assert DailyMenu.objects.count() == 6
    assert set(User.objects.values_list("plan_type", flat=True)) <= {PlanType.MONTHLY, PlanType.YEARLY}
    assert set(User.objects.values_list("payment_status", flat=True)) <= set(PaymentStatus.values)
