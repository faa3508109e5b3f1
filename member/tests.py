import datetime

import pytest
from django.core.exceptions import ValidationError
from django.urls import reverse
from django.utils import timezone

from kitchen.choices import (
    ApprovalStatus,
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
    PlanType,
    TimePreference,
    TimeSlot,
)
from kitchen.exceptions import InvariantViolation
from kitchen.models import DailyMenu, MenuItem, Payment

from . import services
from .models import DeliveryRequest, Feedback, MenuSelection

TODAY = datetime.date(2026, 3, 10)
TOMORROW = TODAY + datetime.timedelta(days=1)


def _at(hour, minute=0):
    return timezone.make_aware(datetime.datetime.combine(TODAY, datetime.time(hour, minute)))


@pytest.fixture
def tomorrows_menu(db):
    menu = DailyMenu.objects.create(date=TOMORROW, time_slot=TimeSlot.AFTERNOON)
    rice = MenuItem.objects.create(name="Kerala Matta Rice")
    curry = MenuItem.objects.create(name="Fish Curry", is_optional=True, alternatives=["Egg Roast", "Kadala Curry"])
    menu.items.set([rice, curry])
    return menu, rice, curry


# --- delivery requests ---

def test_delivery_request(make_member):
    member = make_member(time_preference=TimePreference.AFTERNOON)
    request = services.submit_delivery_request(member, TimeSlot.AFTERNOON, " 12:30 PM ", "Office lunch moved")
    assert request.current_time == "01:00 PM"
    assert request.requested_time == "12:30 PM"
    assert request.status == ApprovalStatus.PENDING


def test_both_time_members_cannot_request_changes(make_member):
    member = make_member(time_preference=TimePreference.BOTH)
    with pytest.raises(ValidationError):
        services.submit_delivery_request(member, TimeSlot.NIGHT, "08:30 PM", "Gym")
    assert not DeliveryRequest.objects.exists()


def test_delivery_request_must_change_something(make_member):
    member = make_member(time_preference=TimePreference.NIGHT)
    with pytest.raises(ValidationError):
        services.submit_delivery_request(member, TimeSlot.NIGHT, "09:00 PM", "No reason")
    with pytest.raises(ValidationError):
        services.submit_delivery_request(member, TimeSlot.NIGHT, "", "Later please")
    with pytest.raises(ValidationError):
        services.submit_delivery_request(member, TimeSlot.NIGHT, "09:30 PM", "  ")


def test_one_pending_delivery_request_at_a_time(make_member):
    member = make_member()
    services.submit_delivery_request(member, TimeSlot.NIGHT, "09:00 PM", "Night shift")
    with pytest.raises(ValidationError):
        services.submit_delivery_request(member, TimeSlot.NIGHT, "09:30 PM", "Night shift, later")


# --- feedback ---

@pytest.mark.parametrize("rating", [0, 6, "abc", None])
def test_feedback_rating_bounds(make_member, rating):
    with pytest.raises(ValidationError):
        services.submit_feedback(make_member(), rating, "Tasty")


def test_feedback(make_member):
    member = make_member()
    with pytest.raises(ValidationError):
        services.submit_feedback(member, 4, "   ")
    feedback = services.submit_feedback(member, "5", "Best avial in Ajman")
    assert feedback.rating == 5
    assert feedback.status == ApprovalStatus.PENDING


# --- menu selection ---

def test_menu_selection(make_member, tomorrows_menu):
    member = make_member()
    menu, rice, curry = tomorrows_menu
    selection = services.submit_menu_selection(
        member, menu, {rice.pk: "Kerala Matta Rice", str(curry.pk): "Egg Roast"}, "Less spicy", now=_at(9),
    )
    assert selection.selections == {str(rice.pk): "Kerala Matta Rice", str(curry.pk): "Egg Roast"}

    services.submit_menu_selection(member, menu, {curry.pk: "Fish Curry"}, now=_at(11, 59))
    assert MenuSelection.objects.get(user=member, menu=menu).selections == {str(curry.pk): "Fish Curry"}


def test_menu_selection_closes_at_noon(make_member, tomorrows_menu):
    menu, _, curry = tomorrows_menu
    with pytest.raises(ValidationError):
        services.submit_menu_selection(make_member(), menu, {curry.pk: "Egg Roast"}, now=_at(12, 1))
    assert not MenuSelection.objects.exists()


def test_menu_selection_rejects_unknown_options(make_member, tomorrows_menu):
    member = make_member()
    menu, rice, curry = tomorrows_menu
    with pytest.raises(ValidationError):
        services.submit_menu_selection(member, menu, {curry.pk: "Biryani"}, now=_at(9))
    with pytest.raises(ValidationError):
        services.submit_menu_selection(member, menu, {rice.pk: "Chapati"}, now=_at(9))
    with pytest.raises(ValidationError):
        services.submit_menu_selection(member, menu, {9999: "Fish Curry"}, now=_at(9))


def test_only_tomorrows_menu_can_be_customised(make_member, tomorrows_menu):
    menu, _, curry = tomorrows_menu
    later = DailyMenu.objects.create(date=TOMORROW + datetime.timedelta(days=1), time_slot=TimeSlot.NIGHT)
    later.items.add(curry)
    with pytest.raises(ValidationError):
        services.submit_menu_selection(make_member(), later, {curry.pk: "Egg Roast"}, now=_at(9))


# --- views ---

def test_dashboard_shows_only_approved_feedback(client, make_member):
    member = make_member()
    author = make_member(full_name="Suresh Kumar")
    Feedback.objects.create(user=author, rating=5, message="Published", status=ApprovalStatus.APPROVED)
    Feedback.objects.create(user=author, rating=2, message="Waiting", status=ApprovalStatus.PENDING)

    client.force_login(member)
    response = client.get(reverse("member_dashboard"))
    assert response.status_code == 200
    assert [f.message for f in response.context["public_feedback"]] == ["Published"]
    assert response.context["price"].due == 750


def test_dashboard_lists_tomorrows_menus(client, make_member):
    tomorrow = timezone.localdate() + datetime.timedelta(days=1)
    menu = DailyMenu.objects.create(date=tomorrow, time_slot=TimeSlot.NIGHT)
    client.force_login(make_member())
    response = client.get(reverse("member_dashboard"))
    assert [entry["menu"] for entry in response.context["menus"]] == [menu]


def test_admins_are_sent_away_from_member_pages(admin_client):
    response = admin_client.get(reverse("member_dashboard"))
    assert response.status_code == 302
    assert response.url == reverse("home")


def test_request_delivery_change_view(client, make_member):
    member = make_member()
    client.force_login(member)
    response = client.post(reverse("request_delivery_change"), {
        "requested_time_slot": "night",
        "requested_time": "09:00 PM",
        "reason": "Night shift",
    })
    assert response.status_code == 302
    assert DeliveryRequest.objects.get(user=member).requested_time == "09:00 PM"


def test_submit_feedback_view(client, make_member):
    member = make_member()
    client.force_login(member)
    client.post(reverse("submit_feedback"), {"rating": "4", "message": "Good sambar"})
    assert Feedback.objects.get(user=member).rating == 4


def test_dashboard_shows_todays_menu_read_only(client, make_member):
    dish = MenuItem.objects.create(name="Avial", description="Mixed vegetables in coconut and curd")
    menu = DailyMenu.objects.create(date=timezone.localdate(), time_slot=TimeSlot.AFTERNOON, notes="Onam special")
    menu.items.add(dish)

    client.force_login(make_member())
    response = client.get(reverse("member_dashboard"))

    assert list(response.context["today_menus"]) == [menu]
    assert response.context["menus"] == []
    content = response.content.decode()
    assert "Avial" in content
    assert "Mixed vegetables in coconut and curd" in content
    assert "Onam special" in content
    assert reverse("customise_menu", args=[menu.pk]) not in content


# --- payments ---

def test_submit_payment_for_amount_due(make_member):
    member = make_member(payment_status=PaymentStatus.HALF_PAID, plan_type=PlanType.YEARLY)
    payment = services.submit_payment(member, PaymentMethod.BANK_TRANSFER, " TXN-0042 ")
    assert payment.amount == 4000
    assert payment.status == PaymentRecordStatus.PENDING
    assert payment.transaction_id == "TXN-0042"

    with pytest.raises(ValidationError):
        services.submit_payment(member, PaymentMethod.CASH)
    assert Payment.objects.filter(user=member).count() == 1


def test_submit_payment_refusals(make_member):
    with pytest.raises(ValidationError):
        services.submit_payment(make_member(payment_status=PaymentStatus.PAID), PaymentMethod.CASH)
    with pytest.raises(ValidationError):
        services.submit_payment(make_member(), "cheque")
    with pytest.raises(InvariantViolation):
        services.submit_payment(make_member(plan_type=PlanType.WEEKLY), PaymentMethod.CASH)
    assert not Payment.objects.exists()


def test_dashboard_shows_bank_details(client, make_member, settings):
    settings.KITCHEN_BANK_DETAILS = {"IBAN": "AE070260001234567890123"}
    client.force_login(make_member())
    response = client.get(reverse("member_dashboard"))
    content = response.content.decode()
    assert "AE070260001234567890123" in content
    assert reverse("submit_payment") in content


def test_submit_payment_view(client, make_member):
    member = make_member()
    client.force_login(member)
    response = client.post(reverse("submit_payment"), {"method": "cash"})
    assert response.status_code == 302
    payment = Payment.objects.get(user=member)
    assert payment.amount == 750
    assert payment.method == PaymentMethod.CASH

    response = client.get(reverse("member_dashboard"))
    assert response.context["pending_payment"] == payment
