import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from kitchen.choices import ApprovalStatus, PaymentMethod, PaymentRecordStatus, TimePreference
from kitchen.models import Payment
from kitchen.rules import can_edit_next_day, price_for

from .models import DeliveryRequest, Feedback, MenuSelection

logger = logging.getLogger(__name__)


def submit_delivery_request(user, requested_time_slot, requested_time, reason):
    """
    Files a request to move the member's delivery to another slot/time.
    Returns the new DeliveryRequest or raises ValidationError.
    """
    requested_time = (requested_time or "").strip()
    reason = (reason or "").strip()

    if user.time_preference == TimePreference.BOTH:
        raise ValidationError("Members on both slots have fixed delivery times (01:00 PM and 09:00 PM).")
    if not requested_time:
        raise ValidationError("Please enter the delivery time you would like.")
    if not reason:
        raise ValidationError("Please tell us why you need the change.")
    if requested_time == user.estimated_delivery_time and requested_time_slot == user.time_preference:
        raise ValidationError("That is already your delivery time.")
    if DeliveryRequest.objects.filter(user=user, status=ApprovalStatus.PENDING).exists():
        raise ValidationError("You already have a delivery time request waiting for review.")

    delivery_request = DeliveryRequest(
        user=user,
        current_time=user.estimated_delivery_time,
        requested_time_slot=requested_time_slot,
        requested_time=requested_time,
        reason=reason,
    )
    delivery_request.full_clean()
    delivery_request.save()
    logger.info("%s requested delivery at %s (%s)", user, requested_time, requested_time_slot)
    return delivery_request


def submit_feedback(user, rating, message):
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise ValidationError("Please select a rating.")
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5.")
    message = (message or "").strip()
    if not message:
        raise ValidationError("Please write a few words about your meals.")

    feedback = Feedback.objects.create(user=user, rating=rating, message=message)
    logger.info("Feedback %s (%s/5) submitted by %s", feedback.pk, rating, user)
    return feedback


def submit_menu_selection(user, menu, selections, special_note="", now=None):
    """
    Saves (or replaces) the member's picks for tomorrow's menu.
    ``selections`` maps menu item ids to the chosen option name.
    """
    now = now or timezone.now()
    today = timezone.localtime(now).date() if timezone.is_aware(now) else now.date()

    if menu.date != today + datetime.timedelta(days=1):
        raise ValidationError("Only tomorrow's menu can be customised.")
    if not can_edit_next_day(now):
        raise ValidationError("Menu changes are only allowed before 12:00 PM.")

    items = {str(item.pk): item for item in menu.items.all()}
    cleaned = {}
    for item_id, option in (selections or {}).items():
        item = items.get(str(item_id))
        if item is None:
            raise ValidationError(f"Dish {item_id} is not on this menu.")
        if option not in item.choices():
            raise ValidationError(f"'{option}' is not an option for {item.name}.")
        cleaned[str(item_id)] = option

    with transaction.atomic():
        selection, created = MenuSelection.objects.update_or_create(
            user=user,
            menu=menu,
            defaults={"selections": cleaned, "special_note": (special_note or "").strip(), "submitted_at": now},
        )
    logger.info("%s %s menu selection for %s", user, "saved" if created else "updated", menu)
    return selection


def submit_payment(user, method, transaction_id=""):
    """
    Records the member's "I have paid" for whatever is still due on their plan.
    The payment stays pending until the kitchen confirms it.
    Raises InvariantViolation for unpriced plans and ValidationError when
    nothing is due or a payment is already waiting for verification.
    """
    price = price_for(user.plan_type, user.payment_status)
    if price.due == 0:
        raise ValidationError("Your plan is fully paid.")
    if method not in PaymentMethod.values:
        raise ValidationError("Please choose cash or bank transfer.")
    if Payment.objects.filter(user=user, status=PaymentRecordStatus.PENDING).exists():
        raise ValidationError("Your last payment is still being verified by the kitchen.")

    payment = Payment(
        user=user,
        amount=price.due,
        method=method,
        status=PaymentRecordStatus.PENDING,
        transaction_id=(transaction_id or "").strip(),
    )
    payment.full_clean()
    payment.save()
    logger.info("%s submitted a %s payment of AED %s for verification", user, method, price.due)
    return payment
