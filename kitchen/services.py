import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from member.models import DeliveryRequest, Feedback

from .choices import ApprovalStatus, TimePreference
from .exceptions import InvariantViolation
from .models import Payment
from .rules import StatusAction, StatusAxis, is_priced, next_status, price_for

logger = logging.getLogger(__name__)


def _members():
    return User.objects.filter(role=User.Role.MEMBER)


def review_registration(user_id, action):
    """
    Approves or rejects a pending registration.
    Raises User.DoesNotExist for an unknown member and ValidationError when
    the registration was already reviewed.
    """
    with transaction.atomic():
        user = _members().select_for_update().get(pk=user_id)
        new_status = next_status(StatusAxis.REGISTRATION, user.status, action)
        if new_status == user.status:
            raise ValidationError(f"Registration for {user} is already {user.get_status_display().lower()}.")
        user.status = new_status
        user.save(update_fields=["status"])
    logger.info("Registration of %s (id=%s) is now %s", user, user.pk, new_status)
    return user


def advance_payment_status(user_id):
    """Moves a member one step round paid -> half_paid -> unpaid -> paid."""
    with transaction.atomic():
        user = _members().select_for_update().get(pk=user_id)
        if not is_priced(user.plan_type):
            logger.warning("Refusing payment change for %s: plan %s has no price", user, user.plan_type)
            raise InvariantViolation(f"{user} is on the {user.plan_type} plan, which has no price.")
        user.payment_status = next_status(StatusAxis.PAYMENT, user.payment_status, StatusAction.ADVANCE)
        user.save(update_fields=["payment_status"])
    logger.info("Payment status of %s (id=%s) set to %s", user, user.pk, user.payment_status)
    return user


def update_member(form):
    """Saves a bound, valid MemberEditForm."""
    user = form.save()
    logger.info("Member %s (id=%s) updated: %s", user, user.pk, ", ".join(form.changed_data) or "no changes")
    return user


def delete_member(user_id):
    user = _members().get(pk=user_id)
    name = str(user)
    user.delete()
    logger.info("Member %s (id=%s) deleted", name, user_id)


def process_delivery_request(request_id, action):
    """
    Approves or rejects a delivery-time change request. Approval writes the
    requested slot and time through to the member in the same transaction.
    """
    with transaction.atomic():
        delivery_request = DeliveryRequest.objects.select_for_update().select_related("user").get(pk=request_id)
        new_status = next_status(StatusAxis.DELIVERY_REQUEST, delivery_request.status, action)
        if new_status == delivery_request.status:
            raise ValidationError("This delivery request has already been processed.")
        if new_status == ApprovalStatus.APPROVED and delivery_request.user.time_preference == TimePreference.BOTH:
            logger.warning(
                "Refusing delivery request %s: %s is now on both slots", delivery_request.pk, delivery_request.user,
            )
            raise ValidationError(
                f"{delivery_request.user} now receives both meals at fixed times; reject this request instead."
            )

        delivery_request.status = new_status
        delivery_request.processed_at = timezone.now()
        delivery_request.save(update_fields=["status", "processed_at"])

        if new_status == ApprovalStatus.APPROVED:
            user = delivery_request.user
            user.time_preference = delivery_request.requested_time_slot
            user.estimated_delivery_time = delivery_request.requested_time
            user.save(update_fields=["time_preference", "estimated_delivery_time"])

    logger.info(
        "Delivery request %s for %s %s (%s -> %s)",
        delivery_request.pk, delivery_request.user, new_status,
        delivery_request.current_time, delivery_request.requested_time,
    )
    return delivery_request


def moderate_feedback(feedback_id, action):
    with transaction.atomic():
        feedback = Feedback.objects.select_for_update().get(pk=feedback_id)
        new_status = next_status(StatusAxis.FEEDBACK, feedback.status, action)
        if new_status == feedback.status:
            raise ValidationError("This feedback has already been moderated.")
        feedback.status = new_status
        if new_status == ApprovalStatus.APPROVED:
            feedback.approved_at = timezone.now()
        feedback.save(update_fields=["status", "approved_at"])
    logger.info("Feedback %s %s", feedback.pk, new_status)
    return feedback


def record_payment(user, amount, method, transaction_id=""):
    """Logs money received. The member's payment standing is left for the admin to set."""
    payment = Payment(user=user, amount=amount, method=method, transaction_id=transaction_id)
    payment.full_clean()
    payment.save()
    logger.info("Recorded %s payment of AED %s from %s", method, amount, user)
    return payment


def confirm_payment(payment_id):
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment_id)
        new_status = next_status(StatusAxis.PAYMENT_RECORD, payment.status, StatusAction.CONFIRM)
        if new_status == payment.status:
            raise ValidationError("This payment is already confirmed.")
        payment.status = new_status
        payment.save(update_fields=["status"])
    logger.info("Payment %s confirmed", payment.pk)
    return payment


def send_payment_reminder(user):
    """
    E-mails the member the amount still due on their plan.
    Returns the amount; raises ValidationError when nothing is due.
    """
    price = price_for(user.plan_type, user.payment_status)
    if price.due == 0:
        raise ValidationError(f"{user} has nothing outstanding.")
    if not user.email:
        raise ValidationError(f"{user} has no e-mail address on file.")

    subject = "Kerala Kitchen payment reminder"
    message = (
        f"Dear {user},\n\n"
        f"AED {price.due} is outstanding on your {user.get_plan_type_display().lower()} plan. "
        f"Please pay by cash or bank transfer at your earliest convenience.\n\n"
        f"Kerala Kitchen"
    )
    send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [user.email])
    logger.info("Payment reminder for AED %s sent to %s", price.due, user.email)
    return price.due


def toggle_active(obj):
    """Flips is_active on a banner or notification."""
    obj.is_active = not obj.is_active
    obj.save(update_fields=["is_active"])
    logger.info("%s '%s' is now %s", type(obj).__name__, obj, "active" if obj.is_active else "inactive")
    return obj
