from django.db import models
from django.utils.translation import gettext_lazy as _


class RegistrationStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


# delivery requests and feedback share the same approval shape
ApprovalStatus = RegistrationStatus


class PlanType(models.TextChoices):
    MONTHLY = "monthly", _("Monthly")
    YEARLY = "yearly", _("Yearly")
    WEEKLY = "weekly", _("Weekly")


class PaymentStatus(models.TextChoices):
    PAID = "paid", _("Fully Paid")
    HALF_PAID = "half_paid", _("Half Paid")
    UNPAID = "unpaid", _("Unpaid")


class TimePreference(models.TextChoices):
    AFTERNOON = "afternoon", _("Afternoon Only")
    NIGHT = "night", _("Night Only")
    BOTH = "both", _("Both Times")


class TimeSlot(models.TextChoices):
    AFTERNOON = "afternoon", _("Afternoon")
    NIGHT = "night", _("Night")


class BannerType(models.TextChoices):
    INFO = "info", _("Info")
    WARNING = "warning", _("Warning")
    SUCCESS = "success", _("Success")
    EMERGENCY = "emergency", _("Emergency")


class NotificationType(models.TextChoices):
    INFO = "info", _("Info")
    WARNING = "warning", _("Warning")
    EMERGENCY = "emergency", _("Emergency")


class PaymentMethod(models.TextChoices):
    CASH = "cash", _("Cash")
    BANK_TRANSFER = "bank_transfer", _("Bank Transfer")


class PaymentRecordStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")


AFTERNOON_DELIVERY_TIME = "01:00 PM"
NIGHT_DELIVERY_TIME = "09:00 PM"
BOTH_DELIVERY_TIME = f"{AFTERNOON_DELIVERY_TIME} / {NIGHT_DELIVERY_TIME}"

DEFAULT_DELIVERY_TIMES = {
    TimePreference.AFTERNOON: AFTERNOON_DELIVERY_TIME,
    TimePreference.NIGHT: NIGHT_DELIVERY_TIME,
    TimePreference.BOTH: BOTH_DELIVERY_TIME,
}
