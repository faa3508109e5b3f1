from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from kitchen.choices import (
    BOTH_DELIVERY_TIME,
    DEFAULT_DELIVERY_TIMES,
    PaymentStatus,
    PlanType,
    RegistrationStatus,
    TimePreference,
)
from kitchen.rules import price_for


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", _("Kitchen Admin")
        MEMBER = "MEMBER", _("Member")

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    full_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=15, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True, null=True, blank=True)
    address = models.TextField(blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=RegistrationStatus.choices, default=RegistrationStatus.PENDING)
    plan_type = models.CharField(max_length=20, choices=PlanType.choices, default=PlanType.MONTHLY)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    time_preference = models.CharField(max_length=20, choices=TimePreference.choices, default=TimePreference.AFTERNOON)
    estimated_delivery_time = models.CharField(max_length=30, blank=True)
    joined_date = models.DateField(default=timezone.localdate)
    expiry_date = models.DateField(null=True, blank=True)
    days_active = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-joined_date", "full_name"]

    def __str__(self):
        return self.full_name or self.username

    @property
    def is_kitchen_admin(self):
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def delivery_times(self):
        """Delivery times the member receives, one per enrolled slot."""
        if self.time_preference == TimePreference.BOTH:
            return BOTH_DELIVERY_TIME.split(" / ")
        return [self.estimated_delivery_time]

    def plan_price(self):
        return price_for(self.plan_type, self.payment_status)

    def days_remaining(self, today=None):
        if not self.expiry_date:
            return None
        today = today or timezone.localdate()
        return (self.expiry_date - today).days

    def save(self, *args, **kwargs):
        # 'both' members always get the two fixed slots
        if self.time_preference == TimePreference.BOTH:
            self.estimated_delivery_time = BOTH_DELIVERY_TIME
        elif self.estimated_delivery_time in ("", BOTH_DELIVERY_TIME):
            self.estimated_delivery_time = DEFAULT_DELIVERY_TIMES.get(self.time_preference, "")
        update_fields = kwargs.get("update_fields")
        if update_fields and "time_preference" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"estimated_delivery_time"}
        super().save(*args, **kwargs)
