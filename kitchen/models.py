import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .choices import (
    BannerType,
    NotificationType,
    PaymentMethod,
    PaymentRecordStatus,
    TimeSlot,
)

DEFAULT_CUTOFF_TIMES = {
    TimeSlot.AFTERNOON: datetime.time(12, 0),
    TimeSlot.NIGHT: datetime.time(18, 0),
}


class MenuItem(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_optional = models.BooleanField(default=False, help_text="Members may swap this dish for an alternative.")
    alternatives = models.JSONField(default=list, blank=True, help_text="Substitute dish names offered when optional.")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        if not isinstance(self.alternatives, list) or not all(isinstance(a, str) and a.strip() for a in self.alternatives):
            raise ValidationError({"alternatives": "Alternatives must be a list of dish names."})
        if self.alternatives and not self.is_optional:
            raise ValidationError({"alternatives": "Only optional dishes can offer alternatives."})

    def choices(self):
        """Options a member may pick for this dish."""
        if self.is_optional:
            return [self.name, *self.alternatives]
        return [self.name]


class DailyMenu(models.Model):
    date = models.DateField()
    time_slot = models.CharField(max_length=10, choices=TimeSlot.choices)
    items = models.ManyToManyField(MenuItem, blank=True, related_name="daily_menus")
    notes = models.TextField(blank=True)
    cutoff_time = models.TimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("date", "time_slot")
        ordering = ["-date", "time_slot"]

    def __str__(self):
        return f"{self.date} {self.get_time_slot_display()}"

    def save(self, *args, **kwargs):
        if self.cutoff_time is None:
            self.cutoff_time = DEFAULT_CUTOFF_TIMES[self.time_slot]
        super().save(*args, **kwargs)


class Banner(models.Model):
    title = models.CharField(max_length=200)
    content = models.TextField()
    type = models.CharField(max_length=20, choices=BannerType.choices, default=BannerType.INFO)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class Notification(models.Model):
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=NotificationType.choices, default=NotificationType.INFO)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class Payment(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(max_length=20, choices=PaymentRecordStatus.choices, default=PaymentRecordStatus.PENDING)
    transaction_id = models.CharField(max_length=100, blank=True)
    paid_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-paid_at"]

    def __str__(self):
        return f"AED {self.amount} from {self.user} ({self.get_status_display()})"

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": "Payment amount must be positive."})
