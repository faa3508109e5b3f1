from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from kitchen.choices import ApprovalStatus, TimeSlot


class DeliveryRequest(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="delivery_requests")
    current_time = models.CharField(max_length=30, help_text="Delivery time when the request was filed")
    requested_time_slot = models.CharField(max_length=10, choices=TimeSlot.choices)
    requested_time = models.CharField(max_length=30)
    reason = models.TextField()
    status = models.CharField(max_length=20, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    submitted_at = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"{self.user}: {self.current_time} -> {self.requested_time} ({self.status})"


class Feedback(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="feedback")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    message = models.TextField()
    status = models.CharField(max_length=20, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    submitted_at = models.DateTimeField(default=timezone.now)
    approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-submitted_at"]
        verbose_name_plural = "feedback"

    def __str__(self):
        return f"{self.rating}/5 from {self.user}"


class MenuSelection(models.Model):
    """A member's picks for one of tomorrow's menus."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="menu_selections")
    menu = models.ForeignKey("kitchen.DailyMenu", on_delete=models.CASCADE, related_name="selections")
    # {"<menu item id>": "<chosen option>"}
    selections = models.JSONField(default=dict)
    special_note = models.TextField(blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ("user", "menu")

    def __str__(self):
        return f"{self.user} - {self.menu}"
