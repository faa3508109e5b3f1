from django.contrib import admin

from .models import DeliveryRequest, Feedback, MenuSelection


@admin.register(DeliveryRequest)
class DeliveryRequestAdmin(admin.ModelAdmin):
    list_display = ("user", "current_time", "requested_time_slot", "requested_time", "status", "submitted_at", "processed_at")
    list_filter = ("status", "requested_time_slot")
    search_fields = ("user__full_name", "user__email", "reason")
    raw_id_fields = ("user",)
    readonly_fields = ("submitted_at", "processed_at")


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ("user", "rating", "status", "submitted_at", "approved_at")
    list_filter = ("status", "rating")
    raw_id_fields = ("user",)


@admin.register(MenuSelection)
class MenuSelectionAdmin(admin.ModelAdmin):
    list_display = ("user", "menu", "submitted_at")
    raw_id_fields = ("user", "menu")
