from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "full_name", "phone", "role", "status", "plan_type", "payment_status",
                    "time_preference", "estimated_delivery_time", "joined_date", "expiry_date", "days_active")
    search_fields = ("email", "full_name", "phone", "username")
    list_filter = ("role", "status", "plan_type", "payment_status", "time_preference")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Subscription", {
            "fields": ("role", "full_name", "phone", "address", "latitude", "longitude", "status", "plan_type",
                       "payment_status", "time_preference", "estimated_delivery_time", "joined_date",
                       "expiry_date", "days_active"),
        }),
    )
