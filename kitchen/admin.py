from django.contrib import admin

from .models import Banner, DailyMenu, MenuItem, Notification, Payment


# Helper function to display all fields dynamically
def get_all_fields(model):
    return [field.name for field in model._meta.get_fields() if not field.many_to_many and not field.one_to_many]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = get_all_fields(MenuItem)
    search_fields = ("name", "description")
    list_filter = ("is_optional",)


@admin.register(DailyMenu)
class DailyMenuAdmin(admin.ModelAdmin):
    list_display = ("date", "time_slot", "cutoff_time", "created_at")
    list_filter = ("time_slot", "date")
    filter_horizontal = ("items",)


@admin.register(Banner)
class BannerAdmin(admin.ModelAdmin):
    list_display = get_all_fields(Banner)
    list_filter = ("type", "is_active")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = get_all_fields(Notification)
    list_filter = ("type", "is_active")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = get_all_fields(Payment)
    search_fields = ("user__full_name", "user__email", "transaction_id")
    list_filter = ("method", "status", "paid_at")
    raw_id_fields = ("user",)
