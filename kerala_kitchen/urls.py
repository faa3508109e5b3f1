from django.contrib import admin
from django.shortcuts import redirect
from django.urls import include, path


def home(request):
    if not request.user.is_authenticated:
        return redirect("login")
    if request.user.is_kitchen_admin:
        return redirect("admin_dashboard")
    return redirect("member_dashboard")


urlpatterns = [
    path("", home, name="home"),
    path("admin/", admin.site.urls),
    path("accounts/", include("accounts.urls")),
    path("kitchen/", include("kitchen.urls")),
    path("member/", include("member.urls")),
    path("select2/", include("django_select2.urls")),
]
