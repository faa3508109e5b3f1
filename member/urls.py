from django.urls import path

from . import views

urlpatterns = [
    path("dashboard/", views.member_dashboard, name="member_dashboard"),
    path("delivery-request/", views.request_delivery_change, name="request_delivery_change"),
    path("feedback/", views.submit_feedback, name="submit_feedback"),
    path("menu/<int:menu_id>/customise/", views.customise_menu, name="customise_menu"),
    path("payment/", views.submit_payment, name="submit_payment"),
]
