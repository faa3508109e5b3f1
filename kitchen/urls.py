from django.urls import path

from . import views

urlpatterns = [
    path('dashboard/', views.AdminDashboardView.as_view(), name='admin_dashboard'),

    path('users/', views.manage_users, name='manage_users'),
    path('users/<int:user_id>/edit/', views.edit_member, name='edit_member'),
    path('users/<int:user_id>/delete/', views.delete_member, name='delete_member'),
    path('users/<int:user_id>/payment/advance/', views.advance_payment, name='advance_payment'),
    path('users/<int:user_id>/<str:action>/', views.review_registration, name='review_registration'),

    path('payments/', views.payments, name='payments'),
    path('payments/record/<int:user_id>/', views.record_payment, name='record_payment'),
    path('payments/<int:payment_id>/confirm/', views.confirm_payment, name='confirm_payment'),
    path('payments/remind/<int:user_id>/', views.send_reminder, name='send_reminder'),

    path('delivery-requests/', views.delivery_requests, name='delivery_requests'),
    path('delivery-requests/<int:request_id>/<str:action>/', views.process_delivery_request, name='process_delivery_request'),

    path('feedback/', views.feedback_list, name='feedback_list'),
    path('feedback/<int:feedback_id>/<str:action>/', views.moderate_feedback, name='moderate_feedback'),

    path('menu/', views.menu_list, name='menu_list'),
    path('menu/create/', views.menu_create, name='menu_create'),
    path('menu/<int:pk>/update/', views.menu_update, name='menu_update'),
    path('menu/<int:pk>/delete/', views.menu_delete, name='menu_delete'),

    path('schedule/', views.DailyMenuListView.as_view(), name='daily_menu_list'),
    path('schedule/add/', views.DailyMenuCreateView.as_view(), name='daily_menu_add'),
    path('schedule/<int:pk>/edit/', views.DailyMenuUpdateView.as_view(), name='daily_menu_edit'),
    path('schedule/<int:pk>/delete/', views.DailyMenuDeleteView.as_view(), name='daily_menu_delete'),

    path('announcements/', views.announcements, name='announcements'),
    path('announcements/<str:kind>/<int:pk>/edit/', views.edit_announcement, name='edit_announcement'),
    path('announcements/<str:kind>/<int:pk>/toggle/', views.toggle_announcement, name='toggle_announcement'),
    path('announcements/<str:kind>/<int:pk>/delete/', views.delete_announcement, name='delete_announcement'),
]
