import datetime

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from kitchen.choices import ApprovalStatus, PaymentMethod, PaymentRecordStatus, TimeSlot
from kitchen.decorators import member_required
from kitchen.exceptions import InvariantViolation
from kitchen.models import Banner, DailyMenu, Notification, Payment
from kitchen.rules import can_edit_next_day

from . import services
from .models import Feedback, MenuSelection


@login_required
@member_required
def member_dashboard(request):
    user = request.user
    now = timezone.now()
    today = timezone.localdate()
    tomorrow = today + datetime.timedelta(days=1)

    try:
        price = user.plan_price()
    except InvariantViolation:
        price = None

    tomorrow_menus = DailyMenu.objects.filter(date=tomorrow).prefetch_related('items')
    selections = {
        s.menu_id: s for s in MenuSelection.objects.filter(user=user, menu__in=tomorrow_menus)
    }

    context = {
        'member': user,
        'price': price,
        'days_remaining': user.days_remaining(),
        'banners': Banner.objects.filter(is_active=True),
        'notifications': Notification.objects.filter(is_active=True),
        'today_menus': DailyMenu.objects.filter(date=today).prefetch_related('items'),
        'tomorrow': tomorrow,
        'menus': [
            {'menu': menu, 'selection': selections.get(menu.pk)} for menu in tomorrow_menus
        ],
        'can_edit_menu': can_edit_next_day(now),
        'public_feedback': Feedback.objects.filter(status=ApprovalStatus.APPROVED).select_related('user')[:10],
        'delivery_requests': user.delivery_requests.all(),
        'time_slots': TimeSlot.choices,
        'payment_methods': PaymentMethod.choices,
        'bank_details': settings.KITCHEN_BANK_DETAILS,
        'pending_payment': Payment.objects.filter(user=user, status=PaymentRecordStatus.PENDING).first(),
    }
    return render(request, 'member/dashboard.html', context)


@require_POST
@login_required
@member_required
def request_delivery_change(request):
    try:
        services.submit_delivery_request(
            request.user,
            request.POST.get('requested_time_slot'),
            request.POST.get('requested_time'),
            request.POST.get('reason'),
        )
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    else:
        messages.success(
            request,
            "Delivery time change request submitted! The kitchen will review and update your delivery time.",
        )
    return redirect('member_dashboard')


@require_POST
@login_required
@member_required
def submit_feedback(request):
    try:
        services.submit_feedback(request.user, request.POST.get('rating'), request.POST.get('message'))
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    else:
        messages.success(request, "Thank you for your feedback! It will be reviewed and published soon.")
    return redirect('member_dashboard')


@require_POST
@login_required
@member_required
def customise_menu(request, menu_id):
    menu = get_object_or_404(DailyMenu, pk=menu_id)
    # form fields are named item_<id>
    selections = {
        key.removeprefix('item_'): value
        for key, value in request.POST.items()
        if key.startswith('item_')
    }
    try:
        services.submit_menu_selection(request.user, menu, selections, request.POST.get('special_note', ''))
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    else:
        messages.success(request, f"Your choices for {menu} have been saved.")
    return redirect('member_dashboard')


@require_POST
@login_required
@member_required
def submit_payment(request):
    try:
        payment = services.submit_payment(
            request.user, request.POST.get('method'), request.POST.get('transaction_id', ''),
        )
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    except InvariantViolation as e:
        messages.error(request, str(e))
    else:
        messages.success(
            request,
            f"Payment of AED {payment.amount} submitted. We will verify it and update your status.",
        )
    return redirect('member_dashboard')
