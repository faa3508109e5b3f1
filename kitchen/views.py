import json

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db.models import Q
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.views.decorators.http import require_POST
from django.views.generic import CreateView, DeleteView, ListView, UpdateView, View

from accounts.forms import MemberEditForm
from accounts.models import User
from member.models import DeliveryRequest, Feedback

from . import services
from .analytics import aggregate, chart_data, payment_summary
from .choices import ApprovalStatus, PaymentStatus, RegistrationStatus
from .decorators import AdminRequiredMixin, admin_required
from .exceptions import InvariantViolation
from .forms import BannerForm, DailyMenuForm, MenuItemForm, NotificationForm, PaymentForm
from .models import Banner, DailyMenu, MenuItem, Notification, Payment


def _error_text(error):
    if isinstance(error, ValidationError):
        return " ".join(error.messages)
    return str(error)


def _members():
    return User.objects.filter(role=User.Role.MEMBER)


class AdminDashboardView(LoginRequiredMixin, AdminRequiredMixin, View):
    template_name = 'kitchen/dashboard.html'

    def get_context_data(self):
        members = list(_members())
        metrics = aggregate(members)
        return {
            'metrics': metrics,
            'charts_json': json.dumps(chart_data(metrics)),
            'pending_registrations': sum(1 for m in members if m.status == RegistrationStatus.PENDING),
            'pending_delivery_requests': DeliveryRequest.objects.filter(status=ApprovalStatus.PENDING).count(),
            'pending_feedback': Feedback.objects.filter(status=ApprovalStatus.PENDING).count(),
            'active_banners': Banner.objects.filter(is_active=True).count(),
        }

    def get(self, request, *args, **kwargs):
        return render(request, self.template_name, self.get_context_data())


# --- Members ---

@login_required
@admin_required
def manage_users(request):
    """
    Lists members with search and status/payment filters.
    """
    query = request.GET.get('q', '')
    status = request.GET.get('status', '')
    payment = request.GET.get('payment', '')

    users = _members()
    if query:
        users = users.filter(
            Q(full_name__icontains=query) |
            Q(email__icontains=query) |
            Q(phone__icontains=query)
        )
    if status:
        users = users.filter(status=status)
    if payment:
        users = users.filter(payment_status=payment)

    context = {
        'users': users,
        'status_choices': RegistrationStatus.choices,
        'payment_choices': PaymentStatus.choices,
        'query': query,
        'selected_status': status,
        'selected_payment': payment,
    }
    return render(request, 'kitchen/users.html', context)


@require_POST
@login_required
@admin_required
def review_registration(request, user_id, action):
    if action not in ('approve', 'reject'):
        messages.error(request, "Invalid action.")
        return redirect('manage_users')
    try:
        user = services.review_registration(user_id, action)
    except User.DoesNotExist:
        raise Http404("Member not found")
    except ValidationError as e:
        messages.warning(request, _error_text(e))
    else:
        messages.success(request, f"Registration for {user} {user.get_status_display().lower()}.")
    return redirect('manage_users')


@require_POST
@login_required
@admin_required
def advance_payment(request, user_id):
    try:
        user = services.advance_payment_status(user_id)
    except User.DoesNotExist:
        raise Http404("Member not found")
    except InvariantViolation as e:
        messages.error(request, str(e))
    else:
        messages.success(request, f"{user} is now {user.get_payment_status_display()}.")
    return redirect('manage_users')


@login_required
@admin_required
def edit_member(request, user_id):
    user = get_object_or_404(_members(), pk=user_id)
    if request.method == 'POST':
        form = MemberEditForm(request.POST, instance=user)
        if form.is_valid():
            services.update_member(form)
            messages.success(request, "Member updated successfully.")
            return redirect('manage_users')
    else:
        form = MemberEditForm(instance=user)
    return render(request, 'kitchen/member_form.html', {'form': form, 'member': user})


@require_POST
@login_required
@admin_required
def delete_member(request, user_id):
    try:
        services.delete_member(user_id)
    except User.DoesNotExist:
        raise Http404("Member not found")
    messages.success(request, "Member deleted.")
    return redirect('manage_users')


# --- Payments ---

def _payment_form(user, data=None):
    # one form per table row, so field names and ids carry the member's id
    return PaymentForm(data, prefix=f'member-{user.pk}')


@login_required
@admin_required
def payments(request):
    payment_filter = request.GET.get('filter', '')
    query = request.GET.get('q', '')

    users = _members()
    if payment_filter:
        users = users.filter(payment_status=payment_filter)
    if query:
        users = users.filter(Q(full_name__icontains=query) | Q(email__icontains=query))
    users = list(users)

    rows = []
    for user in users:
        try:
            price = user.plan_price()
        except InvariantViolation:
            price = None
        rows.append({'user': user, 'price': price, 'form': _payment_form(user)})

    context = {
        'rows': rows,
        'summary': payment_summary(users),
        'metrics': aggregate(users),
        'recent_payments': Payment.objects.select_related('user')[:20],
        'payment_choices': PaymentStatus.choices,
        'selected_filter': payment_filter,
        'query': query,
    }
    return render(request, 'kitchen/payments.html', context)


@require_POST
@login_required
@admin_required
def record_payment(request, user_id):
    user = get_object_or_404(_members(), pk=user_id)
    form = _payment_form(user, request.POST)
    if form.is_valid():
        try:
            services.record_payment(
                user,
                form.cleaned_data['amount'],
                form.cleaned_data['method'],
                form.cleaned_data['transaction_id'],
            )
        except ValidationError as e:
            messages.error(request, _error_text(e))
        else:
            messages.success(request, f"Payment from {user} recorded.")
    else:
        messages.error(request, "Please enter a valid amount and method.")
    return redirect('payments')


@require_POST
@login_required
@admin_required
def confirm_payment(request, payment_id):
    try:
        payment = services.confirm_payment(payment_id)
    except Payment.DoesNotExist:
        raise Http404("Payment not found")
    except ValidationError as e:
        messages.info(request, _error_text(e))
    else:
        messages.success(request, f"Payment of AED {payment.amount} confirmed.")
    return redirect('payments')


@require_POST
@login_required
@admin_required
def send_reminder(request, user_id):
    user = get_object_or_404(_members(), pk=user_id)
    try:
        due = services.send_payment_reminder(user)
    except (ValidationError, InvariantViolation) as e:
        messages.error(request, _error_text(e))
    else:
        messages.success(request, f"Payment reminder for AED {due} sent to {user}.")
    return redirect('payments')


# --- Delivery requests ---

@login_required
@admin_required
def delivery_requests(request):
    status = request.GET.get('status', '')
    requests_list = DeliveryRequest.objects.select_related('user')
    if status:
        requests_list = requests_list.filter(status=status)

    counts = {value: DeliveryRequest.objects.filter(status=value).count() for value, _ in ApprovalStatus.choices}
    context = {
        'requests': requests_list,
        'counts': counts,
        'status_choices': ApprovalStatus.choices,
        'selected_status': status,
    }
    return render(request, 'kitchen/delivery_requests.html', context)


@require_POST
@login_required
@admin_required
def process_delivery_request(request, request_id, action):
    if action not in ('approve', 'reject'):
        messages.error(request, "Invalid action.")
        return redirect('delivery_requests')
    try:
        delivery_request = services.process_delivery_request(request_id, action)
    except DeliveryRequest.DoesNotExist:
        raise Http404("Delivery request not found")
    except ValidationError as e:
        messages.warning(request, _error_text(e))
    else:
        if delivery_request.status == ApprovalStatus.APPROVED:
            messages.success(
                request,
                f"{delivery_request.user}'s delivery time is now {delivery_request.requested_time}.",
            )
        else:
            messages.warning(request, f"Request from {delivery_request.user} rejected.")
    return redirect('delivery_requests')


# --- Feedback ---

@login_required
@admin_required
def feedback_list(request):
    status = request.GET.get('status', ApprovalStatus.PENDING)
    feedback = Feedback.objects.select_related('user')
    if status:
        feedback = feedback.filter(status=status)
    return render(request, 'kitchen/feedback.html', {
        'feedback': feedback,
        'status_choices': ApprovalStatus.choices,
        'selected_status': status,
    })


@require_POST
@login_required
@admin_required
def moderate_feedback(request, feedback_id, action):
    if action not in ('approve', 'reject'):
        messages.error(request, "Invalid action.")
        return redirect('feedback_list')
    try:
        services.moderate_feedback(feedback_id, action)
    except Feedback.DoesNotExist:
        raise Http404("Feedback not found")
    except ValidationError as e:
        messages.warning(request, _error_text(e))
    else:
        messages.success(request, "Feedback updated.")
    return redirect('feedback_list')


# --- Menu items ---

@login_required
@admin_required
def menu_list(request):
    query = request.GET.get("q")
    optional = request.GET.get("optional")
    menu_items = MenuItem.objects.all()
    if query:
        menu_items = menu_items.filter(name__icontains=query)
    if optional:
        menu_items = menu_items.filter(is_optional=True)
    return render(request, "kitchen/menu_list.html", {"menu_items": menu_items})


@login_required
@admin_required
def menu_create(request):
    if request.method == "POST":
        form = MenuItemForm(request.POST)
        if form.is_valid():
            form.save()
            messages.success(request, "Dish added successfully.")
            return redirect("menu_list")
    else:
        form = MenuItemForm()
    return render(request, "kitchen/menu_form.html", {"form": form})


@login_required
@admin_required
def menu_update(request, pk):
    menu_item = get_object_or_404(MenuItem, pk=pk)
    if request.method == "POST":
        form = MenuItemForm(request.POST, instance=menu_item)
        if form.is_valid():
            form.save()
            messages.success(request, "Dish updated successfully.")
            return redirect("menu_list")
    else:
        form = MenuItemForm(instance=menu_item)
    return render(request, "kitchen/menu_form.html", {"form": form, "menu_item": menu_item})


@require_POST
@login_required
@admin_required
def menu_delete(request, pk):
    menu_item = get_object_or_404(MenuItem, pk=pk)
    menu_item.delete()
    messages.success(request, "Dish deleted successfully.")
    return redirect("menu_list")


class DailyMenuListView(LoginRequiredMixin, AdminRequiredMixin, ListView):
    model = DailyMenu
    template_name = 'kitchen/daily_menu_list.html'
    context_object_name = 'menus'

    def get_queryset(self):
        return DailyMenu.objects.prefetch_related('items').order_by('-date', 'time_slot')


class DailyMenuCreateView(LoginRequiredMixin, AdminRequiredMixin, CreateView):
    model = DailyMenu
    form_class = DailyMenuForm
    template_name = 'kitchen/daily_menu_form.html'
    success_url = reverse_lazy('daily_menu_list')

    def form_valid(self, form):
        response = super().form_valid(form)
        messages.success(
            self.request,
            f"Menu for {form.instance.get_time_slot_display()} on {form.instance.date} has been set.",
        )
        return response


class DailyMenuUpdateView(LoginRequiredMixin, AdminRequiredMixin, UpdateView):
    model = DailyMenu
    form_class = DailyMenuForm
    template_name = 'kitchen/daily_menu_form.html'
    success_url = reverse_lazy('daily_menu_list')


class DailyMenuDeleteView(LoginRequiredMixin, AdminRequiredMixin, DeleteView):
    model = DailyMenu
    template_name = 'kitchen/confirm_delete.html'
    success_url = reverse_lazy('daily_menu_list')


# --- Banners and notifications ---

ANNOUNCEMENTS = {
    'banner': (Banner, BannerForm),
    'notification': (Notification, NotificationForm),
}


def _announcement_model(kind):
    try:
        return ANNOUNCEMENTS[kind]
    except KeyError:
        raise Http404("Unknown announcement type")


@login_required
@admin_required
def announcements(request):
    """Banners and notifications on one page, with a create form for each."""
    banner_form = BannerForm(prefix='banner')
    notification_form = NotificationForm(prefix='notification')

    if request.method == 'POST':
        kind = request.POST.get('kind')
        model, form_class = _announcement_model(kind)
        form = form_class(request.POST, prefix=kind)
        if form.is_valid():
            form.save()
            messages.success(request, f"{model._meta.verbose_name.capitalize()} created.")
            return redirect('announcements')
        if kind == 'banner':
            banner_form = form
        else:
            notification_form = form

    return render(request, 'kitchen/announcements.html', {
        'banners': Banner.objects.all(),
        'notifications': Notification.objects.all(),
        'banner_form': banner_form,
        'notification_form': notification_form,
    })


@login_required
@admin_required
def edit_announcement(request, kind, pk):
    model, form_class = _announcement_model(kind)
    obj = get_object_or_404(model, pk=pk)
    if request.method == 'POST':
        form = form_class(request.POST, instance=obj)
        if form.is_valid():
            form.save()
            messages.success(request, f"{model._meta.verbose_name.capitalize()} updated.")
            return redirect('announcements')
    else:
        form = form_class(instance=obj)
    return render(request, 'kitchen/announcement_form.html', {'form': form, 'object': obj, 'kind': kind})


@require_POST
@login_required
@admin_required
def toggle_announcement(request, kind, pk):
    model, _ = _announcement_model(kind)
    obj = get_object_or_404(model, pk=pk)
    services.toggle_active(obj)
    return redirect('announcements')


@require_POST
@login_required
@admin_required
def delete_announcement(request, kind, pk):
    model, _ = _announcement_model(kind)
    try:
        model.objects.get(pk=pk).delete()
    except ObjectDoesNotExist:
        raise Http404("Announcement not found")
    messages.success(request, f"{model._meta.verbose_name.capitalize()} deleted.")
    return redirect('announcements')
