import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.shortcuts import redirect, render

from kitchen.choices import RegistrationStatus
from .forms import LoginForm, RegistrationForm
from .models import User

logger = logging.getLogger(__name__)


def register(request):
    if request.method == "POST":
        form = RegistrationForm(request.POST)
        if form.is_valid():
            user = form.save()
            logger.info("New registration from %s (id=%s)", user.email, user.pk)
            messages.success(
                request,
                "Registration submitted! Our team will review your application and contact you within 24 hours.",
            )
            return redirect("login")
    else:
        form = RegistrationForm()
    return render(request, "accounts/register.html", {"form": form})


def login_view(request):
    form = LoginForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        email = form.cleaned_data["email"]
        account = User.objects.filter(email__iexact=email).first()
        user = None
        if account is not None:
            user = authenticate(request, username=account.username, password=form.cleaned_data["password"])

        if user is None:
            messages.error(request, "Invalid credentials or account not found.")
        elif user.status == RegistrationStatus.REJECTED and not user.is_kitchen_admin:
            messages.error(request, "Your registration was not approved. Please contact the kitchen.")
        else:
            login(request, user)
            if user.is_kitchen_admin:
                return redirect("admin_dashboard")
            return redirect("member_dashboard")
    return render(request, "accounts/login.html", {"form": form})


def custom_logout(request):
    logout(request)
    return redirect("login")
