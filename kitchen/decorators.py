from functools import wraps

from django.contrib import messages
from django.contrib.auth.mixins import UserPassesTestMixin
from django.shortcuts import redirect


def admin_required(function):
    """
    A decorator that checks if the logged-in user is a kitchen admin.
    Redirects to the login page with an error message if they aren't.
    """
    @wraps(function)
    def wrap(request, *args, **kwargs):
        # We assume @login_required is also used, so request.user is available.
        if request.user.is_kitchen_admin:
            return function(request, *args, **kwargs)
        messages.error(request, "Access Denied: This page is for kitchen admins only.")
        return redirect('login')

    return wrap


def member_required(function):
    """Same as admin_required, for the member dashboard pages."""
    @wraps(function)
    def wrap(request, *args, **kwargs):
        if request.user.role == 'MEMBER':
            return function(request, *args, **kwargs)
        messages.error(request, "Access Denied: This page is for members only.")
        return redirect('home')

    return wrap


class AdminRequiredMixin(UserPassesTestMixin):
    def test_func(self):
        return self.request.user.is_authenticated and self.request.user.is_kitchen_admin
