"""Route guards gating views on session presence and role."""
from __future__ import annotations

from functools import wraps
from typing import Optional

from django.contrib import messages
from django.shortcuts import redirect

from .models import PortalUser

LOGIN_ROUTE = "portal:login"
DEFAULT_ROUTE = "portal:dashboard"


def current_user(request) -> Optional[PortalUser]:
    return request.portal.session.current


def guard_redirect(user: Optional[PortalUser], admin_only: bool = False) -> Optional[str]:
    """Return the route name to redirect to, or ``None`` to let the request through.

    The admin guard never sends anyone to the login page directly: a visitor
    without a session lands on the dashboard, whose own guard then redirects
    to login.
    """
    if admin_only:
        return None if user is not None and user.is_admin else DEFAULT_ROUTE
    return None if user is not None else LOGIN_ROUTE


def _deny_admin(request, user: Optional[PortalUser]):
    if user is not None:
        messages.error(request, "HR admin access required for this section.")
    return redirect(DEFAULT_ROUTE)


class LoginRequiredMixin:
    """Redirect to the login page unless someone is logged in."""

    def dispatch(self, request, *args, **kwargs):
        target = guard_redirect(current_user(request))
        if target:
            return redirect(target)
        return super().dispatch(request, *args, **kwargs)


class AdminRequiredMixin:
    """Gatekeeper for admin-only views."""

    def dispatch(self, request, *args, **kwargs):
        user = current_user(request)
        if guard_redirect(user, admin_only=True):
            return _deny_admin(request, user)
        return super().dispatch(request, *args, **kwargs)


def login_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        target = guard_redirect(current_user(request))
        if target:
            return redirect(target)
        return view_func(request, *args, **kwargs)

    return _wrapped


def admin_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = current_user(request)
        if guard_redirect(user, admin_only=True):
            return _deny_admin(request, user)
        return view_func(request, *args, **kwargs)

    return _wrapped
