"""Views for every page of the HR portal."""
from __future__ import annotations

import logging

from django.contrib import messages
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404, HttpResponse, HttpResponseRedirect
from django.shortcuts import redirect, render
from django.urls import Resolver404, resolve
from django.utils import timezone
from django.views import View
from django.views.decorators.http import require_POST
from django.views.generic import FormView, TemplateView

from . import selectors
from .fixtures import UPCOMING_HOLIDAYS
from .forms import AnnouncementForm, LoginForm, ProfileForm, TimeOffRequestForm
from .guards import AdminRequiredMixin, LoginRequiredMixin, admin_required, current_user, login_required
from .models import RequestStatus, Role
from .utils import export_filename, render_requests_csv

logger = logging.getLogger(__name__)


class PortalViewMixin:
    """Shortcuts to the request's portal context."""

    @property
    def store(self):
        return self.request.portal.store

    @property
    def user(self):
        return current_user(self.request)


class LoginView(FormView):
    """Two-button role picker; there are no credentials."""

    template_name = "portal/login.html"
    form_class = LoginForm

    def form_valid(self, form: LoginForm):
        self.request.portal.session.login(form.cleaned_data["role"])
        return redirect("portal:dashboard")

    def form_invalid(self, form: LoginForm):
        messages.error(self.request, "Choose a role to sign in.")
        return super().form_invalid(form)


@require_POST
def logout_view(request):
    request.portal.session.logout()
    return redirect("portal:login")


class DashboardView(LoginRequiredMixin, PortalViewMixin, TemplateView):
    template_name = "portal/dashboard.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        announcements = self.store.announcements.all()
        context.update(
            {
                "pending_requests": selectors.pending_requests(self.store.requests.all(), self.user),
                "pto_days": selectors.pto_days(self.user),
                "recent_announcements": selectors.recent_announcements(announcements),
                "announcement_count": len(announcements),
                "upcoming_holidays": UPCOMING_HOLIDAYS,
            }
        )
        if self.user.is_admin:
            context["employee_count"] = len(self.store.employees.all())
        return context


class RequestListView(LoginRequiredMixin, PortalViewMixin, TemplateView):
    """Requests visible to the actor, narrowed by the status filter."""

    template_name = "portal/requests.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        status_filter = selectors.normalize_filter(self.request.GET.get("status"))
        context.update(
            {
                "requests": selectors.visible_requests(self.store.requests.all(), self.user, status_filter),
                "status_filter": status_filter,
                "filters": selectors.REQUEST_FILTERS,
            }
        )
        return context


def _editable_request(request, pk: str):
    """Fetch a request the current employee may still change, or raise."""
    user = current_user(request)
    request_obj = request.portal.store.requests.get(pk)
    if request_obj is None:
        raise Http404("No such time off request.")
    if user.role != Role.EMPLOYEE or request_obj.employee_id != user.id:
        raise PermissionDenied("You can only change your own time off requests.")
    if not request_obj.is_pending:
        raise ValidationError("Only pending requests can be changed.")
    return request_obj


def _refuse(request, exc: Exception, to: str = "portal:requests"):
    text = "; ".join(exc.messages) if isinstance(exc, ValidationError) else str(exc)
    messages.error(request, text)
    return redirect(to)


class RequestFormView(LoginRequiredMixin, PortalViewMixin, FormView):
    """Submit a new request, or edit a pending one when ``pk`` is given."""

    template_name = "portal/request_form.html"
    form_class = TimeOffRequestForm
    editing = None

    def dispatch(self, request, *args, **kwargs):
        user = current_user(request)
        if user is not None:
            try:
                if "pk" in kwargs:
                    self.editing = _editable_request(request, kwargs["pk"])
                elif user.role != Role.EMPLOYEE:
                    raise PermissionDenied("Only employees can submit time off requests.")
            except (PermissionDenied, ValidationError) as exc:
                return _refuse(request, exc)
        return super().dispatch(request, *args, **kwargs)

    def get_initial(self):
        if self.editing:
            return TimeOffRequestForm.initial_for(self.editing)
        return super().get_initial()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["editing"] = self.editing
        return context

    def form_valid(self, form: TimeOffRequestForm):
        request_obj = form.build_request(self.user, existing=self.editing)
        self.store.requests.save(request_obj)
        if self.editing:
            logger.info("Request %s updated by %s", request_obj.id, self.user.id)
            messages.success(self.request, "Request Updated: your time off request has been updated.")
        else:
            logger.info("Request %s submitted by %s", request_obj.id, self.user.id)
            messages.success(
                self.request, "Request Submitted: your time off request has been submitted for approval."
            )
        return redirect("portal:requests")


@require_POST
@login_required
def delete_request(request, pk: str):
    """Cancel (delete) one of the employee's own pending requests."""
    try:
        request_obj = _editable_request(request, pk)
    except (PermissionDenied, ValidationError) as exc:
        return _refuse(request, exc)
    request.portal.store.requests.delete(request_obj.id)
    logger.info("Request %s deleted by %s", request_obj.id, current_user(request).id)
    messages.success(request, "Request Deleted: the time off request has been deleted.")
    return redirect("portal:requests")


@require_POST
@admin_required
def review_request(request, pk: str, action: str):
    """Approve or deny a pending request."""
    decision_map = {
        "approve": RequestStatus.APPROVED,
        "deny": RequestStatus.DENIED,
    }
    decision = decision_map.get(action)
    if not decision:
        messages.error(request, "Unknown review action.")
        return redirect("portal:requests")

    request_obj = request.portal.store.requests.get(pk)
    if request_obj is None:
        raise Http404("No such time off request.")

    reviewer = current_user(request)
    try:
        reviewed = request_obj.record_decision(reviewer, decision)
    except ValidationError as exc:
        return _refuse(request, exc)

    request.portal.store.requests.save(reviewed)
    logger.info("Request %s %s by %s", reviewed.id, reviewed.status, reviewer.id)
    if decision == RequestStatus.APPROVED:
        messages.success(
            request, f"Request Approved: time off request for {reviewed.employee_name} has been approved."
        )
    else:
        messages.warning(
            request, f"Request Denied: time off request for {reviewed.employee_name} has been denied."
        )
    return redirect("portal:requests")


class AnnouncementListView(LoginRequiredMixin, PortalViewMixin, TemplateView):
    template_name = "portal/announcements.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["announcements"] = self.store.announcements.all()
        return context


class AnnouncementFormView(LoginRequiredMixin, AdminRequiredMixin, PortalViewMixin, FormView):
    """Post a new announcement, or edit one when ``pk`` is given."""

    template_name = "portal/announcement_form.html"
    form_class = AnnouncementForm
    editing = None

    def get(self, request, *args, **kwargs):
        self._load(kwargs)
        return super().get(request, *args, **kwargs)

    def post(self, request, *args, **kwargs):
        self._load(kwargs)
        return super().post(request, *args, **kwargs)

    def _load(self, kwargs) -> None:
        if "pk" in kwargs:
            self.editing = self.store.announcements.get(kwargs["pk"])
            if self.editing is None:
                raise Http404("No such announcement.")

    def get_initial(self):
        if self.editing:
            return AnnouncementForm.initial_for(self.editing)
        return super().get_initial()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["editing"] = self.editing
        return context

    def form_valid(self, form: AnnouncementForm):
        announcement = form.build_announcement(self.user, existing=self.editing)
        self.store.announcements.save(announcement)
        logger.info("Announcement %s saved by %s", announcement.id, self.user.id)
        verb = "Announcement Updated" if self.editing else "Announcement Posted"
        messages.success(self.request, f"{verb}: the announcement has been saved successfully.")
        return redirect("portal:announcements")


@require_POST
@login_required
@admin_required
def delete_announcement(request, pk: str):
    if request.portal.store.announcements.get(pk) is None:
        raise Http404("No such announcement.")
    request.portal.store.announcements.delete(pk)
    logger.info("Announcement %s deleted by %s", pk, current_user(request).id)
    messages.success(request, "Announcement Deleted: the announcement has been removed.")
    return redirect("portal:announcements")


class DirectoryView(LoginRequiredMixin, PortalViewMixin, TemplateView):
    """Searchable, sortable staff directory."""

    template_name = "portal/directory.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        query = self.request.GET.get("q", "")
        sort = self.request.GET.get("sort", "name")
        if sort not in selectors.DIRECTORY_SORT_FIELDS:
            sort = "name"
        direction = self.request.GET.get("dir", selectors.ASCENDING)
        if direction != selectors.DESCENDING:
            direction = selectors.ASCENDING

        employees = selectors.sort_employees(
            selectors.search_employees(self.store.employees.all(), query), sort, direction
        )
        # Each header links to the state a click on it produces.
        columns = []
        for field in selectors.DIRECTORY_SORT_FIELDS:
            next_field, next_direction = selectors.next_sort_state(sort, direction, field)
            columns.append(
                {
                    "field": field,
                    "label": field.title(),
                    "active": field == sort,
                    "direction": direction if field == sort else None,
                    "next_sort": next_field,
                    "next_dir": next_direction,
                }
            )
        context.update(
            {
                "employees": employees,
                "query": query,
                "sort": sort,
                "direction": direction,
                "columns": columns,
            }
        )
        return context


class ReportsView(AdminRequiredMixin, PortalViewMixin, TemplateView):
    """Aggregated insights over every request in the store."""

    template_name = "portal/reports.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context.update(selectors.build_report(self.store.requests.all()))
        return context


class ReportExportView(AdminRequiredMixin, PortalViewMixin, View):
    """Download every request as CSV."""

    def get(self, request, *args, **kwargs):
        body = render_requests_csv(self.store.requests.all())
        response = HttpResponse(body, content_type="text/csv")
        filename = export_filename(timezone.localdate())
        response["Content-Disposition"] = f"attachment; filename={filename}"
        return response


class ProfileView(LoginRequiredMixin, PortalViewMixin, FormView):
    """Own profile, read-only until ``?edit=1`` switches to the edit form."""

    template_name = "portal/profile.html"
    form_class = ProfileForm

    def get_initial(self):
        return ProfileForm.initial_for(self.user)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["editing"] = self.request.method == "POST" or self.request.GET.get("edit") == "1"
        context["pto_days"] = selectors.pto_days(self.user)
        return context

    def form_valid(self, form: ProfileForm):
        self.request.portal.session.update_user(**form.cleaned_data)
        messages.success(self.request, "Profile Updated: your profile information has been saved successfully.")
        return redirect("portal:profile")


def not_found(request, path: str = ""):
    """Catch-all route; slashless spellings of real routes get the slash appended."""
    if not request.path_info.endswith("/"):
        try:
            match = resolve(request.path_info + "/")
        except Resolver404:
            match = None
        if match is not None and match.url_name != "not_found":
            target = request.path + "/"
            if request.META.get("QUERY_STRING"):
                target = f"{target}?{request.META['QUERY_STRING']}"
            return HttpResponseRedirect(target)
    return render(request, "portal/not_found.html", {"path": request.path}, status=404)


def page_not_found(request, exception):
    return render(request, "portal/not_found.html", {"path": request.path}, status=404)
