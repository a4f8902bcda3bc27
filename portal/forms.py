"""Forms supporting the portal pages."""
from __future__ import annotations

from typing import Any, Optional

from django import forms

from .models import (
    Announcement,
    PortalUser,
    Priority,
    RequestStatus,
    RequestType,
    Role,
    TimeOffRequest,
    compute_days,
    new_record_id,
    today_iso,
)


class LoginForm(forms.Form):
    role = forms.ChoiceField(choices=Role.choices)


class TimeOffRequestForm(forms.Form):
    """Form an employee uses to submit or edit a time-off request.

    End dates before the start date are accepted; the stored day count is
    then zero or negative.
    """

    type = forms.ChoiceField(choices=RequestType.choices, initial=RequestType.VACATION, label="Request Type")
    start_date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    end_date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    reason = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 3, "placeholder": "Brief reason for time off..."}),
    )

    @classmethod
    def initial_for(cls, request_obj: TimeOffRequest) -> dict[str, Any]:
        return {
            "type": request_obj.type,
            "start_date": request_obj.start_date,
            "end_date": request_obj.end_date,
            "reason": request_obj.reason,
        }

    def build_request(self, user: PortalUser, existing: Optional[TimeOffRequest] = None) -> TimeOffRequest:
        data = self.cleaned_data
        start, end = data["start_date"], data["end_date"]
        return TimeOffRequest(
            id=existing.id if existing else new_record_id(),
            employee_id=user.id,
            employee_name=user.name,
            type=data["type"],
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            days=compute_days(start, end),
            reason=data["reason"],
            status=existing.status if existing else RequestStatus.PENDING.value,
            submitted_date=existing.submitted_date if existing else today_iso(),
            reviewed_by=existing.reviewed_by if existing else None,
            reviewed_date=existing.reviewed_date if existing else None,
        )


class AnnouncementForm(forms.Form):
    title = forms.CharField(widget=forms.TextInput(attrs={"placeholder": "Announcement title..."}))
    priority = forms.ChoiceField(choices=Priority.choices, initial=Priority.MEDIUM)
    content = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 5, "placeholder": "Announcement details..."}),
    )

    @classmethod
    def initial_for(cls, announcement: Announcement) -> dict[str, Any]:
        return {
            "title": announcement.title,
            "priority": announcement.priority,
            "content": announcement.content,
        }

    def build_announcement(self, author: PortalUser, existing: Optional[Announcement] = None) -> Announcement:
        # The author is always whoever saved last; the posting date never changes.
        data = self.cleaned_data
        return Announcement(
            id=existing.id if existing else new_record_id(),
            title=data["title"],
            content=data["content"],
            author=author.name,
            date=existing.date if existing else today_iso(),
            priority=data["priority"],
        )


class ProfileForm(forms.Form):
    """Editable subset of the session's own identity."""

    name = forms.CharField(required=False, label="Full Name")
    email = forms.EmailField(required=False, label="Email Address")
    title = forms.CharField(required=False, label="Job Title")
    department = forms.CharField(required=False)

    @classmethod
    def initial_for(cls, user: PortalUser) -> dict[str, Any]:
        return {name: getattr(user, name) for name in cls.base_fields}
