"""URL routing for the portal pages."""
from django.urls import path, re_path

from . import views

app_name = "portal"

urlpatterns = [
    path("login/", views.LoginView.as_view(), name="login"),
    path("logout/", views.logout_view, name="logout"),
    path("", views.DashboardView.as_view(), name="dashboard"),
    path("requests/", views.RequestListView.as_view(), name="requests"),
    path("requests/new/", views.RequestFormView.as_view(), name="request_new"),
    path("requests/<str:pk>/edit/", views.RequestFormView.as_view(), name="request_edit"),
    path("requests/<str:pk>/delete/", views.delete_request, name="request_delete"),
    path(
        "requests/<str:pk>/<str:action>/",
        views.review_request,
        name="request_review",
    ),
    path("announcements/", views.AnnouncementListView.as_view(), name="announcements"),
    path("announcements/new/", views.AnnouncementFormView.as_view(), name="announcement_new"),
    path(
        "announcements/<str:pk>/edit/",
        views.AnnouncementFormView.as_view(),
        name="announcement_edit",
    ),
    path(
        "announcements/<str:pk>/delete/",
        views.delete_announcement,
        name="announcement_delete",
    ),
    path("directory/", views.DirectoryView.as_view(), name="directory"),
    path("reports/", views.ReportsView.as_view(), name="reports"),
    path("reports/export/", views.ReportExportView.as_view(), name="reports_export"),
    path("profile/", views.ProfileView.as_view(), name="profile"),
    re_path(r"^(?P<path>.*)$", views.not_found, name="not_found"),
]
