from __future__ import annotations

import json

from django.test import SimpleTestCase
from django.urls import reverse
from django.utils import timezone

from portal.session import SessionContext
from portal.storage import SessionBlobStorage
from portal.store import RecordStore

from .test_store import make_request


class PortalClientTestCase(SimpleTestCase):
    """Drives the portal through the test client; storage lives in the client's session."""

    def login(self, role: str):
        return self.client.post(reverse("portal:login"), {"role": role})

    def seed(self, *records):
        session = self.client.session
        store = RecordStore(SessionBlobStorage(session))
        for record in records:
            store.requests.save(record)
        session.save()

    def stored(self) -> RecordStore:
        return RecordStore(SessionBlobStorage(self.client.session))


class RouteGuardTests(PortalClientTestCase):
    def test_anonymous_visitor_is_sent_to_login(self):
        for name in ("dashboard", "requests", "announcements", "directory", "profile"):
            response = self.client.get(reverse(f"portal:{name}"))
            self.assertRedirects(response, reverse("portal:login"), fetch_redirect_response=False)

    def test_anonymous_reports_redirects_through_dashboard(self):
        response = self.client.get(reverse("portal:reports"), follow=True)
        self.assertEqual(
            [url for url, _ in response.redirect_chain],
            [reverse("portal:dashboard"), reverse("portal:login")],
        )

    def test_employee_cannot_open_reports(self):
        self.login("employee")
        response = self.client.get(reverse("portal:reports"))
        self.assertRedirects(response, reverse("portal:dashboard"))
        response = self.client.get(reverse("portal:reports_export"))
        self.assertRedirects(response, reverse("portal:dashboard"))

    def test_login_and_logout(self):
        response = self.login("admin")
        self.assertRedirects(response, reverse("portal:dashboard"))
        self.assertContains(self.client.get(reverse("portal:dashboard")), "Welcome back, HR Admin")

        response = self.client.post(reverse("portal:logout"))
        self.assertRedirects(response, reverse("portal:login"))
        response = self.client.get(reverse("portal:dashboard"))
        self.assertRedirects(response, reverse("portal:login"))

    def test_invalid_role_stays_on_login(self):
        response = self.client.post(reverse("portal:login"), {"role": "root"})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Choose a role to sign in.")

    def test_reports_navigation_only_for_admin(self):
        self.login("employee")
        self.assertNotContains(self.client.get(reverse("portal:dashboard")), reverse("portal:reports"))
        self.login("admin")
        self.assertContains(self.client.get(reverse("portal:dashboard")), reverse("portal:reports"))


class DashboardViewTests(PortalClientTestCase):
    def test_employee_dashboard(self):
        self.login("employee")
        response = self.client.get(reverse("portal:dashboard"))
        self.assertEqual(len(response.context["pending_requests"]), 1)
        self.assertEqual(response.context["pto_days"], 15)
        self.assertEqual([a.id for a in response.context["recent_announcements"]], ["1", "2", "3"])
        self.assertNotIn("employee_count", response.context)

    def test_admin_dashboard_counts_all_pending(self):
        self.login("admin")
        self.seed(make_request("30", employee_id="emp-2", employee_name="Sarah Chen"))
        response = self.client.get(reverse("portal:dashboard"))
        self.assertEqual(len(response.context["pending_requests"]), 2)
        self.assertEqual(response.context["employee_count"], 5)
        self.assertEqual(response.context["announcement_count"], 3)


class RequestViewTests(PortalClientTestCase):
    def setUp(self):
        self.login("employee")
        self.seed(make_request("40", employee_id="emp-2", employee_name="Sarah Chen"))

    def test_employee_list_hides_other_employees(self):
        for status_filter in ("all", "pending", "approved", "denied"):
            response = self.client.get(reverse("portal:requests"), {"status": status_filter})
            ids = [r.id for r in response.context["requests"]]
            self.assertNotIn("40", ids)
        self.assertNotContains(self.client.get(reverse("portal:requests")), "Sarah Chen")

    def test_admin_list_filters_by_status(self):
        self.login("admin")
        response = self.client.get(reverse("portal:requests"))
        self.assertEqual([r.id for r in response.context["requests"]], ["1", "2", "40"])
        response = self.client.get(reverse("portal:requests"), {"status": "pending"})
        self.assertEqual([r.id for r in response.context["requests"]], ["1", "40"])

    def test_submit_request(self):
        response = self.client.post(
            reverse("portal:request_new"),
            {"type": "sick", "start_date": "2025-11-15", "end_date": "2025-11-19", "reason": "Flu"},
            follow=True,
        )
        self.assertContains(response, "Request Submitted")
        created = self.stored().requests.all()[-1]
        self.assertEqual(created.employee_id, "emp-1")
        self.assertEqual(created.employee_name, "John Martinez")
        self.assertEqual(created.days, 5)
        self.assertEqual(created.status, "pending")
        self.assertEqual(created.submitted_date, timezone.localdate().isoformat())

    def test_submit_accepts_end_before_start(self):
        self.client.post(
            reverse("portal:request_new"),
            {"type": "personal", "start_date": "2025-11-15", "end_date": "2025-11-14", "reason": "Oops"},
        )
        self.assertEqual(self.stored().requests.all()[-1].days, 0)

    def test_submit_requires_fields(self):
        response = self.client.post(reverse("portal:request_new"), {"type": "vacation"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context["form"].errors)
        self.assertEqual(len(self.stored().requests.all()), 3)

    def test_edit_pending_request_keeps_identity(self):
        self.client.post(
            reverse("portal:request_edit", args=["1"]),
            {"type": "personal", "start_date": "2025-11-15", "end_date": "2025-11-15", "reason": "Shorter"},
        )
        edited = self.stored().requests.get("1")
        self.assertEqual(edited.days, 1)
        self.assertEqual(edited.type, "personal")
        self.assertEqual(edited.submitted_date, "2025-10-01")
        self.assertEqual(len(self.stored().requests.all()), 3)

    def test_cannot_edit_reviewed_or_foreign_requests(self):
        data = {"type": "sick", "start_date": "2025-09-12", "end_date": "2025-09-13", "reason": "x"}
        response = self.client.post(reverse("portal:request_edit", args=["2"]), data, follow=True)
        self.assertContains(response, "Only pending requests can be changed.")
        response = self.client.post(reverse("portal:request_edit", args=["40"]), data, follow=True)
        self.assertContains(response, "You can only change your own time off requests.")
        self.assertEqual(self.stored().requests.get("2").days, 1)

    def test_delete_own_pending_request(self):
        response = self.client.post(reverse("portal:request_delete", args=["1"]), follow=True)
        self.assertContains(response, "Request Deleted")
        self.assertIsNone(self.stored().requests.get("1"))

    def test_cannot_delete_reviewed_request(self):
        self.client.post(reverse("portal:request_delete", args=["2"]))
        self.assertIsNotNone(self.stored().requests.get("2"))

    def test_missing_request_is_404(self):
        response = self.client.get(reverse("portal:request_edit", args=["nope"]))
        self.assertEqual(response.status_code, 404)

    def test_admin_cannot_submit(self):
        self.login("admin")
        response = self.client.get(reverse("portal:request_new"))
        self.assertRedirects(response, reverse("portal:requests"))


class ReviewViewTests(PortalClientTestCase):
    def test_employee_cannot_review(self):
        self.login("employee")
        response = self.client.post(reverse("portal:request_review", args=["1", "approve"]))
        self.assertRedirects(response, reverse("portal:dashboard"))
        self.assertEqual(self.stored().requests.get("1").status, "pending")

    def test_admin_approves(self):
        self.login("admin")
        response = self.client.post(reverse("portal:request_review", args=["1", "approve"]), follow=True)
        self.assertContains(response, "Request Approved")
        reviewed = self.stored().requests.get("1")
        self.assertEqual(reviewed.status, "approved")
        self.assertEqual(reviewed.reviewed_by, "HR Admin")
        self.assertEqual(reviewed.reviewed_date, timezone.localdate().isoformat())

    def test_admin_denies_once(self):
        self.login("admin")
        self.client.post(reverse("portal:request_review", args=["1", "deny"]))
        self.assertEqual(self.stored().requests.get("1").status, "denied")

        response = self.client.post(reverse("portal:request_review", args=["1", "approve"]), follow=True)
        self.assertContains(response, "This request has already been reviewed.")
        self.assertEqual(self.stored().requests.get("1").status, "denied")

    def test_unknown_action(self):
        self.login("admin")
        response = self.client.post(reverse("portal:request_review", args=["1", "escalate"]), follow=True)
        self.assertContains(response, "Unknown review action.")

    def test_review_requires_post(self):
        self.login("admin")
        response = self.client.get(reverse("portal:request_review", args=["1", "approve"]))
        self.assertEqual(response.status_code, 405)


class AnnouncementViewTests(PortalClientTestCase):
    def test_everyone_reads(self):
        self.login("employee")
        response = self.client.get(reverse("portal:announcements"))
        self.assertContains(response, "Holiday Schedule 2025")
        self.assertNotContains(response, "New Announcement")

    def test_employee_cannot_post(self):
        self.login("employee")
        response = self.client.post(
            reverse("portal:announcement_new"), {"title": "Hi", "priority": "low", "content": "x"}
        )
        self.assertRedirects(response, reverse("portal:dashboard"))
        self.assertEqual(len(self.stored().announcements.all()), 3)

    def test_admin_posts_edits_and_deletes(self):
        self.login("admin")
        self.client.post(
            reverse("portal:announcement_new"),
            {"title": "Parking", "priority": "low", "content": "Lot B closes Friday."},
        )
        posted = self.stored().announcements.all()[-1]
        self.assertEqual(posted.author, "HR Admin")
        self.assertEqual(posted.date, timezone.localdate().isoformat())

        session = self.client.session
        SessionContext(SessionBlobStorage(session)).update_user(name="Dana Editor")
        session.save()

        self.client.post(
            reverse("portal:announcement_edit", args=["1"]),
            {"title": "Holiday Schedule", "priority": "medium", "content": "Updated."},
        )
        edited = self.stored().announcements.get("1")
        self.assertEqual(edited.author, "Dana Editor")
        self.assertEqual(edited.date, "2025-10-01")
        self.assertEqual(edited.priority, "medium")

        response = self.client.post(reverse("portal:announcement_delete", args=["1"]), follow=True)
        self.assertContains(response, "Announcement Deleted")
        self.assertIsNone(self.stored().announcements.get("1"))

    def test_edit_missing_announcement(self):
        self.login("admin")
        response = self.client.get(reverse("portal:announcement_edit", args=["404"]))
        self.assertEqual(response.status_code, 404)

    def test_delete_missing_announcement(self):
        self.login("admin")
        response = self.client.post(reverse("portal:announcement_delete", args=["404"]))
        self.assertEqual(response.status_code, 404)
        self.assertNotContains(response, "Announcement Deleted", status_code=404)
        self.assertEqual(len(self.stored().announcements.all()), 3)


class DirectoryViewTests(PortalClientTestCase):
    def setUp(self):
        self.login("employee")

    def test_search(self):
        response = self.client.get(reverse("portal:directory"), {"q": "FINANCE"})
        self.assertEqual([e.id for e in response.context["employees"]], ["emp-3"])

    def test_header_links_toggle_direction(self):
        response = self.client.get(reverse("portal:directory"))
        columns = {c["field"]: c for c in response.context["columns"]}
        self.assertEqual(columns["name"]["next_dir"], "desc")
        self.assertEqual(columns["title"]["next_dir"], "asc")

        ascending = response.context["employees"]
        response = self.client.get(reverse("portal:directory"), {"sort": "name", "dir": "desc"})
        self.assertEqual(response.context["employees"], list(reversed(ascending)))


class ReportViewTests(PortalClientTestCase):
    def setUp(self):
        self.login("admin")

    def test_report_figures(self):
        response = self.client.get(reverse("portal:reports"))
        self.assertEqual(response.context["total_requests"], 2)
        self.assertEqual(response.context["approved_days"], 1)
        self.assertEqual(response.context["total_days"], 6)

    def test_csv_download(self):
        response = self.client.get(reverse("portal:reports_export"))
        self.assertEqual(response["Content-Type"], "text/csv")
        filename = f"time-off-report-{timezone.localdate().isoformat()}.csv"
        self.assertEqual(response["Content-Disposition"], f"attachment; filename={filename}")
        self.assertTrue(response.content.decode().startswith("Employee,Type,Start Date,End Date,Days,Status,Submitted\n"))


class ProfileViewTests(PortalClientTestCase):
    def setUp(self):
        self.login("employee")

    def test_view_mode_by_default(self):
        response = self.client.get(reverse("portal:profile"))
        self.assertFalse(response.context["editing"])
        self.assertContains(response, "Edit Profile")

    def test_edit_mode_prefills_from_session(self):
        response = self.client.get(reverse("portal:profile"), {"edit": "1"})
        self.assertTrue(response.context["editing"])
        self.assertEqual(response.context["form"].initial["name"], "John Martinez")

    def test_save_updates_session(self):
        response = self.client.post(
            reverse("portal:profile"),
            {"name": "John M.", "email": "jm@lacounty.gov", "title": "Lead Engineer", "department": "Public Works"},
            follow=True,
        )
        self.assertContains(response, "Profile Updated")
        self.assertEqual(response.context["portal_user"].name, "John M.")
        self.assertEqual(response.context["portal_user"].pto_balance, 120)

    def test_invalid_email_is_rejected(self):
        response = self.client.post(reverse("portal:profile"), {"email": "not-an-email"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context["editing"])
        self.assertEqual(response.context["portal_user"].email, "john.martinez@lacounty.gov")


class FallbackRouteTests(PortalClientTestCase):
    def test_unknown_path_renders_not_found(self):
        response = self.client.get("/no/such/page")
        self.assertEqual(response.status_code, 404)
        self.assertContains(response, "Page not found", status_code=404)

    def test_unknown_path_does_not_require_login(self):
        response = self.client.get("/payroll/")
        self.assertEqual(response.status_code, 404)

    def test_missing_trailing_slash_redirects(self):
        response = self.client.get("/requests")
        self.assertRedirects(response, "/requests/", fetch_redirect_response=False)


class StorageFailureTests(PortalClientTestCase):
    def test_corrupted_collection_shows_error_notice(self):
        self.login("employee")
        session = self.client.session
        session["hr_requests"] = "{definitely not json"
        session.save()

        response = self.client.get(reverse("portal:requests"))
        self.assertEqual(response.status_code, 503)
        self.assertContains(response, "could not be used", status_code=503)
        self.assertContains(response, "hr_requests", status_code=503)

    def test_corrupted_identity_shows_error_notice(self):
        session = self.client.session
        session["hr_portal_user"] = "[]"
        session.save()

        response = self.client.get(reverse("portal:dashboard"))
        self.assertEqual(response.status_code, 503)

    def test_wrongly_typed_request_shows_error_notice_on_reports(self):
        self.login("admin")
        row = make_request("9").to_dict()
        row["days"] = "5"
        session = self.client.session
        session["hr_requests"] = json.dumps({"version": 1, "records": [row]})
        session.save()

        response = self.client.get(reverse("portal:reports"))
        self.assertEqual(response.status_code, 503)
        self.assertContains(response, "could not be used", status_code=503)

    def test_logout_clears_corrupted_identity(self):
        session = self.client.session
        session["hr_portal_user"] = "[]"
        session.save()

        response = self.client.post(reverse("portal:logout"))
        self.assertRedirects(response, reverse("portal:login"))
        self.assertNotIn("hr_portal_user", self.client.session)
        self.assertEqual(self.client.get(reverse("portal:login")).status_code, 200)
