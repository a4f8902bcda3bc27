from __future__ import annotations

import json

from django.test import SimpleTestCase

from portal.guards import guard_redirect
from portal.session import USER_KEY, SessionContext
from portal.storage import CorruptedStorageError, MemoryBlobStorage


class SessionContextTests(SimpleTestCase):
    def setUp(self):
        self.storage = MemoryBlobStorage()
        self.session = SessionContext(self.storage)

    def test_starts_logged_out(self):
        self.assertIsNone(self.session.current)
        self.assertFalse(self.session.is_authenticated)

    def test_employee_login(self):
        user = self.session.login("employee")
        self.assertEqual(user.id, "emp-1")
        self.assertEqual(user.role, "employee")
        self.assertEqual(user.pto_balance, 120)
        self.assertFalse(user.is_admin)

    def test_admin_login(self):
        user = self.session.login("admin")
        self.assertEqual(user.id, "admin-1")
        self.assertEqual(user.role, "admin")
        self.assertEqual(user.pto_balance, 0)
        self.assertTrue(user.is_admin)

    def test_unknown_role_rejected(self):
        with self.assertRaises(ValueError):
            self.session.login("contractor")
        self.assertIsNone(self.session.current)

    def test_identity_survives_restart(self):
        self.session.login("admin")
        restarted = SessionContext(self.storage)
        self.assertEqual(restarted.current.id, "admin-1")

    def test_logout_clears_identity_and_guard_redirects(self):
        self.session.login("employee")
        self.session.logout()
        self.assertIsNone(self.session.current)
        self.assertIsNone(self.storage.get(USER_KEY))
        self.assertEqual(guard_redirect(SessionContext(self.storage).current), "portal:login")

    def test_update_user_merges_and_persists(self):
        self.session.login("employee")
        self.session.update_user(name="Johnny Martinez", title="Principal Engineer")
        restarted = SessionContext(self.storage).current
        self.assertEqual(restarted.name, "Johnny Martinez")
        self.assertEqual(restarted.title, "Principal Engineer")
        self.assertEqual(restarted.department, "Public Works")

    def test_update_user_accepts_unvalidated_balance(self):
        self.session.login("employee")
        self.session.update_user(pto_balance=-16)
        self.assertEqual(self.session.current.pto_balance, -16)

    def test_update_user_rejects_unknown_fields(self):
        self.session.login("employee")
        with self.assertRaises(TypeError):
            self.session.update_user(salary=1)

    def test_update_user_without_session_is_noop(self):
        self.assertIsNone(self.session.update_user(name="Nobody"))
        self.assertIsNone(self.storage.get(USER_KEY))

    def test_corrupted_identity(self):
        session = SessionContext(MemoryBlobStorage({USER_KEY: '{"id": "emp-1"}'}))
        with self.assertRaises(CorruptedStorageError):
            session.current

    def test_logout_clears_corrupted_identity(self):
        storage = MemoryBlobStorage({USER_KEY: "{not json"})
        session = SessionContext(storage)
        session.logout()
        self.assertIsNone(storage.get(USER_KEY))
        self.assertIsNone(session.current)

    def test_wrongly_typed_identity(self):
        self.session.login("employee")
        stored = json.loads(self.storage.get(USER_KEY))
        stored["name"] = 7
        session = SessionContext(MemoryBlobStorage({USER_KEY: json.dumps(stored)}))
        with self.assertRaises(CorruptedStorageError):
            session.current


class GuardTests(SimpleTestCase):
    def setUp(self):
        self.session = SessionContext(MemoryBlobStorage())

    def test_authenticated_guard(self):
        self.assertEqual(guard_redirect(None), "portal:login")
        self.assertIsNone(guard_redirect(self.session.login("employee")))

    def test_admin_guard_sends_everyone_else_to_dashboard(self):
        self.assertEqual(guard_redirect(None, admin_only=True), "portal:dashboard")
        self.assertEqual(guard_redirect(self.session.login("employee"), admin_only=True), "portal:dashboard")
        self.assertIsNone(guard_redirect(self.session.login("admin"), admin_only=True))
