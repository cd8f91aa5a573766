"""
Tests for scheduling/tasks.py

Auto-rejection of appointments nobody approved in time.
"""

from datetime import datetime, timedelta
from unittest import mock

from models import db
from models.appointment import Appointment
from models.notification import Notification
from models.status import APPROVED, PENDING_APPROVAL, REJECTED
from scheduling.tasks import reject_stale_appointments
from tests.base import SchedulingTestCase

NOW = datetime(2030, 1, 15, 12, 0)


class TestRejectStaleAppointments(SchedulingTestCase):

    def status_of(self, appointment):
        return db.session.get(Appointment, appointment.id).status

    def test_rejects_only_stale_pending(self):
        stale = self.add_appointment("10:00", status=PENDING_APPROVAL, email="a@example.com",
                                     created_at=NOW - timedelta(hours=3))
        fresh = self.add_appointment("11:00", status=PENDING_APPROVAL, email="b@example.com",
                                     created_at=NOW - timedelta(minutes=30))
        approved = self.add_appointment("12:00", status=APPROVED, email="c@example.com",
                                        created_at=NOW - timedelta(hours=5))

        self.assertEqual(reject_stale_appointments(now=NOW), 1)
        self.assertEqual(self.status_of(stale), REJECTED)
        self.assertEqual(self.status_of(fresh), PENDING_APPROVAL)
        self.assertEqual(self.status_of(approved), APPROVED)

    def test_customer_is_notified(self):
        self.add_appointment("10:00", status=PENDING_APPROVAL, created_at=NOW - timedelta(hours=3))
        reject_stale_appointments(now=NOW)

        note = Notification.query.filter_by(kind="auto-rejected").one()
        self.assertEqual(note.recipient_email, "customer@example.com")

    def test_nothing_to_do(self):
        self.assertEqual(reject_stale_appointments(now=NOW), 0)

    def test_one_failure_does_not_stop_the_sweep(self):
        first = self.add_appointment("10:00", status=PENDING_APPROVAL, email="a@example.com",
                                     created_at=NOW - timedelta(hours=3))
        second = self.add_appointment("11:00", status=PENDING_APPROVAL, email="b@example.com",
                                      created_at=NOW - timedelta(hours=4))

        with mock.patch("scheduling.tasks.log_event", side_effect=[RuntimeError("audit down"), None]):
            with self.assertLogs("scheduling.tasks", level="ERROR"):
                reject_stale_appointments(now=NOW)

        self.assertEqual(self.status_of(first), REJECTED)
        self.assertEqual(self.status_of(second), REJECTED)
        self.assertEqual(Notification.query.filter_by(kind="auto-rejected").count(), 1)
