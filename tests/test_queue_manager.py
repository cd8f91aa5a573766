"""
Tests for scheduling/queue.py

Covers enqueueing, serving order, wait-time recomputation, status
mirroring between source records and queue entries, and token retries.
"""

from datetime import datetime

from models import db
from models.appointment import Appointment
from models.notification import Notification
from models.status import (
    APPROVED, CANCELLED, COMPLETED, NO_SHOW, ONGOING, PENDING_APPROVAL, REJECTED, WAITING,
)
from models.waiting_queue import AppointmentRef, QueueEntry, QueueLane, WalkInRef
from scheduling.errors import (
    AlreadyServing, InvalidStateTransition, NotOngoing, QueueEmpty, TokenGenerationFailed,
)
from scheduling.queue import QueueManager
from tests.base import DAY, SchedulingTestCase


class ScriptedTokens:
    """Hands out a fixed sequence of tokens."""

    def __init__(self, *tokens):
        self.tokens = list(tokens)

    def generate(self, kind, day):
        return self.tokens.pop(0)


class QueueTestCase(SchedulingTestCase):

    def setUp(self):
        super().setUp()
        self.queue = QueueManager(self.settings, clock=self.clock)

    def lane(self):
        return QueueLane.query.filter_by(barber_id=self.barber.id, date=DAY).first()


class TestEnqueue(QueueTestCase):

    def test_enqueue_appointment(self):
        appointment = self.add_appointment("10:00")
        entry = self.queue.enqueue_appointment(appointment.id)

        self.assertEqual(entry.position, 1)
        self.assertEqual(entry.status, WAITING)
        self.assertEqual(entry.estimated_start_time, "10:00")
        self.assertEqual(entry.source_ref, AppointmentRef(appointment.id))
        self.assertRegex(entry.token_number, r"^APPT-20300115-[0-9A-F]{4}$")
        self.assertEqual(db.session.get(Appointment, appointment.id).token_number, entry.token_number)

    def test_enqueue_is_idempotent(self):
        appointment = self.add_appointment("10:00")
        first = self.queue.enqueue_appointment(appointment.id)
        second = self.queue.enqueue_appointment(appointment.id)

        self.assertEqual(first.id, second.id)
        self.assertEqual(second.position, 1)
        self.assertEqual(QueueEntry.query.count(), 1)
        self.assertEqual(self.lane().last_position, 1)

    def test_positions_increase_per_lane(self):
        a = self.add_appointment("10:00", email="a@example.com")
        b = self.add_appointment("11:00", email="b@example.com")
        other_barber = self.make_barber(email="other@example.com")
        c = self.add_appointment("10:00", email="c@example.com", barber=other_barber)

        self.assertEqual(self.queue.enqueue_appointment(a.id).position, 1)
        self.assertEqual(self.queue.enqueue_appointment(b.id).position, 2)
        self.assertEqual(self.queue.enqueue_appointment(c.id).position, 1)

    def test_pending_appointment_cannot_be_enqueued(self):
        appointment = self.add_appointment("10:00", status=PENDING_APPROVAL)
        with self.assertRaises(InvalidStateTransition):
            self.queue.enqueue_appointment(appointment.id)
        self.assertEqual(QueueEntry.query.count(), 0)

    def test_walk_in_waits_behind_earlier_entries(self):
        appointment = self.add_appointment("09:00", duration=45)
        self.queue.enqueue_appointment(appointment.id)
        walk_in = self.add_walk_in("09:05", start="09:05", end="09:35")

        entry = self.queue.enqueue_walk_in(walk_in.id)
        self.assertEqual(entry.position, 2)
        self.assertEqual(entry.source_ref, WalkInRef(walk_in.id))
        self.assertEqual(entry.estimated_start_time, "09:50")
        self.assertTrue(entry.token_number.startswith("WALKIN-20300115-"))

    def test_walk_in_estimate_does_not_wrap(self):
        appointment = self.add_appointment("23:00", duration=60)
        self.queue.enqueue_appointment(appointment.id)
        walk_in = self.add_walk_in("23:30", start="23:30", end="23:50", duration=20)

        entry = self.queue.enqueue_walk_in(walk_in.id)
        self.assertEqual(entry.estimated_start_time, "23:59")

    def test_token_assigned_notification(self):
        appointment = self.add_appointment("10:00")
        entry = self.queue.enqueue_appointment(appointment.id)

        note = Notification.query.filter_by(kind="token-assigned").one()
        self.assertEqual(note.recipient_email, "customer@example.com")
        self.assertIn(entry.token_number, note.message)

    def test_token_collision_is_retried(self):
        first = self.add_appointment("10:00", email="a@example.com")
        second = self.add_appointment("11:00", email="b@example.com")

        QueueManager(self.settings, clock=self.clock,
                     tokens=ScriptedTokens("APPT-20300115-AAAA")).enqueue_appointment(first.id)
        entry = QueueManager(
            self.settings, clock=self.clock,
            tokens=ScriptedTokens("APPT-20300115-AAAA", "APPT-20300115-BBBB"),
        ).enqueue_appointment(second.id)

        self.assertEqual(entry.token_number, "APPT-20300115-BBBB")
        self.assertEqual(entry.position, 2)
        self.assertEqual(self.lane().last_position, 2)

    def test_token_generation_gives_up(self):
        first = self.add_appointment("10:00", email="a@example.com")
        second = self.add_appointment("11:00", email="b@example.com")

        QueueManager(self.settings, tokens=ScriptedTokens("APPT-20300115-AAAA")).enqueue_appointment(first.id)
        attempts = ["APPT-20300115-AAAA"] * self.settings.token_max_attempts
        manager = QueueManager(self.settings, tokens=ScriptedTokens(*attempts))

        with self.assertRaises(TokenGenerationFailed):
            manager.enqueue_appointment(second.id)
        self.assertEqual(QueueEntry.query.count(), 1)


class TestServing(QueueTestCase):

    def setUp(self):
        super().setUp()
        self.entries = []
        for i, start in enumerate(("09:00", "09:30", "10:00")):
            appointment = self.add_appointment(start, email=f"c{i}@example.com")
            self.entries.append(self.queue.enqueue_appointment(appointment.id))

    def test_start_serving_next_takes_lowest_position(self):
        entry = self.queue.start_serving_next(self.barber.id, DAY)

        self.assertEqual(entry.id, self.entries[0].id)
        self.assertEqual(entry.status, ONGOING)
        self.assertEqual(entry.source.status, ONGOING)
        self.assertEqual(entry.source.start_time, "09:00")
        self.assertEqual(self.lane().serving_entry_id, entry.id)

    def test_second_start_fails_while_serving(self):
        self.queue.start_serving_next(self.barber.id, DAY)
        with self.assertRaises(AlreadyServing):
            self.queue.start_serving_next(self.barber.id, DAY)

    def test_queue_empty(self):
        with self.assertRaises(QueueEmpty):
            self.queue.start_serving_next(self.barber.id, "2030-01-16")

    def test_complete_requires_ongoing(self):
        with self.assertRaises(NotOngoing):
            self.queue.complete_service(self.entries[0].id)

    def test_complete_then_recalculate(self):
        entry = self.queue.start_serving_next(self.barber.id, DAY)
        self.now = datetime(2030, 1, 15, 9, 40)
        done = self.queue.complete_service(entry.id)

        self.assertEqual(done.status, COMPLETED)
        self.assertEqual(done.source.status, COMPLETED)
        self.assertEqual(done.source.end_time, "09:40")
        self.assertIsNone(self.lane().serving_entry_id)

        waiting = self.queue.waiting_entries(self.barber.id, DAY)
        self.assertEqual([e.estimated_start_time for e in waiting], ["09:40", "10:10"])

    def test_recalculated_estimates_are_monotonic(self):
        self.now = datetime(2030, 1, 15, 8, 0)
        entries = self.queue.recalculate_wait_times(self.barber.id, DAY)
        starts = [e.estimated_start_time for e in entries]
        self.assertEqual(starts, sorted(starts))
        self.assertEqual(starts[0], "08:00")

    def test_estimates_hold_at_end_of_day(self):
        self.now = datetime(2030, 1, 15, 23, 30)
        entries = self.queue.recalculate_wait_times(self.barber.id, DAY)
        self.assertEqual([e.estimated_start_time for e in entries], ["23:30", "23:59", "23:59"])

    def test_serving_continues_after_completion(self):
        first = self.queue.start_serving_next(self.barber.id, DAY)
        self.queue.complete_service(first.id)
        second = self.queue.start_serving_next(self.barber.id, DAY)
        self.assertEqual(second.id, self.entries[1].id)

    def test_snapshot(self):
        self.queue.start_serving_next(self.barber.id, DAY)
        snapshot = self.queue.snapshot(self.barber.id, DAY)

        self.assertEqual(snapshot["serving"]["id"], self.entries[0].id)
        self.assertEqual([e["position"] for e in snapshot["waiting"]], [2, 3])
        self.assertEqual(len(snapshot["entries"]), 3)


class TestStatusMirroring(QueueTestCase):

    def test_approval_enqueues(self):
        appointment = self.add_appointment("10:00", status=PENDING_APPROVAL)
        approved = self.queue.set_appointment_status(appointment.id, APPROVED)

        self.assertEqual(approved.status, APPROVED)
        entry = self.queue.entry_for(AppointmentRef(appointment.id))
        self.assertIsNotNone(entry)
        self.assertEqual(entry.status, WAITING)
        self.assertEqual(approved.token_number, entry.token_number)
        self.assertEqual(Notification.query.filter_by(kind="appointment-status-changed").count(), 1)

    def test_approval_fills_unconfirmed_times(self):
        appointment = self.add_appointment("10:00", status=PENDING_APPROVAL, confirmed=False)
        approved = self.queue.set_appointment_status(appointment.id, APPROVED)

        self.assertEqual((approved.start_time, approved.end_time), ("10:00", "10:30"))

    def test_rejection_marks_entry_without_removing_it(self):
        appointment = self.add_appointment("10:00", status=PENDING_APPROVAL)
        self.queue.set_appointment_status(appointment.id, APPROVED)
        self.queue.set_appointment_status(appointment.id, REJECTED)

        entry = self.queue.entry_for(AppointmentRef(appointment.id))
        self.assertEqual(entry.status, REJECTED)

    def test_cancelled_source_rejects_entry(self):
        appointment = self.add_appointment("10:00")
        self.queue.enqueue_appointment(appointment.id)
        self.queue.set_appointment_status(appointment.id, CANCELLED)

        self.assertEqual(self.queue.entry_for(AppointmentRef(appointment.id)).status, REJECTED)

    def test_invalid_transition(self):
        appointment = self.add_appointment("10:00", status=PENDING_APPROVAL)
        with self.assertRaises(InvalidStateTransition):
            self.queue.set_appointment_status(appointment.id, COMPLETED)
        with self.assertRaises(InvalidStateTransition):
            self.queue.set_appointment_status(appointment.id, "teleported")

    def test_entry_status_no_show(self):
        walk_in = self.add_walk_in("09:00", start="09:05", end="09:35")
        entry = self.queue.enqueue_walk_in(walk_in.id)

        self.queue.set_entry_status(entry.id, NO_SHOW)
        self.assertEqual(entry.status, NO_SHOW)
        self.assertEqual(entry.source.status, NO_SHOW)

    def test_walk_in_ongoing_claims_lane(self):
        first = self.add_walk_in("09:00", start="09:05", end="09:35")
        second = self.add_walk_in("09:10", start="09:35", end="10:05")
        self.queue.enqueue_walk_in(first.id)
        self.queue.enqueue_walk_in(second.id)

        self.queue.set_walk_in_status(first.id, ONGOING)
        with self.assertRaises(AlreadyServing):
            self.queue.set_walk_in_status(second.id, ONGOING)

        self.queue.set_walk_in_status(first.id, COMPLETED)
        self.assertIsNone(self.lane().serving_entry_id)


class TestReconcile(QueueTestCase):

    def test_reconcile_repairs_divergence(self):
        appointment = self.add_appointment("10:00")
        entry = self.queue.enqueue_appointment(appointment.id)

        # simulate a source update that never reached the queue entry
        appointment = db.session.get(Appointment, appointment.id)
        appointment.status = REJECTED
        db.session.commit()

        self.assertEqual(self.queue.reconcile(self.barber.id, DAY), 1)
        self.assertEqual(db.session.get(QueueEntry, entry.id).status, REJECTED)
        self.assertEqual(self.queue.reconcile(self.barber.id, DAY), 0)

    def test_reconcile_resyncs_serving_guard(self):
        appointment = self.add_appointment("10:00")
        entry = self.queue.enqueue_appointment(appointment.id)
        appointment = db.session.get(Appointment, appointment.id)
        appointment.status = ONGOING
        db.session.commit()

        self.queue.reconcile(self.barber.id, DAY)
        self.assertEqual(self.lane().serving_entry_id, entry.id)
