"""
Tests for scheduling/intake.py
"""

from models import db
from models.notification import Notification
from models.status import CANCELLED, PENDING_APPROVAL, WAITING
from models.user import User
from scheduling.availability import FreeInterval
from scheduling.errors import (
    InvalidFormat, InvalidStateTransition, NoSlotAvailable, NotFound, SlotUnavailable, ValidationError,
)
from scheduling.intake import BookingIntake
from scheduling.queue import QueueManager
from tests.base import DAY, SchedulingTestCase


class IntakeTestCase(SchedulingTestCase):

    def setUp(self):
        super().setUp()
        self.intake = BookingIntake(self.settings, queue=QueueManager(self.settings, clock=self.clock))
        self.add_working_hours("09:00", "12:00")

    def book(self, requested_time="09:30", service="Haircut", email="pat@example.com"):
        return self.intake.book_appointment(
            self.barber.id, DAY, requested_time, service,
            customer_name="Pat", customer_email=email,
        )


class TestBookAppointment(IntakeTestCase):

    def test_books_exact_slot_pending(self):
        appointment = self.book()

        self.assertEqual(appointment.status, PENDING_APPROVAL)
        self.assertEqual((appointment.start_time, appointment.end_time), ("09:30", "10:00"))
        self.assertEqual(appointment.estimated_time, 30)

    def test_service_duration_is_looked_up(self):
        appointment = self.book(service="Haircut and Beard")
        self.assertEqual(appointment.end_time, "10:15")

    def test_email_is_normalized(self):
        appointment = self.book(email="  Pat@Example.COM ")
        self.assertEqual(appointment.customer_email, "pat@example.com")

    def test_taken_slot_offers_suggestion(self):
        self.book()
        with self.assertRaises(SlotUnavailable) as ctx:
            self.book(email="other@example.com")
        self.assertEqual(ctx.exception.suggestion, FreeInterval("10:05", "10:35"))

    def test_no_working_hours(self):
        with self.assertRaises(NoSlotAvailable):
            self.intake.book_appointment(self.barber.id, "2030-01-16", "09:30", "haircut",
                                         customer_name="Pat", customer_email="pat@example.com")

    def test_customer_account_fills_details(self):
        customer = User(email="kim@example.com", full_name="Kim", phone_number="555", role="customer")
        db.session.add(customer)
        db.session.commit()

        appointment = self.intake.book_appointment(self.barber.id, DAY, "09:30", "haircut", customer_id=customer.id)
        self.assertEqual(appointment.customer_name, "Kim")
        self.assertEqual(appointment.customer_phone, "555")

    def test_validation(self):
        with self.assertRaises(InvalidFormat):
            self.book(requested_time="9:30")
        with self.assertRaises(ValidationError):
            self.intake.book_appointment(self.barber.id, DAY, "09:30", "haircut")
        with self.assertRaises(NotFound):
            self.intake.book_appointment(9999, DAY, "09:30", "haircut",
                                         customer_name="Pat", customer_email="pat@example.com")


class TestPendingChanges(IntakeTestCase):

    def test_confirm_suggested_time(self):
        appointment = self.book()
        moved = self.intake.confirm_suggested_time(appointment.id, "10:30")
        self.assertEqual((moved.requested_time, moved.start_time, moved.end_time), ("10:30", "10:30", "11:00"))

    def test_confirm_ignores_own_slot(self):
        appointment = self.book()
        moved = self.intake.confirm_suggested_time(appointment.id, "09:40")
        self.assertEqual(moved.start_time, "09:40")

    def test_cancel_pending(self):
        appointment = self.book()
        cancelled = self.intake.cancel_appointment(appointment.id)
        self.assertEqual(cancelled.status, CANCELLED)

    def test_cancel_only_pending(self):
        appointment = self.add_appointment("11:00")
        with self.assertRaises(InvalidStateTransition):
            self.intake.cancel_appointment(appointment.id)


class TestWalkIns(IntakeTestCase):

    def test_walk_in_gets_next_slot_and_token(self):
        walk_in, entry = self.intake.register_walk_in(self.barber.id, DAY, "09:00", "haircut",
                                                      customer_name="Jo", customer_email="jo@example.com")

        # the opening edge is inside the buffer, so the first slot is 09:05
        self.assertEqual((walk_in.start_time, walk_in.end_time), ("09:05", "09:35"))
        self.assertEqual(walk_in.status, WAITING)
        self.assertEqual(entry.position, 1)
        self.assertEqual(entry.estimated_start_time, "09:05")
        self.assertEqual(walk_in.token_number, entry.token_number)
        self.assertTrue(entry.token_number.startswith("WALKIN-"))

        kinds = {n.kind for n in Notification.query.all()}
        self.assertIn("walk-in-accepted", kinds)
        self.assertIn("barber-notified-of-walkin", kinds)
        self.assertIn("token-assigned", kinds)

    def test_walk_ins_do_not_overlap(self):
        first, _ = self.intake.register_walk_in(self.barber.id, DAY, "09:00", "haircut", customer_name="Jo")
        second, entry = self.intake.register_walk_in(self.barber.id, DAY, "09:00", "haircut", customer_name="Al")

        self.assertEqual(first.end_time, "09:35")
        self.assertEqual(second.start_time, "09:40")
        self.assertEqual(entry.position, 2)

    def test_walk_in_denied_when_day_is_full(self):
        self.add_blocked_slot("09:00", "12:00")
        with self.assertRaises(NoSlotAvailable) as ctx:
            self.intake.register_walk_in(self.barber.id, DAY, "09:00", "haircut", customer_name="Jo")
        self.assertIn("Walk-in denied", ctx.exception.message)


class TestNearMidnight(SchedulingTestCase):

    def setUp(self):
        super().setUp()
        self.intake = BookingIntake(self.settings, queue=QueueManager(self.settings, clock=self.clock))
        self.add_working_hours("22:00", "23:55")

    def book(self, requested_time, service="haircut", email="pat@example.com"):
        return self.intake.book_appointment(self.barber.id, DAY, requested_time, service,
                                            customer_name="Pat", customer_email=email)

    def test_booking_across_midnight_is_refused(self):
        with self.assertRaises(NoSlotAvailable):
            self.book("23:40")

    def test_walk_in_near_closing_is_denied(self):
        with self.assertRaises(NoSlotAvailable):
            self.intake.register_walk_in(self.barber.id, DAY, "23:40", "haircut", customer_name="Jo")

    def test_stored_wrapped_booking_does_not_reopen_the_evening(self):
        self.add_appointment("23:40", "00:10")
        with self.assertRaises(NoSlotAvailable):
            self.book("23:45", service="beard trim", email="other@example.com")

        # earlier evening time is still bookable
        appointment = self.book("22:30", email="other@example.com")
        self.assertEqual(appointment.end_time, "23:00")
