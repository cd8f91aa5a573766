"""
Booking intake: appointment requests and walk-ins.

Appointments are created pending approval at the exact slot the customer
asked for; when it is taken the caller gets a suggestion, never a silent
substitute. Walk-ins are accepted straight into the queue at the next slot
that fits.
"""

import logging

from sqlalchemy.exc import IntegrityError

from models import db
from models.appointment import Appointment
from models.status import CANCELLED, PENDING_APPROVAL, WAITING
from models.user import User
from models.walk_in import WalkIn
from scheduling.errors import (
    DuplicateBooking, InvalidStateTransition, NoSlotAvailable, NotFound, ValidationError,
)
from scheduling.queue import QueueManager
from scheduling.settings import SchedulingSettings, current_settings
from scheduling.slots import SlotCheck, SlotResolver
from scheduling.time_utils import require_date, require_time
from utils.audit import log_event
from utils.notifier import BARBER_NOTIFIED_OF_WALKIN, WALK_IN_ACCEPTED, notify

logger = logging.getLogger(__name__)


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def get_barber(barber_id) -> User:
    barber = db.session.get(User, barber_id) if barber_id is not None else None
    if not barber or barber.role != "barber" or not barber.is_active:
        raise NotFound("Barber not found")
    return barber


class BookingIntake:
    def __init__(self, settings: SchedulingSettings, resolver: SlotResolver = None, queue: QueueManager = None):
        self.settings = settings
        self.resolver = resolver or SlotResolver(settings)
        self.queue = queue or QueueManager(settings)

    def check_availability(self, barber_id: int, date: str, requested_time: str, service: str) -> SlotCheck:
        require_date(date)
        require_time(requested_time, "requested_time")
        get_barber(barber_id)

        result = self.resolver.check(barber_id, date, requested_time, self.settings.duration_for(service))
        if not result.available and result.suggestion is None:
            raise NoSlotAvailable(f"No available slots for {date}. Please try another date.")
        return result

    def book_appointment(self, barber_id: int, date: str, requested_time: str, service: str,
                         customer_id: int = None, customer_name: str = None, customer_email: str = None,
                         customer_phone: str = None, notes: str = None) -> Appointment:
        require_date(date)
        require_time(requested_time, "requested_time")
        if not (service or "").strip():
            raise ValidationError("service is required")
        get_barber(barber_id)

        if customer_id is not None:
            customer = db.session.get(User, customer_id)
            if not customer:
                raise NotFound("Customer not found")
            customer_name = customer_name or customer.full_name
            customer_email = customer_email or customer.email
            customer_phone = customer_phone or customer.phone_number

        customer_email = normalize_email(customer_email)
        if not customer_name or not customer_email:
            raise ValidationError("customer name and email are required")

        duration = self.settings.duration_for(service)
        slot = self.resolver.require(barber_id, date, requested_time, duration)

        appointment = Appointment(
            customer_id=customer_id,
            customer_name=customer_name.strip(),
            customer_email=customer_email,
            customer_phone=customer_phone,
            barber_id=barber_id,
            date=date,
            requested_time=requested_time,
            start_time=slot.start,
            end_time=slot.end,
            estimated_time=duration,
            service=service.strip(),
            status=PENDING_APPROVAL,
            notes=(notes or "").strip() or None,
        )
        db.session.add(appointment)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateBooking()

        log_event("APPOINTMENT_CREATE", user_id=customer_id, entity="appointment", entity_id=appointment.id,
                  metadata={"barber_id": barber_id, "date": date, "time": requested_time})
        return appointment

    def confirm_suggested_time(self, appointment_id: int, start_time: str) -> Appointment:
        """Customer accepts a suggested start for a pending appointment."""
        require_time(start_time, "start_time")
        appointment = db.session.get(Appointment, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        if appointment.status != PENDING_APPROVAL:
            raise InvalidStateTransition("Only pending appointments can be rescheduled")

        slot = self.resolver.require(appointment.barber_id, appointment.date, start_time,
                                     appointment.estimated_time, exclude_appointment_id=appointment.id)
        appointment.requested_time = slot.start
        appointment.start_time = slot.start
        appointment.end_time = slot.end
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateBooking()

        log_event("APPOINTMENT_CONFIRM_TIME", entity="appointment", entity_id=appointment.id,
                  metadata={"start_time": slot.start})
        return appointment

    def cancel_appointment(self, appointment_id: int) -> Appointment:
        appointment = db.session.get(Appointment, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        if appointment.status != PENDING_APPROVAL:
            raise InvalidStateTransition("Only pending appointments can be cancelled")
        return self.queue.set_appointment_status(appointment_id, CANCELLED)

    def register_walk_in(self, barber_id: int, date: str, arrival_time: str, service: str,
                         customer_name: str, customer_email: str = None, customer_phone: str = None):
        """Returns (walk_in, queue_entry)."""
        require_date(date)
        require_time(arrival_time, "arrival_time")
        if not (customer_name or "").strip():
            raise ValidationError("customer name is required")
        if not (service or "").strip():
            raise ValidationError("service is required")
        barber = get_barber(barber_id)

        duration = self.settings.duration_for(service)
        slot = self.resolver.next_available(barber_id, date, arrival_time, duration)
        if slot is None:
            raise NoSlotAvailable("Walk-in denied. No available slots for today. Try again tomorrow.")

        walk_in = WalkIn(
            customer_name=customer_name.strip(),
            customer_email=normalize_email(customer_email) or None,
            customer_phone=customer_phone,
            barber_id=barber_id,
            date=date,
            arrival_time=arrival_time,
            start_time=slot.start,
            end_time=slot.end,
            estimated_time=duration,
            service=service.strip(),
            status=WAITING,
        )
        db.session.add(walk_in)
        db.session.commit()

        entry = self.queue.enqueue_walk_in(walk_in.id)
        log_event("WALK_IN_CREATE", entity="walkin", entity_id=walk_in.id,
                  metadata={"barber_id": barber_id, "start_time": slot.start})

        details = {
            "walk_in_id": walk_in.id,
            "customer_name": walk_in.customer_name,
            "date": walk_in.date,
            "arrival_time": walk_in.arrival_time,
            "start_time": walk_in.start_time,
            "service": walk_in.service,
            "token_number": walk_in.token_number,
        }
        notify(WALK_IN_ACCEPTED, details, recipient_email=walk_in.customer_email)
        notify(BARBER_NOTIFIED_OF_WALKIN, details, recipient_email=barber.email)
        logger.info("Walk-in %s accepted for barber %s at %s", walk_in.id, barber_id, slot.start)
        return walk_in, entry


def get_intake() -> BookingIntake:
    settings = current_settings()
    return BookingIntake(settings, queue=QueueManager(settings))
