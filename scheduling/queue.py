"""
Queue Manager

Sequences appointments and walk-ins for a barber's day:
- Appends entries with per (barber, date) increasing positions and a token
- Computes and recomputes estimated start times
- Drives waiting -> ongoing -> completed and keeps the source record in sync

Positions come from an atomic counter on the queue lane row, and the
"one ongoing entry per lane" rule is a conditional update on the same row,
so concurrent requests cannot both win.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from models import db
from models.appointment import Appointment
from models.status import (
    ALL_STATUSES, APPOINTMENT_TRANSITIONS, APPROVED, COMPLETED, ONGOING, QUEUE_TRANSITIONS,
    WAITING, WALK_IN_TRANSITIONS, queue_status_for,
)
from models.walk_in import WalkIn
from models.waiting_queue import (
    APPOINTMENT_SOURCE, WALK_IN_SOURCE, AppointmentRef, QueueEntry, QueueLane, SourceRef, WalkInRef,
)
from scheduling.errors import (
    AlreadyServing, InvalidStateTransition, NotFound, NotOngoing, QueueEmpty, TokenGenerationFailed,
)
from scheduling.settings import SchedulingSettings, current_settings
from scheduling.time_utils import END_OF_DAY, add_minutes, format_clock, from_minutes, require_date, to_minutes
from scheduling.tokens import TokenGenerator
from utils.audit import log_event
from utils.notifier import APPOINTMENT_STATUS_CHANGED, TOKEN_ASSIGNED, notify

logger = logging.getLogger(__name__)


def _source_model(ref: SourceRef):
    if isinstance(ref, AppointmentRef):
        return Appointment
    if isinstance(ref, WalkInRef):
        return WalkIn
    raise TypeError(f"Unsupported queue source {ref!r}")


class QueueManager:
    def __init__(self, settings: SchedulingSettings, clock: Callable[[], datetime] = None,
                 tokens: TokenGenerator = None):
        self.settings = settings
        self.clock = clock or datetime.now
        self.tokens = tokens or TokenGenerator(settings)

    def now(self) -> str:
        return format_clock(self.clock())

    # ---------- lookups ----------

    def get_entry(self, entry_id: int) -> QueueEntry:
        entry = db.session.get(QueueEntry, entry_id)
        if not entry:
            raise NotFound("Queue entry not found")
        return entry

    def load_source(self, ref: SourceRef):
        source = db.session.get(_source_model(ref), ref.id)
        if not source:
            label = "Appointment" if isinstance(ref, AppointmentRef) else "Walk-in"
            raise NotFound(f"{label} not found")
        return source

    def entry_for(self, ref: SourceRef) -> Optional[QueueEntry]:
        if isinstance(ref, AppointmentRef):
            return QueueEntry.query.filter_by(appointment_id=ref.id).first()
        return QueueEntry.query.filter_by(walk_in_id=ref.id).first()

    def waiting_entries(self, barber_id: int, date: str) -> List[QueueEntry]:
        return (
            QueueEntry.query
            .filter_by(barber_id=barber_id, date=date, status=WAITING)
            .order_by(QueueEntry.position.asc())
            .all()
        )

    def snapshot(self, barber_id: int, date: str) -> dict:
        require_date(date)
        entries = (
            QueueEntry.query
            .filter_by(barber_id=barber_id, date=date)
            .order_by(QueueEntry.position.asc())
            .all()
        )
        serving = next((e for e in entries if e.status == ONGOING), None)
        return {
            "barber_id": barber_id,
            "date": date,
            "serving": serving.to_dict() if serving else None,
            "waiting": [e.to_dict() for e in entries if e.status == WAITING],
            "entries": [e.to_dict() for e in entries],
        }

    # ---------- lane bookkeeping ----------

    def _lane_filter(self, barber_id: int, date: str):
        return (QueueLane.barber_id == barber_id, QueueLane.date == date)

    def ensure_lane(self, barber_id: int, date: str) -> None:
        """Create the lane row once; losing a creation race is fine."""
        if QueueLane.query.filter_by(barber_id=barber_id, date=date).first():
            return

        highest = (
            db.session.query(func.max(QueueEntry.position))
            .filter(QueueEntry.barber_id == barber_id, QueueEntry.date == date)
            .scalar()
        )
        db.session.add(QueueLane(barber_id=barber_id, date=date, last_position=highest or 0))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()

    def _next_position(self, barber_id: int, date: str) -> int:
        db.session.execute(
            update(QueueLane)
            .where(*self._lane_filter(barber_id, date))
            .values(last_position=QueueLane.last_position + 1),
            execution_options={"synchronize_session": False},
        )
        return (
            db.session.query(QueueLane.last_position)
            .filter(*self._lane_filter(barber_id, date))
            .scalar()
        )

    def _claim_lane(self, entry: QueueEntry) -> None:
        if QueueEntry.query.filter(
            QueueEntry.barber_id == entry.barber_id,
            QueueEntry.date == entry.date,
            QueueEntry.status == ONGOING,
            QueueEntry.id != entry.id,
        ).first():
            raise AlreadyServing()

        result = db.session.execute(
            update(QueueLane)
            .where(*self._lane_filter(entry.barber_id, entry.date))
            .where(QueueLane.serving_entry_id.is_(None))
            .values(serving_entry_id=entry.id),
            execution_options={"synchronize_session": False},
        )
        if result.rowcount != 1:
            raise AlreadyServing()

    def _release_lane(self, entry: QueueEntry) -> None:
        db.session.execute(
            update(QueueLane)
            .where(*self._lane_filter(entry.barber_id, entry.date))
            .where(QueueLane.serving_entry_id == entry.id)
            .values(serving_entry_id=None),
            execution_options={"synchronize_session": False},
        )

    # ---------- enqueue ----------

    def enqueue_appointment(self, appointment_id: int, send_notification: bool = True) -> QueueEntry:
        return self._enqueue(AppointmentRef(appointment_id), send_notification=send_notification)

    def enqueue_walk_in(self, walk_in_id: int, send_notification: bool = True) -> QueueEntry:
        return self._enqueue(WalkInRef(walk_in_id), send_notification=send_notification)

    def _enqueue(self, ref: SourceRef, prepare: Callable = None, send_notification: bool = True) -> QueueEntry:
        """
        Add the source record to its barber's queue, or return its existing entry.

        prepare(source) runs inside the same transaction before the entry is
        built, so a status change and the new entry commit together.
        Token collisions roll back and retry with a fresh token.
        """
        source = self.load_source(ref)
        existing = self.entry_for(ref)
        if existing:
            return existing

        barber_id, date = source.barber_id, source.date
        self.ensure_lane(barber_id, date)

        for attempt in range(self.settings.token_max_attempts):
            source = self.load_source(ref)
            if prepare:
                prepare(source)
            if isinstance(ref, AppointmentRef) and source.status != APPROVED:
                db.session.rollback()
                raise InvalidStateTransition("Only approved appointments can be added to the queue")

            entry = self._build_entry(ref, source, fresh_token=attempt > 0)
            db.session.add(entry)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                existing = self.entry_for(ref)
                if existing:
                    # a concurrent request queued the same source first
                    return existing
                logger.warning("Token collision for %s %s, regenerating (attempt %d)",
                               ref.kind, ref.id, attempt + 1)
                continue

            log_event("QUEUE_ENQUEUE", entity="queue_entry", entity_id=entry.id,
                      metadata={"source_type": ref.kind, "source_id": ref.id, "position": entry.position})
            logger.info("Queued %s %s as %s at position %d", ref.kind, ref.id, entry.token_number, entry.position)
            if send_notification:
                notify(TOKEN_ASSIGNED, {
                    "queue_entry_id": entry.id,
                    "date": entry.date,
                    "token_number": entry.token_number,
                    "position": entry.position,
                    "estimated_start_time": entry.estimated_start_time,
                }, recipient_email=source.customer_email)
            return entry

        raise TokenGenerationFailed()

    def _build_entry(self, ref: SourceRef, source, fresh_token: bool) -> QueueEntry:
        if fresh_token or not source.token_number:
            source.token_number = self.tokens.generate(ref.kind, source.date)

        position = self._next_position(source.barber_id, source.date)

        if isinstance(ref, AppointmentRef):
            estimated_start = source.start_time or source.requested_time
        else:
            # walk-ins wait behind everyone queued before them
            ahead = (
                db.session.query(func.coalesce(func.sum(QueueEntry.estimated_time), 0))
                .filter(
                    QueueEntry.barber_id == source.barber_id,
                    QueueEntry.date == source.date,
                    QueueEntry.position < position,
                )
                .scalar()
            )
            running = to_minutes(source.start_time or source.arrival_time) + int(ahead)
            estimated_start = from_minutes(min(running, to_minutes(END_OF_DAY)))
            source.status = WAITING

        return QueueEntry(
            barber_id=source.barber_id,
            date=source.date,
            token_number=source.token_number,
            source_type=APPOINTMENT_SOURCE if isinstance(ref, AppointmentRef) else WALK_IN_SOURCE,
            appointment_id=ref.id if isinstance(ref, AppointmentRef) else None,
            walk_in_id=ref.id if isinstance(ref, WalkInRef) else None,
            estimated_time=source.estimated_time,
            estimated_start_time=estimated_start,
            position=position,
            status=WAITING,
        )

    # ---------- serving ----------

    def start_serving_next(self, barber_id: int, date: str) -> QueueEntry:
        require_date(date)
        self.ensure_lane(barber_id, date)

        if QueueEntry.query.filter_by(barber_id=barber_id, date=date, status=ONGOING).first():
            raise AlreadyServing()

        entry = (
            QueueEntry.query
            .filter_by(barber_id=barber_id, date=date, status=WAITING)
            .order_by(QueueEntry.position.asc())
            .first()
        )
        if not entry:
            raise QueueEmpty()

        try:
            self._claim_lane(entry)
            entry.status = ONGOING
            source = entry.source
            source.status = ONGOING
            source.start_time = self.now()
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        log_event("QUEUE_START", entity="queue_entry", entity_id=entry.id, metadata={"token": entry.token_number})
        logger.info("Serving %s for barber %s on %s", entry.token_number, barber_id, date)
        return entry

    def complete_service(self, entry_id: int) -> QueueEntry:
        entry = self.get_entry(entry_id)
        if entry.status != ONGOING:
            raise NotOngoing()

        try:
            entry.status = COMPLETED
            source = entry.source
            source.status = COMPLETED
            source.end_time = self.now()
            self._release_lane(entry)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        log_event("QUEUE_COMPLETE", entity="queue_entry", entity_id=entry.id, metadata={"token": entry.token_number})
        self.recalculate_wait_times(entry.barber_id, entry.date)
        return entry

    def recalculate_wait_times(self, barber_id: int, date: str) -> List[QueueEntry]:
        """
        Full recompute: waiting entries in position order, starting now.

        Estimates that would run past midnight are held at 23:59 so they
        stay non-decreasing in position order.
        """
        entries = self.waiting_entries(barber_id, date)
        if not entries:
            return []

        running = to_minutes(self.now())
        for entry in entries:
            entry.estimated_start_time = from_minutes(min(running, to_minutes(END_OF_DAY)))
            running += entry.estimated_time
        db.session.commit()
        return entries

    # ---------- status changes ----------

    def set_appointment_status(self, appointment_id: int, status: str) -> Appointment:
        return self._set_source_status(AppointmentRef(appointment_id), status)

    def set_walk_in_status(self, walk_in_id: int, status: str) -> WalkIn:
        return self._set_source_status(WalkInRef(walk_in_id), status)

    def set_entry_status(self, entry_id: int, status: str) -> QueueEntry:
        entry = self.get_entry(entry_id)
        self._check_transition(QUEUE_TRANSITIONS, entry.status, status)
        self._set_source_status(entry.source_ref, status, entry=entry)
        return entry

    def _check_transition(self, table: dict, current: str, status: str) -> None:
        if status not in ALL_STATUSES:
            raise InvalidStateTransition(f"Invalid status value {status!r}")
        if status not in table.get(current, ()):
            raise InvalidStateTransition(f"Cannot change status from {current} to {status}")

    def _set_source_status(self, ref: SourceRef, status: str, entry: QueueEntry = None):
        source = self.load_source(ref)
        is_appointment = isinstance(ref, AppointmentRef)
        if entry is None:
            table = APPOINTMENT_TRANSITIONS if is_appointment else WALK_IN_TRANSITIONS
            self._check_transition(table, source.status, status)

        if is_appointment and status == APPROVED:
            # approval is the only way an appointment enters the queue
            def approve(appointment):
                appointment.status = APPROVED
                if not appointment.start_time:
                    appointment.start_time = appointment.requested_time
                    appointment.end_time = add_minutes(appointment.requested_time, appointment.estimated_time)

            self._enqueue(ref, prepare=approve)
            source = self.load_source(ref)
        else:
            entry = entry or self.entry_for(ref)
            try:
                self._apply_status(source, entry, status)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise

            if status == COMPLETED and entry is not None:
                self.recalculate_wait_times(entry.barber_id, entry.date)

        log_event("APPOINTMENT_STATUS" if is_appointment else "WALK_IN_STATUS",
                  entity=ref.kind, entity_id=ref.id, metadata={"status": status})
        if is_appointment:
            notify(APPOINTMENT_STATUS_CHANGED, {
                "appointment_id": source.id,
                "date": source.date,
                "time": source.start_time or source.requested_time,
                "service": source.service,
                "status": status,
            }, recipient_email=source.customer_email)
        return source

    def _apply_status(self, source, entry: Optional[QueueEntry], status: str) -> None:
        source.status = status
        if status == ONGOING:
            source.start_time = self.now()
        elif status == COMPLETED:
            source.end_time = self.now()

        if entry is None:
            return
        mirrored = queue_status_for(status)
        if mirrored is None or mirrored == entry.status:
            return
        if mirrored == ONGOING:
            self._claim_lane(entry)
        if entry.status == ONGOING:
            self._release_lane(entry)
        entry.status = mirrored

    # ---------- repair ----------

    def reconcile(self, barber_id: int, date: str) -> int:
        """
        Re-derive each entry's status from its source record and resync the
        serving guard. Returns the number of entries that were changed.
        """
        require_date(date)
        self.ensure_lane(barber_id, date)
        entries = QueueEntry.query.filter_by(barber_id=barber_id, date=date).all()

        fixed = 0
        for entry in entries:
            expected = queue_status_for(entry.source.status)
            if expected and expected != entry.status:
                logger.warning("Queue entry %s was %s, source says %s", entry.id, entry.status, expected)
                entry.status = expected
                fixed += 1

        ongoing = [e for e in entries if e.status == ONGOING]
        lane = QueueLane.query.filter_by(barber_id=barber_id, date=date).first()
        lane.serving_entry_id = min(ongoing, key=lambda e: e.position).id if ongoing else None
        db.session.commit()

        if fixed:
            log_event("QUEUE_RECONCILE", entity="queue_lane", entity_id=lane.id, metadata={"fixed": fixed})
        return fixed


def get_queue_manager() -> QueueManager:
    return QueueManager(current_settings())
