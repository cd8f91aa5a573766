from dataclasses import dataclass
from datetime import datetime
from typing import Union

from models.db import db
from models.status import WAITING

APPOINTMENT_SOURCE = "appointment"
WALK_IN_SOURCE = "walkin"


@dataclass(frozen=True)
class AppointmentRef:
    id: int
    kind = APPOINTMENT_SOURCE


@dataclass(frozen=True)
class WalkInRef:
    id: int
    kind = WALK_IN_SOURCE


SourceRef = Union[AppointmentRef, WalkInRef]


class QueueEntry(db.Model):
    __tablename__ = "waiting_queue"

    id = db.Column(db.Integer, primary_key=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)
    token_number = db.Column(db.String(40), nullable=False, unique=True)

    source_type = db.Column(db.String(20), nullable=False)  # appointment, walkin
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointments.id"), nullable=True, unique=True)
    walk_in_id = db.Column(db.Integer, db.ForeignKey("walk_ins.id"), nullable=True, unique=True)

    estimated_time = db.Column(db.Integer, nullable=False)
    estimated_start_time = db.Column(db.String(5), nullable=True)
    position = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=WAITING, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    appointment = db.relationship("Appointment")
    walk_in = db.relationship("WalkIn")

    __table_args__ = (
        db.UniqueConstraint("barber_id", "date", "position", name="uq_queue_position"),
        # exactly one source reference, matching source_type
        db.CheckConstraint(
            "(source_type = 'appointment' AND appointment_id IS NOT NULL AND walk_in_id IS NULL) OR "
            "(source_type = 'walkin' AND walk_in_id IS NOT NULL AND appointment_id IS NULL)",
            name="ck_queue_single_source",
        ),
        db.CheckConstraint("position >= 1", name="ck_queue_position_positive"),
        db.Index("ix_queue_barber_date_position", "barber_id", "date", "position"),
    )

    @property
    def source_ref(self) -> SourceRef:
        if self.source_type == APPOINTMENT_SOURCE:
            return AppointmentRef(self.appointment_id)
        if self.source_type == WALK_IN_SOURCE:
            return WalkInRef(self.walk_in_id)
        raise ValueError(f"Unknown queue source type {self.source_type!r}")

    @property
    def source(self):
        ref = self.source_ref
        if isinstance(ref, AppointmentRef):
            return self.appointment
        return self.walk_in

    def to_dict(self):
        return {
            "id": self.id,
            "barber_id": self.barber_id,
            "date": self.date,
            "token_number": self.token_number,
            "source_type": self.source_type,
            "source_id": self.source_ref.id,
            "estimated_time": self.estimated_time,
            "estimated_start_time": self.estimated_start_time,
            "position": self.position,
            "status": self.status,
        }


class QueueLane(db.Model):
    """Per (barber, date) queue bookkeeping: position counter and the serving guard."""
    __tablename__ = "queue_lanes"

    id = db.Column(db.Integer, primary_key=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    date = db.Column(db.String(10), nullable=False)
    last_position = db.Column(db.Integer, default=0, nullable=False)
    serving_entry_id = db.Column(db.Integer, db.ForeignKey("waiting_queue.id"), nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("barber_id", "date", name="uq_queue_lane_barber_date"),
    )
