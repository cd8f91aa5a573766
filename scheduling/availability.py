"""
Availability Service

Computes the free intervals in a barber's day, considering:
- Working hours for the date
- Blocked slots
- Appointments and walk-ins that occupy the barber
- Buffer time between services
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from models.appointment import Appointment
from models.blocked_slot import BlockedSlot
from models.status import APPOINTMENT_BUSY, WALK_IN_BUSY
from models.walk_in import WalkIn
from models.working_hours import WorkingHours
from scheduling.settings import SchedulingSettings
from scheduling.time_utils import (
    END_OF_DAY, add_minutes, compare_times, minutes_between, require_date, to_minutes,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FreeInterval:
    start: str
    end: str

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)

    def contains(self, start: str, end: str) -> bool:
        # a slot whose end wrapped past midnight is never contained
        if compare_times(end, start) <= 0:
            return False
        return compare_times(start, self.start) >= 0 and compare_times(end, self.end) <= 0

    def to_dict(self):
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class BusyInterval:
    start: str
    end: str
    kind: str  # appointment, blocked, walkin
    ref_id: int

    def to_dict(self):
        return {"start": self.start, "end": self.end, "kind": self.kind, "id": self.ref_id}


class AvailabilityCalculator:
    def __init__(self, settings: SchedulingSettings):
        self.settings = settings

    def working_hours(self, barber_id: int, date: str) -> Optional[WorkingHours]:
        return WorkingHours.query.filter_by(barber_id=barber_id, date=date, is_available=True).first()

    def busy_intervals(self, barber_id: int, date: str, exclude_appointment_id: int = None) -> List[BusyInterval]:
        """
        Every interval that keeps the barber busy on that date, sorted by start.

        Records lacking a concrete start or end are skipped.
        """
        require_date(date)
        busy = []

        q = Appointment.query.filter(
            Appointment.barber_id == barber_id,
            Appointment.date == date,
            Appointment.status.in_(APPOINTMENT_BUSY),
        )
        if exclude_appointment_id is not None:
            q = q.filter(Appointment.id != exclude_appointment_id)
        for a in q.all():
            start, end = a.start_time, a.end_time
            if (not start or not end) and self.settings.block_unconfirmed_requests and a.requested_time:
                start = a.requested_time
                end = add_minutes(a.requested_time, a.estimated_time)
            busy.append(BusyInterval(start, end, "appointment", a.id))

        for b in BlockedSlot.query.filter_by(barber_id=barber_id, date=date).all():
            busy.append(BusyInterval(b.start_time, b.end_time, "blocked", b.id))

        walk_ins = WalkIn.query.filter(
            WalkIn.barber_id == barber_id,
            WalkIn.date == date,
            WalkIn.status.in_(WALK_IN_BUSY),
        ).all()
        for w in walk_ins:
            busy.append(BusyInterval(w.start_time, w.end_time, "walkin", w.id))

        complete = []
        for interval in busy:
            if not interval.start or not interval.end:
                logger.debug("Skipping %s %s without concrete times", interval.kind, interval.ref_id)
                continue
            if compare_times(interval.end, interval.start) < 0:
                # wrapped past midnight: busy until the end of the day
                interval = BusyInterval(interval.start, END_OF_DAY, interval.kind, interval.ref_id)
            complete.append(interval)

        complete.sort(key=lambda i: to_minutes(i.start))
        return complete

    def free_intervals(self, barber_id: int, date: str, exclude_appointment_id: int = None) -> List[FreeInterval]:
        """
        Free intervals for the barber on that date, after buffer shrinkage.

        Steps:
            1. Working hours (none or unavailable -> [])
            2. Busy intervals sorted by start
            3. Sweep from the opening time emitting the gaps
            4. Apply the buffer to each gap
        """
        hours = self.working_hours(barber_id, date)
        if not hours:
            return []

        busy = self.busy_intervals(barber_id, date, exclude_appointment_id=exclude_appointment_id)

        gaps = []
        cursor = hours.start_time
        for interval in busy:
            if compare_times(cursor, interval.start) < 0:
                gaps.append(FreeInterval(cursor, interval.start))
            # overlapping busy intervals must not move the cursor backwards
            if compare_times(cursor, interval.end) < 0:
                cursor = interval.end

        if compare_times(cursor, hours.end_time) < 0:
            gaps.append(FreeInterval(cursor, hours.end_time))

        return self.apply_buffer(gaps)

    def apply_buffer(self, gaps: List[FreeInterval]) -> List[FreeInterval]:
        buffer = self.settings.buffer_minutes
        half = buffer // 2

        buffered = []
        for gap in gaps:
            if gap.minutes < buffer:
                continue
            shrunk = FreeInterval(add_minutes(gap.start, half), add_minutes(gap.end, -half))
            if compare_times(shrunk.start, shrunk.end) < 0:
                buffered.append(shrunk)
        return buffered
