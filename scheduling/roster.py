"""
Roster management: a barber's working hours and blocked slots.

Each barber keeps at most ROSTER_ENTRY_LIMIT future entries of each kind.
Going over the limit needs an explicit replace, which clears the barber's
existing entries of that kind before inserting the new one.
"""

from datetime import date as Date
from typing import Callable

from sqlalchemy.exc import IntegrityError

from models import db
from models.blocked_slot import BlockedSlot
from models.working_hours import WorkingHours
from scheduling.errors import DuplicateWorkingHours, LimitReached, NotFound, ValidationError
from scheduling.intake import get_barber
from scheduling.settings import SchedulingSettings, current_settings
from scheduling.time_utils import compare_times, format_date_key, require_date, require_time
from utils.audit import log_event

_LABELS = {WorkingHours: "working hours", BlockedSlot: "blocked slot"}


def _validate_window(start_time: str, end_time: str) -> None:
    require_time(start_time, "start_time")
    require_time(end_time, "end_time")
    if compare_times(end_time, start_time) <= 0:
        raise ValidationError("End time must be after start time")


class RosterService:
    def __init__(self, settings: SchedulingSettings, today: Callable[[], Date] = None):
        self.settings = settings
        self.today = today or Date.today

    def _get(self, model, entry_id: int):
        row = db.session.get(model, entry_id)
        if not row:
            raise NotFound(f"{_LABELS[model].capitalize()} not found")
        return row

    def count(self, model, barber_id: int) -> dict:
        today = format_date_key(self.today())
        count = model.query.filter(model.barber_id == barber_id, model.date >= today).count()
        return {
            "barber_id": barber_id,
            "count": count,
            "limit": self.settings.roster_entry_limit,
            "limit_reached": count >= self.settings.roster_entry_limit,
        }

    def _make_room(self, model, barber_id: int, replace: bool) -> None:
        if replace:
            model.query.filter_by(barber_id=barber_id).delete(synchronize_session=False)
            return
        if self.count(model, barber_id)["limit_reached"]:
            limit = self.settings.roster_entry_limit
            raise LimitReached(
                f"You already have {limit} {_LABELS[model]} entries. Adding more will delete existing entries."
            )

    # ---------- working hours ----------

    def create_working_hours(self, barber_id: int, date: str, start_time: str, end_time: str,
                             is_available: bool = True, replace: bool = False) -> WorkingHours:
        require_date(date)
        _validate_window(start_time, end_time)
        get_barber(barber_id)

        if not replace and WorkingHours.query.filter_by(barber_id=barber_id, date=date).first():
            raise DuplicateWorkingHours("Working hours already defined for this date. Use update instead.")
        self._make_room(WorkingHours, barber_id, replace)

        row = WorkingHours(barber_id=barber_id, date=date, start_time=start_time,
                           end_time=end_time, is_available=bool(is_available))
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateWorkingHours("Working hours already defined for this date. Use update instead.")

        log_event("WORKING_HOURS_CREATE", entity="working_hours", entity_id=row.id,
                  metadata={"barber_id": barber_id, "date": date, "replaced": replace})
        return row

    def update_working_hours(self, entry_id: int, **changes) -> WorkingHours:
        row = self._get(WorkingHours, entry_id)
        start_time = changes.get("start_time") or row.start_time
        end_time = changes.get("end_time") or row.end_time
        _validate_window(start_time, end_time)

        row.start_time = start_time
        row.end_time = end_time
        if changes.get("is_available") is not None:
            row.is_available = bool(changes["is_available"])
        db.session.commit()

        log_event("WORKING_HOURS_UPDATE", entity="working_hours", entity_id=row.id)
        return row

    def delete_working_hours(self, entry_id: int) -> None:
        row = self._get(WorkingHours, entry_id)
        db.session.delete(row)
        db.session.commit()
        log_event("WORKING_HOURS_DELETE", entity="working_hours", entity_id=entry_id)

    def list_working_hours(self, barber_id: int, date: str = None):
        q = WorkingHours.query.filter_by(barber_id=barber_id)
        if date:
            q = q.filter_by(date=require_date(date))
        return q.order_by(WorkingHours.date.asc()).all()

    # ---------- blocked slots ----------

    def create_blocked_slot(self, barber_id: int, date: str, start_time: str, end_time: str,
                            reason: str = None, replace: bool = False) -> BlockedSlot:
        require_date(date)
        _validate_window(start_time, end_time)
        get_barber(barber_id)
        self._make_room(BlockedSlot, barber_id, replace)

        row = BlockedSlot(barber_id=barber_id, date=date, start_time=start_time,
                          end_time=end_time, reason=(reason or "").strip() or None)
        db.session.add(row)
        db.session.commit()

        log_event("BLOCKED_SLOT_CREATE", entity="blocked_slot", entity_id=row.id,
                  metadata={"barber_id": barber_id, "date": date, "replaced": replace})
        return row

    def update_blocked_slot(self, entry_id: int, **changes) -> BlockedSlot:
        row = self._get(BlockedSlot, entry_id)
        start_time = changes.get("start_time") or row.start_time
        end_time = changes.get("end_time") or row.end_time
        _validate_window(start_time, end_time)

        row.start_time = start_time
        row.end_time = end_time
        if "reason" in changes:
            row.reason = (changes["reason"] or "").strip() or None
        db.session.commit()

        log_event("BLOCKED_SLOT_UPDATE", entity="blocked_slot", entity_id=row.id)
        return row

    def delete_blocked_slot(self, entry_id: int) -> None:
        row = self._get(BlockedSlot, entry_id)
        db.session.delete(row)
        db.session.commit()
        log_event("BLOCKED_SLOT_DELETE", entity="blocked_slot", entity_id=entry_id)

    def list_blocked_slots(self, barber_id: int, date: str = None):
        q = BlockedSlot.query.filter_by(barber_id=barber_id)
        if date:
            q = q.filter_by(date=require_date(date))
        return q.order_by(BlockedSlot.date.asc(), BlockedSlot.start_time.asc()).all()


def get_roster() -> RosterService:
    return RosterService(current_settings())
