"""
Slot Resolver

Answers "is this exact interval bookable?" and "what is the next slot that
fits this service?" on top of the availability calculator.
"""

from dataclasses import dataclass
from typing import Optional

from scheduling.availability import AvailabilityCalculator, FreeInterval
from scheduling.errors import NoSlotAvailable, SlotUnavailable
from scheduling.settings import SchedulingSettings
from scheduling.time_utils import add_minutes, compare_times, fits_in_day, require_date, require_time


@dataclass(frozen=True)
class SlotCheck:
    available: bool
    slot: FreeInterval
    duration: int
    suggestion: Optional[FreeInterval] = None

    def to_dict(self):
        return {
            "available": self.available,
            "slot": self.slot.to_dict(),
            "duration": self.duration,
            "suggested_slot": self.suggestion.to_dict() if self.suggestion else None,
        }


class SlotResolver:
    def __init__(self, settings: SchedulingSettings, calculator: AvailabilityCalculator = None):
        self.settings = settings
        self.calculator = calculator or AvailabilityCalculator(settings)

    def is_available(self, barber_id: int, date: str, start: str, end: str,
                     exclude_appointment_id: int = None) -> bool:
        require_time(start, "start_time")
        require_time(end, "end_time")
        free = self.calculator.free_intervals(barber_id, date, exclude_appointment_id=exclude_appointment_id)
        return any(interval.contains(start, end) for interval in free)

    def next_available(self, barber_id: int, date: str, requested_start: str, duration: int,
                       exclude_appointment_id: int = None) -> Optional[FreeInterval]:
        """
        The requested start itself when it fits, otherwise the start of the
        first later free interval long enough for the duration.
        """
        require_time(requested_start, "requested_time")
        free = self.calculator.free_intervals(barber_id, date, exclude_appointment_id=exclude_appointment_id)
        requested_end = add_minutes(requested_start, duration)

        if fits_in_day(requested_start, duration) and any(
            interval.contains(requested_start, requested_end) for interval in free
        ):
            return FreeInterval(requested_start, requested_end)

        for interval in free:
            if compare_times(interval.start, requested_start) <= 0 or not fits_in_day(interval.start, duration):
                continue
            end = add_minutes(interval.start, duration)
            if interval.contains(interval.start, end):
                return FreeInterval(interval.start, end)

        return None

    def check(self, barber_id: int, date: str, start: str, duration: int,
              exclude_appointment_id: int = None) -> SlotCheck:
        require_date(date)
        require_time(start, "requested_time")
        end = add_minutes(start, duration)
        slot = FreeInterval(start, end)

        if fits_in_day(start, duration) and self.is_available(
            barber_id, date, start, end, exclude_appointment_id=exclude_appointment_id
        ):
            return SlotCheck(True, slot, duration)

        suggestion = self.next_available(barber_id, date, start, duration,
                                         exclude_appointment_id=exclude_appointment_id)
        return SlotCheck(False, slot, duration, suggestion)

    def require(self, barber_id: int, date: str, start: str, duration: int,
                exclude_appointment_id: int = None) -> FreeInterval:
        """The exact slot, or SlotUnavailable carrying a suggestion (never substituted)."""
        result = self.check(barber_id, date, start, duration, exclude_appointment_id=exclude_appointment_id)
        if result.available:
            return result.slot
        if result.suggestion is None:
            raise NoSlotAvailable(f"No available slots for {date}. Please try another date.")
        raise SlotUnavailable(suggestion=result.suggestion)
