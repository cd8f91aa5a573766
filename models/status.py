PENDING_APPROVAL = "pending_approval"
APPROVED = "approved"
WAITING = "waiting"
ONGOING = "ongoing"
COMPLETED = "completed"
REJECTED = "rejected"
NO_SHOW = "no-show"
CANCELLED = "cancelled"

ALL_STATUSES = {
    PENDING_APPROVAL, APPROVED, WAITING, ONGOING,
    COMPLETED, REJECTED, NO_SHOW, CANCELLED,
}

# statuses that occupy the barber's time
APPOINTMENT_BUSY = (APPROVED, PENDING_APPROVAL, ONGOING)
WALK_IN_BUSY = (WAITING, APPROVED, ONGOING)

APPOINTMENT_TRANSITIONS = {
    PENDING_APPROVAL: {APPROVED, REJECTED, CANCELLED},
    APPROVED: {ONGOING, REJECTED, NO_SHOW, CANCELLED},
    ONGOING: {COMPLETED},
}

WALK_IN_TRANSITIONS = {
    WAITING: {ONGOING, REJECTED, NO_SHOW},
    APPROVED: {WAITING, ONGOING, REJECTED, NO_SHOW},
    ONGOING: {COMPLETED},
}

QUEUE_TRANSITIONS = {
    WAITING: {ONGOING, REJECTED, NO_SHOW},
    ONGOING: {COMPLETED},
}


def queue_status_for(source_status: str):
    """Queue-side status mirrored from a source record status, or None if the entry is untouched."""
    if source_status == APPROVED:
        return WAITING
    if source_status == CANCELLED:
        return REJECTED
    if source_status in (WAITING, ONGOING, COMPLETED, REJECTED, NO_SHOW):
        return source_status
    return None
