"""
Notification sender.

Notifications are stored for the frontend to display; nothing is mailed.
Sending is fire-and-forget: failures are logged and never reach the caller.
"""

import json
import logging

from models import db
from models.notification import Notification

logger = logging.getLogger(__name__)

APPOINTMENT_STATUS_CHANGED = "appointment-status-changed"
WALK_IN_ACCEPTED = "walk-in-accepted"
TOKEN_ASSIGNED = "token-assigned"
BARBER_NOTIFIED_OF_WALKIN = "barber-notified-of-walkin"
AUTO_REJECTED = "auto-rejected"

_TITLES = {
    APPOINTMENT_STATUS_CHANGED: "Appointment Update",
    WALK_IN_ACCEPTED: "Walk-in Accepted",
    TOKEN_ASSIGNED: "Queue Token Assigned",
    BARBER_NOTIFIED_OF_WALKIN: "New Walk-in Customer",
    AUTO_REJECTED: "Appointment Auto-Rejected",
}

_STATUS_MESSAGES = {
    "approved": "Your appointment has been approved!",
    "rejected": "Your appointment has been rejected.",
    "completed": "Your appointment has been marked as completed.",
    "ongoing": "Your appointment is now in progress.",
}


def _message(kind: str, payload: dict) -> str:
    if kind == APPOINTMENT_STATUS_CHANGED:
        return _STATUS_MESSAGES.get(payload.get("status"), "Your appointment status has been updated.")
    if kind == WALK_IN_ACCEPTED:
        return "Your walk-in request has been accepted and added to our queue."
    if kind == TOKEN_ASSIGNED:
        return f"You have been added to our waiting queue with token {payload.get('token_number')}."
    if kind == BARBER_NOTIFIED_OF_WALKIN:
        return "A new walk-in customer has been added to your queue."
    if kind == AUTO_REJECTED:
        return ("Your appointment request has been automatically rejected because it was "
                "not approved within the required time frame.")
    return "You have a new notification."


def notify(kind: str, payload: dict, recipient_email: str = None) -> None:
    """Record a notification in its own transaction; callers commit their own work first."""
    try:
        row = Notification(
            kind=kind,
            recipient_email=recipient_email,
            title=_TITLES.get(kind, "Notification"),
            message=_message(kind, payload),
            payload_json=json.dumps(payload, default=str),
        )
        db.session.add(row)
        db.session.commit()
        logger.info("Notification %s sent to %s", kind, recipient_email or "-")
    except Exception:
        db.session.rollback()
        logger.exception("Failed to send %s notification", kind)
