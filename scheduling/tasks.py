"""
Scheduled Tasks

Background tasks that run periodically:
- reject_stale_appointments: rejects appointments nobody approved in time
"""

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from models import db
from models.appointment import Appointment
from models.status import PENDING_APPROVAL, REJECTED
from scheduling.settings import current_settings
from utils.audit import log_event
from utils.notifier import AUTO_REJECTED, notify

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "reject-stale-appointments"


def reject_stale_appointments(now: datetime = None) -> int:
    """
    Rejects appointments still pending approval after the configured limit.
    Runs every SWEEP_INTERVAL_MINUTES via the background scheduler.

    Each appointment is handled in its own transaction: one failure is
    logged and the sweep moves on to the rest.

    Returns:
        int: number of appointments rejected
    """
    settings = current_settings()
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=settings.pending_time_limit_minutes)

    stale_ids = [
        row.id for row in
        db.session.query(Appointment.id)
        .filter(Appointment.status == PENDING_APPROVAL, Appointment.created_at < cutoff)
        .all()
    ]
    logger.info("Auto-rejection check: %d pending appointments past %s", len(stale_ids), cutoff.isoformat())

    rejected = 0
    for appointment_id in stale_ids:
        try:
            appointment = db.session.get(Appointment, appointment_id)

            # may have been approved since the query ran
            if appointment is None or appointment.status != PENDING_APPROVAL:
                continue

            appointment.status = REJECTED
            db.session.commit()
            rejected += 1

            log_event("APPOINTMENT_AUTO_REJECT", entity="appointment", entity_id=appointment.id,
                      metadata={"created_at": appointment.created_at.isoformat()})
            notify(AUTO_REJECTED, {
                "appointment_id": appointment.id,
                "date": appointment.date,
                "requested_time": appointment.requested_time,
                "service": appointment.service,
            }, recipient_email=appointment.customer_email)
            logger.info("Auto-rejected appointment %s", appointment.id)

        except Exception:
            db.session.rollback()
            logger.exception("Failed to auto-reject appointment %s", appointment_id)
            continue

    if rejected:
        logger.info("reject_stale_appointments: %d appointments rejected", rejected)
    return rejected


def start_sweeper(app) -> BackgroundScheduler:
    """Schedule the auto-rejection sweep on a background thread."""
    with app.app_context():
        interval = current_settings().sweep_interval_minutes

    def _run():
        with app.app_context():
            try:
                reject_stale_appointments()
            finally:
                db.session.remove()

    scheduler = BackgroundScheduler()
    scheduler.add_job(_run, "interval", minutes=interval, id=SWEEP_JOB_ID, replace_existing=True)
    scheduler.start()
    logger.info("Auto-rejection sweeper started (every %d minutes)", interval)
    return scheduler
