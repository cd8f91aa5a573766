from flask import Blueprint, request, jsonify

from models import db
from models.appointment import Appointment
from models.status import APPROVED, REJECTED
from scheduling.errors import NotFound
from scheduling.intake import get_intake
from scheduling.queue import get_queue_manager
from utils.parsing import require_int

appointments_bp = Blueprint("appointments", __name__, url_prefix="/appointments")


def _status_response(appointment_id: int, status: str):
    appointment = get_queue_manager().set_appointment_status(appointment_id, status)
    return jsonify(appointment.to_dict()), 200


# ---------- CUSTOMERS: book ----------
@appointments_bp.post("")
def create_appointment():
    data = request.get_json(silent=True) or {}
    barber_id = data.get("barber_id")
    date = data.get("date")
    requested_time = data.get("requested_time")
    service = (data.get("service") or "").strip()

    if not barber_id or not date or not requested_time or not service:
        return jsonify(error="barber_id, date, requested_time and service are required"), 400

    customer = data.get("customer") or {}
    appointment = get_intake().book_appointment(
        require_int(barber_id, "barber_id"), date, requested_time, service,
        customer_id=data.get("customer_id"),
        customer_name=customer.get("name"),
        customer_email=customer.get("email"),
        customer_phone=customer.get("phone"),
        notes=data.get("notes"),
    )
    return jsonify(appointment.to_dict()), 201


@appointments_bp.get("")
def list_appointments():
    # optional filters: barber_id, date, status
    barber_id = request.args.get("barber_id", type=int)
    date = request.args.get("date")
    status = request.args.get("status")

    q = Appointment.query
    if barber_id:
        q = q.filter_by(barber_id=barber_id)
    if date:
        q = q.filter_by(date=date)
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Appointment.date.asc(), Appointment.requested_time.asc()).limit(200).all()
    return jsonify([a.to_dict() for a in rows]), 200


@appointments_bp.get("/<int:appointment_id>")
def get_appointment(appointment_id: int):
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        raise NotFound("Appointment not found")
    return jsonify(appointment.to_dict()), 200


# ---------- CUSTOMERS: accept a suggested time ----------
@appointments_bp.post("/<int:appointment_id>/confirm-time")
def confirm_time(appointment_id: int):
    data = request.get_json(silent=True) or {}
    start_time = data.get("start_time")
    if not start_time:
        return jsonify(error="start_time required"), 400

    appointment = get_intake().confirm_suggested_time(appointment_id, start_time)
    return jsonify(appointment.to_dict()), 200


@appointments_bp.post("/<int:appointment_id>/cancel")
def cancel_appointment(appointment_id: int):
    appointment = get_intake().cancel_appointment(appointment_id)
    return jsonify(appointment.to_dict()), 200


# ---------- BARBERS: status changes ----------
@appointments_bp.post("/<int:appointment_id>/status")
def update_status(appointment_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip()
    if not status:
        return jsonify(error="status required"), 400
    return _status_response(appointment_id, status)


@appointments_bp.post("/<int:appointment_id>/approve")
def approve_appointment(appointment_id: int):
    return _status_response(appointment_id, APPROVED)


@appointments_bp.post("/<int:appointment_id>/reject")
def reject_appointment(appointment_id: int):
    return _status_response(appointment_id, REJECTED)
