from flask import Blueprint, request, jsonify

from models.walk_in import WalkIn
from scheduling.intake import get_intake
from scheduling.queue import get_queue_manager
from utils.parsing import require_int

walk_ins_bp = Blueprint("walk_ins", __name__, url_prefix="/walk-ins")


@walk_ins_bp.post("")
def create_walk_in():
    data = request.get_json(silent=True) or {}
    barber_id = data.get("barber_id")
    date = data.get("date")
    arrival_time = data.get("arrival_time")
    service = (data.get("service") or "").strip()
    customer = data.get("customer") or {}

    if not barber_id or not date or not arrival_time or not service:
        return jsonify(error="barber_id, date, arrival_time and service are required"), 400

    walk_in, entry = get_intake().register_walk_in(
        require_int(barber_id, "barber_id"), date, arrival_time, service,
        customer_name=customer.get("name"),
        customer_email=customer.get("email"),
        customer_phone=customer.get("phone"),
    )
    return jsonify(walk_in=walk_in.to_dict(), queue_entry=entry.to_dict()), 201


@walk_ins_bp.get("")
def list_walk_ins():
    barber_id = request.args.get("barber_id", type=int)
    date = request.args.get("date")
    status = request.args.get("status")

    q = WalkIn.query
    if barber_id:
        q = q.filter_by(barber_id=barber_id)
    if date:
        q = q.filter_by(date=date)
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(WalkIn.date.asc(), WalkIn.arrival_time.asc()).limit(200).all()
    return jsonify([w.to_dict() for w in rows]), 200


@walk_ins_bp.post("/<int:walk_in_id>/status")
def update_walk_in_status(walk_in_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip()
    if not status:
        return jsonify(error="status required"), 400

    walk_in = get_queue_manager().set_walk_in_status(walk_in_id, status)
    return jsonify(walk_in.to_dict()), 200
