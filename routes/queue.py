from flask import Blueprint, request, jsonify

from scheduling.queue import get_queue_manager

queue_bp = Blueprint("queue", __name__, url_prefix="/queue")


@queue_bp.get("/<int:barber_id>/<date>")
def view_queue(barber_id: int, date: str):
    return jsonify(get_queue_manager().snapshot(barber_id, date)), 200


@queue_bp.post("/<int:barber_id>/<date>/start-next")
def start_next(barber_id: int, date: str):
    entry = get_queue_manager().start_serving_next(barber_id, date)
    return jsonify(entry.to_dict()), 200


@queue_bp.post("/<int:barber_id>/<date>/recalculate")
def recalculate(barber_id: int, date: str):
    entries = get_queue_manager().recalculate_wait_times(barber_id, date)
    return jsonify([e.to_dict() for e in entries]), 200


@queue_bp.post("/<int:barber_id>/<date>/reconcile")
def reconcile(barber_id: int, date: str):
    fixed = get_queue_manager().reconcile(barber_id, date)
    return jsonify(fixed=fixed), 200


@queue_bp.post("/entries/<int:entry_id>/complete")
def complete(entry_id: int):
    entry = get_queue_manager().complete_service(entry_id)
    return jsonify(entry.to_dict()), 200


@queue_bp.post("/entries/<int:entry_id>/status")
def update_entry_status(entry_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip()
    if not status:
        return jsonify(error="status required"), 400

    entry = get_queue_manager().set_entry_status(entry_id, status)
    return jsonify(entry.to_dict()), 200
