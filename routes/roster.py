from flask import Blueprint, request, jsonify

from models.blocked_slot import BlockedSlot
from models.working_hours import WorkingHours
from scheduling.roster import get_roster
from utils.parsing import require_int

roster_bp = Blueprint("roster", __name__)


def _window_fields(data):
    return data.get("barber_id"), data.get("date"), data.get("start_time"), data.get("end_time")


# ---------- working hours ----------
def _create_working_hours(replace: bool):
    data = request.get_json(silent=True) or {}
    barber_id, date, start_time, end_time = _window_fields(data)
    if not barber_id or not date or not start_time or not end_time:
        return jsonify(error="barber_id, date, start_time and end_time are required"), 400

    row = get_roster().create_working_hours(
        require_int(barber_id, "barber_id"), date, start_time, end_time,
        is_available=data.get("is_available", True),
        replace=replace,
    )
    body = row.to_dict()
    if replace:
        body["replaced"] = True
    return jsonify(body), 201


@roster_bp.post("/working-hours")
def create_working_hours():
    return _create_working_hours(replace=False)


@roster_bp.post("/working-hours/confirm-replace")
def create_working_hours_with_replacement():
    return _create_working_hours(replace=True)


@roster_bp.get("/barbers/<int:barber_id>/working-hours")
def list_working_hours(barber_id: int):
    rows = get_roster().list_working_hours(barber_id, request.args.get("date"))
    return jsonify([r.to_dict() for r in rows]), 200


@roster_bp.get("/barbers/<int:barber_id>/working-hours/count")
def working_hours_count(barber_id: int):
    return jsonify(get_roster().count(WorkingHours, barber_id)), 200


@roster_bp.put("/working-hours/<int:entry_id>")
def update_working_hours(entry_id: int):
    data = request.get_json(silent=True) or {}
    row = get_roster().update_working_hours(
        entry_id,
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
        is_available=data.get("is_available"),
    )
    return jsonify(row.to_dict()), 200


@roster_bp.delete("/working-hours/<int:entry_id>")
def delete_working_hours(entry_id: int):
    get_roster().delete_working_hours(entry_id)
    return jsonify(message="Deleted"), 200


# ---------- blocked slots ----------
def _create_blocked_slot(replace: bool):
    data = request.get_json(silent=True) or {}
    barber_id, date, start_time, end_time = _window_fields(data)
    if not barber_id or not date or not start_time or not end_time:
        return jsonify(error="barber_id, date, start_time and end_time are required"), 400

    row = get_roster().create_blocked_slot(
        require_int(barber_id, "barber_id"), date, start_time, end_time,
        reason=data.get("reason"),
        replace=replace,
    )
    body = row.to_dict()
    if replace:
        body["replaced"] = True
    return jsonify(body), 201


@roster_bp.post("/blocked-slots")
def create_blocked_slot():
    return _create_blocked_slot(replace=False)


@roster_bp.post("/blocked-slots/confirm-replace")
def create_blocked_slot_with_replacement():
    return _create_blocked_slot(replace=True)


@roster_bp.get("/barbers/<int:barber_id>/blocked-slots")
def list_blocked_slots(barber_id: int):
    rows = get_roster().list_blocked_slots(barber_id, request.args.get("date"))
    return jsonify([r.to_dict() for r in rows]), 200


@roster_bp.get("/barbers/<int:barber_id>/blocked-slots/count")
def blocked_slots_count(barber_id: int):
    return jsonify(get_roster().count(BlockedSlot, barber_id)), 200


@roster_bp.put("/blocked-slots/<int:entry_id>")
def update_blocked_slot(entry_id: int):
    data = request.get_json(silent=True) or {}
    changes = {"start_time": data.get("start_time"), "end_time": data.get("end_time")}
    if "reason" in data:
        changes["reason"] = data.get("reason")
    row = get_roster().update_blocked_slot(entry_id, **changes)
    return jsonify(row.to_dict()), 200


@roster_bp.delete("/blocked-slots/<int:entry_id>")
def delete_blocked_slot(entry_id: int):
    get_roster().delete_blocked_slot(entry_id)
    return jsonify(message="Deleted"), 200
