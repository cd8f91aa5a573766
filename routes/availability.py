from flask import Blueprint, request, jsonify

from scheduling.availability import AvailabilityCalculator
from scheduling.intake import get_barber, get_intake
from scheduling.settings import current_settings
from scheduling.time_utils import require_date
from utils.parsing import require_int

availability_bp = Blueprint("availability", __name__)


# ---------- day view: free and busy intervals ----------
@availability_bp.get("/barbers/<int:barber_id>/availability")
def barber_availability(barber_id: int):
    date = require_date(request.args.get("date"))
    get_barber(barber_id)

    calculator = AvailabilityCalculator(current_settings())
    hours = calculator.working_hours(barber_id, date)
    return jsonify(
        barber_id=barber_id,
        date=date,
        working_hours=hours.to_dict() if hours else None,
        free=[i.to_dict() for i in calculator.free_intervals(barber_id, date)],
        busy=[i.to_dict() for i in calculator.busy_intervals(barber_id, date)],
    ), 200


# ---------- check a requested time ----------
@availability_bp.post("/availability/check")
def check_availability():
    data = request.get_json(silent=True) or {}
    barber_id = data.get("barber_id")
    date = data.get("date")
    requested_time = data.get("requested_time")
    service = (data.get("service") or "").strip()

    if not barber_id or not date or not requested_time or not service:
        return jsonify(error="barber_id, date, requested_time and service are required"), 400

    barber_id = require_int(barber_id, "barber_id")
    result = get_intake().check_availability(barber_id, date, requested_time, service)
    body = result.to_dict()
    body["message"] = "Time slot is available" if result.available else "Requested time slot is not available"
    return jsonify(body), 200
