from flask import Blueprint, jsonify, current_app

from utils.auth_context import login_required

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(status="ok"), 200


@health_bp.get("/test")
def smoke_test():
    return jsonify(message="Court Scheduling API is working"), 200


@health_bp.get("/config")
@login_required
def app_config():
    return jsonify(
        shuttlecock_price=current_app.config.get("SHUTTLECOCK_PRICE"),
        advance_booking_days=current_app.config.get("ADVANCE_BOOKING_DAYS"),
    ), 200
