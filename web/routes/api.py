"""JSON API for the raffle dashboard."""

from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context
from flask_login import current_user, login_required, login_user, logout_user

from core import get_logger
from core.constants import CAMPAIGN_DESCRIPTIONS, Department, DrawType
from core.exceptions import ValidationError
from services.analytics_service import AnalyticsService
from services.async_runner import run_coroutine_sync
from services.export import export_filename, filter_winners, iter_winners_csv
from services.raffle_service import RaffleService, resolve_department, resolve_draw_type
from web.auth import AdminUser, validate_credentials
from web.config_middleware import cache

logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _raffle_service() -> RaffleService:
    return current_app.config["RAFFLE_SERVICE"]


def _analytics() -> AnalyticsService:
    return current_app.config["ANALYTICS_SERVICE"]


def _campaign_or_404(draw_type: str):
    try:
        return DrawType.parse(draw_type), None
    except ValueError:
        return None, (jsonify({"error": f"Unknown draw type: {draw_type}"}), 404)


def _optional_campaign(value: Optional[str]) -> Optional[DrawType]:
    if not value or value == "all":
        return None
    return resolve_draw_type(value)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _filtered_winners():
    """Winners narrowed by the ``draw_type``, ``department`` and ``search`` query args."""
    draw_type = _optional_campaign(request.args.get("draw_type"))
    department = resolve_department(request.args.get("department"))
    search = request.args.get("search", "")
    winners = run_coroutine_sync(_raffle_service().ledger.list_winners(draw_type))
    return filter_winners(winners, search=search, department=department, draw_type=draw_type)


@api_bp.route("/login", methods=["POST"])
def login():
    data = _json_body()
    username = str(data.get("username", "")).strip()
    password = str(data.get("password", ""))
    credentials = current_app.config["ADMIN_CREDENTIALS"]

    if not username or not validate_credentials(credentials, username, password):
        return jsonify({"error": "Invalid username or password"}), 401

    login_user(AdminUser(username=credentials.username))
    logger.info(f"Operator '{credentials.username}' logged in")
    return jsonify({"username": credentials.username})


@api_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logger.info(f"Operator '{current_user.username}' logged out")
    logout_user()
    return jsonify({"status": "ok"})


@api_bp.route("/campaigns")
@login_required
@cache.cached(timeout=3600)
def campaigns():
    return jsonify({
        "campaigns": [
            {"id": dt.value, "name": dt.label, "description": CAMPAIGN_DESCRIPTIONS[dt]}
            for dt in DrawType
        ],
        "departments": [d.value for d in Department],
    })


@api_bp.route("/contestants/<draw_type>")
@login_required
def contestants(draw_type: str):
    campaign, error = _campaign_or_404(draw_type)
    if error:
        return error
    department = request.args.get("department")
    return jsonify(run_coroutine_sync(_raffle_service().eligibility(campaign, department)))


@api_bp.route("/draw/<draw_type>", methods=["POST"])
@login_required
def run_draw(draw_type: str):
    campaign, error = _campaign_or_404(draw_type)
    if error:
        return error

    data = _json_body()
    count = data.get("count", 1)
    weighted = data.get("weighted", True)
    if not isinstance(weighted, bool):
        raise ValidationError("'weighted' must be a boolean")

    result = run_coroutine_sync(
        _raffle_service().run_draw(campaign, count, department=data.get("department"), weighted=weighted)
    )
    return jsonify(result.to_dict())


@api_bp.route("/winners")
@login_required
def winners():
    selected = _filtered_winners()
    return jsonify({
        "count": len(selected),
        "winners": [w.to_dict() for w in selected],
    })


@api_bp.route("/winners/export")
@login_required
def export_winners():
    selected = _filtered_winners()
    return Response(
        stream_with_context(iter_winners_csv(selected)),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@api_bp.route("/winners/clear", methods=["POST"])
@login_required
def clear_winners():
    draw_type = _optional_campaign(_json_body().get("draw_type"))
    removed = run_coroutine_sync(_raffle_service().ledger.clear_winners(draw_type))
    logger.warning(
        f"Operator '{current_user.username}' cleared winners for "
        f"{draw_type.value if draw_type else 'all campaigns'}"
    )
    return jsonify({"cleared": removed, "draw_type": draw_type.value if draw_type else None})


@api_bp.route("/dashboard")
@login_required
def dashboard():
    all_winners = run_coroutine_sync(_raffle_service().ledger.list_winners())
    return jsonify(_analytics().overview(all_winners))


@api_bp.route("/analytics")
@login_required
def analytics():
    draw_type = _optional_campaign(request.args.get("draw_type")) or DrawType.DISCOVERY_70
    all_winners = run_coroutine_sync(_raffle_service().ledger.list_winners())
    return jsonify(_analytics().analytics(all_winners, draw_type))
