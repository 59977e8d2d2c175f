from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_name, current_role, employee_access_required
from ..core.exceptions import ValidationError
from ..container import Container


def _optional_int(value) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Ungültiger Wert: {value!r}")


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/employees/<int:employee_id>/payout-requests",
        methods=["GET"],
        endpoint="list_payout_requests",
    )
    @employee_access_required
    def list_payout_requests(employee_id: int):
        year = _optional_int(request.args.get("year"))
        month = _optional_int(request.args.get("month"))
        requests_ = container.payout_service.list_requests(employee_id=employee_id, year=year, month=month)
        return jsonify({"success": True, "requests": [r.to_dict() for r in requests_]})

    @app.route(
        "/api/employees/<int:employee_id>/payout-requests",
        methods=["POST"],
        endpoint="create_payout_request",
    )
    @employee_access_required
    def create_payout_request(employee_id: int):
        data = request.get_json(silent=True) or {}
        year = _optional_int(data.get("year"))
        month = _optional_int(data.get("month"))
        if year is None or month is None:
            raise ValidationError("Bitte Jahr und Monat angeben")
        hours = data.get("hours")
        if isinstance(hours, str):
            hours = hours.replace(",", ".")

        request_id = container.payout_service.request_payout(
            employee_id=employee_id,
            year=year,
            month=month,
            hours=hours,
            note=data.get("note"),
        )
        return jsonify({"success": True, "request_id": request_id}), 201

    @app.route("/api/payout-requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_payout_request")
    @admin_required
    def approve_payout_request(request_id: int):
        req = container.payout_service.approve(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
        )
        return jsonify({"success": True, "request": req.to_dict()})

    @app.route("/api/payout-requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_payout_request")
    @admin_required
    def reject_payout_request(request_id: int):
        req = container.payout_service.reject(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
        )
        return jsonify({"success": True, "request": req.to_dict()})
