from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_name, current_role, employee_access_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Actor, TimeEntryInput


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees/<int:employee_id>/time-entries", methods=["GET"], endpoint="list_time_entries")
    @employee_access_required
    def list_time_entries(employee_id: int):
        try:
            limit = int(request.args.get("limit") or DEFAULT_HISTORY_LIMIT)
        except ValueError:
            raise ValidationError("Ungültiges Limit")
        entries = container.time_entry_service.list_time_entries(employee_id, limit=limit)
        return jsonify({"success": True, "entries": entries})

    @app.route("/api/employees/<int:employee_id>/time-entries", methods=["POST"], endpoint="save_time_entry")
    @employee_access_required
    def save_time_entry(employee_id: int):
        data = request.get_json(silent=True) or {}
        entry = TimeEntryInput(
            employee_id=employee_id,
            day_date=parse_iso_date(data.get("day_date") or ""),
            kommt1=data.get("kommt1"),
            geht1=data.get("geht1"),
            kommt2=data.get("kommt2"),
            geht2=data.get("geht2"),
            pause=data.get("pause"),
            code=data.get("code"),
            note=data.get("note"),
            mittag=data.get("mittag"),
            shift_label=data.get("shift_label"),
        )
        result = container.time_entry_service.save_time_entry(
            entry,
            performed_by=Actor(role=current_role(), name=current_name()),
        )
        return jsonify(
            {
                "success": True,
                "day_id": result.day_id,
                "warnings": result.warnings,
                "balance_hours": round(result.balance_hours, 2),
                "payout_bank_hours": round(result.payout_bank_hours, 2),
            }
        )

    @app.route(
        "/api/employees/<int:employee_id>/time-entries/<day>",
        methods=["DELETE"],
        endpoint="delete_time_entry",
    )
    @employee_access_required
    def delete_time_entry(employee_id: int, day: str):
        result = container.time_entry_service.delete_time_entry(employee_id, parse_iso_date(day))
        return jsonify(
            {
                "success": True,
                "balance_hours": round(result.balance_hours, 2),
                "payout_bank_hours": round(result.payout_bank_hours, 2),
            }
        )

    @app.route(
        "/api/employees/<int:employee_id>/overtime/recalculate",
        methods=["POST"],
        endpoint="recalculate_overtime",
    )
    @employee_access_required
    def recalculate_overtime(employee_id: int):
        result = container.time_entry_service.recompute_employee_overtime(employee_id)
        return jsonify(
            {
                "success": True,
                "balance_hours": round(result.balance_hours, 2),
                "payout_bank_hours": round(result.payout_bank_hours, 2),
                "updated_days": len(result.updated_days),
            }
        )
