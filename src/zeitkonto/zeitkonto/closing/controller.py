from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_name, current_role, employee_access_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/employees/<int:employee_id>/closings/<int:year>/<int:month>",
        methods=["GET"],
        endpoint="get_closing_state",
    )
    @employee_access_required
    def get_closing_state(employee_id: int, year: int, month: int):
        state = container.closing_service.get_state(employee_id=employee_id, year=year, month=month)
        return jsonify({"success": True, "closing": state.to_dict()})

    @app.route(
        "/api/employees/<int:employee_id>/closings/<int:year>/<int:month>/close",
        methods=["POST"],
        endpoint="close_month",
    )
    @admin_required
    def close_month(employee_id: int, year: int, month: int):
        state = container.closing_service.close(
            current_role=current_role(),
            employee_id=employee_id,
            year=year,
            month=month,
            closed_by=current_name(),
        )
        return jsonify({"success": True, "closing": state.to_dict()})

    @app.route(
        "/api/employees/<int:employee_id>/closings/<int:year>/<int:month>/reopen",
        methods=["POST"],
        endpoint="reopen_month",
    )
    @admin_required
    def reopen_month(employee_id: int, year: int, month: int):
        state = container.closing_service.reopen(
            current_role=current_role(),
            employee_id=employee_id,
            year=year,
            month=month,
        )
        return jsonify({"success": True, "closing": state.to_dict()})

    @app.route("/api/employees/<int:employee_id>/closings", methods=["GET"], endpoint="closing_history")
    @employee_access_required
    def closing_history(employee_id: int):
        rows = container.closing_service.history(employee_id=employee_id)
        return jsonify(
            {
                "success": True,
                "closings": [
                    {
                        "year": c.year,
                        "month": c.month,
                        "status": c.status.value,
                        "closed_at": c.closed_at.isoformat() if c.closed_at else None,
                        "closed_by": c.closed_by,
                    }
                    for c in rows
                ],
            }
        )
