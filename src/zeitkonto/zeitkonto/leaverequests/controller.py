from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_name, current_role, employee_access_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.leave_request_service

    @app.route(
        "/api/employees/<int:employee_id>/leave-requests",
        methods=["GET"],
        endpoint="list_leave_requests",
    )
    @employee_access_required
    def list_leave_requests(employee_id: int):
        requests_ = service.list_for_employee(employee_id=employee_id)
        return jsonify({"success": True, "requests": [r.to_dict() for r in requests_]})

    @app.route(
        "/api/employees/<int:employee_id>/leave-requests",
        methods=["POST"],
        endpoint="submit_leave_request",
    )
    @employee_access_required
    def submit_leave_request(employee_id: int):
        data = request.get_json(silent=True) or {}
        req = service.submit(
            employee_id=employee_id,
            request_type=data.get("type") or "",
            start_date=parse_iso_date(data.get("start_date") or ""),
            end_date=parse_iso_date(data.get("end_date") or ""),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "request": req.to_dict()}), 201

    @app.route(
        "/api/employees/<int:employee_id>/leave-requests/<int:request_id>/cancel",
        methods=["POST"],
        endpoint="cancel_leave_request",
    )
    @employee_access_required
    def cancel_leave_request(employee_id: int, request_id: int):
        data = request.get_json(silent=True) or {}
        outcome = service.cancel_as_employee(
            employee_id=employee_id,
            request_id=request_id,
            mode=data.get("mode") or "",
            message=data.get("message"),
        )
        return jsonify({"success": True, "result": outcome})

    @app.route("/api/leave-requests", methods=["GET"], endpoint="list_all_leave_requests")
    @admin_required
    def list_all_leave_requests():
        requests_ = service.list_all(current_role=current_role(), status=request.args.get("status") or None)
        return jsonify({"success": True, "requests": [r.to_dict() for r in requests_]})

    @app.route("/api/leave-requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_leave_request")
    @admin_required
    def approve_leave_request(request_id: int):
        data = request.get_json(silent=True) or {}
        req = service.approve(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
            admin_note=data.get("admin_note"),
        )
        return jsonify({"success": True, "request": req.to_dict()})

    @app.route("/api/leave-requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_leave_request")
    @admin_required
    def reject_leave_request(request_id: int):
        data = request.get_json(silent=True) or {}
        req = service.reject(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
            admin_note=data.get("admin_note"),
        )
        return jsonify({"success": True, "request": req.to_dict()})

    @app.route(
        "/api/leave-requests/<int:request_id>/cancellation/confirm",
        methods=["POST"],
        endpoint="confirm_leave_cancellation",
    )
    @admin_required
    def confirm_leave_cancellation(request_id: int):
        data = request.get_json(silent=True) or {}
        req = service.confirm_cancellation(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
            admin_note=data.get("admin_note"),
        )
        return jsonify({"success": True, "request": req.to_dict()})

    @app.route(
        "/api/leave-requests/<int:request_id>/cancellation/reject",
        methods=["POST"],
        endpoint="reject_leave_cancellation",
    )
    @admin_required
    def reject_leave_cancellation(request_id: int):
        data = request.get_json(silent=True) or {}
        req = service.reject_cancellation(
            current_role=current_role(),
            request_id=request_id,
            decided_by=current_name(),
            admin_note=data.get("admin_note"),
        )
        return jsonify({"success": True, "request": req.to_dict()})
