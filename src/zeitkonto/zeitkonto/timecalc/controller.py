from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from .calculator import compute_net_hours


def register(app: Flask, container: Container) -> None:
    @app.route("/api/time-calculations/net-hours", methods=["POST"], endpoint="calculate_net_hours")
    def calculate_net_hours():
        data = request.get_json(silent=True) or {}
        result = compute_net_hours(
            data.get("kommt1"),
            data.get("geht1"),
            data.get("kommt2"),
            data.get("geht2"),
            data.get("pause"),
        )
        return jsonify(
            {
                "success": True,
                "raw_hours": result.raw_hours,
                "effective_pause_hours": result.effective_pause_hours,
                "net_hours": result.net_hours,
            }
        )
