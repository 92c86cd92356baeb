from typing import Any

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from cognito_verification import AuthExtension


def _parse_round(body: Any) -> dict[str, Any] | None:
    """Return the round if the body has playerName/round strings and integer points."""
    if not isinstance(body, dict):
        return None
    player, round_name, points = body.get("playerName"), body.get("round"), body.get("points")
    if not isinstance(player, str) or not isinstance(round_name, str):
        return None
    if isinstance(points, bool) or not isinstance(points, int):
        return None
    return {"playerName": player, "round": round_name, "points": points}


def create_app(auth: AuthExtension | None = None) -> Flask:
    """
    Create the score API: one authenticated write endpoint.

    Rounds are kept in memory (``app.extensions["rounds"]``); a real deployment
    hands them to its storage layer instead.
    """
    if auth is None:
        from examples.score_api.app_config import auth

    app = Flask(__name__)
    auth.init_app(app)
    app.extensions["rounds"] = []

    CORS(
        app,
        allow_headers=["Content-Type", "Authorization"],
        methods=["POST", "OPTIONS"],
        max_age=3600,
    )

    @app.post("/rounds")
    @auth.require()
    def save_round():
        saved = _parse_round(request.get_json(silent=True))
        if saved is None:
            return jsonify({"status": "error", "message": "Invalid round"}), 400

        app.extensions["rounds"].append({**saved, "savedBy": g.jwt.subject})
        return jsonify({"status": "Saved"}), 201

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({"status": "denied", "message": "Unauthorized"}), 401

    return app
