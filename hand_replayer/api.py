# hand_replayer/api.py
import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from .config import load_config
from .guards.anomaly_log import open_anomaly_log
from .parse.runner import parse_hand
from .pipeline import replay_hand

logger = logging.getLogger(__name__)

bp = Blueprint("replay_api", __name__)

EXTENSION = "hand_replayer"


def _text_from_request():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, (jsonify({"success": False, "error": "JSON body required"}), 400)
    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        return None, (jsonify({"success": False, "error": "field 'text' is required"}), 400)
    return text, None


def _failure(result):
    return jsonify({"success": False, "error": result.to_dict()}), 422


@bp.route("/api/replay", methods=["POST"])
def api_replay():
    text, error = _text_from_request()
    if error:
        return error
    ext = current_app.extensions[EXTENSION]
    result = replay_hand(text, ext["config"], ext["anomaly_log"])
    if not result.ok:
        return _failure(result)
    payload = result.value.to_dict()
    return jsonify({
        "success": True,
        "hand": payload["hand"],
        "snapshots": payload["snapshots"],
        "warnings": list(result.warnings),
    })


@bp.route("/api/parse", methods=["POST"])
def api_parse():
    text, error = _text_from_request()
    if error:
        return error
    result = parse_hand(text)
    if not result.ok:
        return _failure(result)
    return jsonify({
        "success": True,
        "hand": result.value.model_dump(mode="json"),
        "warnings": list(result.warnings),
    })


@bp.route("/api/health", methods=["GET"])
def api_health():
    return jsonify({"status": "ok"})


def create_app(config_path: Optional[str] = None) -> Flask:
    """Build the Flask app; configuration and anomaly log are loaded once here."""
    config = load_config(config_path)
    app = Flask(__name__)
    app.extensions[EXTENSION] = {
        "config": config,
        "anomaly_log": open_anomaly_log(config),
    }
    app.register_blueprint(bp)
    logger.info("[api] replay API ready")
    return app
