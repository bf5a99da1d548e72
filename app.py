#!/usr/bin/env python3
"""
speed-monitor server
--------------------
Flask app that ingests speed test results from agents, stores them in
SQLite and serves aggregated statistics plus the dashboard page.
"""

import pytz
from flask import Blueprint, Flask, current_app, jsonify, request, send_from_directory
from flask_cors import CORS

# --- Package imports ----------------------------------------------------------
from speed_monitor import (
    Config,
    SpeedMonitorError,
    SpeedResultStore,
    ValidationError,
    get_config,
    get_logger,
    get_stats,
    list_for_user,
    list_results,
    submit,
)
from speed_monitor.constants import DASHBOARD_FILE, PUBLIC_DIR
from speed_monitor.logging import utc_now_iso

log = get_logger(__name__)

api = Blueprint("api", __name__)


def get_store() -> SpeedResultStore:
    return current_app.extensions["speed_monitor_store"]


def resolve_timezone(name):
    """pytz timezone for hour buckets, falling back to UTC on unknown names."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        log.warning(f"Unknown timezone '{name}', hourly stats will use UTC")
        return pytz.utc


# --- Routes -------------------------------------------------------------------
@api.route("/api/results", methods=["POST"])
def create_result():
    payload = request.get_json(silent=True)
    result = submit(get_store(), payload)
    return jsonify({"success": True, "id": result["id"]})


@api.route("/api/results", methods=["GET"])
def get_results():
    results = list_results(
        get_store(),
        user_id=request.args.get("user_id"),
        limit=request.args.get("limit"),
        offset=request.args.get("offset"),
    )
    return jsonify(results)


@api.route("/api/results/<user_id>", methods=["GET"])
def get_user_results(user_id):
    results = list_for_user(get_store(), user_id, limit=request.args.get("limit"))
    return jsonify(results)


@api.route("/api/stats", methods=["GET"])
def get_aggregated_stats():
    config = current_app.config["SPEED_MONITOR"]
    stats = get_stats(
        get_store(),
        tz=current_app.config["STATS_TIMEZONE"],
        window_hours=config.stats_window_hours,
    )
    return jsonify(stats)


@api.route("/", methods=["GET"])
def dashboard():
    """Serve the dashboard page."""
    return send_from_directory(current_app.static_folder, DASHBOARD_FILE)


@api.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "timestamp": utc_now_iso()})


# --- Error handling -----------------------------------------------------------
@api.app_errorhandler(SpeedMonitorError)
def handle_speed_monitor_error(err):
    if isinstance(err, ValidationError):
        log.warning(f"Rejected request to {request.path}: {err.message}")
    return jsonify(err.to_dict()), err.status_code


# --- App factory --------------------------------------------------------------
def create_app(config: Config = None, store: SpeedResultStore = None) -> Flask:
    """
    Build the Flask app.

    A store can be injected (tests pass an in-memory one); otherwise one is
    opened at config.db_path. The schema is initialized either way.
    """
    config = config or get_config()
    if store is None:
        store = SpeedResultStore(config.db_path)
    store.init_schema()

    app = Flask(__name__, static_folder=PUBLIC_DIR, static_url_path="")
    app.config["SPEED_MONITOR"] = config
    app.config["STATS_TIMEZONE"] = resolve_timezone(config.timezone)
    app.extensions["speed_monitor_store"] = store

    CORS(app)
    app.register_blueprint(api)
    return app


# --- Local Run ---------------------------------------------------------------
def main():
    config = get_config()
    app = create_app(config)
    log.info(f"Speed Monitor Server running on port {config.port}")
    log.info(f"Dashboard: http://localhost:{config.port}")
    log.info(f"API: http://localhost:{config.port}/api")
    app.run(host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
