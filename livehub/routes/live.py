"""
Latest broadcast snapshots for clients that poll instead of subscribing.
"""

from flask import Blueprint, jsonify

from livehub.utils.cache import get_snapshot
from livehub.utils.errors import NotFoundError
from livehub.websockets.handlers import TOPICS


live_bp = Blueprint('live', __name__)


@live_bp.route("/<topic>", methods=["GET"])
def read_snapshot(topic):
    if topic not in TOPICS:
        raise NotFoundError(f"Unknown topic '{topic}'")
    return jsonify({"topic": topic, "payload": get_snapshot(topic)})
