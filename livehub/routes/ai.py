"""
AI request routes for Live Hub.
Handles audience submissions, moderation and the generated song lifecycle.
"""

import logging

from flask import Blueprint, jsonify

from livehub.auth.operator import require_operator
from livehub.services.request_queue import approve_request, get_queue, reject_request, submit_request
from livehub.services.song_generation import (
    generate_song, get_current_song, list_generated_songs, mark_played, set_current_song
)
from livehub.utils.errors import InvalidInputError, MethodNotAllowedError
from livehub.websockets.handlers import publish
from .helpers import get_body, get_generator, get_store

logger = logging.getLogger(__name__)

ai_bp = Blueprint('ai', __name__)


def _require_id(body, field):
    value = body.get(field)
    if not isinstance(value, str) or not value:
        raise InvalidInputError(f"'{field}' is required")
    return value


@ai_bp.route("", methods=["GET"])
def read_queue():
    """Get the moderation queue"""
    return jsonify(get_queue(get_store()))


@ai_bp.route("/current", methods=["GET"])
def read_current_song():
    """Song currently on stage, polled by the public page"""
    return jsonify({"currentSong": get_current_song(get_store())})


@ai_bp.route("", methods=["POST"])
def ai_action():
    body = get_body()
    action = body.get("action")
    store = get_store()

    if action == "submit_request":
        fields = {key: value for key, value in body.items() if key != "action"}
        request = submit_request(store, fields)
        publish("ai", get_queue(store))
        return jsonify({"success": True, "request": request})

    if action in ("approve_request", "reject_request"):
        require_operator()
        request_id = _require_id(body, "requestId")
        if action == "approve_request":
            request = approve_request(store, request_id)
        else:
            request = reject_request(store, request_id)
        publish("ai", get_queue(store))
        return jsonify({"success": True, "request": request})

    if action == "generate_song":
        require_operator()
        song = generate_song(store, get_generator(), _require_id(body, "requestId"))
        return jsonify({"success": True, "song": song})

    if action == "set_current_song":
        require_operator()
        current_song, state = set_current_song(store, _require_id(body, "songId"))
        publish("state", state)
        return jsonify({"success": True, "currentSong": current_song})

    if action == "mark_played":
        require_operator()
        song, state = mark_played(store, _require_id(body, "songId"))
        if state is not None:
            publish("state", state)
        return jsonify({"success": True, "song": song})

    if action == "list_generated_songs":
        require_operator()
        include_played = body.get("includePlayed", True)
        if not isinstance(include_played, bool):
            raise InvalidInputError("'includePlayed' must be a boolean")
        songs = list_generated_songs(store, include_played=include_played)
        return jsonify({"success": True, "songs": songs})

    logger.warning(f"Unknown AI action: {action}")
    raise MethodNotAllowedError(f"Unknown AI action '{action}'")
