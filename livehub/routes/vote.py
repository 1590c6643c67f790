"""
Vote routes for Live Hub.
Handles the audience vote lifecycle: start, cast, close and results.
"""

import logging

from flask import Blueprint, current_app, jsonify

from livehub.auth.operator import require_operator
from livehub.services.global_state import get_state
from livehub.services.vote_engine import (
    cast_vote, close_vote, expire_vote_if_due, get_vote, start_vote, tally
)
from livehub.utils.errors import MethodNotAllowedError
from livehub.websockets.handlers import publish
from .helpers import get_body, get_store

logger = logging.getLogger(__name__)

vote_bp = Blueprint('vote', __name__)


@vote_bp.route("", methods=["GET"])
def read_vote():
    """Get the raw vote record"""
    store = get_store()
    if expire_vote_if_due(store):
        publish("state", get_state(store))
    return jsonify(get_vote(store))


@vote_bp.route("/results", methods=["GET"])
def read_results():
    """Get the tally computed from the stored ballots"""
    return jsonify(tally(get_vote(get_store())))


@vote_bp.route("", methods=["POST"])
def vote_action():
    body = get_body()
    action = body.get("action")
    store = get_store()

    if action == "vote":
        results = cast_vote(store, body.get("clientId"), body.get("songIndex"))
        publish("vote", results)
        return jsonify({"success": True, "results": results})

    if action == "start_vote":
        require_operator()
        vote, state = start_vote(
            store,
            songs=body.get("songs"),
            default_songs=current_app.config["DEFAULT_VOTE_SONGS"],
            duration_seconds=body.get("durationSeconds")
        )
        publish("state", state)
        publish("vote", tally(vote))
        return jsonify({"success": True, "vote": vote})

    if action == "close_vote":
        require_operator()
        state = close_vote(store)
        publish("state", state)
        return jsonify({"success": True, "state": state})

    logger.warning(f"Unknown vote action: {action}")
    raise MethodNotAllowedError(f"Unknown vote action '{action}'")
