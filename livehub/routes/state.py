"""
Global state routes for Live Hub.
"""

from flask import Blueprint, jsonify

from livehub.auth.operator import require_operator
from livehub.services.global_state import get_state, merge_state
from livehub.services.vote_engine import expire_vote_if_due
from livehub.websockets.handlers import publish
from .helpers import get_body, get_store


state_bp = Blueprint('state', __name__)


@state_bp.route("", methods=["GET"])
def read_state():
    """Current switches and pointers, polled by the dashboard and public page"""
    store = get_store()
    if expire_vote_if_due(store):
        publish("state", get_state(store))
    return jsonify(get_state(store))


@state_bp.route("", methods=["POST"])
def write_state():
    """Merge partial state fields - Operator only"""
    require_operator()
    state = merge_state(get_store(), get_body())
    publish("state", state)
    return jsonify(state)
