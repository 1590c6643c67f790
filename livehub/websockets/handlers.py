"""
Socket.IO event handlers for Live Hub.
Optional push channel that mirrors state, vote and AI queue changes by topic.
"""

import logging

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from livehub.services.global_state import now_ms
from livehub.utils.cache import get_snapshot, set_snapshot

logger = logging.getLogger(__name__)

TOPICS = ("state", "vote", "ai")

socketio = SocketIO()


def init_socketio(app):
    """Initialize Socket.IO with the Flask app"""
    socketio.init_app(
        app,
        cors_allowed_origins="*",
        ping_timeout=120,
        ping_interval=30,
        max_http_buffer_size=16384,
        engineio_logger=False,
        logger=False,
        async_mode="threading"
    )
    return socketio


def publish(topic, payload):
    """Cache the latest payload for a topic and push it to subscribers"""
    set_snapshot(topic, payload)
    try:
        socketio.emit(f"{topic}_update", payload, to=topic)
    except Exception as e:
        logger.error(f"Failed to broadcast {topic} update: {e}")


def _topic_of(data):
    if isinstance(data, dict):
        return data.get("topic")
    return None


@socketio.on("connect")
def handle_connect(auth=None):
    logger.info(f"[CONNECTION] Client connected (sid: {request.sid})")
    emit("connected", {"topics": list(TOPICS)})


@socketio.on("disconnect")
def handle_disconnect(reason=None):
    logger.info(f"[DISCONNECTION] Client disconnected (sid: {request.sid}, reason: {reason})")


@socketio.on("subscribe")
def handle_subscribe(data=None):
    """Join a topic room and receive its latest snapshot right away"""
    topic = _topic_of(data)
    if topic not in TOPICS:
        emit("error", {"message": f"Unknown topic: {topic}"})
        return

    join_room(topic)
    emit(f"{topic}_update", get_snapshot(topic))


@socketio.on("unsubscribe")
def handle_unsubscribe(data=None):
    topic = _topic_of(data)
    if topic not in TOPICS:
        emit("error", {"message": f"Unknown topic: {topic}"})
        return

    leave_room(topic)


@socketio.on("heartbeat")
def handle_heartbeat(data=None):
    emit("heartbeat_ack", {"timestamp": now_ms()})


@socketio.on_error_default
def default_error_handler(e):
    logger.error(f"Socket.IO error: {e}")
    return False
