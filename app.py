"""
Live Hub application factory.
Wires the document store, lyrics generator, Socket.IO and the HTTP API together.
"""

import logging
import os

from flask import Flask, jsonify, request

from livehub.routes.ai import ai_bp
from livehub.routes.live import live_bp
from livehub.routes.state import state_bp
from livehub.routes.vote import vote_bp
from livehub.utils.cache import cache
from livehub.utils.config import create_generator, create_store, init_app
from livehub.utils.errors import register_error_handlers
from livehub.websockets.handlers import init_socketio, socketio

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def create_app(overrides=None, store=None, generator=None):
    """Build the Flask app; store and generator can be injected for tests"""
    app = Flask(__name__)
    init_app(app, overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    cache.init_app(app)
    app.store = store if store is not None else create_store(app)
    app.generator = generator if generator is not None else create_generator(app)
    init_socketio(app)

    register_error_handlers(app)
    app.register_blueprint(state_bp, url_prefix="/api/state")
    app.register_blueprint(vote_bp, url_prefix="/api/vote")
    app.register_blueprint(ai_bp, url_prefix="/api/ai")
    app.register_blueprint(live_bp, url_prefix="/api/live")

    @app.before_request
    def answer_preflight():
        if request.method == "OPTIONS":
            return app.response_class(status=200)

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


if __name__ == "__main__":
    app = create_app()
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        allow_unsafe_werkzeug=True
    )
