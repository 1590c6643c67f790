"""
Configuration module for Live Hub.
Handles app configuration, store selection and cache initialization.
"""

import logging
import os

import redis
from dotenv import load_dotenv

from livehub.api.gemini import GeminiClient
from livehub.models.store import RedisDocumentStore, SqlDocumentStore

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_VOTE_SONGS = "Albachiara,Vita Spericolata,Sally"


def get_redis_url():
    """Get Redis URL with proper SSL configuration for Heroku"""
    redis_url = os.getenv("REDIS_URL")

    if redis_url and redis_url.startswith("rediss://"):
        return redis_url + "?ssl_cert_reqs=none"
    elif redis_url:
        return redis_url
    else:
        # Local fallback
        return "redis://localhost:6379/0"


def create_redis_client(redis_url):
    """Create a Redis client for the document store"""
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5
    )


def load_settings():
    """Read every setting from the environment"""
    store_backend = os.getenv("STORE_BACKEND", "sql").lower()
    return {
        "SECRET_KEY": os.getenv("SECRET_KEY", "your-secret-key-change-in-production"),
        "STORE_BACKEND": store_backend,
        "DATABASE_URL": os.getenv("DATABASE_URL", "sqlite:///livehub.db"),
        "REDIS_URL": get_redis_url(),
        "STORE_MAX_RETRIES": int(os.getenv("STORE_MAX_RETRIES", "5")),
        "CACHE_TYPE": os.getenv("CACHE_TYPE", "RedisCache" if store_backend == "redis" else "SimpleCache"),
        "CACHE_DEFAULT_TIMEOUT": int(os.getenv("CACHE_DEFAULT_TIMEOUT", "3600")),
        "GEMINI_API_KEY": os.getenv("GEMINI_API_KEY"),
        "GEMINI_MODEL": os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        "GEMINI_TIMEOUT": int(os.getenv("GEMINI_TIMEOUT", "30")),
        "LYRICS_LANGUAGE": os.getenv("LYRICS_LANGUAGE", "Italian"),
        "DEFAULT_VOTE_SONGS": [
            name.strip()
            for name in os.getenv("DEFAULT_VOTE_SONGS", DEFAULT_VOTE_SONGS).split(",")
            if name.strip()
        ],
        "STATIC_HOST_URL": os.getenv("STATIC_HOST_URL", "https://giobi.github.io/thecenti"),
        "OPERATOR_TOKEN": os.getenv("OPERATOR_TOKEN") or None,
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
    }


def init_app(app, overrides=None):
    """Populate app.config from the environment, then apply overrides"""
    app.config.update(load_settings())
    if overrides:
        app.config.update(overrides)

    if app.config["CACHE_TYPE"] == "RedisCache":
        app.config.setdefault("CACHE_REDIS_URL", app.config["REDIS_URL"])


def create_store(app):
    """Build the document store selected by STORE_BACKEND"""
    backend = app.config["STORE_BACKEND"]
    retries = app.config["STORE_MAX_RETRIES"]

    if backend == "redis":
        client = create_redis_client(app.config["REDIS_URL"])
        logger.info("Using Redis document store")
        return RedisDocumentStore(client, max_retries=retries)

    if backend == "sql":
        logger.info("Using SQL document store")
        return SqlDocumentStore.from_url(app.config["DATABASE_URL"], max_retries=retries)

    raise ValueError(f"Unknown STORE_BACKEND '{backend}' (expected 'sql' or 'redis')")


def create_generator(app):
    return GeminiClient(
        api_key=app.config["GEMINI_API_KEY"],
        model=app.config["GEMINI_MODEL"],
        timeout=app.config["GEMINI_TIMEOUT"],
        language=app.config["LYRICS_LANGUAGE"]
    )
