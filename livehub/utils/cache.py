"""
Caching helpers for Live Hub.
Keeps the latest broadcast payload per topic for cheap polling.
"""

import logging

from flask_caching import Cache

logger = logging.getLogger(__name__)

cache = Cache()


def snapshot_key(topic):
    return f"latest_{topic}"


def set_snapshot(topic, payload):
    """Store the latest payload for a topic"""
    try:
        cache.set(snapshot_key(topic), payload)
        return True
    except Exception as e:
        logger.error(f"Failed to cache {topic} snapshot: {e}")
        return False


def get_snapshot(topic):
    """Get the latest payload for a topic from cache"""
    try:
        return cache.get(snapshot_key(topic))
    except Exception as e:
        logger.error(f"Failed to read {topic} snapshot from cache: {e}")
        return None
