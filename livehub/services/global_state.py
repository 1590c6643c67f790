"""
Global state record for Live Hub.
Holds the coarse switches and pointers the dashboard and public page poll.
"""

import logging
import time

from livehub.utils.errors import InvalidInputError

logger = logging.getLogger(__name__)

STATE_KEY = "current"

STATE_FIELDS = ("voteOpen", "aiEnabled", "currentVote", "currentAISong", "lastUpdate")


def now_ms():
    """Current time in epoch milliseconds"""
    return int(time.time() * 1000)


def default_state():
    return {
        "voteOpen": False,
        "aiEnabled": False,
        "currentVote": None,
        "currentAISong": None,
        "lastUpdate": now_ms(),
    }


def get_state(store):
    state = store.get(STATE_KEY)
    if state is None:
        return default_state()
    return state


def update_state(store, mutate):
    """CAS-update the state record and stamp lastUpdate; returns the new state"""

    def apply(state):
        mutate(state)
        state["lastUpdate"] = now_ms()
        return state

    return store.update(STATE_KEY, apply, default=default_state())


def merge_state(store, changes):
    """Merge operator-provided fields into the state record"""
    if not isinstance(changes, dict):
        raise InvalidInputError("State update must be a JSON object")

    unknown = sorted(set(changes) - set(STATE_FIELDS))
    if unknown:
        raise InvalidInputError(f"Unknown state fields: {', '.join(unknown)}", fields=unknown)

    for flag in ("voteOpen", "aiEnabled"):
        if flag in changes and not isinstance(changes[flag], bool):
            raise InvalidInputError(f"'{flag}' must be a boolean")

    for pointer in ("currentVote", "currentAISong"):
        if pointer in changes and changes[pointer] is not None and not isinstance(changes[pointer], dict):
            raise InvalidInputError(f"'{pointer}' must be an object or null")

    def apply(state):
        for field, value in changes.items():
            if field != "lastUpdate":
                state[field] = value

    state = update_state(store, apply)
    logger.info(f"State updated: {', '.join(sorted(changes)) or 'no fields'}")
    return state
