"""
Audience vote engine for Live Hub.
Handles starting and closing votes, casting ballots and tallying results.
"""

import logging
import math

from livehub.utils.errors import ConflictError, ForbiddenByFlagError, InvalidInputError
from .global_state import get_state, now_ms, update_state

logger = logging.getLogger(__name__)

VOTE_KEY = "vote_results"
MAX_DURATION_SECONDS = 24 * 60 * 60


def empty_vote():
    return {"songs": [], "votes": {}, "totalVotes": 0}


def get_vote(store):
    return store.get(VOTE_KEY, default=empty_vote())


def _validate_songs(songs):
    if not isinstance(songs, list) or not songs:
        raise InvalidInputError("'songs' must be a non-empty list of song names")
    for name in songs:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Every song name must be a non-empty string")


def start_vote(store, songs=None, default_songs=None, duration_seconds=None):
    """Replace the vote record with a fresh one and open voting"""
    if songs is None:
        songs = list(default_songs or [])
    _validate_songs(songs)

    if duration_seconds is not None:
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, (int, float)) or duration_seconds <= 0:
            raise InvalidInputError("'durationSeconds' must be a positive number")
        if not math.isfinite(duration_seconds) or duration_seconds > MAX_DURATION_SECONDS:
            raise InvalidInputError(f"'durationSeconds' must be at most {MAX_DURATION_SECONDS}")

    start_time = now_ms()
    vote = {
        "songs": songs,
        "votes": {},
        "totalVotes": 0,
        "startTime": start_time,
        "closesAt": start_time + int(duration_seconds * 1000) if duration_seconds else None,
    }
    store.put(VOTE_KEY, vote)

    def open_vote(state):
        state["voteOpen"] = True
        state["currentVote"] = vote

    state = update_state(store, open_vote)
    logger.info(f"Vote started with {len(songs)} songs: {', '.join(songs)}")
    return vote, state


def close_vote(store):
    """Close voting; the ballots are kept until the next start_vote"""
    state = get_state(store)
    if not state.get("voteOpen"):
        return state

    def shut(current):
        current["voteOpen"] = False

    state = update_state(store, shut)
    logger.info("Vote closed")
    return state


def _is_expired(vote, now=None):
    closes_at = vote.get("closesAt")
    return closes_at is not None and (now or now_ms()) >= closes_at


def expire_vote_if_due(store):
    """Close the vote once its closesAt deadline has passed; returns True if it closed"""
    state = get_state(store)
    if not state.get("voteOpen"):
        return False
    if not _is_expired(get_vote(store)):
        return False
    close_vote(store)
    logger.info("Vote auto-closed after its deadline")
    return True


def cast_vote(store, client_id, song_index):
    """Record one ballot per client and return the fresh tally"""
    state = get_state(store)
    if not state.get("voteOpen"):
        raise ForbiddenByFlagError("Voting is closed", error="VOTING_CLOSED")

    if not isinstance(client_id, str) or not client_id.strip():
        raise InvalidInputError("'clientId' must be a non-empty string")
    if isinstance(song_index, bool) or not isinstance(song_index, int):
        raise InvalidInputError("'songIndex' must be an integer")

    def add_ballot(vote):
        if _is_expired(vote):
            raise ForbiddenByFlagError("Voting is closed", error="VOTING_CLOSED")
        if client_id in vote["votes"]:
            raise ConflictError(
                "Already voted",
                error="ALREADY_VOTED",
                previousVote=vote["votes"][client_id]
            )
        if not 0 <= song_index < len(vote["songs"]):
            raise InvalidInputError(
                f"'songIndex' must be between 0 and {len(vote['songs']) - 1}"
            )

        vote["votes"][client_id] = {"songIndex": song_index, "timestamp": now_ms()}
        vote["totalVotes"] = len(vote["votes"])
        return tally(vote)

    try:
        results = store.update(VOTE_KEY, add_ballot, default=empty_vote())
    except ConflictError:
        logger.warning(f"Duplicate vote rejected for client {client_id}")
        raise

    logger.info(f"Vote recorded for song {song_index} ({results['totalVotes']} total)")
    return results


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def tally(vote):
    """Count ballots per song, keeping the original song order"""
    songs = vote.get("songs", [])
    counts = [0] * len(songs)
    for ballot in vote.get("votes", {}).values():
        index = ballot.get("songIndex")
        if isinstance(index, int) and 0 <= index < len(songs):
            counts[index] += 1

    total = vote.get("totalVotes", 0)
    results = [
        {
            "name": name,
            "votes": counts[index],
            "percentage": _round_half_up(counts[index] / total * 100) if total > 0 else 0,
        }
        for index, name in enumerate(songs)
    ]
    return {"results": results, "totalVotes": total, "lastUpdate": now_ms()}
