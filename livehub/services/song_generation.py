"""
Generated song lifecycle for Live Hub.
Turns approved requests into lyrics and tracks which song is on stage.
"""

import logging
import uuid

from livehub.api.gemini import GenerationError
from livehub.utils.errors import NotFoundError, UpstreamError
from .global_state import get_state, now_ms, update_state
from .request_queue import find_approved

logger = logging.getLogger(__name__)

SONGS_KEY = "ai_generated_songs"

LYRIC_SECTIONS = ("verse1", "chorus", "verse2", "bridge", "finalChorus")
LINES_PER_SECTION = 4


def empty_songs():
    return {"songs": []}


def list_generated_songs(store, include_played=True):
    songs = store.get(SONGS_KEY, default=empty_songs())["songs"]
    if include_played:
        return songs
    return [song for song in songs if song.get("status") != "played"]


def validate_song_payload(payload):
    """Check the generator output shape and return (lyrics, genre, mood)"""
    if not isinstance(payload, dict):
        raise GenerationError("Generator returned a non-object payload")

    lyrics = payload.get("lyrics")
    if not isinstance(lyrics, dict):
        raise GenerationError("Generator payload is missing 'lyrics'")
    if not isinstance(lyrics.get("title"), str) or not lyrics["title"].strip():
        raise GenerationError("Generated lyrics have no title")

    for section in LYRIC_SECTIONS:
        lines = lyrics.get(section)
        if not isinstance(lines, list) or not all(isinstance(line, str) for line in lines):
            raise GenerationError(f"Generated section '{section}' must be a list of strings")
        if len(lines) != LINES_PER_SECTION:
            logger.warning(f"Section '{section}' has {len(lines)} lines instead of {LINES_PER_SECTION}")

    genre = payload.get("genre") or ""
    mood = payload.get("mood") or ""
    if not isinstance(genre, str) or not isinstance(mood, str):
        raise GenerationError("'genre' and 'mood' must be strings")

    return {key: lyrics[key] for key in ("title",) + LYRIC_SECTIONS}, genre, mood


def generate_song(store, generator, request_id):
    """Generate lyrics for an approved request and store them as a new song"""
    request = find_approved(store, request_id)
    if request is None:
        raise NotFoundError("Request not found in approved list", requestId=request_id)

    logger.info(f"Generating song for request {request_id} ({request['dedicatedTo']})")
    try:
        payload = generator.generate(request)
        lyrics, genre, mood = validate_song_payload(payload)
    except GenerationError as e:
        logger.error(f"Song generation failed for request {request_id}: {e}")
        raise UpstreamError(str(e), requestId=request_id) from e

    song = {
        "id": str(uuid.uuid4()),
        "requestId": request_id,
        "generatedAt": now_ms(),
        "status": "generated",
        "dedicatedTo": request["dedicatedTo"],
        "occasion": request["occasion"],
        "lyrics": lyrics,
        "genre": genre,
        "mood": mood,
    }

    def append(songs_data):
        songs_data["songs"].append(song)
        return len(songs_data["songs"])

    total = store.update(SONGS_KEY, append, default=empty_songs())
    logger.info(f"Song '{lyrics['title']}' saved ({total} generated so far)")
    return song


def _find_song(songs_data, song_id):
    for song in songs_data["songs"]:
        if song["id"] == song_id:
            return song
    raise NotFoundError("Song not found", songId=song_id)


def song_summary(song):
    return {
        "id": song["id"],
        "title": song["lyrics"]["title"],
        "dedicatedTo": song["dedicatedTo"],
        "lyrics": song["lyrics"],
    }


def set_current_song(store, song_id):
    """Make one song active, demoting any other active song in the same write"""

    def promote(songs_data):
        target = _find_song(songs_data, song_id)
        for song in songs_data["songs"]:
            if song["status"] == "active" and song["id"] != song_id:
                song["status"] = "generated"
        target["status"] = "active"
        return song_summary(target)

    summary = store.update(SONGS_KEY, promote, default=empty_songs())

    def point_to(state):
        state["currentAISong"] = summary

    state = update_state(store, point_to)
    logger.info(f"Current song set to '{summary['title']}'")
    return summary, state


def mark_played(store, song_id):
    """Retire a song; clears the current pointer only if it referenced this song"""

    def retire(songs_data):
        song = _find_song(songs_data, song_id)
        song["status"] = "played"
        song["playedAt"] = now_ms()
        return song

    song = store.update(SONGS_KEY, retire, default=empty_songs())
    logger.info(f"Song {song_id} marked as played")

    current = get_state(store).get("currentAISong")
    if not current or current.get("id") != song_id:
        return song, None

    def clear_pointer(state):
        pointer = state.get("currentAISong")
        if pointer and pointer.get("id") == song_id:
            state["currentAISong"] = None

    return song, update_state(store, clear_pointer)


def get_current_song(store):
    return get_state(store).get("currentAISong")
