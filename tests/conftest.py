import pytest

from app import create_app
from livehub.models.store import SqlDocumentStore
from livehub.services.global_state import merge_state
from livehub.services.request_queue import approve_request, submit_request


def make_song_payload(title="Canzone per Marco"):
    return {
        "lyrics": {
            "title": title,
            "verse1": ["uno", "due", "tre", "quattro"],
            "chorus": ["la la", "la la", "la la", "la la"],
            "verse2": ["cinque", "sei", "sette", "otto"],
            "bridge": ["oh", "oh", "oh", "oh"],
            "finalChorus": ["la la", "la la", "la la", "fine"],
        },
        "genre": "rock-italiano",
        "mood": "divertente",
    }


class FakeGenerator:
    """Stands in for the Gemini client"""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else make_song_payload()
        self.error = error
        self.calls = []

    def generate(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def store():
    """Fresh in-memory SQLite document store"""
    return SqlDocumentStore.from_url("sqlite:///:memory:")


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def app(store, generator):
    app = create_app(
        {
            "TESTING": True,
            "CACHE_TYPE": "SimpleCache",
            "OPERATOR_TOKEN": None,
            "GEMINI_API_KEY": None,
            "STATIC_HOST_URL": "https://static.example.com/live",
        },
        store=store,
        generator=generator
    )
    return app


@pytest.fixture
def client(app):
    """Create a test client"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def approved_request(store):
    """An audience request that has already been approved"""
    merge_state(store, {"aiEnabled": True})
    request = submit_request(store, {
        "dedicatedTo": "Marco",
        "occasion": "Compleanno",
        "personality": "simpatico, testardo",
        "story": "Ha perso le chiavi tre volte in una sera",
    })
    return approve_request(store, request["id"])
