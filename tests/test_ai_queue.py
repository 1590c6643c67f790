import json

import pytest

from livehub.services.global_state import merge_state
from livehub.services.request_queue import (
    approve_request, get_queue, normalize_personality, reject_request, submit_request
)
from livehub.utils.errors import ForbiddenByFlagError, InvalidInputError, NotFoundError


class TestRequestQueue:
    """Test the pending -> approved/rejected moderation flow"""

    def test_submit_rejected_while_ai_disabled(self, store):
        with pytest.raises(ForbiddenByFlagError) as excinfo:
            submit_request(store, {"dedicatedTo": "Giulia"})
        assert excinfo.value.error == "AI_DISABLED"
        assert get_queue(store)["requests"] == []

    def test_submit_after_enabling_ai(self, store):
        """Re-enabling AI lets the request through as pending"""
        with pytest.raises(ForbiddenByFlagError):
            submit_request(store, {"dedicatedTo": "Giulia"})

        merge_state(store, {"aiEnabled": True})
        request = submit_request(store, {"dedicatedTo": "Giulia", "occasion": "Laurea"})

        queue = get_queue(store)
        assert queue["requests"] == [request]
        assert request["status"] == "pending"
        assert request["occasion"] == "Laurea"

    def test_missing_fields_get_placeholders(self, store):
        merge_state(store, {"aiEnabled": True})
        request = submit_request(store, {})

        assert request["dedicatedTo"] == "N/A"
        assert request["occasion"] == "N/A"
        assert request["personality"] == []
        assert request["story"] == ""
        assert request["email"] == ""
        assert request["userName"] == "Anonimo"
        assert request["id"]
        assert request["timestamp"] > 0

    def test_request_ids_are_unique(self, store):
        merge_state(store, {"aiEnabled": True})
        ids = {submit_request(store, {})["id"] for _ in range(5)}
        assert len(ids) == 5

    def test_personality_normalization(self):
        assert normalize_personality("funny, kind , ,loud") == ["funny", "kind", "loud"]
        assert normalize_personality(["shy", "brave"]) == ["shy", "brave"]
        assert normalize_personality(["funny", 3, None, "  "]) == ["funny", "3"]
        assert normalize_personality(None) == []
        assert normalize_personality(42) == []

    def test_submit_requires_object(self, store):
        merge_state(store, {"aiEnabled": True})
        with pytest.raises(InvalidInputError):
            submit_request(store, ["not", "an", "object"])

    def test_approve_moves_request(self, store):
        merge_state(store, {"aiEnabled": True})
        request = submit_request(store, {"dedicatedTo": "Luca"})

        approved = approve_request(store, request["id"])

        queue = get_queue(store)
        assert approved["status"] == "approved"
        assert queue["requests"] == []
        assert [r["id"] for r in queue["approved"]] == [request["id"]]
        assert queue["rejected"] == []

    def test_reject_moves_request(self, store):
        merge_state(store, {"aiEnabled": True})
        request = submit_request(store, {"dedicatedTo": "Luca"})

        rejected = reject_request(store, request["id"])

        queue = get_queue(store)
        assert rejected["status"] == "rejected"
        assert queue["requests"] == []
        assert queue["approved"] == []
        assert queue["rejected"][0]["id"] == request["id"]

    def test_resolved_requests_are_terminal(self, store):
        """An approved request cannot be approved or rejected again"""
        merge_state(store, {"aiEnabled": True})
        request = submit_request(store, {})
        approve_request(store, request["id"])

        with pytest.raises(NotFoundError):
            reject_request(store, request["id"])
        with pytest.raises(NotFoundError):
            approve_request(store, request["id"])

        queue = get_queue(store)
        assert len(queue["approved"]) == 1
        assert queue["rejected"] == []

    def test_unknown_request_is_not_found(self, store):
        with pytest.raises(NotFoundError):
            approve_request(store, "does-not-exist")


class TestAIQueueEndpoints:
    """Test the /api/ai moderation actions over HTTP"""

    def test_get_queue_returns_empty_lists(self, client):
        response = client.get('/api/ai')
        assert response.status_code == 200
        assert json.loads(response.data) == {"requests": [], "approved": [], "rejected": []}

    def test_submit_when_disabled_returns_403(self, client):
        response = client.post('/api/ai', json={"action": "submit_request", "dedicatedTo": "Sara"})
        assert response.status_code == 403
        assert json.loads(response.data)["error"] == "AI_DISABLED"

    def test_submit_and_approve(self, client):
        client.post('/api/state', json={"aiEnabled": True})

        response = client.post('/api/ai', json={
            "action": "submit_request",
            "dedicatedTo": "Sara",
            "personality": "solare, ironica",
        })
        assert response.status_code == 200
        request = json.loads(response.data)["request"]
        assert request["personality"] == ["solare", "ironica"]
        assert "action" not in request

        response = client.post('/api/ai', json={"action": "approve_request", "requestId": request["id"]})
        assert response.status_code == 200
        assert json.loads(response.data)["request"]["status"] == "approved"

        queue = json.loads(client.get('/api/ai').data)
        assert queue["requests"] == []
        assert queue["approved"][0]["id"] == request["id"]

    def test_reject_unknown_request_returns_404(self, client):
        response = client.post('/api/ai', json={"action": "reject_request", "requestId": "nope"})
        assert response.status_code == 404
        assert json.loads(response.data)["error"] == "NOT_FOUND"

    def test_missing_request_id_is_invalid(self, client):
        response = client.post('/api/ai', json={"action": "approve_request"})
        assert response.status_code == 400
