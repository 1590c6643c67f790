"""
Moderation queue for audience song requests.
Requests enter as pending and move once to approved or rejected.
"""

import logging
import uuid

from livehub.utils.errors import ForbiddenByFlagError, InvalidInputError, NotFoundError
from .global_state import get_state, now_ms

logger = logging.getLogger(__name__)

QUEUE_KEY = "ai_queue"


def empty_queue():
    return {"requests": [], "approved": [], "rejected": []}


def get_queue(store):
    return store.get(QUEUE_KEY, default=empty_queue())


def normalize_personality(value):
    """Accept a list of traits or a comma-joined string"""
    if isinstance(value, list):
        traits = (str(trait).strip() for trait in value if trait is not None)
        return [trait for trait in traits if trait]
    if isinstance(value, str):
        return [trait.strip() for trait in value.split(",") if trait.strip()]
    return []


def build_request(fields):
    return {
        "id": str(uuid.uuid4()),
        "dedicatedTo": fields.get("dedicatedTo") or "N/A",
        "occasion": fields.get("occasion") or "N/A",
        "personality": normalize_personality(fields.get("personality")),
        "story": fields.get("story") or "",
        "email": fields.get("email") or "",
        "userName": fields.get("userName") or "Anonimo",
        "timestamp": now_ms(),
        "status": "pending",
    }


def submit_request(store, fields):
    """Queue a new audience request while AI requests are enabled"""
    if not isinstance(fields, dict):
        raise InvalidInputError("Request fields must be a JSON object")

    if not get_state(store).get("aiEnabled"):
        raise ForbiddenByFlagError("AI requests are disabled", error="AI_DISABLED")

    new_request = build_request(fields)

    def append(queue):
        queue["requests"].append(new_request)

    store.update(QUEUE_KEY, append, default=empty_queue())
    logger.info(f"Request {new_request['id']} submitted for {new_request['dedicatedTo']}")
    return new_request


def _resolve(store, request_id, approve):
    target = "approved" if approve else "rejected"

    def move(queue):
        for index, item in enumerate(queue["requests"]):
            if item["id"] == request_id:
                request = queue["requests"].pop(index)
                request["status"] = target
                queue[target].append(request)
                return request
        raise NotFoundError("Request not found", requestId=request_id)

    request = store.update(QUEUE_KEY, move, default=empty_queue())
    logger.info(f"Request {request_id} {target}")
    return request


def approve_request(store, request_id):
    return _resolve(store, request_id, approve=True)


def reject_request(store, request_id):
    return _resolve(store, request_id, approve=False)


def find_approved(store, request_id):
    """Return the approved request with this id, or None"""
    for item in get_queue(store)["approved"]:
        if item["id"] == request_id:
            return item
    return None
