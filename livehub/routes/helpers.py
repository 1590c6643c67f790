"""
Shared request helpers for Live Hub routes.
"""

from flask import current_app, request

from livehub.utils.errors import InvalidInputError


def get_store():
    return current_app.store


def get_generator():
    return current_app.generator


def get_body():
    """Parse the JSON body, treating an empty body as an empty object"""
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data
