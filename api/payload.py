from flask import request


def json_payload() -> dict:
    """Request JSON body as a dict; a missing, invalid or non-object body reads as {}."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
