import base64
import json
from typing import Any, Dict, List


def parse_json_body(event: Dict[str, Any]) -> Any:
    """
    Decode the JSON body of an API Gateway proxy event.

    A missing or malformed body raises (ValueError/TypeError); callers treat
    that as an unexpected error, not a validation failure.
    """
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return json.loads(body)


def missing_fields(data: Any, required_fields: List[str]) -> List[str]:
    """Return the required fields that are absent, empty or not strings"""
    if not isinstance(data, dict):
        return list(required_fields)
    return [
        field for field in required_fields
        if not isinstance(data.get(field), str) or not data[field]
    ]
