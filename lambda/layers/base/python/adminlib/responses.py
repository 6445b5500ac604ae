import json
from typing import Any, Dict

from adminlib.errors import ApiError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


def json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Return an API Gateway proxy response with a JSON body"""
    return {
        "statusCode": status_code,
        "headers": {**CORS_HEADERS, "Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False, default=str),
    }


def preflight_response() -> Dict[str, Any]:
    """Return the bare 200 answer to a CORS preflight (OPTIONS) request"""
    return {
        "statusCode": 200,
        "headers": dict(CORS_HEADERS),
        "body": "",
    }


def error_response(error: ApiError) -> Dict[str, Any]:
    return json_response(error.status_code, error.to_body())


def internal_error_response(message: str = "Internal server error") -> Dict[str, Any]:
    """Return a 500 error response"""
    return json_response(500, {"error": message or "Internal server error"})
