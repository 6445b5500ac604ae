import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def env_float(name: str, default: float) -> float:
    """Read a numeric setting; a malformed value falls back to the default"""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup on an API Gateway proxy event."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_method(event: Dict[str, Any]) -> str:
    # REST API (v1) events carry httpMethod, HTTP API (v2) events requestContext.http.method
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method", "")
    return method.upper()
