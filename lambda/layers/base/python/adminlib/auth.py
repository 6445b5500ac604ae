import logging
from typing import Any, Callable, Dict, Optional

from adminlib.errors import AuthenticationError, AuthorizationError
from adminlib.helpers import get_header
from adminlib.supabase import BackendError

logger = logging.getLogger(__name__)

SUPERADMIN_ROLE = "superadmin"

RoleLookup = Callable[[str], Optional[str]]


def bearer_token(event: Dict[str, Any]) -> str:
    auth_header = get_header(event, "Authorization")
    if not auth_header:
        raise AuthenticationError("No authorization header")
    token = auth_header.replace("Bearer ", "", 1).strip()
    if not token:
        raise AuthenticationError("Invalid token")
    return token


def authenticate(event: Dict[str, Any], backend) -> Dict[str, Any]:
    """Resolve the caller identity from the request's bearer token"""
    token = bearer_token(event)

    try:
        user = backend.get_user(token)
    except BackendError as e:
        logger.info("Token verification failed: %s", e.message)
        user = None

    if not user:
        raise AuthenticationError("Invalid token")
    return user


def require_role(user: Dict[str, Any], role_lookup: RoleLookup, message: str,
                 role: str = SUPERADMIN_ROLE) -> None:
    """
    Raise AuthorizationError unless the caller's role is exactly `role`.

    role_lookup is any callable mapping a user id to a role string; the
    Supabase backend's get_user_role is the default source.
    """
    try:
        caller_role = role_lookup(user["id"])
    except BackendError as e:
        logger.error("Role lookup failed for %s: %s", user["id"], e.message)
        caller_role = None

    if caller_role != role:
        logger.info("Caller %s has role %s, %s required", user["id"], caller_role, role)
        raise AuthorizationError(message)
