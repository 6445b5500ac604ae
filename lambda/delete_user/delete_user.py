import logging
import os
from typing import Any, Dict, Optional

from adminlib import responses
from adminlib.auth import RoleLookup, authenticate, require_role
from adminlib.errors import ApiError, ConflictError, DependencyError, ValidationError
from adminlib.helpers import env_float, get_method
from adminlib.supabase import DEFAULT_TIMEOUT, BackendError, SupabaseBackend
from adminlib.validators import missing_fields, parse_json_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment variables
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
BACKEND_TIMEOUT_SECONDS = env_float("BACKEND_TIMEOUT_SECONDS", DEFAULT_TIMEOUT)


def _get_backend() -> SupabaseBackend:
    return SupabaseBackend(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, timeout=BACKEND_TIMEOUT_SECONDS)


def _owned_restaurants(backend, user_id: str):
    logger.info("Checking if user is owner of any restaurants: %s", user_id)
    try:
        return backend.select("restaurants", "id, name, domain, slug", owner_id=user_id)
    except BackendError as e:
        logger.error("Error checking restaurant ownership: %s", e.message)
        raise DependencyError("Error al verificar la propiedad de restaurantes")


def _ownership_block(restaurants) -> ConflictError:
    count = len(restaurants)
    return ConflictError(
        f"No se puede eliminar este usuario porque es propietario de {count} restaurante(s). "
        "Primero debes transferir la propiedad a otro usuario.",
        cannotDelete=True,
        reason="owner",
        ownedRestaurants=[
            {
                "id": r.get("id"),
                "name": r.get("name"),
                "domain": r.get("domain") or r.get("slug"),
            }
            for r in restaurants
        ],
        message=f"Este usuario es propietario de {count} restaurante(s). "
                "Debes transferir la propiedad antes de eliminarlo.",
    )


def _delete_support_tickets(backend, user_id: str) -> None:
    # Best effort: a failure here is logged and the deletion carries on
    for column in ("user_id", "assigned_to"):
        try:
            backend.delete("support_tickets", **{column: user_id})
        except BackendError as e:
            logger.warning("Could not delete support tickets where %s=%s: %s", column, user_id, e.message)


def delete_user_request(event: Dict[str, Any], backend, role_lookup: Optional[RoleLookup] = None) -> Dict[str, Any]:
    """
    Delete a user account on behalf of a superadmin.

    Order matters: support tickets, then the users row, then the auth
    identity. There is no rollback, so an identity deletion failure leaves
    the users row already gone.
    """
    if get_method(event) == "OPTIONS":
        return responses.preflight_response()

    try:
        caller = authenticate(event, backend)
        require_role(
            caller,
            role_lookup or backend.get_user_role,
            "Unauthorized. Only superadmin can delete users.",
        )

        payload = parse_json_body(event)
        if missing_fields(payload, ["userId"]):
            raise ValidationError("Missing required field: userId")
        user_id = payload["userId"]

        restaurants = _owned_restaurants(backend, user_id)
        if restaurants:
            logger.info("Cannot delete: User is owner of restaurants: %s", restaurants)
            raise _ownership_block(restaurants)

        logger.info("Step 1: Deleting support tickets for user (assigned or created)")
        _delete_support_tickets(backend, user_id)

        logger.info("Step 2: Deleting from users table")
        try:
            backend.delete("users", id=user_id)
        except BackendError as e:
            logger.error("Database deletion error: %s", e.message)
            raise DependencyError(f"Error eliminando de la base de datos: {e.message}")

        logger.info("Step 3: Deleting user from auth system")
        try:
            backend.delete_identity(user_id)
        except BackendError as e:
            logger.error("Auth deletion error: %s", e.message)
            raise DependencyError(f"Error eliminando del sistema de autenticación: {e.message}")

    except ApiError as e:
        return responses.error_response(e)
    except Exception as e:
        logger.exception("Error in delete-user function")
        return responses.internal_error_response(str(e))

    logger.info("User deleted successfully from all locations: %s", user_id)
    return responses.json_response(200, {"success": True, "message": "User deleted successfully"})


def handler(event, context):
    logger.info("DeleteUserFunction invoked")
    return delete_user_request(event, _get_backend())
