import logging
import os
from typing import Any, Dict, Optional

from adminlib import responses
from adminlib.auth import SUPERADMIN_ROLE, RoleLookup, authenticate, require_role
from adminlib.errors import ApiError, DependencyError, NotFoundError, ValidationError
from adminlib.helpers import env_float, get_method, now_iso
from adminlib.supabase import DEFAULT_TIMEOUT, BackendError, SupabaseBackend
from adminlib.validators import missing_fields, parse_json_body

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment variables
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
BACKEND_TIMEOUT_SECONDS = env_float("BACKEND_TIMEOUT_SECONDS", DEFAULT_TIMEOUT)

OWNER_ROLES = ("restaurant_owner", SUPERADMIN_ROLE)


def _get_backend() -> SupabaseBackend:
    return SupabaseBackend(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, timeout=BACKEND_TIMEOUT_SECONDS)


def _first_row(backend, table: str, columns: str, **eq) -> Optional[Dict[str, Any]]:
    """Single-row lookup; a backend error reads as "not found" here"""
    try:
        rows = backend.select(table, columns, **eq)
    except BackendError as e:
        logger.error("Error reading %s %s: %s", table, eq, e.message)
        return None
    return rows[0] if rows else None


def transfer_ownership_request(event: Dict[str, Any], backend,
                               role_lookup: Optional[RoleLookup] = None) -> Dict[str, Any]:
    """Move a restaurant to a new owner on behalf of a superadmin."""
    if get_method(event) == "OPTIONS":
        return responses.preflight_response()

    try:
        caller = authenticate(event, backend)
        require_role(
            caller,
            role_lookup or backend.get_user_role,
            "Unauthorized. Only superadmin can transfer ownership.",
        )

        payload = parse_json_body(event)
        if missing_fields(payload, ["restaurantId", "newOwnerId"]):
            raise ValidationError("Missing required fields: restaurantId and newOwnerId")
        restaurant_id = payload["restaurantId"]
        new_owner_id = payload["newOwnerId"]

        logger.info("Getting restaurant details: %s", restaurant_id)
        restaurant = _first_row(backend, "restaurants", "id, name, owner_id", id=restaurant_id)
        if not restaurant:
            raise NotFoundError("Restaurant not found")

        logger.info("Verifying new owner: %s", new_owner_id)
        new_owner = _first_row(
            backend, "users", "id, full_name, email, role, restaurant_id", id=new_owner_id
        )
        if not new_owner:
            raise NotFoundError("New owner user not found")

        if new_owner.get("restaurant_id") != restaurant_id and new_owner.get("role") != SUPERADMIN_ROLE:
            raise ValidationError(
                "El nuevo propietario debe estar asociado a este restaurante o ser superadmin"
            )

        if new_owner.get("role") not in OWNER_ROLES:
            raise ValidationError(
                'El nuevo propietario debe tener rol "restaurant_owner" o "superadmin"'
            )

        if restaurant.get("owner_id") == new_owner_id:
            raise ValidationError("Este usuario ya es el propietario del restaurante")

        logger.info("Checking if new owner already owns another restaurant")
        try:
            other_restaurants = backend.select(
                "restaurants", "id, name", neq={"id": restaurant_id}, owner_id=new_owner_id
            )
        except BackendError as e:
            logger.error("Error checking existing ownership: %s", e.message)
            raise DependencyError("Error al verificar propiedad existente")

        if other_restaurants:
            raise ValidationError(
                f'Este usuario ya es propietario de otro restaurante: "{other_restaurants[0].get("name")}". '
                "Cada usuario solo puede ser propietario de un restaurante a la vez."
            )

        logger.info("Transferring ownership from %s to %s", restaurant.get("owner_id"), new_owner_id)
        try:
            backend.update(
                "restaurants",
                {
                    "owner_id": new_owner_id,
                    "owner_name": new_owner.get("full_name"),
                    "updated_at": now_iso(),
                },
                id=restaurant_id,
            )
        except BackendError as e:
            logger.error("Error updating restaurant: %s", e.message)
            raise DependencyError(f"Error transferring ownership: {e.message}")

    except ApiError as e:
        return responses.error_response(e)
    except Exception as e:
        logger.exception("Error in transfer-restaurant-ownership function")
        return responses.internal_error_response(str(e))

    logger.info("Ownership transferred successfully")
    return responses.json_response(200, {
        "success": True,
        "message": "Ownership transferred successfully",
        "restaurant": {
            "id": restaurant.get("id"),
            "name": restaurant.get("name"),
            "previousOwnerId": restaurant.get("owner_id"),
            "newOwnerId": new_owner_id,
            "newOwnerName": new_owner.get("full_name"),
            "newOwnerEmail": new_owner.get("email"),
        },
    })


def handler(event, context):
    logger.info("TransferRestaurantOwnershipFunction invoked")
    return transfer_ownership_request(event, _get_backend())
