"""Small helpers shared by the test modules."""

from rbac_service.core.security import create_access_token


def bearer(user_id: int) -> dict[str, str]:
    """Authorization header for a token naming `user_id`."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
