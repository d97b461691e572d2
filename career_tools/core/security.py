from __future__ import annotations

from fastapi import Header

from career_tools.core.config import settings
from career_tools.core.errors import AuthenticationFailed


def check_api_key(x_api_key: str | None) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise AuthenticationFailed("Please provide a valid API key to use the career tools.")


def require_user(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """Resolve the authenticated user for a request.

    The user id is supplied by the upstream auth gateway; request bodies never
    choose whose data they touch.
    """
    check_api_key(x_api_key)
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationFailed("Missing authenticated user identity.")
    if len(user_id) > 200:
        raise AuthenticationFailed("Invalid authenticated user identity.")
    return user_id
