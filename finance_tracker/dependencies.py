"""Session dependencies and cookie helpers for FastAPI routes."""

from dataclasses import dataclass

from fastapi import HTTPException, Request, Response

from finance_tracker.config import get_settings
from finance_tracker.services.jwt import get_jwt_service

AUTH_COOKIE_NAME = "ft_session"
RESET_COOKIE_NAME = "ft_reset"
COOKIE_MAX_AGE = 8 * 60 * 60  # 8 hours


@dataclass
class CurrentUser:
    """Authenticated user context."""

    user_id: int
    username: str


def resolve_current_user(request: Request) -> CurrentUser | None:
    """Read the user from a Bearer token or the session cookie. Returns None if missing or invalid."""
    token: str | None = None

    # Check Authorization header first
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:]

    # Fall back to cookie
    if not token:
        token = request.cookies.get(AUTH_COOKIE_NAME)

    if not token:
        return None

    payload = get_jwt_service().decode_token(token)
    if not payload:
        return None

    return CurrentUser(user_id=int(payload["sub"]), username=payload["username"])


def get_current_user(request: Request) -> CurrentUser:
    """Require an authenticated session. Raises 401 if absent."""
    user = resolve_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        samesite="lax",
        secure=get_settings().COOKIE_SECURE,
        max_age=max_age,
    )


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the authentication cookie."""
    _set_cookie(response, AUTH_COOKIE_NAME, token, COOKIE_MAX_AGE)


def set_reset_cookie(response: Response, token: str, max_age: int) -> None:
    """Set the password reset permission cookie."""
    _set_cookie(response, RESET_COOKIE_NAME, token, max_age)


def clear_reset_cookie(response: Response) -> None:
    response.delete_cookie(key=RESET_COOKIE_NAME)


def clear_session_cookies(response: Response) -> None:
    """Discard all session state: authentication and any in-flight reset permission."""
    response.delete_cookie(key=AUTH_COOKIE_NAME)
    clear_reset_cookie(response)
