"""Token cookies: two per platform ({platform}_access_token, {platform}_refresh_token)."""
import logging
from typing import Optional

from fastapi import Request, Response

from relistify import config
from relistify.core.errors import AuthError
from relistify.models.playlist import Platform
from relistify.models.session import AuthSession

logger = logging.getLogger(__name__)


def access_cookie(platform: Platform) -> str:
    return f"{platform.value}_access_token"


def refresh_cookie(platform: Platform) -> str:
    return f"{platform.value}_refresh_token"


def _set(response: Response, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="strict",
    )


def set_session_cookies(response: Response, platform: Platform, session: AuthSession) -> None:
    """Access cookie lives 1 day or until the token expires, whichever is sooner."""
    max_age = config.ACCESS_COOKIE_MAX_AGE
    seconds_left = session.seconds_left()
    if seconds_left is not None:
        max_age = min(max_age, seconds_left)
    _set(response, access_cookie(platform), session.access_token, max_age)
    if session.refresh_token:
        _set(response, refresh_cookie(platform), session.refresh_token, config.REFRESH_COOKIE_MAX_AGE)


def clear_session_cookies(response: Response, platform: Platform) -> None:
    for name in (access_cookie(platform), refresh_cookie(platform)):
        response.delete_cookie(name, secure=config.COOKIE_SECURE, httponly=True, samesite="strict")


def read_session(request: Request, platform: Platform) -> Optional[AuthSession]:
    access_token = request.cookies.get(access_cookie(platform))
    if not access_token:
        return None
    return AuthSession(access_token=access_token, refresh_token=request.cookies.get(refresh_cookie(platform)))


def resolve_session(request: Request, response: Response, platform: Platform, state) -> Optional[AuthSession]:
    """Session from cookies; if only the refresh cookie survives, refresh and re-set both cookies."""
    session = read_session(request, platform)
    if session is not None:
        return session
    refresh_token = request.cookies.get(refresh_cookie(platform))
    if not refresh_token:
        return None
    try:
        session = state.client_for(platform).refresh(refresh_token)
    except AuthError as e:
        logger.info("%s refresh token rejected: %s", platform.display_name, e)
        clear_session_cookies(response, platform)
        return None
    set_session_cookies(response, platform, session)
    logger.info("Refreshed %s session from refresh cookie", platform.display_name)
    return session
