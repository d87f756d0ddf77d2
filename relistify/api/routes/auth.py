"""OAuth per platform: auth URL, callback, code exchange, status, logout.

The same routes are mounted under /api/spotify and /api/youtube.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from relistify import config
from relistify.api.cookies import clear_session_cookies, resolve_session, set_session_cookies
from relistify.api.state import AppState, get_state
from relistify.core.errors import AuthError, ConfigurationError, RelistifyError
from relistify.models.playlist import Platform

logger = logging.getLogger(__name__)


class TokenBody(BaseModel):
    code: Optional[str] = None


def _page(text: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(f"<body><p>{text}</p></body>", status_code=status_code)


def build_router(platform: Platform) -> APIRouter:
    router = APIRouter()
    name = platform.display_name

    @router.get("/auth-url")
    def get_auth_url(request: Request, response: Response, state: AppState = Depends(get_state)):
        """Return the provider's OAuth consent URL and whether the user is logged in."""
        client = state.client_for(platform)
        logged_in = resolve_session(request, response, platform, state) is not None
        return {"auth_url": client.get_auth_url(), "logged_in": logged_in}

    @router.get("/callback")
    def oauth_callback(
        code: Optional[str] = None,
        error: Optional[str] = None,
        state: AppState = Depends(get_state),
    ):
        """Exchange code for tokens, store them in cookies, then redirect to the web app or show success."""
        if error or not code:
            return _page(
                f"Missing authorization code ({error or 'no code'}). Try logging in to {name} again.",
                status_code=400,
            )
        try:
            session = state.client_for(platform).exchange_code(code)
        except AuthError as e:
            return _page(e.message, status_code=e.status_code)
        except RelistifyError as e:
            logger.warning("%s callback failed: %s", name, e)
            return _page(f"Failed to link {name}. Check backend logs and try again.", status_code=e.status_code)
        if config.RELISTIFY_WEB_ORIGIN:
            redirect_url = f"{config.RELISTIFY_WEB_ORIGIN.rstrip('/')}/?auth={platform.value}&status=success"
            result = RedirectResponse(url=redirect_url, status_code=302)
        else:
            result = _page(f"{name} linked successfully. You can close this window.")
        set_session_cookies(result, platform, session)
        return result

    @router.post("/token")
    def exchange_token(body: TokenBody, response: Response, state: AppState = Depends(get_state)):
        """Exchange an authorization code (from the front end's callback page) and set token cookies."""
        code = (body.code or "").strip()
        if not code:
            raise HTTPException(status_code=400, detail="Authorization code is required")
        session = state.client_for(platform).exchange_code(code)
        set_session_cookies(response, platform, session)
        return {"ok": True, "platform": platform.value, "session": session.to_dict()}

    @router.get("/status")
    def auth_status(request: Request, response: Response, state: AppState = Depends(get_state)):
        """Whether credentials are configured and the browser holds a usable session."""
        try:
            state.client_for(platform)
        except ConfigurationError as e:
            return {"platform": platform.value, "configured": False, "logged_in": False, "missing": e.missing}
        logged_in = resolve_session(request, response, platform, state) is not None
        return {"platform": platform.value, "configured": True, "logged_in": logged_in}

    @router.post("/logout")
    def logout(response: Response):
        """Clear the token cookies so the user is logged out."""
        clear_session_cookies(response, platform)
        return {"ok": True}

    return router
