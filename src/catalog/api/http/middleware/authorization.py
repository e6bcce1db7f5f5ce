"""Pluggable request authorization for the catalog routes."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from urllib.parse import urlencode

from fastapi import Depends, HTTPException, Request, status
from loguru import logger

from src.catalog.api.http.app_data import ApplicationDependencies


class AuthorizationPolicy(Protocol):
    def authorize(self, request: Request) -> bool: ...


class AllowAllPolicy:
    """Let every request through."""

    def authorize(self, request: Request) -> bool:
        return True


class PathAllowListPolicy:
    """Allow listed paths for everyone and everything else for admins only.

    Admin status is read from the ``admin`` key of the session, so the app
    needs a session middleware installed when this policy is enabled.
    """

    def __init__(self, allowed_paths: Iterable[str] = ("/", "/api"), session_key: str = "admin"):
        self.allowed_paths = frozenset(allowed_paths)
        self.session_key = session_key

    def authorize(self, request: Request) -> bool:
        if request.url.path in self.allowed_paths:
            return True
        session = request.scope.get("session") or {}
        return bool(session.get(self.session_key))


def get_authorization_policy(request: Request) -> AuthorizationPolicy:
    """Get the configured authorization policy."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.authorization_policy


async def require_authorization(
    request: Request,
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> None:
    """Redirect unauthorized requests to the login page."""
    if policy.authorize(request):
        return

    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    logger.bind(path=request.url.path).info("authorization.denied")
    raise HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Login required",
        headers={"Location": f"/login?{urlencode({'u': target})}"},
    )
