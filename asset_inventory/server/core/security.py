"""
API key authentication and scope checks.

Read endpoints require the ``read`` scope and write endpoints the ``write``
scope. When no API keys are configured access control is disabled, which is
how tests and local development run.
"""

from __future__ import annotations

import hashlib
from typing import Annotated, Callable, List, Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from asset_inventory.core.logging_config import get_logger

from .config import Settings, get_settings, settings
from .constant import ANONYMOUS_ACTOR, READ_SCOPE, WRITE_SCOPE

logger = get_logger(__name__)

api_key_header = APIKeyHeader(name=settings.api_key_header, auto_error=False)


class AuthContext:
    """Authentication context containing the acting credential and its scopes."""

    def __init__(self, actor: str, scopes: List[str]):
        """Initialize authentication context.

        Args:
            actor: Label recorded as ``changed_by`` in the version history
            scopes: List of authorized scopes for this context
        """
        self.actor = actor
        self.scopes = scopes


def actor_label(api_key: str) -> str:
    """Stable, non-reversible label for an API key."""
    return f"api-key:{hashlib.sha256(api_key.encode()).hexdigest()[:8]}"


def _extract_credential(request: Request, api_key: Optional[str]) -> Optional[str]:
    if api_key:
        return api_key
    authz = request.headers.get("Authorization")
    if isinstance(authz, str) and authz.lower().startswith("bearer "):
        return authz.split(" ", 1)[1].strip() or None
    return None


def require_scopes(*required_scopes: str) -> Callable:
    """Build a dependency that authenticates the caller and checks scopes.

    Args:
        required_scopes: Scopes the caller must hold

    Returns:
        A FastAPI dependency resolving to an ``AuthContext``
    """

    async def _dep(
        request: Request,
        api_key: Optional[str] = Security(api_key_header),
        config: Settings = Depends(get_settings),
    ) -> AuthContext:
        if not config.auth_enabled:
            return AuthContext(actor=ANONYMOUS_ACTOR, scopes=[READ_SCOPE, WRITE_SCOPE])

        credential = _extract_credential(request, api_key)
        if not credential:
            logger.info(f"Rejected {request.method} {request.url.path}: missing API key")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

        scopes = config.api_keys.get(credential)
        if scopes is None:
            logger.warning(f"Rejected {request.method} {request.url.path}: invalid API key")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

        missing = [scope for scope in required_scopes if scope not in scopes]
        if missing:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {actor_label(credential)} lacks scope(s) {missing}"
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient scope")

        return AuthContext(actor=actor_label(credential), scopes=list(scopes))

    return _dep


require_read = require_scopes(READ_SCOPE)
require_write = require_scopes(WRITE_SCOPE)

ReadAuthDep = Annotated[AuthContext, Depends(require_read)]
WriteAuthDep = Annotated[AuthContext, Depends(require_write)]
