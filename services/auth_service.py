import logging
from typing import Optional

from fastapi import HTTPException, Request

from schemas.user_schemas import SessionIdentity

logger = logging.getLogger("cumall.auth")


class SessionIdentityProvider:
    # holds whatever identity the auth collaborator handed us for this session
    def __init__(self, identity: Optional[SessionIdentity] = None):
        self._identity = identity

    def set(self, identity: SessionIdentity):
        self._identity = identity
        logger.info("Session identity set for %s", identity.email)

    def clear(self) -> bool:
        if self._identity is None:
            return False
        logger.info("Session identity cleared for %s", self._identity.email)
        self._identity = None
        return True

    def current(self) -> Optional[SessionIdentity]:
        return self._identity

    __call__ = current


def get_session(request: Request) -> SessionIdentityProvider:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=500, detail="SessionIdentityProvider is not configured")
    return session
