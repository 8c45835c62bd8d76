from fastapi import APIRouter, Depends

from schemas.user_schemas import SessionIdentity
from services.auth_service import SessionIdentityProvider, get_session

router = APIRouter(prefix="/auth")


@router.post("/session")
def start_session(identity: SessionIdentity, session: SessionIdentityProvider = Depends(get_session)):
    # identity comes from the external auth service, we only keep it
    session.set(identity)
    return {"status": "success", "email": identity.email}


@router.delete("/session")
def end_session(session: SessionIdentityProvider = Depends(get_session)):
    if session.clear():
        return {"status": "success"}
    return {"status": "failure", "message": "No active session"}
