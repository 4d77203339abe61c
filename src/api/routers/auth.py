import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_current_account, get_session_issuer
from auth.session_issuer import SessionIssuer
from taskmind.models import Account, AuthOut, Credentials, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthOut)
async def signup(
    payload: Credentials,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> AuthOut:
    """Register with email and password; 409 if the email is taken."""
    result = await issuer.signup(payload.email, payload.password)
    return AuthOut.from_result(result)


@router.post("/login", response_model=AuthOut)
async def login(
    payload: Credentials,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> AuthOut:
    result = await issuer.login(payload.email, payload.password)
    return AuthOut.from_result(result)


@router.get("/me", response_model=UserOut)
async def me(account: Account = Depends(get_current_account)) -> UserOut:
    return UserOut(id=account.id, email=account.email)
