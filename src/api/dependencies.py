from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api import state
from auth.session_issuer import SessionIssuer
from services.task_service import TaskService
from taskmind.models import Account

security = HTTPBearer(auto_error=False)


def get_session_issuer() -> SessionIssuer:
    return state.session_issuer


def get_task_service() -> TaskService:
    return state.task_service


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> Account:
    """Resolve the bearer token to an account; AuthError (401) otherwise."""
    token = credentials.credentials if credentials else None
    return await issuer.authenticate(token)
