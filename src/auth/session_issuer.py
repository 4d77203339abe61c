"""
Signup, login and bearer-token verification.

Passwords are stored only as bcrypt hashes (passlib). Tokens are HS256 JWTs
whose payload carries nothing but the account id and issue time, so
verifying one needs only the token and the shared secret.
"""

import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from storage.account_store import AccountStore
from taskmind.errors import AuthError, ConflictError
from taskmind.models import Account, AuthResult

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "taskmind-dev-secret-change-me"
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = "HS256"
# Unset means tokens never expire.
JWT_EXPIRATION_HOURS = os.getenv("JWT_EXPIRATION_HOURS", "").strip()
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

if not JWT_SECRET:
    logger.warning("JWT_SECRET not set. Using the development secret.")
    JWT_SECRET = DEV_JWT_SECRET


def build_password_context(rounds: int = BCRYPT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def issue_token(
    account_id: int,
    secret: str = JWT_SECRET,
    expires_in: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {"id": account_id, "iat": now}
    if expires_in is not None:
        payload["exp"] = now + expires_in
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: Optional[str], secret: str = JWT_SECRET) -> int:
    """Return the account id carried by ``token`` or raise AuthError."""
    if not token:
        raise AuthError("Invalid token")
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("Invalid token") from e

    account_id = payload.get("id")
    if not isinstance(account_id, int) or isinstance(account_id, bool):
        raise AuthError("Invalid token")
    return account_id


class SessionIssuer:
    def __init__(
        self,
        accounts: AccountStore,
        secret: str = JWT_SECRET,
        pwd_context: Optional[CryptContext] = None,
        expires_in: Optional[timedelta] = None,
    ):
        self.accounts = accounts
        self.secret = secret
        self.pwd_context = pwd_context or build_password_context()
        if expires_in is None and JWT_EXPIRATION_HOURS:
            expires_in = timedelta(hours=float(JWT_EXPIRATION_HOURS))
        self.expires_in = expires_in

    def _result(self, account: Account) -> AuthResult:
        token = issue_token(account.id, self.secret, self.expires_in)
        return AuthResult(token=token, account_id=account.id, email=account.email)

    async def signup(self, email: str, password: str) -> AuthResult:
        if await self.accounts.get_by_email(email) is not None:
            raise ConflictError()

        # bcrypt blocks for the whole hash
        password_hash = await asyncio.to_thread(self.pwd_context.hash, password)
        account = await self.accounts.create(email, password_hash)
        logger.info(f"Account {account.id} signed up")
        return self._result(account)

    async def login(self, email: str, password: str) -> AuthResult:
        account = await self.accounts.get_by_email(email)
        if account is None:
            raise AuthError()

        ok = await asyncio.to_thread(self.pwd_context.verify, password, account.password_hash)
        if not ok:
            raise AuthError()

        return self._result(account)

    async def authenticate(self, token: Optional[str]) -> Account:
        """Verify ``token`` and load the account it names."""
        account_id = verify_token(token, self.secret)
        account = await self.accounts.get(account_id)
        if account is None:
            raise AuthError("Invalid token")
        return account
