import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

import asyncpg

from storage import db
from taskmind.errors import ConflictError, StoreError
from taskmind.models import Account

logger = logging.getLogger(__name__)


class AccountStore(ABC):
    @abstractmethod
    async def create(self, email: str, password_hash: str) -> Account:
        """Insert an account; ConflictError when the email is taken."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, account_id: int) -> Optional[Account]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Exact, case-sensitive lookup."""
        raise NotImplementedError


class InMemoryAccountStore(AccountStore):
    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._ids = itertools.count(1)

    async def create(self, email: str, password_hash: str) -> Account:
        if await self.get_by_email(email) is not None:
            raise ConflictError()
        account = Account(
            id=next(self._ids),
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._accounts[account.id] = account
        return account

    async def get(self, account_id: int) -> Optional[Account]:
        return self._accounts.get(account_id)

    async def get_by_email(self, email: str) -> Optional[Account]:
        for account in self._accounts.values():
            if account.email == email:
                return account
        return None


class PostgresAccountStore(AccountStore):
    async def create(self, email: str, password_hash: str) -> Account:
        query = """
            INSERT INTO accounts (email, password_hash)
            VALUES ($1, $2)
            RETURNING id, email, password_hash, created_at
        """
        try:
            row = await db.fetchrow(query, email, password_hash)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError() from e
        except asyncpg.PostgresError as e:
            logger.error(f"Failed to create account: {e}")
            raise StoreError(str(e)) from e
        logger.info(f"Created account {row['id']}")
        return Account(**dict(row))

    async def get(self, account_id: int) -> Optional[Account]:
        try:
            row = await db.fetchrow(
                "SELECT id, email, password_hash, created_at FROM accounts WHERE id = $1",
                account_id,
            )
        except asyncpg.PostgresError as e:
            raise StoreError(str(e)) from e
        return Account(**dict(row)) if row else None

    async def get_by_email(self, email: str) -> Optional[Account]:
        try:
            row = await db.fetchrow(
                "SELECT id, email, password_hash, created_at FROM accounts WHERE email = $1",
                email,
            )
        except asyncpg.PostgresError as e:
            raise StoreError(str(e)) from e
        return Account(**dict(row)) if row else None
