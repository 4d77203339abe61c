import logging
import os
from typing import Optional

from auth.session_issuer import SessionIssuer
from enrichment.task_enricher import TaskEnricher
from llm.llm_client import LLMClient, build_provider
from llm.providers.base import LLMProvider
from services.task_service import TaskService
from storage.account_store import AccountStore, InMemoryAccountStore, PostgresAccountStore
from storage.task_store import InMemoryTaskStore, PostgresTaskStore, TaskStore

logger = logging.getLogger(__name__)

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini")

# Global instances, rebuilt at startup once the backend is known
store_backend: str = "in-memory"
account_store: Optional[AccountStore] = None
task_store: Optional[TaskStore] = None
session_issuer: Optional[SessionIssuer] = None
task_service: Optional[TaskService] = None


def _load_provider() -> Optional[LLMProvider]:
    try:
        return build_provider(LLM_PROVIDER)
    except (RuntimeError, ValueError) as e:
        logger.warning(f"LLM provider '{LLM_PROVIDER}' unavailable, AI enrichment disabled: {e}")
        return None


def configure(use_database: bool = False, provider: Optional[LLMProvider] = None) -> None:
    """Wire stores, the session issuer and the task service together."""
    global store_backend, account_store, task_store, session_issuer, task_service

    if use_database:
        store_backend = "postgres"
        account_store = PostgresAccountStore()
        task_store = PostgresTaskStore()
    else:
        store_backend = "in-memory"
        account_store = InMemoryAccountStore()
        task_store = InMemoryTaskStore()

    llm = LLMClient(provider=provider if provider is not None else _load_provider())
    session_issuer = SessionIssuer(account_store)
    task_service = TaskService(task_store, TaskEnricher(llm))
    logger.info(f"Configured {store_backend} stores")
