import logging

from app.session import LedgerSession
from config import DOCUMENT_PATH, SYNC_DEBOUNCE_SECONDS, USER_ID
from infrastructure.document_store import JsonFileDocumentStore

logger = logging.getLogger(__name__)


def bootstrap_store(document_path: str | None = None) -> JsonFileDocumentStore:
    path = document_path or DOCUMENT_PATH
    logger.info("Document store selected: JSON file %s", path)
    return JsonFileDocumentStore(path)


def bootstrap_session(
    document_path: str | None = None,
    user_id: str | None = None,
    debounce_seconds: float = SYNC_DEBOUNCE_SECONDS,
) -> LedgerSession:
    """Build a session bound to the configured store; call ``start()`` (or use ``with``) to load it."""
    store = bootstrap_store(document_path)
    return LedgerSession(store, user_id or USER_ID, debounce_seconds=debounce_seconds)
