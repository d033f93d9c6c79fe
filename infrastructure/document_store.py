import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict | None], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """One JSON-like document per user key, with change subscriptions."""

    @abstractmethod
    def load(self, key: str) -> dict | None:
        """Return a copy of the stored document, or None if it does not exist."""
        pass

    @abstractmethod
    def save(self, key: str, document: dict, *, merge: bool = True) -> None:
        """Write the document; with merge, top-level keys not in ``document`` are kept."""
        pass

    @abstractmethod
    def subscribe(self, key: str, callback: Subscriber) -> Unsubscribe:
        """Deliver the current snapshot now and again after every change."""
        pass


class JsonFileDocumentStore(DocumentStore):
    _path_locks: dict[str, threading.RLock] = {}
    _path_locks_guard = threading.Lock()

    def __init__(self, file_path: str = "smartfin.json"):
        self._file_path = file_path
        abs_path = os.path.abspath(file_path)
        with self._path_locks_guard:
            if abs_path not in self._path_locks:
                self._path_locks[abs_path] = threading.RLock()
            self._lock = self._path_locks[abs_path]
        self._subscribers: dict[str, list[Subscriber]] = {}
        self._subscribers_guard = threading.Lock()

    @property
    def file_path(self) -> str:
        return self._file_path

    def _load_data(self) -> dict:
        with self._lock:
            try:
                with open(self._file_path, encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                return {"users": {}}
            except json.JSONDecodeError:
                logger.warning(
                    "Failed to parse JSON document store %s, using empty dataset",
                    self._file_path,
                )
                return {"users": {}}
        if not isinstance(data, dict) or not isinstance(data.get("users"), dict):
            logger.warning("Unexpected document store layout in %s, resetting", self._file_path)
            return {"users": {}}
        return data

    def _save_data(self, data: dict) -> None:
        with self._lock:
            directory = os.path.dirname(self._file_path) or "."
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".smartfin_", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._file_path)
            finally:
                try:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                except Exception:
                    logger.exception("Failed to cleanup temporary file during save: %s", tmp_path)

    def load(self, key: str) -> dict | None:
        document = self._load_data()["users"].get(key)
        if not isinstance(document, dict):
            return None
        return copy.deepcopy(document)

    def save(self, key: str, document: dict, *, merge: bool = True) -> None:
        with self._lock:
            data = self._load_data()
            existing = data["users"].get(key)
            if merge and isinstance(existing, dict):
                stored = {**existing, **document}
            else:
                stored = dict(document)
            data["users"][key] = stored
            self._save_data(data)
        logger.debug("Document saved key=%s keys=%s", key, sorted(stored))
        self._notify(key, copy.deepcopy(stored))

    def subscribe(self, key: str, callback: Subscriber) -> Unsubscribe:
        with self._subscribers_guard:
            self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            with self._subscribers_guard:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        callback(self.load(key))
        return unsubscribe

    def _notify(self, key: str, document: dict) -> None:
        with self._subscribers_guard:
            callbacks = list(self._subscribers.get(key, []))
        for callback in callbacks:
            try:
                callback(copy.deepcopy(document))
            except Exception:
                logger.exception("Document subscriber failed for key=%s", key)
