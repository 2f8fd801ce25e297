import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

from lexdesk.sdk.api import ApiClient, ApiClientError
from lexdesk.sdk.cache import TTLCache
from lexdesk.sdk.normalize import normalize_collection, unwrap

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "temp_"


class ResourceStore:
    """Local snapshot of one API collection.

    Mutations are applied to ``items`` before the request is sent; if the
    request fails the snapshot is re-fetched from the server and the error is
    re-raised. Between the two the snapshot may disagree with the server.
    """

    path = ""
    collection_key: Optional[str] = None

    def __init__(self, api: ApiClient, cache: Optional[TTLCache] = None, cache_ttl: Optional[float] = None):
        self.api = api
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.items: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        self._lock = threading.RLock()

    @property
    def cache_key(self) -> str:
        return f"collection:{self.path}"

    def _index(self, item_id: str) -> Optional[int]:
        for i, item in enumerate(self.items):
            if item.get("id") == item_id:
                return i
        return None

    def _replace(self, item_id: str, item: Dict[str, Any]):
        with self._lock:
            index = self._index(item_id)
            if index is None:
                self.items.append(item)
            else:
                self.items[index] = item

    def _set_items(self, items: List[Dict[str, Any]]):
        with self._lock:
            self.items = items
        if self.cache is not None:
            self.cache.set(self.cache_key, list(items), self.cache_ttl)

    def _rollback(self):
        """Restore server truth after a failed optimistic mutation."""
        try:
            self.fetch()
        except ApiClientError:
            logger.exception("Failed to refresh %s after a failed mutation", self.path)

    def _fail(self, error: ApiClientError, rollback: bool = False):
        self.error = error.message
        if rollback:
            self._rollback()
            # The refresh clears the error on success; keep the original
            self.error = error.message
        raise error

    # Reads

    def fetch(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self.loading = True
        self.error = None
        try:
            body = self.api.get(self.path, params=params)
            self._set_items(normalize_collection(body, self.collection_key))
            return self.items
        except ApiClientError as e:
            self._fail(e)
        finally:
            self.loading = False

    def get(self, item_id: str) -> Dict[str, Any]:
        self.error = None
        try:
            item = unwrap(self.api.get(f"{self.path}/{item_id}"))
        except ApiClientError as e:
            self._fail(e)
        self._replace(item_id, item)
        return item

    def cached_items(self) -> Optional[List[Dict[str, Any]]]:
        if self.cache is None:
            return None
        return self.cache.get(self.cache_key)

    # Mutations

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        temp_id = f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"
        with self._lock:
            self.items.append({**data, "id": temp_id})
        self.error = None
        try:
            created = unwrap(self.api.post(self.path, json=data))
        except ApiClientError as e:
            self._fail(e, rollback=True)
        self._replace(temp_id, created)
        return created

    def update(self, item_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            index = self._index(item_id)
            if index is not None:
                self.items[index] = {**self.items[index], **data}
        self.error = None
        try:
            updated = unwrap(self.api.put(f"{self.path}/{item_id}", json=data))
        except ApiClientError as e:
            self._fail(e, rollback=True)
        self._replace(item_id, updated)
        return updated

    def delete(self, item_id: str) -> bool:
        with self._lock:
            self.items = [item for item in self.items if item.get("id") != item_id]
        self.error = None
        try:
            self.api.delete(f"{self.path}/{item_id}")
        except ApiClientError as e:
            self._fail(e, rollback=True)
        return True

    def _action(self, method: str, item_id: str, suffix: str, json: Any = None) -> Dict[str, Any]:
        """Run an entity action endpoint and store the returned entity."""
        self.error = None
        try:
            body = self.api.request(method, f"{self.path}/{item_id}/{suffix}", json=json)
        except ApiClientError as e:
            self._fail(e, rollback=True)
        item = unwrap(body)
        self._replace(item_id, item)
        return item
