"""Per-entity stores built on ResourceStore."""
import itertools
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from lexdesk.sdk.api import ApiClientError
from lexdesk.sdk.normalize import normalize_collection, unwrap
from lexdesk.sdk.store import ResourceStore

logger = logging.getLogger(__name__)


class ClientStore(ResourceStore):
    path = "/api/clients"
    collection_key = "clients"

    def fetch_with_retry(self, attempts: int = 3, delay: float = 1.0,
                         sleep: Callable[[float], None] = time.sleep,
                         params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Initial load: retry transient failures, then fall back to the cache."""
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                return self.fetch(params=params)
            except ApiClientError as e:
                last_error = e
                if not e.retryable:
                    break
                logger.warning("Client fetch attempt %d/%d failed: %s", attempt, attempts, e.message)
                if attempt < attempts:
                    sleep(delay)

        cached = self.cached_items()
        if cached is not None:
            logger.info("Serving %d cached clients", len(cached))
            with self._lock:
                self.items = list(cached)
            self.error = last_error.message
            return self.items
        raise last_error

    def delete(self, item_id: str, soft: bool = False) -> bool:
        """Hard delete drops the client; soft delete keeps it with ``status`` False."""
        if not soft:
            return super().delete(item_id)

        with self._lock:
            index = self._index(item_id)
            if index is not None:
                self.items[index] = {**self.items[index], "status": False}
        self.error = None
        try:
            self.api.delete(f"{self.path}/{item_id}", params={"soft": "true"})
        except ApiClientError as e:
            self._fail(e, rollback=True)
        return True

    def get_status(self, item_id: str) -> Dict[str, Any]:
        return unwrap(self.api.get(f"{self.path}/status/{item_id}"))


class CaseStore(ResourceStore):
    path = "/api/cases"
    collection_key = "cases"

    def add_document(self, item_id: str, title: str, file_url: str) -> Dict[str, Any]:
        return self._action("POST", item_id, "documents", json={"title": title, "file_url": file_url})


class InvoiceStore(ResourceStore):
    path = "/api/invoices"

    def create(self, data: Dict[str, Any], attempts: int = 3) -> Dict[str, Any]:
        """Create, retrying when a concurrent create took the same number."""
        for attempt in range(1, attempts + 1):
            try:
                return super().create(data)
            except ApiClientError as e:
                if e.status != 409 or attempt == attempts:
                    raise
                logger.warning("Invoice number collision, retrying (%d/%d)", attempt, attempts)

    def record_payment(self, item_id: str, amount: float) -> Dict[str, Any]:
        return self._action("POST", item_id, "payments", json={"amount": amount})

    def set_status(self, item_id: str, status: str) -> Dict[str, Any]:
        return self._action("PATCH", item_id, "status", json={"status": status})

    def mark_viewed(self, item_id: str) -> Dict[str, Any]:
        return self._action("PATCH", item_id, "mark-viewed")

    def for_client(self, client_id: str) -> List[Dict[str, Any]]:
        return normalize_collection(self.api.get(f"{self.path}/client/{client_id}"))


class ServiceStore(ResourceStore):
    path = "/api/services"


class AppointmentStore(ResourceStore):
    path = "/api/appointments"

    def set_status(self, item_id: str, status: str) -> Dict[str, Any]:
        return self._action("PATCH", item_id, "status", json={"status": status})

    def for_client(self, client_id: str) -> List[Dict[str, Any]]:
        return normalize_collection(self.api.get(f"{self.path}/client/{client_id}"))


class TaskStore(ResourceStore):
    path = "/api/tasks"

    def toggle(self, item_id: str) -> Dict[str, Any]:
        with self._lock:
            index = self._index(item_id)
            if index is not None:
                task = self.items[index]
                completed = not task.get("completed", False)
                self.items[index] = {
                    **task,
                    "completed": completed,
                    "status": "Completed" if completed else "In Progress",
                }
        return self._action("PATCH", item_id, "toggle")


class TeamMemberStore(ResourceStore):
    path = "/api/team-members"

    @staticmethod
    def _form(data: Dict[str, Any]) -> Dict[str, str]:
        form = {}
        for key, value in data.items():
            if value is None:
                continue
            form[key] = ",".join(value) if isinstance(value, list) else str(value)
        return form

    def _send(self, method: str, path: str, data: Dict[str, Any],
              image: Optional[Tuple[str, bytes, str]]) -> Dict[str, Any]:
        if image is None:
            return unwrap(self.api.request(method, path, json=data))
        return unwrap(self.api.request(method, path, data=self._form(data), files={"profile_image": image}))

    def create(self, data: Dict[str, Any], image: Optional[Tuple[str, bytes, str]] = None) -> Dict[str, Any]:
        """Create a member; ``image`` is ``(filename, content, content_type)``."""
        self.error = None
        try:
            created = self._send("POST", self.path, data, image)
        except ApiClientError as e:
            self._fail(e)
        self._replace(created["id"], created)
        return created

    def update(self, item_id: str, data: Dict[str, Any],
               image: Optional[Tuple[str, bytes, str]] = None) -> Dict[str, Any]:
        self.error = None
        try:
            updated = self._send("PUT", f"{self.path}/{item_id}", data, image)
        except ApiClientError as e:
            self._fail(e, rollback=True)
        self._replace(item_id, updated)
        return updated

    def by_role(self, role: str) -> List[Dict[str, Any]]:
        return normalize_collection(self.api.get(f"{self.path}/role/{role}"))


class NotificationStore(ResourceStore):
    """Notifications with background polling.

    Every fetch takes a sequence number when it starts; a response is only
    applied if no later-started fetch has been applied already.
    """

    path = "/api/notifications"
    collection_key = "notifications"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.unread_count = 0
        self._sequence = itertools.count(1)
        self._applied_sequence = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def fetch(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        sequence = next(self._sequence)
        self.loading = True
        try:
            body = self.api.get(self.path, params=params)
        except ApiClientError as e:
            self.loading = False
            self._fail(e)

        with self._lock:
            if sequence < self._applied_sequence:
                logger.debug("Discarding stale notification poll %d", sequence)
                return self.items
            self._applied_sequence = sequence
            self._set_items(normalize_collection(body, self.collection_key))
            page = unwrap(body)
            if isinstance(page, dict):
                self.unread_count = page.get("unread_count", 0)
            self.error = None
            self.loading = False
        return self.items

    def mark_read(self, item_id: str) -> Dict[str, Any]:
        index = self._index(item_id)
        was_unread = index is not None and not self.items[index].get("is_read")
        item = self._action("PATCH", item_id, "read")
        if was_unread:
            self.unread_count = max(self.unread_count - 1, 0)
        return item

    def mark_all_read(self) -> int:
        body = unwrap(self.api.patch(f"{self.path}/read-all"))
        with self._lock:
            self.items = [{**item, "is_read": True} for item in self.items]
        self.unread_count = 0
        return body["modified_count"]

    def clear_read(self) -> int:
        body = unwrap(self.api.delete(f"{self.path}/clear/read"))
        with self._lock:
            self.items = [item for item in self.items if not item.get("is_read")]
        return body["deleted_count"]

    # Polling

    def _poll(self, interval: float):
        while not self._stop.wait(interval):
            try:
                self.fetch()
            except ApiClientError as e:
                logger.warning("Notification poll failed: %s", e.message)

    def start_polling(self, interval: float = 30.0):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._poll, args=(interval,), daemon=True)
        self._thread.start()

    def stop_polling(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
