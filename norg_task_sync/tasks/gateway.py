"""Google Tasks REST gateway using httpx."""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..core.exceptions import TasksApiError
from ..utils.http import RetryPolicy, with_retry
from .auth import Session

JsonDict = Dict[str, Any]


def _error_message(response: httpx.Response) -> str:
    """Extract the API's error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or response.text
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return response.reason_phrase


class TasksGateway:
    """Thin client for the Google Tasks v1 API.

    Returns the service's JSON objects unchanged; projection into domain
    models happens in ``TasksManager``.
    """

    BASE_URL = "https://tasks.googleapis.com/tasks/v1"
    PAGE_SIZE = 100
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        session: Session,
        transport: Optional[httpx.BaseTransport] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self.client = httpx.Client(
            base_url=self.BASE_URL,
            headers=session.auth_headers(),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "TasksGateway":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[JsonDict] = None,
        json: Optional[JsonDict] = None,
    ) -> Optional[JsonDict]:
        @with_retry(self.retry_policy, sleep=self._sleep)
        def send() -> httpx.Response:
            response = self.client.request(method, path, params=params, json=json)
            response.raise_for_status()
            return response

        self.logger.debug(f"{method} {path} params={params}")
        try:
            response = send()
        except httpx.HTTPStatusError as exc:
            raise TasksApiError(exc.response.status_code, _error_message(exc.response)) from exc

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _list_pages(self, path: str, params: JsonDict) -> List[JsonDict]:
        items: List[JsonDict] = []
        page_token: Optional[str] = None
        while True:
            page_params = dict(params)
            if page_token:
                page_params["pageToken"] = page_token
            page = self._request("GET", path, params=page_params) or {}
            page_items = page.get("items") or []
            self.logger.debug(f"Got {len(page_items)} items from {path}")
            items.extend(page_items)
            page_token = page.get("nextPageToken")
            if not page_token:
                return items

    # Task lists
    def list_tasklists(self) -> List[JsonDict]:
        return self._list_pages("/users/@me/lists", {"maxResults": self.PAGE_SIZE})

    # Tasks
    def list_tasks(self, tasklist: str) -> List[JsonDict]:
        """All tasks of a list, completed and hidden ones included."""
        params = {
            "showCompleted": "true",
            "showHidden": "true",
            "maxResults": self.PAGE_SIZE,
        }
        return self._list_pages(f"/lists/{tasklist}/tasks", params)

    def get_task(self, tasklist: str, task_id: str) -> JsonDict:
        return self._request("GET", f"/lists/{tasklist}/tasks/{task_id}") or {}

    def insert_task(self, tasklist: str, body: JsonDict) -> JsonDict:
        return self._request("POST", f"/lists/{tasklist}/tasks", json=body) or {}

    def update_task(self, tasklist: str, task_id: str, body: JsonDict) -> JsonDict:
        return self._request("PUT", f"/lists/{tasklist}/tasks/{task_id}", json=body) or {}

    def delete_task(self, tasklist: str, task_id: str) -> None:
        self._request("DELETE", f"/lists/{tasklist}/tasks/{task_id}")
