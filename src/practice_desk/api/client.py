"""Practice API client with session authentication."""

import asyncio
from typing import Any, cast

import httpx
import structlog

from practice_desk.api.errors import (
    AuthenticationError,
    NotFoundError,
    PracticeAPIError,
    RateLimitError,
)
from practice_desk.config import get_settings
from practice_desk.models import Task, TaskStatus, TimeEntry, to_json_value

logger = structlog.get_logger(__name__)


class PracticeAPIClient:
    """Async client for the practice management REST API.

    The backend authenticates with a session cookie, which the underlying
    ``httpx.AsyncClient`` keeps in its cookie jar between requests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        api_prefix: str | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.api_prefix = "/" + (api_prefix or settings.api_prefix).strip("/")
        self._username = username or settings.username
        self._password = password or settings.password.get_secret_value()
        self._timeout = settings.timeout
        self._max_retries = settings.max_retries

        self._user: dict[str, Any] | None = None
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PracticeAPIClient":
        await self.login()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}/{path.lstrip('/')}"

    # === Authentication ===

    async def login(self) -> dict[str, Any]:
        """Open a session for the configured firm user."""
        client = await self._get_client()

        try:
            response = await client.post(
                self._url("/auth/login/firm"),
                json={"email": self._username, "password": self._password},
            )
        except httpx.RequestError as e:
            raise PracticeAPIError(f"Login request failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError("Invalid credentials", status_code=401)
        if response.status_code >= 400:
            self._raise_for_response(response)

        data_raw = self._decode(response)
        if not isinstance(data_raw, dict):
            raise PracticeAPIError("Invalid login response format")
        data = cast(dict[str, Any], data_raw)
        self._user = data.get("user") or {}

        logger.info(
            "logged_in",
            user=self._user.get("email", self._username),
            tenant_id=self._user.get("tenantId"),
        )
        return data

    async def _ensure_authenticated(self) -> None:
        """Log in once before the first request."""
        async with self._lock:
            if self._user is None:
                await self.login()

    @property
    def current_user(self) -> dict[str, Any] | None:
        """User record returned by the last login."""
        return self._user

    async def get_me(self) -> dict[str, Any]:
        """Get the current session's user."""
        result = await self.get("/auth/me")
        if isinstance(result, dict):
            return result.get("user", result)
        return {}

    # === Generic Request Methods ===

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        retry_count: int = 0,
        relogged: bool = False,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make an authenticated API request."""
        await self._ensure_authenticated()
        client = await self._get_client()

        try:
            response = await client.request(
                method=method,
                url=self._url(path),
                params=params,
                json=to_json_value(json) if json is not None else None,
            )
        except httpx.RequestError as e:
            if retry_count < self._max_retries:
                await asyncio.sleep(2**retry_count)
                return await self._request(
                    method, path, params, json, retry_count + 1, relogged
                )
            raise PracticeAPIError(f"Request failed: {e}") from e

        if response.status_code == 401 and not relogged:
            # Session expired, log in again and replay once
            logger.debug("session_expired", path=path)
            await self.login()
            return await self._request(method, path, params, json, retry_count, True)

        if response.status_code >= 400:
            self._raise_for_response(response)

        return self._decode(response) if response.content else {}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise PracticeAPIError(
                "Invalid JSON response",
                status_code=response.status_code,
                details={"raw": response.text[:500] if response.text else "empty response"},
            ) from e

    @staticmethod
    def _raise_for_response(response: httpx.Response) -> None:
        try:
            error_detail = response.json() if response.content else {}
        except ValueError:
            error_detail = {
                "raw": response.text[:500] if response.text else "empty response"
            }

        if response.status_code == 401:
            raise AuthenticationError(
                "Not authenticated", status_code=401, details=error_detail
            )
        if response.status_code == 404:
            raise NotFoundError(
                "Resource not found", status_code=404, details=error_detail
            )
        if response.status_code == 429:
            try:
                retry_after = int(response.headers.get("Retry-After", "60"))
            except ValueError:
                # HTTP-date form
                retry_after = 60
            raise RateLimitError(
                f"Rate limited, retry after {retry_after}s",
                status_code=429,
                details={"retry_after": retry_after},
            )
        raise PracticeAPIError(
            f"API error: {response.status_code}",
            status_code=response.status_code,
            details=error_detail,
        )

    async def get(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make GET request."""
        return await self._request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make POST request."""
        return await self._request("POST", path, params=params, json=json)

    async def put(
        self, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make PUT request."""
        return await self._request("PUT", path, json=json)

    async def delete(self, path: str) -> dict[str, Any] | list[dict[str, Any]]:
        """Make DELETE request."""
        return await self._request("DELETE", path)

    @staticmethod
    def _extract_items(result: Any) -> list[dict[str, Any]]:
        """Return list of items from a list or paged response."""
        if isinstance(result, list):
            return result
        if isinstance(result, dict):
            items = result.get("items")
            if isinstance(items, list):
                return items
        return []

    # === Task Endpoints ===

    async def list_tasks(self, is_admin: bool | None = None) -> list[Task]:
        """List tasks for the current tenant."""
        params = {"isAdmin": str(is_admin).lower()} if is_admin is not None else None
        result = await self.get("/tasks", params=params)
        return [Task.from_api(item) for item in self._extract_items(result)]

    async def get_task(self, task_id: int) -> Task:
        """Get task by ID."""
        result = await self.get(f"/tasks/{task_id}")
        if not isinstance(result, dict):
            raise PracticeAPIError("Invalid task response format")
        return Task.from_api(result)

    async def create_task(self, data: dict[str, Any]) -> Task:
        """Create a new task."""
        result = await self.post("/tasks", json=data)
        if not isinstance(result, dict):
            raise PracticeAPIError("Invalid task response format")
        return Task.from_api(result)

    async def update_task(self, task_id: int, data: dict[str, Any]) -> Task:
        """Update task fields."""
        result = await self.put(f"/tasks/{task_id}", json=data)
        if not isinstance(result, dict):
            raise PracticeAPIError("Invalid task response format")
        return Task.from_api(result)

    async def update_task_status(self, task_id: int, status_id: int) -> Task:
        """Move a task to another status."""
        return await self.update_task(task_id, {"statusId": status_id})

    async def delete_task(self, task_id: int) -> None:
        """Delete a task."""
        await self.delete(f"/tasks/{task_id}")

    # === Setup Endpoints ===

    async def list_task_statuses(self) -> list[TaskStatus]:
        """List the tenant's configured task statuses."""
        result = await self.get("/setup/task-statuses")
        return [TaskStatus.from_api(item) for item in self._extract_items(result)]

    # === Invoice Endpoints ===

    async def list_invoices(self, status: str | None = None) -> list[dict[str, Any]]:
        """List invoices for the current tenant."""
        params = {"status": status} if status else None
        result = await self.get("/finance/invoices", params=params)
        return self._extract_items(result)

    async def get_invoice(self, invoice_id: int) -> dict[str, Any]:
        """Get invoice by ID."""
        result = await self.get(f"/finance/invoices/{invoice_id}")
        return result if isinstance(result, dict) else {}

    async def create_invoice(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new invoice."""
        result = await self.post("/finance/invoices", json=data)
        return result if isinstance(result, dict) else {}

    async def update_invoice(self, invoice_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """Update an invoice."""
        result = await self.put(f"/finance/invoices/{invoice_id}", json=data)
        return result if isinstance(result, dict) else {}

    # === Time Tracking Endpoints ===

    async def list_time_entries(self, task_id: int) -> tuple[list[TimeEntry], int]:
        """List time entries for a task and the total logged seconds."""
        result = await self.get(f"/tasks/{task_id}/time-entries")
        if isinstance(result, dict):
            entries = result.get("timeEntries", [])
            total = int(result.get("totalDuration", 0))
        else:
            entries = result
            total = 0
        parsed = [TimeEntry.from_api(item) for item in entries]
        if not total:
            total = sum(entry.duration_seconds for entry in parsed)
        return parsed, total

    async def create_time_entry(
        self,
        task_id: int,
        duration_seconds: int,
        description: str | None = None,
        is_billable: bool = True,
    ) -> TimeEntry:
        """Log time against a task."""
        result = await self.post(
            f"/tasks/{task_id}/time-entries",
            json={
                "durationSeconds": duration_seconds,
                "description": description,
                "isBillable": is_billable,
            },
        )
        if not isinstance(result, dict):
            raise PracticeAPIError("Invalid time entry response format")
        return TimeEntry.from_api(result)
