"""
Record store client.

Thin request layer over the PostgREST surface of the external table store
(Supabase). Every method addresses one named table and raises
RecordStoreError on transport failures or non-success responses; callers
decide what a failure means for them.
"""

import re
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence

import httpx

from app.config import Settings
from app.utils.logging import get_logger
from app.utils.metrics import track_api_call
from app.utils.resilience import TransientError, retry_with_backoff

logger = get_logger(__name__)

_CONTENT_RANGE_TOTAL = re.compile(r"/(\d+)$")


class RecordStoreError(Exception):
    """Raised when the record store rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RecordStoreUnavailableError(RecordStoreError, TransientError):
    """Transport failure, throttling or 5xx from the record store."""
    pass


class Filter(NamedTuple):
    """A single PostgREST column predicate."""

    column: str
    operator: str
    value: Any

    def to_param(self) -> tuple:
        if self.operator == "in":
            rendered = "(" + ",".join(str(v) for v in self.value) + ")"
        else:
            rendered = str(self.value)
        return self.column, f"{self.operator}.{rendered}"


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


class RecordStoreClient:
    """Request/response client for the external table store."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        interactive_timeout: float = 2.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Project URL of the store (without /rest/v1)
            api_key: Service credential, sent as apikey and bearer token
            timeout: Per-request timeout in seconds
            interactive_timeout: Timeout of single-attempt calls made while an
                interaction is waiting for its acknowledgment
            transport: Optional httpx transport, used by tests
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._interactive_timeout = interactive_timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "RecordStoreClient":
        return cls(
            settings.supabase_url or "",
            settings.supabase_service_role_key or "",
            timeout=settings.http_timeout_seconds,
            interactive_timeout=settings.interaction_store_timeout_seconds,
            transport=transport,
        )

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Sequence[tuple] = (),
        json: Any = None,
        prefer: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        path = f"/rest/v1/{table}"

        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or self._timeout,
            transport=self._transport,
        ) as client:
            async with track_api_call(None, "record_store", logger, method, path) as call:
                try:
                    response = await client.request(
                        method,
                        path,
                        params=list(params),
                        json=json,
                        headers=self._headers(prefer),
                    )
                except httpx.HTTPError as e:
                    raise RecordStoreUnavailableError(
                        f"{method} {path} failed: {e}"
                    ) from e

                call["status_code"] = response.status_code

                if response.status_code == 429 or response.status_code >= 500:
                    raise RecordStoreUnavailableError(
                        f"{method} {path} returned {response.status_code}",
                        status_code=response.status_code,
                    )
                if response.is_error:
                    raise RecordStoreError(
                        f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                        status_code=response.status_code,
                    )

        return response

    @staticmethod
    def _filter_params(filters: Iterable[Filter]) -> List[tuple]:
        return [f.to_param() for f in filters]

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            request = response.request
            raise RecordStoreError(
                f"{request.method} {request.url.path} returned invalid JSON",
                status_code=response.status_code,
            ) from e

    async def _select(
        self,
        table: str,
        filters: Iterable[Filter],
        columns: str,
        order: Optional[Sequence[str]],
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        params = self._filter_params(filters)
        params.append(("select", columns))
        if order:
            params.append(("order", ",".join(order)))

        response = await self._request("GET", table, params, timeout=timeout)
        return self._decode(response)

    @retry_with_backoff(max_retries=3, base_delay=0.5, max_delay=5.0)
    async def select(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        columns: str = "*",
        order: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read rows matching all filters.

        Args:
            table: Table name
            filters: Column predicates, combined with AND
            columns: PostgREST select list
            order: Ordering terms such as "business_day.asc"

        Returns:
            Matching rows
        """
        return await self._select(table, filters, columns, order)

    async def select_once(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        columns: str = "*",
        order: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read rows with a single attempt bounded by the interactive timeout.

        Used while a chat interaction waits for its acknowledgment, where a
        backoff loop would outlast the acknowledgment deadline.
        """
        return await self._select(table, filters, columns, order, timeout=self._interactive_timeout)

    async def insert(
        self,
        table: str,
        row: Dict[str, Any],
        returning: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """
        Insert one row.

        Args:
            table: Table name
            row: Column values, JSON serializable
            returning: Ask the store to return the created row

        Returns:
            The created row (including its store-assigned id) when
            ``returning`` is set, otherwise None
        """
        prefer = "return=representation" if returning else "return=minimal"
        response = await self._request("POST", table, json=row, prefer=prefer)
        if not returning:
            return None

        rows = self._decode(response)
        return rows[0] if rows else None

    async def update(
        self,
        table: str,
        filters: Iterable[Filter],
        values: Dict[str, Any],
    ) -> None:
        """Overwrite ``values`` on every row matching the filters."""
        params = self._filter_params(filters)
        if not params:
            raise ValueError("Refusing to update without a filter")
        await self._request("PATCH", table, params, json=values, prefer="return=minimal")

    async def delete(self, table: str, filters: Iterable[Filter]) -> None:
        """Delete every row matching the filters."""
        params = self._filter_params(filters)
        if not params:
            raise ValueError("Refusing to delete without a filter")
        await self._request("DELETE", table, params, prefer="return=minimal")

    @retry_with_backoff(max_retries=3, base_delay=0.5, max_delay=5.0)
    async def count(self, table: str, filters: Iterable[Filter] = ()) -> int:
        """
        Count rows matching the filters with a HEAD request.

        Returns:
            Exact row count taken from the Content-Range header
        """
        response = await self._request(
            "HEAD", table, self._filter_params(filters), prefer="count=exact"
        )
        content_range = response.headers.get("content-range", "")
        match = _CONTENT_RANGE_TOTAL.search(content_range)
        return int(match.group(1)) if match else 0
