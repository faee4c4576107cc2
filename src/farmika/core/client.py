"""Storage API client - REST calls against the hosted backend."""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from farmika.core.config import settings

REST_PATH = "/rest/v1"

# =============================================================================
# Retry Configuration
# =============================================================================

MAX_RETRIES = 3
MIN_WAIT_SECONDS = 1
MAX_WAIT_SECONDS = 10

# Rows per page when paginating with Range headers
DEFAULT_PAGE_SIZE = 1000


# =============================================================================
# Exceptions
# =============================================================================


class StorageAPIError(Exception):
    """Non-retryable error from the storage API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(StorageAPIError):
    """Session rejected by the storage API (HTTP 401/403). Never retried."""

    pass


class RetryableError(Exception):
    """Transient error that should be retried (timeouts, connection errors, 5xx, 429)."""

    pass


# =============================================================================
# Client Functions
# =============================================================================


def _table_url(table: str) -> str:
    return f"{settings.supabase_url.rstrip('/')}{REST_PATH}/{table}"


def _headers(extra: dict | None = None) -> dict:
    token = settings.supabase_access_token or settings.supabase_api_key
    headers = {
        "apikey": settings.supabase_api_key,
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }
    if extra:
        headers.update(extra)
    return headers


async def rest_request(
    method: str,
    table: str,
    params: dict | None = None,
    json: dict | list | None = None,
    headers: dict | None = None,
) -> httpx.Response:
    """Execute a single REST request against a storage table.

    This is the low-level function that makes a single request without retry.
    For most use cases, prefer `rest_request_with_retry()`.

    Args:
        method: HTTP method (GET, PATCH, ...)
        table: Table name, e.g. "animals"
        params: Query parameters (PostgREST filter syntax)
        json: Optional JSON body
        headers: Extra headers (e.g. Range, Prefer)

    Returns:
        The HTTP response

    Raises:
        httpx.HTTPStatusError: If the server returns an error status
        httpx.TimeoutException, httpx.ConnectError: On transport failures
    """
    async with httpx.AsyncClient() as client:
        response = await client.request(
            method,
            _table_url(table),
            params=params,
            json=json,
            headers=_headers(headers),
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
        return response


@retry(
    retry=retry_if_exception_type(RetryableError),
    stop=stop_after_attempt(MAX_RETRIES),
    wait=wait_exponential_jitter(initial=MIN_WAIT_SECONDS, max=MAX_WAIT_SECONDS, jitter=2),
    reraise=True,
)
async def rest_request_with_retry(
    method: str,
    table: str,
    params: dict | None = None,
    json: dict | list | None = None,
    headers: dict | None = None,
) -> httpx.Response:
    """Execute a REST request with automatic retry on transient errors.

    Retries on:
    - Timeouts
    - Connection errors
    - HTTP 5xx errors and 429 (rate limited)

    Authentication failures (401/403) raise AuthenticationError immediately
    so callers can send the user to sign in again instead of retrying.

    Raises:
        RetryableError: If every attempt failed with a transient error
        AuthenticationError: If the session was rejected
        StorageAPIError: For any other client error
    """
    try:
        return await rest_request(method, table, params=params, json=json, headers=headers)
    except httpx.TimeoutException as e:
        raise RetryableError(f"Request timed out: {e}") from e
    except httpx.ConnectError as e:
        raise RetryableError(f"Connection failed: {e}") from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        try:
            body = e.response.text
        except Exception:
            body = "(unable to read response body)"

        if status >= 500 or status == 429:
            raise RetryableError(f"HTTP {status}: {body}") from e
        if status in (401, 403):
            raise AuthenticationError(f"HTTP {status}: {body}", status_code=status) from e
        raise StorageAPIError(f"HTTP {status}: {body}", status_code=status) from e


async def select_rows(
    table: str,
    params: dict | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[dict]:
    """Fetch every row of a table matching `params`, paginating with Range headers.

    Args:
        table: Table name
        params: PostgREST query parameters (select, filters, order)
        page_size: Rows per request

    Returns:
        All matching rows
    """
    query = {"select": "*"}
    if params:
        query.update(params)

    rows: list[dict] = []
    start = 0
    while True:
        end = start + page_size - 1
        response = await rest_request_with_retry(
            "GET",
            table,
            params=query,
            headers={"Range-Unit": "items", "Range": f"{start}-{end}"},
        )
        page = response.json()
        rows.extend(page)

        if len(page) < page_size:
            break
        start += page_size

    return rows


async def update_rows(table: str, filters: dict, values: dict) -> list[dict]:
    """PATCH the rows matching `filters` with `values`.

    Args:
        table: Table name
        filters: PostgREST filters, e.g. {"id": "eq.abc"}
        values: Column values to set

    Returns:
        Updated rows as returned by the API (empty if the API returns none)
    """
    response = await rest_request_with_retry(
        "PATCH",
        table,
        params=filters,
        json=values,
        headers={"Prefer": "return=representation"},
    )
    if not response.content:
        return []
    return response.json()
