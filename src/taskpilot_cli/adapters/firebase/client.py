"""HTTP client shared by the hosted-backend adapters."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import httpx

from taskpilot_cli.models import (
    AuthenticationError,
    AuthSession,
    BackendError,
    ConflictError,
    NotFoundError,
)
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

SessionRefresher = Callable[[AuthSession], Awaitable[AuthSession]]
SessionListener = Callable[[AuthSession], None]


def error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the backend's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or response.reason_phrase)
    if isinstance(error, str):
        return error
    return response.reason_phrase


def error_status(response: httpx.Response) -> str:
    """The ``error.status`` string of a Google API error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return ""
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("status") or "")
    return ""


def translate_error(exc: httpx.HTTPStatusError, what: str) -> Exception:
    """Map a rejected request to the matching application error."""
    response = exc.response
    message = f"{what}: {error_message(response)}"
    status = error_status(response)
    if response.status_code in (401, 403):
        return AuthenticationError(message)
    if response.status_code == 404 or status == "NOT_FOUND":
        return NotFoundError(message)
    if response.status_code == 409 or status in ("FAILED_PRECONDITION", "ABORTED"):
        return ConflictError(message)
    return BackendError(message)


class FirebaseClient:
    """HTTP client for the hosted backend's REST endpoints.

    Carries the signed-in session; the id token is sent as a bearer token
    and refreshed shortly before it expires.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        timeout: float = 30,
        retry: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.retry = retry
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.session: AuthSession | None = None
        self._refresher: SessionRefresher | None = None
        self._on_refresh: SessionListener | None = None

    def attach_session(
        self,
        session: AuthSession | None,
        *,
        refresher: SessionRefresher | None = None,
        on_refresh: SessionListener | None = None,
    ) -> None:
        """Use ``session`` for subsequent authenticated requests."""
        self.session = session
        if refresher is not None:
            self._refresher = refresher
        if on_refresh is not None:
            self._on_refresh = on_refresh

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _auth_headers(self) -> dict[str, str]:
        session = self.session
        if session is None or not session.id_token:
            return {}
        if self._refresher is not None and session.is_expired(datetime.now(UTC)):
            logger.info("Refreshing expired id token")
            session = await self._refresher(session)
            self.session = session
            if self._on_refresh is not None:
                self._on_refresh(session)
        return {"Authorization": f"Bearer {session.id_token}"}

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Any = None,
        data: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        retry: int | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make an HTTP request, retrying server and transport errors.

        Raises:
            httpx.HTTPStatusError: For 4xx responses, and 5xx after retries
            httpx.RequestError: If the backend stays unreachable
        """
        if retry is None:
            retry = self.retry

        client = await self._get_client()
        request_headers = {"Accept": "application/json"}
        if not skip_auth:
            request_headers.update(await self._auth_headers())
        if headers:
            request_headers.update(headers)

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    data=data,
                    content=content,
                    headers=request_headers,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            logger.warning(
                "%s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                retry + 1,
                last_exception,
            )
            if attempt < retry:
                await asyncio.sleep(2**attempt)

        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def call(self, what: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Like :meth:`request`, with failures mapped to application errors."""
        try:
            return await self.request(method, url, **kwargs)
        except httpx.HTTPStatusError as e:
            raise translate_error(e, what) from e
        except httpx.RequestError as e:
            raise BackendError(f"{what}: {e}") from e
