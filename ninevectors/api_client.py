"""Client for the 9Vectors REST API.

Uses httpx for async HTTP.  The bearer token lives in the preference store
under ``token``; a 401 clears it and hands control to ``on_unauthorized``
(the CLI just reports it, a UI would redirect to ``/``).

Transient failures (408, 429, 5xx gateway errors) are retried with
exponential backoff.  Successful GETs are cached for five minutes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from ninevectors.config import NineVectorsSettings
from ninevectors.store import KEY_TOKEN, KEY_USER, KeyValueStore

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

CACHE_SECONDS = 5 * 60

MAX_BACKOFF_SECONDS = 10.0

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."


class ApiError(Exception):
    """A failed API call.

    ``status`` is None for network errors.  ``message`` prefers the
    server's own ``message`` field when the body has one.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        data: Any = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        self.request_id = request_id


class UnauthorizedError(ApiError):
    """401 from the API.  The stored token has already been cleared."""


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def backoff_delay(attempt: int, scale: float = 1.0) -> float:
    """Seconds to wait before retry number *attempt* (1-based)."""
    return min(2.0**attempt, MAX_BACKOFF_SECONDS) * scale


class ApiClient:
    """Async API client bound to one settings object and preference store.

    Args:
        settings: Supplies ``api_url``, ``request_timeout``, ``max_retries``
            and ``retry_backoff_scale``.
        store: Holds the bearer token.
        on_unauthorized: Called with the path to redirect to after a 401.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        settings: NineVectorsSettings,
        store: KeyValueStore,
        *,
        on_unauthorized: Callable[[str], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.store = store
        self.on_unauthorized = on_unauthorized
        self._sleep = sleep
        self._clock = clock
        self._cache: dict[str, tuple[float, Any]] = {}
        self._http = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

        self.auth = AuthApi(self)
        self.users = UsersApi(self)
        self.assessments = AssessmentsApi(self)
        self.documents = DocumentsApi(self)
        self.ai = AiApi(self)
        self.billing = BillingApi(self)
        self.notifications = NotificationsApi(self)
        self.analytics = AnalyticsApi(self)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    # -- core request -----------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        cache: bool = True,
    ) -> Any:
        method = method.upper()
        cache_key: str | None = None
        if method == "GET" and cache:
            cache_key = f"{path}{json.dumps(params or {}, sort_keys=True)}"
            hit = self._cache.get(cache_key)
            if hit is not None and self._clock() - hit[0] < CACHE_SECONDS:
                logger.debug("Cache hit for %s", cache_key)
                return hit[1]

        request_id = str(uuid.uuid4())
        headers = {"X-Request-ID": request_id}
        token = self.store.get(KEY_TOKEN)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        attempt = 0
        while True:
            try:
                response = await self._http.request(
                    method, path, json=json_body, params=params, files=files, headers=headers,
                )
            except httpx.HTTPError as exc:
                logger.error("Network error on %s %s: %s", method, path, exc)
                raise ApiError(NETWORK_ERROR_MESSAGE, request_id=request_id) from exc

            status = response.status_code
            if status == 401:
                self._handle_unauthorized()
                raise UnauthorizedError(
                    "Session expired. Please sign in again.",
                    status=status,
                    data=_decode(response),
                    request_id=request_id,
                )

            if status in RETRYABLE_STATUSES and attempt < self.settings.max_retries:
                attempt += 1
                delay = backoff_delay(attempt, self.settings.retry_backoff_scale)
                logger.warning(
                    "%s %s returned %d, retry %d/%d in %.1fs",
                    method, path, status, attempt, self.settings.max_retries, delay,
                )
                await self._sleep(delay)
                continue

            break

        body = _decode(response)
        if response.is_error:
            message = "An error occurred"
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.error("API error %d on %s %s (%s): %s", status, method, path, request_id, message)
            raise ApiError(message, status=status, data=body, request_id=request_id)

        if cache_key is not None:
            self._cache[cache_key] = (self._clock(), body)
        return body

    async def get(self, path: str, *, params: dict[str, Any] | None = None, cache: bool = True) -> Any:
        return await self.request("GET", path, params=params, cache=cache)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json_body=body, **kwargs)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, json_body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    def _handle_unauthorized(self) -> None:
        logger.warning("API rejected credentials, clearing stored token")
        self.store.delete(KEY_TOKEN)
        self.store.delete(KEY_USER)
        self.clear_cache()
        if self.on_unauthorized is not None:
            self.on_unauthorized("/")


# ---------------------------------------------------------------------------
# Endpoint groups
# ---------------------------------------------------------------------------


class _Endpoints:
    def __init__(self, client: ApiClient) -> None:
        self._client = client


class AuthApi(_Endpoints):
    async def register(self, data: dict[str, Any]) -> Any:
        return await self._client.post("/auth/register", data)

    async def login(self, data: dict[str, Any]) -> Any:
        """Log in and keep the returned token (and user) in the store."""
        result = await self._client.post("/auth/login", data)
        if isinstance(result, dict) and result.get("token"):
            self._client.store.set(KEY_TOKEN, result["token"])
            if result.get("user") is not None:
                self._client.store.set(KEY_USER, result["user"])
        return result

    def logout(self) -> None:
        self._client.store.delete(KEY_TOKEN)
        self._client.store.delete(KEY_USER)
        self._client.clear_cache()

    async def verify_email(self, token: str) -> Any:
        return await self._client.post("/auth/verify-email", {"token": token})

    async def forgot_password(self, email: str) -> Any:
        return await self._client.post("/auth/forgot-password", {"email": email})

    async def reset_password(self, token: str, password: str) -> Any:
        return await self._client.post("/auth/reset-password", {"token": token, "password": password})


class UsersApi(_Endpoints):
    async def me(self) -> Any:
        return await self._client.get("/users/me")

    async def organization(self) -> Any:
        return await self._client.get("/users/organization")

    async def update_profile(self, data: dict[str, Any]) -> Any:
        return await self._client.put("/users/me", data)


class AssessmentsApi(_Endpoints):
    async def list(self) -> Any:
        return await self._client.get("/assessments")

    async def get(self, assessment_id: str) -> Any:
        return await self._client.get(f"/assessments/{assessment_id}")

    async def create(self, data: dict[str, Any]) -> Any:
        return await self._client.post("/assessments", data)

    async def update(self, assessment_id: str, data: dict[str, Any]) -> Any:
        return await self._client.put(f"/assessments/{assessment_id}", data)

    async def delete(self, assessment_id: str) -> Any:
        return await self._client.delete(f"/assessments/{assessment_id}")

    async def submit_responses(self, assessment_id: str, answers: dict[str, Any]) -> Any:
        return await self._client.post(f"/assessments/{assessment_id}/responses", {"answers": answers})


class DocumentsApi(_Endpoints):
    async def list(self) -> Any:
        return await self._client.get("/documents")

    async def get(self, document_id: str) -> Any:
        return await self._client.get(f"/documents/{document_id}")

    async def upload(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Any:
        return await self._client.request(
            "POST", "/documents", files={"file": (filename, content, content_type)},
        )

    async def delete(self, document_id: str) -> Any:
        return await self._client.delete(f"/documents/{document_id}")


class AiApi(_Endpoints):
    async def strategy_advisor(self, assessment_data: Any, context: Any = None) -> Any:
        return await self._client.post(
            "/ai/strategy-advisor", {"assessmentData": assessment_data, "context": context},
        )

    async def predictive_analytics(self, historical_data: Any, timeframe: str) -> Any:
        return await self._client.post(
            "/ai/predictive-analytics", {"historicalData": historical_data, "timeframe": timeframe},
        )

    async def document_analysis(self, document_text: str, analysis_type: str) -> Any:
        return await self._client.post(
            "/ai/document-analysis", {"documentText": document_text, "analysisType": analysis_type},
        )

    async def assistant(self, message: str, conversation_history: list[dict[str, Any]] | None = None) -> Any:
        return await self._client.post(
            "/ai/assistant", {"message": message, "conversationHistory": conversation_history or []},
        )


class BillingApi(_Endpoints):
    async def create_checkout_session(self, tier: str) -> Any:
        return await self._client.post("/stripe/create-checkout-session", {"tier": tier})

    async def subscription(self) -> Any:
        return await self._client.get("/stripe/subscription", cache=False)

    async def cancel_subscription(self) -> Any:
        return await self._client.post("/stripe/cancel-subscription")


class NotificationsApi(_Endpoints):
    async def list(self, unread_only: bool = False) -> Any:
        return await self._client.get(
            "/notifications", params={"unreadOnly": str(unread_only).lower()}, cache=False,
        )

    async def mark_read(self, notification_id: str) -> Any:
        return await self._client.put(f"/notifications/{notification_id}/read")

    async def mark_all_read(self) -> Any:
        return await self._client.put("/notifications/read-all")


class AnalyticsApi(_Endpoints):
    async def track(self, event_name: str, properties: dict[str, Any] | None = None) -> Any:
        return await self._client.post(
            "/analytics/track", {"eventName": event_name, "properties": properties or {}},
        )

    async def dashboard(self, start_date: str, end_date: str) -> Any:
        return await self._client.get(
            "/analytics/dashboard", params={"startDate": start_date, "endDate": end_date},
        )
