# tutorlink/client/http.py
# Thin async wrapper around the TutorLink JSON API
#
#   - attaches "Authorization: Bearer <token>" from the TokenProvider
#   - fails locally with AuthenticationError when a token is required but missing
#   - bounded timeout on every request (NetworkError when it expires)
#   - maps HTTP status / error codes onto tutorlink.core.errors
#   - retries idempotent GETs on NetworkError only; mutations are never retried
#
# Every successful call returns the normalized {success, message, data} dict.

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from tutorlink.client.auth import StaticTokenProvider, TokenProvider
from tutorlink.core.config import settings
from tutorlink.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DuplicateApplicationError,
    InvalidStateTransition,
    NetworkError,
    NotFoundError,
    ServerError,
    TutorLinkError,
    ValidationError,
)

logger = logging.getLogger("tutorlink.client")


def _error_from_body(status_code: int, body: Dict[str, Any]) -> TutorLinkError:
    """Pick the exception class for an error response (or a success:false body)."""
    message = body.get("message") or f"Request failed with status {status_code}."
    code = body.get("code")
    kwargs = {"status_code": status_code, "code": code, "payload": body}

    if code == "invalid_state_transition":
        return InvalidStateTransition(
            message, current=body.get("current"), target=body.get("target"), **kwargs
        )
    if code == "duplicate_application" or status_code == 409:
        return DuplicateApplicationError(message, **kwargs)
    if status_code in (401, 403):
        return AuthorizationError(message, **kwargs)
    if status_code == 404:
        return NotFoundError(message, **kwargs)
    if status_code >= 500:
        return ServerError(message, **kwargs)
    return ValidationError(message, **kwargs)


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None and v != ""}


class ApiClient:
    """
    One instance per base URL / token source. Reuses a single
    httpx.AsyncClient; close it with `await client.aclose()` or use
    `async with ApiClient(...) as client:`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        read_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token_provider = token_provider or StaticTokenProvider()
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.read_retries = (
            read_retries if read_retries is not None else settings.read_retry_attempts
        )
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Core ──────────────────────────────────────────────────────────────────

    def _headers(self, require_auth: bool) -> Dict[str, str]:
        token = self.token_provider.get_token()
        if token:
            return {"Authorization": f"Bearer {token}"}
        if require_auth:
            raise AuthenticationError("Please log in to continue.", code="not_authenticated")
        return {}

    async def _send(
        self,
        method: str,
        endpoint: str,
        headers: Dict[str, str],
        json: Optional[Any],
        params: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"headers": headers, "params": _clean_params(params)}
        if json is not None:
            kwargs["json"] = json

        try:
            response = await self._http.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"The server did not answer within {self.timeout:g} seconds.", code="timeout"
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Could not reach the server: {exc}", code="network_error") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkError(
                "The server sent an unreadable response.",
                status_code=response.status_code,
                code="invalid_response",
            ) from exc
        if not isinstance(body, dict):
            raise NetworkError(
                "The server sent an unexpected response.",
                status_code=response.status_code,
                code="invalid_response",
            )

        if response.is_error or body.get("success") is False:
            raise _error_from_body(response.status_code, body)

        body.setdefault("success", True)
        body.setdefault("message", None)
        body.setdefault("data", None)
        return body

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        require_auth: bool = True,
    ) -> Dict[str, Any]:
        method = method.upper()
        headers = self._headers(require_auth)

        attempts = 1 + (self.read_retries if method == "GET" else 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self._send(method, endpoint, headers, json, params)
            except NetworkError as exc:
                if attempt >= attempts:
                    logger.warning("%s %s failed: %s", method, endpoint, exc)
                    raise
                logger.info(
                    "%s %s failed (%s), retrying (%d/%d)",
                    method, endpoint, exc.code, attempt, attempts - 1,
                )
            except TutorLinkError as exc:
                logger.debug("%s %s → %s: %s", method, endpoint, type(exc).__name__, exc)
                raise
        raise AssertionError("unreachable")

    # ── Shortcuts ─────────────────────────────────────────────────────────────

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, require_auth: bool = True):
        return await self.request("GET", endpoint, params=params, require_auth=require_auth)

    async def post(self, endpoint: str, json: Optional[Any] = None, require_auth: bool = True):
        return await self.request("POST", endpoint, json=json, require_auth=require_auth)

    async def put(self, endpoint: str, json: Optional[Any] = None, require_auth: bool = True):
        return await self.request("PUT", endpoint, json=json, require_auth=require_auth)

    async def patch(self, endpoint: str, json: Optional[Any] = None, require_auth: bool = True):
        return await self.request("PATCH", endpoint, json=json, require_auth=require_auth)

    async def delete(self, endpoint: str, require_auth: bool = True):
        return await self.request("DELETE", endpoint, require_auth=require_auth)


# ── Request bodies ────────────────────────────────────────────────────────────

def build_body(model, data, **extra):
    """
    Validate `data` (a dict, or already a model instance) against a request
    model before anything goes on the wire. Pydantic failures become
    tutorlink ValidationError carrying the first message.
    """
    if isinstance(data, model) and not extra:
        return data
    if isinstance(data, model):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate({**(data or {}), **extra})
    except PydanticValidationError as exc:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else str(exc)
        raise ValidationError(
            message.replace("Value error, ", "", 1),
            code="validation_error",
            payload=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors],
        ) from exc
