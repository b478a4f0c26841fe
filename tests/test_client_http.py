# tests/test_client_http.py
"""ApiClient: auth short-circuit, error mapping, timeouts and read retries."""

import httpx
import pytest

from tutorlink.client.auth import CallableTokenProvider, EnvTokenProvider, StaticTokenProvider
from tutorlink.client.http import ApiClient
from tutorlink.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DuplicateApplicationError,
    InvalidStateTransition,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def _client(handler, token="token-123", **kwargs):
    transport = RecordingTransport(handler)
    api = ApiClient(
        base_url="http://api.test/api",
        token_provider=StaticTokenProvider(token),
        transport=transport,
        **kwargs,
    )
    return api, transport


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token_fails_without_network_call(self):
        api, transport = _client(lambda r: httpx.Response(200, json={"success": True}), token=None)

        with pytest.raises(AuthenticationError):
            await api.get("/tutor-requests")

        assert transport.requests == []
        await api.aclose()

    @pytest.mark.asyncio
    async def test_public_endpoint_works_without_token(self):
        api, transport = _client(
            lambda r: httpx.Response(201, json={"success": True, "data": {"id": "1"}}), token=None
        )

        result = await api.post("/tutor-requests/public", json={"x": 1}, require_auth=False)

        assert result == {"success": True, "message": None, "data": {"id": "1"}}
        assert "authorization" not in transport.requests[0].headers
        await api.aclose()

    @pytest.mark.asyncio
    async def test_bearer_header_and_base_path(self):
        api, transport = _client(lambda r: httpx.Response(200, json={"success": True, "data": []}))

        await api.get("/tuition-jobs", params={"subject": "Math", "district": None})

        sent = transport.requests[0]
        assert sent.headers["authorization"] == "Bearer token-123"
        assert sent.url.path == "/api/tuition-jobs"
        assert dict(sent.url.params) == {"subject": "Math"}
        await api.aclose()

    def test_token_providers(self, monkeypatch):
        monkeypatch.setenv("TUTORLINK_TOKEN", "from-env")
        assert EnvTokenProvider().get_token() == "from-env"
        assert CallableTokenProvider(lambda: "").get_token() is None

        provider = StaticTokenProvider("a")
        provider.set_token(None)
        assert provider.get_token() is None


class TestErrorMapping:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, body, expected",
        [
            (400, {"success": False, "message": "bad"}, ValidationError),
            (422, {"success": False, "message": "bad"}, ValidationError),
            (400, {"success": False, "message": "no", "code": "invalid_state_transition"}, InvalidStateTransition),
            (401, {"success": False, "message": "login"}, AuthorizationError),
            (403, {"success": False, "message": "denied"}, AuthorizationError),
            (404, {"success": False, "message": "missing"}, NotFoundError),
            (409, {"success": False, "message": "again"}, DuplicateApplicationError),
            (500, {"success": False, "message": "boom"}, ServerError),
            (503, {"detail": "unavailable"}, ServerError),
        ],
    )
    async def test_status_codes(self, status_code, body, expected):
        api, _ = _client(lambda r: httpx.Response(status_code, json=body))

        with pytest.raises(expected) as exc_info:
            await api.put("/demo-classes/1", json={"status": "cancelled"})

        assert exc_info.value.status_code == status_code
        assert exc_info.value.retryable is False
        await api.aclose()

    @pytest.mark.asyncio
    async def test_success_false_with_200_is_an_error(self):
        body = {"success": False, "message": "You have already applied", "code": "duplicate_application"}
        api, _ = _client(lambda r: httpx.Response(200, json=body))

        with pytest.raises(DuplicateApplicationError, match="already applied"):
            await api.post("/tuition-jobs/1/apply")
        await api.aclose()

    @pytest.mark.asyncio
    async def test_invalid_transition_carries_states(self):
        body = {
            "success": False,
            "message": "Cannot change",
            "code": "invalid_state_transition",
            "current": "rejected",
            "target": "completed",
        }
        api, _ = _client(lambda r: httpx.Response(400, json=body))

        with pytest.raises(InvalidStateTransition) as exc_info:
            await api.patch("/tutor-requests/1/assignments/2", json={"status": "completed"})

        assert exc_info.value.current == "rejected"
        assert exc_info.value.target == "completed"
        await api.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body_is_network_error(self):
        api, _ = _client(lambda r: httpx.Response(502, text="<html>Bad gateway</html>"), read_retries=0)

        with pytest.raises(NetworkError) as exc_info:
            await api.get("/demo-classes")

        assert exc_info.value.retryable is True
        assert exc_info.value.code == "invalid_response"
        await api.aclose()


class TestTimeoutsAndRetries:

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        api, _ = _client(handler, read_retries=0, timeout=0.5)

        with pytest.raises(NetworkError) as exc_info:
            await api.get("/tuition-jobs")

        assert exc_info.value.code == "timeout"
        await api.aclose()

    @pytest.mark.asyncio
    async def test_get_is_retried_once_on_network_error(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"success": True, "data": []})

        api, transport = _client(handler, read_retries=1)

        result = await api.get("/tuition-jobs")

        assert result["data"] == []
        assert len(transport.requests) == 2
        await api.aclose()

    @pytest.mark.asyncio
    async def test_mutations_are_never_retried(self):
        def handler(request):
            raise httpx.ConnectError("connection reset", request=request)

        api, transport = _client(handler, read_retries=3)

        with pytest.raises(NetworkError):
            await api.post("/tutor-requests/1/assign", json={"tutorId": "t"})

        assert len(transport.requests) == 1
        await api.aclose()

    @pytest.mark.asyncio
    async def test_server_errors_are_not_retried(self):
        api, transport = _client(
            lambda r: httpx.Response(500, json={"success": False, "message": "boom"}), read_retries=3
        )

        with pytest.raises(ServerError):
            await api.get("/demo-classes")

        assert len(transport.requests) == 1
        await api.aclose()
