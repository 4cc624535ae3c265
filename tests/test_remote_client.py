# =============================================================================
# tests/test_remote_client.py - Remote Invocation Client Tests
# =============================================================================

import json

import httpx
import pytest

from lib.errors import RemoteError, TransportError


class TestSend:
    """Test RemoteClient.send()."""

    @pytest.mark.asyncio
    async def test_sends_default_and_call_headers(self, remote, service, json_response):
        service.on("GET", "/rest/v1/projects", json_response(200, [{"id": 1}]))

        response = await remote.send(
            "GET",
            "/rest/v1/projects",
            headers={"Authorization": "Bearer abc"},
            params=[("select", "*"), ("year", "gte.2020"), ("year", "lt.2024")],
        )

        assert response.status_code == 200
        assert response.body == [{"id": 1}]

        request = service.requests[0]
        assert request.headers["apikey"] == "test-anon-key"
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.url.params.get_list("year") == ["gte.2020", "lt.2024"]

    @pytest.mark.asyncio
    async def test_json_body_is_sent(self, remote, service, json_response):
        service.on("POST", "/rest/v1/projects", json_response(201, [{"id": 7}]))

        await remote.send("POST", "/rest/v1/projects", body={"title": "Site"})

        assert json.loads(service.requests[0].content) == {"title": "Site"}

    @pytest.mark.asyncio
    async def test_non_json_body_returned_as_text(self, remote, service):
        service.on("GET", "/health", httpx.Response(200, text="ok"))

        response = await remote.send("GET", "/health")

        assert response.body == "ok"

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, remote, service):
        service.on("DELETE", "/rest/v1/projects", httpx.Response(204))

        response = await remote.send("DELETE", "/rest/v1/projects")

        assert response.status_code == 204
        assert response.body is None


class TestErrors:
    """Test error translation."""

    @pytest.mark.asyncio
    async def test_client_error_carries_status_and_body(self, remote, service, json_response):
        body = {"code": "PGRST301", "message": "JWT expired"}
        service.on("GET", "/rest/v1/projects", json_response(401, body))

        with pytest.raises(RemoteError) as exc_info:
            await remote.send("GET", "/rest/v1/projects")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == body
        assert exc_info.value.is_client_error
        assert not exc_info.value.is_server_error

    @pytest.mark.asyncio
    async def test_server_error(self, remote, service):
        service.on("GET", "/rest/v1/projects", httpx.Response(503, text="upstream down"))

        with pytest.raises(RemoteError) as exc_info:
            await remote.send("GET", "/rest/v1/projects")

        assert exc_info.value.is_server_error
        assert exc_info.value.body == "upstream down"

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self, remote, service):
        service.on("GET", "/rest/v1/projects", httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError) as exc_info:
            await remote.send("GET", "/rest/v1/projects")

        assert exc_info.value.method == "GET"

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, remote, service):
        service.on("GET", "/rest/v1/projects", httpx.ReadTimeout("timed out"))

        with pytest.raises(TransportError):
            await remote.send("GET", "/rest/v1/projects")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        httpx.DecodingError("invalid gzip stream"),
        httpx.TooManyRedirects("redirect loop"),
    ])
    async def test_other_request_errors_are_transport_errors(self, remote, service, error):
        service.on("GET", "/rest/v1/projects", error)

        with pytest.raises(TransportError):
            await remote.send("GET", "/rest/v1/projects")
