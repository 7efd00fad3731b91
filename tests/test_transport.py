"""Tests for HTTPTransport: error normalization, timeouts and retries."""

import asyncio
import time

import httpx
import pytest

from fluxez import (
    ApiError,
    AuthenticationError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
)


def _refuse(request):
    raise httpx.ConnectError("connection refused", request=request)


def _reset(request):
    raise httpx.ReadError("connection reset by peer", request=request)


class TestErrorNormalization:
    @pytest.mark.asyncio
    async def test_backend_code_and_message_kept_verbatim(self, client, recorder):
        recorder.queue_json(
            {"code": "QUEUE_NOT_FOUND", "message": "Queue orders does not exist"},
            status_code=404,
        )

        with pytest.raises(ApiError) as exc_info:
            await client.queue.get_queue_url("orders")

        error = exc_info.value
        assert error.code == "QUEUE_NOT_FOUND"
        assert error.message == "Queue orders does not exist"
        assert error.http_status == 404

    @pytest.mark.asyncio
    async def test_nested_error_object(self, client, recorder):
        recorder.queue_json(
            {
                "success": False,
                "error": {
                    "code": "TABLE_EXISTS",
                    "message": "Table users already exists",
                    "details": {"table": "users"},
                },
            },
            status_code=409,
        )

        with pytest.raises(ApiError) as exc_info:
            await client.schema.create_table({"name": "users", "columns": []})

        assert exc_info.value.code == "TABLE_EXISTS"
        assert exc_info.value.details == {"table": "users"}

    @pytest.mark.asyncio
    async def test_missing_code_falls_back_to_status(self, client, recorder):
        recorder.queue_json({"message": "No such file"}, status_code=404)

        with pytest.raises(ApiError) as exc_info:
            await client.storage.get_file("docs/missing.pdf")

        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.message == "No such file"

    @pytest.mark.asyncio
    async def test_unknown_status_code(self, client, recorder):
        recorder.queue(httpx.Response(418, text=""))

        with pytest.raises(ApiError) as exc_info:
            await client.health()

        assert exc_info.value.code == "HTTP_418"
        assert "418" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self, client, recorder):
        recorder.queue(httpx.Response(502, text="Bad gateway from upstream"))

        with pytest.raises(ApiError) as exc_info:
            await client.email.send("a@example.com", "Hi", "<p>Hi</p>")

        assert exc_info.value.code == "BAD_GATEWAY"
        assert exc_info.value.message == "Bad gateway from upstream"
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_failures(self, client, recorder, status_code):
        recorder.queue_json({"message": "Invalid API key"}, status_code=status_code)

        with pytest.raises(AuthenticationError):
            await client.health()

        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_in_band_failure_on_2xx(self, client, recorder):
        recorder.queue_json(
            {"success": False, "code": "QUOTA_EXCEEDED", "message": "Email quota reached"}
        )

        with pytest.raises(ApiError) as exc_info:
            await client.email.send("a@example.com", "Hi", "<p>Hi</p>")

        assert exc_info.value.code == "QUOTA_EXCEEDED"
        assert exc_info.value.message == "Email quota reached"

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client, recorder):
        recorder.queue(
            httpx.Response(
                200, content=b"{not json", headers={"Content-Type": "application/json"}
            )
        )

        with pytest.raises(ApiError) as exc_info:
            await client.health()

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_plain_text_success_body(self, client, recorder):
        recorder.queue(httpx.Response(200, text="OK"))

        assert await client.ping() == {"raw_response": "OK"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 204])
    async def test_empty_body_is_empty_dict(self, client, recorder, status_code):
        recorder.queue(httpx.Response(status_code))

        assert await client.health() == {}

    def test_error_to_dict(self):
        error = ApiError("Nope", http_status=400, response_body={"message": "Nope"})

        assert error.to_dict() == {
            "name": "ApiError",
            "message": "Nope",
            "code": "BAD_REQUEST",
            "details": None,
            "http_status": 400,
            "response_body": {"message": "Nope"},
        }
        assert str(error) == "[BAD_REQUEST] Nope"


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_request_times_out(self, make_client, recorder):
        client = make_client(timeout=50, retries=0)

        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(200, json={"success": True, "data": {}})

        recorder.queue(slow)

        start = time.monotonic()
        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.health()
        elapsed = time.monotonic() - start

        assert elapsed < 0.25
        assert exc_info.value.code == "TIMEOUT"
        assert isinstance(exc_info.value, TransportError)

    @pytest.mark.asyncio
    async def test_per_call_timeout_override(self, make_client, recorder):
        client = make_client(timeout=5000, retries=0)

        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(200, json={})

        recorder.queue(slow)

        with pytest.raises(RequestTimeoutError):
            await client.brain.generate_text("a haiku", timeout=50)

    @pytest.mark.asyncio
    async def test_timeout_on_get_is_retried(self, make_client, recorder):
        client = make_client(timeout=50, retries=1)

        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(200, json={})

        recorder.queue(slow)
        recorder.queue_json({"success": True, "data": {"status": "ok"}})

        assert await client.health() == {"status": "ok"}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_timeout_on_post_is_not_retried(self, make_client, recorder):
        client = make_client(timeout=50, retries=3)

        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(200, json={})

        recorder.queue(slow)

        with pytest.raises(RequestTimeoutError):
            await client.queue.send("https://queue/orders", {"id": 1})

        assert len(recorder.requests) == 1


class TestRetries:
    @pytest.mark.asyncio
    async def test_rate_limited_post_is_retried(self, make_client, recorder):
        client = make_client(retries=3)
        recorder.queue_json({}, {}, status_code=429)
        recorder.queue_json({"success": True, "data": {"messageId": "m-1"}})

        result = await client.queue.send("https://queue/orders", {"id": 1})

        assert result == {"messageId": "m-1"}
        assert len(recorder.requests) == 3
        bodies = [recorder.json(i) for i in range(3)]
        assert bodies[0] == bodies[1] == bodies[2]

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, make_client, recorder):
        client = make_client(retries=2)
        for _ in range(3):
            recorder.queue(
                httpx.Response(
                    429,
                    json={"message": "Slow down"},
                    headers={"Retry-After": "0"},
                )
            )

        with pytest.raises(RateLimitError) as exc_info:
            await client.health()

        assert exc_info.value.retry_after == 0.0
        assert exc_info.value.code == "TOO_MANY_REQUESTS"
        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_server_error_on_post_is_not_retried(self, make_client, recorder):
        client = make_client(retries=3)
        recorder.queue_json({"message": "boom"}, status_code=500)

        with pytest.raises(ApiError) as exc_info:
            await client.queue.send("https://queue/orders", {"id": 1})

        assert exc_info.value.http_status == 500
        assert exc_info.value.is_server_error
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_on_get_is_retried(self, make_client, recorder):
        client = make_client(retries=3)
        recorder.queue_json({"message": "unavailable"}, status_code=503)
        recorder.queue_json({"success": True, "data": ["q1"]})

        assert await client.queue.list_queues() == ["q1"]
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_idempotency_key_makes_post_retryable(self, make_client, recorder):
        client = make_client(retries=3, organization_id="org_1", project_id="proj_1")
        recorder.queue_json({}, {}, status_code=500)
        recorder.queue_json({"success": True, "data": {"id": "pi_1"}})

        result = await client.payment.create_payment_intent(
            {"amount": 1000, "currency": "usd"}, idempotency_key="order-42"
        )

        assert result == {"id": "pi_1"}
        assert len(recorder.requests) == 3
        assert all(r.headers["idempotency-key"] == "order-42" for r in recorder.requests)

    @pytest.mark.asyncio
    async def test_flagged_post_is_retried(self, make_client, recorder):
        client = make_client(retries=1)
        recorder.queue_json({}, status_code=503)
        recorder.queue_json({"success": True, "data": {"signedUrl": "https://s/1"}})

        result = await client.storage.create_signed_url("docs/a.pdf")

        assert result == {"signedUrl": "https://s/1"}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, make_client, recorder):
        client = make_client(retries=3)
        recorder.queue_json({"message": "bad"}, status_code=400)

        with pytest.raises(ApiError):
            await client.health()

        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_refused_connection_is_retried(self, make_client, recorder):
        client = make_client(retries=2)
        recorder.queue(_refuse)
        recorder.queue_json({"success": True, "data": {"messageId": "m-1"}})

        result = await client.queue.send("https://queue/orders", "hello")

        assert result == {"messageId": "m-1"}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_refused_connection_exhausted(self, make_client, recorder):
        client = make_client(retries=1)
        recorder.queue(_refuse, _refuse)

        with pytest.raises(TransportError) as exc_info:
            await client.health()

        assert exc_info.value.code == "CONNECTION_ERROR"
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_network_error_on_post_is_not_retried(self, make_client, recorder):
        client = make_client(retries=3)
        recorder.queue(_reset)

        with pytest.raises(TransportError) as exc_info:
            await client.email.send("a@example.com", "Hi", "<p>Hi</p>")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_zero_retries(self, make_client, recorder):
        client = make_client(retries=0)
        recorder.queue_json({}, status_code=429)

        with pytest.raises(RateLimitError):
            await client.health()

        assert len(recorder.requests) == 1


class TestRequestEnvelope:
    @pytest.mark.asyncio
    async def test_default_headers(self, client, recorder):
        await client.health()

        headers = recorder.last.headers
        assert headers["accept"] == "application/json"
        assert headers["user-agent"].startswith("fluxez-python-sdk/")
        assert headers["authorization"] == "Bearer cgx_1234567890abcd"
        assert "x-api-key" not in headers

    @pytest.mark.asyncio
    async def test_service_key_uses_api_key_header(self, make_client, recorder):
        client = make_client("service_abcdef123456")

        await client.health()

        headers = recorder.last.headers
        assert headers["x-api-key"] == "service_abcdef123456"
        assert "authorization" not in headers

    @pytest.mark.asyncio
    async def test_preformatted_bearer_is_passed_through(self, make_client, recorder):
        client = make_client("Bearer cgx_abcdef123456")

        await client.health()

        assert recorder.last.headers["authorization"] == "Bearer cgx_abcdef123456"

    @pytest.mark.asyncio
    async def test_query_params_drop_none_and_lower_booleans(self, client, recorder):
        await client.chatbot.get_conversations(page=2, active=True, search=None)

        params = recorder.last.url.params
        assert params["page"] == "2"
        assert params["active"] == "true"
        assert "search" not in params

    @pytest.mark.asyncio
    async def test_path_segments_are_quoted(self, client, recorder):
        await client.workflow.get("wf/1 beta")

        assert recorder.last.url.raw_path.decode().endswith("/workflow/wf%2F1%20beta")
