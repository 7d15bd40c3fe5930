"""
Unit tests for the fluent builder and its terminal operations.
"""
import base64
import json
from datetime import timedelta
from typing import Dict, Optional
from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from restclient import (
    CircuitBreakerOpenError, ClientSettings, HttpClientBuilder, HttpStatusCategory,
    HttpStatusError, RestClientDecodeError, RestClientTimeoutError
)
from restclient.shared.exceptions import ConfigurationError, PreconditionError
from restclient.shared.types import CircuitState, HttpMethod

BASE_URL = "http://httpbin.org"


class ModelWithGuid(BaseModel):
    uuid: UUID


class HttpBinGetModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    args: Dict[str, str]
    headers: Dict[str, str]


class Sentinel(BaseModel):
    name: str
    value: Optional[int] = None


class Recorder:
    def __init__(self):
        self.statuses = []

    def intercept_response(self, status_code, body):
        self.statuses.append(status_code)


class TestBuilder:
    """Test cases for building requests."""

    def test_url_path_and_query(self):
        """Test URL assembly with paths of several types and query parameters."""
        guid = uuid4()
        request = (
            HttpClientBuilder.create(BASE_URL)
            .path("anything")
            .path(1)
            .path(guid)
            .query("q", "Test")
            .query("v", 1)
            .async_get()
        )

        assert request.spec.url == f"{BASE_URL}/anything/1/{guid}?q=Test&v=1"
        assert request.spec.method == HttpMethod.GET

    def test_raw_url_fragment(self):
        """Test that url() appends a fragment verbatim."""
        request = HttpClientBuilder.create(BASE_URL).url("/delay/1").async_delete()

        assert request.spec.url == f"{BASE_URL}/delay/1"
        assert request.spec.method == HttpMethod.DELETE

    def test_builder_is_immutable(self):
        """Test that each call returns a new builder and leaves the original untouched."""
        base = HttpClientBuilder.create(BASE_URL)
        child = base.path("a").header("X-Trace", "1")

        assert base.base_url == BASE_URL
        assert base.headers == ()
        assert child.base_url == f"{BASE_URL}/a"

    def test_duplicate_header_rejected(self):
        """Test that header keys are unique."""
        with pytest.raises(ConfigurationError, match="Duplicate header"):
            HttpClientBuilder.create(BASE_URL).header("X-Pwd", "a").header("X-Pwd", "b")

    def test_basic_auth(self):
        """Test the Authorization header produced for basic auth."""
        request = HttpClientBuilder.create(BASE_URL).basic_auth("user", "secret").async_get()

        expected = base64.b64encode(b"user:secret").decode("ascii")
        assert request.spec.headers["Authorization"] == f"Basic {expected}"

    def test_form_params(self):
        """Test that form parameters accumulate into a form body."""
        request = (
            HttpClientBuilder.create(BASE_URL)
            .use_form_url_encoded()
            .form_param("a", 1)
            .form_param("b", "two")
            .async_post()
        )

        assert request.spec.body == "a=1&b=two"
        assert request.spec.content_type.value == "application/x-www-form-urlencoded"

    def test_entity_body(self):
        """Test that entities are serialized with camel-cased keys."""
        request = HttpClientBuilder.create(BASE_URL).entity({"first_name": "Ana"}).async_put()

        assert json.loads(request.spec.body) == {"firstName": "Ana"}

    def test_timeout_forms(self):
        """Test millisecond and timedelta timeouts."""
        assert HttpClientBuilder.create(BASE_URL).timeout(250).async_get().spec.timeout_seconds == 0.25
        assert HttpClientBuilder.create(BASE_URL).timeout(timedelta(seconds=2)).async_get().spec.timeout_seconds == 2.0

    @pytest.mark.parametrize("value", [0, -5, timedelta(0)])
    def test_invalid_timeout(self, value):
        """Test that non-positive timeouts are rejected."""
        with pytest.raises(PreconditionError, match="Timeout must be greater than zero"):
            HttpClientBuilder.create(BASE_URL).timeout(value)

    def test_empty_base_url(self):
        """Test that a blank base URL is rejected."""
        with pytest.raises(PreconditionError):
            HttpClientBuilder.create("  ")

    def test_negative_retry(self):
        """Test that negative retry counts are rejected."""
        with pytest.raises(PreconditionError):
            HttpClientBuilder.create(BASE_URL).async_get().retry(-1)

    def test_invalid_status_codes(self):
        """Test that accepted codes must be real status codes."""
        with pytest.raises(PreconditionError):
            HttpClientBuilder.create(BASE_URL).async_get().accept_status_codes(200, 999)

    def test_unknown_interceptor(self):
        """Test that objects implementing no hook are rejected."""
        with pytest.raises(ConfigurationError):
            HttpClientBuilder.create(BASE_URL).register_interceptor(object())

    def test_settings_defaults(self):
        """Test that client settings seed timeout, retries and logging."""
        settings = ClientSettings(default_timeout_seconds=3.0, default_retries=2, log_response=True)

        request = HttpClientBuilder.create(BASE_URL, settings).async_get()

        assert request.spec.timeout_seconds == 3.0
        assert request.retry_policy.max_retries == 2
        assert request.spec.log_response
        assert request.spec.headers["User-Agent"] == "restclient/1.0"


class TestTerminalOperations:
    """Test cases for get_response and get_entity."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 201, 203, 204, 205])
    async def test_successful_statuses(self, fake_transport, status_code):
        """Test that success codes return the body."""
        transport = fake_transport(status_code)

        body = await (
            HttpClientBuilder.create(BASE_URL).path("status").path(status_code)
            .transport(transport).async_get().get_response()
        )

        assert body == ""
        assert transport.calls[0].url == f"{BASE_URL}/status/{status_code}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 405, 409, 415, 500, 501, 502])
    async def test_rejected_statuses_raise(self, fake_transport, status_code):
        """Test that rejected codes raise with the status code attached."""
        request = HttpClientBuilder.create(BASE_URL).transport(fake_transport(status_code)).async_get()

        with pytest.raises(HttpStatusError) as exc_info:
            await request.get_response()

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_accept_defined_status(self, fake_transport, response):
        """Test that an accepted non-2xx status returns its body."""
        request = (
            HttpClientBuilder.create(BASE_URL).transport(fake_transport(response("teapot", 418)))
            .async_get().accept_status_codes(418)
        )

        assert await request.get_response() == "teapot"

    @pytest.mark.asyncio
    async def test_accept_any_status(self, fake_transport, response):
        """Test that accept-any returns error bodies as-is."""
        request = (
            HttpClientBuilder.create(BASE_URL).transport(fake_transport(response("down", 503)))
            .async_get().accept_any_status_code()
        )

        assert await request.get_response() == "down"

    @pytest.mark.asyncio
    async def test_not_found_mentions_url(self, fake_transport):
        """Test the 404 error message."""
        request = HttpClientBuilder.create(BASE_URL).path("missing").transport(fake_transport(404)).async_get()

        with pytest.raises(HttpStatusError, match="URL http://httpbin.org/missing not found.") as exc_info:
            await request.get_response()

        assert exc_info.value.category == HttpStatusCategory.NOT_FOUND

    @pytest.mark.asyncio
    async def test_uuid_entity(self, fake_transport, response):
        """Test decoding a uuid payload into a model."""
        value = uuid4()
        transport = fake_transport(response(json.dumps({"uuid": str(value)})))

        model = await HttpClientBuilder.create(f"{BASE_URL}/uuid").transport(transport).async_get().get_entity(ModelWithGuid)

        assert model.uuid == value

    @pytest.mark.asyncio
    async def test_query_and_headers_reach_transport(self, fake_transport, response):
        """Test that query parameters and headers are sent and the echo is decoded."""
        echo = {
            "url": f"{BASE_URL}/anything?q=Test&v=1",
            "args": {"q": "Test", "v": "1"},
            "headers": {"X-Pwd": "x-123"},
        }
        transport = fake_transport(response(json.dumps(echo)))

        model = await (
            HttpClientBuilder.create(BASE_URL)
            .path("anything")
            .query("q", "Test")
            .query("v", 1)
            .header("X-Pwd", "x-123")
            .transport(transport)
            .async_get()
            .get_entity(HttpBinGetModel)
        )

        assert model.url == f"{BASE_URL}/anything?q=Test&v=1"
        assert model.args == {"q": "Test", "v": "1"}
        assert transport.calls[0].headers["X-Pwd"] == "x-123"

    @pytest.mark.asyncio
    async def test_empty_body_entity_is_none(self, fake_transport):
        """Test that an empty 204 decodes to None."""
        request = HttpClientBuilder.create(BASE_URL).transport(fake_transport(204)).async_get()

        assert await request.get_entity(ModelWithGuid) is None

    @pytest.mark.asyncio
    async def test_malformed_entity_raises(self, fake_transport, response):
        """Test that malformed bodies raise a decode error."""
        request = HttpClientBuilder.create(BASE_URL).transport(fake_transport(response("<html>"))).async_get()

        with pytest.raises(RestClientDecodeError):
            await request.get_entity(ModelWithGuid)

    @pytest.mark.asyncio
    async def test_gateway_timeout_raises_timeout(self, fake_transport):
        """Test that a 504 surfaces as a timeout."""
        request = HttpClientBuilder.create(BASE_URL).transport(fake_transport(504)).async_get()

        with pytest.raises(RestClientTimeoutError):
            await request.get_response()

    @pytest.mark.asyncio
    async def test_gateway_timeout_with_retry_and_fallback(self, fake_transport):
        """Test that Retry(2) plus a fallback returns the sentinel after three attempts."""
        transport = fake_transport(504)
        sentinel = Sentinel(name="fallback", value=-1)

        result = await (
            HttpClientBuilder.create(BASE_URL).transport(transport)
            .async_get()
            .retry(2)
            .fallback(lambda error: sentinel)
            .get_entity(Sentinel)
        )

        assert result is sentinel
        assert transport.call_count == 3

    @pytest.mark.asyncio
    async def test_local_timeout(self):
        """Test that a tiny timeout raises a timeout error."""
        from tests.fakes import SlowTransport

        request = HttpClientBuilder.create(BASE_URL).timeout(10).transport(SlowTransport(delay=5.0)).async_get()

        with pytest.raises(RestClientTimeoutError):
            await request.get_response()

    @pytest.mark.asyncio
    async def test_shared_breaker_across_requests(self, fake_transport, breaker):
        """Test that a breaker shared by two requests degrades both."""
        builder = HttpClientBuilder.create(BASE_URL).transport(fake_transport(500))
        first = builder.path("a").async_get().circuit_breaker(breaker).retry(2)
        second = builder.path("b").async_get().circuit_breaker(breaker)

        with pytest.raises(HttpStatusError):
            await first.get_response()
        assert breaker.state == CircuitState.OPEN

        with pytest.raises(CircuitBreakerOpenError):
            await second.get_response()

    @pytest.mark.asyncio
    async def test_response_interceptor_per_attempt(self, fake_transport, response):
        """Test that response interceptors run once per attempt."""
        recorder = Recorder()
        transport = fake_transport(500, 503, response("ok"))

        body = await (
            HttpClientBuilder.create(BASE_URL).register_interceptor(recorder).transport(transport)
            .async_get().retry(2).get_response()
        )

        assert body == "ok"
        assert recorder.statuses == [500, 503, 200]

    @pytest.mark.asyncio
    async def test_post_sends_entity(self, fake_transport, response):
        """Test that POST sends the serialized entity."""
        transport = fake_transport(response("{}", 201))

        await (
            HttpClientBuilder.create(BASE_URL).path("post")
            .entity(Sentinel(name="n", value=1)).transport(transport)
            .async_post().log_payload().get_response()
        )

        sent = transport.calls[0]
        assert sent.method == HttpMethod.POST
        assert json.loads(sent.body) == {"name": "n", "value": 1}
