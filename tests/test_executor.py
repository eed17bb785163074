import httpx
import pytest

from httpload.executor import build_body, clean_message, execute_request, send_request
from httpload.logsink import LogSink
from httpload.metrics import TestMetrics
from httpload.plan import RequestDescriptor
from httpload.target import app


class TestBuildBody:
    def test_json(self):
        body, ct = build_body("json", '{"a": "{data1}", "b": "{data2}"}', ["x", "y"])
        assert body == '{"a": "x", "b": "y"}'
        assert ct == "application/json"

    def test_form_ignores_template(self):
        body, ct = build_body("form", "ignored {data1}", ["x", "y z"])
        assert body == "data1=x&data2=y z"
        assert ct == "application/x-www-form-urlencoded"

    def test_form_without_tokens(self):
        assert build_body("form", "tpl", []) == ("", "application/x-www-form-urlencoded")

    def test_raw(self):
        assert build_body("raw", "id={data1}", ["7"]) == ("id=7", "text/plain")

    @pytest.mark.parametrize("fmt", ["", "xml", None])
    def test_unknown_is_raw(self, fmt):
        assert build_body(fmt, "id={data1}", ["7"]) == ("id=7", "text/plain")

    def test_case_insensitive(self):
        assert build_body("JSON", "{}", [])[1] == "application/json"


def test_clean_message():
    assert clean_message("  line1\nline2\n\n") == "line1 line2"


@pytest.mark.asyncio
async def test_sends_method_body_and_headers(make_config, recorder):
    config = make_config(method="PUT", post_data_format="json", post_body='{"v": "{data1}"}',
                         headers={"X-Api-Key": "k"})
    async with httpx.AsyncClient(transport=recorder) as client:
        outcome = await send_request(client, RequestDescriptor("http://h/a", ("a",)), config)

    req = recorder.seen[0]
    assert req.method == "PUT"
    assert str(req.url) == "http://h/a"
    assert req.content == b'{"v": "a"}'
    assert req.headers["content-type"] == "application/json"
    assert req.headers["x-api-key"] == "k"
    assert outcome.status_code == 200
    assert outcome.message == '{"v": "a"}'
    assert outcome.elapsed_ns >= 0


@pytest.mark.asyncio
async def test_configured_header_overrides_content_type(make_config, recorder):
    config = make_config(post_data_format="json", headers={"content-type": "application/vnd.x+json"})
    async with httpx.AsyncClient(transport=recorder) as client:
        await send_request(client, RequestDescriptor("http://h/"), config)
    assert recorder.seen[0].headers.get_list("content-type") == ["application/vnd.x+json"]


@pytest.mark.asyncio
async def test_error_status_is_plain_outcome(make_config):
    transport = httpx.MockTransport(lambda r: httpx.Response(503, text="  busy\nretry later "))
    async with httpx.AsyncClient(transport=transport) as client:
        outcome = await send_request(client, RequestDescriptor("http://h/"), make_config())
    assert outcome.status_code == 503
    assert outcome.message == "busy retry later"


@pytest.mark.asyncio
async def test_transport_failure_is_status_zero(make_config):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
        outcome = await send_request(client, RequestDescriptor("http://unreachable/"), make_config())
    assert outcome.status_code == 0
    assert outcome.message == "error: connection refused"
    assert outcome.url == "http://unreachable/"


@pytest.mark.asyncio
async def test_invalid_url_is_status_zero(make_config, recorder):
    async with httpx.AsyncClient(transport=recorder) as client:
        outcome = await send_request(client, RequestDescriptor("http://h/\x00bad"), make_config())
    assert outcome.status_code == 0
    assert outcome.message.startswith("error: ")
    assert recorder.seen == []


@pytest.mark.asyncio
async def test_execute_logs_and_records(make_config, recorder, tmp_path):
    metrics = TestMetrics()
    path = tmp_path / "log.txt"
    with LogSink.open(str(path), "full") as sink:
        async with httpx.AsyncClient(transport=recorder) as client:
            await execute_request(client, RequestDescriptor("http://h/x", ("x",)), make_config(),
                                  sink, metrics)
    assert metrics.request_count == 1
    assert metrics.status_code_counts == {200: 1}
    assert 'http://h/x": 200: ""' in path.read_text()


@pytest.mark.asyncio
async def test_against_target_app(make_config):
    config = make_config(method="POST", post_data_format="form")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport) as client:
        outcome = await send_request(client, RequestDescriptor("http://target/echo/a", ("a", "b")), config)
        failed = await send_request(client, RequestDescriptor("http://target/fail"), make_config())
    assert outcome.status_code == 200
    assert '"method":"POST"' in outcome.message
    assert '"body":"data1=a&data2=b"' in outcome.message
    assert '"content_type":"application/x-www-form-urlencoded"' in outcome.message
    assert failed.status_code == 500


@pytest.mark.asyncio
async def test_target_metrics_endpoint():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as client:
        r = await client.get("http://target/metrics")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "target_requests_total" in r.text
