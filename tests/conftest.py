import httpx
import pytest

from httpload.config import TestConfig


@pytest.fixture
def make_config(tmp_path):
    def _make(**kwargs):
        kwargs.setdefault("url", "http://h/{data1}")
        kwargs.setdefault("output_file", str(tmp_path / "out.txt"))
        return TestConfig(**kwargs)
    return _make


@pytest.fixture
def recorder():
    """MockTransport that answers 200 with the request body and keeps every request."""
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, text=request.content.decode())

    transport = httpx.MockTransport(handler)
    transport.seen = seen
    return transport
