# httpload/executor.py
import logging
import time
from datetime import datetime
from typing import Optional, Sequence, Tuple

import httpx

from httpload import settings
from httpload.config import TestConfig
from httpload.logsink import LogSink
from httpload.metrics import RequestOutcome, TestMetrics
from httpload.plan import RequestDescriptor, substitute

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    settings.FORMAT_JSON: "application/json",
    settings.FORMAT_FORM: "application/x-www-form-urlencoded",
    settings.FORMAT_RAW: "text/plain",
}


def build_body(post_data_format: str, post_body: str, parts: Sequence[str]) -> Tuple[str, str]:
    """Return (body, content_type). Unknown formats are sent as raw text."""
    fmt = (post_data_format or "").lower()
    if fmt == settings.FORMAT_FORM:
        # values are sent as-is, no url encoding
        body = "&".join(f"data{i}={part}" for i, part in enumerate(parts, start=1))
        return body, CONTENT_TYPES[settings.FORMAT_FORM]
    if fmt != settings.FORMAT_JSON:
        fmt = settings.FORMAT_RAW
    return substitute(post_body, parts), CONTENT_TYPES[fmt]


def clean_message(text: str) -> str:
    return text.strip().replace("\n", " ")


def _error_message(exc: Exception) -> str:
    return f"error: {exc}" if str(exc) else f"error: {type(exc).__name__}"


async def send_request(client: httpx.AsyncClient, descriptor: RequestDescriptor,
                       config: TestConfig) -> RequestOutcome:
    """Perform one call. Transport problems come back as status 0, nothing is raised."""
    body, content_type = build_body(config.post_data_format, config.post_body, descriptor.data_parts)
    started_at = datetime.now()
    start = time.perf_counter_ns()
    try:
        headers = httpx.Headers({"Content-Type": content_type})
        for key, value in config.headers.items():
            headers[key] = value
        request = client.build_request(config.method, descriptor.url, content=body, headers=headers)
        start = time.perf_counter_ns()
        response = await client.send(request)
        elapsed = time.perf_counter_ns() - start
        return RequestOutcome(descriptor.url, response.status_code, elapsed,
                              clean_message(response.text), started_at)
    except Exception as e:
        elapsed = time.perf_counter_ns() - start
        logger.debug("%s %s failed: %r", config.method, descriptor.url, e)
        return RequestOutcome(descriptor.url, 0, elapsed, _error_message(e), started_at)


async def execute_request(client: httpx.AsyncClient, descriptor: RequestDescriptor,
                          config: TestConfig, sink: Optional[LogSink],
                          metrics: TestMetrics) -> RequestOutcome:
    outcome = await send_request(client, descriptor, config)
    if sink is not None:
        sink.write_outcome(outcome)
    metrics.record(outcome)
    return outcome
