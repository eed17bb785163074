# httpload/dispatcher.py
import asyncio
import enum
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

import httpx

from httpload.config import TestConfig, load_data
from httpload.errors import OutputFileError
from httpload.executor import execute_request
from httpload.logsink import LogSink
from httpload.metrics import RequestOutcome, TestMetrics
from httpload.plan import RequestDescriptor, build_plan
from httpload.summary import write_summary

logger = logging.getLogger(__name__)

Executor = Callable[[RequestDescriptor], Awaitable[RequestOutcome]]


class DispatchState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class Dispatcher:
    """
    Runs a plan with at most `concurrency` requests in flight. The submit loop
    waits for a free slot before starting the next request; each request
    sleeps `delay_ms` inside its slot, then executes.
    """

    def __init__(self, executor: Executor, concurrency: int, delay_ms: int = 0,
                 metrics: Optional[TestMetrics] = None):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.executor = executor
        self.concurrency = concurrency
        self.delay_s = max(delay_ms, 0) / 1000.0
        self.metrics = metrics
        self.state = DispatchState.IDLE

    async def _run_one(self, slots: asyncio.Semaphore, descriptor: RequestDescriptor):
        try:
            if self.delay_s:
                await asyncio.sleep(self.delay_s)
            await self.executor(descriptor)
        except Exception:
            # executors report failures as outcomes; anything else must not stop the run
            logger.exception("request to %s raised", descriptor.url)
        finally:
            slots.release()

    async def run(self, plan: Sequence[RequestDescriptor]):
        slots = asyncio.Semaphore(self.concurrency)
        tasks: List[asyncio.Task] = []
        self.state = DispatchState.RUNNING
        for descriptor in plan:
            await slots.acquire()
            tasks.append(asyncio.create_task(self._run_one(slots, descriptor)))

        self.state = DispatchState.DRAINING
        await asyncio.gather(*tasks)

        if self.metrics is not None:
            self.metrics.finish()
        self.state = DispatchState.DONE


def _client_limits(concurrency: int) -> httpx.Limits:
    # the pool must not be a tighter ceiling than the configured concurrency
    return httpx.Limits(max_connections=max(concurrency, 1),
                        max_keepalive_connections=max(concurrency, 1))


async def run_test(config: TestConfig, data: Optional[Sequence[str]] = None,
                   transport: Optional[httpx.AsyncBaseTransport] = None) -> TestMetrics:
    """
    Run one configured test: build the plan, execute it, append the summary
    to outputFile. Config and output errors are raised before any request.
    """
    if data is None:
        data = load_data(config)
    plan = build_plan(config.url, data, config.repeats)

    if not config.output_file:
        raise OutputFileError("error creating output file: no outputFile configured")

    logger.info("running %d requests against %s (concurrency=%d, delay=%dms)",
                len(plan), config.url, config.concurrency, config.delay)

    with LogSink.open(config.output_file, config.capture_result) as sink:
        metrics = TestMetrics()
        # no request timeout: slow endpoints report their real status
        async with httpx.AsyncClient(transport=transport, timeout=None,
                                     limits=_client_limits(config.concurrency)) as client:
            async def executor(descriptor):
                return await execute_request(client, descriptor, config, sink, metrics)

            dispatcher = Dispatcher(executor, config.concurrency, config.delay, metrics=metrics)
            await dispatcher.run(plan)

        write_summary(metrics, config, sink)

    logger.info("finished %d requests, results in %s", metrics.request_count, config.output_file)
    return metrics
