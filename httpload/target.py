# httpload/target.py
# Small service to point load tests at: echoes requests, fails on demand.
import argparse
import asyncio
import random

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

app = FastAPI()
app.state.latency = 0
app.state.jitter = 0
app.state.error_rate = 0.0

registry = CollectorRegistry()
REQUESTS = Counter("target_requests_total", "Total requests", ["endpoint"], registry=registry)
ERRORS = Counter("target_errors_total", "Errors returned", registry=registry)
LATENCY = Histogram("target_latency_seconds", "Simulated latency seconds", registry=registry)


async def _simulate():
    wait = max(0, random.uniform(-app.state.jitter, app.state.jitter) + app.state.latency) / 1000.0
    if wait:
        await asyncio.sleep(wait)
    LATENCY.observe(wait)
    if app.state.error_rate and random.random() < app.state.error_rate:
        ERRORS.inc()
        raise HTTPException(status_code=500, detail="simulated error")


@app.api_route("/echo/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
@app.api_route("/echo", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def echo(request: Request, path: str = ""):
    REQUESTS.labels(endpoint="/echo").inc()
    await _simulate()
    body = (await request.body()).decode("utf-8", errors="replace")
    return {
        "method": request.method,
        "path": path,
        "query": dict(request.query_params),
        "content_type": request.headers.get("content-type", ""),
        "body": body,
    }


@app.get("/fail")
async def fail():
    REQUESTS.labels(endpoint="/fail").inc()
    ERRORS.inc()
    raise HTTPException(status_code=500, detail="always fails")


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8101)
    p.add_argument("--latency", type=int, default=50)
    p.add_argument("--jitter", type=int, default=10)
    p.add_argument("--error", type=float, default=0.0)
    args = p.parse_args()
    app.state.latency = args.latency
    app.state.jitter = args.jitter
    app.state.error_rate = args.error
    uvicorn.run(app, host=args.host, port=args.port)
