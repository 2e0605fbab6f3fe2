import httpx
import pytest

from querybench.foundation.config import TelemetryConfig, UnifiedConfig
from querybench.foundation.config_validation import (
    validate_config,
    validate_endpoints,
    validate_query_config,
)
from querybench.services.query.config import QueryConfig


def test_validate_query_config_ok():
    cfg = QueryConfig(urls=["http://a/q", "http://b/q"], num_series=202, num_write_hosts=2)

    results = validate_query_config(cfg)

    assert {k: v.severity for k, v in results.items()} == {
        "urls": "ok",
        "concurrency": "ok",
        "durations": "ok",
        "sleep": "ok",
        "series": "ok",
    }
    assert results["series"].hint == "2 hosts per load query"


def test_validate_query_config_reports_problems():
    cfg = QueryConfig(
        urls=[],
        concurrency=0,
        load_step=0,
        sleep=-1,
        num_series=1000,
        num_write_hosts=2,
        debug_length=-5,
    )

    results = validate_query_config(cfg)

    assert results["urls"].severity == "error"
    assert results["concurrency"].severity == "error"
    assert "load_step=0" in results["durations"].hint
    assert results["sleep"].severity == "error"
    assert results["series"].severity == "error"
    assert "max 202" in results["series"].hint
    assert results["debug_length"].severity == "error"


def test_validate_query_config_single_endpoint_warns():
    results = validate_query_config(QueryConfig(urls=["http://a/q"]))

    assert results["urls"].severity == "warning"


def test_validate_config_checks_metrics_port():
    unified = UnifiedConfig(
        query=QueryConfig(urls=["http://a/q", "http://b/q"]),
        telemetry=TelemetryConfig(metrics_port=70000),
    )

    results = validate_config(unified)

    assert results["telemetry.metrics_port"].severity == "error"
    assert results["query.urls"].severity == "ok"


@pytest.mark.asyncio
async def test_validate_endpoints_probes_each_url():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down":
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.host == "broken":
            return httpx.Response(503, request=request)
        assert request.url.params["query"] == "vector(1)"
        return httpx.Response(200, json={"status": "success"}, request=request)

    cfg = QueryConfig(urls=["http://up/q", "http://down/q", "http://broken/q"])
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        results = await validate_endpoints(cfg, client=client)

    assert results["http://up/q"].severity == "ok"
    assert results["http://down/q"].severity == "error"
    assert "connection refused" in results["http://down/q"].hint
    assert results["http://broken/q"].severity == "warning"


@pytest.mark.asyncio
async def test_validate_endpoints_offline_skips_probe():
    cfg = QueryConfig(urls=["http://a/q"])

    results = await validate_endpoints(cfg, offline=True)

    assert results["http://a/q"].severity == "warning"
    assert "Offline mode" in results["http://a/q"].hint
