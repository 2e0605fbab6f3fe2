import logging
from pathlib import Path

import pytest

from querybench.foundation.config import (
    CheckerConfig,
    TelemetryConfig,
    find_config_file,
    load_config,
)
from querybench.services.query.config import QueryConfig


def test_load_config_parses_sections(tmp_path: Path):
    config_path = tmp_path / "querybench.yml"
    config_path.write_text(
        """
query:
  urls:
    - http://replica-a:9090/api/v1/query_range
    - http://replica-b:9090/api/v1/query_range
  concurrency: 4
  num_write_hosts: 10
  num_series: 500
  load_range: 2h
  load_step: 30s
  accuracy_range: 10m
  accuracy_step: 15s
  aggregation: sum
  labels:
    job: bench
    env: test
  headers:
    X-Scope-OrgID: tenant-1
  sleep: 500ms
  debug: true
  debug_length: 128
  seed: 7
checker:
  hosts: [host-1, host-2]
telemetry:
  metrics_port: 9100
""".strip()
    )

    cfg = load_config(str(config_path))

    assert cfg.query == QueryConfig(
        urls=[
            "http://replica-a:9090/api/v1/query_range",
            "http://replica-b:9090/api/v1/query_range",
        ],
        concurrency=4,
        num_write_hosts=10,
        num_series=500,
        load_range=7200.0,
        load_step=30.0,
        accuracy_range=600.0,
        accuracy_step=15.0,
        aggregation="sum",
        labels={"job": "bench", "env": "test"},
        headers={"X-Scope-OrgID": "tenant-1"},
        sleep=0.5,
        debug=True,
        debug_length=128,
        seed=7,
    )
    assert list(cfg.query.labels) == ["job", "env"]
    assert cfg.checker == CheckerConfig(hosts=["host-1", "host-2"])
    assert cfg.telemetry == TelemetryConfig(metrics_port=9100)
    assert cfg.present_sections == frozenset({"query", "checker", "telemetry"})


def test_load_config_defaults_for_missing_sections(tmp_path: Path):
    config_path = tmp_path / "querybench.yml"
    config_path.write_text("query:\n  urls: http://a/q, http://b/q\n")

    cfg = load_config(str(config_path))

    assert cfg.query.urls == ["http://a/q", "http://b/q"]
    assert cfg.query.sleep == 1.0
    assert cfg.checker.hosts == []
    assert cfg.telemetry.metrics_port is None
    assert cfg.present_sections == frozenset({"query"})


def test_load_config_accepts_flag_style_pairs_and_alias(tmp_path: Path, caplog):
    config_path = tmp_path / "querybench.yml"
    config_path.write_text(
        """
query:
  endpoints: [http://a/q]
  labels: ["job=bench", "region = us-east"]
  headers: ["Authorization=Bearer abc"]
""".strip()
    )

    caplog.set_level(logging.WARNING)
    cfg = load_config(str(config_path))

    assert cfg.query.urls == ["http://a/q"]
    assert cfg.query.labels == {"job": "bench", "region": "us-east"}
    assert cfg.query.headers == {"Authorization": "Bearer abc"}
    assert any("deprecated" in rec.message for rec in caplog.records)


def test_load_config_rejects_malformed_pair(tmp_path: Path):
    config_path = tmp_path / "querybench.yml"
    config_path.write_text("query:\n  labels: [job]\n")

    with pytest.raises(ValueError):
        load_config(str(config_path))


def test_load_config_rejects_unknown_query_key(tmp_path: Path):
    config_path = tmp_path / "querybench.yml"
    config_path.write_text("query:\n  concurrancy: 3\n")

    with pytest.raises(TypeError, match="concurrancy"):
        load_config(str(config_path))


def test_load_config_raises_on_invalid_yaml(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    config_path = tmp_path / "invalid.yml"
    config_path.write_text("query: [oops\n")

    caplog.set_level(logging.ERROR)
    with pytest.raises(ValueError):
        load_config(str(config_path))

    assert any("Failed to parse configuration file" in rec.message for rec in caplog.records)


def test_load_config_validates_mapping(tmp_path: Path):
    config_path = tmp_path / "invalid_type.yml"
    config_path.write_text("- not_a_mapping")

    with pytest.raises(TypeError):
        load_config(str(config_path))


def test_load_config_validates_section_type(tmp_path: Path):
    config_path = tmp_path / "bad_section.yml"
    config_path.write_text("query: 3\n")

    with pytest.raises(TypeError, match="query section"):
        load_config(str(config_path))


def test_load_config_propagates_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yml"))


def test_find_config_file(tmp_path: Path):
    assert find_config_file(tmp_path) is None
    (tmp_path / "querybench.yaml").write_text("query: {}\n")
    assert find_config_file(tmp_path) == str(tmp_path / "querybench.yaml")
    (tmp_path / "querybench.yml").write_text("query: {}\n")
    assert find_config_file(tmp_path) == str(tmp_path / "querybench.yml")
