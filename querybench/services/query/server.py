from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from querybench.foundation.config import UnifiedConfig, find_config_file, load_config

from .checker import InMemoryChecker
from .errors import ConfigurationInfeasible
from .executor import QueryExecutor, build_engine
from .metrics import start_metrics_server

logger = logging.getLogger(__name__)


async def _run(cfg: UnifiedConfig) -> None:
    checker = InMemoryChecker(cfg.checker.hosts)
    async with httpx.AsyncClient(timeout=cfg.query.timeout) as client:
        executor = QueryExecutor(cfg.query, checker, build_engine(cfg.query, client))
        await executor.start()
        try:
            await executor.wait()
        finally:
            await executor.stop()


def _log_config_source(cfg_path: str | None, *, cli_override: str | None) -> None:
    if cli_override:
        logger.info("Loading configuration from %s (--config)", cfg_path)
    elif cfg_path:
        logger.info("Loading configuration from %s (discovered)", cfg_path)
    else:
        logger.error("No configuration file given and none found in the working directory")


def main(argv: list[str] | None = None) -> None:
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    parser = argparse.ArgumentParser(
        prog="querybench run",
        description="Generate query load and check replica consistency and accuracy",
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port (overrides telemetry.metrics_port)",
    )
    args = parser.parse_args(raw_argv)

    cfg_path = args.config or find_config_file()
    _log_config_source(cfg_path, cli_override=args.config)
    if not cfg_path:
        raise SystemExit(2)

    unified = load_config(cfg_path)
    if "query" not in unified.present_sections:
        logger.error("Configuration file %s does not define the 'query' section.", cfg_path)
        raise SystemExit(2)

    port = args.metrics_port if args.metrics_port is not None else unified.telemetry.metrics_port
    if port:
        start_metrics_server(port)
        logger.info("Serving metrics on port %d", port)

    try:
        asyncio.run(_run(unified))
    except ConfigurationInfeasible as exc:
        logger.critical(
            "num series exceeds metrics emitted by write load num hosts: "
            "query-num-series=%d max-valid-query-num-series=%d num-write-hosts=%d",
            exc.num_series,
            exc.max_series,
            exc.num_write_hosts,
        )
        raise SystemExit(1) from exc
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        pass


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
