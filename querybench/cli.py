from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List


def _check_config(argv: List[str]) -> int:
    from .foundation.config import find_config_file, load_config
    from .foundation.config_validation import validate_config, validate_endpoints

    parser = argparse.ArgumentParser(prog="querybench check-config")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip probing the configured query endpoints",
    )
    args = parser.parse_args(argv)

    cfg_path = args.config or find_config_file()
    if not cfg_path:
        print("error: no configuration file found")
        return 2

    unified = load_config(cfg_path)
    results = validate_config(unified)
    results.update(
        {
            f"endpoint {url}": issue
            for url, issue in asyncio.run(
                validate_endpoints(unified.query, offline=args.offline)
            ).items()
        }
    )
    failed = False
    for name, issue in results.items():
        print(f"{issue.severity.upper():8} {name}: {issue.hint}")
        failed = failed or issue.severity == "error"
    return 1 if failed else 0


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="querybench")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("run", help="Run query load and accuracy checks")
    sub.add_parser("check-config", help="Validate a configuration file")

    args, rest = parser.parse_known_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "run":
        from .services.query.server import main as run_main
        run_main(rest)
    elif args.cmd == "check-config":
        raise SystemExit(_check_config(rest))
    else:
        parser.print_help()


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
