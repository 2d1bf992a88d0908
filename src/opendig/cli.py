import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List

from digtool import DigExecutionError, DigResult, DigService
from subnets import MultiSubnetQueryResult, RegistryError, SubnetFanout, load_registry
from reporting.assembler import Assemble
from reporting.comparison import Comparison, fanout_frame
from reporting.targets import InvalidQuery, require_query

from .config import Settings
from .logs import setup_logging, startup_info

"""
The command-line interface for OpenDig.
It mirrors the flow of the API:
  1) Validate + normalize the query (require_query)
  2) Run dig once (--subnet) or once per registry entry
  3) Print the formatted output, a comparison table, or the JSON payload the API would return
"""


# Parse the command-line arguments
def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="opendig", description="dig front end with multi-subnet (ECS) comparison")
    p.add_argument("domain", nargs="?", help="Domain name (e.g., example.com)")
    p.add_argument("-t", "--type", dest="record_type", default="A", help="Record type (default: A)")
    p.add_argument("--subnet", default=None, help="Query a single ECS subnet instead of the whole registry")
    p.add_argument("--json", dest="as_json", action="store_true", help="Output the API JSON payload")
    p.add_argument("--compare", action="store_true", help="Print a per-answer comparison table (fan-out only)")
    p.add_argument("--status", action="store_true", help="Report dig availability and exit")
    return p.parse_args(argv)


def print_single(result: DigResult) -> None:
    print(result.output)


def print_fanout(result: MultiSubnetQueryResult) -> None:
    """
    Print a readable console output for a multi-subnet result.
    One block per successful vantage point, then the failures.
    """
    print(
        f"Queries: {result.total_queries} | "
        f"Succeeded: {result.success_count} | "
        f"Failed: {result.failure_count}"
    )

    for ok in result.successful_results:
        info = ok.subnet_info
        print(f"\n== {info.province} / {info.isp} ({info.subnet}) ==")
        print(ok.result.output)

    for bad in result.failed_results:
        info = bad.subnet_info
        print(f"\n== {info.province} / {info.isp} ({info.subnet}) ==")
        print(f"  {bad.error}")


def print_comparison(result: MultiSubnetQueryResult) -> None:
    a = Comparison.compute(fanout_frame(result))

    groups = a["answer_groups"]
    if groups.empty:
        print("No successful answers.")
    else:
        print(groups.to_string(index=False))

    print()
    print(a["counts_by_status"].to_string(index=False))


async def run_status(service: DigService, settings: Settings) -> Dict[str, Any]:
    info = await service.tool_info()
    return Assemble().status(info, platform=sys.platform, default_server=settings.default_server)


def main(argv: List[str] | None = None) -> int:
    """
    CLI entrypoint.

    Returns:
        Process exit code (0 = success, 1 = dig failed, 2 = invalid input or subnet registry).
    """
    args = parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings)
    startup_info.initialize(settings)

    service = DigService(
        server=settings.default_server,
        dig_path=settings.dig_path,
        query_timeout=settings.query_timeout,
        process_timeout=settings.process_timeout,
    )

    if args.status:
        payload = asyncio.run(run_status(service, settings))
        print(json.dumps(payload, indent=2))
        return 0 if payload["data"]["toolAvailable"] else 1

    # Validate everything up-front so no subprocess is spawned for bad input.
    try:
        options = require_query(args.domain, args.record_type, args.subnet)
    except InvalidQuery as e:
        for err in e.errors:
            print(f"Invalid input: {err}")
        return 2

    try:
        if options.subnet:
            result = asyncio.run(service.execute(options))
        else:
            fanout = SubnetFanout(service, load_registry(settings.subnets_file), max_concurrency=settings.max_concurrency)
            result = asyncio.run(fanout.query_all(options.domain, options.record_type))
    except RegistryError as e:
        print(f"Invalid subnet registry: {e}")
        return 2
    except DigExecutionError as e:
        print(f"Error: {e}")
        return 1

    # Output: JSON (machine-readable) or human-readable text
    if args.as_json:
        print(json.dumps(Assemble().success(result), indent=2, ensure_ascii=False))
    elif isinstance(result, MultiSubnetQueryResult):
        if args.compare:
            print_comparison(result)
        else:
            print_fanout(result)
    else:
        print_single(result)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
