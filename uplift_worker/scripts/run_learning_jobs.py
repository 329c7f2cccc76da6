#!/usr/bin/env python3
"""
Learning Job Runner

Runs the learning jobs outside the FastAPI application, e.g. from a
scheduler or by hand:

    uplift-learning daily-learning
    uplift-learning compute-similarities --shop example.myshopify.com
    uplift-learning update-profiles --shop example.myshopify.com --privacy-level advanced
    uplift-learning health --days 7
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from uplift_worker.core.database import close_engine
from uplift_worker.core.database.create_tables import create_all_tables
from uplift_worker.core.logging import get_logger
from uplift_worker.shared.helpers import now_utc

logger = get_logger(__name__)

JOBS = ("daily-learning", "compute-similarities", "update-profiles", "health")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uplift-learning", description="Run Cart Uplift learning jobs"
    )
    parser.add_argument("job", choices=JOBS, help="Job to run")
    parser.add_argument("--shop", help="Run for this shop domain only")
    parser.add_argument(
        "--privacy-level",
        choices=("basic", "standard", "advanced"),
        help="Override the shop's privacy level (update-profiles with --shop only)",
    )
    parser.add_argument(
        "--days", type=int, default=7, help="Look-back period for the health summary"
    )
    parser.add_argument(
        "--create-tables", action="store_true", help="Create missing tables first"
    )
    return parser


async def run_job(args: argparse.Namespace) -> dict:
    """Dispatch to the requested job and return its JSON-ready result"""
    # Import here so --help works without a configured database
    from uplift_worker.domains.learning import jobs
    from uplift_worker.domains.learning.services import JobHealthService

    if args.job == "health":
        return await JobHealthService().get_health_summary(args.shop, days=args.days)

    if args.job == "daily-learning":
        if args.shop:
            result = await jobs.run_daily_learning(args.shop, triggered_by="manual")
        else:
            result = await jobs.run_daily_learning_for_all_shops(triggered_by="manual")
    elif args.job == "compute-similarities":
        if args.shop:
            result = await jobs.run_similarity_computation(args.shop, triggered_by="manual")
        else:
            result = await jobs.run_similarity_computation_for_all_shops(
                triggered_by="manual"
            )
    else:
        if args.shop:
            result = await jobs.run_profile_update(
                args.shop, privacy_level=args.privacy_level, triggered_by="manual"
            )
        else:
            result = await jobs.run_profile_update_for_all_shops(triggered_by="manual")

    output = result.to_dict()
    if "failed_shops" in output:
        output["success"] = output["failed_shops"] == 0
    return output


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    start_time = now_utc()
    logger.info(f"Learning job {args.job} started at {start_time.isoformat()}")

    try:
        if args.create_tables:
            await create_all_tables()
        output = await run_job(args)
    except Exception as e:
        logger.error(f"Learning job {args.job} failed: {e}", exc_info=True)
        return 1
    finally:
        await close_engine()

    duration = (now_utc() - start_time).total_seconds()
    logger.info(f"Job completed in {duration:.2f} seconds")
    print(json.dumps(output, indent=2, default=str))
    return 0 if output.get("success", True) else 1


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
