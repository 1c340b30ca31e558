#!/usr/bin/env python3
"""
Deploy the FNFT contract family

Usage:
    fnft-deploy                      # full plan against TEST_NETWORK
    fnft-deploy --only TipERC721     # a single contract
    fnft-deploy --plan snaps
    fnft-deploy --resume deployment.json   # continue after a failed run
    fnft-deploy --dry-run            # rehearse without a node

Exit code 0 when every step completed, 1 otherwise.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .catalog import PLANS, get_plan
from .config import DeployConfig
from .dry_run import InMemoryGateway, InMemorySignerProvider
from .errors import ConfigurationError
from .gateway import Web3Gateway
from .logging_utils import configure_logging
from .manifest import load_results, write_manifest
from .orchestrator import Orchestrator
from .signers import Web3SignerProvider

logger = logging.getLogger("fnft_deploy")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fnft-deploy", description="Deploy the FNFT contracts")
    parser.add_argument("--plan", choices=sorted(PLANS), default="all", help="deployment plan to run")
    parser.add_argument("--only", action="append", default=[], metavar="CONTRACT",
                        help="deploy only this contract (repeatable)")
    parser.add_argument("--resume", type=Path, metavar="MANIFEST",
                        help="manifest of an earlier run; its contracts are not deployed again")
    parser.add_argument("--manifest", type=Path, help="write the deployment manifest here")
    parser.add_argument("--env-file", help=".env file to load")
    parser.add_argument("--dry-run", action="store_true", help="use an in-memory chain")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        config = DeployConfig.from_env(dotenv_path=args.env_file)
        configure_logging(config.log_level, config.log_file)

        plan = get_plan(args.plan, args.only)
        completed = []
        if args.resume:
            completed = load_results(args.resume, network=config.network, chain_id=config.profile.chain_id)

        if args.dry_run:
            logger.info("Dry run: using an in-memory chain")
            gateway = InMemoryGateway()
            signers = InMemorySignerProvider()
        else:
            gateway = Web3Gateway.connect(config)
            signers = Web3SignerProvider(gateway.w3, chain_id=config.profile.chain_id)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    report = Orchestrator(gateway, signers).run_report(plan, config, completed=completed)

    manifest_path = args.manifest or config.manifest_path
    if manifest_path:
        write_manifest(report, manifest_path, network=config.network)

    logger.info(f"Summary: {json.dumps(report.summary())}")
    if not report.ok:
        logger.error(f"Deployment failed at {report.failed_step}: {report.error}")
        if report.results:
            done = ", ".join(r.contract_name for r in report.results)
            logger.error(f"Already deployed (do not redeploy): {done}")
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
