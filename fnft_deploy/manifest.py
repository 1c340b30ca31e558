#!/usr/bin/env python3
"""
Deployment manifest (deployment.json)

Structured record of a run, written next to the ``Deploy: NAME=address``
lines. A manifest from a failed run can be fed back with ``--resume`` so the
contracts it lists are not deployed again.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError
from .models import DeploymentResult, RunReport

logger = logging.getLogger(__name__)


def build_manifest(report: RunReport, network: Optional[str] = None) -> Dict[str, Any]:
    context = report.context
    return {
        'network': context.network if context else network,
        'chainId': context.chain_id if context else None,
        'mode': context.mode.value if context else None,
        'status': report.status,
        'failedStep': report.failed_step,
        'error': str(report.error) if report.error is not None else None,
        'contracts': {r.log_name: r.address for r in report.results},
        'steps': [
            {
                **r.to_summary(),
                'logName': r.log_name,
                'deployedAt': r.deployed_at.isoformat(),
            }
            for r in report.results
        ],
    }


def write_manifest(report: RunReport, path: Path, network: Optional[str] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(build_manifest(report, network), f, indent=2)
    logger.info(f"Deployment manifest written to {path}")
    return path


def load_results(path: Path, network: Optional[str] = None, chain_id: Optional[int] = None) -> List[DeploymentResult]:
    """
    Read the completed steps of an earlier run

    When ``network``/``chain_id`` are given, the manifest must have been
    written for the same network; its addresses mean nothing elsewhere.
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read deployment manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Malformed deployment manifest {path}: expected an object")
    recorded_network = data.get('network')
    if network is not None and recorded_network is not None and recorded_network != network:
        raise ConfigurationError(
            f"Deployment manifest {path} was written for {recorded_network}, not {network}"
        )
    recorded_chain = data.get('chainId')
    if chain_id is not None and recorded_chain is not None and recorded_chain != chain_id:
        raise ConfigurationError(
            f"Deployment manifest {path} was written for chain {recorded_chain}, not {chain_id}"
        )

    results = []
    try:
        for order, entry in enumerate(data.get('steps', [])):
            deployed_at = entry.get('deployedAt')
            kwargs = {'deployed_at': datetime.fromisoformat(deployed_at)} if deployed_at else {}
            results.append(DeploymentResult(
                contract_name=entry['contractName'],
                log_name=entry.get('logName', entry['contractName']),
                address=entry['address'],
                order=order,
                **kwargs,
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed deployment manifest {path}: {e}") from e
    return results
