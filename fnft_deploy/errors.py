#!/usr/bin/env python3
"""
Deployment error taxonomy
Every failure surfaces to the process boundary with the step name and cause
"""

from typing import Any, List, Optional

# Reasons a single deploy step can fail with
REASON_GATEWAY_REJECTED = "gateway-rejected"
REASON_INITIALIZER_FAILED = "initializer-failed"
REASON_TIMEOUT = "timeout"


class DeployError(Exception):
    """Base class for all deployment errors"""


class ConfigurationError(DeployError):
    """Missing or invalid configuration; raised before any contract is deployed"""


class PlanDefinitionError(ConfigurationError):
    """A deployment plan references outputs that are unknown or not yet produced"""


class GatewayRejectionError(DeployError):
    """The chain (or the contract artifacts) rejected a deployment or call"""


class GatewayTimeoutError(GatewayRejectionError):
    """No receipt arrived within the gateway's timeout"""


class DeploymentError(DeployError):
    """A single deploy step failed. Never retried."""

    def __init__(self, step: str, reason: str, cause: Optional[BaseException] = None):
        self.step = step
        self.reason = reason
        self.cause = cause
        message = f"{step} failed ({reason})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PartialRunError(DeployError):
    """
    A run aborted after zero or more steps already succeeded.

    The completed results are durable on-chain, so they are kept here for the
    operator to resume from the failed step instead of redeploying them.
    """

    def __init__(self, failed_step: str, cause: BaseException, completed: Optional[List[Any]] = None):
        self.failed_step = failed_step
        self.cause = cause
        self.completed = list(completed or [])
        done = ", ".join(r.contract_name for r in self.completed) or "none"
        super().__init__(f"Run aborted at {failed_step}: {cause} (completed: {done})")
