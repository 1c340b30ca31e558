#!/usr/bin/env python3
"""
Deploy step: deploys one named contract, runs its initializers and
publishes its address
"""

import logging
from typing import Any, Mapping, Optional, Tuple

from .errors import (
    ConfigurationError,
    DeploymentError,
    GatewayRejectionError,
    GatewayTimeoutError,
    REASON_GATEWAY_REJECTED,
    REASON_INITIALIZER_FAILED,
    REASON_TIMEOUT,
)
from .logging_utils import log_address
from .models import (
    Currency,
    CurrencyRegistry,
    DeploymentResult,
    DeploymentStep,
    EnvironmentContext,
    StepOutput,
)

logger = logging.getLogger(__name__)


def resolve_args(args: Tuple[Any, ...], prior_results: Mapping[str, DeploymentResult],
                 currencies: Optional[CurrencyRegistry]) -> Tuple[Any, ...]:
    """Replace StepOutput / Currency placeholders with concrete addresses"""
    resolved = []
    for value in args:
        if isinstance(value, StepOutput):
            if value.step not in prior_results:
                raise ConfigurationError(f"Output of {value.step} is not available yet")
            value = prior_results[value.step].address
        elif isinstance(value, Currency):
            if currencies is None or value.symbol not in currencies:
                raise ConfigurationError(f"Currency {value.symbol} is not configured")
            value = currencies[value.symbol]
        resolved.append(value)
    return tuple(resolved)


class DeployStep:
    def __init__(self, definition: DeploymentStep, gateway: Any):
        self.definition = definition
        self.gateway = gateway

    @property
    def name(self) -> str:
        return self.definition.contract_name

    def execute(self, context: EnvironmentContext, prior_results: Mapping[str, DeploymentResult],
                currencies: Optional[CurrencyRegistry] = None) -> DeploymentResult:
        """
        Deploy the contract and run its initializers in order.

        Each call deploys a brand new contract; nothing is cached. Failures
        raise DeploymentError and are never retried here.
        """
        step = self.definition
        args = resolve_args(step.args, prior_results, currencies)

        logger.info(f"Deploying {step.contract_name}...")
        try:
            factory = self.gateway.get_factory(step.contract_name)
            instance = factory.deploy(*args, sender=context.admin)
        except GatewayTimeoutError as e:
            raise DeploymentError(step.contract_name, REASON_TIMEOUT, e) from e
        except GatewayRejectionError as e:
            raise DeploymentError(step.contract_name, REASON_GATEWAY_REJECTED, e) from e

        for call in step.initializers:
            call_args = resolve_args(call.args, prior_results, currencies)
            logger.info(f"Calling {step.contract_name}.{call.method}{call_args}")
            try:
                instance.transact(call.method, *call_args, sender=context.admin)
            except GatewayTimeoutError as e:
                raise DeploymentError(step.contract_name, REASON_TIMEOUT, e) from e
            except GatewayRejectionError as e:
                raise DeploymentError(step.contract_name, REASON_INITIALIZER_FAILED, e) from e

        self._run_checks(instance.address)

        log_address(step.log_name, instance.address, step=step.contract_name)
        return DeploymentResult(
            contract_name=step.contract_name,
            log_name=step.log_name,
            address=instance.address,
            order=len(prior_results),
        )

    def _run_checks(self, address: str) -> None:
        # Re-attach by address so the checks read what is actually on chain
        if not self.definition.checks:
            return
        try:
            attached = self.gateway.get_instance_at(self.definition.contract_name, address)
            for method in self.definition.checks:
                value = attached.call(method)
                logger.info(f"{self.definition.contract_name}.{method}() = {value!r}")
        except GatewayRejectionError as e:
            raise DeploymentError(self.definition.contract_name, REASON_GATEWAY_REJECTED, e) from e
