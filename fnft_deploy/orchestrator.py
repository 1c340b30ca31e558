#!/usr/bin/env python3
"""
Deployment orchestrator

Runs a plan of deploy steps strictly in the given order, threading earlier
results and the currency registry into later steps. The first failure stops
the run; completed results are reported, never redeployed.
"""

import logging
from collections import OrderedDict
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import DeployConfig
from .environment import EnvironmentSelector
from .errors import ConfigurationError, DeployError, PartialRunError, PlanDefinitionError
from .models import (
    CurrencyRegistry,
    DeploymentResult,
    DeploymentStep,
    EnvironmentContext,
    RunReport,
    STATUS_FAILURE,
    STATUS_SUCCESS,
)
from .steps import DeployStep

logger = logging.getLogger(__name__)

ENVIRONMENT_STEP = "environment"
PLAN_STEP = "plan"


def validate_plan(plan: Sequence[DeploymentStep], available: Iterable[str] = ()) -> None:
    """
    Reject plans whose steps consume outputs that are not produced earlier.

    ``available`` names outputs that already exist before the run (resumed
    deployments).
    """
    names = [step.contract_name for step in plan]
    seen = set(available)
    defined = set()
    for step in plan:
        if step.contract_name in defined:
            raise PlanDefinitionError(f"{step.contract_name} appears more than once in the plan")
        for dependency in step.requires:
            if dependency == step.contract_name:
                raise PlanDefinitionError(f"{step.contract_name} depends on its own address")
            if dependency in seen:
                continue
            if dependency in names:
                raise PlanDefinitionError(f"{step.contract_name} needs {dependency}, which is deployed after it")
            raise PlanDefinitionError(f"{step.contract_name} needs {dependency}, which is not part of the plan")
        seen.add(step.contract_name)
        defined.add(step.contract_name)


def in_plan_order(plan: Sequence[DeploymentStep], results: Dict[str, DeploymentResult]) -> List[DeploymentResult]:
    """Results ordered as the plan deploys them, earlier-run extras last, re-indexed from 0"""
    names = [step.contract_name for step in plan if step.contract_name in results]
    names += [name for name in results if name not in names]
    return [replace(results[name], order=order) for order, name in enumerate(names)]


def required_currencies(plan: Sequence[DeploymentStep]) -> List[str]:
    symbols: List[str] = []
    for step in plan:
        for symbol in step.currencies:
            if symbol not in symbols:
                symbols.append(symbol)
    return symbols


class Orchestrator:
    def __init__(self, gateway: Any, signer_provider: Any, selector: Optional[EnvironmentSelector] = None):
        self.gateway = gateway
        self.selector = selector or EnvironmentSelector(gateway, signer_provider)
        self.context: Optional[EnvironmentContext] = None
        self.currencies: Optional[CurrencyRegistry] = None

    def run(self, plan: Sequence[DeploymentStep], config: DeployConfig,
            completed: Optional[Iterable[DeploymentResult]] = None) -> List[DeploymentResult]:
        """
        Execute ``plan`` and return the ordered results.

        Raises:
            PlanDefinitionError: the plan is mis-ordered (nothing is deployed)
            ConfigurationError: signers or currencies are missing (nothing is deployed)
            PartialRunError: a step failed; carries the results completed so far
        """
        plan = list(plan)
        results: Dict[str, DeploymentResult] = OrderedDict(
            (result.contract_name, result) for result in (completed or [])
        )
        validate_plan(plan, available=results.keys())

        try:
            self.context, self.currencies = self.selector.resolve(config)
        except ConfigurationError:
            raise
        except DeployError as e:
            raise PartialRunError(getattr(e, 'step', ENVIRONMENT_STEP), e, in_plan_order(plan, results)) from e
        except Exception as e:
            logger.error(f"Environment setup failed: {e}")
            raise PartialRunError(ENVIRONMENT_STEP, e, in_plan_order(plan, results)) from e

        missing = [s for s in required_currencies(plan) if s not in self.currencies]
        if missing:
            raise ConfigurationError(f"Plan needs currencies that are not configured: {missing}")

        logger.info(f"Deploying {len(plan)} contracts to {self.context.network} ({self.context.mode.value})")
        for definition in plan:
            name = definition.contract_name
            if name in results:
                logger.info(f"Skipping {name}: already deployed at {results[name].address}")
                continue
            try:
                result = DeployStep(definition, self.gateway).execute(
                    self.context, MappingProxyType(results), self.currencies
                )
            except DeployError as e:
                logger.error(f"{name} failed: {e}")
                raise PartialRunError(name, e, in_plan_order(plan, results)) from e
            except Exception as e:
                logger.exception(f"{name} failed unexpectedly: {e}")
                raise PartialRunError(name, e, in_plan_order(plan, results)) from e
            results[name] = result

        logger.info("All deployments completed")
        return in_plan_order(plan, results)

    def run_report(self, plan: Sequence[DeploymentStep], config: DeployConfig,
                   completed: Optional[Iterable[DeploymentResult]] = None) -> RunReport:
        """Like run(), but folds the outcome into a RunReport instead of raising"""
        completed = list(completed or [])
        try:
            results = self.run(plan, config, completed=completed)
        except PartialRunError as e:
            return RunReport(STATUS_FAILURE, e.completed, e.failed_step, e, self.context)
        except PlanDefinitionError as e:
            return RunReport(STATUS_FAILURE, completed, PLAN_STEP, e, self.context)
        except ConfigurationError as e:
            return RunReport(STATUS_FAILURE, completed, ENVIRONMENT_STEP, e, self.context)
        return RunReport(STATUS_SUCCESS, results, context=self.context)
