#!/usr/bin/env python3
"""
Tests for the deployment orchestrator
Ordering, dependency threading, partial failure and resume
"""

import pytest
import requests

from fnft_deploy.catalog import ALL_STEPS
from fnft_deploy.config import DeployConfig
from fnft_deploy.dry_run import InMemoryGateway, InMemorySignerProvider
from fnft_deploy.errors import ConfigurationError, DeploymentError, PartialRunError, PlanDefinitionError
from fnft_deploy.models import Currency, DeploymentResult, DeploymentStep, InitializerCall, StepOutput
from fnft_deploy.orchestrator import Orchestrator, validate_plan


class DisconnectingGateway(InMemoryGateway):
    """In-memory chain whose node drops the connection when deploying one contract"""

    def __init__(self, drop_on, **kwargs):
        super().__init__(**kwargs)
        self.drop_on = drop_on

    def _deploy(self, contract_name, args, sender):
        if contract_name == self.drop_on:
            raise requests.exceptions.ConnectionError("node went away")
        return super()._deploy(contract_name, args, sender)


class TestValidatePlan:
    """Test class for plan validation"""

    def test_valid_plan(self):
        """Test a correctly ordered plan passes"""
        plan = [
            DeploymentStep("A", "A_ADDRESS"),
            DeploymentStep("B", "B_ADDRESS", args=(StepOutput("A"),)),
        ]
        validate_plan(plan)

    def test_dependency_after_consumer(self):
        """Test consuming an output that is produced later is rejected"""
        plan = [
            DeploymentStep("B", "B_ADDRESS", args=(StepOutput("A"),)),
            DeploymentStep("A", "A_ADDRESS"),
        ]
        with pytest.raises(PlanDefinitionError, match="deployed after"):
            validate_plan(plan)

    def test_unknown_dependency(self):
        """Test consuming an output no step produces is rejected"""
        plan = [DeploymentStep("B", "B_ADDRESS", initializers=(InitializerCall("init", (StepOutput("X"),)),))]
        with pytest.raises(PlanDefinitionError, match="not part of the plan"):
            validate_plan(plan)

    def test_dependency_available_from_earlier_run(self):
        """Test outputs of an earlier run satisfy dependencies"""
        plan = [DeploymentStep("B", "B_ADDRESS", args=(StepOutput("A"),))]
        validate_plan(plan, available=["A"])

    def test_duplicate_step(self):
        """Test a contract may appear only once"""
        plan = [DeploymentStep("A", "A_ADDRESS"), DeploymentStep("A", "A_ADDRESS")]
        with pytest.raises(PlanDefinitionError):
            validate_plan(plan)

    def test_catalog_plan_is_valid(self):
        """Test the shipped plan validates"""
        validate_plan(ALL_STEPS)


class TestOrchestrator:
    """Test class for Orchestrator.run"""

    def setup_method(self):
        """Set up an in-memory chain and an ephemeral config"""
        self.gateway = InMemoryGateway()
        self.orchestrator = Orchestrator(self.gateway, InMemorySignerProvider())
        self.config = DeployConfig.from_env({"TEST_NETWORK": "hardhat"})

    def test_dependent_step_receives_address(self):
        """Test B runs after A and is deployed with A's address"""
        plan = [
            DeploymentStep("A", "A_ADDRESS"),
            DeploymentStep("B", "B_ADDRESS", args=(StepOutput("A"),)),
        ]

        results = self.orchestrator.run(plan, self.config)

        deploys = [c for c in self.gateway.calls if c.kind == "deploy" and c.contract_name in ("A", "B")]
        assert [c.contract_name for c in deploys] == ["A", "B"]
        assert deploys[1].args == (results[0].address,)
        assert [r.contract_name for r in results] == ["A", "B"]
        assert [r.order for r in results] == [0, 1]

    def test_environment_resolved_before_steps(self):
        """Test the mock currency is deployed before any plan step"""
        self.orchestrator.run([DeploymentStep("A", "A_ADDRESS")], self.config)

        assert self.gateway.deployed_names() == ["SimpleToken", "A"]

    def test_currency_threaded_into_step(self):
        """Test a step consuming USDC gets the mock token address"""
        plan = [DeploymentStep("Market", "MARKET_ADDRESS", args=(Currency("USDC"),))]

        self.orchestrator.run(plan, self.config)

        assert self.gateway.calls[-1].args == (self.orchestrator.currencies["USDC"],)

    def test_missing_currency_aborts_before_deploying(self):
        """Test a plan needing an unconfigured currency deploys nothing"""
        config = DeployConfig.from_env({"TEST_NETWORK": "localhost1"})
        plan = [DeploymentStep("Market", "MARKET_ADDRESS", args=(Currency("DAI"),))]

        with pytest.raises(ConfigurationError):
            self.orchestrator.run(plan, config)

        assert self.gateway.calls == []

    def test_full_catalog_order(self):
        """Test the shipped plan deploys in its documented order"""
        results = self.orchestrator.run(ALL_STEPS, self.config)

        expected = [step.contract_name for step in ALL_STEPS]
        assert self.gateway.deployed_names() == ["SimpleToken"] + expected
        assert [r.contract_name for r in results] == expected

    def test_stops_at_first_failure(self):
        """Test steps after a failed one are never attempted"""
        self.gateway.reject_deploy.add("TipERC1155")

        with pytest.raises(PartialRunError) as exc_info:
            self.orchestrator.run(ALL_STEPS, self.config)

        error = exc_info.value
        assert error.failed_step == "TipERC1155"
        assert isinstance(error.cause, DeploymentError)
        assert [r.contract_name for r in error.completed] == [
            "FNFTFactoryTipERC721", "FNFTFactoryTipERC1155", "TipERC721",
        ]
        assert "FNFTNestable" not in self.gateway.deployed_names()

    def test_report_on_failure(self):
        """Test the report keeps completed steps and has exit code 1"""
        self.gateway.reject_methods.add(("TipERC721", "initialize"))

        report = self.orchestrator.run_report(ALL_STEPS, self.config)

        assert report.status == "failure"
        assert report.exit_code == 1
        assert report.failed_step == "TipERC721"
        assert [s["contractName"] for s in report.summary()] == [
            "FNFTFactoryTipERC721", "FNFTFactoryTipERC1155",
        ]

    def test_report_on_success(self):
        """Test a successful report has exit code 0 and an ordered summary"""
        report = self.orchestrator.run_report(ALL_STEPS, self.config)

        assert report.ok
        assert report.exit_code == 0
        assert len(report.summary()) == len(ALL_STEPS)
        assert report.summary()[0] == {
            "contractName": "FNFTFactoryTipERC721",
            "address": report.results[0].address,
        }

    def test_completed_steps_are_not_redeployed(self):
        """Test resuming skips steps that already have a result"""
        done = DeploymentResult("FNFTFactoryTipERC721", "FNFTFACTORY_TIPNFTERC721_ADDRESS", "0xdone", 0)

        results = self.orchestrator.run(ALL_STEPS, self.config, completed=[done])

        assert "FNFTFactoryTipERC721" not in self.gateway.deployed_names()
        assert results[0].address == "0xdone"
        assert len(results) == len(ALL_STEPS)

    def test_signer_failure_deploys_nothing(self):
        """Test an ephemeral run without enough accounts aborts up front"""
        orchestrator = Orchestrator(self.gateway, InMemorySignerProvider(count=1))

        report = orchestrator.run_report(ALL_STEPS, self.config)

        assert report.exit_code == 1
        assert report.failed_step == "environment"
        assert self.gateway.calls == []

    def test_mock_token_failure_is_partial_run(self):
        """Test a failed mock token deployment is reported against SimpleToken"""
        self.gateway.reject_deploy.add("SimpleToken")

        with pytest.raises(PartialRunError) as exc_info:
            self.orchestrator.run(ALL_STEPS, self.config)

        assert exc_info.value.failed_step == "SimpleToken"
        assert exc_info.value.completed == []

    def test_connection_loss_is_partial_run(self):
        """Test a transport failure mid-run is reported against the step with completed results"""
        orchestrator = Orchestrator(DisconnectingGateway("TipERC1155"), InMemorySignerProvider())

        report = orchestrator.run_report(ALL_STEPS, self.config)

        assert report.exit_code == 1
        assert report.failed_step == "TipERC1155"
        assert isinstance(report.error, PartialRunError)
        assert isinstance(report.error.cause, requests.exceptions.ConnectionError)
        assert [s["contractName"] for s in report.summary()] == [
            "FNFTFactoryTipERC721", "FNFTFactoryTipERC1155", "TipERC721",
        ]

    def test_resumed_results_follow_plan_order(self):
        """Test results from an earlier run are reported in plan order, not manifest order"""
        done = DeploymentResult("TipERC1155", "TIPERC1155_ADDRESS", "0xdone", 0)

        results = self.orchestrator.run(ALL_STEPS, self.config, completed=[done])

        assert [r.contract_name for r in results] == [step.contract_name for step in ALL_STEPS]
        assert [r.order for r in results] == list(range(len(ALL_STEPS)))
        assert results[3].address == "0xdone"
