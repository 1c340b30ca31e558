#!/usr/bin/env python3
"""
Contract factory gateway backed by web3.py

get_factory(name) -> factory; factory.deploy(*args) -> instance;
instance.transact(method, *args); instance.call(method, *args);
get_instance_at(name, address) -> instance.

Every transacting call blocks until its receipt is mined.
"""

import logging
from typing import Any, Dict, Optional

import requests
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ArtifactStore
from .config import DeployConfig
from .errors import ConfigurationError, GatewayRejectionError, GatewayTimeoutError

logger = logging.getLogger(__name__)


class Web3ContractInstance:
    def __init__(self, gateway: "Web3Gateway", contract_name: str, contract: Any):
        self.gateway = gateway
        self.contract_name = contract_name
        self.contract = contract

    @property
    def address(self) -> str:
        return self.contract.address

    def transact(self, method: str, *args, sender: Any):
        """Call a state-changing method and wait for its receipt"""
        fn = getattr(self.contract.functions, method)(*args)
        return self.gateway.send(fn, sender, f"{self.contract_name}.{method}")

    def call(self, method: str, *args):
        try:
            return getattr(self.contract.functions, method)(*args).call()
        except (Web3Exception, ValueError) as e:
            raise GatewayRejectionError(f"{self.contract_name}.{method}() call failed: {e}") from e


class Web3ContractFactory:
    def __init__(self, gateway: "Web3Gateway", contract_name: str, contract: Any):
        self.gateway = gateway
        self.contract_name = contract_name
        self.contract = contract

    def deploy(self, *args, sender: Any) -> Web3ContractInstance:
        """Deploy a new instance; blocks until the deployment is mined"""
        receipt = self.gateway.send(self.contract.constructor(*args), sender, f"{self.contract_name} deployment")
        address = receipt['contractAddress']
        if not address:
            raise GatewayRejectionError(f"{self.contract_name} deployment receipt has no contract address")
        return self.gateway.get_instance_at(self.contract_name, address)


class Web3Gateway:
    def __init__(self, w3: Web3, artifacts: ArtifactStore, gas: Optional[int] = None, timeout: int = 1000):
        self.w3 = w3
        self.artifacts = artifacts
        self.gas = gas
        self.timeout = timeout

    @classmethod
    def connect(cls, config: DeployConfig) -> "Web3Gateway":
        """Connect to the configured network"""
        profile = config.profile
        rpc_url = config.rpc_endpoint()
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': config.timeout}))
        if profile.poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise ConfigurationError(f"Could not connect to RPC URL: {rpc_url}")
        logger.info(f"Connected to {profile.name} at {rpc_url}")
        return cls(w3, ArtifactStore(config.artifacts_dir), gas=profile.gas, timeout=config.timeout)

    def get_factory(self, contract_name: str) -> Web3ContractFactory:
        artifact = self.artifacts.load(contract_name)
        contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        return Web3ContractFactory(self, contract_name, contract)

    def get_instance_at(self, contract_name: str, address: str) -> Web3ContractInstance:
        artifact = self.artifacts.load(contract_name)
        contract = self.w3.eth.contract(address=self.w3.to_checksum_address(address), abi=artifact.abi)
        return Web3ContractInstance(self, contract_name, contract)

    def _tx_params(self) -> Dict[str, Any]:
        return {'gas': self.gas} if self.gas else {}

    def send(self, fn: Any, sender: Any, label: str):
        """Send ``fn`` from ``sender`` and return the mined receipt"""
        try:
            tx_hash = sender.send(self.w3, fn, self._tx_params())
        except (Web3Exception, ValueError) as e:
            raise GatewayRejectionError(f"{label} rejected: {e}") from e
        except (requests.exceptions.RequestException, OSError) as e:
            raise GatewayRejectionError(f"{label} not sent, node unreachable: {e}") from e

        tx_hex = Web3.to_hex(tx_hash)
        logger.info(f"{label} sent: {tx_hex}")
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except TimeExhausted as e:
            raise GatewayTimeoutError(f"{label} not mined within {self.timeout}s (tx {tx_hex})") from e
        except (requests.exceptions.RequestException, OSError) as e:
            raise GatewayRejectionError(f"{label} receipt unavailable, node unreachable (tx {tx_hex}): {e}") from e

        if receipt['status'] != 1:
            raise GatewayRejectionError(f"{label} reverted in tx {tx_hex}")
        logger.info(f"{label} confirmed in block {receipt['blockNumber']}")
        return receipt
