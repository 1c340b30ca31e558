#!/usr/bin/env python3
"""
In-memory contract gateway

Rehearses a deployment plan without a node: every deploy gets a fresh,
never-reused address and every call is recorded in order. Used by
``--dry-run`` and by the tests.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from web3 import Web3

from .errors import ConfigurationError, GatewayRejectionError, GatewayTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class RecordedCall:
    kind: str  # "deploy", "transact" or "call"
    contract_name: str
    method: Optional[str]
    args: Tuple[Any, ...]
    sender: Optional[str] = None
    address: Optional[str] = None


@dataclass
class InMemorySigner:
    address: str


class InMemoryInstance:
    def __init__(self, gateway: "InMemoryGateway", contract_name: str, address: str):
        self.gateway = gateway
        self.contract_name = contract_name
        self.address = address

    def transact(self, method: str, *args, sender: Any):
        return self.gateway._transact(self, method, args, sender)

    def call(self, method: str, *args):
        return self.gateway._call(self, method, args)


class InMemoryFactory:
    def __init__(self, gateway: "InMemoryGateway", contract_name: str):
        self.gateway = gateway
        self.contract_name = contract_name

    def deploy(self, *args, sender: Any) -> InMemoryInstance:
        return self.gateway._deploy(self.contract_name, args, sender)


@dataclass
class InMemoryGateway:
    """
    Args:
        reject_deploy: contract names whose deployment is rejected
        reject_methods: (contract name, method) pairs whose transactions revert
        timeout_deploy: contract names whose deployment never confirms
        read_values: (contract name, method) -> value returned by call()
    """
    reject_deploy: Set[str] = field(default_factory=set)
    reject_methods: Set[Tuple[str, str]] = field(default_factory=set)
    timeout_deploy: Set[str] = field(default_factory=set)
    read_values: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    calls: List[RecordedCall] = field(default_factory=list)
    instances: Dict[str, InMemoryInstance] = field(default_factory=dict)
    _counter: int = 0

    def _next_address(self) -> str:
        self._counter += 1
        return Web3.to_checksum_address(f"0x{self._counter:040x}")

    def get_factory(self, contract_name: str) -> InMemoryFactory:
        return InMemoryFactory(self, contract_name)

    def get_instance_at(self, contract_name: str, address: str) -> InMemoryInstance:
        instance = self.instances.get(address)
        if instance is None or instance.contract_name != contract_name:
            raise GatewayRejectionError(f"No {contract_name} deployed at {address}")
        return instance

    def _deploy(self, contract_name: str, args: Tuple[Any, ...], sender: Any) -> InMemoryInstance:
        if contract_name in self.timeout_deploy:
            raise GatewayTimeoutError(f"{contract_name} deployment not mined")
        if contract_name in self.reject_deploy:
            raise GatewayRejectionError(f"{contract_name} deployment reverted")
        address = self._next_address()
        instance = InMemoryInstance(self, contract_name, address)
        self.instances[address] = instance
        self.calls.append(RecordedCall("deploy", contract_name, None, tuple(args),
                                       getattr(sender, 'address', None), address))
        logger.debug(f"[dry-run] deployed {contract_name} at {address}")
        return instance

    def _transact(self, instance: InMemoryInstance, method: str, args: Tuple[Any, ...], sender: Any):
        if (instance.contract_name, method) in self.reject_methods:
            raise GatewayRejectionError(f"{instance.contract_name}.{method} reverted")
        self.calls.append(RecordedCall("transact", instance.contract_name, method, tuple(args),
                                       getattr(sender, 'address', None), instance.address))
        return {'status': 1, 'contractAddress': None}

    def _call(self, instance: InMemoryInstance, method: str, args: Tuple[Any, ...]):
        self.calls.append(RecordedCall("call", instance.contract_name, method, tuple(args),
                                       None, instance.address))
        return self.read_values.get((instance.contract_name, method))

    def deployed_names(self) -> List[str]:
        return [c.contract_name for c in self.calls if c.kind == "deploy"]

    def token_balance(self, token_address: str, holder: str) -> int:
        """Sum of ``transfer`` amounts sent to ``holder`` on a token"""
        return sum(
            int(c.args[1]) for c in self.calls
            if c.kind == "transact" and c.method == "transfer"
            and c.address == token_address and c.args[0] == holder
        )


class InMemorySignerProvider:
    def __init__(self, accounts: Optional[Iterable[str]] = None, count: int = 10):
        if accounts is None:
            accounts = [Web3.to_checksum_address(f"0x{0xacc0 + i:040x}") for i in range(count)]
        self.accounts = list(accounts)

    def node_signers(self, count: int) -> List[InMemorySigner]:
        if len(self.accounts) < count:
            raise ConfigurationError(f"Node exposes {len(self.accounts)} accounts, {count} required")
        return [InMemorySigner(address) for address in self.accounts[:count]]

    def key_signer(self, private_key: str) -> InMemorySigner:
        if not private_key:
            raise ConfigurationError("PRIVATE_KEY is required")
        return InMemorySigner(self.accounts[0])
