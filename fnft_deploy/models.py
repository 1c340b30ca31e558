#!/usr/bin/env python3
"""
Data model for deployment runs
Step definitions, results, currency registry and environment context
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import ConfigurationError


class NetworkMode(str, Enum):
    """How the target network is treated"""
    EPHEMERAL_TEST = "ephemeral-test"
    PERSISTENT = "persistent"


@dataclass(frozen=True)
class StepOutput:
    """Placeholder for the address published by an earlier step"""
    step: str


@dataclass(frozen=True)
class Currency:
    """Placeholder for a currency address from the registry"""
    symbol: str


@dataclass(frozen=True)
class InitializerCall:
    """Post-deploy call made on the fresh instance"""
    method: str
    args: Tuple[Any, ...] = ()


def _placeholders(values) -> Iterator[Any]:
    for value in values:
        if isinstance(value, (StepOutput, Currency)):
            yield value


@dataclass(frozen=True)
class DeploymentStep:
    """Static definition of one contract deployment"""
    contract_name: str
    log_name: str
    args: Tuple[Any, ...] = ()
    initializers: Tuple[InitializerCall, ...] = ()
    checks: Tuple[str, ...] = ()
    group: str = ""

    def _all_args(self) -> List[Any]:
        values = list(self.args)
        for call in self.initializers:
            values.extend(call.args)
        return values

    @property
    def requires(self) -> Tuple[str, ...]:
        """Names of steps whose addresses this step consumes"""
        return tuple(p.step for p in _placeholders(self._all_args()) if isinstance(p, StepOutput))

    @property
    def currencies(self) -> Tuple[str, ...]:
        """Currency symbols this step consumes"""
        return tuple(p.symbol for p in _placeholders(self._all_args()) if isinstance(p, Currency))

    @property
    def publishes(self) -> str:
        return self.contract_name


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of one successful step"""
    contract_name: str
    log_name: str
    address: str
    order: int
    deployed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_summary(self) -> Dict[str, str]:
        return {"contractName": self.contract_name, "address": self.address}


class CurrencyRegistry:
    """Currency symbol -> token address, read-only once frozen"""

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})
        self._frozen = False

    def register(self, symbol: str, address: str) -> None:
        if self._frozen:
            raise ConfigurationError(f"Currency registry is frozen, cannot register {symbol}")
        self._entries[symbol] = address

    def freeze(self) -> "CurrencyRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def symbols(self) -> List[str]:
        return sorted(self._entries)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __getitem__(self, symbol: str) -> str:
        return self._entries[symbol]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CurrencyRegistry({self._entries!r})"


@dataclass(frozen=True)
class EnvironmentContext:
    """Immutable per-run view of the target network"""
    network: str
    mode: NetworkMode
    chain_id: Optional[int]
    admin: Any
    auxiliary: Tuple[Any, ...] = ()

    @property
    def is_ephemeral(self) -> bool:
        return self.mode is NetworkMode.EPHEMERAL_TEST


STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"


@dataclass
class RunReport:
    """Tagged outcome of a run: success with a manifest, or failure with step and cause"""
    status: str
    results: List[DeploymentResult] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[BaseException] = None
    context: Optional[EnvironmentContext] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def summary(self) -> List[Dict[str, str]]:
        return [r.to_summary() for r in self.results]
