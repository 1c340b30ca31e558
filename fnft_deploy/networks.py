#!/usr/bin/env python3
"""
Named network profiles
Mirrors the networks the FNFT contracts are deployed to
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .errors import ConfigurationError

# The ephemeral test network; selecting it deploys the mock USDC and funds test accounts
EPHEMERAL_NETWORK = "hardhat"

DEFAULT_NETWORK = "localhost1"

SIGNER_NODE = "node"  # accounts unlocked on the node
SIGNER_KEY = "key"    # PRIVATE_KEY from the environment


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    chain_id: int
    rpc_url: Optional[str] = None
    rpc_url_env: Optional[str] = None
    signer: str = SIGNER_NODE
    poa: bool = False
    gas: int = 8000000
    timeout: int = 1000  # seconds

    def resolve_rpc_url(self, env: Mapping[str, str], override: Optional[str] = None) -> str:
        """Return the RPC endpoint, preferring an explicit override"""
        if override:
            return override
        if self.rpc_url_env:
            url = env.get(self.rpc_url_env)
            if not url:
                raise ConfigurationError(f"{self.rpc_url_env} is required for network {self.name}")
            return url
        if not self.rpc_url:
            raise ConfigurationError(f"No RPC URL configured for network {self.name}")
        return self.rpc_url


NETWORKS: Dict[str, NetworkProfile] = {
    "hardhat": NetworkProfile(name="hardhat", chain_id=1337, rpc_url="http://127.0.0.1:8545"),
    "localhost1": NetworkProfile(name="localhost1", chain_id=1337, rpc_url="http://127.0.0.1:8546"),
    "localhost2": NetworkProfile(name="localhost2", chain_id=1342, rpc_url="http://127.0.0.1:8547"),
    "polygon_mumbai": NetworkProfile(
        name="polygon_mumbai",
        chain_id=80001,
        rpc_url_env="POLYGON_AMOY_RPC_URL",
        signer=SIGNER_KEY,
        poa=True,
    ),
    "base_sepolia": NetworkProfile(
        name="base_sepolia",
        chain_id=84532,
        rpc_url_env="BASE_SEPOLIA_RPC_URL",
        signer=SIGNER_KEY,
    ),
}


def get_network(name: str) -> NetworkProfile:
    try:
        return NETWORKS[name]
    except KeyError as e:
        raise ConfigurationError(
            f"Unknown network '{name}'. Known networks: {', '.join(sorted(NETWORKS))}"
        ) from e
