#!/usr/bin/env python3
"""
Deployment configuration
Built once at process start from the environment (and an optional .env file)
and passed by reference to everything that needs it
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError
from .networks import DEFAULT_NETWORK, EPHEMERAL_NETWORK, NetworkProfile, get_network

# Currency symbol -> environment variable holding its token address
CURRENCY_VARIABLES: Dict[str, str] = {
    "USDC": "USDC_TOKEN_ADDRESS",
    "DAI": "DAI_TOKEN_ADDRESS",
}


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class DeployConfig:
    network: str = DEFAULT_NETWORK
    rpc_url: Optional[str] = None
    private_key: Optional[str] = None
    currency_addresses: Dict[str, Optional[str]] = field(default_factory=dict)
    artifacts_dir: Path = Path("artifacts")
    tx_timeout: Optional[int] = None
    manifest_path: Optional[Path] = None
    log_file: Optional[str] = None
    log_level: str = "INFO"
    env: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[str] = None) -> "DeployConfig":
        """
        Read configuration from ``env``.

        When ``env`` is not given the process environment is used, after
        loading ``dotenv_path`` (or a ``.env`` found from the working
        directory) with python-dotenv. Values already set in the environment
        win over the file.
        """
        if env is None:
            load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))
            env = dict(os.environ)

        timeout_raw = _optional(env, "TX_TIMEOUT")
        try:
            tx_timeout = int(timeout_raw) if timeout_raw is not None else None
        except ValueError as e:
            raise ConfigurationError(f"TX_TIMEOUT must be an integer number of seconds, got {timeout_raw!r}") from e

        manifest = _optional(env, "DEPLOY_MANIFEST_PATH")
        return cls(
            network=_optional(env, "TEST_NETWORK") or DEFAULT_NETWORK,
            rpc_url=_optional(env, "RPC_URL"),
            private_key=_optional(env, "PRIVATE_KEY"),
            currency_addresses={symbol: _optional(env, var) for symbol, var in CURRENCY_VARIABLES.items()},
            artifacts_dir=Path(_optional(env, "ARTIFACTS_DIR") or "artifacts"),
            tx_timeout=tx_timeout,
            manifest_path=Path(manifest) if manifest else None,
            log_file=_optional(env, "DEPLOY_LOG_FILE"),
            log_level=(_optional(env, "LOG_LEVEL") or "INFO").upper(),
            env=dict(env),
        )

    @property
    def profile(self) -> NetworkProfile:
        return get_network(self.network)

    @property
    def is_ephemeral(self) -> bool:
        return self.network == EPHEMERAL_NETWORK

    @property
    def timeout(self) -> int:
        return self.tx_timeout if self.tx_timeout is not None else self.profile.timeout

    def rpc_endpoint(self) -> str:
        return self.profile.resolve_rpc_url(self.env, override=self.rpc_url)

    def signing_key(self) -> str:
        """Return PRIVATE_KEY with a 0x prefix, or fail if it is not configured"""
        if not self.private_key:
            raise ConfigurationError(f"PRIVATE_KEY is required to deploy to {self.network}")
        key = self.private_key
        return key if key.startswith("0x") else f"0x{key}"
