#!/usr/bin/env python3
"""
Compiled contract artifacts
Reads Hardhat build output: artifacts/contracts/<Name>.sol/<Name>.json
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import GatewayRejectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    path: Optional[Path] = None

    def has_unlinked_libraries(self) -> bool:
        return "__$" in (self.bytecode or "")


class ArtifactStore:
    """Looks up compiled artifacts by contract name"""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: Dict[str, ContractArtifact] = {}

    def _find(self, contract_name: str) -> Optional[Path]:
        direct = self.root / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"
        if direct.is_file():
            return direct
        # Contracts declared in a differently named .sol file, or nested folders
        for candidate in sorted(self.root.glob(f"**/{contract_name}.json")):
            if candidate.is_file():
                return candidate
        return None

    def load(self, contract_name: str) -> ContractArtifact:
        if contract_name in self._cache:
            return self._cache[contract_name]

        path = self._find(contract_name)
        if path is None:
            raise GatewayRejectionError(
                f"No compiled artifact for {contract_name} under {self.root}. Compile the contracts first."
            )

        with open(path, 'r') as f:
            data = json.load(f)

        try:
            artifact = ContractArtifact(
                contract_name=data.get("contractName", contract_name),
                abi=data["abi"],
                bytecode=data["bytecode"],
                path=path,
            )
        except KeyError as e:
            raise GatewayRejectionError(f"Artifact {path} is missing {e}") from e

        if not artifact.bytecode or artifact.bytecode == "0x":
            raise GatewayRejectionError(f"{contract_name} has no bytecode (abstract contract or interface?)")
        if artifact.has_unlinked_libraries():
            raise GatewayRejectionError(f"{contract_name} has unlinked libraries. Link before deploy.")

        logger.debug(f"Loaded artifact for {contract_name} from {path}")
        self._cache[contract_name] = artifact
        return artifact
