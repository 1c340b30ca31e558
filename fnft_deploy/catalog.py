#!/usr/bin/env python3
"""
FNFT deployment plans

The order of ALL_STEPS is the deployment contract: currency setup (done by
the environment selector), the tip factories, the tip tokens, the nestable
NFTs and the remaining factories. Whether the factories truly depend on the
token contracts is decided by the contract source, so the order is kept as is.
"""

from typing import Dict, List, Sequence, Tuple

from .errors import PlanDefinitionError
from .models import DeploymentStep, InitializerCall

FACTORY = "factory"
TOKEN = "token"
NESTABLE = "nestable"

ALL_STEPS: Tuple[DeploymentStep, ...] = (
    DeploymentStep("FNFTFactoryTipERC721", "FNFTFACTORY_TIPNFTERC721_ADDRESS", group=FACTORY),
    DeploymentStep("FNFTFactoryTipERC1155", "FNFTFACTORY_TIPNFTERC1155_ADDRESS", group=FACTORY),
    DeploymentStep(
        "TipERC721",
        "TIPERC721_ADDRESS",
        initializers=(InitializerCall("initialize", ("Fab NFT", "FBNFT1")),),
        checks=("name",),
        group=TOKEN,
    ),
    DeploymentStep(
        "TipERC1155",
        "TIPERC1155_ADDRESS",
        initializers=(InitializerCall("initialize"),),
        group=TOKEN,
    ),
    DeploymentStep("FNFTNestable", "NESTABLENFT_ADDRESS", group=NESTABLE),
    DeploymentStep("FNFTFactoryABTToken", "FNFTFACTORY_ABT_TOKEN_ADDRESS", group=FACTORY),
    DeploymentStep("FNFTNestableERC1155", "NESTABLENFT_ERC1155_ADDRESS", group=NESTABLE),
    DeploymentStep("FNFTFactoryFNFTNestable", "FNFTFACTORY_FNFT_NESTABLE_ADDRESS", group=FACTORY),
    DeploymentStep(
        "FNFTFactoryFNFTNestableERC1155",
        "FNFTFACTORY_FNFT_NESTABLE_ERC1155_ADDRESS",
        group=FACTORY,
    ),
)

# Snapshot deployment of a single tip collection and a nestable NFT
SNAPS_STEPS: Tuple[DeploymentStep, ...] = (
    DeploymentStep(
        "TipERC721",
        "TIPERC721_ADDRESS",
        initializers=(InitializerCall("initialize", ("Nestable NFT", "NNFT1")),),
        group=TOKEN,
    ),
    DeploymentStep("FNFTNestable", "NESTABLENFT_ADDRESS", group=NESTABLE),
)

PLANS: Dict[str, Tuple[DeploymentStep, ...]] = {
    "all": ALL_STEPS,
    "snaps": SNAPS_STEPS,
}


def get_plan(name: str, only: Sequence[str] = ()) -> List[DeploymentStep]:
    """Return the named plan, optionally narrowed to some contracts (plan order is kept)"""
    try:
        plan = list(PLANS[name])
    except KeyError as e:
        raise PlanDefinitionError(f"Unknown plan '{name}'. Known plans: {', '.join(sorted(PLANS))}") from e

    if not only:
        return plan

    known = {step.contract_name for step in plan}
    unknown = [name for name in only if name not in known]
    if unknown:
        raise PlanDefinitionError(f"Not in plan: {unknown}")
    return [step for step in plan if step.contract_name in only]
