#!/usr/bin/env python3
"""
Environment selector

Decides whether the run targets the ephemeral test network or a persistent
one, acquires signers, and fills the currency registry:
- ephemeral: deploy a mock USDC, fund two test accounts, register USDC
- persistent: register whichever currency addresses are configured
"""

import logging
from typing import Any, Tuple

from .config import DeployConfig
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
from .models import CurrencyRegistry, EnvironmentContext, NetworkMode
from .networks import SIGNER_KEY

logger = logging.getLogger(__name__)

# Mock stablecoin deployed on the ephemeral network
MOCK_TOKEN_CONTRACT = "SimpleToken"
MOCK_TOKEN_NAME = "USD Coin"
MOCK_TOKEN_SYMBOL = "USDC"
MOCK_TOKEN_DECIMALS = 6
MOCK_TOKEN_SUPPLY = 100000000000000000000000000
TEST_ACCOUNT_ALLOCATION = 100000000000
MOCK_TOKEN_LOG_NAME = "USDC_TOKEN_ADDRESS"

EPHEMERAL_SIGNER_COUNT = 4  # admin + three auxiliary accounts


class EnvironmentSelector:
    def __init__(self, gateway: Any, signer_provider: Any):
        self.gateway = gateway
        self.signer_provider = signer_provider

    def resolve(self, config: DeployConfig) -> Tuple[EnvironmentContext, CurrencyRegistry]:
        profile = config.profile
        currencies = CurrencyRegistry()

        if config.is_ephemeral:
            admin, *auxiliary = self.signer_provider.node_signers(EPHEMERAL_SIGNER_COUNT)
            context = EnvironmentContext(
                network=config.network,
                mode=NetworkMode.EPHEMERAL_TEST,
                chain_id=profile.chain_id,
                admin=admin,
                auxiliary=tuple(auxiliary),
            )
            logger.info(f"network = {config.network}")
            logger.info(f"admin address: {admin.address}")
            for index, signer in enumerate(auxiliary, start=1):
                logger.info(f"account{index} address: {signer.address}")
            currencies.register(MOCK_TOKEN_SYMBOL, self._deploy_mock_usdc(context))
        else:
            if profile.signer == SIGNER_KEY:
                admin = self.signer_provider.key_signer(config.signing_key())
            else:
                admin = self.signer_provider.node_signers(1)[0]
            context = EnvironmentContext(
                network=config.network,
                mode=NetworkMode.PERSISTENT,
                chain_id=profile.chain_id,
                admin=admin,
            )
            for symbol, address in config.currency_addresses.items():
                if address:
                    currencies.register(symbol, address)

        logger.info(f"Currencies: {currencies.as_dict()}")
        return context, currencies.freeze()

    def _deploy_mock_usdc(self, context: EnvironmentContext) -> str:
        if len(context.auxiliary) < 3:
            raise ConfigurationError("Ephemeral network needs three auxiliary accounts")
        account2, account3 = context.auxiliary[1], context.auxiliary[2]

        try:
            factory = self.gateway.get_factory(MOCK_TOKEN_CONTRACT)
            token = factory.deploy(
                MOCK_TOKEN_NAME,
                MOCK_TOKEN_SYMBOL,
                MOCK_TOKEN_DECIMALS,
                MOCK_TOKEN_SUPPLY,
                sender=context.admin,
            )
        except GatewayTimeoutError as e:
            raise DeploymentError(MOCK_TOKEN_CONTRACT, REASON_TIMEOUT, e) from e
        except GatewayRejectionError as e:
            raise DeploymentError(MOCK_TOKEN_CONTRACT, REASON_GATEWAY_REJECTED, e) from e

        try:
            for holder in (account2, account3):
                token.transact("transfer", holder.address, TEST_ACCOUNT_ALLOCATION, sender=context.admin)
        except GatewayTimeoutError as e:
            raise DeploymentError(MOCK_TOKEN_CONTRACT, REASON_TIMEOUT, e) from e
        except GatewayRejectionError as e:
            raise DeploymentError(MOCK_TOKEN_CONTRACT, REASON_INITIALIZER_FAILED, e) from e

        log_address(MOCK_TOKEN_LOG_NAME, token.address, step=MOCK_TOKEN_CONTRACT)
        return token.address
