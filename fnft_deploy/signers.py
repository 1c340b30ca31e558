#!/usr/bin/env python3
"""
Signer identities used to send deployment transactions
"""

import logging
from typing import Any, Dict, List, Optional

from eth_account import Account
from web3 import Web3

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class NodeSigner:
    """An account unlocked on the node (Hardhat / local dev chains)"""

    def __init__(self, address: str):
        self.address = address

    def send(self, w3: Web3, fn: Any, tx_params: Dict[str, Any]):
        """Send a contract constructor/function call; returns the tx hash"""
        return fn.transact({'from': self.address, **tx_params})

    def __repr__(self) -> str:
        return f"NodeSigner({self.address})"


class LocalSigner:
    """A key held locally; transactions are signed here and sent raw"""

    def __init__(self, account: Any, chain_id: Optional[int] = None):
        self.account = account
        self.address = account.address
        self.chain_id = chain_id

    def send(self, w3: Web3, fn: Any, tx_params: Dict[str, Any]):
        params = {
            'from': self.address,
            'nonce': w3.eth.get_transaction_count(self.address, 'pending'),
            **tx_params,
        }
        if self.chain_id is not None:
            params['chainId'] = self.chain_id
        tx = fn.build_transaction(params)
        signed_tx = self.account.sign_transaction(tx)
        return w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    def __repr__(self) -> str:
        return f"LocalSigner({self.address})"


class Web3SignerProvider:
    """Hands out signers for a connected node"""

    def __init__(self, w3: Web3, chain_id: Optional[int] = None):
        self.w3 = w3
        self.chain_id = chain_id

    def node_signers(self, count: int) -> List[NodeSigner]:
        try:
            accounts = list(self.w3.eth.accounts)
        except Exception as e:
            raise ConfigurationError(f"Could not list node accounts: {e}") from e
        if len(accounts) < count:
            raise ConfigurationError(f"Node exposes {len(accounts)} accounts, {count} required")
        signers = [NodeSigner(address) for address in accounts[:count]]
        logger.info(f"Using node accounts: {[s.address for s in signers]}")
        return signers

    def key_signer(self, private_key: str) -> LocalSigner:
        try:
            account = Account.from_key(private_key)
        except Exception as e:
            raise ConfigurationError(f"PRIVATE_KEY is not a valid key: {e}") from e
        logger.info(f"Using deployer account: {account.address}")
        return LocalSigner(account, chain_id=self.chain_id)
