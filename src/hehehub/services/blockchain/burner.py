"""Burn transaction submitter.

A burn is an ERC-721 transferFrom(owner, burn_address, tokenId) signed by the
owner's wallet. The submitter waits for the receipt and reports its status;
it never decides rewards.
"""

import structlog
from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted

from hehehub.abi import get_contract_abi
from hehehub.models.inventory import BurnReceipt
from hehehub.services.exceptions import (
    ItemNotOwnedError,
    TransactionSubmissionError,
    TransactionTimeoutError,
)

logger = structlog.get_logger()


class BurnSubmitter:
    """Signs and sends burn transfers from a single wallet."""

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        private_key: str,
        gas_buffer_percentage: float = 0.20,
        transaction_timeout: int = 180,
    ):
        """
        Initialize burn submitter.

        Args:
            w3: Web3 instance connected to the contract's chain
            contract_address: HeheHub NFT contract address
            private_key: Private key of the wallet that owns the items (0x-prefixed hex)
            gas_buffer_percentage: Safety buffer for gas estimation (default: 0.20 = 20%)
            transaction_timeout: Max wait time for confirmation in seconds (default: 180)
        """
        self.w3 = w3
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.private_key = private_key
        self.gas_buffer = 1.0 + gas_buffer_percentage
        self.transaction_timeout = transaction_timeout

        self.contract = self.w3.eth.contract(
            address=self.contract_address, abi=get_contract_abi("HeheNFT")
        )

        self.account = Account.from_key(private_key)
        self.address = self.account.address

        logger.info(
            "burner.initialized",
            wallet_address=self.address,
            contract_address=self.contract_address,
            timeout=transaction_timeout,
        )

    async def submit_burn(self, owner: str, burn_address: str, item_id: int) -> BurnReceipt:
        """
        Submit transferFrom(owner, burn_address, item_id) and wait for the receipt.

        Args:
            owner: Current owner of the item; must be this submitter's wallet
            burn_address: Designated burn address
            item_id: Token id to burn

        Returns:
            BurnReceipt; succeeded is False when the transaction reverted

        Raises:
            ItemNotOwnedError: owner is not the signing wallet
            TransactionSubmissionError: Gas estimation, signing or sending failed
            TransactionTimeoutError: No receipt within transaction_timeout
        """
        owner_checksummed = Web3.to_checksum_address(owner)
        if owner_checksummed != self.address:
            raise ItemNotOwnedError(
                f"Wallet {self.address} cannot burn item {item_id} on behalf of {owner_checksummed}"
            )

        transfer = self.contract.functions.transferFrom(
            owner_checksummed, Web3.to_checksum_address(burn_address), item_id
        )

        try:
            estimated_gas = transfer.estimate_gas({"from": self.address})
            transaction = transfer.build_transaction(
                {
                    "from": self.address,
                    "nonce": self.w3.eth.get_transaction_count(self.address),
                    "gas": int(estimated_gas * self.gas_buffer),
                    "chainId": self.w3.eth.chain_id,
                }
            )
            signed_txn = self.w3.eth.account.sign_transaction(
                transaction, private_key=self.private_key
            )
            tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        except Exception as e:
            logger.error(
                "burner.transaction_submission_failed",
                error=str(e),
                item_id=item_id,
            )
            raise TransactionSubmissionError(f"Burn submission failed: {e}") from e

        tx_hash_hex = tx_hash.hex()
        if not tx_hash_hex.startswith("0x"):
            tx_hash_hex = f"0x{tx_hash_hex}"

        logger.info("burner.transaction_submitted", tx_hash=tx_hash_hex, item_id=item_id)

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.transaction_timeout
            )
        except TimeExhausted as e:
            logger.warning(
                "burner.transaction_timeout",
                tx_hash=tx_hash_hex,
                timeout=self.transaction_timeout,
            )
            raise TransactionTimeoutError(f"Burn confirmation timeout: {tx_hash_hex}") from e

        succeeded = receipt["status"] == 1
        log = logger.info if succeeded else logger.warning
        log(
            "burner.transaction_mined",
            tx_hash=tx_hash_hex,
            block_number=receipt["blockNumber"],
            status=receipt["status"],
            item_id=item_id,
        )

        return BurnReceipt(
            tx_hash=tx_hash_hex,
            block_number=receipt["blockNumber"],
            succeeded=succeeded,
        )
