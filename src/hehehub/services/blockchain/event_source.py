"""Event source for HeheHub NFT contract logs.

Fetches MemeMinted and Transfer events with paginated eth_getLogs and decodes
them into raw log entries understood by hehehub.models.events.parse_event():

    {
        "event_name": "MemeMinted" | "Transfer",
        "args": {...},
        "block_number": int,
        "log_index": int,
        "tx_hash": str,
    }
"""

from typing import Any

import structlog
from eth_utils.abi import event_signature_to_log_topic
from web3 import Web3
from web3.types import LogReceipt

from hehehub.services.exceptions import BlockchainConnectionError, EventSourceError

logger = structlog.get_logger()

# event MemeMinted(uint256 indexed tokenId, address indexed minter, string memeUrl)
MEME_MINTED_SIGNATURE = "MemeMinted(uint256,address,string)"
# event Transfer(address indexed from, address indexed to, uint256 indexed tokenId)
TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"

MEME_MINTED_TOPIC = bytes(event_signature_to_log_topic(MEME_MINTED_SIGNATURE))
TRANSFER_TOPIC = bytes(event_signature_to_log_topic(TRANSFER_SIGNATURE))


def _hex(value: Any) -> str:
    return value.hex() if isinstance(value, (bytes, bytearray)) else str(value)


def _topic_to_address(topic: Any) -> str:
    return "0x" + _hex(topic)[-40:]


def _topic_to_int(topic: Any) -> int:
    return int(_hex(topic), 16)


def _data_bytes(data: Any) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return bytes.fromhex(str(data).removeprefix("0x"))


class EventSource:
    """Reads the NFT contract's Minted/Transfer log from the chain."""

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        start_block: int = 0,
        batch_size: int = 1000,
    ):
        """
        Initialize event source.

        Args:
            w3: Web3 instance connected to the contract's chain
            contract_address: HeheHub NFT contract address
            start_block: First block to scan (contract deployment block)
            batch_size: Maximum number of blocks per eth_getLogs request
        """
        self.w3 = w3
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.start_block = start_block
        self.batch_size = batch_size

    def latest_block(self) -> int:
        """Current chain head block number.

        Raises:
            BlockchainConnectionError: If the RPC call fails
        """
        try:
            return int(self.w3.eth.block_number)
        except Exception as e:
            raise BlockchainConnectionError(f"Failed to read chain head: {e}") from e

    def fetch_events(
        self,
        from_block: int | None = None,
        to_block: int | str = "latest",
    ) -> list[dict[str, Any]]:
        """Fetch MemeMinted and Transfer events in chain order.

        Args:
            from_block: Starting block number (inclusive, default: start_block)
            to_block: Ending block number (inclusive) or "latest"

        Returns:
            Raw log entries sorted by (block_number, log_index). Logs that
            cannot be decoded are skipped.

        Raises:
            BlockchainConnectionError: If unable to connect to the RPC endpoint
            EventSourceError: If an eth_getLogs request fails
        """
        start = self.start_block if from_block is None else from_block

        if not self.w3.is_connected():
            raise BlockchainConnectionError("Failed to connect to blockchain RPC")

        to_block_num = to_block if isinstance(to_block, int) else self.latest_block()

        logger.info(
            "event_source.fetch_start",
            from_block=start,
            to_block=to_block_num,
            batch_size=self.batch_size,
            contract_address=self.contract_address,
        )

        events: list[dict[str, Any]] = []
        current_block = start

        while current_block <= to_block_num:
            chunk_end = min(current_block + self.batch_size - 1, to_block_num)

            try:
                logs = self.w3.eth.get_logs(
                    {
                        "fromBlock": current_block,
                        "toBlock": chunk_end,
                        "address": self.contract_address,
                        "topics": [[MEME_MINTED_TOPIC, TRANSFER_TOPIC]],
                    }
                )
            except Exception as e:
                logger.error(
                    "event_source.get_logs_failed",
                    error=str(e),
                    from_block=current_block,
                    to_block=chunk_end,
                )
                raise EventSourceError(
                    f"eth_getLogs failed for blocks {current_block}-{chunk_end}: {e}"
                ) from e

            logger.debug("event_source.logs_received", count=len(logs), to_block=chunk_end)

            for log in logs:
                decoded = self._decode_log(log)
                if decoded is not None:
                    events.append(decoded)

            current_block = chunk_end + 1

        events.sort(key=lambda e: (e["block_number"], e["log_index"]))

        logger.info("event_source.fetch_complete", total_events=len(events))
        return events

    def _decode_log(self, log: LogReceipt) -> dict[str, Any] | None:
        """Decode a MemeMinted or Transfer log.

        MemeMinted: topics[1] tokenId, topics[2] minter, data ABI-encoded memeUrl
        Transfer: topics[1] from, topics[2] to, topics[3] tokenId
        """
        topics = log["topics"]
        try:
            signature = bytes(topics[0])
            if signature == MEME_MINTED_TOPIC:
                (meme_url,) = self.w3.codec.decode(["string"], _data_bytes(log["data"]))
                event_name = "MemeMinted"
                args = {
                    "tokenId": _topic_to_int(topics[1]),
                    "minter": _topic_to_address(topics[2]),
                    "memeUrl": meme_url,
                }
            elif signature == TRANSFER_TOPIC:
                event_name = "Transfer"
                args = {
                    "from": _topic_to_address(topics[1]),
                    "to": _topic_to_address(topics[2]),
                    "tokenId": _topic_to_int(topics[3]),
                }
            else:
                return None
        except Exception as e:
            logger.warning(
                "event_source.decode_failed",
                error=str(e),
                block_number=log.get("blockNumber"),
                log_index=log.get("logIndex"),
            )
            return None

        tx_hash = _hex(log["transactionHash"])
        return {
            "event_name": event_name,
            "args": args,
            "block_number": log["blockNumber"],
            "log_index": log["logIndex"],
            "tx_hash": tx_hash if tx_hash.startswith("0x") else f"0x{tx_hash}",
        }
