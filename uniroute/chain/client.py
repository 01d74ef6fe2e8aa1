"""Chain client: batched contract reads and gas estimation.

The core only depends on the ChainClient protocol. Web3ChainClient is the
production implementation, batching reads through Multicall3 `aggregate3`
with per-call failure allowed.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

import structlog
from eth_abi.exceptions import DecodingError
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from uniroute.chain.abi import AGGREGATE3, ContractMethod
from uniroute.constants import MULTICALL3_ADDRESS
from uniroute.models.route import Transaction
from uniroute.models.types import normalize_address

logger = structlog.get_logger()

# Calls per aggregate3 request; larger batches are split transparently
DEFAULT_MAX_BATCH_SIZE = 500


@dataclass(frozen=True)
class ContractCall:
    """One read inside a batch.

    Attributes:
        target: Contract address to call
        method: Method description (signature and output names)
        args: Positional call arguments
        reference: Caller-chosen tag used to match results back to requests
    """

    target: str
    method: ContractMethod
    args: tuple[Any, ...] = ()
    reference: Hashable = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "target", normalize_address(self.target))


@dataclass(frozen=True)
class CallResult:
    """Outcome of one call in a batch.

    `values` maps the method's output names to decoded values; it is empty
    when the call failed.
    """

    reference: Hashable
    success: bool
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)


class ChainClient(Protocol):
    """Protocol for chain access.

    This allows swapping between a real RPC-backed client and a mock client
    for testing.
    """

    async def call(self, batch: Sequence[ContractCall]) -> list[CallResult]:
        """Execute a batch of reads in as few round trips as possible.

        Args:
            batch: Calls to execute

        Returns:
            One CallResult per call, in request order
        """
        ...

    async def estimate_gas(self, transaction: Transaction) -> int:
        """Estimate gas units for an unsigned transaction."""
        ...


class BlockSource(Protocol):
    """Protocol for reading the chain head, used by block-driven watchers."""

    async def block_number(self) -> int:
        """Number of the latest block."""
        ...


class Web3ChainClient:
    """ChainClient backed by AsyncWeb3 and Multicall3.

    Every batch is sent as one or more `aggregate3` eth_calls with
    allowFailure=True, so a reverting call only fails its own result.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        multicall_address: str = MULTICALL3_ADDRESS,
        *,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        w3: AsyncWeb3 | None = None,
    ):
        """Initialize the client.

        Args:
            rpc_url: HTTP RPC URL (ignored when `w3` is given)
            multicall_address: Multicall3 deployment to batch through
            max_batch_size: Maximum calls per aggregate3 request
            w3: Pre-built AsyncWeb3 instance
        """
        if w3 is None:
            if not rpc_url:
                raise ValueError("rpc_url or w3 is required")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        if max_batch_size <= 0:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")

        self.w3 = w3
        self.multicall_address = Web3.to_checksum_address(multicall_address)
        self.max_batch_size = max_batch_size

    async def call(self, batch: Sequence[ContractCall]) -> list[CallResult]:
        """Execute a batch through aggregate3, chunked by max_batch_size."""
        results: list[CallResult] = []
        for start in range(0, len(batch), self.max_batch_size):
            chunk = batch[start : start + self.max_batch_size]
            results.extend(await self._aggregate(chunk))
        return results

    async def _aggregate(self, chunk: Sequence[ContractCall]) -> list[CallResult]:
        payload = [
            (Web3.to_checksum_address(c.target), True, c.method.encode_call(*c.args))
            for c in chunk
        ]
        raw = await self.w3.eth.call(
            {"to": self.multicall_address, "data": AGGREGATE3.encode_hex(payload)}
        )
        return_data = AGGREGATE3.decode_output(bytes(raw))["return_data"]

        results = []
        for request, (success, data) in zip(chunk, return_data, strict=True):
            results.append(self._decode(request, success, data))

        failed = sum(1 for r in results if not r.success)
        logger.debug("multicall_executed", calls=len(chunk), failed=failed)
        return results

    @staticmethod
    def _decode(request: ContractCall, success: bool, data: bytes) -> CallResult:
        if not success:
            return CallResult(reference=request.reference, success=False)
        try:
            values = request.method.decode_output(data)
        except (DecodingError, ValueError) as e:
            # Non-conforming contracts (e.g. bytes32 symbols) count as failed calls
            logger.debug(
                "call_decode_failed",
                target=request.target,
                method=request.method.signature,
                error=str(e),
            )
            return CallResult(reference=request.reference, success=False)
        return CallResult(reference=request.reference, success=True, values=values)

    async def estimate_gas(self, transaction: Transaction) -> int:
        """Estimate gas via eth_estimateGas."""
        gas = await self.w3.eth.estimate_gas(
            {
                "to": Web3.to_checksum_address(transaction.to),
                "from": Web3.to_checksum_address(transaction.from_),
                "data": transaction.data,
                "value": transaction.value_wei,
            }
        )
        return int(gas)

    async def block_number(self) -> int:
        """Latest block number via eth_blockNumber."""
        return int(await self.w3.eth.block_number)


__all__ = [
    "BlockSource",
    "ContractCall",
    "CallResult",
    "ChainClient",
    "Web3ChainClient",
    "DEFAULT_MAX_BATCH_SIZE",
]
