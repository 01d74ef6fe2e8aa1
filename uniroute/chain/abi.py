"""Contract method descriptions and ABI encoding/decoding.

Each ContractMethod knows its signature, how to encode calldata, and how to
decode return data into a dict of named values. Addresses coming back from
the chain are normalized to lowercase here, so nothing past this boundary
sees raw positional tuples or checksummed strings.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from eth_abi import decode, encode  # type: ignore[attr-defined]
from web3 import Web3

from uniroute.models.types import normalize_address


def _normalize_output(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return normalize_address(value)
    if abi_type == "address[]":
        return [normalize_address(v) for v in value]
    return value


@dataclass(frozen=True)
class ContractMethod:
    """A contract function: name, ABI input types and named outputs.

    Example:
        GET_PAIR = ContractMethod("getPair", ("address", "address"), ("address",), ("pair",))
        data = GET_PAIR.encode_call(token_a, token_b)
        GET_PAIR.decode_output(raw) == {"pair": "0x..."}
    """

    name: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    output_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.outputs) != len(self.output_names):
            raise ValueError(f"{self.name}: every output needs a name")

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @cached_property
    def selector(self) -> bytes:
        """4-byte function selector."""
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode_call(self, *args: Any) -> bytes:
        """Encode calldata (selector + ABI-encoded arguments)."""
        if len(args) != len(self.inputs):
            raise ValueError(f"{self.signature} expects {len(self.inputs)} args, got {len(args)}")
        return self.selector + encode(list(self.inputs), list(args))

    def encode_hex(self, *args: Any) -> str:
        """Encode calldata as a 0x-prefixed hex string."""
        return "0x" + self.encode_call(*args).hex()

    def decode_output(self, data: bytes) -> dict[str, Any]:
        """Decode return data into named values."""
        values = decode(list(self.outputs), data)
        return {
            name: _normalize_output(abi_type, value)
            for name, abi_type, value in zip(self.output_names, self.outputs, values, strict=True)
        }


def method(
    name: str,
    inputs: Sequence[str] = (),
    outputs: Sequence[tuple[str, str]] = (),
) -> ContractMethod:
    """Shorthand: outputs given as (abi_type, name) pairs."""
    return ContractMethod(
        name=name,
        inputs=tuple(inputs),
        outputs=tuple(t for t, _ in outputs),
        output_names=tuple(n for _, n in outputs),
    )


# =============================================================================
# ERC20
# =============================================================================

BALANCE_OF = method("balanceOf", ["address"], [("uint256", "balance")])
ALLOWANCE = method("allowance", ["address", "address"], [("uint256", "allowance")])
DECIMALS = method("decimals", [], [("uint8", "decimals")])
SYMBOL = method("symbol", [], [("string", "symbol")])
NAME = method("name", [], [("string", "name")])
TOTAL_SUPPLY = method("totalSupply", [], [("uint256", "total_supply")])
APPROVE = method("approve", ["address", "uint256"], [("bool", "success")])

# =============================================================================
# Uniswap V2 factory / pair
# =============================================================================

GET_PAIR = method("getPair", ["address", "address"], [("address", "pair")])
ALL_PAIRS = method("allPairs", ["uint256"], [("address", "pair")])
ALL_PAIRS_LENGTH = method("allPairsLength", [], [("uint256", "length")])
TOKEN0 = method("token0", [], [("address", "token0")])
TOKEN1 = method("token1", [], [("address", "token1")])
GET_RESERVES = method(
    "getReserves",
    [],
    [("uint112", "reserve0"), ("uint112", "reserve1"), ("uint32", "block_timestamp_last")],
)

# =============================================================================
# Uniswap V2 router
# =============================================================================

GET_AMOUNTS_OUT = method("getAmountsOut", ["uint256", "address[]"], [("uint256[]", "amounts")])
GET_AMOUNTS_IN = method("getAmountsIn", ["uint256", "address[]"], [("uint256[]", "amounts")])

SWAP_EXACT_ETH_FOR_TOKENS = method(
    "swapExactETHForTokens", ["uint256", "address[]", "address", "uint256"]
)
SWAP_ETH_FOR_EXACT_TOKENS = method(
    "swapETHForExactTokens", ["uint256", "address[]", "address", "uint256"]
)
SWAP_EXACT_TOKENS_FOR_ETH = method(
    "swapExactTokensForETH", ["uint256", "uint256", "address[]", "address", "uint256"]
)
SWAP_TOKENS_FOR_EXACT_ETH = method(
    "swapTokensForExactETH", ["uint256", "uint256", "address[]", "address", "uint256"]
)
SWAP_EXACT_TOKENS_FOR_TOKENS = method(
    "swapExactTokensForTokens", ["uint256", "uint256", "address[]", "address", "uint256"]
)
SWAP_TOKENS_FOR_EXACT_TOKENS = method(
    "swapTokensForExactTokens", ["uint256", "uint256", "address[]", "address", "uint256"]
)

ADD_LIQUIDITY = method(
    "addLiquidity",
    ["address", "address", "uint256", "uint256", "uint256", "uint256", "address", "uint256"],
)
ADD_LIQUIDITY_ETH = method(
    "addLiquidityETH",
    ["address", "uint256", "uint256", "uint256", "address", "uint256"],
)
REMOVE_LIQUIDITY = method(
    "removeLiquidity",
    ["address", "address", "uint256", "uint256", "uint256", "address", "uint256"],
)
REMOVE_LIQUIDITY_ETH = method(
    "removeLiquidityETH",
    ["address", "uint256", "uint256", "uint256", "address", "uint256"],
)

# =============================================================================
# Uniswap V3 factory / quoter / router
# =============================================================================

GET_POOL = method("getPool", ["address", "address", "uint24"], [("address", "pool")])

QUOTE_EXACT_INPUT_SINGLE = method(
    "quoteExactInputSingle",
    ["address", "address", "uint24", "uint256", "uint160"],
    [("uint256", "amount_out")],
)
QUOTE_EXACT_OUTPUT_SINGLE = method(
    "quoteExactOutputSingle",
    ["address", "address", "uint24", "uint256", "uint160"],
    [("uint256", "amount_in")],
)

# (tokenIn, tokenOut, fee, recipient, deadline, amountIn, amountOutMinimum, sqrtPriceLimitX96)
EXACT_INPUT_SINGLE = method(
    "exactInputSingle",
    ["(address,address,uint24,address,uint256,uint256,uint256,uint160)"],
)
# (tokenIn, tokenOut, fee, recipient, deadline, amountOut, amountInMaximum, sqrtPriceLimitX96)
EXACT_OUTPUT_SINGLE = method(
    "exactOutputSingle",
    ["(address,address,uint24,address,uint256,uint256,uint256,uint160)"],
)
UNWRAP_WETH9 = method("unwrapWETH9", ["uint256", "address"])
MULTICALL = method("multicall", ["bytes[]"])

# =============================================================================
# Multicall3
# =============================================================================

AGGREGATE3 = method(
    "aggregate3",
    ["(address,bool,bytes)[]"],
    [("(bool,bytes)[]", "return_data")],
)
GET_ETH_BALANCE = method("getEthBalance", ["address"], [("uint256", "balance")])


__all__ = [
    "ContractMethod",
    "method",
    "BALANCE_OF",
    "ALLOWANCE",
    "DECIMALS",
    "SYMBOL",
    "NAME",
    "TOTAL_SUPPLY",
    "APPROVE",
    "GET_PAIR",
    "ALL_PAIRS",
    "ALL_PAIRS_LENGTH",
    "TOKEN0",
    "TOKEN1",
    "GET_RESERVES",
    "GET_AMOUNTS_OUT",
    "GET_AMOUNTS_IN",
    "SWAP_EXACT_ETH_FOR_TOKENS",
    "SWAP_ETH_FOR_EXACT_TOKENS",
    "SWAP_EXACT_TOKENS_FOR_ETH",
    "SWAP_TOKENS_FOR_EXACT_ETH",
    "SWAP_EXACT_TOKENS_FOR_TOKENS",
    "SWAP_TOKENS_FOR_EXACT_TOKENS",
    "ADD_LIQUIDITY",
    "ADD_LIQUIDITY_ETH",
    "REMOVE_LIQUIDITY",
    "REMOVE_LIQUIDITY_ETH",
    "GET_POOL",
    "QUOTE_EXACT_INPUT_SINGLE",
    "QUOTE_EXACT_OUTPUT_SINGLE",
    "EXACT_INPUT_SINGLE",
    "EXACT_OUTPUT_SINGLE",
    "UNWRAP_WETH9",
    "MULTICALL",
    "AGGREGATE3",
    "GET_ETH_BALANCE",
]
