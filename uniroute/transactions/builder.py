"""Transaction builder: unsigned {to, from, data, value} envelopes.

Every data-producing method reads the clock itself, so a transaction always
embeds a deadline computed at build time and never one carried over from an
older quote.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.errors import ErrorCode, UnsupportedOperationError
from uniroute.models.route import ProtocolVersion, Route, TradeDirection, Transaction, trade_path
from uniroute.models.token import Token
from uniroute.models.types import UINT256_MAX, normalize_address, to_hex_value

from .encoding import (
    encode_add_liquidity,
    encode_approve,
    encode_remove_liquidity,
    encode_v2_swap,
    encode_v3_swap,
)


def _native_side(token_a: Token, token_b: Token) -> str | None:
    if token_a.is_native:
        return "a"
    if token_b.is_native:
        return "b"
    return None


class TransactionBuilder:
    """Builds unsigned transactions for one wallet on one network.

    Args:
        registry: Contract addresses for the network
        wallet: Address that will sign and send the transactions
        settings: Provides the deadline window
        clock: Returns the current unix time (injectable for tests)

    Raises:
        ConfigurationError: If `settings` carry contract overrides `registry` lacks
    """

    def __init__(
        self,
        registry: ContractRegistry,
        wallet: str,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ):
        registry.check_settings(settings)
        self.registry = registry
        self.wallet = normalize_address(wallet, validate=True)
        self.settings = settings
        self.clock = clock

    def deadline(self) -> int:
        """Unix time `deadline_minutes` from now."""
        return int(self.clock()) + self.settings.deadline_seconds

    def approve(
        self,
        token: str,
        version: ProtocolVersion = ProtocolVersion.V2,
        amount: int = UINT256_MAX,
        spender: str | None = None,
    ) -> Transaction:
        """Approve the version's router (or an explicit spender) to move `token`.

        Args:
            token: ERC20 or LP token address
            version: Router to approve when `spender` is not given
            amount: Allowance in base units (default: unlimited)
            spender: Explicit spender address
        """
        spender = normalize_address(spender) if spender else self.registry.router_for(version)
        return Transaction(
            to=token,
            from_=self.wallet,
            data=encode_approve(spender, amount),
            value="0x00",
        )

    def swap(self, route: Route, direction: TradeDirection, amount: int, bound: int) -> Transaction:
        """Build the swap for a priced route.

        Args:
            route: Route to execute
            direction: INPUT fixes the amount in, OUTPUT the amount out
            amount: Exact side in base units
            bound: Slippage-bounded side in base units (min out / max in)

        Raises:
            UnsupportedOperationError: For a multi-hop V3 route
        """
        from_token, to_token = route.tokens[0], route.tokens[-1]
        path_kind = trade_path(from_token, to_token)

        # ETH in: exact-input sends `amount`, exact-output sends the max-in bound
        value = 0
        if from_token.is_native:
            value = amount if direction is TradeDirection.INPUT else bound

        if route.version is ProtocolVersion.V2:
            data = encode_v2_swap(
                path_kind,
                direction,
                [self.registry.wrapped_address(t) for t in route.tokens],
                amount,
                bound,
                self.wallet,
                self.deadline(),
            )
            to = self.registry.v2.router
        else:
            if not route.is_direct or route.fee_tier is None:
                raise UnsupportedOperationError(
                    f"Uniswap v3 only supports direct routes, got {route.text}",
                    ErrorCode.VERSION_NOT_SUPPORTED,
                )
            data = encode_v3_swap(
                path_kind,
                direction,
                self.registry.wrapped_address(from_token),
                self.registry.wrapped_address(to_token),
                route.fee_tier,
                amount,
                bound,
                self.wallet,
                self.deadline(),
            )
            to = self.registry.v3.router

        return Transaction(to=to, from_=self.wallet, data=data, value=to_hex_value(value))

    def add_liquidity(
        self,
        token_a: Token,
        token_b: Token,
        amount_a: int,
        amount_b: int,
        min_a: int,
        min_b: int,
    ) -> Transaction:
        """Build addLiquidity / addLiquidityETH (amounts in base units)."""
        side = _native_side(token_a, token_b)
        data = encode_add_liquidity(
            self.registry.wrapped_address(token_a),
            self.registry.wrapped_address(token_b),
            amount_a,
            amount_b,
            min_a,
            min_b,
            self.wallet,
            self.deadline(),
            native_side=side,
        )
        value = {"a": amount_a, "b": amount_b}.get(side or "", 0)
        return Transaction(
            to=self.registry.v2.router, from_=self.wallet, data=data, value=to_hex_value(value)
        )

    def remove_liquidity(
        self,
        token_a: Token,
        token_b: Token,
        liquidity: int,
        min_a: int,
        min_b: int,
    ) -> Transaction:
        """Build removeLiquidity / removeLiquidityETH (amounts in base units)."""
        data = encode_remove_liquidity(
            self.registry.wrapped_address(token_a),
            self.registry.wrapped_address(token_b),
            liquidity,
            min_a,
            min_b,
            self.wallet,
            self.deadline(),
            native_side=_native_side(token_a, token_b),
        )
        return Transaction(to=self.registry.v2.router, from_=self.wallet, data=data, value="0x00")


__all__ = ["TransactionBuilder"]
