"""Tests for the discover -> quote -> select pipeline."""

from decimal import Decimal

import pytest

from uniroute.chain.abi import (
    ALLOWANCE,
    BALANCE_OF,
    GET_AMOUNTS_IN,
    GET_AMOUNTS_OUT,
    GET_ETH_BALANCE,
    GET_PAIR,
)
from uniroute.chain.prices import StaticGasPriceSource
from uniroute.config import Settings
from uniroute.errors import ConfigurationError, ErrorCode, NoRouteFoundError
from uniroute.models.route import ProtocolVersion, TradeDirection
from uniroute.router import TradeRouter, liquidity_provider_fees
from tests.conftest import MockPriceFeed
from tests.helpers import (
    AAVE,
    DAI,
    MULTICALL3,
    NOW,
    PAIR_A,
    USDC,
    V2_FACTORY,
    V2_ROUTER,
    WALLET,
    WETH,
    make_quote,
    make_route,
)

ONE_ETH = 10**18


@pytest.fixture
def weth_usdc_chain(chain):
    """Direct WETH/USDC pair pricing 1 WETH at 2000 USDC; the wallet holds 2 WETH."""
    chain.set(V2_FACTORY, GET_PAIR, (WETH, USDC), pair=PAIR_A)
    chain.set(V2_FACTORY, GET_PAIR, (USDC, WETH), pair=PAIR_A)
    chain.set(V2_ROUTER, GET_AMOUNTS_OUT, (ONE_ETH, [WETH, USDC]), amounts=[ONE_ETH, 2000 * 10**6])
    chain.set(V2_ROUTER, GET_AMOUNTS_IN, (2000 * 10**6, [WETH, USDC]), amounts=[ONE_ETH, 2000 * 10**6])
    chain.set(WETH, BALANCE_OF, (WALLET,), balance=2 * ONE_ETH)
    chain.set(USDC, BALANCE_OF, (WALLET,), balance=500 * 10**6)
    chain.set(WETH, ALLOWANCE, (WALLET, V2_ROUTER), allowance=0)
    chain.set(MULTICALL3, GET_ETH_BALANCE, (WALLET,), balance=3 * ONE_ETH)
    return chain


@pytest.fixture
def make_router(registry, v2_settings, clock):
    def _make(client, from_token, to_token):
        return TradeRouter(client, registry, v2_settings, from_token, to_token, WALLET, clock=clock)

    return _make


class TestLiquidityProviderFees:
    def test_fee_per_hop_on_amount_sold(self):
        quote = make_quote(make_route(WETH, AAVE, USDC), "2000", base_amount="2")
        assert liquidity_provider_fees(quote, 18) == (Decimal("0.006"), Decimal("0.006"))

    def test_output_charges_expected_input(self):
        quote = make_quote(make_route(WETH, USDC), "0.5", direction=TradeDirection.OUTPUT, base_amount="1000")
        assert liquidity_provider_fees(quote, 18) == (Decimal("0.0015"),)


class TestTrade:
    """Tests for full trade contexts."""

    @pytest.mark.asyncio
    async def test_exact_input(self, make_router, weth_usdc_chain, weth, usdc):
        context = await make_router(weth_usdc_chain, weth, usdc).trade(Decimal(1))

        assert context.version is ProtocolVersion.V2
        assert context.route_text == "WETH > USDC"
        assert context.route_path == (WETH, USDC)
        assert context.expected_convert_quote == Decimal(2000)
        assert context.min_amount_convert_quote == Decimal(1990)
        assert context.maximum_sent is None
        assert context.bound == Decimal(1990)
        assert context.liquidity_provider_fee == (Decimal("0.003"),)
        assert context.liquidity_provider_fee_percent == Decimal("0.003")
        assert context.trade_expires == NOW + 1200
        assert context.transaction.to == V2_ROUTER
        assert len(context.all_tried_routes) == 1

    @pytest.mark.asyncio
    async def test_missing_allowance_builds_approval(self, make_router, weth_usdc_chain, weth, usdc):
        context = await make_router(weth_usdc_chain, weth, usdc).trade(Decimal(1))

        assert not context.has_enough_allowance
        assert context.approval_transaction.to == WETH
        assert context.from_balance.has_enough
        assert context.from_balance.balance == Decimal(2)
        assert context.to_balance == Decimal(500)

    @pytest.mark.asyncio
    async def test_exact_output(self, make_router, weth_usdc_chain, weth, usdc):
        context = await make_router(weth_usdc_chain, weth, usdc).trade(Decimal(2000), TradeDirection.OUTPUT)

        assert context.expected_convert_quote == Decimal(1)
        assert context.maximum_sent == Decimal("1.005")
        assert context.min_amount_convert_quote is None
        assert context.base_convert_request == Decimal(2000)

    @pytest.mark.asyncio
    async def test_native_input_needs_no_approval(self, make_router, weth_usdc_chain, eth, usdc):
        context = await make_router(weth_usdc_chain, eth, usdc).trade(Decimal(1))

        assert context.route_text == "ETH > USDC"
        assert context.route_path == (WETH, USDC)
        assert context.has_enough_allowance
        assert context.approval_transaction is None
        assert context.from_balance.balance == Decimal(3)
        assert context.transaction.value_wei == ONE_ETH

    @pytest.mark.asyncio
    async def test_insufficient_balance_reported(self, make_router, weth_usdc_chain, weth, usdc):
        weth_usdc_chain.set(WETH, BALANCE_OF, (WALLET,), balance=ONE_ETH // 2)

        context = await make_router(weth_usdc_chain, weth, usdc).trade(Decimal(1))

        assert not context.from_balance.has_enough
        assert context.expected_convert_quote == Decimal(2000)

    @pytest.mark.asyncio
    async def test_no_route(self, make_router, chain, weth, usdc):
        with pytest.raises(NoRouteFoundError) as exc_info:
            await make_router(chain, weth, usdc).trade(Decimal(1))
        assert exc_info.value.code is ErrorCode.NO_ROUTES_FOUND
        # the wallet is never read for an unroutable pair
        assert {c.method.name for c in chain.calls} == {GET_PAIR.name}

    @pytest.mark.asyncio
    async def test_repeated_trade_is_identical(self, make_router, weth_usdc_chain, weth, usdc):
        router = make_router(weth_usdc_chain, weth, usdc)

        first = await router.trade(Decimal(1))
        second = await router.trade(Decimal(1))

        assert first == second

    def test_degenerate_pair(self, make_router, chain, weth):
        with pytest.raises(ConfigurationError) as exc_info:
            make_router(chain, weth, weth)
        assert exc_info.value.code is ErrorCode.INVALID_TRADE_PATH


class TestCreate:
    """Tests for building a router from token addresses."""

    @pytest.mark.asyncio
    async def test_resolves_both_tokens(self, chain, resolver, registry, v2_settings):
        router = await TradeRouter.create(chain, resolver, registry, v2_settings, WETH, USDC, WALLET)

        assert router.from_token.symbol == "WETH"
        assert router.to_token.address == USDC
        assert router.wallet == WALLET
        assert len(resolver.calls) == 1

    @pytest.mark.asyncio
    async def test_unknown_token(self, chain, resolver, registry, v2_settings):
        with pytest.raises(ConfigurationError) as exc_info:
            await TradeRouter.create(chain, resolver, registry, v2_settings, WETH, AAVE, WALLET)
        assert exc_info.value.code is ErrorCode.TOKEN_NOT_FOUND


class TestGasAwareTrade:
    """Tests for balance and allowance checks after gas-aware re-ranking."""

    @pytest.mark.asyncio
    async def test_promoted_route_needing_more_input_requires_approval(self, chain, registry, clock, weth, usdc):
        # 1M gas at 100 gwei = 0.1 ETH = $200; 150k gas = $30
        direct = make_quote(
            make_route(WETH, USDC), "1", TradeDirection.OUTPUT, base_amount="2000", bound="1.005", data="0x01"
        )
        via_dai = make_quote(
            make_route(WETH, DAI, USDC), "1.01", TradeDirection.OUTPUT, base_amount="2000", bound="1.01505", data="0x02"
        )
        chain.gas["0x01"] = 1_000_000
        chain.gas["0x02"] = 150_000
        chain.set(WETH, BALANCE_OF, (WALLET,), balance=2 * ONE_ETH)
        chain.set(USDC, BALANCE_OF, (WALLET,), balance=0)
        # enough for the direct route's maximum, not for the promoted one
        chain.set(WETH, ALLOWANCE, (WALLET, V2_ROUTER), allowance=101 * 10**16)

        settings = Settings(protocol_versions=(ProtocolVersion.V2,), gas_price_source=StaticGasPriceSource(100))
        feed = MockPriceFeed({USDC: Decimal(1), WETH: Decimal(2000)})
        router = TradeRouter(chain, registry, settings, weth, usdc, WALLET, price_feed=feed, clock=clock)

        async def priced(amount, direction):
            return [direct, via_dai]

        router.find_best_route = priced

        context = await router.trade(Decimal(2000), TradeDirection.OUTPUT)

        assert context.route_text == "WETH > DAI > USDC"
        assert context.maximum_sent == Decimal("1.01505")
        assert context.from_balance.has_enough
        assert not context.has_enough_allowance
        assert context.approval_transaction.to == WETH
