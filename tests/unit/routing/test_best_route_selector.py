"""Tests for best-route selection and gas-aware re-ranking."""

from decimal import Decimal

import pytest

from uniroute.chain.prices import StaticGasPriceSource
from uniroute.chain.registry import ContractRegistry
from uniroute.config import Settings
from uniroute.errors import ErrorCode, NoRouteFoundError
from uniroute.models.network import CustomNetwork
from uniroute.models.route import ProtocolVersion
from uniroute.routing.selector import BestRouteSelector, pick_per_hop_bucket
from tests.conftest import MockPriceFeed
from tests.helpers import DAI, USDC, WETH, make_quote, make_route

GAS_AWARE = Settings(gas_price_source=StaticGasPriceSource(100))
ALLOWED = {ProtocolVersion.V2: True, ProtocolVersion.V3: True}


@pytest.fixture
def feed():
    return MockPriceFeed({USDC: Decimal(1), WETH: Decimal(2000)})


@pytest.fixture
def quotes():
    """Two-hop route pays more but costs more gas than the direct one."""
    return [
        make_quote(make_route(WETH, DAI, USDC), "2000", data="0x01"),
        make_quote(make_route(WETH, USDC), "1999", data="0x02"),
    ]


async def select(selector, quotes, weth, usdc, allowance_ok=ALLOWED, has_enough_balance=True):
    return await selector.select(
        quotes,
        from_token=weth,
        to_token=usdc,
        allowance_ok=allowance_ok,
        has_enough_balance=has_enough_balance,
    )


class TestPickPerHopBucket:
    def test_one_per_hop_count(self):
        quotes = [
            make_quote(make_route(WETH, USDC), "3"),
            make_quote(make_route(WETH, DAI, USDC), "2"),
            make_quote(make_route(WETH, USDC, version=ProtocolVersion.V3), "1"),
        ]
        picked = pick_per_hop_bucket(quotes, ALLOWED)
        assert picked == quotes[:2]

    def test_skips_versions_without_allowance(self):
        v3 = make_quote(make_route(WETH, USDC, version=ProtocolVersion.V3), "3")
        v2 = make_quote(make_route(WETH, USDC), "2")
        picked = pick_per_hop_bucket([v3, v2], {ProtocolVersion.V2: True, ProtocolVersion.V3: False})
        assert picked == [v2]


class TestDefaultSelection:
    """Without gas-aware ranking the engine order is kept."""

    @pytest.mark.asyncio
    async def test_keeps_order(self, chain, registry, settings, quotes, weth, usdc):
        selected = await select(BestRouteSelector(chain, registry, settings), quotes, weth, usdc)
        assert selected == quotes
        assert chain.estimates == []

    @pytest.mark.asyncio
    async def test_no_quotes(self, chain, registry, settings, weth, usdc):
        with pytest.raises(NoRouteFoundError) as exc_info:
            await select(BestRouteSelector(chain, registry, settings), [], weth, usdc)
        assert exc_info.value.code is ErrorCode.NO_ROUTES_FOUND

    @pytest.mark.parametrize(
        "settings_kwargs,has_enough_balance",
        [
            ({}, True),  # no gas price source
            ({"gas_price_source": StaticGasPriceSource(100), "disable_multihops": True}, True),
            ({"gas_price_source": StaticGasPriceSource(100)}, False),
        ],
    )
    @pytest.mark.asyncio
    async def test_rerank_disabled(self, chain, registry, feed, quotes, weth, usdc, settings_kwargs, has_enough_balance):
        selector = BestRouteSelector(chain, registry, Settings(**settings_kwargs), feed)
        selected = await select(selector, quotes, weth, usdc, has_enough_balance=has_enough_balance)
        assert selected == quotes
        assert chain.estimates == []

    @pytest.mark.asyncio
    async def test_rerank_disabled_off_mainnet(self, chain, feed, quotes, weth, usdc):
        network = CustomNetwork(name="fork", wrapped_native=weth)
        registry = ContractRegistry.for_chain(1, custom_network=network)
        selector = BestRouteSelector(chain, registry, GAS_AWARE, feed)
        assert await select(selector, quotes, weth, usdc) == quotes


class TestGasAwareSelection:
    """Tests for re-ranking by fiat value net of gas cost."""

    @pytest.mark.asyncio
    async def test_cheaper_route_promoted(self, chain, registry, feed, quotes, weth, usdc):
        # 400k gas at 100 gwei = 0.04 ETH = $80; 100k gas = $20
        chain.gas["0x01"] = 400_000
        chain.gas["0x02"] = 100_000
        selector = BestRouteSelector(chain, registry, GAS_AWARE, feed)

        selected = await select(selector, quotes, weth, usdc)

        assert [q.route_text for q in selected] == ["WETH > USDC", "WETH > DAI > USDC"]
        assert all(q.gas_price_estimated_by == Decimal(100) for q in selected)
        assert len(chain.estimates) == 2

    @pytest.mark.asyncio
    async def test_better_route_kept_when_gas_is_equal(self, chain, registry, feed, quotes, weth, usdc):
        chain.gas["0x01"] = 100_000
        chain.gas["0x02"] = 100_000
        selector = BestRouteSelector(chain, registry, GAS_AWARE, feed)

        selected = await select(selector, quotes, weth, usdc)

        assert selected[0].route_text == "WETH > DAI > USDC"
        assert selected[0].gas_price_estimated_by == Decimal(100)

    @pytest.mark.asyncio
    async def test_failed_estimate_skipped(self, chain, registry, feed, quotes, weth, usdc):
        chain.gas_failures.add("0x01")
        selector = BestRouteSelector(chain, registry, GAS_AWARE, feed)

        selected = await select(selector, quotes, weth, usdc)

        assert selected[0].route_text == "WETH > USDC"

    @pytest.mark.asyncio
    async def test_missing_fiat_price_keeps_order(self, chain, registry, quotes, weth, usdc):
        selector = BestRouteSelector(chain, registry, GAS_AWARE, MockPriceFeed({WETH: Decimal(2000)}))

        selected = await select(selector, quotes, weth, usdc)

        assert selected == quotes
        assert chain.estimates == []

    @pytest.mark.asyncio
    async def test_price_feed_error_keeps_order(self, chain, registry, quotes, weth, usdc):
        selector = BestRouteSelector(chain, registry, GAS_AWARE, MockPriceFeed(error=RuntimeError("down")))
        assert await select(selector, quotes, weth, usdc) == quotes

    @pytest.mark.asyncio
    async def test_no_allowance_anywhere_keeps_order(self, chain, registry, feed, quotes, weth, usdc):
        selector = BestRouteSelector(chain, registry, GAS_AWARE, feed)
        selected = await select(selector, quotes, weth, usdc, allowance_ok={ProtocolVersion.V2: False})
        assert selected == quotes
        assert feed.calls == []
