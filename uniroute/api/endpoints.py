"""API endpoints for trade, liquidity and portfolio quotes."""

import os
from dataclasses import dataclass, replace
from decimal import Decimal
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends

from uniroute.chain.client import ChainClient, Web3ChainClient
from uniroute.chain.prices import CoinGeckoPriceFeed, FiatPriceFeed, Web3GasPriceSource
from uniroute.chain.registry import ContractRegistry
from uniroute.chain.tokens import OnChainTokenResolver, TokenMetadataResolver
from uniroute.config import Settings
from uniroute.constants import MAINNET
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.liquidity.engine import LiquidityEngine
from uniroute.models.route import TradeDirection
from uniroute.models.types import normalize_address
from uniroute.portfolio.scanner import PortfolioScanner
from uniroute.router import TradeRouter
from uniroute.transactions.builder import TransactionBuilder

from .schemas import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    PairLiquidityModel,
    PortfolioRequest,
    PortfolioResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    TradeQuoteRequest,
    TradeQuoteResponse,
)

logger = structlog.get_logger()

router = APIRouter()


@dataclass
class Services:
    """Collaborators shared by every request."""

    client: ChainClient
    registry: ContractRegistry
    settings: Settings
    resolver: TokenMetadataResolver
    price_feed: FiatPriceFeed | None = None


@lru_cache(maxsize=1)
def get_default_services() -> Services:
    """Build services from the environment.

    Configuration via environment variables:
    - UNIROUTE_RPC_URL: HTTP RPC endpoint (required)
    - UNIROUTE_CHAIN_ID: Chain id of the RPC (default: 1)
    - UNIROUTE_GAS_AWARE: Enable gas-aware re-ranking via CoinGecko (default: false)
    - UNIROUTE_SLIPPAGE, UNIROUTE_DEADLINE_MINUTES, UNIROUTE_DISABLE_MULTIHOPS,
      UNIROUTE_PROTOCOL_VERSIONS: see Settings.from_env
    """
    rpc_url = os.environ.get("UNIROUTE_RPC_URL")
    if not rpc_url:
        raise RuntimeError("UNIROUTE_RPC_URL is not set")
    chain_id = int(os.environ.get("UNIROUTE_CHAIN_ID", str(MAINNET)))
    gas_aware = os.environ.get("UNIROUTE_GAS_AWARE", "false").lower() in ("true", "1", "yes")

    settings = Settings.from_env()
    registry = ContractRegistry.from_settings(chain_id, settings)
    client = Web3ChainClient(rpc_url, registry.multicall)
    price_feed = None
    if gas_aware:
        settings = replace(settings, gas_price_source=Web3GasPriceSource(client.w3))
        price_feed = CoinGeckoPriceFeed()

    logger.info("services_configured", chain_id=chain_id, gas_aware=gas_aware)
    return Services(
        client=client,
        registry=registry,
        settings=settings,
        resolver=OnChainTokenResolver(client, registry),
        price_feed=price_feed,
    )


def get_services() -> Services:
    """Dependency provider for the shared services.

    Override this in tests to inject mocks:
        app.dependency_overrides[get_services] = lambda: mock_services
    """
    return get_default_services()


def _direction(value: str) -> TradeDirection:
    return TradeDirection(value)


async def _liquidity_engine(services: Services, token_a: str, token_b: str, wallet: str) -> LiquidityEngine:
    tokens = await services.resolver.resolve([token_a, token_b])
    builder = TransactionBuilder(services.registry, wallet, services.settings)
    missing = [a for a in (token_a, token_b) if normalize_address(a) not in tokens]
    if missing:
        raise ConfigurationError(f"Token not found: {missing[0]}", ErrorCode.TOKEN_NOT_FOUND)
    return LiquidityEngine(
        services.client,
        services.registry,
        services.settings,
        builder,
        tokens[normalize_address(token_a)],
        tokens[normalize_address(token_b)],
    )


@router.post("/quote", response_model_exclude_none=True)
async def quote_trade(
    request: TradeQuoteRequest,
    services: Services = Depends(get_services),
) -> TradeQuoteResponse:
    """Route a trade and return the best route's context.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - RouterError (bad token, no route, ...): 400 with {code, message}
    """
    logger.info(
        "received_trade_quote",
        from_token=request.from_token,
        to_token=request.to_token,
        amount=request.amount,
        direction=request.direction,
    )
    trade_router = await TradeRouter.create(
        services.client,
        services.resolver,
        services.registry,
        services.settings,
        request.from_token,
        request.to_token,
        request.wallet,
        services.price_feed,
    )
    context = await trade_router.trade(Decimal(request.amount), _direction(request.direction))
    return TradeQuoteResponse.from_context(context)


@router.post("/liquidity/add", response_model_exclude_none=True)
async def quote_add_liquidity(
    request: AddLiquidityRequest,
    services: Services = Depends(get_services),
) -> AddLiquidityResponse:
    """Quote a deposit, with balance and allowance checks."""
    engine = await _liquidity_engine(services, request.token_a, request.token_b, request.wallet)
    counter = Decimal(request.counter_amount) if request.counter_amount is not None else None
    context = await engine.add_liquidity_context(
        Decimal(request.amount), _direction(request.direction), counter
    )
    return AddLiquidityResponse.from_context(context)


@router.post("/liquidity/remove", response_model_exclude_none=True)
async def quote_remove_liquidity(
    request: RemoveLiquidityRequest,
    services: Services = Depends(get_services),
) -> RemoveLiquidityResponse:
    """Quote burning LP tokens."""
    engine = await _liquidity_engine(services, request.token_a, request.token_b, request.wallet)
    quote = await engine.quote_remove_liquidity(Decimal(request.lp_amount))
    return RemoveLiquidityResponse.from_quote(quote)


@router.post("/portfolio", response_model_exclude_none=True)
async def portfolio(
    request: PortfolioRequest,
    services: Services = Depends(get_services),
) -> PortfolioResponse:
    """Value a wallet's LP positions."""
    scanner = PortfolioScanner(services.client, services.registry, services.resolver, request.wallet)
    pairs = request.pairs
    if pairs is None:
        pairs = await scanner.find_supplied_pairs(max_pairs=request.max_pairs)
    snapshots = await scanner.pair_liquidity(pairs)
    logger.info("returning_portfolio", wallet=request.wallet, pairs=len(snapshots))
    return PortfolioResponse(pairs=[PairLiquidityModel.from_snapshot(s) for s in snapshots])
