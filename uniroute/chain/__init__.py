"""Chain access: batched reads, contract registry and external collaborators.

Module structure:
- abi.py: ContractMethod descriptions with encode/decode
- client.py: ChainClient protocol and the Multicall3-backed Web3ChainClient
- registry.py: ContractRegistry with per-network addresses and hub tokens
- tokens.py: TokenMetadataResolver protocol and on-chain implementation
- prices.py: Fiat price feed and gas price sources
- wallet.py: Balance and allowance read helpers
"""

from uniroute.chain.client import CallResult, ChainClient, ContractCall, Web3ChainClient
from uniroute.chain.prices import (
    CoinGeckoPriceFeed,
    FiatPriceFeed,
    GasPriceSource,
    StaticGasPriceSource,
    Web3GasPriceSource,
)
from uniroute.chain.registry import ContractRegistry, V2Contracts, V3Contracts
from uniroute.chain.tokens import OnChainTokenResolver, TokenMetadataResolver

__all__ = [
    "CallResult",
    "ChainClient",
    "CoinGeckoPriceFeed",
    "ContractCall",
    "ContractRegistry",
    "FiatPriceFeed",
    "GasPriceSource",
    "OnChainTokenResolver",
    "StaticGasPriceSource",
    "TokenMetadataResolver",
    "V2Contracts",
    "V3Contracts",
    "Web3ChainClient",
    "Web3GasPriceSource",
]
