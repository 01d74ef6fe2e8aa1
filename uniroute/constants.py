"""Protocol constants for Uniswap-style routing.

Centralizes well-known addresses and protocol parameters. Everything here is
immutable; per-network resolution happens in uniroute.chain.registry.
"""

from decimal import Decimal


def _validate_address(name: str, address: str) -> str:
    """Validate and return a lowercase address.

    Kept free of package imports so that the models can import constants.

    Args:
        name: Name of the contract or token (for error messages)
        address: The address to validate

    Returns:
        The validated address, lowercased

    Raises:
        ValueError: If the address is invalid
    """
    if len(address) != 42 or not address.startswith("0x"):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    try:
        int(address, 16)
    except ValueError as err:
        raise ValueError(f"Invalid {name} address: {address}") from err
    return address.lower()


# Chain ids with canonical deployments
MAINNET = 1
ROPSTEN = 3
RINKEBY = 4
GOERLI = 5
KOVAN = 42
SUPPORTED_CHAIN_IDS = (MAINNET, ROPSTEN, RINKEBY, GOERLI, KOVAN)

# Pseudo-address standing in for the chain's native currency
NATIVE_ADDRESS = _validate_address("native", "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE")
NATIVE_DECIMALS = 18
NATIVE_SYMBOL = "ETH"
NATIVE_NAME = "Ethers"

# Uniswap V2 (same addresses on every supported chain)
V2_ROUTER_ADDRESS = _validate_address("v2 router", "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D")
V2_FACTORY_ADDRESS = _validate_address("v2 factory", "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f")

# Uniswap V3
V3_ROUTER_ADDRESS = _validate_address("v3 router", "0xE592427A0AEce92De3Edee1F18E0157C05861564")
V3_FACTORY_ADDRESS = _validate_address("v3 factory", "0x1F98431c8aD98523631AE4a59f267346ea31F984")
V3_QUOTER_ADDRESS = _validate_address("v3 quoter", "0xb27308f9F90D607463bb33eA1BeBb41C27CE5AB6")

# Multicall3 is deployed at the same address on all chains
MULTICALL3_ADDRESS = _validate_address("multicall3", "0xcA11bde05977b3631167028862bE2a173976CA11")

# LP fee charged per hop on V2 pairs
V2_LP_FEE = Decimal("0.003")

# V3 fee tiers in hundredths of a bip
V3_FEE_LOW = 500
V3_FEE_MEDIUM = 3000
V3_FEE_HIGH = 10000
V3_FEE_TIERS = (V3_FEE_LOW, V3_FEE_MEDIUM, V3_FEE_HIGH)
V3_FEE_DENOMINATOR = Decimal(1_000_000)

# Liquidity locked forever by the first supplier (in LP base units)
MINIMUM_LIQUIDITY = 1000
LP_TOKEN_DECIMALS = 18

# Routes never exceed this many tokens (3 hops)
MAX_ROUTE_LENGTH = 4

# Defaults for Settings
DEFAULT_SLIPPAGE = Decimal("0.005")
DEFAULT_DEADLINE_MINUTES = 20
DEFAULT_WATCH_INTERVAL_SECONDS = 5.0

# Wrapped native token per supported chain: (address, symbol, name)
WRAPPED_NATIVE = {
    MAINNET: (
        _validate_address("WETH", "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"),
        "WETH",
        "Wrapped Ether",
    ),
    ROPSTEN: (
        _validate_address("WETH", "0xc778417E063141139Fce010982780140Aa0cD5Ab"),
        "WETH",
        "Wrapped Ether",
    ),
    RINKEBY: (
        _validate_address("WETH", "0xc778417E063141139Fce010982780140Aa0cD5Ab"),
        "WETH",
        "Wrapped Ether",
    ),
    GOERLI: (
        _validate_address("WETH", "0xB4FBF271143F4FBf7B91A5ded31805e42b2208d6"),
        "WETH",
        "Wrapped Ether",
    ),
    KOVAN: (
        _validate_address("WETH", "0xd0A1E359811322d97991E03f863a0C30C2cF029C"),
        "WETH",
        "Wrapped Ether",
    ),
}

# Mainnet hub tokens used to bridge multi-hop routes: (address, decimals, symbol, name)
MAINNET_HUB_TOKENS = (
    (
        _validate_address("USDT", "0xdAC17F958D2ee523a2206206994597C13D831ec7"),
        6,
        "USDT",
        "Tether USD",
    ),
    (
        _validate_address("COMP", "0xc00e94Cb662C3520282E6f5717214004A7f26888"),
        18,
        "COMP",
        "Compound",
    ),
    (
        _validate_address("USDC", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
        6,
        "USDC",
        "USD Coin",
    ),
    (
        _validate_address("DAI", "0x6B175474E89094C44Da98b954EedeAC495271d0F"),
        18,
        "DAI",
        "Dai Stablecoin",
    ),
    (
        _validate_address("WBTC", "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"),
        8,
        "WBTC",
        "Wrapped BTC",
    ),
)
