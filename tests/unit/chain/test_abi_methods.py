"""Tests for contract method encoding and decoding."""

import pytest
from eth_abi import encode

from uniroute.chain.abi import (
    ADD_LIQUIDITY,
    ADD_LIQUIDITY_ETH,
    APPROVE,
    BALANCE_OF,
    GET_AMOUNTS_IN,
    GET_AMOUNTS_OUT,
    GET_PAIR,
    GET_RESERVES,
    MULTICALL,
    REMOVE_LIQUIDITY,
    REMOVE_LIQUIDITY_ETH,
    SWAP_ETH_FOR_EXACT_TOKENS,
    SWAP_EXACT_ETH_FOR_TOKENS,
    SWAP_EXACT_TOKENS_FOR_ETH,
    SWAP_EXACT_TOKENS_FOR_TOKENS,
    SWAP_TOKENS_FOR_EXACT_ETH,
    SWAP_TOKENS_FOR_EXACT_TOKENS,
    UNWRAP_WETH9,
    ContractMethod,
    method,
)
from tests.helpers import PAIR_A, WALLET, WETH


class TestSelectors:
    """Selectors must match the deployed router and token ABIs."""

    @pytest.mark.parametrize(
        "contract_method,selector",
        [
            (APPROVE, "095ea7b3"),
            (BALANCE_OF, "70a08231"),
            (GET_PAIR, "e6a43905"),
            (GET_AMOUNTS_OUT, "d06ca61f"),
            (GET_AMOUNTS_IN, "1f00ca74"),
            (SWAP_EXACT_TOKENS_FOR_TOKENS, "38ed1739"),
            (SWAP_TOKENS_FOR_EXACT_TOKENS, "8803dbee"),
            (SWAP_EXACT_ETH_FOR_TOKENS, "7ff36ab5"),
            (SWAP_ETH_FOR_EXACT_TOKENS, "fb3bdb41"),
            (SWAP_EXACT_TOKENS_FOR_ETH, "18cbafe5"),
            (SWAP_TOKENS_FOR_EXACT_ETH, "4a25d94a"),
            (ADD_LIQUIDITY, "e8e33700"),
            (ADD_LIQUIDITY_ETH, "f305d719"),
            (REMOVE_LIQUIDITY, "baa2abde"),
            (REMOVE_LIQUIDITY_ETH, "02751cec"),
            (MULTICALL, "ac9650d8"),
            (UNWRAP_WETH9, "49404b7c"),
        ],
    )
    def test_selector(self, contract_method, selector):
        assert contract_method.selector.hex() == selector


class TestContractMethod:
    """Tests for encoding calls and decoding outputs."""

    def test_signature(self):
        assert GET_PAIR.signature == "getPair(address,address)"

    def test_encode_hex(self):
        data = BALANCE_OF.encode_hex(WALLET)
        assert data.startswith("0x70a08231")
        assert data.endswith(WALLET[2:])
        assert len(data) == 2 + 8 + 64

    def test_wrong_arg_count(self):
        with pytest.raises(ValueError):
            BALANCE_OF.encode_call()

    def test_outputs_need_names(self):
        with pytest.raises(ValueError):
            ContractMethod("broken", (), ("uint256",), ())

    def test_decode_named_outputs(self):
        raw = encode(["uint112", "uint112", "uint32"], [10, 20, 30])
        assert GET_RESERVES.decode_output(raw) == {
            "reserve0": 10,
            "reserve1": 20,
            "block_timestamp_last": 30,
        }

    def test_decoded_addresses_are_lowercase(self):
        """eth_abi returns checksummed addresses; they are normalized on decode."""
        raw = encode(["address"], [PAIR_A])
        assert GET_PAIR.decode_output(raw) == {"pair": PAIR_A}

    def test_decoded_address_arrays_are_lowercase(self):
        get_path = method("path", [], [("address[]", "path")])
        raw = encode(["address[]"], [[WETH, PAIR_A]])
        assert get_path.decode_output(raw) == {"path": [WETH, PAIR_A]}
