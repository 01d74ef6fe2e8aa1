"""Tests for the Multicall3-backed Web3ChainClient (with a fake AsyncWeb3)."""

import pytest
from eth_abi import encode

from uniroute.chain.abi import AGGREGATE3, BALANCE_OF, DECIMALS
from uniroute.chain.client import ContractCall, Web3ChainClient
from uniroute.models.route import Transaction
from tests.helpers import DAI, MULTICALL3, USDC, V2_ROUTER, WALLET


def aggregate_result(*entries: tuple[bool, bytes]) -> bytes:
    return encode(["(bool,bytes)[]"], [list(entries)])


class FakeEth:
    """Minimal stand-in for AsyncWeb3.eth."""

    def __init__(self, responses: list[bytes]):
        self.responses = list(responses)
        self.requests: list[dict] = []
        self.gas_requests: list[dict] = []

    async def call(self, tx):
        self.requests.append(tx)
        return self.responses.pop(0)

    async def estimate_gas(self, tx):
        self.gas_requests.append(tx)
        return 21000

    @property
    async def block_number(self):
        return 19_000_000


class FakeWeb3:
    def __init__(self, responses: list[bytes]):
        self.eth = FakeEth(responses)


class TestWeb3ChainClient:
    """Tests for batching and decoding through aggregate3."""

    def test_requires_rpc_or_w3(self):
        with pytest.raises(ValueError):
            Web3ChainClient()

    def test_rejects_non_positive_batch_size(self):
        with pytest.raises(ValueError):
            Web3ChainClient(w3=FakeWeb3([]), max_batch_size=0)

    @pytest.mark.asyncio
    async def test_decodes_results_in_order(self):
        w3 = FakeWeb3([aggregate_result((True, encode(["uint256"], [5])), (True, encode(["uint8"], [6])))])
        client = Web3ChainClient(w3=w3)

        results = await client.call(
            [
                ContractCall(USDC, BALANCE_OF, (WALLET,), reference="balance"),
                ContractCall(USDC, DECIMALS, reference="decimals"),
            ]
        )

        assert [r.reference for r in results] == ["balance", "decimals"]
        assert results[0].success and results[0].values["balance"] == 5
        assert results[1].get("decimals") == 6

        (request,) = w3.eth.requests
        assert request["to"].lower() == MULTICALL3
        assert request["data"].startswith("0x" + AGGREGATE3.selector.hex())

    @pytest.mark.asyncio
    async def test_failed_call_is_not_fatal(self):
        w3 = FakeWeb3([aggregate_result((False, b""), (True, encode(["uint8"], [18])))])
        client = Web3ChainClient(w3=w3)

        results = await client.call([ContractCall(USDC, DECIMALS), ContractCall(DAI, DECIMALS)])

        assert not results[0].success
        assert results[0].values == {}
        assert results[1].values["decimals"] == 18

    @pytest.mark.asyncio
    async def test_undecodable_data_counts_as_failure(self):
        """Returned bytes that do not match the output types mark the call failed."""
        w3 = FakeWeb3([aggregate_result((True, b""))])
        client = Web3ChainClient(w3=w3)

        (result,) = await client.call([ContractCall(USDC, DECIMALS)])

        assert not result.success

    @pytest.mark.asyncio
    async def test_batches_are_chunked(self):
        w3 = FakeWeb3(
            [
                aggregate_result((True, encode(["uint8"], [6]))),
                aggregate_result((True, encode(["uint8"], [18]))),
            ]
        )
        client = Web3ChainClient(w3=w3, max_batch_size=1)

        results = await client.call([ContractCall(USDC, DECIMALS), ContractCall(DAI, DECIMALS)])

        assert len(w3.eth.requests) == 2
        assert [r.values["decimals"] for r in results] == [6, 18]

    @pytest.mark.asyncio
    async def test_estimate_gas(self):
        w3 = FakeWeb3([])
        client = Web3ChainClient(w3=w3)
        tx = Transaction(to=V2_ROUTER, from_=WALLET, data="0x1234", value="0x10")

        assert await client.estimate_gas(tx) == 21000
        (request,) = w3.eth.gas_requests
        assert request["value"] == 16
        assert request["data"] == "0x1234"

    @pytest.mark.asyncio
    async def test_block_number(self):
        client = Web3ChainClient(w3=FakeWeb3([]))
        assert await client.block_number() == 19_000_000
