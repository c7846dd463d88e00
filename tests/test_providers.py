import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests
from websockets.protocol import State

from cardano_tx import ProviderError, SubmissionError
from cardano_tx.blockchain import ChainTip, OgmiosClient, OgmiosQueryError, OgmiosTimeoutError
from cardano_tx.errors import ProviderTimeoutError, TransactionNotFoundError
from cardano_tx.providers import (
    BlockfrostTxProvider,
    CliTxProvider,
    OgmiosTxProvider,
    RetryingTxProvider,
    create_provider,
)
from config import Settings

TX_HASH = "e99a5bde15aa05f24fcc04b7eabc1520d3397283b1ee720de9fe2653abbb0c9f"


# --- Ogmios ---------------------------------------------------------------

def ogmios_utxo(index, lovelace):
    return {"transaction": {"id": TX_HASH}, "index": index, "address": "addr_test1x",
            "value": {"ada": {"lovelace": lovelace}}}


def test_ogmios_conversions():
    client = MagicMock()
    client.get_protocol_parameters = AsyncMock(return_value={
        "minFeeConstant": {"ada": {"lovelace": 155381}},
        "minFeeCoefficient": 44,
        "maxTransactionSize": {"bytes": 16384},
        "minUtxoDepositCoefficient": 4310,
    })
    client.get_chain_tip = AsyncMock(return_value=ChainTip(slot=1234, block_hash="ff"))
    client.get_utxos_by_address = AsyncMock(return_value=[ogmios_utxo(0, 5), ogmios_utxo(3, 7)])
    provider = OgmiosTxProvider(client)

    params = asyncio.run(provider.get_protocol_parameters())
    assert (params.min_fee_constant, params.min_fee_coefficient, params.max_tx_size) == (155381, 44, 16384)
    assert params.coins_per_utxo_byte == 4310
    assert asyncio.run(provider.get_tip()) == 1234
    utxos = asyncio.run(provider.get_utxos("addr_test1x"))
    assert [(u.index, u.amount) for u in utxos] == [(0, 5), (3, 7)]


def test_ogmios_transaction_lookup():
    client = MagicMock()
    client.get_utxos_by_output_references = AsyncMock(side_effect=[[], [ogmios_utxo(0, 9)]])
    provider = OgmiosTxProvider(client)

    with pytest.raises(TransactionNotFoundError):
        asyncio.run(provider.get_transaction(TX_HASH))
    assert asyncio.run(provider.get_transaction(TX_HASH))["outputs"] == [{"index": 0, "amount": 9}]
    client.get_utxos_by_output_references.assert_awaited_with([{"transaction": {"id": TX_HASH}, "index": 0}])


def test_ogmios_bad_protocol_parameters():
    client = MagicMock()
    client.get_protocol_parameters = AsyncMock(return_value={"minFeeCoefficient": 44})

    with pytest.raises(ProviderError):
        asyncio.run(OgmiosTxProvider(client).get_protocol_parameters())


class FakeWebSocket:
    def __init__(self, *responses):
        self.state = State.OPEN
        self.sent = []
        self.responses = list(responses)

    async def send(self, message):
        self.sent.append(json.loads(message))

    async def recv(self):
        return json.dumps(self.responses.pop(0))

    async def close(self):
        self.state = State.CLOSED


def test_ogmios_client_requests():
    client = OgmiosClient()
    ws = FakeWebSocket(
        {"jsonrpc": "2.0", "result": {"slot": 99, "id": "abcd"}, "id": 1},
        {"jsonrpc": "2.0", "result": {"transaction": {"id": TX_HASH}}, "id": 2},
    )
    client._ws = ws

    tip = asyncio.run(client.get_chain_tip())
    tx_id = asyncio.run(client.submit_transaction("84a0"))

    assert (tip.slot, tip.block_hash) == (99, "abcd")
    assert tx_id == TX_HASH
    assert ws.sent[0]["method"] == "queryLedgerState/tip"
    assert ws.sent[1] == {"jsonrpc": "2.0", "method": "submitTransaction", "id": 2,
                          "params": {"transaction": {"cbor": "84a0"}}}


class SlowWebSocket:
    """Answers each request after a per-method delay, so replies can arrive late."""

    def __init__(self, delays, results):
        self.state = State.OPEN
        self.delays = delays
        self.results = results
        self.replies = None

    async def send(self, message):
        if self.replies is None:
            self.replies = asyncio.Queue()
        request = json.loads(message)
        reply = {"jsonrpc": "2.0", "result": self.results[request["method"]], "id": request["id"]}
        asyncio.get_running_loop().call_later(self.delays[request["method"]], self.replies.put_nowait, json.dumps(reply))

    async def recv(self):
        return await self.replies.get()


def test_ogmios_client_drops_late_replies():
    async def run():
        client = OgmiosClient(timeout=0.1)
        client._ws = SlowWebSocket(
            delays={"queryLedgerState/tip": 0.2, "queryLedgerState/protocolParameters": 0.15},
            results={"queryLedgerState/tip": {"slot": 123, "id": "ab"},
                     "queryLedgerState/protocolParameters": {"minFeeConstant": {"ada": {"lovelace": 155381}}}},
        )
        with pytest.raises(OgmiosTimeoutError):
            await client.get_chain_tip()
        client.timeout = 1.0
        return await client.get_protocol_parameters()

    assert asyncio.run(run()) == {"minFeeConstant": {"ada": {"lovelace": 155381}}}


def test_ogmios_client_rejected_submission():
    client = OgmiosClient()
    client._ws = FakeWebSocket({"jsonrpc": "2.0", "error": {"code": 3005, "message": "bad inputs"}, "id": 1})

    with pytest.raises(SubmissionError) as exc_info:
        asyncio.run(client.submit_transaction("84a0"))
    assert "bad inputs" in str(exc_info.value)


def test_ogmios_client_query_error():
    client = OgmiosClient()
    client._ws = FakeWebSocket({"jsonrpc": "2.0", "error": {"message": "nope"}, "id": 1})

    with pytest.raises(OgmiosQueryError):
        asyncio.run(client.get_protocol_parameters())


# --- Blockfrost -----------------------------------------------------------

def response(status_code, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = body
    resp.text = text
    return resp


def test_blockfrost_protocol_parameters_and_tip():
    provider = BlockfrostTxProvider("https://example.invalid/api/v0/", "project")
    with patch("cardano_tx.providers.blockfrost.requests.request") as request:
        request.side_effect = [
            response(200, {"min_fee_a": 44, "min_fee_b": 155381, "max_tx_size": 16384, "coins_per_utxo_size": "4310"}),
            response(200, {"slot": 555}),
        ]
        params = asyncio.run(provider.get_protocol_parameters())
        tip = asyncio.run(provider.get_tip())

    assert (params.min_fee_constant, params.min_fee_coefficient, params.max_tx_size) == (155381, 44, 16384)
    assert params.coins_per_utxo_byte == 4310
    assert tip == 555
    method, url = request.call_args_list[0].args
    assert (method, url) == ("GET", "https://example.invalid/api/v0/epochs/latest/parameters")
    assert request.call_args_list[0].kwargs["headers"]["project_id"] == "project"


def test_blockfrost_utxos_paginate():
    page = [{"tx_hash": TX_HASH, "output_index": i, "amount": [
        {"unit": "lovelace", "quantity": "10"}, {"unit": "abcd", "quantity": "1"}]} for i in range(100)]
    provider = BlockfrostTxProvider("https://example.invalid", "project")
    with patch("cardano_tx.providers.blockfrost.requests.request") as request:
        request.side_effect = [response(200, page), response(200, page[:3])]
        utxos = asyncio.run(provider.get_utxos("addr_test1x"))

    assert len(utxos) == 103
    assert utxos[0].amount == 10
    assert request.call_args_list[1].kwargs["params"] == {"page": 2, "count": 100}


def test_blockfrost_unknown_address_has_no_utxos():
    provider = BlockfrostTxProvider("https://example.invalid", "project")
    with patch("cardano_tx.providers.blockfrost.requests.request", return_value=response(404)):
        assert asyncio.run(provider.get_utxos("addr_test1x")) == []


def test_blockfrost_errors():
    provider = BlockfrostTxProvider("https://example.invalid", "project")
    with patch("cardano_tx.providers.blockfrost.requests.request") as request:
        request.return_value = response(404)
        with pytest.raises(TransactionNotFoundError):
            asyncio.run(provider.get_transaction(TX_HASH))

        request.return_value = response(400, text="BadInputsUTxO")
        with pytest.raises(SubmissionError):
            asyncio.run(provider.submit_transaction(b"\x84"))

        request.return_value = response(500, text="oops")
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.get_tip())
        assert "status code 500" in str(exc_info.value)

        request.side_effect = requests.Timeout()
        with pytest.raises(ProviderTimeoutError):
            asyncio.run(provider.get_tip())


# --- cardano-cli ----------------------------------------------------------

def fake_process(stdout, returncode=0, stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


def test_cli_utxos():
    output = {f"{TX_HASH}#1": {"address": "addr_test1x", "value": {"lovelace": 3000000}}}
    provider = CliTxProvider(2, "/ipc/node.socket")
    with patch("cardano_tx.providers.cli.asyncio.create_subprocess_exec",
               AsyncMock(return_value=fake_process(json.dumps(output).encode()))) as run:
        utxos = asyncio.run(provider.get_utxos("addr_test1x"))

    assert [(u.hash, u.index, u.amount) for u in utxos] == [(TX_HASH, 1, 3000000)]
    command = list(run.call_args.args)
    assert command[:5] == ["cardano-cli", "query", "utxo", "--address", "addr_test1x"]
    assert command[-4:] == ["--socket-path", "/ipc/node.socket", "--testnet-magic", "2"]


def test_cli_mainnet_and_protocol_parameters():
    params = {"txFeeFixed": 155381, "txFeePerByte": 44, "maxTxSize": 16384, "utxoCostPerByte": 4310}
    provider = CliTxProvider(0, "/ipc/node.socket")
    with patch("cardano_tx.providers.cli.asyncio.create_subprocess_exec",
               AsyncMock(return_value=fake_process(json.dumps(params).encode()))) as run:
        result = asyncio.run(provider.get_protocol_parameters())

    assert result.min_fee_coefficient == 44
    assert result.min_utxo_value == 1_000_000
    assert run.call_args.args[-1] == "--mainnet"


def test_cli_submit():
    provider = CliTxProvider(2, "/ipc/node.socket")
    with patch("cardano_tx.providers.cli.asyncio.create_subprocess_exec",
               AsyncMock(return_value=fake_process(b"Transaction successfully submitted.\n"))):
        asyncio.run(provider.submit_transaction(b"\x84"))

    with patch("cardano_tx.providers.cli.asyncio.create_subprocess_exec",
               AsyncMock(return_value=fake_process(b"", returncode=1, stderr=b"BadInputsUTxO"))):
        with pytest.raises(SubmissionError):
            asyncio.run(provider.submit_transaction(b"\x84"))


def test_cli_transaction_not_found():
    provider = CliTxProvider(2, "/ipc/node.socket")
    with patch("cardano_tx.providers.cli.asyncio.create_subprocess_exec",
               AsyncMock(return_value=fake_process(b"{}"))):
        with pytest.raises(TransactionNotFoundError):
            asyncio.run(provider.get_transaction(TX_HASH))


# --- factory --------------------------------------------------------------

@pytest.mark.parametrize("name,cls", [
    ("ogmios", OgmiosTxProvider),
    ("blockfrost", BlockfrostTxProvider),
    ("cli", CliTxProvider),
])
def test_create_provider(name, cls):
    provider = create_provider(Settings(provider_name=name, retry_count=3, retry_wait_time=0.5))

    assert isinstance(provider, RetryingTxProvider)
    assert isinstance(provider.provider, cls)
    assert provider.config.retry_count == 3


def test_create_unknown_provider():
    with pytest.raises(ValueError):
        create_provider(SimpleNamespace(provider_name="koios"))
