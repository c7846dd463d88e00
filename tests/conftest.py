"""Shared fixtures: protocol parameters, key hashes from a known multisig fixture, a fake provider."""

from typing import Any, Dict, List, Optional

import pytest

from cardano_tx import ProtocolParameters, Utxo, Wallet
from cardano_tx.errors import TransactionNotFoundError

RECEIVER_ADDRESS = "addr_test1vqjysa7p4mhu0l25qknwznvj0kghtr29ud7zp732ezwtzec0w8g3u"
RECEIVER_KEY_HASH = "244877c1aeefc7fd5405a6e14d927d91758d45e37c20fa2ac89cb167"

SPEND_KEY_HASHES = [
    "d6b67f93ffa4e2651271cc9bcdbdedb2539911266b534d9c163cba21",
    "cba89c7084bf0ce4bf404346b668a7e83c8c9c250d1cafd8d8996e41",
    "79df3577e4c7d7da04872c2182b8d8829d7b477912dbf35d89287c39",
    "2368e8113bd5f32d713751791d29acee9e1b5a425b0454b963b2558b",
    "06b4c7f5254d6395b527ac3de60c1d77194df7431d85fe55ca8f107d",
]
FEE_KEY_HASHES = [
    "f0f4837b3a306752a2b3e52394168bc7391de3dce11364b723cc55cf",
    "47344d5bd7b2fea56336ba789579705a944760032585ef64084c92db",
    "f01018c1d8da54c2f557679243b09af1c4dd4d9c671512b01fa5f92b",
    "6837232854849427dae7c45892032d7ded136c5beb13c68fda635d87",
    "d215701e2eb17c741b9d306cba553f9fbaaca1e12a5925a065b90fa8",
]
# Script hashes of 4-of-5 scripts over the key hashes above
SPEND_SCRIPT_HASH = "0c25e4ff24cfa0dfebcec382095161271dc9bb744ca4149ec604dc99"
FEE_SCRIPT_HASH = "a5caf9ce4bed09c794ee87bddb6505822db5bd476a4f61e0cd4074a2"

TX_HASH_A = "e99a5bde15aa05f24fcc04b7eabc1520d3397283b1ee720de9fe2653abbb0c9f"
TX_HASH_B = "d1fd0d772be7741d9bfaf0b037d02d2867a987ccba3e6ba2ee9aa2a861b73145"
TX_HASH_C = "098236134e0f2077a6434dd9d7727126fa8b3627bcab3ae030a194d46eded73e"


class FakeProvider:
    """In-memory TxProvider."""
    
    def __init__(self, params: ProtocolParameters, utxos: Optional[Dict[str, List[Utxo]]] = None, slot: int = 1000):
        self.params = params
        self.utxos = utxos or {}
        self.slot = slot
        self.submitted: List[bytes] = []
        self.included: Dict[str, Dict[str, Any]] = {}
        self.closed = False
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        return self.params
    
    async def get_tip(self) -> int:
        return self.slot
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        return list(self.utxos.get(address, []))
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        self.submitted.append(tx_signed)
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        if tx_hash not in self.included:
            raise TransactionNotFoundError(tx_hash)
        return self.included[tx_hash]
    
    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def params() -> ProtocolParameters:
    return ProtocolParameters(
        min_fee_constant=155381,
        min_fee_coefficient=44,
        max_tx_size=16384,
        min_utxo_value=1_000_000,
    )


@pytest.fixture
def wallets() -> List[Wallet]:
    return [Wallet.from_signing_key(bytes([i + 1]) * 32) for i in range(10)]


@pytest.fixture
def fake_provider(params):
    def make(utxos: Optional[Dict[str, List[Utxo]]] = None, slot: int = 1000) -> FakeProvider:
        return FakeProvider(params, utxos, slot)
    return make
