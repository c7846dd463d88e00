"""Cardano network identifiers and address prefixes."""

from enum import IntEnum

from pycardano import Network as PyCardanoNetwork

MAINNET_PROTOCOL_MAGIC = 764824073
TESTNET_PROTOCOL_MAGIC = 1097911063  # legacy public testnet
PREPROD_PROTOCOL_MAGIC = 1
PREVIEW_PROTOCOL_MAGIC = 2


class Network(IntEnum):
    """Network id as stored in the low nibble of an address header."""
    TESTNET = 0
    MAINNET = 1

    def get_prefix(self) -> str:
        return "addr" if self is Network.MAINNET else "addr_test"

    def get_stake_prefix(self) -> str:
        return "stake" if self is Network.MAINNET else "stake_test"

    @property
    def is_mainnet(self) -> bool:
        return self is Network.MAINNET

    def to_pycardano(self) -> PyCardanoNetwork:
        return PyCardanoNetwork.MAINNET if self is Network.MAINNET else PyCardanoNetwork.TESTNET


def network_from_magic(magic: int) -> Network:
    """Mainnet is selected by its magic or by 0 (cardano-cli --mainnet), anything else is a testnet."""
    if magic in (0, MAINNET_PROTOCOL_MAGIC):
        return Network.MAINNET
    return Network.TESTNET
