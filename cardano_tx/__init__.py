"""
Cardano transaction construction and signing.

Structure:
    cardano_tx/
    ├── types.py          # Utxo, TxInput, TxOutput, ProtocolParameters
    ├── address/          # Networks, key hashes, addresses, multisig policy scripts
    ├── builder/          # CBOR encoding, fees, coin selection, TxBuilder, transfers
    ├── witness/          # Signing, verification and witness assembly
    ├── wallet.py         # Key pairs
    ├── blockchain/       # Ogmios client
    └── providers/        # Provider protocol, adapters, retry and polling

Usage:
    from cardano_tx import TxBuilder, TxInput, TxOutput, PolicyScript, Network
    from cardano_tx.witness import create_witness, verify_witness, assemble_witnesses
    from cardano_tx.providers import create_provider, wait_for_transaction
"""

from .types import Utxo, TxInput, TxOutput, TxInputs, ProtocolParameters, get_utxos_sum, get_outputs_sum
from .errors import (
    CardanoTxError,
    ValidationError,
    InsufficientFundsError,
    SignatureInvalidError,
    ProviderError,
    SubmissionError,
    RetryTimeoutError,
    OperationCancelledError,
)
from .address import Network, PolicyScript, get_key_hash
from .builder import TxBuilder, get_utxos_for_amount, get_tx_hash
from .wallet import Wallet

__all__ = [
    # Types
    "Utxo", "TxInput", "TxOutput", "TxInputs", "ProtocolParameters", "get_utxos_sum", "get_outputs_sum",
    # Errors
    "CardanoTxError", "ValidationError", "InsufficientFundsError", "SignatureInvalidError",
    "ProviderError", "SubmissionError", "RetryTimeoutError", "OperationCancelledError",
    # Building
    "Network", "PolicyScript", "get_key_hash", "TxBuilder", "get_utxos_for_amount", "get_tx_hash",
    "Wallet",
]
