"""Provider protocol: where protocol parameters, tip and UTxOs come from and where transactions go."""

from typing import Any, Dict, List, Protocol

from cardano_tx.types import ProtocolParameters, Utxo


class TxProvider(Protocol):
    """
    Interface for chain backends (Ogmios, Blockfrost, cardano-cli, ...).

    get_transaction returns inclusion metadata as a plain dict and raises
    TransactionNotFoundError while the transaction is not on chain.
    """
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        ...
    
    async def get_tip(self) -> int:
        """Current slot number."""
        ...
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        ...
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        ...
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        ...
    
    async def close(self) -> None:
        ...
