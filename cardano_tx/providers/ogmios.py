"""Ogmios adapter implementing the TxProvider protocol."""

import logging
from typing import Any, Dict, List

from cardano_tx.blockchain import OgmiosClient
from cardano_tx.errors import ProviderError, TransactionNotFoundError
from cardano_tx.types import ProtocolParameters, Utxo

logger = logging.getLogger(__name__)


def _lovelace(value: Any) -> int:
    """Ogmios v6 wraps ada amounts as {"ada": {"lovelace": n}}."""
    if isinstance(value, dict):
        return int(value.get("ada", {}).get("lovelace", 0))
    return int(value or 0)


class OgmiosTxProvider:
    """
    Wraps OgmiosClient to provide the TxProvider interface.
    
    Ogmios has no transaction lookup, so inclusion is detected by querying
    the first output of the transaction. This only works while that output
    is unspent.
    """
    
    def __init__(self, ogmios: OgmiosClient):
        self.ogmios = ogmios
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        return self._convert_parameters(await self.ogmios.get_protocol_parameters())
    
    async def get_tip(self) -> int:
        return (await self.ogmios.get_chain_tip()).slot
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        return self._convert(await self.ogmios.get_utxos_by_address(address))
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        tx_id = await self.ogmios.submit_transaction(tx_signed.hex())
        logger.info(f"Submitted transaction {tx_id}")
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        raw = await self.ogmios.get_utxos_by_output_references([{"transaction": {"id": tx_hash}, "index": 0}])
        if not raw:
            raise TransactionNotFoundError(f"transaction {tx_hash} not found")
        return {"hash": tx_hash, "outputs": [{"index": u.index, "amount": u.amount} for u in self._convert(raw)]}
    
    async def close(self) -> None:
        await self.ogmios.disconnect()
    
    @staticmethod
    def _convert_parameters(raw: Dict[str, Any]) -> ProtocolParameters:
        try:
            return ProtocolParameters(
                min_fee_constant=_lovelace(raw["minFeeConstant"]),
                min_fee_coefficient=int(raw["minFeeCoefficient"]),
                max_tx_size=int(raw["maxTransactionSize"]["bytes"]),
                coins_per_utxo_byte=raw.get("minUtxoDepositCoefficient"),
                raw=raw,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"unexpected protocol parameters from Ogmios: {e}") from e
    
    @staticmethod
    def _convert(ogmios_utxos: List[dict]) -> List[Utxo]:
        """Convert Ogmios UTxO format to Utxo."""
        return [Utxo(
            hash=u.get("transaction", {}).get("id", ""),
            index=u.get("index", 0),
            amount=_lovelace(u.get("value", {})),
        ) for u in ogmios_utxos]
