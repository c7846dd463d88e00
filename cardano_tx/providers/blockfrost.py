"""Blockfrost REST adapter implementing the TxProvider protocol."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from cardano_tx.errors import ProviderError, ProviderTimeoutError, SubmissionError, TransactionNotFoundError
from cardano_tx.types import ProtocolParameters, Utxo

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class BlockfrostTxProvider:
    """Blocking `requests` calls run in a worker thread."""
    
    def __init__(self, url: str, project_id: str, timeout: float = 10.0):
        self.url = url.rstrip("/")
        self.project_id = project_id
        self.timeout = timeout
    
    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        headers = {"project_id": self.project_id, **kwargs.pop("headers", {})}
        try:
            return requests.request(method, f"{self.url}{path}", headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise ProviderTimeoutError(f"Blockfrost request timed out: {path}") from e
        except requests.RequestException as e:
            raise ProviderError(f"Blockfrost request failed: {e}") from e
    
    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET request; None for 404."""
        resp = await asyncio.to_thread(self._request, "GET", path, params=params)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            raise ProviderError(f"Blockfrost status code {resp.status_code}: {resp.text}")
        return resp.json()
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        raw = await self._get("/epochs/latest/parameters")
        if raw is None:
            raise ProviderError("Blockfrost returned no protocol parameters")
        try:
            coins_per_utxo = raw.get("coins_per_utxo_size")
            return ProtocolParameters(
                min_fee_constant=int(raw["min_fee_b"]),
                min_fee_coefficient=int(raw["min_fee_a"]),
                max_tx_size=int(raw["max_tx_size"]),
                coins_per_utxo_byte=int(coins_per_utxo) if coins_per_utxo is not None else None,
                raw=raw,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"unexpected protocol parameters from Blockfrost: {e}") from e
    
    async def get_tip(self) -> int:
        block = await self._get("/blocks/latest")
        if not block or block.get("slot") is None:
            raise ProviderError("Blockfrost returned no tip")
        return int(block["slot"])
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        utxos = []
        page = 1
        while True:
            result = await self._get(f"/addresses/{address}/utxos", params={"page": page, "count": PAGE_SIZE})
            if not result:
                break
            utxos.extend(
                Utxo(
                    hash=u["tx_hash"],
                    index=int(u["output_index"]),
                    amount=sum(int(a["quantity"]) for a in u.get("amount", []) if a.get("unit") == "lovelace"),
                )
                for u in result
            )
            if len(result) < PAGE_SIZE:
                break
            page += 1
        return utxos
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        resp = await asyncio.to_thread(
            self._request, "POST", "/tx/submit", data=tx_signed, headers={"Content-Type": "application/cbor"},
        )
        if resp.status_code == 400:
            raise SubmissionError(f"Blockfrost rejected transaction: {resp.text}")
        if not resp.ok:
            raise ProviderError(f"Blockfrost status code {resp.status_code}: {resp.text}")
        logger.info(f"Submitted transaction {resp.text.strip()}")
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        tx = await self._get(f"/txs/{tx_hash}")
        if tx is None:
            raise TransactionNotFoundError(f"transaction {tx_hash} not found")
        return tx
    
    async def close(self) -> None:
        return None
