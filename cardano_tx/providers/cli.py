"""cardano-cli adapter implementing the TxProvider protocol over the node socket."""

import asyncio
import json
import logging
import os
import tempfile
from typing import Any, Dict, List

from cardano_tx.errors import ProviderError, SubmissionError, TransactionNotFoundError
from cardano_tx.types import ProtocolParameters, Utxo

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Transaction successfully submitted"
TX_ENVELOPE_TYPE = "Witnessed Tx ConwayEra"


class CliTxProvider:
    """
    Runs `cardano-cli` queries against a local node.

    A testnet magic of 0 selects mainnet.
    """
    
    def __init__(self, testnet_magic: int, socket_path: str, cardano_cli_binary: str = "cardano-cli"):
        self.testnet_magic = testnet_magic
        self.socket_path = socket_path
        self.cardano_cli_binary = cardano_cli_binary
    
    def _network_args(self) -> List[str]:
        if self.testnet_magic == 0:
            return ["--mainnet"]
        return ["--testnet-magic", str(self.testnet_magic)]
    
    async def _run(self, *args: str) -> str:
        command = [self.cardano_cli_binary, *args, "--socket-path", self.socket_path, *self._network_args()]
        try:
            process = await asyncio.create_subprocess_exec(
                *command, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProviderError(f"failed to run {self.cardano_cli_binary}: {e}") from e
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise ProviderError(f"{' '.join(args[:2])} failed: {stderr.decode().strip()}")
        return stdout.decode()
    
    async def _query_json(self, *args: str) -> Any:
        output = await self._run("query", *args)
        try:
            return json.loads(output)
        except ValueError as e:
            raise ProviderError(f"unexpected cardano-cli output: {e}") from e
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        return ProtocolParameters.from_dict(await self._query_json("protocol-parameters"))
    
    async def get_tip(self) -> int:
        tip = await self._query_json("tip")
        return int(tip["slot"])
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        return self._convert(await self._query_json("utxo", "--address", address, "--out-file", "/dev/stdout"))
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        envelope = {"type": TX_ENVELOPE_TYPE, "description": "Ledger Cddl Format", "cborHex": tx_signed.hex()}
        with tempfile.TemporaryDirectory(prefix="cardano-txs") as directory:
            tx_file = os.path.join(directory, "tx.send")
            with open(tx_file, "w") as f:
                json.dump(envelope, f)
            try:
                output = await self._run("transaction", "submit", "--tx-file", tx_file)
            except ProviderError as e:
                raise SubmissionError(str(e)) from e
        if SUBMITTED_MESSAGE not in output:
            raise SubmissionError(f"unknown error submitting tx: {output}")
        logger.info("Submitted transaction via cardano-cli")
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        raw = await self._query_json("utxo", "--tx-in", f"{tx_hash}#0", "--out-file", "/dev/stdout")
        if not raw:
            raise TransactionNotFoundError(f"transaction {tx_hash} not found")
        return {"hash": tx_hash, "outputs": [{"index": u.index, "amount": u.amount} for u in self._convert(raw)]}
    
    async def close(self) -> None:
        return None
    
    @staticmethod
    def _convert(raw: Dict[str, Any]) -> List[Utxo]:
        """Convert {"hash#index": {"value": {"lovelace": n}}} to Utxo."""
        utxos = []
        for tx_in, output in raw.items():
            tx_hash, _, index = tx_in.partition("#")
            value = output.get("value", {})
            amount = value.get("lovelace", 0) if isinstance(value, dict) else value
            utxos.append(Utxo(hash=tx_hash, index=int(index), amount=int(amount)))
        return utxos
