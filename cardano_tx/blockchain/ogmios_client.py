"""Ogmios WebSocket client for Cardano blockchain access."""

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import WebSocketException
from websockets.protocol import State

from cardano_tx.errors import ProviderError, ProviderTimeoutError, SubmissionError

logger = logging.getLogger(__name__)


@dataclass
class ChainTip:
    slot: int
    block_hash: str
    block_height: Optional[int] = None


class OgmiosError(ProviderError):
    """Base exception for Ogmios errors."""

class OgmiosConnectionError(OgmiosError):
    """Connection-related errors."""

class OgmiosQueryError(OgmiosError):
    """Query-related errors."""

class OgmiosTimeoutError(OgmiosQueryError, ProviderTimeoutError):
    """Request did not get a response in time."""


class OgmiosClient:
    """Async client for the Ogmios v6 JSON-RPC WebSocket API."""
    
    def __init__(self, url: str = "ws://localhost:1337", username: Optional[str] = None, password: Optional[str] = None,
                 timeout: float = 30.0):
        self.url = url
        self.username = username
        self.password = password
        self.timeout = timeout
        self._ws: Optional[ClientConnection] = None
        self._request_id = 0
        self._lock = asyncio.Lock()
    
    def _get_headers(self) -> Dict[str, str]:
        if self.username and self.password:
            encoded = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
            return {"Authorization": f"Basic {encoded}"}
        return {}
    
    async def connect(self) -> bool:
        """Connect to Ogmios. Returns True on success."""
        try:
            headers = self._get_headers()
            # Large UTxO sets come back in a single message (50MB)
            connect_kwargs = {"max_size": 50 * 1024 * 1024}
            if headers:
                connect_kwargs["additional_headers"] = headers
            self._ws = await ws_connect(self.url, **connect_kwargs)
            logger.info(f"Connected to Ogmios at {self.url}")
            return True
        except ConnectionRefusedError:
            logger.error(f"Connection refused. Is Ogmios running at {self.url}?")
            return False
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            logger.error(f"Failed to connect to Ogmios: {e}")
            return False
    
    async def disconnect(self):
        if self._ws:
            await self._ws.close()
            self._ws = None
            logger.info("Disconnected from Ogmios")
    
    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN
    
    async def __aenter__(self):
        if not await self.connect():
            raise OgmiosConnectionError(f"Failed to connect to {self.url}")
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
    
    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id
    
    async def _send_request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Send JSON-RPC request and wait for response."""
        if not self.is_connected and not await self.connect():
            raise OgmiosConnectionError(f"Not connected to Ogmios at {self.url}")
        
        request = {"jsonrpc": "2.0", "method": method, "id": self._next_request_id()}
        if params:
            request["params"] = params
        
        # One request in flight per connection keeps responses paired with requests
        async with self._lock:
            try:
                await self._ws.send(json.dumps(request))
                response = await self._receive(request["id"])
            except asyncio.TimeoutError:
                raise OgmiosTimeoutError(f"Request timed out after {self.timeout}s: {method}")
            except (OSError, WebSocketException, ValueError) as e:
                raise OgmiosQueryError(f"Request failed: {e}") from e
        
        if "result" in response:
            return response["result"]
        if "error" in response:
            err = response["error"]
            raise OgmiosQueryError(f"Ogmios error: {err.get('message', err) if isinstance(err, dict) else err}")
        return response
    
    async def _receive(self, request_id: int) -> Dict[str, Any]:
        """Read until the reply to `request_id` arrives; late replies to timed out requests are dropped."""
        deadline = asyncio.get_running_loop().time() + self.timeout
        while True:
            remaining = deadline - asyncio.get_running_loop().time()
            if remaining <= 0:
                raise asyncio.TimeoutError()
            response = json.loads(await asyncio.wait_for(self._ws.recv(), timeout=remaining))
            if isinstance(response, dict) and response.get("id") == request_id:
                return response
            logger.debug(f"Dropped stale Ogmios reply {response.get('id') if isinstance(response, dict) else response}")
    
    async def get_chain_tip(self) -> ChainTip:
        """Query current chain tip."""
        for method in ["queryLedgerState/tip", "queryNetwork/tip"]:
            try:
                r = await self._send_request(method)
                if isinstance(r, dict):
                    return ChainTip(
                        slot=r.get("slot", r.get("slotNo", 0)),
                        block_hash=r.get("id", r.get("hash", r.get("headerHash", ""))),
                        block_height=r.get("height", r.get("blockNo")),
                    )
            except OgmiosTimeoutError:
                raise
            except OgmiosQueryError:
                continue
        raise OgmiosQueryError("Failed to query chain tip")
    
    async def get_protocol_parameters(self) -> Dict[str, Any]:
        return await self._send_request("queryLedgerState/protocolParameters")
    
    async def get_utxos_by_address(self, address: str) -> List[Dict[str, Any]]:
        result = await self._send_request("queryLedgerState/utxo", {"addresses": [address]})
        return result if isinstance(result, list) else []
    
    async def get_utxos_by_output_references(self, output_refs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        result = await self._send_request("queryLedgerState/utxo", {"outputReferences": output_refs})
        return result if isinstance(result, list) else []
    
    async def submit_transaction(self, tx_cbor: str) -> str:
        try:
            result = await self._send_request("submitTransaction", {"transaction": {"cbor": tx_cbor}})
        except (OgmiosTimeoutError, OgmiosConnectionError):
            raise
        except OgmiosQueryError as e:
            raise SubmissionError(str(e)) from e
        return result.get("transaction", {}).get("id", "")
    
    async def health_check(self) -> Dict[str, Any]:
        try:
            tip = await self.get_chain_tip()
            return {"status": "healthy", "connected": True, "chain_tip": {"slot": tip.slot, "block_hash": tip.block_hash, "block_height": tip.block_height}}
        except OgmiosError as e:
            return {"status": "unhealthy", "connected": False, "error": str(e)}
