# repositories/market_repository.py
from __future__ import annotations
from typing import Dict, Optional

from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from models.pool import MarketState
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)

# Offsets del layout de mercado OpenBook v3: event_queue, bids y asks son contiguos
_EVENT_QUEUE_OFFSET = 253
_MINIMAL_MARKET_LEN = 32 * 3

class MarketRepository:
    """
    Caché de mercados OpenBook por market_id.
    Si el mercado no está en caché se lee la cuenta on-chain y se guarda.
    """
    def __init__(self, client: Optional[AsyncClient] = None) -> None:
        self.client = client
        self._markets: Dict[str, MarketState] = {}

    def save(self, market_id: str, state: MarketState) -> None:
        self._markets[market_id] = state

    async def get(self, market_id: str) -> Optional[MarketState]:
        cached = self._markets.get(market_id)
        if cached is not None:
            return cached
        if self.client is None:
            return None
        state = await self._fetch(market_id)
        if state is not None:
            self.save(market_id, state)
        return state

    async def _fetch(self, market_id: str) -> Optional[MarketState]:
        logger.debug(f"[markets] leyendo mercado {market_id} on-chain")
        resp = await self.client.get_account_info(Pubkey.from_string(market_id))
        if resp.value is None:
            logger.warning(f"[markets] cuenta de mercado {market_id} no encontrada")
            return None
        data = bytes(resp.value.data)
        chunk = data[_EVENT_QUEUE_OFFSET:_EVENT_QUEUE_OFFSET + _MINIMAL_MARKET_LEN]
        if len(chunk) < _MINIMAL_MARKET_LEN:
            logger.warning(f"[markets] datos de mercado truncados para {market_id}")
            return None
        return MarketState(
            event_queue=str(Pubkey.from_bytes(chunk[0:32])),
            bids=str(Pubkey.from_bytes(chunk[32:64])),
            asks=str(Pubkey.from_bytes(chunk[64:96])),
        )
