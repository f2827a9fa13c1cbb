"""
Cache of discovered Raydium pools keyed by base mint.

Filled by the pool discovery side (outside this engine) and read by the sell
pipeline to find the pool to sell a held token into.
"""

from __future__ import annotations

from typing import Dict, Optional

from models.pool import PoolRecord, PoolState
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)


class PoolRepository:
    def __init__(self) -> None:
        self._pools: Dict[str, PoolRecord] = {}

    def save(self, pool_id: str, state: PoolState) -> None:
        if state.base_mint not in self._pools:
            logger.debug(f"[pools] cacheando pool {pool_id} para {state.base_mint}")
            self._pools[state.base_mint] = PoolRecord(id=pool_id, state=state)

    async def get(self, mint: str) -> Optional[PoolRecord]:
        return self._pools.get(mint)
