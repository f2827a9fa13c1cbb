# controllers/qualification_controller.py
from __future__ import annotations
import asyncio
from typing import Protocol

from models.pool import PoolKeys
from utils.log_config import logger_manager
from utils.polling import BoundedRounds, Sleep

logger = logger_manager.setup_logger(__name__)


class PoolFilter(Protocol):
    async def execute(self, pool_keys: PoolKeys) -> bool:
        ...


class QualificationController:
    """
    Cualificación del pool antes de comprar: evalúa los filtros cada `interval` ms
    hasta `duration` ms y exige `required_matches` aciertos CONSECUTIVOS.
    Agotar las rondas sin llegar al umbral => no se compra.
    """

    def __init__(
        self,
        filters: PoolFilter,
        interval_ms: int,
        duration_ms: int,
        required_matches: int,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.filters = filters
        self.interval_ms = interval_ms
        self.duration_ms = duration_ms
        self.required_matches = required_matches
        self._sleep = sleep

    async def filter_match(self, pool_keys: PoolKeys) -> bool:
        rounds = BoundedRounds(self.interval_ms, self.duration_ms, self._sleep)
        if rounds.disabled:
            return True

        mint = pool_keys.base_mint
        match_count = 0
        async for n in rounds:
            try:
                should_buy = await self.filters.execute(pool_keys)
            except Exception as e:
                # un fallo de evaluación cuenta como ronda negativa
                logger.debug(f"[{mint}] fallo evaluando filtros (ronda {n}/{rounds.rounds}): {e}")
                should_buy = False

            if should_buy:
                match_count += 1
                if match_count >= self.required_matches:
                    logger.debug(f"[{mint}] filtros OK {match_count}/{self.required_matches}")
                    return True
            else:
                match_count = 0

        logger.debug(f"[{mint}] {rounds.rounds} rondas sin {self.required_matches} aciertos seguidos")
        return False
