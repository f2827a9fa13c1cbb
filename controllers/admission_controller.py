# controllers/admission_controller.py
from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)


class AdmissionController:
    """
    Límite de posiciones simultáneas.
      - Cada compra admitida retiene un permiso del semáforo hasta que su pipeline termina.
      - Las ventas en curso no tienen permiso, pero cuentan: se espera que liberen hueco pronto
        y no se deben comprometer compras nuevas mientras tanto.
      - Sin cola: una compra rechazada se descarta.
    Check y adquisición ocurren sin await intermedio (bucle asyncio único).
    """

    def __init__(self, max_positions: int) -> None:
        if max_positions < 1:
            raise ValueError("max_positions debe ser >= 1")
        self.capacity = max_positions
        self._semaphore = asyncio.Semaphore(max_positions)
        self._permits_in_use = 0
        self.active_sells = 0

    @property
    def available_permits(self) -> int:
        return self.capacity - self._permits_in_use

    @property
    def in_flight(self) -> int:
        return self.capacity - self.available_permits + self.active_sells

    async def try_admit_buy(self) -> bool:
        in_flight = self.in_flight
        if self._semaphore.locked() or in_flight >= self.capacity:
            logger.debug(
                f"Compra descartada: máximo {self.capacity} tokens a la vez y "
                f"ahora mismo hay {in_flight} en proceso"
            )
            return False
        # no bloquea: el semáforo no está agotado
        await self._semaphore.acquire()
        self._permits_in_use += 1
        return True

    def release_buy(self) -> None:
        if self._permits_in_use <= 0:
            raise RuntimeError("release_buy() sin compra admitida")
        self._permits_in_use -= 1
        self._semaphore.release()

    def sell_started(self) -> None:
        self.active_sells += 1

    def sell_finished(self) -> None:
        self.active_sells = max(0, self.active_sells - 1)

    @asynccontextmanager
    async def selling(self) -> AsyncIterator[None]:
        self.sell_started()
        try:
            yield
        finally:
            self.sell_finished()
