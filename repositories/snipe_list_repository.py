# repositories/snipe_list_repository.py
from __future__ import annotations
import asyncio
import os
from pathlib import Path
from typing import Set

from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)

SNIPE_LIST_PATH = os.getenv("SNIPE_LIST_PATH", "snipe-list.txt")

class SnipeListRepository:
    """
    Lista de mints permitidos (una dirección por línea en snipe-list.txt).
    Se recarga periódicamente para poder editarla con el bot en marcha.
    """
    def __init__(self, path: str = SNIPE_LIST_PATH) -> None:
        self.path = Path(path)
        self._mints: Set[str] = set()

    def load(self) -> int:
        if not self.path.exists():
            logger.warning(f"[snipe-list] {self.path} no existe; lista vacía")
            self._mints = set()
            return 0
        with self.path.open("r", encoding="utf-8") as f:
            self._mints = {line.strip() for line in f if line.strip() and not line.startswith("#")}
        logger.debug(f"[snipe-list] {len(self._mints)} mints cargados")
        return len(self._mints)

    def is_in_list(self, mint: str) -> bool:
        return mint in self._mints

    async def run_refresh(self, interval_ms: int) -> None:
        """Bucle de recarga; se cancela al parar el orquestador."""
        while True:
            await asyncio.sleep(max(interval_ms, 1000) / 1000)
            try:
                self.load()
            except OSError as e:
                logger.error(f"[snipe-list] error recargando {self.path}: {e}")
