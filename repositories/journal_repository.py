# repositories/journal_repository.py
from __future__ import annotations
import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from models.trade import Trade
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)

JOURNAL_PATH = os.getenv("LOG_FILENAME", "trades.jsonl")

class JournalRepository:
    """
    Diario append-only de trades completados (UNA línea JSON por trade).
    - id = secuencia creciente; se recupera al arrancar leyendo la última línea.
    - balance = saldo total de la cartera al cerrar el trade.
    - Cada append es una única escritura de línea.
    """
    def __init__(self, path: str = JOURNAL_PATH) -> None:
        self.path = Path(path)
        self.last_id = 0

    def load(self) -> int:
        """Lee el diario completo (lo crea si no existe) y devuelve el último id."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._terminate_last_line()
        records = self._read_all()
        ids = [int(r["id"]) for r in records if isinstance(r, dict) and r.get("id") is not None]
        self.last_id = max(ids, default=0)
        logger.debug(f"[journal] {len(records)} trades en {self.path}; último id={self.last_id}")
        return self.last_id

    def _terminate_last_line(self) -> None:
        """Cierra con salto de línea una última línea a medias para que el siguiente append no la pise."""
        with self.path.open("rb+") as f:
            f.seek(0, os.SEEK_END)
            if f.tell() == 0:
                return
            f.seek(-1, os.SEEK_END)
            if f.read(1) != b"\n":
                f.seek(0, os.SEEK_END)
                f.write(b"\n")

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id

    def append(self, trade: Trade, balance: Decimal) -> int:
        """Asigna id y balance al trade y lo escribe. Devuelve el id asignado."""
        trade.id = self.next_id()
        trade.balance = Decimal(balance)
        line = trade.to_journal_line() + "\n"
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)
        return trade.id

    # -------------------- CONSULTAS --------------------

    def _read_all(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        records: list[dict[str, Any]] = []
        with self.path.open("r", encoding="utf-8") as f:
            for n, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    # p.ej. la última línea quedó a medias si el proceso murió escribiendo
                    logger.warning(f"[journal] línea {n} ilegible en {self.path}, se ignora: {e}")
        return records

    def list_recent(self, limit: int = 200) -> list[dict[str, Any]]:
        return list(reversed(self._read_all()))[:limit]

    def get_by_id(self, trade_id: int) -> Optional[dict[str, Any]]:
        for r in self._read_all():
            if int(r.get("id") or 0) == trade_id:
                return r
        return None

    def summary(self) -> dict[str, Any]:
        """
        Resumen rápido: nº de trades cerrados, nº con beneficio,
        beneficio total y último balance anotado.
        """
        rows = self._read_all()
        closed = [r for r in rows if r.get("status") == "closed"]
        total = sum((Decimal(str(r.get("profit") or 0)) for r in closed), Decimal(0))
        wins = sum(1 for r in closed if Decimal(str(r.get("profit") or 0)) > 0)
        by_reason: dict[str, int] = {}
        for r in closed:
            reason = r.get("close_reason") or "-"
            by_reason[reason] = by_reason.get(reason, 0) + 1
        return {
            "trades": len(rows),
            "closed": len(closed),
            "wins": wins,
            "profit_total": total,
            "by_reason": by_reason,
            "last_balance": Decimal(str(rows[-1]["balance"])) if rows and rows[-1].get("balance") is not None else None,
        }
