"""
In-memory map of the trades that are currently active, keyed by mint.

Mutations are plain dict operations with no ``await`` in between, which is
what keeps them consistent on a single asyncio loop. A multi-threaded port
must guard this map with a lock.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from models.trade import Trade


class TradeRepository:
    """Repository for the active (not yet journaled) trades."""

    def __init__(self) -> None:
        self._trades: Dict[str, Trade] = {}

    def get(self, mint: str) -> Optional[Trade]:
        return self._trades.get(mint)

    def add(self, trade: Trade) -> None:
        self._trades[trade.mint] = trade

    def remove(self, mint: str) -> Optional[Trade]:
        return self._trades.pop(mint, None)

    def __contains__(self, mint: str) -> bool:
        return mint in self._trades

    def __len__(self) -> int:
        return len(self._trades)

    def list_active(self) -> List[Trade]:
        return list(self._trades.values())
