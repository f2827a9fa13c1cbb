"""
Terminal tags recorded on a closed trade.
"""

from __future__ import annotations

from enum import Enum


class CloseReason(str, Enum):
    """Why a trade reached the ``closed`` state."""

    CLOSED = "closed"
    SELL_FAILED = "sell_failed"
    SELL_SKIPPED = "sell_skipped"     # corte por pérdida máxima: se abandona la posición
    POOL_NOT_FOUND = "pool_not_found"
    EMPTY_BALANCE = "empty_balance"
