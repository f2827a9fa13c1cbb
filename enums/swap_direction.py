from __future__ import annotations

from enum import Enum


class SwapDirection(str, Enum):
    BUY = "buy"
    SELL = "sell"
