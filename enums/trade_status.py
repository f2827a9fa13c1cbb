"""
Enumeration for the lifecycle of a trade.

A trade starts ``idle`` when it is created, moves to ``started`` as soon as a
buy or sell attempt begins, ``opened`` once the buy is confirmed and
``closed`` when the position has been sold, written off or failed.
"""

from __future__ import annotations

from enum import Enum


class TradeStatus(str, Enum):
    """Possible states for a trade."""

    IDLE = "idle"
    STARTED = "started"
    OPENED = "opened"
    CLOSED = "closed"
