"""
Represents the lifecycle of one position in one token.

A ``Trade`` is created by the buy pipeline when an attempt starts, opened
when the buy transaction is confirmed and closed by the sell pipeline. Once
closed it is stamped with a journal id and the wallet balance and written as
one JSON line by :class:`repositories.journal_repository.JournalRepository`.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from enums.close_reason import CloseReason
from enums.trade_status import TradeStatus
from utils.exceptions import TradeStateError


class Trade(BaseModel):
    mint: str
    status: TradeStatus = TradeStatus.IDLE
    amount_in: Decimal = Decimal(0)
    fee_in: Decimal = Decimal(0)
    amount_out: Decimal = Decimal(0)
    fee_out: Decimal = Decimal(0)
    profit: Decimal = Decimal(0)
    close_reason: Optional[CloseReason] = None
    started_at: Optional[int] = None
    opened_at: Optional[int] = None
    closed_at: Optional[int] = None
    # se rellenan al escribir en el diario
    id: Optional[int] = None
    balance: Optional[Decimal] = None

    def start(self) -> None:
        """Marca el inicio de un intento (compra o venta). No reserva capital."""
        if self.status == TradeStatus.CLOSED:
            raise TradeStateError(f"Trade {self.mint} ya cerrado")
        self.status = TradeStatus.STARTED
        self.started_at = int(time.time())

    def open(self, amount_in: Decimal, fee: Decimal) -> None:
        if self.status != TradeStatus.STARTED:
            raise TradeStateError(f"Trade {self.mint}: open() desde {self.status.value}")
        self.amount_in = Decimal(amount_in)
        self.fee_in = Decimal(fee)
        self.status = TradeStatus.OPENED
        self.opened_at = int(time.time())

    def close(self, amount_out: Decimal, fee: Decimal, reason: CloseReason) -> None:
        if self.status == TradeStatus.CLOSED:
            raise TradeStateError(f"Trade {self.mint} ya cerrado ({self.close_reason})")
        self.amount_out = Decimal(amount_out)
        self.fee_out = Decimal(fee)
        self.profit = self.amount_out - self.amount_in - self.fee_in - self.fee_out
        self.close_reason = reason
        self.status = TradeStatus.CLOSED
        self.closed_at = int(time.time())

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    def to_journal_line(self) -> str:
        return self.model_dump_json()
