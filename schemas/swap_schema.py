"""
Data schema definitions for swaps.

``SwapQuote`` is what the quote builder returns for a given input amount,
``TransactionResult`` is the uniform answer of every transaction executor and
``SwapResult`` pairs both so the pipelines can book entry/exit amounts once a
transaction is confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from utils.token_amount import TokenAmount


@dataclass(frozen=True)
class SwapQuote:
    """Expected output of a swap under a slippage tolerance."""

    amount_in: TokenAmount
    amount_out: TokenAmount
    min_amount_out: TokenAmount
    fee: TokenAmount


@dataclass(frozen=True)
class SwapInstructions:
    """Instructions (and extra signers) produced by the quote builder."""

    instructions: List[Any]
    signers: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class TransactionResult:
    confirmed: bool
    signature: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class SwapResult:
    quote: SwapQuote
    transaction: TransactionResult

    @property
    def confirmed(self) -> bool:
        return self.transaction.confirmed

    @property
    def signature(self) -> Optional[str]:
        return self.transaction.signature

    @property
    def error(self) -> Optional[str]:
        return self.transaction.error
