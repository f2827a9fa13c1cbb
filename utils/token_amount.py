"""
Exact fixed-point token amounts.

Every monetary quantity the engine compares (entry size, exit quotes,
stop-loss and take-profit thresholds) is a raw integer scaled by the token's
decimals. Percentages are applied with :class:`~decimal.Decimal` and rounded
towards zero, so threshold comparisons never touch binary floats.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Union

from models.token import Token

Number = Union[int, str, Decimal]


@functools.total_ordering
@dataclass(frozen=True)
class TokenAmount:
    token: Token
    raw: int

    @classmethod
    def from_decimal(cls, token: Token, value: Number) -> "TokenAmount":
        """Build an amount from a human readable value (``"0.1"`` SOL → 100000000 lamports)."""
        scaled = (Decimal(str(value)) * (Decimal(10) ** token.decimals)).to_integral_value(rounding=ROUND_DOWN)
        return cls(token, int(scaled))

    @classmethod
    def zero(cls, token: Token) -> "TokenAmount":
        return cls(token, 0)

    def to_decimal(self) -> Decimal:
        return Decimal(self.raw) / (Decimal(10) ** self.token.decimals)

    def is_zero(self) -> bool:
        return self.raw == 0

    def percent(self, pct: Number) -> "TokenAmount":
        """``pct`` % de la cantidad, truncado hacia cero."""
        value = (Decimal(self.raw) * Decimal(str(pct)) / Decimal(100)).to_integral_value(rounding=ROUND_DOWN)
        return TokenAmount(self.token, int(value))

    def _check(self, other: "TokenAmount") -> None:
        if not isinstance(other, TokenAmount):
            raise TypeError(f"No se puede operar TokenAmount con {type(other).__name__}")
        if other.token.mint != self.token.mint:
            raise ValueError(f"Tokens distintos: {self.token.mint} vs {other.token.mint}")

    def __add__(self, other: "TokenAmount") -> "TokenAmount":
        self._check(other)
        return TokenAmount(self.token, self.raw + other.raw)

    def __sub__(self, other: "TokenAmount") -> "TokenAmount":
        self._check(other)
        return TokenAmount(self.token, self.raw - other.raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TokenAmount):
            return NotImplemented
        return self.token.mint == other.token.mint and self.raw == other.raw

    def __lt__(self, other: "TokenAmount") -> bool:
        self._check(other)
        return self.raw < other.raw

    def __hash__(self) -> int:
        return hash((self.token.mint, self.raw))

    def to_fixed(self) -> str:
        return f"{self.to_decimal():f}"

    def __str__(self) -> str:
        return f"{self.to_fixed()} {self.token.symbol}".strip()
