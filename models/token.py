"""
Domain model representing an SPL token.

A token is identified by its mint address; ``decimals`` is the scale used by
:class:`utils.token_amount.TokenAmount` to turn raw integer amounts into
human readable quantities.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    mint: str
    decimals: int
    symbol: str = ""

    @classmethod
    def quote(cls, name: str) -> "Token":
        """Return one of the supported quote tokens by name (``WSOL`` or ``USDC``)."""
        key = name.strip().upper()
        if key not in QUOTE_TOKENS:
            raise ValueError(f"Quote token no soportado: {name!r} (usa WSOL o USDC)")
        return QUOTE_TOKENS[key]


WSOL = Token(mint="So11111111111111111111111111111111111111112", decimals=9, symbol="WSOL")
USDC = Token(mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", decimals=6, symbol="USDC")

QUOTE_TOKENS = {"WSOL": WSOL, "USDC": USDC}
