"""
Raydium AMM v4 pool metadata.

``PoolState`` is the subset of the on-chain liquidity state the engine needs,
``MarketState`` the minimal OpenBook market layout (bids, asks, event queue)
and ``PoolKeys`` the full, immutable set of accounts a swap instruction
references. All addresses are base58 strings; conversion to ``Pubkey``
happens at the edge, in the swap service.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PoolState(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_mint: str
    quote_mint: str
    lp_mint: str
    base_decimal: int
    quote_decimal: int
    market_id: str
    market_program_id: str
    open_orders: str
    target_orders: str
    base_vault: str
    quote_vault: str
    withdraw_queue: str
    lp_vault: str
    pool_open_time: int = 0


class MarketState(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_queue: str
    bids: str
    asks: str


class PoolRecord(BaseModel):
    """Entrada de la caché de pools: id de la cuenta del pool + su estado."""

    model_config = ConfigDict(frozen=True)

    id: str
    state: PoolState


class PoolKeys(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    base_mint: str
    quote_mint: str
    lp_mint: str
    base_decimals: int
    quote_decimals: int
    lp_decimals: int
    version: int
    program_id: str
    authority: str
    open_orders: str
    target_orders: str
    base_vault: str
    quote_vault: str
    withdraw_queue: str
    lp_vault: str
    market_version: int
    market_program_id: str
    market_id: str
    market_authority: str
    market_base_vault: str
    market_quote_vault: str
    market_bids: str
    market_asks: str
    market_event_queue: str
    lookup_table_account: str
