"""
Runtime configuration of the sniper.

Built by :func:`utils.config.load_bot_config` from the environment (``.env``)
and an optional ``config.yaml``. Durations are milliseconds, percentages are
plain numbers (``10`` means 10 %).
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from models.token import Token, WSOL
from utils.token_amount import TokenAmount


class BotConfig(BaseModel):
    # --- cartera / conexión ---
    private_key: str = ""
    rpc_endpoint: str = "https://api.mainnet-beta.solana.com"
    commitment_level: Literal["processed", "confirmed", "finalized"] = "confirmed"
    log_filename: str = "trades.jsonl"

    # --- ejecución de transacciones ---
    transaction_executor: Literal["default", "warp", "jito"] = "default"
    custom_fee: Decimal = Decimal("0.006")       # SOL pagados al relay (warp/jito)
    compute_unit_limit: int = 101337
    compute_unit_price: int = 421197             # micro-lamports
    warp_endpoint: str = "https://tx.warp.id/transaction/execute"
    jito_endpoints: List[str] = Field(default_factory=lambda: [
        "https://mainnet.block-engine.jito.wtf/api/v1/bundles",
        "https://amsterdam.mainnet.block-engine.jito.wtf/api/v1/bundles",
        "https://frankfurt.mainnet.block-engine.jito.wtf/api/v1/bundles",
        "https://ny.mainnet.block-engine.jito.wtf/api/v1/bundles",
        "https://tokyo.mainnet.block-engine.jito.wtf/api/v1/bundles",
    ])
    quote_builder: str = ""                      # "paquete.modulo:Clase"

    # --- compra ---
    quote_token: Token = WSOL
    quote_amount: Decimal = Decimal("0.01")
    auto_buy_delay: int = 0
    max_buy_retries: int = Field(default=10, ge=1)
    buy_slippage: Decimal = Decimal(20)

    # --- venta ---
    auto_sell: bool = True
    auto_sell_delay: int = 0
    max_sell_retries: int = Field(default=10, ge=1)
    sell_slippage: Decimal = Decimal(20)
    take_profit: Decimal = Decimal(40)
    stop_loss: Decimal = Decimal(20)
    trailing_stop_loss: bool = False
    skip_selling_if_lost_more_than: Decimal = Decimal(0)
    price_check_interval: int = Field(default=2000, ge=0)
    price_check_duration: int = Field(default=600000, ge=0)

    # --- concurrencia / filtros ---
    max_tokens_at_the_time: int = Field(default=1, ge=1)
    use_snipe_list: bool = False
    snipe_list_refresh_interval: int = 30000
    filter_check_interval: int = Field(default=2000, ge=0)
    filter_check_duration: int = Field(default=60000, ge=0)
    consecutive_filter_matches: int = Field(default=3, ge=1)
    min_pool_size: Decimal = Decimal(5)
    max_pool_size: Decimal = Decimal(50)

    # --- comprobaciones de seguridad (filtros previos a la compra) ---
    check_if_mint_is_renounced: bool = True
    check_if_freezable: bool = False
    check_if_burned: bool = True
    check_if_locked: bool = False
    check_honeypot: bool = False
    check_rugs: bool = False
    check_rugs_delay: int = 0

    @field_validator("quote_token", mode="before")
    @classmethod
    def _quote_by_name(cls, v):
        if isinstance(v, str):
            return Token.quote(v)
        return v

    @field_validator("jito_endpoints", mode="before")
    @classmethod
    def _split_endpoints(cls, v):
        if isinstance(v, str):
            return [u.strip().rstrip("/") for u in v.split(",") if u.strip()]
        return v

    @property
    def quote_amount_tokens(self) -> TokenAmount:
        return TokenAmount.from_decimal(self.quote_token, self.quote_amount)

    @property
    def min_pool_size_tokens(self) -> TokenAmount:
        return TokenAmount.from_decimal(self.quote_token, self.min_pool_size)

    @property
    def max_pool_size_tokens(self) -> TokenAmount:
        return TokenAmount.from_decimal(self.quote_token, self.max_pool_size)
