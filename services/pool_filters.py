# services/pool_filters.py
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import List

from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from models.pool import PoolKeys
from models.token import Token
from utils.log_config import logger_manager
from utils.token_amount import TokenAmount

logger = logger_manager.setup_logger(__name__)


@dataclass
class FilterResult:
    ok: bool
    message: str = ""


class PoolSizeFilter:
    """Liquidez del vault de quote dentro de [min, max] (0 desactiva cada extremo)."""

    def __init__(self, client: AsyncClient, quote_token: Token, min_size: TokenAmount, max_size: TokenAmount) -> None:
        self.client = client
        self.quote_token = quote_token
        self.min_size = min_size
        self.max_size = max_size

    async def execute(self, pool_keys: PoolKeys) -> FilterResult:
        resp = await self.client.get_token_account_balance(Pubkey.from_string(pool_keys.quote_vault))
        size = TokenAmount(self.quote_token, int(resp.value.amount))
        if not self.max_size.is_zero() and size > self.max_size:
            return FilterResult(False, f"PoolSize -> {size} > {self.max_size}")
        if not self.min_size.is_zero() and size < self.min_size:
            return FilterResult(False, f"PoolSize -> {size} < {self.min_size}")
        return FilterResult(True)


class BurnFilter:
    """Los LP tokens deben estar quemados (supply 0)."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def execute(self, pool_keys: PoolKeys) -> FilterResult:
        resp = await self.client.get_token_supply(Pubkey.from_string(pool_keys.lp_mint))
        burned = int(resp.value.amount) == 0
        return FilterResult(burned, "" if burned else "Burned -> LP no quemado")


class RenouncedFreezeFilter:
    """Mint sin autoridad de emisión (renounced) y/o sin autoridad de congelación."""

    def __init__(self, client: AsyncClient, check_renounced: bool, check_freezable: bool) -> None:
        self.client = client
        self.check_renounced = check_renounced
        self.check_freezable = check_freezable

    async def execute(self, pool_keys: PoolKeys) -> FilterResult:
        resp = await self.client.get_account_info_json_parsed(Pubkey.from_string(pool_keys.base_mint))
        if resp.value is None:
            return FilterResult(False, "RenouncedFreeze -> mint no encontrado")
        info = resp.value.data.parsed.get("info", {})
        reasons = []
        if self.check_renounced and info.get("mintAuthority") is not None:
            reasons.append("mint no renunciado")
        if self.check_freezable and info.get("freezeAuthority") is not None:
            reasons.append("mint congelable")
        return FilterResult(not reasons, "RenouncedFreeze -> " + ", ".join(reasons) if reasons else "")


class PoolFilters:
    """
    Evaluador de filtros de un solo disparo: True si el pool pasa todos los filtros activos.
    Puede lanzar excepciones de RPC; el bucle de cualificación las trata como 'no'.
    """

    def __init__(
        self,
        client: AsyncClient,
        quote_token: Token,
        min_pool_size: TokenAmount,
        max_pool_size: TokenAmount,
        check_burned: bool = True,
        check_renounced: bool = True,
        check_freezable: bool = False,
    ) -> None:
        self.filters: List[object] = []
        if check_burned:
            self.filters.append(BurnFilter(client))
        if check_renounced or check_freezable:
            self.filters.append(RenouncedFreezeFilter(client, check_renounced, check_freezable))
        if not min_pool_size.is_zero() or not max_pool_size.is_zero():
            self.filters.append(PoolSizeFilter(client, quote_token, min_pool_size, max_pool_size))
        self.quote_token = quote_token

    async def execute(self, pool_keys: PoolKeys) -> bool:
        if pool_keys.quote_mint != self.quote_token.mint:
            logger.debug(f"[filters] {pool_keys.base_mint}: quote {pool_keys.quote_mint} no es {self.quote_token.symbol}")
            return False
        if not self.filters:
            return True

        results: List[FilterResult] = await asyncio.gather(*(f.execute(pool_keys) for f in self.filters))
        if all(r.ok for r in results):
            return True
        for r in results:
            if not r.ok:
                logger.debug(f"[filters] {pool_keys.base_mint}: {r.message}")
        return False
