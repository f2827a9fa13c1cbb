# controllers/exit_signal_controller.py
from __future__ import annotations
import asyncio
from decimal import Decimal
from typing import Dict, Optional, Protocol

from models.pool import PoolKeys
from models.token import Token
from schemas.swap_schema import SwapQuote
from utils.log_config import logger_manager
from utils.polling import BoundedRounds, Sleep
from utils.token_amount import TokenAmount

logger = logger_manager.setup_logger(__name__)


class Quoter(Protocol):
    async def quote(self, pool_keys: PoolKeys, amount_in: TokenAmount, token_out: Token, slippage: Decimal) -> SwapQuote:
        ...


class ExitSignalController:
    """
    Señal de salida de una posición. Cada ronda cotiza cuánto quote se obtendría
    vendiendo lo que tenemos y decide:
      - True  -> vender (take profit, stop loss o rondas agotadas)
      - False -> NO vender: pérdida mayor que skip_selling_if_lost_more_than, se abandona
    El stop loss vigente de cada mint vive en `self.stop_loss` (sube con trailing).
    """

    def __init__(
        self,
        quoter: Quoter,
        quote_token: Token,
        take_profit_pct: Decimal,
        stop_loss_pct: Decimal,
        sell_slippage: Decimal,
        interval_ms: int,
        duration_ms: int,
        trailing_stop_loss: bool = False,
        skip_selling_if_lost_more_than: Decimal = Decimal(0),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.quoter = quoter
        self.quote_token = quote_token
        self.take_profit_pct = Decimal(take_profit_pct)
        self.stop_loss_pct = Decimal(stop_loss_pct)
        self.sell_slippage = Decimal(sell_slippage)
        self.interval_ms = interval_ms
        self.duration_ms = duration_ms
        self.trailing_stop_loss = trailing_stop_loss
        self.skip_selling_if_lost_more_than = Decimal(skip_selling_if_lost_more_than)
        self._sleep = sleep
        self.stop_loss: Dict[str, TokenAmount] = {}

    def watermark(self, mint: str) -> Optional[TokenAmount]:
        return self.stop_loss.get(mint)

    def clear(self, mint: str) -> None:
        self.stop_loss.pop(mint, None)

    async def should_sell(self, pool_keys: PoolKeys, amount_in: TokenAmount, entry_amount: TokenAmount) -> bool:
        rounds = BoundedRounds(self.interval_ms, self.duration_ms, self._sleep)
        if rounds.disabled:
            return True

        mint = pool_keys.base_mint
        take_profit = entry_amount + entry_amount.percent(self.take_profit_pct)
        stop_loss = self.stop_loss.get(mint)
        if stop_loss is None:
            stop_loss = entry_amount - entry_amount.percent(self.stop_loss_pct)
            self.stop_loss[mint] = stop_loss

        async for n in rounds:
            try:
                quote = await self.quoter.quote(pool_keys, amount_in, self.quote_token, self.sell_slippage)
            except Exception as e:
                logger.debug(f"[{mint}] fallo al consultar precio (ronda {n}/{rounds.rounds}): {e}")
                continue
            amount_out = quote.amount_out

            if self.trailing_stop_loss:
                trailing = amount_out - amount_out.percent(self.stop_loss_pct)
                if trailing > stop_loss:
                    logger.debug(f"[{mint}] trailing stop loss {stop_loss.to_fixed()} -> {trailing.to_fixed()}")
                    self.stop_loss[mint] = trailing
                    stop_loss = trailing

            if self.skip_selling_if_lost_more_than > 0:
                stop_selling = entry_amount.percent(self.skip_selling_if_lost_more_than)
                if amount_out < stop_selling:
                    logger.debug(
                        f"[{mint}] caída mayor del {self.skip_selling_if_lost_more_than}%, se cancela la venta. "
                        f"Inicial: {entry_amount.to_fixed()} | Actual: {amount_out.to_fixed()}"
                    )
                    self.clear(mint)
                    return False

            logger.debug(
                f"[{mint}] Take profit: {take_profit.to_fixed()} | Stop loss: {stop_loss.to_fixed()} | "
                f"Actual: {amount_out.to_fixed()}"
            )

            if amount_out < stop_loss or amount_out > take_profit:
                self.clear(mint)
                return True

        # rondas agotadas: no se mantiene la posición indefinidamente
        return True
