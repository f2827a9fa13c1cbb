# controllers/autosell_controller.py
from __future__ import annotations
import asyncio
from decimal import Decimal
from typing import Optional

from solders.pubkey import Pubkey

from controllers.admission_controller import AdmissionController
from controllers.exit_signal_controller import ExitSignalController
from enums.close_reason import CloseReason
from enums.swap_direction import SwapDirection
from models.bot_config import BotConfig
from models.pool import PoolKeys
from models.token import Token
from models.trade import Trade
from repositories.journal_repository import JournalRepository
from repositories.market_repository import MarketRepository
from repositories.pool_repository import PoolRepository
from repositories.trade_repository import TradeRepository
from services.swap_service import SwapService
from services.wallet_service import WalletService
from utils.log_config import logger_manager
from utils.polling import Sleep, sleep_ms
from utils.solana_utils import create_pool_keys, tx_url
from utils.token_amount import TokenAmount

logger = logger_manager.setup_logger(__name__)


class AutoSellController:
    """
    Venta token -> quote de una posición en cartera:
      - cuenta como venta en curso para la admisión mientras dura
      - espera la señal de salida (TP / SL / trailing / corte por pérdida máxima)
      - hasta max_sell_retries swaps; cierra la cuenta del token al vender
      - SIEMPRE: refresca balance, anota el trade en el diario y lo saca de activos
    """

    def __init__(
        self,
        config: BotConfig,
        admission: AdmissionController,
        exit_signal: ExitSignalController,
        swap_service: SwapService,
        trades: TradeRepository,
        pools: PoolRepository,
        markets: MarketRepository,
        journal: JournalRepository,
        wallet: WalletService,
        quote_ata: Pubkey,
        tx_fee: Decimal,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.admission = admission
        self.exit_signal = exit_signal
        self.swap_service = swap_service
        self.trades = trades
        self.pools = pools
        self.markets = markets
        self.journal = journal
        self.wallet = wallet
        self.quote_ata = quote_ata
        self.tx_fee = tx_fee
        self._sleep = sleep

    def _entry_amount(self, trade: Optional[Trade]) -> TokenAmount:
        if trade is not None and trade.amount_in > 0:
            return TokenAmount.from_decimal(self.config.quote_token, trade.amount_in)
        return self.config.quote_amount_tokens

    def _close(self, trade: Optional[Trade], amount_out: Decimal, fee: Decimal, reason: CloseReason) -> None:
        if trade is None or trade.is_closed:
            return
        trade.close(amount_out, fee, reason)
        if reason in (CloseReason.CLOSED, CloseReason.SELL_FAILED):
            self.wallet.apply_profit(trade.profit)

    async def sell(self, account_id: str, mint: str, amount_raw: int) -> None:
        async with self.admission.selling():
            trade = self.trades.get(mint)
            if trade is None:
                logger.error(f"[{mint}] Trade no encontrado; se vende sin anotar en el diario")

            try:
                logger.debug(f"[{mint}] Procesando token en cartera...")
                pool = await self.pools.get(mint)
                if pool is None:
                    logger.debug(f"[{mint}] Pool del token no encontrado, no se puede vender")
                    self._close(trade, Decimal(0), Decimal(0), CloseReason.POOL_NOT_FOUND)
                    return

                token_in = Token(mint=pool.state.base_mint, decimals=pool.state.base_decimal)
                amount_in = TokenAmount(token_in, int(amount_raw))
                if amount_in.is_zero():
                    logger.info(f"[{mint}] Balance vacío, no se puede vender")
                    self._close(trade, Decimal(0), Decimal(0), CloseReason.EMPTY_BALANCE)
                    return

                if self.config.auto_sell_delay > 0:
                    logger.debug(f"[{mint}] Esperando {self.config.auto_sell_delay} ms antes de vender")
                    await sleep_ms(self.config.auto_sell_delay, self._sleep)

                market = await self.markets.get(pool.state.market_id)
                if market is None:
                    raise LookupError(f"mercado {pool.state.market_id} no encontrado")
                pool_keys = create_pool_keys(pool.id, pool.state, market)

                if trade is not None:
                    trade.start()

                sold = await self._send_sell(trade, pool_keys, Pubkey.from_string(account_id), token_in, amount_in)
                if sold is None:
                    # corte por pérdida máxima: se abandona la posición
                    self._close(trade, Decimal(0), Decimal(0), CloseReason.SELL_SKIPPED)
                elif not sold:
                    logger.error(f"[{mint}] Venta no confirmada tras {self.config.max_sell_retries} intentos")
                    self._close(trade, Decimal(0), Decimal(0), CloseReason.SELL_FAILED)
            except Exception as e:
                logger.error(f"[{mint}] Fallo al vender el token: {e}")
                self._close(trade, Decimal(0), Decimal(0), CloseReason.SELL_FAILED)
            finally:
                self.exit_signal.clear(mint)
                await self._finalize(mint, trade)

    async def _send_sell(
        self,
        trade: Optional[Trade],
        pool_keys: PoolKeys,
        token_account: Pubkey,
        token_in: Token,
        amount_in: TokenAmount,
    ) -> Optional[bool]:
        """True vendido, False reintentos agotados, None venta abandonada por la señal de salida."""
        mint = token_in.mint
        max_retries = self.config.max_sell_retries
        entry_amount = self._entry_amount(trade)

        for i in range(max_retries):
            try:
                if not await self.exit_signal.should_sell(pool_keys, amount_in, entry_amount):
                    return None

                logger.info(f"[{mint}] Enviando venta, intento {i + 1}/{max_retries}")
                result = await self.swap_service.swap(
                    pool_keys,
                    token_account,
                    self.quote_ata,
                    token_in,
                    self.config.quote_token,
                    amount_in,
                    self.config.sell_slippage,
                    SwapDirection.SELL,
                )
                if result.confirmed:
                    logger.info(f"[{mint}] Venta confirmada: {tx_url(result.signature or '')}")
                    self._close(
                        trade,
                        result.quote.amount_out.to_decimal(),
                        self.tx_fee + result.quote.fee.to_decimal(),
                        CloseReason.CLOSED,
                    )
                    return True

                logger.info(f"[{mint}] Error confirmando venta sig={result.signature} error={result.error}")
            except Exception as e:
                logger.debug(f"[{mint}] Error en intento de venta {i + 1}/{max_retries}: {e}")
        return False

    async def _finalize(self, mint: str, trade: Optional[Trade]) -> None:
        try:
            await self.wallet.update_balance()
        except Exception as e:
            logger.warning(f"No se pudo refrescar el balance: {e}")

        if trade is None:
            return
        try:
            trade_id = self.journal.append(trade, self.wallet.balance)
            logger.info(
                f"[{mint}] Trade #{trade_id} {trade.close_reason.value if trade.close_reason else trade.status.value} "
                f"profit={trade.profit} balance={self.wallet.balance}"
            )
        except (OSError, ValueError) as e:
            logger.warning(f"[{mint}] No se pudo escribir el trade en el diario: {e}")
        finally:
            if self.trades.get(mint) is trade:
                self.trades.remove(mint)
