# controllers/autobuy_controller.py
from __future__ import annotations
import asyncio
from decimal import Decimal
from typing import Optional

from solders.pubkey import Pubkey

from controllers.admission_controller import AdmissionController
from controllers.qualification_controller import QualificationController
from enums.swap_direction import SwapDirection
from enums.trade_status import TradeStatus
from models.bot_config import BotConfig
from models.pool import PoolKeys, PoolState
from models.token import Token
from models.trade import Trade
from repositories.market_repository import MarketRepository
from repositories.snipe_list_repository import SnipeListRepository
from repositories.trade_repository import TradeRepository
from schemas.swap_schema import SwapResult
from services.swap_service import SwapService
from utils.log_config import logger_manager
from utils.polling import Sleep, sleep_ms
from utils.solana_utils import create_pool_keys, tx_url

logger = logger_manager.setup_logger(__name__)


class AutoBuyController:
    """
    Flujo de compra de un pool recién detectado:
      snipe list -> retardo -> admisión -> mercado + ATA -> filtros -> Trade(started)
      -> hasta max_buy_retries swaps -> Trade(opened)
    Una compra que nunca se abre no deja rastro en el diario.
    El permiso de admisión se libera SIEMPRE.
    """

    def __init__(
        self,
        config: BotConfig,
        admission: AdmissionController,
        qualification: QualificationController,
        swap_service: SwapService,
        trades: TradeRepository,
        markets: MarketRepository,
        quote_ata: Pubkey,
        tx_fee: Decimal,
        snipe_list: Optional[SnipeListRepository] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.admission = admission
        self.qualification = qualification
        self.swap_service = swap_service
        self.trades = trades
        self.markets = markets
        self.quote_ata = quote_ata
        self.tx_fee = tx_fee
        self.snipe_list = snipe_list
        self._sleep = sleep

    async def _mint_ata(self, mint: str) -> Pubkey:
        return self.swap_service.associated_token_address(mint)

    async def buy(self, account_id: str, pool_state: PoolState) -> None:
        mint = pool_state.base_mint
        logger.debug(f"[{mint}] Procesando nuevo pool...")

        if self.config.use_snipe_list and not (self.snipe_list and self.snipe_list.is_in_list(mint)):
            logger.debug(f"[{mint}] Compra saltada: el token no está en la snipe list")
            return

        if self.config.auto_buy_delay > 0:
            logger.debug(f"[{mint}] Esperando {self.config.auto_buy_delay} ms antes de comprar")
            await sleep_ms(self.config.auto_buy_delay, self._sleep)

        if mint in self.trades:
            logger.debug(f"[{mint}] Compra saltada: ya hay un trade activo para este token")
            return

        if not await self.admission.try_admit_buy():
            return

        trade: Optional[Trade] = None
        try:
            market, mint_ata = await asyncio.gather(
                self.markets.get(pool_state.market_id),
                self._mint_ata(mint),
            )
            if market is None:
                logger.debug(f"[{mint}] Mercado {pool_state.market_id} no encontrado, no se compra")
                return
            pool_keys = create_pool_keys(account_id, pool_state, market)

            if not self.config.use_snipe_list:
                if not await self.qualification.filter_match(pool_keys):
                    logger.debug(f"[{mint}] Compra saltada: el pool no pasa los filtros")
                    return

            trade = Trade(mint=mint)
            trade.start()
            self.trades.add(trade)

            if not await self._send_buy(trade, pool_keys, mint_ata):
                logger.info(f"[{mint}] Compra no confirmada tras {self.config.max_buy_retries} intentos")
                self._discard(trade)
        except Exception as e:
            logger.error(f"[{mint}] Fallo al comprar el token: {e}")
            if trade is not None:
                self._discard(trade)
        finally:
            self.admission.release_buy()

    async def _send_buy(self, trade: Trade, pool_keys: PoolKeys, mint_ata: Pubkey) -> bool:
        """True si la compra quedó confirmada (se haya abierto o no el trade)."""
        mint = trade.mint
        max_retries = self.config.max_buy_retries
        quote_amount = self.config.quote_amount_tokens
        token_out = Token(mint=pool_keys.base_mint, decimals=pool_keys.base_decimals)

        confirmed: Optional[SwapResult] = None
        for i in range(max_retries):
            try:
                logger.info(f"[{mint}] Enviando compra, intento {i + 1}/{max_retries}")
                result = await self.swap_service.swap(
                    pool_keys,
                    self.quote_ata,
                    mint_ata,
                    self.config.quote_token,
                    token_out,
                    quote_amount,
                    self.config.buy_slippage,
                    SwapDirection.BUY,
                )
                if result.confirmed:
                    confirmed = result
                    break
                logger.info(f"[{mint}] Error confirmando compra sig={result.signature} error={result.error}")
            except Exception as e:
                logger.debug(f"[{mint}] Error en intento de compra {i + 1}/{max_retries}: {e}")

        if confirmed is None:
            return False

        logger.info(f"[{mint}] Compra confirmada: {tx_url(confirmed.signature or '')}")
        if trade.status != TradeStatus.STARTED:
            # la venta ya cerró el trade mientras la compra estaba en vuelo
            logger.warning(f"[{mint}] Compra confirmada con el trade en estado {trade.status.value}; no se reabre")
            return True
        trade.open(quote_amount.to_decimal(), self.tx_fee + confirmed.quote.fee.to_decimal())
        return True

    def _discard(self, trade: Trade) -> None:
        if self.trades.get(trade.mint) is trade:
            self.trades.remove(trade.mint)
