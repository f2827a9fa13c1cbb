# orchestrators/sniper_orchestrator.py
from __future__ import annotations
import asyncio
from decimal import Decimal
from typing import Optional, Set

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from controllers.admission_controller import AdmissionController
from controllers.autobuy_controller import AutoBuyController
from controllers.autosell_controller import AutoSellController
from controllers.exit_signal_controller import ExitSignalController
from controllers.qualification_controller import QualificationController
from models.bot_config import BotConfig
from models.pool import MarketState, PoolState
from repositories.journal_repository import JournalRepository
from repositories.market_repository import MarketRepository
from repositories.pool_repository import PoolRepository
from repositories.snipe_list_repository import SnipeListRepository
from repositories.trade_repository import TradeRepository
from services.jito_executor import JitoTransactionExecutor
from services.pool_filters import PoolFilters
from services.quote_service import QuoteBuilder, load_quote_builder
from services.swap_service import SwapService
from services.transaction_executor import DefaultTransactionExecutor, TransactionExecutor
from services.wallet_service import WalletService
from services.warp_executor import WarpTransactionExecutor
from utils.log_config import logger_manager, log_function
from utils.polling import Sleep
from utils.solana_utils import LAMPORTS_PER_SOL, load_keypair

logger = logger_manager.setup_logger(__name__)


def build_executor(config: BotConfig, client: AsyncClient) -> TransactionExecutor:
    if config.transaction_executor == "warp":
        return WarpTransactionExecutor(config.custom_fee, config.warp_endpoint)
    if config.transaction_executor == "jito":
        return JitoTransactionExecutor(config.custom_fee, config.jito_endpoints, client, config.commitment_level)
    return DefaultTransactionExecutor(client, config.commitment_level)


def transaction_fee(config: BotConfig, executor: TransactionExecutor) -> Decimal:
    """Coste estimado (en SOL) de cada transacción enviada."""
    if executor.sets_priority_fee:
        return Decimal(config.custom_fee)
    micro_lamports = Decimal(config.compute_unit_price) * Decimal(config.compute_unit_limit)
    return micro_lamports / Decimal(1_000_000) / Decimal(LAMPORTS_PER_SOL)


class SniperOrchestrator:
    """
    Motor de decisión y ejecución:
      - pool nuevo      -> pipeline de compra (AutoBuyController)
      - token en cartera -> pipeline de venta (AutoSellController), si AUTO_SELL
    Los mapas compartidos (trades activos, stop loss, permisos) viven aquí, en una
    única instancia. Cada evento se despacha como tarea independiente.
    """

    def __init__(
        self,
        config: BotConfig,
        client: Optional[AsyncClient] = None,
        wallet: Optional[Keypair] = None,
        executor: Optional[TransactionExecutor] = None,
        quote_builder: Optional[QuoteBuilder] = None,
        swap_service: Optional[SwapService] = None,
        wallet_service: Optional[WalletService] = None,
        filters: Optional[PoolFilters] = None,
        journal: Optional[JournalRepository] = None,
        snipe_list: Optional[SnipeListRepository] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.client = client or AsyncClient(config.rpc_endpoint, commitment=Commitment(config.commitment_level))
        self.wallet = wallet or load_keypair(config.private_key)
        self.quote_ata = get_associated_token_address(self.wallet.pubkey(), Pubkey.from_string(config.quote_token.mint))

        self.executor = executor or (swap_service.executor if swap_service else build_executor(config, self.client))
        self.tx_fee = transaction_fee(config, self.executor)
        if swap_service is None:
            builder = quote_builder or load_quote_builder(config.quote_builder, self.client)
            swap_service = SwapService(
                self.client,
                self.wallet,
                builder,
                self.executor,
                config.compute_unit_limit,
                config.compute_unit_price,
            )
        self.swap_service = swap_service

        # estado compartido
        self.trades = TradeRepository()
        self.pools = PoolRepository()
        self.markets = MarketRepository(self.client)
        self.journal = journal or JournalRepository(config.log_filename)
        self.snipe_list = snipe_list or (SnipeListRepository() if config.use_snipe_list else None)
        self.wallet_service = wallet_service or WalletService(self.client, self.wallet.pubkey(), self.quote_ata)

        self.admission = AdmissionController(config.max_tokens_at_the_time)
        self.filters = filters or PoolFilters(
            self.client,
            config.quote_token,
            config.min_pool_size_tokens,
            config.max_pool_size_tokens,
            check_burned=config.check_if_burned,
            check_renounced=config.check_if_mint_is_renounced,
            check_freezable=config.check_if_freezable,
        )
        self.qualification = QualificationController(
            self.filters,
            config.filter_check_interval,
            config.filter_check_duration,
            config.consecutive_filter_matches,
            sleep=sleep,
        )
        self.exit_signal = ExitSignalController(
            self.swap_service,
            config.quote_token,
            config.take_profit,
            config.stop_loss,
            config.sell_slippage,
            config.price_check_interval,
            config.price_check_duration,
            trailing_stop_loss=config.trailing_stop_loss,
            skip_selling_if_lost_more_than=config.skip_selling_if_lost_more_than,
            sleep=sleep,
        )
        self.autobuy = AutoBuyController(
            config,
            self.admission,
            self.qualification,
            self.swap_service,
            self.trades,
            self.markets,
            self.quote_ata,
            self.tx_fee,
            snipe_list=self.snipe_list,
            sleep=sleep,
        )
        self.autosell = AutoSellController(
            config,
            self.admission,
            self.exit_signal,
            self.swap_service,
            self.trades,
            self.pools,
            self.markets,
            self.journal,
            self.wallet_service,
            self.quote_ata,
            self.tx_fee,
            sleep=sleep,
        )

        self._tasks: Set[asyncio.Task] = set()
        self._stopped = False

    # ---------- arranque ----------
    async def validate(self) -> bool:
        """La cuenta del quote token debe existir antes de operar."""
        if not await self.wallet_service.quote_account_exists():
            logger.error(
                f"No existe la cuenta de {self.config.quote_token.symbol} ({self.quote_ata}) "
                f"para la cartera {self.wallet.pubkey()}"
            )
            return False
        return True

    @log_function
    async def init(self) -> None:
        await self.wallet_service.update_balance()
        last_id = self.journal.load()
        if self.snipe_list is not None:
            self.snipe_list.load()
        logger.info(
            f"Cartera {self.wallet.pubkey()} | balance={self.wallet_service.balance} | "
            f"ejecutor={self.config.transaction_executor} | último trade #{last_id}"
        )

    def start(self) -> None:
        if self.snipe_list is not None:
            self._spawn(self.snipe_list.run_refresh(self.config.snipe_list_refresh_interval))
        logger.info("SniperOrchestrator iniciado.")

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        tasks = list(self._tasks)
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for trade in self.trades.list_active():
            logger.warning(f"[{trade.mint}] Posición sin cerrar al apagar ({trade.status.value})")
        await self.client.close()
        logger.info(f"SniperOrchestrator detenido ({len(tasks)} tareas canceladas).")

    # ---------- pipelines ----------
    async def buy(self, account_id: str, pool_state: PoolState) -> None:
        await self.autobuy.buy(account_id, pool_state)

    async def sell(self, account_id: str, mint: str, amount_raw: int) -> None:
        if not self.config.auto_sell:
            return
        await self.autosell.sell(account_id, mint, amount_raw)

    # ---------- eventos ----------
    def save_market(self, market_id: str, state: MarketState) -> None:
        self.markets.save(market_id, state)

    def submit_pool(self, account_id: str, pool_state: PoolState) -> Optional[asyncio.Task]:
        """Pool nuevo detectado: se cachea y se lanza la compra."""
        self.pools.save(account_id, pool_state)
        return self._spawn(self.buy(account_id, pool_state))

    def submit_holding(self, account_id: str, mint: str, amount_raw: int) -> Optional[asyncio.Task]:
        """Cambio en una cuenta de token de la cartera: se lanza la venta."""
        if not self.config.auto_sell:
            return None
        if mint == self.config.quote_token.mint:
            return None
        return self._spawn(self.sell(account_id, mint, amount_raw))

    def _spawn(self, coro) -> Optional[asyncio.Task]:
        if self._stopped:
            coro.close()
            return None
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Tarea terminada con error no controlado: {exc}")

