# services/wallet_service.py
from __future__ import annotations
from decimal import Decimal

from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from utils.log_config import logger_manager, log_function
from utils.solana_utils import lamports_to_sol

logger = logger_manager.setup_logger(__name__)


class WalletService:
    """
    Saldo del proceso: SOL de la cartera + lamports de la cuenta del quote token.
    Solo sirve para anotar el diario; nunca interviene en decisiones de trading.
    """

    def __init__(self, client: AsyncClient, wallet: Pubkey, quote_ata: Pubkey) -> None:
        self.client = client
        self.wallet = wallet
        self.quote_ata = quote_ata
        self.balance = Decimal(0)

    @log_function
    async def update_balance(self) -> Decimal:
        sol = await self.client.get_balance(self.wallet)
        quote = await self.client.get_balance(self.quote_ata)
        self.balance = lamports_to_sol(sol.value) + lamports_to_sol(quote.value)
        logger.debug(f"Balance actualizado: {self.balance}")
        return self.balance

    def apply_profit(self, profit: Decimal) -> None:
        self.balance += Decimal(profit)

    async def quote_account_exists(self) -> bool:
        resp = await self.client.get_account_info(self.quote_ata)
        return resp.value is not None
