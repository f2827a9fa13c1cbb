from __future__ import annotations
from decimal import Decimal
from typing import Any, List

from solana.rpc.async_api import AsyncClient
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    CloseAccountParams,
    close_account,
    create_idempotent_associated_token_account,
    get_associated_token_address,
)

from enums.swap_direction import SwapDirection
from models.pool import PoolKeys
from models.token import Token
from schemas.swap_schema import SwapQuote, SwapResult
from services.quote_service import QuoteBuilder
from services.transaction_executor import TransactionExecutor
from utils.log_config import logger_manager, log_function
from utils.token_amount import TokenAmount

logger = logger_manager.setup_logger(__name__)


class SwapService:
    """
    Adaptador de swap:
      - cotiza (amount_out / min_amount_out / fee) con el quote builder
      - monta la lista de instrucciones en orden:
          compute budget (salvo warp/jito) -> crear ATA (compra) -> swap -> cerrar ATA (venta)
      - compila v0 contra el último blockhash, firma y delega en el ejecutor
    """

    def __init__(
        self,
        client: AsyncClient,
        wallet: Keypair,
        quote_builder: QuoteBuilder,
        executor: TransactionExecutor,
        compute_unit_limit: int,
        compute_unit_price: int,
    ) -> None:
        self.client = client
        self.wallet = wallet
        self.quote_builder = quote_builder
        self.executor = executor
        self.compute_unit_limit = compute_unit_limit
        self.compute_unit_price = compute_unit_price

    # ---------- util ----------
    def associated_token_address(self, mint: str) -> Pubkey:
        return get_associated_token_address(self.wallet.pubkey(), Pubkey.from_string(mint))

    # ---------- quotes ----------
    async def quote(
        self,
        pool_keys: PoolKeys,
        amount_in: TokenAmount,
        token_out: Token,
        slippage: Decimal,
    ) -> SwapQuote:
        return await self.quote_builder.fetch_quote(pool_keys, amount_in, token_out, slippage)

    # ---------- builders ----------
    def build_instructions(
        self,
        swap_instructions: List[Any],
        token_account_in: Pubkey,
        token_account_out: Pubkey,
        token_out: Token,
        direction: SwapDirection,
    ) -> List[Any]:
        owner = self.wallet.pubkey()
        instructions: List[Any] = []
        if not self.executor.sets_priority_fee:
            instructions.append(set_compute_unit_price(self.compute_unit_price))
            instructions.append(set_compute_unit_limit(self.compute_unit_limit))
        if direction == SwapDirection.BUY:
            instructions.append(create_idempotent_associated_token_account(
                payer=owner,
                owner=owner,
                mint=Pubkey.from_string(token_out.mint),
            ))
        instructions.extend(swap_instructions)
        if direction == SwapDirection.SELL:
            # se liquida todo el token de entrada: se cierra su cuenta y se recupera la renta
            instructions.append(close_account(CloseAccountParams(
                program_id=TOKEN_PROGRAM_ID,
                account=token_account_in,
                dest=owner,
                owner=owner,
            )))
        return instructions

    # ---------- send ----------
    @log_function
    async def swap(
        self,
        pool_keys: PoolKeys,
        token_account_in: Pubkey,
        token_account_out: Pubkey,
        token_in: Token,
        token_out: Token,
        amount_in: TokenAmount,
        slippage: Decimal,
        direction: SwapDirection,
    ) -> SwapResult:
        quote = await self.quote(pool_keys, amount_in, token_out, slippage)
        blockhash_resp = await self.client.get_latest_blockhash()
        latest_blockhash = blockhash_resp.value

        inner = self.quote_builder.make_swap_instructions(
            pool_keys,
            token_account_in,
            token_account_out,
            self.wallet.pubkey(),
            amount_in,
            quote.min_amount_out,
        )
        instructions = self.build_instructions(
            inner.instructions, token_account_in, token_account_out, token_out, direction
        )
        message = MessageV0.try_compile(self.wallet.pubkey(), instructions, [], latest_blockhash.blockhash)
        transaction = VersionedTransaction(message, [self.wallet, *inner.signers])

        logger.debug(
            f"[swap:{direction.value}] {amount_in} {token_in.symbol or token_in.mint} -> "
            f">= {quote.min_amount_out} (esperado {quote.amount_out})"
        )
        result = await self.executor.execute_and_confirm(transaction, self.wallet, latest_blockhash)
        return SwapResult(quote=quote, transaction=result)
