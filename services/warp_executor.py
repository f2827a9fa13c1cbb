# services/warp_executor.py
from __future__ import annotations
import asyncio
from decimal import Decimal
from typing import Any

import base58
import requests
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from schemas.swap_schema import TransactionResult
from services.transaction_executor import TransactionExecutor
from utils.log_config import logger_manager, log_function
from utils.solana_utils import LAMPORTS_PER_SOL

logger = logger_manager.setup_logger(__name__)

WARP_FEE_WALLET = Pubkey.from_string("WARPzUMPnycu9eeCZ95rcAUxorqpBqHndfV3ZP5FSyS")
REQUEST_TIMEOUT_SECS = 100


class WarpTransactionExecutor(TransactionExecutor):
    """
    Relay privado: se envía la transacción junto con otra que paga la comisión
    del relay; el propio servicio espera la confirmación.
    """

    sets_priority_fee = True

    def __init__(self, fee_sol: Decimal, endpoint: str) -> None:
        self.fee_lamports = int(Decimal(fee_sol) * LAMPORTS_PER_SOL)
        self.endpoint = endpoint

    def _fee_transaction(self, payer: Keypair, latest_blockhash: Any) -> VersionedTransaction:
        ix = transfer(TransferParams(
            from_pubkey=payer.pubkey(),
            to_pubkey=WARP_FEE_WALLET,
            lamports=self.fee_lamports,
        ))
        message = MessageV0.try_compile(payer.pubkey(), [ix], [], latest_blockhash.blockhash)
        return VersionedTransaction(message, [payer])

    def _post(self, payload: dict) -> dict:
        r = requests.post(self.endpoint, json=payload, timeout=REQUEST_TIMEOUT_SECS)
        r.raise_for_status()
        return r.json() or {}

    @log_function
    async def execute_and_confirm(
        self,
        transaction: VersionedTransaction,
        payer: Keypair,
        latest_blockhash: Any,
    ) -> TransactionResult:
        logger.debug("Ejecutando transacción vía warp...")
        fee_tx = self._fee_transaction(payer, latest_blockhash)
        payload = {
            "transactions": [
                base58.b58encode(bytes(fee_tx)).decode(),
                base58.b58encode(bytes(transaction)).decode(),
            ],
            "latestBlockhash": {
                "blockhash": str(latest_blockhash.blockhash),
                "lastValidBlockHeight": latest_blockhash.last_valid_block_height,
            },
        }
        data = await asyncio.to_thread(self._post, payload)
        return TransactionResult(
            confirmed=bool(data.get("confirmed")),
            signature=data.get("signature"),
            error=data.get("error"),
        )
