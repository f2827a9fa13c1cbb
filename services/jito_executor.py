# services/jito_executor.py
from __future__ import annotations
import asyncio
import random
from decimal import Decimal
from typing import Any, List

import base58
import requests
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from schemas.swap_schema import TransactionResult
from services.transaction_executor import TransactionExecutor, confirm_signature
from utils.log_config import logger_manager, log_function
from utils.solana_utils import LAMPORTS_PER_SOL

logger = logger_manager.setup_logger(__name__)

JITO_TIP_ACCOUNTS = [
    "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
    "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
    "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
    "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
    "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
    "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
    "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
    "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
]
REQUEST_TIMEOUT_SECS = 30


class JitoTransactionExecutor(TransactionExecutor):
    """
    Envía un bundle [propina, transacción] a todos los block engines a la vez.
    Basta con que uno lo acepte; la confirmación se espera por RPC.
    """

    sets_priority_fee = True

    def __init__(
        self,
        fee_sol: Decimal,
        endpoints: List[str],
        client: AsyncClient,
        commitment: str = "confirmed",
    ) -> None:
        self.fee_lamports = int(Decimal(fee_sol) * LAMPORTS_PER_SOL)
        self.endpoints = list(endpoints)
        self.client = client
        self.commitment = Commitment(commitment)

    def _tip_transaction(self, payer: Keypair, latest_blockhash: Any) -> VersionedTransaction:
        tip_account = Pubkey.from_string(random.choice(JITO_TIP_ACCOUNTS))
        logger.debug(f"Propina jito a {tip_account}")
        ix = transfer(TransferParams(
            from_pubkey=payer.pubkey(),
            to_pubkey=tip_account,
            lamports=self.fee_lamports,
        ))
        message = MessageV0.try_compile(payer.pubkey(), [ix], [], latest_blockhash.blockhash)
        return VersionedTransaction(message, [payer])

    def _post_bundle(self, endpoint: str, payload: dict) -> bool:
        r = requests.post(endpoint, json=payload, timeout=REQUEST_TIMEOUT_SECS)
        r.raise_for_status()
        return "error" not in (r.json() or {})

    @log_function
    async def execute_and_confirm(
        self,
        transaction: VersionedTransaction,
        payer: Keypair,
        latest_blockhash: Any,
    ) -> TransactionResult:
        logger.debug("Enviando bundle a jito...")
        tip_tx = self._tip_transaction(payer, latest_blockhash)
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "sendBundle",
            "params": [[
                base58.b58encode(bytes(tip_tx)).decode(),
                base58.b58encode(bytes(transaction)).decode(),
            ]],
        }
        results = await asyncio.gather(
            *(asyncio.to_thread(self._post_bundle, url, payload) for url in self.endpoints),
            return_exceptions=True,
        )
        for url, res in zip(self.endpoints, results):
            if isinstance(res, Exception):
                logger.debug(f"[jito] {url} rechazó el bundle: {res}")

        signature = transaction.signatures[0]
        if not any(res is True for res in results):
            return TransactionResult(confirmed=False, signature=str(signature), error="Ningún block engine aceptó el bundle")

        logger.debug(f"[jito] bundle aceptado; confirmando {signature}")
        return await confirm_signature(self.client, signature, latest_blockhash, self.commitment)
