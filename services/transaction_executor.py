# services/transaction_executor.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from schemas.swap_schema import TransactionResult
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class TransactionExecutor(ABC):
    """
    Contrato común de todos los ejecutores: recibe la transacción ya firmada
    y el blockhash con el que se compiló, y devuelve si quedó confirmada.
    """

    # True si el backend fija la prioridad por su cuenta (no añadir compute budget)
    sets_priority_fee: bool = False

    @abstractmethod
    async def execute_and_confirm(
        self,
        transaction: VersionedTransaction,
        payer: Keypair,
        latest_blockhash: Any,
    ) -> TransactionResult:
        ...


class DefaultTransactionExecutor(TransactionExecutor):
    """Envía por el propio RPC y espera confirmación con el commitment configurado."""

    def __init__(self, client: AsyncClient, commitment: str = "confirmed") -> None:
        self.client = client
        self.commitment = Commitment(commitment)

    @log_function
    async def execute_and_confirm(
        self,
        transaction: VersionedTransaction,
        payer: Keypair,
        latest_blockhash: Any,
    ) -> TransactionResult:
        signature = await self._execute(transaction)
        return await self._confirm(signature, latest_blockhash)

    async def _execute(self, transaction: VersionedTransaction) -> Signature:
        logger.debug("Ejecutando transacción...")
        resp = await self.client.send_raw_transaction(
            bytes(transaction),
            opts=TxOpts(skip_preflight=True, preflight_commitment=self.commitment),
        )
        return resp.value

    async def _confirm(self, signature: Signature, latest_blockhash: Any) -> TransactionResult:
        return await confirm_signature(self.client, signature, latest_blockhash, self.commitment)


async def confirm_signature(
    client: AsyncClient,
    signature: Signature,
    latest_blockhash: Any,
    commitment: Commitment,
) -> TransactionResult:
    """Espera la firma hasta el último bloque válido del blockhash usado."""
    resp = await client.confirm_transaction(
        signature,
        commitment=commitment,
        last_valid_block_height=latest_blockhash.last_valid_block_height,
    )
    status = resp.value[0] if resp.value else None
    err = getattr(status, "err", None) if status is not None else "sin estado"
    return TransactionResult(
        confirmed=status is not None and err is None,
        signature=str(signature),
        error=str(err) if err is not None else None,
    )
