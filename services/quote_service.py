# services/quote_service.py
from __future__ import annotations
import importlib
from decimal import Decimal
from typing import Protocol

from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from models.pool import PoolKeys
from models.token import Token
from schemas.swap_schema import SwapInstructions, SwapQuote
from utils.log_config import logger_manager
from utils.token_amount import TokenAmount

logger = logger_manager.setup_logger(__name__)


class QuoteBuilder(Protocol):
    """
    Cálculo externo de la AMM: cotización y construcción de la instrucción de swap.
    El motor no reimplementa la fórmula de precios; solo la consume.
    """

    async def fetch_quote(
        self,
        pool_keys: PoolKeys,
        amount_in: TokenAmount,
        token_out: Token,
        slippage: Decimal,
    ) -> SwapQuote:
        ...

    def make_swap_instructions(
        self,
        pool_keys: PoolKeys,
        token_account_in: Pubkey,
        token_account_out: Pubkey,
        owner: Pubkey,
        amount_in: TokenAmount,
        min_amount_out: TokenAmount,
    ) -> SwapInstructions:
        ...


def load_quote_builder(path: str, client: AsyncClient) -> QuoteBuilder:
    """Instancia el builder a partir de ``"paquete.modulo:Clase"`` pasándole el cliente RPC."""
    if not path:
        raise ImportError("QUOTE_BUILDER no configurado: el motor necesita un constructor de cotizaciones Raydium ('paquete.modulo:Clase')")
    if ":" not in path:
        raise ImportError(f"QUOTE_BUILDER debe tener la forma 'paquete.modulo:Clase' (recibido {path!r})")
    module_name, _, attr = path.partition(":")
    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"{module_name} no define {attr}") from e
    logger.info(f"Quote builder: {path}")
    return factory(client)
