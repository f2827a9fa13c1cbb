"""
Solana helpers: wallet loading, Raydium PDA derivation and pool keys.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from typing import Optional

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from models.pool import MarketState, PoolKeys, PoolState
from utils.exceptions import ConfigError

LAMPORTS_PER_SOL = 1_000_000_000
NETWORK = "mainnet-beta"

RAYDIUM_AMM_V4_PROGRAM_ID = Pubkey.from_string("675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8")
DEFAULT_PUBKEY = str(Pubkey.default())
_PDA_MARKER = b"ProgramDerivedAddress"


def load_keypair(private_key: str) -> Keypair:
    """Acepta la clave en base58 (formato Phantom) o como array JSON (formato solana-keygen)."""
    key = (private_key or "").strip()
    if not key:
        raise ConfigError("PRIVATE_KEY no configurada")
    try:
        if key.startswith("["):
            return Keypair.from_bytes(bytes(json.loads(key)))
        return Keypair.from_bytes(base58.b58decode(key))
    except ValueError as e:
        raise ConfigError(f"PRIVATE_KEY inválida: {e}") from e


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)


def tx_url(signature: str) -> str:
    return f"https://solscan.io/tx/{signature}?cluster={NETWORK}"


def amm_authority(program_id: Pubkey = RAYDIUM_AMM_V4_PROGRAM_ID) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"amm authority"], program_id)
    return pda


def program_address(seeds: list[bytes], program_id: Pubkey) -> Optional[Pubkey]:
    """Dirección PDA para estas semillas, o None si cae en la curva."""
    digest = hashlib.sha256(b"".join(seeds) + bytes(program_id) + _PDA_MARKER).digest()
    candidate = Pubkey(digest)
    return None if candidate.is_on_curve() else candidate


def market_authority(program_id: Pubkey, market_id: Pubkey) -> Pubkey:
    """Autoridad del mercado OpenBook: primer nonce (0..99) fuera de la curva."""
    # Pubkey.create_program_address de solders aborta con PanicException en la curva
    seed = bytes(market_id)
    for nonce in range(100):
        pda = program_address([seed, nonce.to_bytes(8, "little")], program_id)
        if pda is not None:
            return pda
    raise ValueError(f"No se pudo derivar la autoridad del mercado {market_id}")


def create_pool_keys(pool_id: str, state: PoolState, market: MarketState) -> PoolKeys:
    program_id = RAYDIUM_AMM_V4_PROGRAM_ID
    return PoolKeys(
        id=pool_id,
        base_mint=state.base_mint,
        quote_mint=state.quote_mint,
        lp_mint=state.lp_mint,
        base_decimals=state.base_decimal,
        quote_decimals=state.quote_decimal,
        lp_decimals=5,
        version=4,
        program_id=str(program_id),
        authority=str(amm_authority(program_id)),
        open_orders=state.open_orders,
        target_orders=state.target_orders,
        base_vault=state.base_vault,
        quote_vault=state.quote_vault,
        withdraw_queue=state.withdraw_queue,
        lp_vault=state.lp_vault,
        market_version=3,
        market_program_id=state.market_program_id,
        market_id=state.market_id,
        market_authority=str(market_authority(
            Pubkey.from_string(state.market_program_id),
            Pubkey.from_string(state.market_id),
        )),
        market_base_vault=state.base_vault,
        market_quote_vault=state.quote_vault,
        market_bids=market.bids,
        market_asks=market.asks,
        market_event_queue=market.event_queue,
        lookup_table_account=DEFAULT_PUBKEY,
    )
