# tests/test_solana_utils.py
import json
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from repositories.market_repository import MarketRepository
from services.wallet_service import WalletService
from utils.exceptions import ConfigError
from utils.solana_utils import (
    RAYDIUM_AMM_V4_PROGRAM_ID,
    amm_authority,
    lamports_to_sol,
    load_keypair,
    market_authority,
    program_address,
    tx_url,
)

OPENBOOK_PROGRAM_ID = Pubkey.from_string("srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX")


def test_load_keypair_accepts_base58_and_json():
    kp = Keypair()
    assert load_keypair(base58.b58encode(bytes(kp)).decode()).pubkey() == kp.pubkey()
    assert load_keypair(json.dumps(list(bytes(kp)))).pubkey() == kp.pubkey()


def test_load_keypair_requires_a_key():
    with pytest.raises(ConfigError):
        load_keypair("  ")


def test_raydium_amm_authority():
    assert str(amm_authority(RAYDIUM_AMM_V4_PROGRAM_ID)) == "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"


def test_program_address_matches_solders_derivation():
    seed = bytes(Pubkey.new_unique())
    pda, bump = Pubkey.find_program_address([seed], OPENBOOK_PROGRAM_ID)
    assert program_address([seed, bytes([bump])], OPENBOOK_PROGRAM_ID) == pda


def test_market_authority_is_derived_for_any_market():
    for _ in range(200):
        market_id = Pubkey.new_unique()
        authority = market_authority(OPENBOOK_PROGRAM_ID, market_id)
        assert not authority.is_on_curve()
        assert authority == market_authority(OPENBOOK_PROGRAM_ID, market_id)


def test_pool_keys_carry_pool_and_market_accounts(pool_keys, pool_state, market_state):
    assert pool_keys.base_mint == pool_state.base_mint
    assert pool_keys.quote_vault == pool_state.quote_vault
    assert pool_keys.market_bids == market_state.bids
    assert pool_keys.market_event_queue == market_state.event_queue
    assert pool_keys.authority == "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
    assert pool_keys.market_authority


def test_helpers():
    assert lamports_to_sol(1_500_000_000) == Decimal("1.5")
    assert tx_url("abc").startswith("https://solscan.io/tx/abc")


@pytest.mark.asyncio
async def test_market_repository_reads_and_caches_on_chain_market():
    event_queue, bids, asks = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    data = bytes(253) + bytes(event_queue) + bytes(bids) + bytes(asks) + bytes(32)
    client = MagicMock()
    client.get_account_info = AsyncMock(return_value=SimpleNamespace(value=SimpleNamespace(data=data)))
    repo = MarketRepository(client)
    market_id = str(Pubkey.new_unique())

    market = await repo.get(market_id)
    assert market.bids == str(bids)
    assert market.asks == str(asks)
    assert market.event_queue == str(event_queue)

    assert await repo.get(market_id) is market
    client.get_account_info.assert_awaited_once()


@pytest.mark.asyncio
async def test_market_repository_missing_account():
    client = MagicMock()
    client.get_account_info = AsyncMock(return_value=SimpleNamespace(value=None))
    assert await MarketRepository(client).get(str(Pubkey.new_unique())) is None
    assert await MarketRepository().get("anything") is None


@pytest.mark.asyncio
async def test_wallet_balance_adds_sol_and_quote_account():
    client = MagicMock()
    client.get_balance = AsyncMock(side_effect=[
        SimpleNamespace(value=2_000_000_000),
        SimpleNamespace(value=500_000_000),
    ])
    wallet = WalletService(client, Pubkey.new_unique(), Pubkey.new_unique())
    assert await wallet.update_balance() == Decimal("2.5")

    wallet.apply_profit(Decimal("-0.5"))
    assert wallet.balance == Decimal("2")
