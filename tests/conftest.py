# tests/conftest.py
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from models.pool import MarketState, PoolState
from models.token import Token, WSOL
from schemas.swap_schema import SwapQuote, SwapResult, TransactionResult
from utils.solana_utils import create_pool_keys
from utils.token_amount import TokenAmount


def new_address() -> str:
    return str(Pubkey.new_unique())


def sol(value) -> TokenAmount:
    return TokenAmount.from_decimal(WSOL, Decimal(str(value)))


def make_result(amount_out, confirmed=True, fee="0.0001", amount_in="0.01") -> SwapResult:
    out = amount_out if isinstance(amount_out, TokenAmount) else sol(amount_out)
    quote = SwapQuote(
        amount_in=sol(amount_in),
        amount_out=out,
        min_amount_out=out,
        fee=sol(fee),
    )
    return SwapResult(
        quote=quote,
        transaction=TransactionResult(
            confirmed=confirmed,
            signature="sig-ok" if confirmed else "sig-ko",
            error=None if confirmed else "expired",
        ),
    )


def make_quote(amount_out) -> SwapQuote:
    return make_result(amount_out).quote


class FakeSwapService:
    """Sustituye a SwapService: `quote` y `swap` son AsyncMock configurables."""

    def __init__(self, wallet: Keypair = None) -> None:
        self.wallet = wallet or Keypair()
        self.executor = SimpleNamespace(sets_priority_fee=False)
        self.quote = AsyncMock()
        self.swap = AsyncMock()

    def associated_token_address(self, mint: str) -> Pubkey:
        return get_associated_token_address(self.wallet.pubkey(), Pubkey.from_string(mint))


class FakeWallet:
    def __init__(self, balance="1") -> None:
        self.balance = Decimal(balance)
        self.update_balance = AsyncMock(side_effect=self._refresh)
        self.quote_account_exists = AsyncMock(return_value=True)

    async def _refresh(self):
        return self.balance

    def apply_profit(self, profit):
        self.balance += Decimal(profit)


class Sleeper:
    """Sleep falso: no espera, solo anota los segundos pedidos."""

    def __init__(self) -> None:
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleeper():
    return Sleeper()


@pytest.fixture
def base_token():
    return Token(mint=new_address(), decimals=6, symbol="MEME")


@pytest.fixture
def market_state():
    return MarketState(event_queue=new_address(), bids=new_address(), asks=new_address())


@pytest.fixture
def pool_state(base_token):
    return PoolState(
        base_mint=base_token.mint,
        quote_mint=WSOL.mint,
        lp_mint=new_address(),
        base_decimal=base_token.decimals,
        quote_decimal=WSOL.decimals,
        market_id=new_address(),
        market_program_id="srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX",
        open_orders=new_address(),
        target_orders=new_address(),
        base_vault=new_address(),
        quote_vault=new_address(),
        withdraw_queue=new_address(),
        lp_vault=new_address(),
    )


@pytest.fixture
def pool_id():
    return new_address()


@pytest.fixture
def pool_keys(pool_id, pool_state, market_state):
    return create_pool_keys(pool_id, pool_state, market_state)
