# tests/test_exit_signal_controller.py
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from controllers.exit_signal_controller import ExitSignalController
from models.token import Token, WSOL
from utils.token_amount import TokenAmount

from conftest import make_quote, sol


def _controller(quotes, sleeper, interval=1000, duration=3000, **kwargs):
    quoter = AsyncMock()
    quoter.quote = AsyncMock(side_effect=quotes)
    params = dict(take_profit_pct=Decimal(10), stop_loss_pct=Decimal(10))
    params.update(kwargs)
    ctrl = ExitSignalController(
        quoter,
        WSOL,
        sell_slippage=Decimal(20),
        interval_ms=interval,
        duration_ms=duration,
        sleep=sleeper,
        **params,
    )
    return ctrl, quoter


def _held(pool_keys):
    return TokenAmount(Token(mint=pool_keys.base_mint, decimals=pool_keys.base_decimals), 1_000_000)


@pytest.mark.asyncio
async def test_zero_interval_sells_immediately(pool_keys, sleeper):
    ctrl, quoter = _controller([], sleeper, interval=0)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    quoter.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_flat_price_runs_every_round_then_sells(pool_keys, sleeper):
    ctrl, quoter = _controller([make_quote(100)] * 3, sleeper, interval=2000, duration=7000)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert quoter.quote.await_count == 3
    assert sleeper.calls == [2.0, 2.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("price,calls", [("110.000001", 1), ("110", 3)])
async def test_take_profit_boundary(pool_keys, sleeper, price, calls):
    ctrl, quoter = _controller([make_quote(price)] * 3, sleeper)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert quoter.quote.await_count == calls


@pytest.mark.asyncio
@pytest.mark.parametrize("price,calls", [("89.999999", 1), ("90", 3)])
async def test_stop_loss_boundary(pool_keys, sleeper, price, calls):
    ctrl, quoter = _controller([make_quote(price)] * 3, sleeper)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert quoter.quote.await_count == calls


@pytest.mark.asyncio
async def test_trigger_clears_watermark_but_timeout_keeps_it(pool_keys, sleeper):
    mint = pool_keys.base_mint
    ctrl, _ = _controller([make_quote(100)] * 3, sleeper)
    await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert ctrl.watermark(mint) == sol(90)

    ctrl2, _ = _controller([make_quote(80)], sleeper)
    await ctrl2.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert ctrl2.watermark(mint) is None


@pytest.mark.asyncio
async def test_trailing_watermark_never_decreases(pool_keys, sleeper):
    mint = pool_keys.base_mint
    seen = []
    prices = iter(["100", "105", "103", "94"])

    ctrl = None

    async def quote(*_args, **_kwargs):
        seen.append(ctrl.watermark(mint))
        return make_quote(next(prices))

    ctrl, quoter = _controller(None, sleeper, duration=4000, trailing_stop_loss=True,
                               take_profit_pct=Decimal(40))
    quoter.quote.side_effect = quote

    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert seen == [sol(90), sol(90), sol("94.5"), sol("94.5")]
    assert all(a <= b for a, b in zip(seen, seen[1:]))
    # 94 < 94.5 dispara la venta y borra el watermark
    assert ctrl.watermark(mint) is None


@pytest.mark.asyncio
async def test_max_loss_cutoff_aborts_the_sale(pool_keys, sleeper):
    ctrl, quoter = _controller([make_quote(49)], sleeper,
                               stop_loss_pct=Decimal(20),
                               skip_selling_if_lost_more_than=Decimal(50))
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100)) is False
    assert ctrl.watermark(pool_keys.base_mint) is None
    assert quoter.quote.await_count == 1


@pytest.mark.asyncio
async def test_quote_failure_skips_the_round(pool_keys, sleeper):
    ctrl, quoter = _controller([RuntimeError("rpc"), make_quote(111)], sleeper)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert quoter.quote.await_count == 2
    assert sleeper.calls == [1.0]


@pytest.mark.asyncio
async def test_existing_watermark_is_reused(pool_keys, sleeper):
    mint = pool_keys.base_mint
    ctrl, quoter = _controller([make_quote(95)], sleeper, duration=1000)
    ctrl.stop_loss[mint] = sol(96)
    assert await ctrl.should_sell(pool_keys, _held(pool_keys), sol(100))
    assert ctrl.watermark(mint) is None
