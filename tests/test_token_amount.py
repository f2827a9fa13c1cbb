# tests/test_token_amount.py
from decimal import Decimal

import pytest

from models.token import Token, USDC, WSOL
from utils.token_amount import TokenAmount


def test_from_decimal_scales_by_decimals():
    amount = TokenAmount.from_decimal(WSOL, "0.1")
    assert amount.raw == 100_000_000
    assert amount.to_decimal() == Decimal("0.1")


def test_from_decimal_truncates_extra_precision():
    amount = TokenAmount.from_decimal(USDC, "1.0000009")
    assert amount.raw == 1_000_000


def test_percent_rounds_towards_zero():
    amount = TokenAmount(USDC, 999)
    assert amount.percent(10).raw == 99
    assert amount.percent(Decimal("0.5")).raw == 4


def test_arithmetic_and_ordering():
    a = TokenAmount.from_decimal(WSOL, 100)
    tp = a + a.percent(10)
    sl = a - a.percent(10)
    assert tp == TokenAmount.from_decimal(WSOL, 110)
    assert sl == TokenAmount.from_decimal(WSOL, 90)
    assert sl < a < tp
    assert TokenAmount.from_decimal(WSOL, "110.000001") > tp
    assert not TokenAmount.from_decimal(WSOL, 110) > tp


def test_mixing_tokens_is_rejected():
    with pytest.raises(ValueError):
        TokenAmount.from_decimal(WSOL, 1) + TokenAmount.from_decimal(USDC, 1)
    with pytest.raises(ValueError):
        TokenAmount.from_decimal(WSOL, 1) < TokenAmount.from_decimal(USDC, 1)


def test_zero_and_str():
    meme = Token(mint="MemeMint111", decimals=2, symbol="MEME")
    assert TokenAmount.zero(meme).is_zero()
    assert str(TokenAmount(meme, 150)) == "1.5 MEME"
