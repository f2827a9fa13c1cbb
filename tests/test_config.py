# tests/test_config.py
from decimal import Decimal

import pytest

from models.token import USDC, WSOL
from utils.config import load_bot_config
from utils.exceptions import ConfigError


def _load(environ, tmp_path, yaml_text=None):
    path = tmp_path / "config.yaml"
    if yaml_text is not None:
        path.write_text(yaml_text, encoding="utf-8")
    return load_bot_config(environ=environ, config_path=str(path))


def test_defaults(tmp_path):
    cfg = _load({}, tmp_path)
    assert cfg.quote_token == WSOL
    assert cfg.transaction_executor == "default"
    assert cfg.max_tokens_at_the_time == 1
    assert cfg.auto_sell is True


def test_environment_values(tmp_path):
    cfg = _load({
        "QUOTE_MINT": "usdc",
        "QUOTE_AMOUNT": "2.5",
        "AUTO_SELL": "false",
        "TRAILING_STOP_LOSS": "true",
        "MAX_TOKENS_AT_THE_TIME": "3",
        "TRANSACTION_EXECUTOR": "jito",
        "JITO_ENDPOINTS": "https://a.example/api/, https://b.example/api",
    }, tmp_path)
    assert cfg.quote_token == USDC
    assert cfg.quote_amount == Decimal("2.5")
    assert cfg.quote_amount_tokens.raw == 2_500_000
    assert cfg.auto_sell is False
    assert cfg.trailing_stop_loss is True
    assert cfg.max_tokens_at_the_time == 3
    assert cfg.jito_endpoints == ["https://a.example/api", "https://b.example/api"]


def test_yaml_overrides_environment(tmp_path):
    cfg = _load({"TAKE_PROFIT": "40"}, tmp_path, "take_profit: 25\nSTOP_LOSS: 5\n")
    assert cfg.take_profit == Decimal(25)
    assert cfg.stop_loss == Decimal(5)


@pytest.mark.parametrize("environ", [
    {"AUTO_SELL": "maybe"},
    {"MAX_BUY_RETRIES": "0"},
    {"TRANSACTION_EXECUTOR": "carrier-pigeon"},
    {"QUOTE_MINT": "BONK"},
])
def test_invalid_values_raise_config_error(tmp_path, environ):
    with pytest.raises(ConfigError):
        _load(environ, tmp_path)


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)
