"""
Configuration loading for the sniper.

Values come from the process environment (a ``.env`` file is loaded first if
present) and may be overridden key by key by ``config.yaml`` in the project
root. Environment keys are the upper-case names of the ``BotConfig`` fields
(``QUOTE_AMOUNT``, ``MAX_TOKENS_AT_THE_TIME``...), except ``QUOTE_MINT`` for
``quote_token``; YAML keys are the lower-case field names.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

import yaml  # type: ignore
from dotenv import load_dotenv
from pydantic import ValidationError

from models.bot_config import BotConfig
from utils.exceptions import ConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}

# campos cuyo nombre en el entorno no es el nombre del campo en mayúsculas
_ENV_NAMES = {"quote_token": "QUOTE_MINT"}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load application configuration from ``config.yaml``.

    :returns: A dictionary representing the configuration. Missing files
        quietly yield an empty dictionary.
    """
    if config_path is None:
        base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
        config_path = os.path.join(base_dir, "config.yaml")
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


def _env_values(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name, field in BotConfig.model_fields.items():
        env_name = _ENV_NAMES.get(name, name.upper())
        raw = environ.get(env_name)
        if raw is None:
            continue
        if field.annotation is bool:
            low = raw.strip().lower()
            if low not in _TRUE | _FALSE:
                raise ConfigError(f"{env_name} debe ser booleano, recibido {raw!r}")
            values[name] = low in _TRUE
        else:
            values[name] = raw.strip()
    return values


def load_bot_config(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
) -> BotConfig:
    """Build a validated :class:`BotConfig`.

    ``environ`` defaults to ``os.environ`` after loading ``.env``. Invalid
    values raise :class:`ConfigError` with every offending key listed.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = _env_values(environ)
    overrides = load_config(config_path)
    if not isinstance(overrides, dict):
        raise ConfigError("config.yaml debe contener un mapa clave: valor")
    values.update({k.lower(): v for k, v in overrides.items()})

    try:
        return BotConfig(**values)
    except ValidationError as e:
        keys = ", ".join(".".join(str(p) for p in err["loc"]).upper() for err in e.errors())
        raise ConfigError(f"Configuración inválida ({keys}): {e}") from e
