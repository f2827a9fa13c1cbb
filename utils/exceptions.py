from __future__ import annotations


class SniperError(Exception):
    """Base de los errores propios del bot."""


class ConfigError(SniperError, ValueError):
    """Configuración ausente o inválida detectada al arrancar."""


class TradeStateError(SniperError):
    """Transición de estado no permitida en un Trade."""
