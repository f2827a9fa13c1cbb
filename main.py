# main.py
"""
Arranque del motor de snipeo.

Este proceso solo decide y ejecuta: no descubre pools ni vigila la cartera.
Para que opere hacen falta dos piezas externas:
  - un feed de descubrimiento que llame a SniperOrchestrator.save_market(),
    submit_pool() (pool nuevo) y submit_holding() (cambio en una cuenta de token)
  - un constructor de cotizaciones Raydium indicado en QUOTE_BUILDER (modulo:Clase)
"""
from __future__ import annotations
import asyncio
import signal
import sys

from orchestrators.sniper_orchestrator import SniperOrchestrator
from utils.config import load_bot_config
from utils.exceptions import ConfigError
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)


def _log_config(config) -> None:
    logger.info("- Bot -")
    logger.info(f"Ejecutor: {config.transaction_executor}")
    if config.transaction_executor in ("warp", "jito"):
        logger.info(f"Comisión {config.transaction_executor}: {config.custom_fee}")
    else:
        logger.info(f"Compute Units limit: {config.compute_unit_limit}")
        logger.info(f"Compute Units price (micro lamports): {config.compute_unit_price}")
    logger.info(f"Máx. tokens a la vez: {config.max_tokens_at_the_time}")
    logger.info(f"Snipe list: {config.use_snipe_list} (refresco {config.snipe_list_refresh_interval} ms)")

    logger.info("- Compra -")
    logger.info(f"Cantidad: {config.quote_amount} {config.quote_token.symbol}")
    logger.info(f"Retardo: {config.auto_buy_delay} ms | Reintentos: {config.max_buy_retries} | Slippage: {config.buy_slippage}%")

    logger.info("- Venta -")
    logger.info(f"Auto sell: {config.auto_sell}")
    logger.info(f"Retardo: {config.auto_sell_delay} ms | Reintentos: {config.max_sell_retries} | Slippage: {config.sell_slippage}%")
    logger.info(f"Take profit: {config.take_profit}% | Stop loss: {config.stop_loss}% | Trailing: {config.trailing_stop_loss}")
    logger.info(f"Precio cada {config.price_check_interval} ms durante {config.price_check_duration} ms")

    logger.info("- Filtros -")
    logger.info(f"Filtros cada {config.filter_check_interval} ms durante {config.filter_check_duration} ms, "
                f"{config.consecutive_filter_matches} aciertos seguidos")
    logger.info(f"Pool size: {config.min_pool_size} - {config.max_pool_size} {config.quote_token.symbol}")
    logger.info(f"Renounced: {config.check_if_mint_is_renounced} | Freezable: {config.check_if_freezable} | "
                f"Burned: {config.check_if_burned}")
    # estos los aplica el descubrimiento de pools, no este motor
    logger.info(f"Locked: {config.check_if_locked} | Honeypot: {config.check_honeypot} | "
                f"Rugs: {config.check_rugs} (retardo {config.check_rugs_delay} ms)")


async def run() -> int:
    try:
        config = load_bot_config()
    except ConfigError as e:
        logger.error(f"Configuración inválida: {e}")
        return 1

    try:
        orch = SniperOrchestrator(config)
    except (ConfigError, ImportError) as e:
        logger.error(f"No se pudo construir el bot: {e}")
        return 1

    if not await orch.validate():
        await orch.stop()
        return 1

    await orch.init()
    _log_config(config)

    stop_evt = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_evt.set)
        except NotImplementedError:
            # Windows: solo KeyboardInterrupt
            pass

    orch.start()
    logger.info("🚀 Bot en marcha, esperando eventos del feed de descubrimiento (submit_pool / submit_holding)...")
    try:
        await stop_evt.wait()
    finally:
        logger.info("🛑 Señal de apagado recibida, deteniendo servicios...")
        await orch.stop()
        logger.info("✅ Apagado completado.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        pass
