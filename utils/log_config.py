# Punto único de importación del logging: cada módulo crea el suyo con
# logger_manager.setup_logger(__name__)
from utils.logger import logger_manager, log_function

__all__ = ["logger_manager", "log_function"]
