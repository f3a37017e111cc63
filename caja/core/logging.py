"""
Configuración de logging.

- Consola: nivel configurable (LOG_LEVEL)
- Archivo: TimedRotatingFileHandler diario en LOG_DIR

Uso:
    from caja.core.logging import setup_logging
    setup_logging("api")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "httpcore",
    "httpx",
    "asyncio",
]


def setup_logging(
    process_name: str,
    log_dir: Path,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.INFO,
) -> logging.Logger:
    """
    Inicializa el logger raíz con salida a consola y archivo diario.

    Args:
        process_name: nombre del proceso, usado para el archivo ("api" -> api.log)
        log_dir: directorio de logs (se crea si no existe)
        console_level: nivel de consola
        file_level: nivel de archivo

    Returns:
        Logger raíz configurado
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{process_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info("Logging initialized: %s -> %s", process_name, log_file)
    return root_logger
