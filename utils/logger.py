"""
Logging utility for the caricature generator.
Provides consistent logging format across all modules with per-area file outputs.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from config import LOG_DIR, LOG_LEVEL

# Module-to-logfile mapping, matched by exact name first and then by prefix
MODULE_LOG_MAPPING = {
    "__main__": "main.log",
    "main": "main.log",
    "caricature.search": "search.log",
    "caricature.generation": "generation.log",
    "caricature.api": "server.log",
}

# Loggers that have already been configured (avoid duplicate handlers)
_configured_loggers = set()


def _ensure_log_directory():
    """Create log directory if it doesn't exist."""
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)


def _get_log_file_for_module(module_name: str) -> str:
    """
    Determine which log file a module should write to.

    Args:
        module_name: The module's __name__ value

    Returns:
        Log filename (not full path)
    """
    if module_name in MODULE_LOG_MAPPING:
        return MODULE_LOG_MAPPING[module_name]

    # e.g. caricature.search.providers -> search.log
    for prefix, log_file in MODULE_LOG_MAPPING.items():
        if module_name.startswith(prefix):
            return log_file

    return "main.log"


def _file_level() -> int:
    level = logging.getLevelName(str(LOG_LEVEL).upper())
    return level if isinstance(level, int) else logging.DEBUG


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a logger with per-area file outputs and consistent formatting.

    Each module logs to:
    1. Its area log file (e.g., search.log)
    2. The combined all.log file
    3. Console (INFO level only for reduced noise)

    Log rotation: keeps 5 backups, max 10MB per file.

    Args:
        name: Name of the logger, typically __name__ of the module

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)

    if name in _configured_loggers:
        return logger

    _configured_loggers.add(name)
    logger.setLevel(logging.DEBUG)  # handlers filter
    logger.propagate = False

    _ensure_log_directory()

    formatter = logging.Formatter(
        '%(asctime)s [%(name)s] %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    module_file_path = os.path.join(LOG_DIR, _get_log_file_for_module(name))
    module_file_handler = RotatingFileHandler(
        module_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    module_file_handler.setLevel(_file_level())
    module_file_handler.setFormatter(formatter)
    logger.addHandler(module_file_handler)

    all_file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, "all.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    all_file_handler.setLevel(_file_level())
    all_file_handler.setFormatter(formatter)
    logger.addHandler(all_file_handler)

    return logger
