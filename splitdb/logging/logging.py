"""
Structured Logging
==================

Centralized logging configuration using structlog for structured JSON logging.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

import structlog

# Global flag to track if logging has been setup
_logging_initialized = False


class LogManager:
    """
    Centralized logging configuration using structlog.

    Features:
    - Structured JSON logging
    - Automatic log rotation
    - Context preservation (component, run_id)
    """

    @staticmethod
    def setup(log_level: str = "INFO", log_dir: Optional[Union[str, Path]] = None):
        """
        Initialize structured JSON logging (idempotent).

        Attaches two rotating file handlers under ``log_dir`` (``./logs`` by
        default): processors.log (10 MB, 5 backups) and errors.log (10 MB,
        3 backups, level=ERROR), then configures structlog to render JSON.

        Parameters:
            log_level (str): Logging level name (e.g., "INFO", "DEBUG").
            log_dir: Directory receiving the log files; created if missing.
        """
        global _logging_initialized

        if _logging_initialized:
            return

        level = getattr(logging, log_level.upper(), logging.INFO)

        # Setup log directory
        log_dir = Path(log_dir) if log_dir is not None else Path.cwd() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        # Configure Python logging
        logging.basicConfig(
            level=level,
            format='%(message)s'
        )

        # Main log file with rotation (10MB, keep 5 backups)
        main_handler = RotatingFileHandler(
            log_dir / "processors.log",
            maxBytes=10_485_760,
            backupCount=5
        )
        main_handler.setLevel(level)

        # Error log file (10MB, keep 3 backups)
        error_handler = RotatingFileHandler(
            log_dir / "errors.log",
            maxBytes=10_485_760,
            backupCount=3
        )
        error_handler.setLevel(logging.ERROR)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in (main_handler, error_handler):
            root_logger.addHandler(handler)

        # Configure structlog
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        _logging_initialized = True

        logger = structlog.get_logger()
        logger.info("logging_initialized", log_dir=str(log_dir), level=log_level)

    @staticmethod
    def get_logger(component: str, run_id: str):
        """
        Return a structlog logger bound with component and run_id context.

        Sets logging up with defaults first if nobody has called setup().
        """
        if not _logging_initialized:
            LogManager.setup()

        return structlog.get_logger().bind(
            component=component,
            run_id=run_id
        )
