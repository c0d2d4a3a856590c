"""
Logging configuration for the Real Estate Masters API.
Provides structured logging with different levels and handlers.
"""

import logging
import logging.handlers
import sys
import os
from pathlib import Path
from typing import Optional
import psutil


class PerformanceLogger:
    """Logger for tracking performance metrics (memory and CPU)."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.process = psutil.Process()

    def log_memory_usage(self, context: str = ""):
        """Log current memory usage."""
        memory_info = self.process.memory_info()
        memory_mb = memory_info.rss / 1024 / 1024
        memory_percent = self.process.memory_percent()

        self.logger.info(
            f"MEMORY - {context}: {memory_mb:.2f} MB ({memory_percent:.2f}%)",
            extra={
                "metric_type": "memory",
                "context": context,
                "memory_mb": memory_mb,
                "memory_percent": memory_percent
            }
        )

    def log_cpu_usage(self, context: str = "", interval: float = 0.1):
        """Log current CPU usage."""
        cpu_percent = self.process.cpu_percent(interval=interval)

        self.logger.info(
            f"CPU - {context}: {cpu_percent:.2f}%",
            extra={
                "metric_type": "cpu",
                "context": context,
                "cpu_percent": cpu_percent
            }
        )

    def log_performance_snapshot(self, context: str = ""):
        """Log both memory and CPU usage."""
        self.log_memory_usage(context)
        self.log_cpu_usage(context)


class ContextFilter(logging.Filter):
    """Add contextual information to log records."""

    def filter(self, record):
        record.pid = os.getpid()

        if hasattr(record, 'memory_mb'):
            record.memory_info = f"[MEM: {record.memory_mb:.2f}MB]"
        else:
            record.memory_info = ""

        if hasattr(record, 'cpu_percent'):
            record.cpu_info = f"[CPU: {record.cpu_percent:.2f}%]"
        else:
            record.cpu_info = ""

        return True


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        if sys.stdout.isatty():  # Only use colors if outputting to terminal
            levelname = record.levelname
            record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    enable_file_logging: bool = True
) -> None:
    """
    Setup logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: ./logs)
        enable_file_logging: Whether to enable rotating file logs
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_formatter = ColoredFormatter(
        '%(asctime)s - %(name)s - [%(levelname)s] - %(message)s %(memory_info)s%(cpu_info)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(ContextFilter())
    root_logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = "logs"
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        # General application log (rotating)
        app_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        app_handler.setLevel(numeric_level)
        app_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - [%(levelname)s] - [PID:%(pid)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        app_handler.addFilter(ContextFilter())
        root_logger.addHandler(app_handler)

        # Error log (only errors and critical)
        error_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'error.log'),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - [%(levelname)s] - [PID:%(pid)s] - %(message)s\n'
            'Location: %(pathname)s:%(lineno)d\n'
            'Function: %(funcName)s\n',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        error_handler.addFilter(ContextFilter())
        root_logger.addHandler(error_handler)

    # Set specific log levels for noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info(f"Logging initialized - Level: {log_level}, File Logging: {enable_file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with performance tracking capabilities.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if not hasattr(logger, 'perf'):
        logger.perf = PerformanceLogger(logger)

    return logger


def log_operation_start(logger: logging.Logger, operation: str, **kwargs):
    """Log the start of an operation with context."""
    logger.info(
        f"Starting operation: {operation}",
        extra={"operation": operation, "phase": "start", **kwargs}
    )


def log_operation_end(logger: logging.Logger, operation: str, success: bool = True, **kwargs):
    """Log the end of an operation with context."""
    status = "completed" if success else "failed"
    level = logging.INFO if success else logging.ERROR
    logger.log(
        level,
        f"Operation {status}: {operation}",
        extra={"operation": operation, "phase": "end", "success": success, **kwargs}
    )


def log_database_query(logger: logging.Logger, query_type: str, table: str, duration_ms: float):
    """Log database query execution."""
    logger.debug(
        f"DB Query - {query_type} on {table} - {duration_ms:.2f}ms",
        extra={
            "query_type": query_type,
            "table": table,
            "duration_ms": duration_ms
        }
    )


def log_api_request(logger: logging.Logger, method: str, path: str, status_code: int, duration_ms: float):
    """Log API request."""
    logger.info(
        f"API {method} {path} - {status_code} - {duration_ms:.2f}ms",
        extra={
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms
        }
    )
