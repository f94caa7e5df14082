"""
Logging setup for the ATS Match API.

Console output plus, outside of tests, a daily rotating log file and a
separate errors-only file under LOG_DIR.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-34s | %(funcName)-20s:%(lineno)-4d | %(message)s"
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

# level=None means LOG_LEVEL decides
ENVIRONMENT_PROFILES: Dict[str, Dict[str, Any]] = {
    "production": {"level": None, "log_to_file": True, "simple": False},
    "development": {"level": "DEBUG", "log_to_file": True, "simple": False},
    "testing": {"level": "WARNING", "log_to_file": False, "simple": True},
}


def _rotating_file(filename: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(filename),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
        "encoding": "utf8",
    }


def setup_logging(level: str = "INFO", log_to_file: bool = True, simple: bool = False) -> None:
    """
    Configure the root, uvicorn and pdfminer loggers.

    Args:
        level: Logging level for the root logger and its handlers
        log_to_file: Also write ats_match_<date>.log and ats_match_errors_<date>.log
        simple: Use the short console format
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "simple" if simple else "detailed",
            "stream": "ext://sys.stdout",
        }
    }
    root_handlers = ["console"]
    uvicorn_handlers = ["console"]

    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    stamp = datetime.now().strftime("%Y%m%d")
    if log_to_file:
        log_dir.mkdir(exist_ok=True)
        handlers["file"] = _rotating_file(log_dir / f"ats_match_{stamp}.log", level)
        handlers["error_file"] = _rotating_file(log_dir / f"ats_match_errors_{stamp}.log", "ERROR")
        root_handlers += ["file", "error_file"]
        uvicorn_handlers.append("file")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {"format": DETAILED_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "simple": {"format": SIMPLE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "": {"level": level, "handlers": root_handlers, "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": uvicorn_handlers, "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            # pdfminer is chatty at DEBUG on every page it lays out
            "pdfminer": {"level": "ERROR", "handlers": [], "propagate": True},
        },
    })

    logger = logging.getLogger("ats_match.logging")
    logger.info(f"Logging configured - Level: {level}, File: {log_to_file}")
    if log_to_file:
        logger.info(f"Log directory: {log_dir}")


def get_logger(name: str) -> logging.Logger:
    """Logger under the ats_match namespace (usually called with __name__)"""
    if name.startswith("ats_match"):
        return logging.getLogger(name)
    return logging.getLogger(f"ats_match.{name}")


def log_function_call(func):
    """Log entry, exit and failures of a blocking function at DEBUG/ERROR."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.time()
        logger.debug(f"Entering {func.__name__} with args={len(args)}, kwargs={list(kwargs.keys())}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {func.__name__} after {time.time() - start_time:.3f}s: {str(e)}")
            raise
        logger.debug(f"Completed {func.__name__} in {time.time() - start_time:.3f}s")
        return result

    return wrapper


def configure_for_environment():
    """Configure logging from ENVIRONMENT and LOG_LEVEL"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    profile = ENVIRONMENT_PROFILES.get(environment, ENVIRONMENT_PROFILES["production"])
    setup_logging(
        level=profile["level"] or log_level,
        log_to_file=profile["log_to_file"],
        simple=profile["simple"],
    )


class PerformanceMonitor:
    """Context manager that logs how long an operation took, warning past a threshold"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {elapsed_ms:.2f}ms: {exc_val}")
        elif elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {elapsed_ms:.2f}ms (threshold {self.threshold_ms}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed_ms:.2f}ms")
        return False
