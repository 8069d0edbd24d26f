from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[2]
LOG_DIR = Path(os.getenv("LOG_DIR") or PROJECT_ROOT / "logs")

DEFAULT_ACCESS_EXCLUDED_PATHS = ("/health",)


class AccessPathExcludeFilter(logging.Filter):
    """Écarte les lignes d'accès uvicorn dont le chemin figure dans ``paths``."""

    def __init__(self, paths: Iterable[str] = DEFAULT_ACCESS_EXCLUDED_PATHS) -> None:
        super().__init__()
        self._paths = {path.rstrip("/") or "/" for path in paths}

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        # uvicorn.access: (client_addr, method, full_path, http_version, status_code)
        if isinstance(args, tuple) and len(args) >= 3:
            path = str(args[2]).split("?", 1)[0].rstrip("/") or "/"
            return path not in self._paths
        return True


def configure_logging(log_dir: Path | None = None) -> None:
    """Configure la journalisation de l'application avec rotation des fichiers."""

    target_dir = log_dir or LOG_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    logging.captureWarnings(True)

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "filters": {
            "access_exclude": {
                "()": AccessPathExcludeFilter,
                "paths": list(DEFAULT_ACCESS_EXCLUDED_PATHS),
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "verbose",
            },
            "backend_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "DEBUG",
                "formatter": "verbose",
                "filename": str(target_dir / "backend.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console", "backend_file"],
                "level": "DEBUG",
            },
            "pymongo": {
                "level": "WARNING",
            },
            "uvicorn": {
                "handlers": ["console", "backend_file"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["console", "backend_file"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["console", "backend_file"],
                "filters": ["access_exclude"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["AccessPathExcludeFilter", "configure_logging", "LOG_DIR"]
