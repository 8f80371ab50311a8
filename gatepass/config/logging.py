"""
Logging configuration for the gate-pass tracker.
Provides structured logging with different handlers and formatters.
"""

import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from gatepass.config.settings import Settings, settings as default_settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields"""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = self.environment

        for attr in ('user_id', 'request_id', 'collection'):
            if hasattr(record, attr):
                log_record[attr] = getattr(record, attr)

        if record.exc_info:
            log_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }


def build_logging_config(cfg: Settings) -> Dict[str, Any]:
    """Build the dictConfig for the given settings."""
    handlers: Dict[str, Any] = {
        'console': {
            'level': 'DEBUG' if cfg.DEBUG else cfg.LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': 'colored' if cfg.is_development() else 'standard'
        },
    }
    if cfg.LOG_TO_FILE:
        handlers['file'] = {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': os.path.join(cfg.LOG_DIR, 'gatepass.log'),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 10,
            'formatter': 'standard',
            'encoding': 'utf8'
        }
        handlers['json_file'] = {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': os.path.join(cfg.LOG_DIR, 'gatepass.json.log'),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 10,
            'formatter': 'json',
            'encoding': 'utf8'
        }

    handler_names = list(handlers)
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': CustomJsonFormatter,
                'fmt': '%(timestamp)s %(level)s %(logger)s %(message)s',
                'environment': cfg.ENVIRONMENT,
            },
            'colored': {
                '()': 'colorlog.ColoredFormatter',
                'format': '%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'log_colors': {
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            }
        },
        'handlers': handlers,
        'loggers': {
            'gatepass': {
                'handlers': handler_names,
                'level': cfg.LOG_LEVEL,
                'propagate': False
            },
            'sqlalchemy.engine': {
                'handlers': handler_names,
                'level': 'INFO' if cfg.DATABASE_ECHO else 'WARNING',
                'propagate': False
            },
        }
    }


def setup_logging(cfg: Optional[Settings] = None) -> logging.Logger:
    """Configure application logging"""
    cfg = cfg or default_settings
    if cfg.LOG_TO_FILE:
        os.makedirs(cfg.LOG_DIR, exist_ok=True)
    logging.config.dictConfig(build_logging_config(cfg))
    logger = logging.getLogger("gatepass")
    logger.info(f"Logging initialized with level: {cfg.LOG_LEVEL}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger with context"""
    return logging.getLogger(name)


def mask_email(email: Optional[str]) -> str:
    """Mask the local part of an email for log lines."""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        return f"{'*' * len(local)}@{domain}"
    return f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}@{domain}"
