import contextvars
import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yaml

from . import config

# Context variable for trace ID
trace_id_var = contextvars.ContextVar('trace_id', default=None)

_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName', 'message',
    'exc_info', 'exc_text', 'stack_info', 'method', 'path', 'status',
    'latency_ms', 'client_ip', 'component', 'color_message',
])

_MANAGED_LOGGERS = ("geoip_api", "uvicorn", "uvicorn.error", "uvicorn.access")


def get_trace_id() -> Optional[str]:
    """Get the current trace ID from context"""
    return trace_id_var.get()


class JsonFormatter(logging.Formatter):
    """One JSON object per line with the request fields promoted to the top level"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": get_trace_id(),
            "method": getattr(record, 'method', None),
            "path": getattr(record, 'path', None),
            "status": getattr(record, 'status', None),
            "latency_ms": getattr(record, 'latency_ms', None),
            "client_ip": getattr(record, 'client_ip', None),
            "component": getattr(record, 'component', 'api'),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def _default_config(log_level: str, log_format: str) -> Dict[str, Any]:
    handlers = ["console"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": log_format,
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            name: {"level": log_level, "handlers": handlers, "propagate": False}
            for name in _MANAGED_LOGGERS
        },
        "root": {
            "level": log_level,
            "handlers": handlers
        }
    }


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None,
                  config_path: Optional[str] = None) -> Dict[str, Any]:
    """Setup logging configuration from YAML file or environment"""
    log_level = (log_level or config.LOG_LEVEL).upper()
    log_format = log_format or config.LOG_FORMAT
    if log_format not in ("json", "text"):
        log_format = "json"
    config_path = config_path or config.LOG_CONFIG

    log_config = None
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                log_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load {config_path}: {e}")

    if not log_config:
        log_config = _default_config(log_level, log_format)
    else:
        # Environment overrides still apply to a file-based config
        if log_format == "text":
            for handler in log_config.get("handlers", {}).values():
                if "formatter" in handler:
                    handler["formatter"] = "text"
        for logger_cfg in log_config.get("loggers", {}).values():
            logger_cfg["level"] = log_level

    logging.config.dictConfig(log_config)
    return log_config
