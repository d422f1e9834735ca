"""Logging for the WeChat OAuth client.

Every log line can carry dimensions (``request_id``, ``flow_id``...) that are
attached as ``extra`` fields on the record. Loggers are immutable: adding a
dimension or a prefix returns a new logger, so a per-flow logger can be derived
without affecting the module-level one.

Usage:
    from wechat_oauth.core.logging import logger

    flow_logger = logger.with_context(flow_id="abc")
    flow_logger.info("Exchanging code")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from wechat_oauth.core.config import settings

BASE_LOGGER_NAME = "wechat_oauth"

# Standard LogRecord attributes, never rendered as dimensions
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


class JSONFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            data.setdefault(key, value)

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches a fixed set of dimensions to every record."""

    def __init__(
        self,
        logger: logging.Logger,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Wrap ``logger`` with a message prefix and dimensions."""
        self.prefix = prefix
        self.dimensions: Dict[str, Any] = dict(dimensions or {})
        super().__init__(logger, self.dimensions)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge dimensions into ``extra`` and apply the prefix."""
        kwargs["extra"] = {**self.dimensions, **(kwargs.get("extra") or {})}
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with ``dimensions`` added to the current ones."""
        return ContextualLogger(
            self.logger, prefix=self.prefix, dimensions={**self.dimensions, **dimensions}
        )

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger whose messages start with ``prefix``."""
        return ContextualLogger(self.logger, prefix=prefix, dimensions=self.dimensions)


class LoggerConfigurator:
    """Builds contextual loggers and installs the package handler once."""

    _handler_installed = False

    @classmethod
    def _install_handler(cls) -> None:
        if cls._handler_installed:
            return
        cls._handler_installed = True

        base = logging.getLogger(BASE_LOGGER_NAME)
        base.setLevel(settings.LOG_LEVEL)

        # Leave output alone when the host application has configured logging
        if logging.getLogger().handlers:
            return

        handler = logging.StreamHandler(sys.stdout)
        if settings.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
            )
        base.addHandler(handler)

    @classmethod
    def configure_logger(
        cls,
        name: str,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ) -> ContextualLogger:
        """Return a contextual logger for ``name``.

        Args:
            name: Logger name, normally under the ``wechat_oauth`` namespace
            prefix: Optional text prepended to every message
            dimensions: Fields attached to every record

        Returns:
            ContextualLogger: The configured logger
        """
        cls._install_handler()
        return ContextualLogger(logging.getLogger(name), prefix=prefix, dimensions=dimensions)


logger = LoggerConfigurator.configure_logger(BASE_LOGGER_NAME)
