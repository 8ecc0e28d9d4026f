"""
Logging for the Tintern client.

Every module gets a ClientLogger: a LoggerAdapter that prefixes messages
with the component scope and, once known, a shortened user id:

    [education] [user:64f0a1b2] delete of e1 failed, re-fetching

Bearer tokens never go through it. DEBUG_MODE=true in the environment turns
on DEBUG level for every logger created through get_logger().
"""

import logging
import os
import sys
from typing import Optional


class ClientLogger(logging.LoggerAdapter):
    """Adds `[scope] [user:..]` to each message."""

    def process(self, msg, kwargs):
        prefix = []
        if self.extra.get("scope"):
            prefix.append(f"[{self.extra['scope']}]")
        if self.extra.get("user_id"):
            prefix.append(f"[user:{self.extra['user_id'][:8]}]")
        if prefix:
            msg = f"{' '.join(prefix)} {msg}"
        return msg, kwargs

    @property
    def scope(self) -> Optional[str]:
        return self.extra.get("scope")

    def for_user(self, user_id: Optional[str]) -> "ClientLogger":
        """Same logger and scope, tagged with `user_id`."""
        return ClientLogger(self.logger, {"scope": self.scope, "user_id": user_id})


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if format == "json":
        # parseable by log aggregators
        formatter = logging.Formatter(
            '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str, scope: Optional[str] = None, user_id: Optional[str] = None) -> ClientLogger:
    """
    Get a scoped client logger.

    Args:
        name: Logger name (usually __name__)
        scope: Optional scope tag (e.g., "education", "gateway")
        user_id: Optional user identifier for correlation
    """
    base = logging.getLogger(name)
    if os.getenv("DEBUG_MODE", "false").lower() == "true":
        base.setLevel(logging.DEBUG)
    return ClientLogger(base, {"scope": scope, "user_id": user_id})
