"""Configuration module."""

from stockledger.config.logging import bind_tenant, configure_logging, get_logger
from stockledger.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "bind_tenant",
    "configure_logging",
    "get_logger",
]
