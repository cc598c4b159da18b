"""pymint logging: logging port and its structlog adapter."""

from pymint.logging.port import LoggingPort
from pymint.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
