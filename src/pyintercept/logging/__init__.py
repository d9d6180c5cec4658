"""pyintercept logging — logging port and structlog adapter."""

from pyintercept.logging.port import LoggingPort
from pyintercept.logging.structlog_adapter import StructlogAdapter, add_invocation_context

__all__ = ["LoggingPort", "StructlogAdapter", "add_invocation_context"]
