"""
Web initialization modules.

- logging: loguru sinks
- context: engine, session maker and outbound clients
"""

from web.initialization.context import build_context
from web.initialization.logging import setup_logging


__all__ = ["build_context", "setup_logging"]
