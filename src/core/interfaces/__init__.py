"""Core interfaces.

Protocols implemented by the concrete adapters, so the core depends on
abstractions only.
"""

from core.interfaces.reader import TableReader

__all__ = ["TableReader"]
