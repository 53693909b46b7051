"""
atomgraph.utils — Shared helpers.
"""

from atomgraph.utils.registry import Registry

__all__ = ["Registry"]
