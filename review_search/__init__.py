"""
Semantic review search over a quantized, append-only vector log.
"""

from .core.config import VERSION

__version__ = VERSION
