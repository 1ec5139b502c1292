"""
HTTP limit/offset sources.
"""

from pagewalk.remote.client import OffsetPageClient

__all__ = ["OffsetPageClient"]
