"""
Gravity Model Download
======================

Fetches gravity field coefficient files into a local cache.
"""

from .icgem import ICGEM_MODELS, ModelCache, fetch_icgem_file

__all__ = ['ICGEM_MODELS', 'ModelCache', 'fetch_icgem_file']
