"""
Utility modules for the price estimator.
"""

from .formatting import format_currency, format_area
from .config import Config

__all__ = ["format_currency", "format_area", "Config"]
