"""Utility modules for shared functionality."""

from .adf import adf_to_text, description_to_text, text_to_adf
from .log import configure_logging
from .retry import call_with_retry

__all__ = [
    "adf_to_text",
    "call_with_retry",
    "configure_logging",
    "description_to_text",
    "text_to_adf",
]
