"""
Core Package - LLND Scoring Engine
llnd_engine/core/__init__.py

Core infrastructure: exceptions, logging.
"""

from llnd_engine.core.exceptions import (
    BandLookupException,
    ConfigurationNotFoundException,
    ConfigurationValidationException,
    ScoringException,
)
from llnd_engine.core.logging import configure_logging

__all__ = [
    # Exceptions
    "BandLookupException",
    "ConfigurationNotFoundException",
    "ConfigurationValidationException",
    "ScoringException",
    # Logging
    "configure_logging",
]
