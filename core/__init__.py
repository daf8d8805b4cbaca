"""Core infrastructure: exception hierarchy, result type and error handling helpers."""
from __future__ import annotations

from .exceptions import VoiceTallyException, ParsingError, TallyError, ConfigurationError
from .result import Result, Success, Failure

__all__ = [
    "VoiceTallyException",
    "ParsingError",
    "TallyError",
    "ConfigurationError",
    "Result",
    "Success",
    "Failure",
]
