"""Custom exception hierarchy for the application."""
from __future__ import annotations


class VoiceTallyException(Exception):
    """Base exception for all voice tally errors."""
    pass


class ParsingError(VoiceTallyException):
    """Raised when a transcript cannot be turned into tallies."""
    pass


class TallyError(VoiceTallyException):
    """Raised when tally counters cannot be updated."""
    pass


class ConfigurationError(VoiceTallyException):
    """Raised when configuration is invalid or missing."""
    pass
