"""Partial/final transcript buffer for one listening session."""
from __future__ import annotations

from threading import Lock
from typing import Optional


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    stripped = text.strip()
    return stripped or None


def _clean_final(text: Optional[str]) -> Optional[str]:
    """Finals are compared case-insensitively."""
    return _clean(text.lower()) if text is not None else None


class DisambiguationBuffer:
    """
    Track the live partial transcript and the last accepted final transcript.

    Recognizers sometimes deliver the same final twice; ``should_process_final``
    filters those repeats so the parser runs once per utterance. A final always
    supersedes the pending partial.

    One instance belongs to one listening session. Mutations take a lock, so
    partial and final callbacks may arrive on different threads.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._last_partial: Optional[str] = None
        self._last_final: Optional[str] = None

    def update_partial(self, text: Optional[str]) -> None:
        """Store the latest partial; empty or whitespace-only text clears it."""
        with self._lock:
            self._last_partial = _clean(text)

    def should_process_final(self, text: Optional[str]) -> bool:
        """
        Accept a final transcript unless it repeats the previously accepted one.

        Args:
            text: Final transcript from the recognizer

        Returns:
            bool: True when the final is new and should be parsed
        """
        normalized = _clean_final(text)
        with self._lock:
            self._last_partial = None
            if normalized is None or normalized == self._last_final:
                return False
            self._last_final = normalized
            return True

    def push_final(self, text: Optional[str]) -> None:
        """Store a final transcript unconditionally and drop the partial.

        The stored text is lowercased and trimmed like in ``should_process_final``,
        so a later repeat is still recognized as a duplicate.
        """
        with self._lock:
            self._last_final = _clean_final(text)
            self._last_partial = None

    def reset(self) -> None:
        with self._lock:
            self._last_partial = None
            self._last_final = None

    def peek_partial(self) -> Optional[str]:
        return self._last_partial

    def peek_final(self) -> Optional[str]:
        return self._last_final

    def consume_final(self) -> Optional[str]:
        """Return and clear the final transcript; the partial is left alone."""
        with self._lock:
            out = self._last_final
            self._last_final = None
            return out

    def consume_any(self) -> Optional[str]:
        """Return the final if present, else the partial, and clear both."""
        with self._lock:
            out = self._last_final if self._last_final is not None else self._last_partial
            self._last_final = None
            self._last_partial = None
            return out
