"""In-memory log of what happened during a listening session."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Deque, List, Optional


class LogType(Enum):
    """Kind of speech log line."""
    FINAL = "final"
    PARTIAL = "partial"
    PARSED_BLOCK = "parsed_block"
    TALLY_UPDATE = "tally_update"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class LogEntry:
    """
    One speech log line.

    Attributes:
        text: Display text
        type: Line kind
        show_in_ui: Whether the line is kept for display
        include_in_export: Whether the line ends up in the exported log
        timestamp: Creation time
    """
    text: str
    type: LogType = LogType.INFO
    show_in_ui: bool = True
    include_in_export: bool = True
    timestamp: datetime = field(default_factory=datetime.now)


class SpeechLog:
    """Bounded, thread-safe list of log entries (oldest dropped first)."""

    def __init__(self, max_entries: int = 500) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = Lock()

    def add(self, entry: LogEntry) -> None:
        if not entry.show_in_ui:
            return
        with self._lock:
            self._entries.append(entry)

    def entries(self, log_type: Optional[LogType] = None) -> List[LogEntry]:
        with self._lock:
            if log_type is None:
                return list(self._entries)
            return [e for e in self._entries if e.type is log_type]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export_text(self) -> str:
        """Exportable lines, newest first, one per line."""
        with self._lock:
            return "\n".join(e.text for e in reversed(self._entries) if e.include_in_export)

    def __len__(self) -> int:
        return len(self._entries)
