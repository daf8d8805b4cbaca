import json
import os
from datetime import datetime
from typing import Optional

from loguru import logger as loguru_logger


class SessionLogger:
    """Session log file for one tallying session.

    Every loguru record at INFO or above is mirrored into the session file
    while the logger is attached; ``log_end`` detaches it.
    """

    def __init__(self, log_dir: str = "logs/sessions", auto_start: bool = True):
        """Initialize session logger.

        Args:
            log_dir: Directory for session logs
            auto_start: Whether to log session start automatically
        """
        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)

        # minute_hour_day_month_year
        timestamp = datetime.now().strftime("%M_%H_%d_%m_%Y")
        self.log_path = os.path.join(self.log_dir, f"tally_session_{timestamp}.log")

        self._sink_id: Optional[int] = None
        self._ended: bool = False
        self.attach_loguru_sink()

        if auto_start:
            self.log("=== SESSION START ===")

    def attach_loguru_sink(self) -> None:
        """Mirror loguru records into the session file."""
        if self._sink_id is None:
            self._sink_id = loguru_logger.add(
                self.log_path,
                format="[{time:YYYY-MM-DD HH:mm:ss}] {level}: {message}",
                level="INFO",
                filter=lambda record: record["extra"].get("session", self.log_path) == self.log_path,
                encoding="utf-8",
            )

    def detach_loguru_sink(self) -> None:
        if self._sink_id is not None:
            loguru_logger.remove(self._sink_id)
            self._sink_id = None

    @property
    def is_attached(self) -> bool:
        return self._sink_id is not None

    def log(self, message: str) -> None:
        """Write a message to the session file only."""
        if self._sink_id is None:
            return
        loguru_logger.bind(session=self.log_path).info(message)

    def log_start(self, config: Optional[dict] = None) -> None:
        """Log session start, optionally followed by the configuration."""
        self.log("=== SESSION START ===")
        if config is not None:
            self.log_kv("Configuration", config)

    def log_kv(self, key: str, value) -> None:
        """Log a key-value pair (e.g., configuration)."""
        if isinstance(value, (dict, list)):
            value_str = json.dumps(value, indent=2, ensure_ascii=False, default=str)
        else:
            value_str = str(value)
        self.log(f"{key}: {value_str}")

    def log_end(self) -> None:
        """Mark session end (idempotent)."""
        if not self._ended:
            self.log("=== SESSION END ===")
            self._ended = True
            self.detach_loguru_sink()
