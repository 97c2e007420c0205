"""Response logger for composed replies in JSON Lines format."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, TextIO

from config import RESPONSE_LOG_PATH

logger = logging.getLogger(__name__)


class ResponseLogger:
    """Appends one JSON object per composed reply to a JSON Lines file."""

    def __init__(self, log_file_path: str = RESPONSE_LOG_PATH):
        """
        Initialize the response logger.

        Args:
            log_file_path: Path to the JSON Lines file; parent directories are
                created on the first write
        """
        self.log_file_path = Path(log_file_path)
        self._file: Optional[TextIO] = None

    def log_response(
        self,
        conversation_id: str,
        sender_name: str,
        category: str,
        language: str,
        phase: str,
        inbound: str,
        outbound: str,
        fit_score: Optional[int] = None,
        recommendation: Optional[str] = None,
        degraded: Optional[List[str]] = None
    ) -> None:
        """
        Log one composed reply.

        Args:
            conversation_id: Conversation identity
            sender_name: Counterpart display name
            category: Sender category
            language: Detected language code
            phase: Conversation phase after the reply
            inbound: Counterpart message that was answered
            outbound: Reply text
            fit_score: Opportunity fit score, if evaluated
            recommendation: Fit recommendation, if evaluated
            degraded: Components that fell back to defaults
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "conversation_id": conversation_id,
            "sender_name": sender_name,
            "category": category,
            "language": language,
            "phase": phase,
            "fit_score": fit_score,
            "recommendation": recommendation,
            "inbound": inbound,
            "outbound": outbound,
            "reply_words": len(outbound.split()),
            "degraded": degraded or [],
        }

        if self._file is None:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.log_file_path, "a", encoding="utf-8")

        self._file.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self._file.flush()
        logger.debug(f"Logged reply for {conversation_id} to {self.log_file_path}")

    def close(self) -> None:
        """Close the log file if it is open."""
        if self._file is not None:
            self._file.close()
            self._file = None
