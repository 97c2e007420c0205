"""Durable record of automated replies, one per conversation identity."""
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from config import RESPONSE_HISTORY_PATH
from models.response_record import ResponseRecord

logger = logging.getLogger(__name__)


class ResponseTracker:
    """
    Keeps at most one live ResponseRecord per conversation identity.

    Records are loaded from a JSON array at construction and the whole array is
    rewritten on every change, so a record is on disk before ``record`` returns.
    """

    def __init__(self, history_path: str = RESPONSE_HISTORY_PATH):
        self.history_path = Path(history_path)
        self._records: Dict[str, ResponseRecord] = {}
        self._load()

    def has_responded(self, conversation_id: str) -> bool:
        return conversation_id in self._records

    def get(self, conversation_id: str) -> Optional[ResponseRecord]:
        return self._records.get(conversation_id)

    def record(
        self,
        conversation_id: str,
        counterpart_name: str,
        inbound: str,
        outbound: str
    ) -> ResponseRecord:
        """Store (or overwrite) the reply record for a conversation and persist it."""
        record = ResponseRecord(
            conversation_id=conversation_id,
            counterpart_name=counterpart_name,
            responded_at=datetime.now(),
            inbound_content=inbound,
            outbound_content=outbound,
        )
        replaced = conversation_id in self._records
        self._records[conversation_id] = record
        self._save()

        logger.info(
            f"Response recorded for {conversation_id} ({'overwritten' if replaced else 'new'})",
            extra={"conversation_id": conversation_id}
        )
        return record

    def history(self) -> List[ResponseRecord]:
        """All live records, most recent first."""
        return sorted(self._records.values(), key=lambda r: r.responded_at, reverse=True)

    def purge_older_than(self, days: int) -> int:
        """
        Drop records older than ``days``.

        Returns:
            Number of removed records
        """
        cutoff = datetime.now() - timedelta(days=days)
        stale = [cid for cid, record in self._records.items() if record.responded_at < cutoff]
        for conversation_id in stale:
            del self._records[conversation_id]

        if stale:
            self._save()
            logger.info(f"Purged {len(stale)} responses older than {days} days, {len(self._records)} remaining")
        return len(stale)

    def _load(self) -> None:
        if not self.history_path.exists():
            logger.info("No response history found, starting fresh")
            return

        try:
            with open(self.history_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            records = [ResponseRecord.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Response history at {self.history_path} is unreadable, starting fresh: {e}")
            return

        for record in records:
            self._records[record.conversation_id] = record
        logger.info(f"Response history loaded: {len(self._records)} conversations")

    def _save(self) -> None:
        """Rewrite the history file atomically."""
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [record.to_dict() for record in self.history()]

        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.history_path.parent), prefix=".response-history-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.history_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Response history saved: {len(payload)} records")
