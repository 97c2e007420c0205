"""Inbound message models."""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def conversation_id_for(sender_name: str) -> str:
    """Derive the stable conversation identity from a counterpart's display name."""
    normalized = _WHITESPACE.sub("-", sender_name.strip().lower())
    return f"linkedin-{normalized}"


@dataclass(frozen=True)
class Message:
    """An inbound chat message as handed over by the scraping layer."""
    id: str
    sender_id: str
    sender_name: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    sender_title: Optional[str] = None
    sender_company: Optional[str] = None
    classification: Optional[str] = None

    @property
    def conversation_id(self) -> str:
        return conversation_id_for(self.sender_name)
